"""
:py:mod:`jsonapi_records.session` puts the serializer and the deserializer
together with a transport.

Synopsis
--------

.. code-block:: python

   class HTTPTransport:
       async def execute(self, verb, url, document):
           ...  # send the request, return the decoded response body (or None)

   session = Session(
       registry,
       HTTPTransport(),
       Config(base_url="http://example.com", api_namespace="/api/v1"),
   )

   author = Author(first_name="Stephen")
   author.books = [Book(title="The Shining")]
   await session.save(author, with_="books")

   author = await session.find(Author, "1", Scope().includes("books"))

"""

import logging
import typing

from .config import Config
from .deserializer import RecordDeserializer
from .exceptions import DeserializationErrorItem, MalformedDocumentError
from .include import IncludeDirectiveLike
from .record import Record
from .registry import Registry
from .scope import Scope
from .serde.models import CollectionDocumentRepr, SingletonDocumentRepr
from .serde.types import JSONObject
from .serde.utils import JSONPointer
from .serializer import GraphSerializer

logger = logging.getLogger(__name__)

R = typing.TypeVar("R", bound=Record)


class Transport(typing.Protocol):
    async def execute(
        self, verb: str, url: str, document: typing.Optional[JSONObject]
    ) -> typing.Optional[JSONObject]:
        ...  # pragma: nocover


class Session:
    registry: Registry
    transport: Transport
    config: Config
    serializer: GraphSerializer
    deserializer: RecordDeserializer

    def url_for(
        self,
        class_: typing.Type[Record],
        id: typing.Optional[typing.Any] = None,
        scope: typing.Optional[Scope] = None,
    ) -> str:
        url = f"{self.config.full_base_path()}/{class_.resource_descriptor().endpoint}"
        if id is not None:
            url += f"/{id}"
        if scope is not None:
            qs = scope.to_query_string()
            if qs is not None:
                url += f"?{qs}"
        return url

    async def save(self, record: Record, with_: IncludeDirectiveLike = None) -> Record:
        """
        Write ``record`` and the part of its graph named by ``with_`` in a single request,
        then apply the response onto the same records.

        :param Record record: the record to save.
        :param with_: an include directive naming the relationships to write.
        :return: ``record``
        :raises MalformedDocumentError: when the response is not a document with a single resource.
        """
        payload = self.serializer.build_payload(record, with_)
        if record.persisted:
            verb = self.config.update_verb
            url = self.url_for(type(record), record.id)
        else:
            verb = "POST"
            url = self.url_for(type(record))
        logger.debug("%s %s", verb, url)
        response = await self.transport.execute(verb, url, payload.to_json())
        if response is None:
            logger.debug("%s %s returned no document; leaving %r as is", verb, url, record)
            return record
        doc = self.deserializer.parse(response)
        if not isinstance(doc, SingletonDocumentRepr) or doc.data is None:
            raise MalformedDocumentError(
                response,
                [DeserializationErrorItem(JSONPointer() / "data", "a single resource expected")],
            )
        self.deserializer.apply(record, doc.data, doc, payload.include, payload.temp_ids)
        return record

    async def destroy(self, record: Record) -> None:
        if record.id is None:
            raise ValueError(f"{record!r} has no id")
        url = self.url_for(type(record), record.id)
        logger.debug("DELETE %s", url)
        await self.transport.execute("DELETE", url, None)
        record.persisted = False

    async def find(
        self, class_: typing.Type[R], id: typing.Any, scope: typing.Optional[Scope] = None
    ) -> typing.Optional[R]:
        url = self.url_for(class_, id, scope)
        logger.debug("GET %s", url)
        response = await self.transport.execute("GET", url, None)
        if response is None:
            return None
        doc = self.deserializer.parse(response)
        if not isinstance(doc, SingletonDocumentRepr):
            raise MalformedDocumentError(
                response,
                [DeserializationErrorItem(JSONPointer() / "data", "a single resource expected")],
            )
        return typing.cast(typing.Optional[R], self.deserializer.load(doc))

    async def all(
        self, class_: typing.Type[R], scope: typing.Optional[Scope] = None
    ) -> typing.List[R]:
        url = self.url_for(class_, scope=scope)
        logger.debug("GET %s", url)
        response = await self.transport.execute("GET", url, None)
        if response is None:
            return []
        doc = self.deserializer.parse(response)
        if not isinstance(doc, CollectionDocumentRepr):
            raise MalformedDocumentError(
                response,
                [DeserializationErrorItem(JSONPointer() / "data", "an array of resources expected")],
            )
        return typing.cast(typing.List[R], self.deserializer.load(doc))

    async def first(
        self, class_: typing.Type[R], scope: typing.Optional[Scope] = None
    ) -> typing.Optional[R]:
        records = await self.all(class_, (scope if scope is not None else Scope()).per(1))
        return records[0] if records else None

    def __init__(
        self,
        registry: Registry,
        transport: Transport,
        config: typing.Optional[Config] = None,
    ):
        self.registry = registry
        self.transport = transport
        self.config = config if config is not None else Config()
        self.serializer = GraphSerializer(
            registry, self.config.key_format, self.config.temp_id_factory
        )
        self.deserializer = RecordDeserializer(registry)

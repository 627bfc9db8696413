import collections.abc
import logging
import typing

from .exceptions import DeserializationErrorItem, MalformedDocumentError
from .models import (
    AttributeValue,
    CollectionDocumentRepr,
    DocumentRepr,
    LinkageData,
    LinkageRepr,
    Missing,
    MissingType,
    ResourceIdRepr,
    ResourceRepr,
    SingletonDocumentRepr,
    WriteMethod,
)
from .types import JSONValue
from .utils import JSONPointer

logger = logging.getLogger(__name__)


class ErrorCollectingContext:
    errors: typing.List[DeserializationErrorItem]

    def validation_error_occurred(self, pointer: JSONPointer, message: str) -> None:
        self.errors.append(DeserializationErrorItem(pointer, message))

    def __init__(self):
        self.errors = []


EMPTY_MAPPING: typing.Mapping[str, JSONValue] = {}


class ReprDeserializer:
    """
    Converts a raw JSON:API document (as returned by ``json.loads``) into its
    wire representation.  Only the structure every reader depends on is
    enforced; anything else that does not look right is logged and skipped.
    """

    def _parse_id(self, pointer: JSONPointer, value: JSONValue) -> typing.Optional[str]:
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, (str, int)):
            logger.warning("%s: ignoring non-scalar id %r", pointer, value)
            return None
        return str(value)

    def _parse_method(self, pointer: JSONPointer, value: JSONValue) -> typing.Optional[WriteMethod]:
        if value is None:
            return None
        try:
            return WriteMethod(value)
        except ValueError:
            logger.warning("%s: ignoring unknown method %r", pointer, value)
            return None

    def _parse_meta(self, pointer: JSONPointer, value: JSONValue) -> typing.Dict[str, typing.Any]:
        if value is None:
            return {}
        if not isinstance(value, collections.abc.Mapping):
            logger.warning("%s: ignoring non-object meta", pointer)
            return {}
        return dict(value)

    def _parse_resource_id(
        self, pointer: JSONPointer, value: JSONValue
    ) -> typing.Optional[ResourceIdRepr]:
        if not isinstance(value, collections.abc.Mapping):
            logger.warning("%s: resource identifier must be an object, got %r", pointer, value)
            return None
        type_ = value.get("type")
        if not isinstance(type_, str):
            logger.warning("%s: resource identifier lacks type", pointer)
            return None
        id_ = self._parse_id(pointer / "id", value.get("id"))
        temp_id = self._parse_id(pointer / "temp-id", value.get("temp-id"))
        if id_ is None and temp_id is None:
            logger.warning("%s: resource identifier lacks id", pointer)
            return None
        return ResourceIdRepr(
            type=type_,
            id=id_,
            temp_id=temp_id,
            method=self._parse_method(pointer / "method", value.get("method")),
            meta=self._parse_meta(pointer / "meta", value.get("meta")),
            _source_=pointer,
        )

    def _parse_linkage(self, pointer: JSONPointer, value: JSONValue) -> typing.Optional[LinkageRepr]:
        if not isinstance(value, collections.abc.Mapping):
            logger.warning("%s: relationship must be an object, got %r", pointer, value)
            return None
        data: typing.Union[LinkageData, MissingType]
        if "data" not in value:
            data = Missing
        else:
            data_ = value["data"]
            if data_ is None:
                data = None
            elif isinstance(data_, collections.abc.Sequence) and not isinstance(data_, str):
                items = (
                    self._parse_resource_id((pointer / "data")[i], item)
                    for i, item in enumerate(data_)
                )
                data = tuple(item for item in items if item is not None)
            else:
                data = self._parse_resource_id(pointer / "data", data_)
        return LinkageRepr(
            data=data,
            meta=self._parse_meta(pointer / "meta", value.get("meta")),
            _source_=pointer,
        )

    def _parse_resource(
        self, ctx: ErrorCollectingContext, pointer: JSONPointer, value: JSONValue
    ) -> typing.Optional[ResourceRepr]:
        if not isinstance(value, collections.abc.Mapping):
            ctx.validation_error_occurred(pointer, f"resource must be an object, got {value!r}")
            return None
        type_ = value.get("type")
        if not isinstance(type_, str):
            ctx.validation_error_occurred(pointer / "type", 'value must have a property "type"')
            return None

        attributes_ = value.get("attributes") or EMPTY_MAPPING
        if not isinstance(attributes_, collections.abc.Mapping):
            logger.warning("%s: ignoring non-object attributes", pointer / "attributes")
            attributes_ = EMPTY_MAPPING
        attributes: typing.List[typing.Tuple[str, AttributeValue]] = [
            (k, typing.cast(AttributeValue, v)) for k, v in attributes_.items()
        ]

        relationships_ = value.get("relationships") or EMPTY_MAPPING
        if not isinstance(relationships_, collections.abc.Mapping):
            logger.warning("%s: ignoring non-object relationships", pointer / "relationships")
            relationships_ = EMPTY_MAPPING
        relationships: typing.List[typing.Tuple[str, LinkageRepr]] = []
        for k, v in relationships_.items():
            linkage = self._parse_linkage(pointer / "relationships" / k, v)
            if linkage is not None:
                relationships.append((k, linkage))

        return ResourceRepr(
            type=type_,
            id=self._parse_id(pointer / "id", value.get("id")),
            temp_id=self._parse_id(pointer / "temp-id", value.get("temp-id")),
            method=self._parse_method(pointer / "method", value.get("method")),
            attributes=attributes,
            relationships=relationships,
            meta=self._parse_meta(pointer / "meta", value.get("meta")),
            _source_=pointer,
        )

    def _parse_included(self, pointer: JSONPointer, value: JSONValue) -> typing.List[ResourceRepr]:
        if value is None:
            return []
        if not isinstance(value, collections.abc.Sequence) or isinstance(value, str):
            logger.warning("%s: ignoring non-array included", pointer)
            return []
        retval: typing.List[ResourceRepr] = []
        for i, item in enumerate(value):
            ctx = ErrorCollectingContext()
            resource = self._parse_resource(ctx, pointer[i], item)
            if resource is None:
                for e in ctx.errors:
                    logger.warning("ignoring malformed included resource: %s", e)
                continue
            retval.append(resource)
        return retval

    def __call__(self, document: JSONValue) -> DocumentRepr:
        root = JSONPointer()
        if not isinstance(document, collections.abc.Mapping):
            raise MalformedDocumentError(
                document,
                [DeserializationErrorItem(root, "document must be an object")],
            )
        if "data" not in document:
            raise MalformedDocumentError(
                document,
                [DeserializationErrorItem(root / "data", 'document must have a property "data"')],
            )

        ctx = ErrorCollectingContext()
        data = document["data"]
        included = tuple(self._parse_included(root / "included", document.get("included")))
        meta = self._parse_meta(root / "meta", document.get("meta"))

        retval: DocumentRepr
        if data is None:
            retval = SingletonDocumentRepr(data=None, included=included, meta=meta, _source_=root)
        elif isinstance(data, collections.abc.Mapping):
            retval = SingletonDocumentRepr(
                data=self._parse_resource(ctx, root / "data", data),
                included=included,
                meta=meta,
                _source_=root,
            )
        elif isinstance(data, collections.abc.Sequence) and not isinstance(data, str):
            resources = [
                self._parse_resource(ctx, (root / "data")[i], d) for i, d in enumerate(data)
            ]
            retval = CollectionDocumentRepr(
                data=[r for r in resources if r is not None],
                included=included,
                meta=meta,
                _source_=root,
            )
        else:
            ctx.validation_error_occurred(root / "data", f"unexpected value {data!r}")

        if ctx.errors:
            raise MalformedDocumentError(document, ctx.errors)
        return retval

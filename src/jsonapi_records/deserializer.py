"""
:py:mod:`jsonapi_records.deserializer` applies JSON:API documents onto record graphs.

Synopsis
--------

.. code-block:: python

   deser = RecordDeserializer(registry)

   author = deser.load_document({
       "data": {
           "type": "authors",
           "id": "1",
           "attributes": {"first_name": "Stephen"},
           "relationships": {
               "books": {"data": [{"type": "books", "id": "10"}]},
           },
       },
       "included": [
           {"type": "books", "id": "10", "attributes": {"title": "The Shining"}},
       ],
   })

   author.books[0].marked_for_destruction = True
   deser.apply_document(author, {"data": {"type": "authors", "id": "1"}}, {"books": {}})
   assert author.books == []

"""

import logging
import typing

from .dirty import Identity
from .exceptions import UnknownResourceTypeError
from .identity import IdentityPool, IdentityResolver
from .include import IncludeDirective, IncludeDirectiveLike, normalize_include_directive
from .models import RelationshipType, ResourceRelationshipDescriptor
from .record import Record
from .registry import Registry
from .serde.deserializer import ReprDeserializer
from .serde.exceptions import DeserializationErrorItem, MalformedDocumentError
from .serde.models import (
    CollectionDocumentRepr,
    DocumentRepr,
    Missing,
    ResourceIdRepr,
    ResourceRepr,
    SingletonDocumentRepr,
)
from .serde.types import JSONValue
from .serde.utils import JSONPointer

logger = logging.getLogger(__name__)

TempIdMap = typing.Mapping[str, Record]


class _ApplyContext:
    pool: IdentityPool
    resources: typing.Dict[Identity, ResourceRepr]
    temp_ids: TempIdMap
    hydrated: typing.Dict[int, Record]
    pending: typing.List[typing.Tuple[Record, ResourceRepr]]

    def adopt_temp_ids(self, document: DocumentRepr) -> None:
        for resource in (*document.primary, *document.included):
            if resource.temp_id is None or resource.id is None:
                continue
            record = self.temp_ids.get(resource.temp_id)
            if record is None:
                continue
            if record.type != resource.type:
                logger.warning(
                    "temp-id %s of %r echoed for a resource of type %s",
                    resource.temp_id,
                    record,
                    resource.type,
                )
                continue
            self.pool.put(resource.identity, record)

    def mark_hydrated(self, record: Record) -> bool:
        if id(record) in self.hydrated:
            return False
        self.hydrated[id(record)] = record
        return True

    def __init__(self, document: DocumentRepr, temp_ids: typing.Optional[TempIdMap] = None):
        self.pool = IdentityPool()
        self.resources = {}
        for resource in (*document.primary, *document.included):
            if resource.id is not None:
                self.resources.setdefault((resource.type, resource.id), resource)
        self.temp_ids = temp_ids if temp_ids is not None else {}
        self.hydrated = {}
        self.pending = []


def _marked(record: Record) -> bool:
    return record.marked_for_destruction or record.marked_for_disassociation


class RecordDeserializer:
    """
    Hydrates records from documents.  Related resources are instantiated only
    when a relationship reaches them; records already in the graph supplied
    to :py:meth:`apply` are reused for the identities they carry.
    """

    registry: Registry
    resolver: IdentityResolver
    repr_deserializer: ReprDeserializer

    def _resolve(
        self,
        ctx: _ApplyContext,
        rel_descr: ResourceRelationshipDescriptor,
        identifier: ResourceIdRepr,
    ) -> typing.Optional[Record]:
        if not rel_descr.accepts(identifier.type):
            logger.warning(
                "%s: relationship (%s) is not declared to point to %s",
                identifier._source_,
                rel_descr.name,
                identifier.type,
            )
        if identifier.id is None:
            assert identifier.temp_id is not None
            record = ctx.temp_ids.get(identifier.temp_id)
            if record is None:
                logger.warning(
                    "%s: no record is known by temp-id %s", identifier._source_, identifier.temp_id
                )
            return record
        try:
            record = self.resolver.resolve(
                identifier.type, identifier.id, ctx.pool, identifier._source_
            )
        except UnknownResourceTypeError as e:
            logger.warning("%s: %s", identifier._source_, e.message)
            return None
        body = ctx.resources.get((identifier.type, identifier.id))
        if body is not None and id(record) not in ctx.hydrated:
            ctx.pending.append((record, body))
        return record

    def _hydrate_one(self, ctx: _ApplyContext, record: Record, resource: ResourceRepr) -> None:
        descr = record.resource_descriptor()
        if record.type != resource.type:
            logger.warning("%s: applying %s onto %r", resource._source_, resource.type, record)
        if resource.id is not None:
            record.id = resource.id
            ctx.pool.put(resource.identity, record)
        record.meta = dict(resource.meta)

        for name, value in resource.attributes.items():
            attr_descr = descr.find_attribute(name)
            if attr_descr is None:
                logger.debug('dropping unknown attribute "%s" of %s', name, descr.name)
                continue
            record._attribute_values[attr_descr.name] = value

        for name, linkage in resource.relationships.items():
            rel_descr = descr.find_relationship(name)
            if rel_descr is None:
                logger.debug('dropping unknown relationship "%s" of %s', name, descr.name)
                continue
            if rel_descr.type == RelationshipType.TO_ONE:
                if linkage.data is Missing:
                    continue
                if linkage.data is None:
                    record._relationship_values[rel_descr.name] = None
                elif isinstance(linkage.data, ResourceIdRepr):
                    record._relationship_values[rel_descr.name] = self._resolve(
                        ctx, rel_descr, linkage.data
                    )
                else:
                    logger.warning(
                        "%s: to-one relationship (%s) carries an array", linkage._source_, name
                    )
            else:
                identifiers: typing.Sequence[ResourceIdRepr]
                if linkage.data is Missing or linkage.data is None:
                    identifiers = ()
                elif isinstance(linkage.data, ResourceIdRepr):
                    identifiers = (linkage.data,)
                else:
                    identifiers = typing.cast(typing.Sequence[ResourceIdRepr], linkage.data)
                members = []
                for identifier in identifiers:
                    member = self._resolve(ctx, rel_descr, identifier)
                    if member is not None:
                        members.append(member)
                current = record._relationship_values.get(rel_descr.name)
                if isinstance(current, list):
                    current[:] = members
                else:
                    record._relationship_values[rel_descr.name] = members

    def _hydrate(self, ctx: _ApplyContext, record: Record, resource: ResourceRepr) -> None:
        ctx.pending.append((record, resource))
        while ctx.pending:
            record, resource = ctx.pending.pop()
            if ctx.mark_hydrated(record):
                self._hydrate_one(ctx, record, resource)

    def _prune_one(
        self, ctx: _ApplyContext, record: Record, scope: IncludeDirective
    ) -> typing.List[typing.Tuple[Record, IncludeDirective]]:
        descr = record.resource_descriptor()
        retval: typing.List[typing.Tuple[Record, IncludeDirective]] = []
        for name, nested_scope in scope.items():
            rel_descr = descr.find_relationship(name)
            if rel_descr is None:
                continue
            value = record._relationship_values.get(rel_descr.name)
            if value is None:
                continue
            pruned = False
            survivors: typing.List[Record]
            if rel_descr.type == RelationshipType.TO_ONE:
                if _marked(value):
                    record._relationship_values[rel_descr.name] = None
                    pruned = True
                    survivors = []
                else:
                    survivors = [value]
            else:
                survivors = [m for m in value if not _marked(m)]
                if len(survivors) != len(value):
                    value[:] = survivors
                    pruned = True
            if pruned and record.persisted and id(record) not in ctx.hydrated:
                record.refresh_relationship_snapshot(rel_descr.name)
            retval.extend((member, nested_scope) for member in survivors)
        return retval

    def _prune(self, ctx: _ApplyContext, record: Record, scope: IncludeDirective) -> None:
        visited: typing.Set[typing.Tuple[int, int]] = set()
        stack = [(record, scope)]
        while stack:
            record, scope = stack.pop()
            key = (id(record), id(scope))
            if key in visited:
                continue
            visited.add(key)
            stack.extend(reversed(self._prune_one(ctx, record, scope)))

    def _finish(self, ctx: _ApplyContext) -> None:
        for record in ctx.hydrated.values():
            # a resource without an id has not been stored anywhere
            if record.id is not None:
                record.persisted = True
        for record in ctx.pool.created:
            if id(record) not in ctx.hydrated:
                record.persisted = True

    def apply(
        self,
        record: typing.Optional[Record],
        resource: ResourceRepr,
        document: DocumentRepr,
        destruction_scope: IncludeDirectiveLike = None,
        temp_ids: typing.Optional[TempIdMap] = None,
    ) -> typing.Optional[Record]:
        """
        Apply ``resource`` (one of the primary resources of ``document``) onto ``record``.

        :param Optional[Record] record: the record to update.  A new one is created if ``None``.
        :param ResourceRepr resource: the resource to apply.
        :param DocumentRepr document: the document ``resource`` belongs to.
        :param destruction_scope: an include directive naming the relationships where members marked for destruction or disassociation are removed.
        :param Optional[Mapping[str, Record]] temp_ids: records keyed by the temp-ids they were sent with.
        :return: the updated record, or ``None`` when no class is registered for the type of ``resource``.
        """
        scope = normalize_include_directive(destruction_scope)
        ctx = _ApplyContext(document, temp_ids)
        if record is not None:
            ctx.pool.seed(record)
            if resource.id is not None:
                ctx.pool.put(resource.identity, record)
        ctx.adopt_temp_ids(document)
        if record is None:
            record = self._resolve_primary(ctx, resource)
            if record is None:
                return None
        self._hydrate(ctx, record, resource)
        self._prune(ctx, record, scope)
        self._finish(ctx)
        return record

    def _resolve_primary(
        self, ctx: _ApplyContext, resource: ResourceRepr
    ) -> typing.Optional[Record]:
        try:
            if resource.id is not None:
                return self.resolver.resolve(resource.type, resource.id, ctx.pool, resource._source_)
            return self.registry.query_class_by_type_name(resource.type, resource._source_)()
        except UnknownResourceTypeError as e:
            logger.warning("%s: %s", resource._source_, e.message)
            return None

    def load(
        self, document: DocumentRepr
    ) -> typing.Union[None, Record, typing.List[Record]]:
        """
        Build records from a document.

        :return: a record (or ``None``) for a singleton document, a list of records for a collection document.
        """
        ctx = _ApplyContext(document)
        records: typing.List[Record] = []
        for resource in document.primary:
            record = self._resolve_primary(ctx, resource)
            if record is None:
                continue
            self._hydrate(ctx, record, resource)
            records.append(record)
        self._finish(ctx)
        if isinstance(document, CollectionDocumentRepr):
            return records
        return records[0] if records else None

    def parse(self, document: JSONValue) -> DocumentRepr:
        return self.repr_deserializer(document)

    def load_document(
        self, document: JSONValue
    ) -> typing.Union[None, Record, typing.List[Record]]:
        return self.load(self.parse(document))

    def apply_document(
        self,
        record: typing.Optional[Record],
        document: JSONValue,
        destruction_scope: IncludeDirectiveLike = None,
        temp_ids: typing.Optional[TempIdMap] = None,
    ) -> typing.Optional[Record]:
        """
        Parse ``document`` and apply its primary resource onto ``record``.
        Nothing is touched when the document turns out to be malformed.

        :raises MalformedDocumentError: when the document is malformed or its primary data is not a single resource.
        """
        doc = self.parse(document)
        if not isinstance(doc, SingletonDocumentRepr) or doc.data is None:
            raise MalformedDocumentError(
                document,
                [DeserializationErrorItem(JSONPointer() / "data", "a single resource expected")],
            )
        return self.apply(record, doc.data, doc, destruction_scope, temp_ids)

    def __init__(
        self,
        registry: Registry,
        resolver: typing.Optional[IdentityResolver] = None,
        repr_deserializer: typing.Optional[ReprDeserializer] = None,
    ):
        self.registry = registry
        self.resolver = resolver if resolver is not None else IdentityResolver(registry)
        self.repr_deserializer = (
            repr_deserializer if repr_deserializer is not None else ReprDeserializer()
        )

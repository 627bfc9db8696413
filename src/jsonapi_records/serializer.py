"""
:py:mod:`jsonapi_records.serializer` builds write documents out of record graphs.

Synopsis
--------

.. code-block:: python

   author = Author(first_name="Stephen")
   author.books = [Book(title="The Shining", genre=Genre(name="Horror"))]

   payload = GraphSerializer(registry).build_payload(author, {"books": "genre"})
   print(json.dumps(payload.to_json()))

"""

import dataclasses
import itertools
import logging
import typing

from .dirty import DirtyChecker, identity_of, lookup_relationship, related_records
from .include import IncludeDirective, IncludeDirectiveLike, normalize_include_directive
from .models import RelationshipType, ResourceRelationshipDescriptor
from .naming import KeyFormat, to_wire_name
from .record import Record
from .registry import Registry
from .serde.builders import (
    ResourceIdReprBuilder,
    ResourceReprBuilder,
    SingletonDocumentBuilder,
)
from .serde.models import SingletonDocumentRepr, WriteMethod
from .serde.renderer import ReprRenderer
from .serde.types import MutableJSONObject

logger = logging.getLogger(__name__)


class TempIdGenerator:
    """
    Mints correlation identifiers that are unique within the process.
    """

    _counter: typing.ClassVar[typing.Iterator[int]] = itertools.count(1)
    prefix: str

    def __call__(self) -> str:
        return f"{self.prefix}{next(self._counter)}"

    def __init__(self, prefix: str = "temp-id-"):
        self.prefix = prefix


@dataclasses.dataclass
class WritePayload:
    document: SingletonDocumentRepr
    include: IncludeDirective
    temp_ids: typing.Dict[str, Record] = dataclasses.field(default_factory=dict)
    """
    The records sent without an id, keyed by the temp-id they were sent with.
    """

    def to_json(self, renderer: typing.Optional[ReprRenderer] = None) -> MutableJSONObject:
        if renderer is None:
            renderer = ReprRenderer()
        return renderer(self.document)


def method_for(record: Record) -> WriteMethod:
    if not record.persisted:
        return WriteMethod.CREATE
    elif record.marked_for_destruction:
        return WriteMethod.DESTROY
    elif record.marked_for_disassociation:
        return WriteMethod.DISASSOCIATE
    else:
        return WriteMethod.UPDATE


_Pending = typing.Tuple[Record, IncludeDirective, ResourceIdReprBuilder]


class _ToSerdeContext:
    doc_builder: SingletonDocumentBuilder
    pending: typing.List[_Pending]
    temp_id_factory: typing.Callable[[], str]
    temp_ids: typing.Dict[str, Record]
    _temp_id_by_record: typing.Dict[int, str]
    _emitted: typing.Dict[int, ResourceReprBuilder]

    def temp_id_for(self, record: Record) -> str:
        temp_id = self._temp_id_by_record.get(id(record))
        if temp_id is None:
            temp_id = self.temp_id_factory()
            self._temp_id_by_record[id(record)] = temp_id
            self.temp_ids[temp_id] = record
            builder = self._emitted.get(id(record))
            if builder is not None:
                builder.set_temp_id(temp_id)
        return temp_id

    def is_emitted(self, record: Record) -> bool:
        return id(record) in self._emitted

    def mark_emitted(self, record: Record, builder: ResourceReprBuilder) -> None:
        self._emitted[id(record)] = builder

    def __init__(self, temp_id_factory: typing.Callable[[], str]):
        self.doc_builder = SingletonDocumentBuilder()
        self.pending = []
        self.temp_id_factory = temp_id_factory
        self.temp_ids = {}
        self._temp_id_by_record = {}
        self._emitted = {}


class GraphSerializer:
    """
    Walks a record graph along an include directive and produces the write
    document for it.  The root resource carries every assigned attribute;
    related resources are emitted only when they have something to write
    and carry a ``method`` telling what to do with them.
    """

    registry: Registry
    key_format: KeyFormat
    temp_id_factory: typing.Callable[[], str]

    def _should_emit(
        self,
        parent: Record,
        rel_descr: ResourceRelationshipDescriptor,
        member: Record,
        scope: IncludeDirective,
    ) -> bool:
        if not member.persisted or member.id is None:
            return True
        if identity_of(member) not in parent._snapshot.relationships.get(
            rel_descr.name, frozenset()
        ):
            return True
        return DirtyChecker().check(member, scope)

    def _populate_identifier(
        self, ctx: _ToSerdeContext, record: Record, builder: ResourceIdReprBuilder
    ) -> None:
        builder.set_type(record.type)
        builder.set_method(method_for(record))
        if record.id is not None:
            builder.set_id(str(record.id))
        if not record.persisted or record.id is None:
            builder.set_temp_id(ctx.temp_id_for(record))

    def _emit_related(
        self,
        ctx: _ToSerdeContext,
        record: Record,
        scope: IncludeDirective,
        id_builder: ResourceIdReprBuilder,
    ) -> None:
        self._populate_identifier(ctx, record, id_builder)
        if ctx.is_emitted(record):
            return
        builder = ctx.doc_builder.next_included()
        ctx.mark_emitted(record, builder)
        builder.set_type(record.type)
        builder.set_method(method_for(record))
        if record.id is not None:
            builder.set_id(str(record.id))
        if not record.persisted or record.id is None:
            builder.set_temp_id(ctx.temp_id_for(record))
        for name, (_, after) in record.changes().items():
            builder.add_attribute(to_wire_name(name, self.key_format), after)
        self._populate_relationships(ctx, record, builder, scope)

    def _populate_relationships(
        self,
        ctx: _ToSerdeContext,
        record: Record,
        builder: ResourceReprBuilder,
        scope: IncludeDirective,
    ) -> None:
        reached: typing.List[_Pending] = []
        for name, nested_scope in scope.items():
            rel_descr = lookup_relationship(record, name)
            wire_name = to_wire_name(rel_descr.name, self.key_format)
            if rel_descr.type == RelationshipType.TO_ONE:
                value = record._relationship_values.get(rel_descr.name)
                if value is None:
                    if record.persisted and record._snapshot.relationships.get(rel_descr.name):
                        builder.next_to_one_relationship(wire_name)
                    continue
                if self._should_emit(record, rel_descr, value, nested_scope):
                    reached.append(
                        (value, nested_scope, builder.next_to_one_relationship(wire_name).set())
                    )
            else:
                selected = [
                    member
                    for member in related_records(record, rel_descr)
                    if self._should_emit(record, rel_descr, member, nested_scope)
                ]
                if not selected:
                    continue
                rel_builder = builder.next_to_many_relationship(wire_name)
                reached.extend((member, nested_scope, rel_builder.next()) for member in selected)
        # depth-first pre-order: a subtree is emitted before the next sibling
        ctx.pending.extend(reversed(reached))

    def build_payload(self, record: Record, include: IncludeDirectiveLike = None) -> WritePayload:
        """
        Build the write document of ``record``.

        :param Record record: the root of the graph.
        :param include: an include directive naming the relationships to write.
        :return: a :py:class:`WritePayload`.
        :raises UnknownRelationshipError: when ``include`` names a relationship absent from the schema of the resource it applies to.
        """
        directive = normalize_include_directive(include)
        self.registry.check_include_directive(record.resource_descriptor(), directive)
        ctx = _ToSerdeContext(self.temp_id_factory)
        builder = ctx.doc_builder.data
        ctx.mark_emitted(record, builder)
        builder.set_type(record.type)
        if record.id is not None:
            builder.set_id(str(record.id))
        for name, value in record.attributes.items():
            builder.add_attribute(to_wire_name(name, self.key_format), value)
        self._populate_relationships(ctx, record, builder, directive)
        while ctx.pending:
            member, scope, id_builder = ctx.pending.pop()
            self._emit_related(ctx, member, scope, id_builder)
        logger.debug(
            "built write document for %r with %d included resource(s)",
            record,
            len(ctx.doc_builder.included),
        )
        return WritePayload(
            document=ctx.doc_builder(),
            include=directive,
            temp_ids=ctx.temp_ids,
        )

    def __init__(
        self,
        registry: Registry,
        key_format: KeyFormat = KeyFormat.UNDERSCORE,
        temp_id_factory: typing.Optional[typing.Callable[[], str]] = None,
    ):
        self.registry = registry
        self.key_format = key_format
        self.temp_id_factory = temp_id_factory if temp_id_factory is not None else TempIdGenerator()

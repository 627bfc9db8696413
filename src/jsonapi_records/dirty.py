import copy
import dataclasses
import typing

from .exceptions import UnknownRelationshipError
from .include import IncludeDirective, IncludeDirectiveLike, normalize_include_directive
from .models import RelationshipType, ResourceRelationshipDescriptor

if typing.TYPE_CHECKING:
    from .record import Record  # noqa: F401

Identity = typing.Tuple[str, str]
Changes = typing.Dict[str, typing.Tuple[typing.Any, typing.Any]]


def identity_of(record: "Record") -> typing.Optional[Identity]:
    if record.id is None:
        return None
    return (record.type, str(record.id))


def related_records(
    record: "Record", rel_descr: ResourceRelationshipDescriptor
) -> typing.List["Record"]:
    value = record._relationship_values.get(rel_descr.name)
    if value is None:
        return []
    if rel_descr.type == RelationshipType.TO_ONE:
        return [value]
    return list(value)


def identity_set(
    record: "Record", rel_descr: ResourceRelationshipDescriptor
) -> typing.FrozenSet[Identity]:
    retval: typing.Set[Identity] = set()
    for r in related_records(record, rel_descr):
        identity = identity_of(r)
        if identity is not None:
            retval.add(identity)
    return frozenset(retval)


@dataclasses.dataclass(frozen=True)
class PersistedSnapshot:
    """
    Attribute values and related resource identities as they were when the
    record was last known to match the server.
    """

    attributes: typing.Mapping[str, typing.Any] = dataclasses.field(default_factory=dict)
    relationships: typing.Mapping[str, typing.FrozenSet[Identity]] = dataclasses.field(
        default_factory=dict
    )

    @classmethod
    def capture(cls, record: "Record") -> "PersistedSnapshot":
        descr = record.resource_descriptor()
        return cls(
            attributes=copy.deepcopy(dict(record._attribute_values)),
            relationships={
                name: identity_set(record, rel_descr)
                for name, rel_descr in descr.relationships.items()
            },
        )

    def replace_relationship(
        self, name: str, identities: typing.FrozenSet[Identity]
    ) -> "PersistedSnapshot":
        relationships = dict(self.relationships)
        relationships[name] = identities
        return dataclasses.replace(self, relationships=relationships)


def changes(record: "Record") -> Changes:
    """
    Compute the attribute changes of a record.

    An unpersisted record reports every non-null attribute as changed from
    ``None``; a persisted one reports the attributes that differ from its
    persisted snapshot.

    :return: a dict mapping attribute names to ``(before, after)`` tuples.
    """
    descr = record.resource_descriptor()
    retval: Changes = {}
    if not record.persisted:
        for name in descr.attributes:
            after = record._attribute_values.get(name)
            if after is not None:
                retval[name] = (None, after)
        return retval

    snapshot = record._snapshot
    for name in descr.attributes:
        before = snapshot.attributes.get(name)
        after = record._attribute_values.get(name)
        if before != after:
            retval[name] = (before, after)
    return retval


def membership_changed(record: "Record", rel_descr: ResourceRelationshipDescriptor) -> bool:
    """
    Tell whether the members of a relationship differ from the persisted
    snapshot.  A member without an id is always a newly added one.
    """
    for r in related_records(record, rel_descr):
        if r.id is None:
            return True
    return identity_set(record, rel_descr) != record._snapshot.relationships.get(
        rel_descr.name, frozenset()
    )


def lookup_relationship(record: "Record", name: str) -> ResourceRelationshipDescriptor:
    descr = record.resource_descriptor()
    rel_descr = descr.find_relationship(name)
    if rel_descr is None:
        raise UnknownRelationshipError(descr.name, name)
    return rel_descr


class DirtyChecker:
    """
    Evaluates dirtiness along an include directive.  A record reached again
    under the same branch of the directive is not evaluated twice.
    """

    _visited: typing.Set[typing.Tuple[int, int]]

    def check(self, record: "Record", scope: IncludeDirective) -> bool:
        stack = [(record, scope)]
        while stack:
            record, scope = stack.pop()
            key = (id(record), id(scope))
            if key in self._visited:
                continue
            self._visited.add(key)

            if record.marked_for_destruction or record.marked_for_disassociation:
                return True
            if changes(record):
                return True
            reached: typing.List[typing.Tuple["Record", IncludeDirective]] = []
            for name, nested_scope in scope.items():
                rel_descr = lookup_relationship(record, name)
                if membership_changed(record, rel_descr):
                    return True
                reached.extend((r, nested_scope) for r in related_records(record, rel_descr))
            stack.extend(reversed(reached))
        return False

    def __init__(self):
        self._visited = set()


def is_dirty(record: "Record", scope: IncludeDirectiveLike = None) -> bool:
    return DirtyChecker().check(record, normalize_include_directive(scope))

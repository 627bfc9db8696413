import typing

from . import dirty
from .declarative import Field, Relationship, build_resource_descriptor, collect_fields
from .exceptions import InvalidDeclarationError
from .include import IncludeDirectiveLike
from .models import ResourceDescriptor
from .serde.models import ResourceIdRepr


class Record:
    """
    The base class of every record class.

    A record holds the attributes and relationships declared on its class,
    the ``id`` and ``meta`` of the resource, and the state needed to tell
    what has to be written back to the server.
    """

    __resource_descriptor__: typing.ClassVar[typing.Optional[ResourceDescriptor]] = None
    __record_fields__: typing.ClassVar[typing.Mapping[str, Field]] = {}

    id: typing.Optional[str]
    meta: typing.Dict[str, typing.Any]
    marked_for_destruction: bool
    marked_for_disassociation: bool
    _attribute_values: typing.Dict[str, typing.Any]
    _relationship_values: typing.Dict[str, typing.Any]
    _persisted: bool
    _snapshot: dirty.PersistedSnapshot

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        cls.__resource_descriptor__ = build_resource_descriptor(cls)
        cls.__record_fields__ = collect_fields(cls)

    @classmethod
    def resource_descriptor(cls) -> ResourceDescriptor:
        if cls.__resource_descriptor__ is None:
            raise InvalidDeclarationError(f"{cls.__name__} does not declare Meta.type")
        return cls.__resource_descriptor__

    @property
    def type(self) -> str:
        return self.resource_descriptor().name

    @property
    def persisted(self) -> bool:
        return self._persisted

    @persisted.setter
    def persisted(self, value: bool) -> None:
        self._persisted = value
        if value:
            self._snapshot = dirty.PersistedSnapshot.capture(self)

    @property
    def attributes(self) -> typing.Dict[str, typing.Any]:
        """
        The declared attributes that have been assigned, keyed by Python name.
        """
        descr = self.resource_descriptor()
        return {
            name: self._attribute_values[name]
            for name in descr.attributes
            if name in self._attribute_values
        }

    @property
    def relationships(self) -> typing.Dict[str, typing.Any]:
        descr = self.resource_descriptor()
        return {
            name: self._relationship_values[name]
            for name in descr.relationships
            if name in self._relationship_values
        }

    def changes(self) -> dirty.Changes:
        return dirty.changes(self)

    def is_dirty(self, scope: IncludeDirectiveLike = None) -> bool:
        """
        Tell whether the record has anything to be written back.

        Relationships are only looked into when ``scope`` names them, and the
        members found there are checked against the nested part of ``scope``.

        :param scope: an include directive.
        :raises UnknownRelationshipError: when ``scope`` names a relationship the record does not have.
        """
        return dirty.is_dirty(self, scope)

    def refresh_relationship_snapshot(self, name: str) -> None:
        rel_descr = self.resource_descriptor().relationships[name]
        self._snapshot = self._snapshot.replace_relationship(
            name, dirty.identity_set(self, rel_descr)
        )

    def relationship_resource_identifiers(
        self, names: typing.Iterable[str]
    ) -> typing.Dict[str, typing.List[ResourceIdRepr]]:
        retval: typing.Dict[str, typing.List[ResourceIdRepr]] = {}
        for name in names:
            rel_descr = dirty.lookup_relationship(self, name)
            identifiers = [
                ResourceIdRepr(type=r.type, id=str(r.id))
                for r in dirty.related_records(self, rel_descr)
                if r.id is not None
            ]
            if identifiers:
                retval[rel_descr.name] = identifiers
        return retval

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id!r} persisted={self._persisted!r}>"

    def __init__(
        self,
        id: typing.Optional[typing.Any] = None,
        meta: typing.Optional[typing.Dict[str, typing.Any]] = None,
        **kwargs: typing.Any,
    ):
        self.resource_descriptor()
        self.id = id
        self.meta = meta if meta is not None else {}
        self.marked_for_destruction = False
        self.marked_for_disassociation = False
        self._attribute_values = {}
        self._relationship_values = {}
        self._persisted = False
        self._snapshot = dirty.PersistedSnapshot()
        for k, v in kwargs.items():
            field = self.__record_fields__.get(k)
            if field is None:
                raise TypeError(f"{type(self).__name__}() got an unexpected keyword argument {k!r}")
            if isinstance(field, Relationship) and v is None:
                continue
            setattr(self, k, v)

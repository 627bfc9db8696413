"""
:py:mod:`jsonapi_records.declarative` provides the field declarations record classes are built from.

Synopsis
--------

.. code-block:: python

   from jsonapi_records import Attr, BelongsTo, HasMany, HasOne, Record, Registry

   registry = Registry()

   @registry
   class Author(Record):
       class Meta:
           type = "authors"

       first_name = Attr()
       books = HasMany("books")
       genre = BelongsTo("genres")
       bio = HasOne("bios")

"""

import abc
import dataclasses
import typing

from .exceptions import InvalidDeclarationError
from .models import (
    ResourceAttributeDescriptor,
    ResourceDescriptor,
    ResourceMemberDescriptor,
    ResourceRelationshipDescriptor,
    ResourceToManyRelationshipDescriptor,
    ResourceToOneRelationshipDescriptor,
)

if typing.TYPE_CHECKING:
    from .record import Record  # noqa: F401

RESERVED_NAMES = frozenset(["id", "type", "meta"])


class Field(metaclass=abc.ABCMeta):
    name: typing.Optional[str] = None

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    @abc.abstractmethod
    def build_descriptor(self) -> ResourceMemberDescriptor:
        ...  # pragma: nocover

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class Attr(Field):
    """
    Declares an attribute.  Unassigned attributes read as ``None``.
    """

    def build_descriptor(self) -> ResourceAttributeDescriptor:
        assert self.name is not None
        return ResourceAttributeDescriptor(self.name)

    def __get__(self, instance: typing.Optional["Record"], owner: type) -> typing.Any:
        if instance is None:
            return self
        return instance._attribute_values.get(self.name)

    def __set__(self, instance: "Record", value: typing.Any) -> None:
        assert self.name is not None
        instance._attribute_values[self.name] = value

    def __delete__(self, instance: "Record") -> None:
        instance._attribute_values.pop(self.name, None)


class Relationship(Field):
    destinations: typing.Tuple[str, ...]

    def __init__(self, *destinations: str):
        for d in destinations:
            if not isinstance(d, str):
                raise InvalidDeclarationError(
                    f"relationship destination must be a resource type name, got {d!r}"
                )
        self.destinations = destinations

    def __delete__(self, instance: "Record") -> None:
        instance._relationship_values.pop(self.name, None)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({', '.join(repr(d) for d in self.destinations)})"


class ToOneRelationship(Relationship):
    owning: typing.ClassVar[bool] = False

    def build_descriptor(self) -> ResourceToOneRelationshipDescriptor:
        assert self.name is not None
        return ResourceToOneRelationshipDescriptor(
            self.name, self.destinations, owning=self.owning
        )

    def __get__(self, instance: typing.Optional["Record"], owner: type) -> typing.Any:
        if instance is None:
            return self
        return instance._relationship_values.get(self.name)

    def __set__(self, instance: "Record", value: typing.Optional["Record"]) -> None:
        assert self.name is not None
        instance._relationship_values[self.name] = value


class BelongsTo(ToOneRelationship):
    """
    Declares a to-one relationship held by the declaring record.
    """

    owning = True


class HasOne(ToOneRelationship):
    """
    Declares a to-one relationship held by the related record.
    """


class HasMany(Relationship):
    """
    Declares a to-many relationship.  The value is a plain list that is
    created on first access and may be mutated in place.
    """

    def build_descriptor(self) -> ResourceToManyRelationshipDescriptor:
        assert self.name is not None
        return ResourceToManyRelationshipDescriptor(self.name, self.destinations)

    def __get__(self, instance: typing.Optional["Record"], owner: type) -> typing.Any:
        if instance is None:
            return self
        return instance._relationship_values.setdefault(self.name, [])

    def __set__(self, instance: "Record", value: typing.Iterable["Record"]) -> None:
        assert self.name is not None
        if value is None:
            value = []
        instance._relationship_values[self.name] = (
            value if isinstance(value, list) else list(value)
        )


@dataclasses.dataclass
class Meta:
    type: typing.Optional[str] = None
    endpoint: typing.Optional[str] = None


def handle_meta(meta: typing.Type) -> Meta:
    attrs = {k: v for k, v in vars(meta).items() if not k.startswith("__")}
    known = {f.name for f in dataclasses.fields(Meta)}
    unknown = set(attrs) - known
    if unknown:
        raise InvalidDeclarationError(
            f"unknown Meta option(s): {', '.join(sorted(unknown))}"
        )
    return Meta(
        type=attrs.get("type"),
        endpoint=attrs.get("endpoint"),
    )


def collect_fields(class_: type) -> typing.Dict[str, Field]:
    fields: typing.Dict[str, Field] = {}
    for c in reversed(class_.__mro__):
        for k, v in vars(c).items():
            if isinstance(v, Field):
                fields[k] = v
            elif k in fields:
                # shadowed by a plain class attribute
                del fields[k]
    return fields


def build_resource_descriptor(class_: type) -> typing.Optional[ResourceDescriptor]:
    """
    Build the :py:class:`ResourceDescriptor` of a record class from its fields and
    its own inner ``Meta``.  Returns ``None`` for a class without ``Meta.type``.
    """
    meta_class = vars(class_).get("Meta")
    meta = handle_meta(meta_class) if meta_class is not None else Meta()
    fields = collect_fields(class_)
    for name in fields:
        if name in RESERVED_NAMES:
            raise InvalidDeclarationError(
                f'"{name}" cannot be declared as a field of {class_.__name__}'
            )
    if meta.type is None:
        return None
    if not isinstance(meta.type, str) or not meta.type:
        raise InvalidDeclarationError(f"Meta.type of {class_.__name__} must be a non-empty str")
    descr = ResourceDescriptor(meta.type, meta.endpoint)
    for field in fields.values():
        member = field.build_descriptor()
        if isinstance(member, ResourceRelationshipDescriptor):
            descr.add_relationship(member)
        else:
            assert isinstance(member, ResourceAttributeDescriptor)
            descr.add_attribute(member)
    return descr

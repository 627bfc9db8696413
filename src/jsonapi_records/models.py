import enum
import typing
from collections import OrderedDict

from .naming import to_python_name
from .utils import assert_not_none


class RelationshipType(enum.IntEnum):
    TO_ONE = 1
    TO_MANY = 2


class ResourceMemberDescriptor:
    parent: typing.Optional["ResourceDescriptor"] = None
    name: str

    T = typing.TypeVar("T", bound="ResourceMemberDescriptor")

    def bind(self: T, parent: "ResourceDescriptor") -> T:
        self.parent = parent
        return self


class ResourceAttributeDescriptor(ResourceMemberDescriptor):
    def __init__(self, name: str):
        self.name = name


class ResourceRelationshipDescriptor(ResourceMemberDescriptor):
    type: RelationshipType
    destinations: typing.Tuple[str, ...]
    """
    The resource types the relationship may point to.  Empty means any registered type.
    """
    owning: bool
    """
    Set to :py:const:`True` when the referring resource holds the foreign key (belongs-to).
    """

    def accepts(self, type_name: str) -> bool:
        return not self.destinations or type_name in self.destinations

    def __init__(
        self,
        name: str,
        destinations: typing.Iterable[str] = (),
        owning: bool = False,
    ):
        super().__init__()
        self.name = name
        self.destinations = tuple(destinations)
        self.owning = owning


class ResourceToOneRelationshipDescriptor(ResourceRelationshipDescriptor):
    type = RelationshipType.TO_ONE
    """
    Always set to :py:class:`RelationshipType`.``TO_ONE``
    """


class ResourceToManyRelationshipDescriptor(ResourceRelationshipDescriptor):
    type = RelationshipType.TO_MANY
    """
    Always set to :py:class:`RelationshipType`.``TO_MANY``
    """


class ResourceDescriptor:
    """
    A :py:class:`ResourceDescriptor` holds information about a JSON:API resource type.

    :param str name: The wire type of the resource.
    :param Optional[str] endpoint: The path segment the resource is served under.  Defaults to ``name``.
    :param Iterable[ResourceAttributeDescriptor] attributes: The descriptors for the attributes the resource holds.
    :param Iterable[ResourceRelationshipDescriptor] relationships: The descriptors for the relationships the resource has.
    """

    name: str
    """
    The wire type of the resource.
    """
    endpoint: str
    _attributes: typing.MutableMapping[str, ResourceAttributeDescriptor]
    _relationships: typing.MutableMapping[str, ResourceRelationshipDescriptor]

    @property
    def attributes(self) -> typing.Mapping[str, ResourceAttributeDescriptor]:
        """
        The mapping of attribute names to :py:class:`ResourceAttributeDescriptor`s.
        """
        return self._attributes

    @property
    def relationships(self) -> typing.Mapping[str, ResourceRelationshipDescriptor]:
        """
        The mapping of relationship names to :py:class:`ResourceRelationshipDescriptor`s.
        """
        return self._relationships

    def add_attribute(self, attr: ResourceAttributeDescriptor) -> None:
        self._attributes[assert_not_none(attr.name)] = attr.bind(self)

    def add_relationship(self, rel: ResourceRelationshipDescriptor) -> None:
        self._relationships[assert_not_none(rel.name)] = rel.bind(self)

    def find_attribute(self, name: str) -> typing.Optional[ResourceAttributeDescriptor]:
        """
        Look up an attribute by either its Python name or its wire name.
        """
        attr = self._attributes.get(name)
        if attr is None:
            attr = self._attributes.get(to_python_name(name))
        return attr

    def find_relationship(self, name: str) -> typing.Optional[ResourceRelationshipDescriptor]:
        """
        Look up a relationship by either its Python name or its wire name.
        """
        rel = self._relationships.get(name)
        if rel is None:
            rel = self._relationships.get(to_python_name(name))
        return rel

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"

    def __init__(
        self,
        name: str,
        endpoint: typing.Optional[str] = None,
        attributes: typing.Iterable[ResourceAttributeDescriptor] = (),
        relationships: typing.Iterable[ResourceRelationshipDescriptor] = (),
    ) -> None:
        self.name = name
        self.endpoint = endpoint if endpoint is not None else name
        self._attributes = OrderedDict(
            ((assert_not_none(attr.name), attr.bind(self)) for attr in attributes)
        )
        self._relationships = OrderedDict(
            ((assert_not_none(rel.name), rel.bind(self)) for rel in relationships)
        )

"""
Classes in :py:mod:`jsonapi_records.serde.models` are abstract representation of JSON:API document elements,
as they are read from a server and as they are written in a sideposting write request.
"""

import dataclasses
import datetime
import decimal
import enum
import typing
from collections import OrderedDict

from .utils import JSONPointer

Source = typing.Union[JSONPointer, str]


class WriteMethod(enum.Enum):
    """
    The per-resource intent attached to nested resources of a write document.
    """

    CREATE = "create"
    UPDATE = "update"
    DESTROY = "destroy"
    DISASSOCIATE = "disassociate"


class MissingType:
    def __bool__(self):
        return False

    def __repr__(self):
        return "Missing"

    def __init__(self):
        raise TypeError("Not directly instantiable")


Missing = object.__new__(MissingType)


@dataclasses.dataclass
class Repr:
    """
    The base class for any model objects.
    """

    _source_: typing.Optional[Source] = None


@dataclasses.dataclass(init=False)
class MetaContainerRepr(Repr):
    """
    :py:class:`MetaContainerRepr` is an abstract base for classes containing ``meta`` node.
    """

    meta: typing.Dict[str, typing.Any] = dataclasses.field(default_factory=dict)

    def __init__(
        self,
        *,
        meta: typing.Optional[typing.Dict[str, typing.Any]] = None,
        _source_: typing.Optional[Source] = None,
    ):
        """
        :param Optional[Dict[str. Any]] meta: a dictionary containing user-defined information.
        :param Union[JSONPointer, str, None] _source_: an object that describes the source of the node.
        """
        super().__init__(_source_=_source_)
        self.meta = meta if meta is not None else {}


@dataclasses.dataclass(init=False)
class ResourceIdRepr(MetaContainerRepr):
    """
    Instances of :py:class:`ResourceIdRepr` represent `Resource Identifier Objects <https://jsonapi.org/format/#document-resource-identifier-objects>`_.

    In a write document an identifier either carries ``id`` (persisted resources) or
    ``temp-id`` (resources being created), and always a ``method``.
    """

    type: str  # type: ignore
    id: typing.Optional[str]  # type: ignore
    temp_id: typing.Optional[str] = None
    method: typing.Optional[WriteMethod] = None

    @property
    def identity(self) -> typing.Tuple[str, typing.Optional[str]]:
        return (self.type, self.id)

    def __init__(
        self,
        *,
        type: str,
        id: typing.Optional[str] = None,
        temp_id: typing.Optional[str] = None,
        method: typing.Optional[WriteMethod] = None,
        meta: typing.Optional[typing.Dict[str, typing.Any]] = None,
        _source_: typing.Optional[Source] = None,
    ):
        """
        :param str type: a value for ``type`` property.
        :param Optional[str] id: a value for ``id`` property.
        :param Optional[str] temp_id: a value for ``temp-id`` property.
        :param Optional[WriteMethod] method: a value for ``method`` property.
        :param Optional[Dict[str. Any]] meta: a dictionary containing user-defined information.
        :param Union[JSONPointer, str, None] _source_: an object that describes the source of the node.
        """
        if id is None and temp_id is None:
            raise ValueError("either id or temp_id must be specified")
        super().__init__(meta=meta, _source_=_source_)
        self.type = type
        self.id = id
        self.temp_id = temp_id
        self.method = method


LinkageData = typing.Union[None, ResourceIdRepr, typing.Sequence[ResourceIdRepr]]


@dataclasses.dataclass(init=False)
class LinkageRepr(MetaContainerRepr):
    """
    :py:class:`LinkageRepr` represents a `Resource Linkage <https://jsonapi.org/format/#document-resource-object-linkage>`_

    ``data`` is :py:const:`Missing` when the relationship object has no ``data`` member at all.
    """

    data: typing.Union[LinkageData, MissingType] = None

    def __init__(
        self,
        *,
        data: typing.Union[LinkageData, MissingType],
        meta: typing.Optional[typing.Dict[str, typing.Any]] = None,
        _source_: typing.Optional[Source] = None,
    ):
        """
        :param Union[None, ResourceIdRepr, Sequence[ResourceIdRepr], MissingType] data: a value for ``data`` property.
        :param Optional[Dict[str. Any]] meta: a dictionary containing user-defined information.
        :param Union[JSONPointer, str, None] _source_: an object that describes the source of the node.
        """
        super().__init__(meta=meta, _source_=_source_)
        self.data = data


AttributeScalar = typing.Union[
    datetime.datetime, datetime.date, decimal.Decimal, str, int, float, bytes, None
]
AttributeValue = typing.Union[
    typing.Sequence[AttributeScalar],
    typing.Mapping[str, AttributeScalar],
    AttributeScalar,
]


@dataclasses.dataclass(init=False)
class ResourceRepr(MetaContainerRepr):
    """
    :py:class:`ResourceRepr` class represents a `Resource Object <https://jsonapi.org/format/#document-resource-objects>`_.
    """

    type: str  # type: ignore
    id: typing.Optional[str]  # type: ignore
    temp_id: typing.Optional[str] = None
    method: typing.Optional[WriteMethod] = None
    attributes: typing.Mapping[str, AttributeValue] = dataclasses.field(default_factory=OrderedDict)  # type: ignore
    relationships: typing.Mapping[str, LinkageRepr] = dataclasses.field(default_factory=OrderedDict)  # type: ignore

    @property
    def identity(self) -> typing.Tuple[str, typing.Optional[str]]:
        return (self.type, self.id)

    def __getitem__(self, name):
        return self.attributes[name]

    def __init__(
        self,
        *,
        type: str,
        id: typing.Optional[str],
        attributes: typing.Iterable[typing.Tuple[str, AttributeValue]] = (),
        relationships: typing.Iterable[typing.Tuple[str, LinkageRepr]] = (),
        temp_id: typing.Optional[str] = None,
        method: typing.Optional[WriteMethod] = None,
        meta: typing.Optional[typing.Dict[str, typing.Any]] = None,
        _source_: typing.Optional[Source] = None,
    ):
        """
        :param str type: a value for ``type`` property.
        :param str id: an optional value for ``id` property.
        :param Iterable[Tuple[str, AttributeValue]] attributes: a sequence of tuples each of which represents a key-value pair of an attribute.
        :param Iterable[Tuple[str, LinkageRepr]] relationships: a sequence of tuples each of which represent a key-value pair of a relationship.
        :param Optional[str] temp_id: a value for ``temp-id`` property.
        :param Optional[WriteMethod] method: a value for ``method`` property.
        :param Optional[Dict[str. Any]] meta: a dictionary containing user-defined information.
        :param Union[JSONPointer, str, None] _source_: an object that describes the source of the node.
        """
        super().__init__(meta=meta, _source_=_source_)
        self.type = type
        self.id = id
        self.temp_id = temp_id
        self.method = method
        self.attributes = OrderedDict(attributes)
        self.relationships = OrderedDict(relationships)


@dataclasses.dataclass(init=False)
class DocumentReprBase(MetaContainerRepr):
    included: typing.Sequence[ResourceRepr] = ()

    def __init__(
        self,
        *,
        included: typing.Sequence[ResourceRepr] = (),
        meta: typing.Optional[typing.Dict[str, typing.Any]] = None,
        _source_: typing.Optional[Source] = None,
    ):
        """
        :param Sequence[ResourceRepr]: a sequence of :py:class:`ResourceRepr`.
        :param Optional[Dict[str, Any]] meta: a dictionary containing user-defined information.
        :param Union[JSONPointer, str, None] _source_: an object that describes the source of the node.
        """
        super().__init__(meta=meta, _source_=_source_)
        self.included = included


@dataclasses.dataclass(init=False)
class SingletonDocumentRepr(DocumentReprBase):
    data: typing.Optional[ResourceRepr] = None

    @property
    def primary(self) -> typing.Sequence[ResourceRepr]:
        return (self.data,) if self.data is not None else ()

    def __init__(
        self,
        data: typing.Optional[ResourceRepr],
        included: typing.Sequence[ResourceRepr] = (),
        meta: typing.Optional[typing.Dict[str, typing.Any]] = None,
        _source_: typing.Optional[Source] = None,
    ):
        """
        :param Optional[ResourceRepr] data: a ResourceRepr object.
        :param Sequence[ResourceRepr]: a sequence of :py:class:`ResourceRepr`.
        :param Optional[Dict[str, Any]] meta: a dictionary containing user-defined information.
        :param Union[JSONPointer, str, None] _source_: an object that describes the source of the node.
        """
        super().__init__(included=included, meta=meta, _source_=_source_)
        self.data = data


@dataclasses.dataclass(init=False)
class CollectionDocumentRepr(DocumentReprBase):
    data: typing.Sequence[ResourceRepr] = ()

    @property
    def primary(self) -> typing.Sequence[ResourceRepr]:
        return self.data

    def __init__(
        self,
        data: typing.Sequence[ResourceRepr],
        included: typing.Sequence[ResourceRepr] = (),
        meta: typing.Optional[typing.Dict[str, typing.Any]] = None,
        _source_: typing.Optional[Source] = None,
    ):
        """
        :param Sequence[ResourceRepr] data: a sequence of ResourceRepr objects.
        :param Sequence[ResourceRepr]: a sequence of :py:class:`ResourceRepr`.
        :param Optional[Dict[str, Any]] meta: a dictionary containing user-defined information.
        :param Union[JSONPointer, str, None] _source_: an object that describes the source of the node.
        """
        super().__init__(included=included, meta=meta, _source_=_source_)
        self.data = data


DocumentRepr = typing.Union[SingletonDocumentRepr, CollectionDocumentRepr]

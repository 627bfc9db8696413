"""
:py:mod:`jsonapi_records.serde.renderer` turns the wire representation of a
document into JSON-compatible Python objects, ready for :py:func:`json.dumps`.

Synopsis
--------

.. code-block:: python

   import json

   from jsonapi_records.serde.renderer import ReprRenderer

   renderer = ReprRenderer()

   internal_repr = SingletonDocumentRepr(
       data=ResourceRepr(
           type="authors",
           id=None,
           attributes=[("first_name", "Stephen")],
           relationships=[
               (
                   "books",
                   LinkageRepr(
                       data=[
                           ResourceIdRepr(type="books", temp_id="abc1", method=WriteMethod.CREATE),
                       ],
                   ),
               ),
           ],
       ),
       included=[
           ResourceRepr(
               type="books",
               id=None,
               temp_id="abc1",
               method=WriteMethod.CREATE,
               attributes=[("title", "The Shining")],
           ),
       ],
   )

   print(json.dumps(renderer(internal_repr)))

Attribute values other than JSON scalars are rendered as follows:

* timezone-aware :py:class:`datetime.datetime` as an ISO 8601 string in UTC.
  Naive ones are rejected unless ``assume_naive_timezone_as`` is given.
* :py:class:`datetime.date` as an ISO 8601 string.
* :py:class:`decimal.Decimal` as a string (or a float with ``render_decimal_as_str=False``).
* :py:class:`bytes` as a base64 string.
* mappings and lists/tuples recursively.

"""

import base64
import collections.abc
import datetime
import decimal
import typing
from collections import OrderedDict

from .models import (
    CollectionDocumentRepr,
    DocumentRepr,
    DocumentReprBase,
    LinkageRepr,
    Missing,
    ResourceIdRepr,
    ResourceRepr,
    SingletonDocumentRepr,
)
from .types import JSONScalar, JSONValue, MutableJSONObject
from .utils import JSONPointer

ScalarRenderer = typing.Callable[["ReprRenderer", JSONPointer, typing.Any], JSONScalar]


class TZLocalizer(typing.Protocol):
    def localize(self, dt: datetime.datetime) -> datetime.datetime:
        ...  # pragma: nocover


class ReprRenderer:
    _render_decimal_as_str: bool = True
    _assume_naive_timezone_as: typing.Optional[datetime.tzinfo] = None

    def _object(self, items: typing.Iterable[typing.Tuple[str, typing.Any]]) -> MutableJSONObject:
        return OrderedDict(items)

    def _render_datetime(self, path: JSONPointer, value: datetime.datetime) -> JSONScalar:
        if value.tzinfo is None:
            tz = self._assume_naive_timezone_as
            if tz is None:
                raise ValueError(f"{path}: naive datetime {value}")
            if hasattr(tz, "localize"):
                value = typing.cast(TZLocalizer, tz).localize(value)
            else:
                value = value.replace(tzinfo=tz)
        return value.astimezone(datetime.timezone.utc).isoformat()

    def _render_date(self, path: JSONPointer, value: datetime.date) -> JSONScalar:
        return value.isoformat()

    def _render_decimal(self, path: JSONPointer, value: decimal.Decimal) -> JSONScalar:
        return str(value) if self._render_decimal_as_str else float(value)

    def _render_bytes(self, path: JSONPointer, value: bytes) -> JSONScalar:
        return base64.b64encode(value).decode("ascii")

    def _render_as_is(self, path: JSONPointer, value: typing.Any) -> JSONScalar:
        return value

    # datetime must come before date as it is a subclass of it
    _supported_types: typing.ClassVar[typing.Dict[type, ScalarRenderer]] = {
        datetime.datetime: _render_datetime,
        datetime.date: _render_date,
        decimal.Decimal: _render_decimal,
        bytes: _render_bytes,
        str: _render_as_is,
        int: _render_as_is,
        float: _render_as_is,
        bool: _render_as_is,
        type(None): _render_as_is,
    }

    def _render_scalar(self, path: JSONPointer, value: typing.Any) -> JSONScalar:
        r = self._supported_types.get(type(value))
        if r is None:
            for type_, candidate in self._supported_types.items():
                if isinstance(value, type_):
                    r = candidate
                    break
            else:
                raise TypeError(f"{path}: unsupported type {value!r}")
        return r(self, path, value)

    def _render_attribute_value(self, path: JSONPointer, value: typing.Any) -> JSONValue:
        if isinstance(value, collections.abc.Mapping):
            return self._object(
                (k, self._render_attribute_value(path / k, v)) for k, v in value.items()
            )
        elif isinstance(value, (list, tuple)):
            return [self._render_attribute_value(path[i], v) for i, v in enumerate(value)]
        return self._render_scalar(path, value)

    def _render_write_members(
        self,
        retval: MutableJSONObject,
        repr_: typing.Union[ResourceIdRepr, ResourceRepr],
    ) -> None:
        retval["type"] = repr_.type
        if repr_.id is not None:
            retval["id"] = repr_.id
        if repr_.temp_id is not None:
            retval["temp-id"] = repr_.temp_id
        if repr_.method is not None:
            retval["method"] = repr_.method.value

    def _render_identifier(self, repr_: ResourceIdRepr) -> MutableJSONObject:
        retval = self._object(())
        self._render_write_members(retval, repr_)
        if repr_.meta:
            retval["meta"] = repr_.meta
        return retval

    def _render_linkage(self, repr_: LinkageRepr) -> MutableJSONObject:
        retval = self._object(())
        if repr_.data is None:
            retval["data"] = None
        elif isinstance(repr_.data, ResourceIdRepr):
            retval["data"] = self._render_identifier(repr_.data)
        elif repr_.data is not Missing:
            retval["data"] = [
                self._render_identifier(item)
                for item in typing.cast(typing.Sequence[ResourceIdRepr], repr_.data)
            ]
        if repr_.meta:
            retval["meta"] = repr_.meta
        return retval

    def _render_resource(self, path: JSONPointer, repr_: ResourceRepr) -> MutableJSONObject:
        retval = self._object(())
        self._render_write_members(retval, repr_)
        if repr_.attributes:
            retval["attributes"] = self._object(
                (k, self._render_attribute_value(path / "attributes" / k, v))
                for k, v in repr_.attributes.items()
            )
        if repr_.relationships:
            retval["relationships"] = self._object(
                (k, self._render_linkage(v)) for k, v in repr_.relationships.items()
            )
        if repr_.meta:
            retval["meta"] = repr_.meta
        return retval

    def _render_document(self, repr_: DocumentReprBase, data: JSONValue) -> MutableJSONObject:
        retval = self._object((("data", data),))
        if repr_.included:
            included_path = JSONPointer() / "included"
            retval["included"] = [
                self._render_resource(included_path[i], r) for i, r in enumerate(repr_.included)
            ]
        if repr_.meta:
            retval["meta"] = repr_.meta
        return retval

    def __call__(self, repr_: DocumentRepr) -> MutableJSONObject:
        data_path = JSONPointer() / "data"
        if isinstance(repr_, SingletonDocumentRepr):
            return self._render_document(
                repr_,
                self._render_resource(data_path, repr_.data) if repr_.data is not None else None,
            )
        elif isinstance(repr_, CollectionDocumentRepr):
            return self._render_document(
                repr_,
                [self._render_resource(data_path[i], r) for i, r in enumerate(repr_.data)],
            )
        raise TypeError(f"not a document: {repr_!r}")

    def __init__(
        self,
        render_decimal_as_str: bool = True,
        assume_naive_timezone_as: typing.Optional[datetime.tzinfo] = None,
    ):
        self._render_decimal_as_str = render_decimal_as_str
        self._assume_naive_timezone_as = assume_naive_timezone_as

"""
:py:class:`Scope` collects the query parameters of read requests.

.. code-block:: python

   >>> Scope().page(2).per(10).where({"foo": "bar"}).order({"bar": "desc"}).to_query_string()
   'page[number]=2&page[size]=10&filter[foo]=bar&sort=-bar'

Every method returns a new :py:class:`Scope`; the receiver is never modified.
"""

import collections.abc
import copy
import typing
import urllib.parse

from .include import (
    IncludeDirective,
    IncludeDirectiveLike,
    normalize_include_directive,
    to_include_param,
)

SortDirection = str
FieldSelection = typing.Mapping[str, typing.Sequence[str]]

_QUOTE_SAFE = ",.-_~"


def _merge_include(target: IncludeDirective, source: IncludeDirective) -> None:
    for k, v in source.items():
        _merge_include(target.setdefault(k, {}), v)


def parameterize(params: typing.Mapping[str, typing.Any], prefix: typing.Optional[str] = None) -> str:
    """
    Flatten nested query parameters into ``key[sub]=value`` pairs.  Lists are
    joined with commas; ``None``, empty strings and empty containers are skipped.
    """
    retval: typing.List[str] = []
    for k, v in params.items():
        if v is None or v == "":
            continue
        key = f"{prefix}[{k}]" if prefix else k
        if isinstance(v, (list, tuple)):
            if v:
                retval.append(
                    f"{key}={','.join(urllib.parse.quote(str(i), safe=_QUOTE_SAFE) for i in v)}"
                )
        elif isinstance(v, collections.abc.Mapping):
            nested = parameterize(v, key)
            if nested:
                retval.append(nested)
        else:
            retval.append(f"{key}={urllib.parse.quote(str(v), safe=_QUOTE_SAFE)}")
    return "&".join(retval)


class Scope:
    _pagination: typing.Dict[str, int]
    _filter: typing.Dict[str, typing.Any]
    _sort: typing.Dict[str, SortDirection]
    _fields: typing.Dict[str, typing.List[str]]
    _extra_fields: typing.Dict[str, typing.List[str]]
    _stats: typing.Dict[str, typing.Any]
    _include: IncludeDirective

    def page(self, number: int) -> "Scope":
        retval = self.copy()
        retval._pagination["number"] = number
        return retval

    def per(self, size: int) -> "Scope":
        retval = self.copy()
        retval._pagination["size"] = size
        return retval

    def where(self, clause: typing.Mapping[str, typing.Any]) -> "Scope":
        retval = self.copy()
        retval._filter.update(clause)
        return retval

    def stats(self, clause: typing.Mapping[str, typing.Any]) -> "Scope":
        retval = self.copy()
        retval._stats.update(clause)
        return retval

    def order(self, clause: typing.Union[str, typing.Mapping[str, SortDirection]]) -> "Scope":
        retval = self.copy()
        if isinstance(clause, str):
            retval._sort[clause] = "asc"
        else:
            for k, v in clause.items():
                if v not in ("asc", "desc"):
                    raise ValueError(f"sort direction must be either asc or desc, got {v!r}")
                retval._sort[k] = v
        return retval

    def select(self, clause: FieldSelection) -> "Scope":
        retval = self.copy()
        for k, v in clause.items():
            retval._fields[k] = list(v)
        return retval

    def select_extra(self, clause: FieldSelection) -> "Scope":
        retval = self.copy()
        for k, v in clause.items():
            retval._extra_fields[k] = list(v)
        return retval

    def includes(self, directive: IncludeDirectiveLike) -> "Scope":
        retval = self.copy()
        _merge_include(retval._include, normalize_include_directive(directive))
        return retval

    @property
    def include_directive(self) -> IncludeDirective:
        return copy.deepcopy(self._include)

    def as_query_params(self) -> typing.Dict[str, typing.Any]:
        retval: typing.Dict[str, typing.Any] = {}
        if self._pagination:
            retval["page"] = dict(self._pagination)
        if self._filter:
            retval["filter"] = dict(self._filter)
        if self._sort:
            retval["sort"] = [k if v == "asc" else f"-{k}" for k, v in self._sort.items()]
        if self._fields:
            retval["fields"] = copy.deepcopy(self._fields)
        if self._extra_fields:
            retval["extra_fields"] = copy.deepcopy(self._extra_fields)
        if self._stats:
            retval["stats"] = dict(self._stats)
        if self._include:
            retval["include"] = to_include_param(self._include)
        return retval

    def to_query_string(self) -> typing.Optional[str]:
        qs = parameterize(self.as_query_params())
        return qs or None

    def copy(self) -> "Scope":
        retval = Scope()
        retval._pagination = dict(self._pagination)
        retval._filter = copy.deepcopy(self._filter)
        retval._sort = dict(self._sort)
        retval._fields = copy.deepcopy(self._fields)
        retval._extra_fields = copy.deepcopy(self._extra_fields)
        retval._stats = copy.deepcopy(self._stats)
        retval._include = copy.deepcopy(self._include)
        return retval

    def __repr__(self) -> str:
        return f"Scope({self.as_query_params()!r})"

    def __init__(self):
        self._pagination = {}
        self._filter = {}
        self._sort = {}
        self._fields = {}
        self._extra_fields = {}
        self._stats = {}
        self._include = {}

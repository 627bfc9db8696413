"""
Include directives tell which relationships of a record graph to look into.
The same normalized shape governs dirty checks, write payloads and the
pruning of destroyed or disassociated members.

.. code-block:: python

   >>> normalize_include_directive(["genre", {"books": "genre"}])
   {'genre': {}, 'books': {'genre': {}}}
   >>> to_include_param({"a": ["b", {"c": "d"}]})
   'a.b,a.c.d'
"""

import collections.abc
import typing

from .exceptions import InvalidIncludeDirectiveError

IncludeDirective = typing.Dict[str, "IncludeDirective"]  # type: ignore
IncludeDirectiveLike = typing.Union[
    None,
    str,
    typing.Iterable[typing.Any],
    typing.Mapping[str, typing.Any],
]


def _merge(target: IncludeDirective, source: IncludeDirective) -> IncludeDirective:
    stack = [(target, source)]
    while stack:
        t, s = stack.pop()
        for k, v in s.items():
            stack.append((t.setdefault(k, {}), v))
    return target


def _from_path(path: str, directive: typing.Any) -> IncludeDirective:
    names = path.split(".")
    if not all(names):
        raise InvalidIncludeDirectiveError(directive, f"empty relationship name in {path!r}")
    retval: IncludeDirective = {}
    node = retval
    for name in names:
        node = node.setdefault(name, {})
    return retval


def _is_leaf(value: typing.Any) -> bool:
    if value is None or value is True:
        return True
    if isinstance(value, (collections.abc.Mapping, collections.abc.Set)) and not value:
        return True
    return False


def _normalize(directive: typing.Any, root: typing.Any) -> IncludeDirective:
    retval: IncludeDirective = {}
    if _is_leaf(directive):
        return retval
    if isinstance(directive, str):
        for path in directive.split(","):
            _merge(retval, _from_path(path.strip(), root))
    elif isinstance(directive, collections.abc.Mapping):
        for k, v in directive.items():
            if not isinstance(k, str):
                raise InvalidIncludeDirectiveError(root, f"relationship name must be a str, got {k!r}")
            branch = _from_path(k, root)
            node = branch
            while node:
                (node,) = node.values()
            _merge(node, _normalize(v, root))
            _merge(retval, branch)
    elif isinstance(directive, (list, tuple, collections.abc.Set)):
        for item in directive:
            _merge(retval, _normalize(item, root))
    else:
        raise InvalidIncludeDirectiveError(root, f"unexpected value {directive!r}")
    return retval


def normalize_include_directive(directive: IncludeDirectiveLike) -> IncludeDirective:
    """
    Turn any accepted shorthand into the canonical form: a dict mapping each
    relationship name to the (possibly empty) directive for its members.

    :param directive: ``None``, a name, a dotted path, a list/tuple/set of directives, or a mapping.
    :return: a new dict; the argument is never modified.
    :raises InvalidIncludeDirectiveError: when the directive contains anything else.
    """
    return _normalize(directive, directive)


def _paths(directive: IncludeDirective) -> typing.Iterator[str]:
    for k, v in directive.items():
        if v:
            for path in _paths(v):
                yield f"{k}.{path}"
        else:
            yield k


def to_include_param(directive: IncludeDirectiveLike) -> str:
    """
    Render a directive as the value of the ``include`` query parameter.
    """
    return ",".join(_paths(normalize_include_directive(directive)))

import enum
import re
import typing

_BOUNDARY_RE = re.compile(r"([a-z0-9])([A-Z])|([A-Z]+)([A-Z][a-z])")
_SEPARATOR_RE = re.compile(r"[-_\s]+")


class KeyFormat(enum.Enum):
    """
    How Python (snake case) member names appear on the wire.
    """

    UNDERSCORE = "underscore"
    CAMELIZE = "camelize"
    DASHERIZE = "dasherize"


def _split_boundary(m: "re.Match[str]") -> str:
    if m.group(1) is not None:
        return f"{m.group(1)}_{m.group(2)}"
    else:
        return f"{m.group(3)}_{m.group(4)}"


def underscore(name: str) -> str:
    """
    >>> underscore("specialBooks")
    'special_books'
    >>> underscore("special-books")
    'special_books'
    """
    return _SEPARATOR_RE.sub("_", _BOUNDARY_RE.sub(_split_boundary, name)).lower()


def camelize(name: str) -> str:
    head, *rest = underscore(name).split("_")
    return head + "".join(c.capitalize() for c in rest)


def dasherize(name: str) -> str:
    return underscore(name).replace("_", "-")


_formatters: typing.Dict[KeyFormat, typing.Callable[[str], str]] = {
    KeyFormat.UNDERSCORE: underscore,
    KeyFormat.CAMELIZE: camelize,
    KeyFormat.DASHERIZE: dasherize,
}


def to_wire_name(name: str, key_format: KeyFormat = KeyFormat.UNDERSCORE) -> str:
    return _formatters[key_format](name)


def to_python_name(name: str) -> str:
    return underscore(name)

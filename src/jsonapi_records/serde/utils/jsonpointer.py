import typing


def _escape(component: str) -> str:
    return component.replace("~", "~0").replace("/", "~1")


class JSONPointer:
    """
    An immutable `RFC 6901 <https://tools.ietf.org/html/rfc6901>`_ pointer used
    to tell where in a document a problem was found.

    .. code-block:: python

       >>> str(JSONPointer() / "data" / "relationships" / "books")
       '/data/relationships/books'
       >>> str((JSONPointer() / "included")[1])
       '/included/1'
       >>> str(JSONPointer())
       ''
    """

    components: typing.Tuple[str, ...]

    def __truediv__(self, component: str) -> "JSONPointer":
        return JSONPointer(*self.components, component)

    def __getitem__(self, index: int) -> "JSONPointer":
        return JSONPointer(*self.components, str(index))

    def __eq__(self, other: typing.Any) -> bool:
        if isinstance(other, JSONPointer):
            return self.components == other.components
        elif isinstance(other, str):
            return str(self) == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.components)

    def __str__(self) -> str:
        return "".join("/" + _escape(c) for c in self.components)

    def __repr__(self) -> str:
        return f"JSONPointer({str(self)!r})"

    def __init__(self, *components: str):
        self.components = tuple(components)

import dataclasses
import typing

from .types import JSONValue
from .utils import JSONPointer


class SerdeError(Exception):
    pass


@dataclasses.dataclass(frozen=True)
class DeserializationErrorItem:
    pointer: JSONPointer
    message: str

    def __str__(self) -> str:
        return f"{self.pointer}: {self.message}"


class DeserializationError(SerdeError):
    payload: JSONValue
    errors: typing.Sequence[DeserializationErrorItem]

    @property
    def message(self) -> str:
        return "; ".join(str(e) for e in self.errors)

    def __init__(self, payload: JSONValue, errors: typing.Sequence[DeserializationErrorItem]):
        super().__init__(payload, errors)
        self.payload = payload
        self.errors = errors

    def __str__(self) -> str:
        return self.message


class MalformedDocumentError(DeserializationError):
    """
    Raised when a document lacks the structure every reader depends on,
    e.g. the top-level ``data`` member or a primary resource's ``type``.
    """

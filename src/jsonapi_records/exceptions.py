import abc
import typing

from .serde.exceptions import (  # noqa: F401
    DeserializationError,
    DeserializationErrorItem,
    MalformedDocumentError,
    SerdeError,
)
from .serde.models import Source


class JSONAPIRecordsException(Exception, metaclass=abc.ABCMeta):
    message: str

    def __str__(self):
        return self.message


class InvalidDeclarationError(JSONAPIRecordsException):
    message: str

    def __init__(self, message: str):
        self.message = message


class UnknownResourceTypeError(JSONAPIRecordsException):
    name: str
    _source: typing.Optional[Source]

    @property
    def sources(self) -> typing.Sequence[Source]:
        if self._source is None:
            return []
        else:
            return [self._source]

    @property
    def message(self):
        return f'no resource known as "{self.name}"'

    def __init__(self, name: str, source: typing.Optional[Source] = None):
        self.name = name
        self._source = source


class UnknownRelationshipError(JSONAPIRecordsException):
    resource_type: str
    name: str

    @property
    def message(self):
        return f'relationship ({self.name}) is not declared in "{self.resource_type}"'

    def __init__(self, resource_type: str, name: str):
        self.resource_type = resource_type
        self.name = name


class InvalidIncludeDirectiveError(JSONAPIRecordsException):
    directive: typing.Any
    detail: typing.Optional[str]

    @property
    def message(self):
        return f'invalid include directive{" (" + self.detail + ")" if self.detail is not None else ""}: {self.directive!r}'

    def __init__(self, directive: typing.Any, detail: typing.Optional[str] = None):
        self.directive = directive
        self.detail = detail

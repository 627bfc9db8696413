from .config import Config  # noqa: F401
from .declarative import Attr, BelongsTo, HasMany, HasOne  # noqa: F401
from .deserializer import RecordDeserializer  # noqa: F401
from .exceptions import (  # noqa: F401
    InvalidDeclarationError,
    InvalidIncludeDirectiveError,
    JSONAPIRecordsException,
    MalformedDocumentError,
    UnknownRelationshipError,
    UnknownResourceTypeError,
)
from .identity import IdentityPool, IdentityResolver  # noqa: F401
from .include import normalize_include_directive, to_include_param  # noqa: F401
from .naming import KeyFormat  # noqa: F401
from .record import Record  # noqa: F401
from .registry import Registry  # noqa: F401
from .scope import Scope  # noqa: F401
from .serializer import GraphSerializer, TempIdGenerator, WritePayload  # noqa: F401
from .session import Session, Transport  # noqa: F401

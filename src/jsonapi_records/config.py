import dataclasses
import typing

from .naming import KeyFormat


@dataclasses.dataclass
class Config:
    """
    Settings shared by a :py:class:`jsonapi_records.session.Session` and the
    serializers it creates.

    :param str base_url: scheme and authority of the API server, e.g. ``http://example.com``.
    :param str api_namespace: path prefix placed between ``base_url`` and resource endpoints, e.g. ``/api/v1``.
    :param KeyFormat key_format: how member names are written on the wire.
    :param str update_verb: the HTTP verb used to save a persisted record.
    :param Optional[Callable[[], str]] temp_id_factory: mints correlation identifiers for unpersisted records.
    """

    base_url: str = ""
    api_namespace: str = ""
    key_format: KeyFormat = KeyFormat.UNDERSCORE
    update_verb: str = "PATCH"
    temp_id_factory: typing.Optional[typing.Callable[[], str]] = None

    def full_base_path(self) -> str:
        return self.base_url.rstrip("/") + self.api_namespace.rstrip("/")

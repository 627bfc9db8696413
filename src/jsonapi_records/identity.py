import logging
import typing

from .dirty import Identity, related_records
from .record import Record
from .registry import Registry
from .serde.models import Source

logger = logging.getLogger(__name__)


class IdentityPool:
    """
    The records known to a single deserialization pass, keyed by ``(type, id)``.
    """

    _records: typing.Dict[Identity, Record]
    created: typing.List[Record]
    """
    The records instantiated by :py:class:`IdentityResolver` during the pass.
    """

    def get(self, identity: Identity) -> typing.Optional[Record]:
        return self._records.get(identity)

    def put(self, identity: Identity, record: Record) -> None:
        self._records[identity] = record

    def seed(self, record: Record) -> None:
        """
        Register every identified record reachable from ``record``.  When two
        instances share an identity the first one reached is kept.
        """
        visited: typing.Set[int] = set()
        stack = [record]
        while stack:
            r = stack.pop()
            if id(r) in visited:
                continue
            visited.add(id(r))
            if r.id is not None:
                identity = (r.type, str(r.id))
                if identity in self._records:
                    if self._records[identity] is not r:
                        logger.debug("%r shares its identity with %r", r, self._records[identity])
                else:
                    self._records[identity] = r
            descr = r.resource_descriptor()
            for rel_descr in reversed(list(descr.relationships.values())):
                stack.extend(reversed(related_records(r, rel_descr)))

    def __contains__(self, identity: Identity) -> bool:
        return identity in self._records

    def __init__(self):
        self._records = {}
        self.created = []


class IdentityResolver:
    registry: Registry

    def resolve(
        self,
        type_name: str,
        id: typing.Any,
        pool: IdentityPool,
        source: typing.Optional[Source] = None,
    ) -> Record:
        """
        Find the record for ``(type_name, id)`` in ``pool``, or create a bare
        one of the registered class and add it to ``pool``.

        :raises UnknownResourceTypeError: when no class is registered for ``type_name``.
        """
        identity = (type_name, str(id))
        record = pool.get(identity)
        if record is not None:
            return record
        class_ = self.registry.query_class_by_type_name(type_name, source)
        record = class_(id=str(id))
        pool.put(identity, record)
        pool.created.append(record)
        return record

    def __init__(self, registry: Registry):
        self.registry = registry

import logging
import typing

from .exceptions import (
    InvalidDeclarationError,
    UnknownRelationshipError,
    UnknownResourceTypeError,
)
from .include import IncludeDirective
from .models import ResourceDescriptor
from .record import Record
from .serde.models import Source

logger = logging.getLogger(__name__)

T = typing.TypeVar("T", bound=typing.Type[Record])


class Registry:
    """
    Maps wire resource types to record classes.  An instance is meant to be
    used as a class decorator:

    .. code-block:: python

       registry = Registry()

       @registry
       class Genre(Record):
           class Meta:
               type = "genres"

           name = Attr()

       registry.configure()

    """

    _classes: typing.Dict[str, typing.Type[Record]]

    def register(self, class_: typing.Type[Record]) -> None:
        if not isinstance(class_, type) or not issubclass(class_, Record):
            raise InvalidDeclarationError(f"{class_!r} is not a subclass of Record")
        descr = class_.__resource_descriptor__
        if descr is None:
            raise InvalidDeclarationError(
                f"{class_.__name__} cannot be registered as it does not declare Meta.type"
            )
        existing = self._classes.get(descr.name)
        if existing is not None and existing is not class_:
            raise InvalidDeclarationError(
                f'resource type "{descr.name}" is already registered for {existing.__name__}'
            )
        self._classes[descr.name] = class_
        logger.debug("registered %s as %s", class_.__name__, descr.name)

    def configure(self) -> None:
        """
        Check that every relationship destination names a registered type.

        :raises InvalidDeclarationError: when a destination is unknown.
        """
        for class_ in self._classes.values():
            descr = class_.resource_descriptor()
            for rel_descr in descr.relationships.values():
                for destination in rel_descr.destinations:
                    if destination not in self._classes:
                        raise InvalidDeclarationError(
                            f'relationship ({rel_descr.name}) of "{descr.name}" points to '
                            f'an unknown resource type "{destination}"'
                        )

    def query_class_by_type_name(
        self, name: str, source: typing.Optional[Source] = None
    ) -> typing.Type[Record]:
        try:
            return self._classes[name]
        except KeyError:
            raise UnknownResourceTypeError(name, source)

    def query_descriptor_by_type_name(self, name: str) -> ResourceDescriptor:
        return self.query_class_by_type_name(name).resource_descriptor()

    def check_include_directive(
        self, descr: ResourceDescriptor, directive: IncludeDirective
    ) -> None:
        """
        Check that every relationship named in ``directive`` is declared.  Nested
        names are looked up in the destination types of the relationship they
        are nested under, and are accepted when any of those types declares them.

        :param ResourceDescriptor descr: the descriptor of the resource ``directive`` starts from.
        :param IncludeDirective directive: a normalized include directive.
        :raises UnknownRelationshipError: when a name is not declared.
        """
        stack: typing.List[typing.Tuple[typing.Sequence[ResourceDescriptor], IncludeDirective]]
        stack = [((descr,), directive)]
        while stack:
            descrs, directive = stack.pop()
            for name, nested in directive.items():
                rel_descrs = [
                    rel_descr
                    for rel_descr in (d.find_relationship(name) for d in descrs)
                    if rel_descr is not None
                ]
                if not rel_descrs:
                    raise UnknownRelationshipError(", ".join(d.name for d in descrs), name)
                if not nested:
                    continue
                destinations: typing.Dict[str, ResourceDescriptor] = {}
                for rel_descr in rel_descrs:
                    for type_name in rel_descr.destinations or tuple(self._classes):
                        if type_name in self._classes and type_name not in destinations:
                            destinations[type_name] = self.query_descriptor_by_type_name(type_name)
                if destinations:
                    stack.append((tuple(destinations.values()), nested))

    def __contains__(self, name: str) -> bool:
        return name in self._classes

    def __iter__(self) -> typing.Iterator[typing.Type[Record]]:
        return iter(self._classes.values())

    def __call__(self, class_: T) -> T:
        self.register(class_)
        return class_

    def __init__(self):
        self._classes = {}

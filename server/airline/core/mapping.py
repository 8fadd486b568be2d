"""Declarative mapping between ORM entities and transport objects."""

from typing import Any, Dict, Iterable, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy import inspect as sa_inspect

T = TypeVar("T")


class MappingError(LookupError):
    """Raised when no mapping is registered for a source/target pair."""


def _target_fields(target: type) -> Tuple[str, ...]:
    if isinstance(target, type) and issubclass(target, BaseModel):
        return tuple(target.model_fields)
    mapper = sa_inspect(target, raiseerr=False)
    if mapper is None:
        raise MappingError(f"{target.__name__} is neither a pydantic model nor a mapped class")
    return tuple(attr.key for attr in mapper.column_attrs)


class Mapper:
    """
    Copies same-named fields from one type to another.

    Pairs are registered once at startup; ``map`` is pure and never touches
    the database.
    """

    def __init__(self):
        self._profiles: Dict[Tuple[type, type], Tuple[str, ...]] = {}

    def register(self, source: type, target: type, exclude: Iterable[str] = ()) -> "Mapper":
        """Declare that ``source`` instances can be mapped to ``target``."""
        skipped = set(exclude)
        self._profiles[(source, target)] = tuple(
            name for name in _target_fields(target) if name not in skipped
        )
        return self

    def register_both(self, first: type, second: type, exclude: Iterable[str] = ()) -> "Mapper":
        """Register a pair in both directions."""
        self.register(first, second)
        return self.register(second, first, exclude=exclude)

    def fields_for(self, source: type, target: type) -> Tuple[str, ...]:
        # Subclasses of a registered source (e.g. FlightRequest) reuse its profile
        for klass in source.__mro__:
            fields = self._profiles.get((klass, target))
            if fields is not None:
                return fields
        raise MappingError(f"No mapping registered from {source.__name__} to {target.__name__}")

    def map(self, obj: Any, target: Type[T]) -> Optional[T]:
        """Map one object, returning None for None."""
        if obj is None:
            return None
        fields = self.fields_for(type(obj), target)
        data = {name: getattr(obj, name) for name in fields if hasattr(obj, name)}
        return target(**data)

    def map_many(self, objs: Iterable[Any], target: Type[T]) -> list[T]:
        """Map a collection, preserving order."""
        return [self.map(obj, target) for obj in objs]


def create_mapper() -> Mapper:
    """Build the mapper with every entity/transport pair the services use."""
    from ..models import Booking, Flight, User
    from ..schemas.booking import BookingDto
    from ..schemas.flight import FlightBase, FlightDto
    from ..schemas.user import UserDto

    mapper = Mapper()
    mapper.register_both(Flight, FlightDto, exclude=("id",))
    mapper.register(FlightBase, Flight, exclude=("id",))
    mapper.register(User, UserDto)
    mapper.register_both(Booking, BookingDto, exclude=("id",))
    return mapper

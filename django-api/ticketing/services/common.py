"""Helpers shared by the services."""

from datetime import datetime
from typing import Callable, TypeVar

from ticketing.domain.errors import InvalidInputError

Clock = Callable[[], datetime]

IdT = TypeVar("IdT")


def parse_id(id_type: type[IdT], raw: str, label: str) -> IdT:
    """Parse a client-supplied identifier, raising InvalidInputError if malformed."""
    try:
        return id_type.from_string(raw)
    except (AttributeError, TypeError, ValueError):
        raise InvalidInputError(f"Invalid {label}: {raw!r}") from None


def require(fields: dict[str, object]) -> None:
    missing = [name for name, value in fields.items() if value in (None, "")]
    if missing:
        raise InvalidInputError(f"Missing required fields: {', '.join(missing)}")

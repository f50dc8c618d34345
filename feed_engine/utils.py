"""Utility helpers shared across the engine."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import TypeAdapter, ValidationError

from .errors import InvalidInputError

# Pydantic's ISO-8601 parser accepts any number of fractional digits and a
# trailing `Z`, independent of the interpreter's `datetime.fromisoformat`.
_DATETIME = TypeAdapter(datetime)


def parse_timestamp(value: Any, record_id: Optional[Any] = None) -> datetime:
    """Parse a datetime or ISO-8601 string into an aware UTC datetime.

    Naive values are taken to be UTC.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str) and value.strip():
        try:
            dt = _DATETIME.validate_python(value.strip())
        except ValidationError:
            raise InvalidInputError(f"created_at is not a valid timestamp: {value!r}", record_id) from None
    else:
        raise InvalidInputError(f"created_at is not a valid timestamp: {value!r}", record_id)

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def premium_flag(value: Any, record_id: Optional[Any] = None) -> bool:
    """Normalize a premium flag stored as a boolean or as the integers 0/1.

    None means not premium. Anything else is rejected.
    """
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return value == 1
    raise InvalidInputError(f"is_premium must be a boolean or 0/1, got {value!r}", record_id)


def utc_now() -> datetime:
    """Current instant in UTC. Only the outermost callers read the clock."""
    return datetime.now(timezone.utc)

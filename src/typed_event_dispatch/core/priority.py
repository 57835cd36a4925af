from __future__ import annotations

from enum import IntEnum
from typing import Any

from typed_event_dispatch.core.exceptions import InvalidArgument


class Priority(IntEnum):
    """Dispatch tiers. Lower values fire first."""

    HIGHEST = 0
    HIGH = 1
    NORMAL = 2
    LOW = 3

    @classmethod
    def ordered(cls) -> tuple[Priority, ...]:
        return tuple(sorted(cls))

    @classmethod
    def coerce(cls, value: Any) -> Priority:
        """Accept a member, a member name (any case) or its int value."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                raise InvalidArgument(f"Unknown priority '{value}'.") from None
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                return cls(value)
            except ValueError:
                raise InvalidArgument(f"Unknown priority value {value}.") from None
        raise InvalidArgument(f"Priority must be a Priority, name or int, got {type(value)}.")

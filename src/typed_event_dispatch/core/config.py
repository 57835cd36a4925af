from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from typed_event_dispatch.core.priority import Priority


class DispatcherConfig(BaseModel):
    """Behavioral switches for an `EventDispatcher`."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    default_priority: Priority = Field(
        default=Priority.NORMAL,
        description="Priority used when a registration call omits one.",
    )
    allow_duplicate_listeners: bool = Field(
        default=True,
        description="If False, registering a listener that is already present raises.",
    )
    report_unhandled_failures: bool = Field(
        default=False,
        description=(
            "Send failures that match no exception handler to the diagnostic sink "
            "instead of dropping them silently."
        ),
    )
    thread_safe: bool = Field(
        default=False,
        description="Guard registration and the dispatch-start snapshot with a lock.",
    )
    logger_name: str = Field(
        default="typed_event_dispatch",
        min_length=1,
        description="Logger used when none is injected.",
    )

    @field_validator("default_priority", mode="before")
    @classmethod
    def _coerce_priority(cls, value: Any) -> Priority:
        return Priority.coerce(value)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> DispatcherConfig:
        return cls(**dict(data))

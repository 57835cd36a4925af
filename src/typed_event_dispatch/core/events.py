"""Event base type and dispatch diagnostics."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(eq=False)
class Event:
    """Base class for dispatched events.

    Carries the creation timestamp and a one-way consumed flag. Any handler may
    call `consume()` to stop further delivery within the current dispatch.
    Both are set in `__new__`, so subclasses may be dataclasses or plain classes
    whose `__init__` does not call `super().__init__()`.
    """

    def __new__(cls, *args: Any, **kwargs: Any) -> Event:
        self = super().__new__(cls)
        self._created_at = time.time()
        self._consumed = False
        return self

    @property
    def created_at(self) -> float:
        """Creation time in seconds since the UNIX epoch."""
        return self._created_at

    @property
    def consumed(self) -> bool:
        return self._consumed

    def consume(self) -> None:
        self._consumed = True

    def get_created_at(self) -> float:
        return self._created_at

    get_timestamp = get_created_at

    def is_consumed(self) -> bool:
        return self._consumed


@dataclass(frozen=True)
class DiagnosticEvent:
    """Structured diagnostic emitted during dispatch."""

    kind: str
    payload: Dict[str, Any]
    error: Optional[BaseException] = None

from __future__ import annotations

from collections.abc import Callable, Hashable
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from typed_event_dispatch.core.events import Event
from typed_event_dispatch.core.exceptions import DuplicateRegistration, InvalidArgument
from typed_event_dispatch.core.priority import Priority

Consumer = Callable[[Event], None]


def _describe(obj: Any) -> str:
    return getattr(obj, "__qualname__", None) or repr(obj)


@dataclass(frozen=True)
class _Identity:
    """Index key for consumers that cannot be hashed; matches by identity."""

    ident: int


def _index_key(consumer: Any) -> Hashable:
    try:
        hash(consumer)
    except TypeError:
        return _Identity(id(consumer))
    return consumer


class ListenerRegistry:
    """Listeners grouped by priority, registration order kept within a tier."""

    def __init__(self) -> None:
        self._buckets: Dict[Priority, List[Any]] = {p: [] for p in Priority.ordered()}

    def add(self, priority: Priority, listener: Any, *, allow_duplicates: bool = True) -> None:
        if listener is None:
            raise InvalidArgument("Listener must not be None.")
        if not allow_duplicates and self.contains(listener):
            raise DuplicateRegistration(f"Listener {_describe(listener)} is already registered.")
        self._buckets[priority].append(listener)

    def remove(self, listener: Any) -> bool:
        """Remove the first occurrence, scanning tiers HIGHEST -> LOW."""
        for priority in Priority.ordered():
            bucket = self._buckets[priority]
            if listener in bucket:
                bucket.remove(listener)
                return True
        return False

    def contains(self, listener: Any) -> bool:
        return any(listener in bucket for bucket in self._buckets.values())

    def priority_of(self, listener: Any) -> Optional[Priority]:
        for priority in Priority.ordered():
            if listener in self._buckets[priority]:
                return priority
        return None

    def snapshot(self) -> tuple[Any, ...]:
        return tuple(
            listener for priority in Priority.ordered() for listener in self._buckets[priority]
        )

    def clear(self) -> None:
        for bucket in self._buckets.values():
            bucket.clear()

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._buckets.values())


@dataclass(frozen=True, eq=False)
class ConsumerRegistration:
    """A consumer filed under one priority for exactly one classification key."""

    priority: Priority
    key: Any
    consumer: Consumer

    def __call__(self, event: Event) -> None:
        self.consumer(event)


class ConsumerRegistry:
    """Consumers grouped by priority with a reverse index for O(1) lookup.

    A consumer maps to exactly one registration. Registering it again replaces the
    previous registration; the new one goes to the end of its tier.
    """

    def __init__(self) -> None:
        self._buckets: Dict[Priority, List[ConsumerRegistration]] = {
            p: [] for p in Priority.ordered()
        }
        self._index: Dict[Hashable, ConsumerRegistration] = {}

    def add(self, priority: Priority, key: Any, consumer: Consumer) -> ConsumerRegistration:
        if consumer is None:
            raise InvalidArgument("Consumer must not be None.")
        if not callable(consumer):
            raise InvalidArgument(f"Consumer must be callable, got {type(consumer)}.")
        if key is None:
            raise InvalidArgument("Classification key must not be None.")

        self.remove(consumer)
        registration = ConsumerRegistration(priority=priority, key=key, consumer=consumer)
        self._index[_index_key(consumer)] = registration
        self._buckets[priority].append(registration)
        return registration

    def remove(self, consumer: Consumer) -> bool:
        registration = self._lookup(consumer)
        if registration is None:
            return False
        del self._index[_index_key(consumer)]
        self._buckets[registration.priority].remove(registration)
        return True

    def contains(self, consumer: Consumer) -> bool:
        return self._lookup(consumer) is not None

    def registration_for(self, consumer: Consumer) -> Optional[ConsumerRegistration]:
        return self._lookup(consumer)

    def snapshot(self) -> tuple[ConsumerRegistration, ...]:
        return tuple(
            registration
            for priority in Priority.ordered()
            for registration in self._buckets[priority]
        )

    def snapshot_for(self, key: Any) -> tuple[ConsumerRegistration, ...]:
        return tuple(registration for registration in self.snapshot() if registration.key == key)

    def clear(self) -> None:
        self._index.clear()
        for bucket in self._buckets.values():
            bucket.clear()

    def __len__(self) -> int:
        return len(self._index)

    def _lookup(self, consumer: Any) -> Optional[ConsumerRegistration]:
        if consumer is None:
            return None
        return self._index.get(_index_key(consumer))

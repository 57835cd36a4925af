from __future__ import annotations

from typing import Any, Generic, Protocol, TypeVar

from typed_event_dispatch.core.dispatcher import EventDispatcher
from typed_event_dispatch.core.events import Event
from typed_event_dispatch.core.exceptions import InvalidArgument
from typed_event_dispatch.core.priority import Priority
from typed_event_dispatch.core.registry import Consumer

E = TypeVar("E", bound=Event)
L = TypeVar("L")
K = TypeVar("K")


class ListenersManager(Generic[E, L, K]):
    """Registration-only view of an `EventDispatcher`.

    Hand this to code that should subscribe and unsubscribe but never dispatch
    or change routing and exception handling.
    """

    def __init__(self, dispatcher: EventDispatcher[E, L, K]) -> None:
        if dispatcher is None:
            raise InvalidArgument("Event dispatcher must not be None.")
        self._dispatcher = dispatcher

    def add_listener(self, listener: L, priority: Priority | str | int | None = None) -> None:
        self._dispatcher.add_listener(listener, priority)

    def remove_listener(self, listener: L) -> bool:
        return self._dispatcher.remove_listener(listener)

    def has_listener(self, listener: L) -> bool:
        return self._dispatcher.has_listener(listener)

    def add_consumer(
        self, key: K, consumer: Consumer, priority: Priority | str | int | None = None
    ) -> None:
        self._dispatcher.add_consumer(key, consumer, priority)

    def remove_consumer(self, consumer: Consumer) -> bool:
        return self._dispatcher.remove_consumer(consumer)

    def has_consumer(self, consumer: Consumer) -> bool:
        return self._dispatcher.has_consumer(consumer)

    def get_listeners(self) -> tuple[L, ...]:
        return self._dispatcher.list_listeners()

    def get_consumers(self) -> tuple[Consumer, ...]:
        return self._dispatcher.list_consumers()


class ListenersManagerProvider(Protocol):
    """Anything that hands out a ready-to-use `ListenersManager` (duck-typed)."""

    def get_listeners_manager(self) -> ListenersManager[Any, Any, Any]:  # pragma: no cover
        ...

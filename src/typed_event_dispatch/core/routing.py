from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from itertools import chain
from typing import Any, Optional, Tuple, Union

from typed_event_dispatch.core.events import Event
from typed_event_dispatch.core.exceptions import InvalidArgument

HandlerBinding = Callable[[Any, Event], None]


class Listener:
    """Optional listener base with a catch-all callback.

    Listeners do not have to inherit from this; the dispatcher only stores and
    compares listener references. Bindings decide which method receives the event.
    """

    def on_event(self, key: Any, event: Event) -> None:
        pass


def method_binding(name: str) -> HandlerBinding:
    """Build a binding that delivers the event to `listener.<name>(event)`."""
    if not name or not name.strip():
        raise InvalidArgument("Method name must not be empty.")
    method_name = name.strip()

    def deliver(listener: Any, event: Event) -> None:
        getattr(listener, method_name)(event)

    deliver.__qualname__ = f"method_binding({method_name!r})"
    return deliver


def on_event_binding(key: Any) -> HandlerBinding:
    """Build a binding that calls `listener.on_event(key, event)`."""

    def deliver(listener: Any, event: Event) -> None:
        listener.on_event(key, event)

    deliver.__qualname__ = f"on_event_binding({key!r})"
    return deliver


def _validate_entry(key: Any, binding: Any) -> None:
    if key is None:
        raise InvalidArgument("Classification key must not be None.")
    try:
        hash(key)
    except TypeError:
        raise InvalidArgument(f"Classification key must be hashable, got {key!r}.") from None
    if not callable(binding):
        raise InvalidArgument(
            f"Handler binding for {key!r} must be callable, got {type(binding)}."
        )


class RoutingTable(dict):
    """Maps classification keys to handler bindings.

    Stores mappings only; the dispatcher performs delivery. One binding per key,
    the last write wins.

        table = RoutingTable()
        table["OPENED"] = ResourceListener.on_opened
        table.bind("CLOSED", method_binding("on_closed"))
    """

    def __init__(
        self,
        entries: Union[Mapping[Any, HandlerBinding], Iterable[Tuple[Any, HandlerBinding]], None] = None,
    ) -> None:
        super().__init__()
        if entries is not None:
            self.update(entries)

    def __setitem__(self, key: Any, binding: HandlerBinding) -> None:
        _validate_entry(key, binding)
        super().__setitem__(key, binding)

    def update(self, *args: Any, **kwargs: Any) -> None:  # type: ignore[override]
        if len(args) > 1:
            raise TypeError(f"update expected at most 1 positional argument, got {len(args)}")
        entries = args[0] if args else ()
        if isinstance(entries, Mapping):
            entries = entries.items()
        for key, binding in chain(entries, kwargs.items()):
            self[key] = binding

    def setdefault(self, key: Any, default: Optional[HandlerBinding] = None) -> HandlerBinding:  # type: ignore[override]
        existing = self.binding_for(key)
        if existing is None:
            self[key] = default  # type: ignore[assignment]
            return default  # type: ignore[return-value]
        return existing

    def bind(self, key: Any, binding: HandlerBinding) -> RoutingTable:
        self[key] = binding
        return self

    def binding_for(self, key: Any) -> Optional[HandlerBinding]:
        if key is None:
            return None
        try:
            return self.get(key)
        except TypeError:
            # unhashable keys can never have been bound
            return None

    def copy(self) -> RoutingTable:
        return RoutingTable(self)

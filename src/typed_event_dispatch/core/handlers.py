"""Exception handlers and the first-match resolution chain."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, List, Optional, Tuple, Type

from typed_event_dispatch.core.events import Event
from typed_event_dispatch.core.exceptions import InvalidArgument

ExceptionHandlerFn = Callable[[Any, Event, BaseException], None]


class ExceptionHandler:
    """Callable wrapper around `(listener_or_none, event, failure) -> None`.

    Adds `and_then` composition. The wrapped function is called as-is, so plain
    functions and lambdas registered directly on a chain behave the same way.
    """

    __slots__ = ("_fn",)

    def __init__(self, fn: ExceptionHandlerFn) -> None:
        if not callable(fn):
            raise InvalidArgument(f"Exception handler must be callable, got {type(fn)}.")
        self._fn = fn

    def __call__(self, listener: Any, event: Event, failure: BaseException) -> None:
        self._fn(listener, event, failure)

    def and_then(self, next_handler: ExceptionHandlerFn) -> ExceptionHandler:
        """Run this handler, then `next_handler`, for the same failure.

        If this handler raises, the error propagates and `next_handler` is skipped.
        """
        if next_handler is None:
            raise InvalidArgument("Next handler must not be None.")
        if not callable(next_handler):
            raise InvalidArgument(f"Next handler must be callable, got {type(next_handler)}.")
        first = self._fn

        def composed(listener: Any, event: Event, failure: BaseException) -> None:
            first(listener, event, failure)
            next_handler(listener, event, failure)

        return ExceptionHandler(composed)

    def __repr__(self) -> str:
        return f"ExceptionHandler({getattr(self._fn, '__qualname__', self._fn)!r})"


def compose_handlers(*handlers: ExceptionHandlerFn) -> ExceptionHandler:
    """Chain handlers left to right with `and_then` semantics."""
    if not handlers:
        raise InvalidArgument("At least one exception handler is required.")
    composed = handlers[0] if isinstance(handlers[0], ExceptionHandler) else ExceptionHandler(handlers[0])
    for handler in handlers[1:]:
        composed = composed.and_then(handler)
    return composed


def _validate_kind(kind: Any) -> None:
    if kind is None:
        raise InvalidArgument("Exception kind must not be None.")
    if not (isinstance(kind, type) and issubclass(kind, BaseException)):
        raise InvalidArgument(f"Exception kind must be an exception class, got {kind!r}.")


class ExceptionHandlerChain:
    """Ordered (kind, handler) entries resolved first-match-wins.

    At most one entry per exact kind: registering a kind again drops the old entry
    and appends the new one at the end. Matching uses `isinstance`, so a handler for
    `RuntimeError` also receives its subclasses.
    """

    def __init__(self) -> None:
        self._entries: List[Tuple[Type[BaseException], ExceptionHandlerFn]] = []

    def register(self, kind: Type[BaseException], handler: ExceptionHandlerFn) -> None:
        _validate_kind(kind)
        if handler is None:
            raise InvalidArgument("Exception handler must not be None.")
        if not callable(handler):
            raise InvalidArgument(f"Exception handler must be callable, got {type(handler)}.")
        self._entries = [(k, h) for k, h in self._entries if k is not kind]
        self._entries.append((kind, handler))

    def remove(self, kind: Type[BaseException]) -> bool:
        before = len(self._entries)
        self._entries = [(k, h) for k, h in self._entries if k is not kind]
        return len(self._entries) != before

    def clear(self) -> None:
        self._entries.clear()

    def resolve(self, failure: BaseException) -> Optional[ExceptionHandlerFn]:
        for kind, handler in self._entries:
            if isinstance(failure, kind):
                return handler
        return None

    def kinds(self) -> tuple[Type[BaseException], ...]:
        return tuple(k for k, _ in self._entries)

    def handler_for(self, kind: Type[BaseException]) -> Optional[ExceptionHandlerFn]:
        """Handler registered for exactly `kind` (no subclass matching)."""
        for k, handler in self._entries:
            if k is kind:
                return handler
        return None

    def __contains__(self, kind: object) -> bool:
        return any(k is kind for k, _ in self._entries)

    def __len__(self) -> int:
        return len(self._entries)

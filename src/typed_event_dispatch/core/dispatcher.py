from __future__ import annotations

import logging
import sys
import threading
import traceback
from collections.abc import Callable, Mapping
from contextlib import AbstractContextManager, nullcontext
from typing import Any, Generic, Optional, Type, TypeVar

from typed_event_dispatch.core.config import DispatcherConfig
from typed_event_dispatch.core.events import DiagnosticEvent, Event
from typed_event_dispatch.core.exceptions import (
    ExceptionHandlerFailure,
    HandlerFailure,
    InvalidArgument,
)
from typed_event_dispatch.core.handlers import ExceptionHandlerChain, ExceptionHandlerFn
from typed_event_dispatch.core.priority import Priority
from typed_event_dispatch.core.registry import Consumer, ConsumerRegistry, ListenerRegistry
from typed_event_dispatch.core.routing import HandlerBinding, RoutingTable

E = TypeVar("E", bound=Event)
L = TypeVar("L")
K = TypeVar("K")


def _describe(obj: Any) -> str:
    return getattr(obj, "__qualname__", None) or type(obj).__name__


def stderr_sink(event: DiagnosticEvent) -> None:
    """Default diagnostic sink.

    Writes failed exception handlers to stderr, and unmatched failures when the
    dispatcher flags them as reported.
    """
    if event.error is None:
        return
    if event.kind == "exception_handler_failed":
        cause = event.error.__cause__ or event.error
        print(f"Exception handler failed: {cause}", file=sys.stderr)
    elif event.kind == "failure_unhandled" and event.payload.get("reported"):
        cause = event.error
        print(
            f"Unhandled {type(cause).__name__} during dispatch of {event.payload.get('key')!r}: {cause}",
            file=sys.stderr,
        )
    else:
        return
    traceback.print_exception(type(cause), cause, cause.__traceback__, file=sys.stderr)


class EventDispatcher(Generic[E, L, K]):
    """Routes classified events to listeners and consumers by priority.

    Dispatch runs synchronously on the caller's thread:

    1. The routing table maps the classification key to a handler binding. No binding,
       no delivery.
    2. Listeners are called through the binding, HIGHEST -> LOW, registration order
       within a tier.
    3. Consumers registered for exactly that key run next, in the same order.

    Consuming the event stops the current loop; consuming it during the listener
    loop also skips the consumers. Failures raised by listeners or consumers go to
    the first matching exception handler and never reach the caller of `dispatch`.
    """

    def __init__(
        self,
        *,
        config: DispatcherConfig | None = None,
        routing_table: Mapping[K, HandlerBinding] | None = None,
        fallback_handler: ExceptionHandlerFn | None = None,
        on_diagnostic: Callable[[DiagnosticEvent], None] | None = stderr_sink,
        logger: logging.Logger | None = None,
    ) -> None:
        self._config = config or DispatcherConfig()
        self._listeners = ListenerRegistry()
        self._consumers = ConsumerRegistry()
        self._routing_table = RoutingTable()
        self._exception_handlers = ExceptionHandlerChain()
        self._fallback_handler: ExceptionHandlerFn | None = None
        self._on_diagnostic = on_diagnostic
        self._logger = logger or logging.getLogger(self._config.logger_name)
        self._lock: Optional[threading.RLock] = (
            threading.RLock() if self._config.thread_safe else None
        )

        if routing_table is not None:
            self.set_routing_table(routing_table)
        if fallback_handler is not None:
            self.set_fallback_exception_handler(fallback_handler)

    @property
    def config(self) -> DispatcherConfig:
        return self._config

    def _guard(self) -> AbstractContextManager[Any]:
        return self._lock if self._lock is not None else nullcontext()

    def _emit(
        self, kind: str, payload: dict, error: BaseException | None = None
    ) -> None:
        event = DiagnosticEvent(kind=kind, payload=payload, error=error)
        if self._on_diagnostic:
            try:
                self._on_diagnostic(event)
            except Exception:
                # A broken sink must not break dispatch.
                self._logger.debug("Diagnostic sink failed", exc_info=True)
        if error:
            self._logger.debug("dispatch.%s error=%s payload=%s", kind, error, payload)
        else:
            self._logger.debug("dispatch.%s payload=%s", kind, payload)

    def _priority(self, priority: Any) -> Priority:
        if priority is None:
            return self._config.default_priority
        return Priority.coerce(priority)

    # -- listeners -----------------------------------------------------------

    def add_listener(self, listener: L, priority: Priority | str | int | None = None) -> None:
        """Register a listener; duplicates fire once per registration."""
        if listener is None:
            raise InvalidArgument("Listener must not be None.")
        tier = self._priority(priority)
        with self._guard():
            self._listeners.add(
                tier,
                listener,
                allow_duplicates=self._config.allow_duplicate_listeners,
            )
        self._logger.debug("Listener registered: %s (priority=%s)", _describe(listener), tier.name)

    def remove_listener(self, listener: L) -> bool:
        """Remove one occurrence of `listener`. Returns False if it was not registered."""
        with self._guard():
            return self._listeners.remove(listener)

    def has_listener(self, listener: L) -> bool:
        with self._guard():
            return self._listeners.contains(listener)

    def list_listeners(self) -> tuple[L, ...]:
        with self._guard():
            return self._listeners.snapshot()

    # -- consumers -----------------------------------------------------------

    def add_consumer(
        self,
        key: K,
        consumer: Consumer,
        priority: Priority | str | int | None = None,
    ) -> None:
        """Register `consumer` for events dispatched under exactly `key`."""
        if consumer is None:
            raise InvalidArgument("Consumer must not be None.")
        if key is None:
            raise InvalidArgument("Classification key must not be None.")
        tier = self._priority(priority)
        with self._guard():
            self._consumers.add(tier, key, consumer)
        self._logger.debug(
            "Consumer registered: %s for %r (priority=%s)", _describe(consumer), key, tier.name
        )

    def remove_consumer(self, consumer: Consumer) -> bool:
        with self._guard():
            return self._consumers.remove(consumer)

    def has_consumer(self, consumer: Consumer) -> bool:
        with self._guard():
            return self._consumers.contains(consumer)

    def list_consumers(self) -> tuple[Consumer, ...]:
        with self._guard():
            return tuple(registration.consumer for registration in self._consumers.snapshot())

    # -- routing table -------------------------------------------------------

    def create_routing_table(self) -> RoutingTable:
        """Return a new, empty table. It takes effect only once passed to `set_routing_table`."""
        return RoutingTable()

    def set_routing_table(self, table: Mapping[K, HandlerBinding]) -> None:
        """Replace every binding with the contents of `table`."""
        if table is None:
            raise InvalidArgument("Routing table must not be None.")
        replacement = RoutingTable(table)
        with self._guard():
            self._routing_table = replacement
        self._logger.debug("Routing table replaced (%d bindings)", len(replacement))

    def get_routing_table(self) -> RoutingTable:
        with self._guard():
            return self._routing_table.copy()

    def bind(self, key: K, binding: HandlerBinding) -> None:
        with self._guard():
            self._routing_table[key] = binding

    # -- exception handlers --------------------------------------------------

    def add_exception_handler(
        self, kind: Type[BaseException], handler: ExceptionHandlerFn
    ) -> None:
        """Register `handler` for failures of `kind`, replacing any handler for that exact kind."""
        with self._guard():
            self._exception_handlers.register(kind, handler)
        self._logger.debug("Exception handler registered for %s", getattr(kind, "__name__", kind))

    def remove_exception_handler(self, kind: Type[BaseException]) -> bool:
        with self._guard():
            return self._exception_handlers.remove(kind)

    def set_fallback_exception_handler(self, handler: ExceptionHandlerFn | None) -> None:
        """Handler for failures no registered kind matches. `None` restores silent drop."""
        if handler is not None and not callable(handler):
            raise InvalidArgument(f"Fallback handler must be callable, got {type(handler)}.")
        with self._guard():
            self._fallback_handler = handler

    # -- dispatch ------------------------------------------------------------

    def dispatch(self, key: K, event: E) -> None:
        """Deliver `event` to listeners, then to consumers registered for `key`.

        Never raises because of listener, consumer or exception handler failures.
        """
        with self._guard():
            binding = self._routing_table.binding_for(key)
            if binding is None:
                listeners: tuple[Any, ...] = ()
                consumers: tuple[Any, ...] = ()
            else:
                listeners = self._listeners.snapshot()
                consumers = self._consumers.snapshot_for(key)

        if binding is None:
            self._emit("unrouted", {"key": key})
            return

        for listener in listeners:
            try:
                binding(listener, event)
            except Exception as exc:
                self._handle_failure(listener, event, exc, key=key)
            if event.consumed:
                self._emit(
                    "dispatch_consumed",
                    {"key": key, "stage": "listeners", "by": _describe(listener)},
                )
                return

        for registration in consumers:
            try:
                registration(event)
            except Exception as exc:
                self._handle_failure(None, event, exc, key=key)
            if event.consumed:
                self._emit(
                    "dispatch_consumed",
                    {"key": key, "stage": "consumers", "by": _describe(registration.consumer)},
                )
                return

    def _handle_failure(
        self, listener: Any, event: E, failure: Exception, *, key: Any
    ) -> None:
        handler_failure = HandlerFailure(listener, event, failure)
        handler_failure.__cause__ = failure
        self._emit(
            "handler_failed",
            {"key": key, "listener": listener, "error_type": type(failure).__name__},
            error=handler_failure,
        )

        with self._guard():
            handler = self._exception_handlers.resolve(failure)
            if handler is None:
                handler = self._fallback_handler

        if handler is None:
            self._report_unhandled(key, failure)
            return

        try:
            handler(listener, event, failure)
        except Exception as handler_exc:
            error = ExceptionHandlerFailure(failure, handler_exc)
            error.__cause__ = handler_exc
            self._emit(
                "exception_handler_failed",
                {
                    "key": key,
                    "handler": _describe(handler),
                    "error_type": type(failure).__name__,
                },
                error=error,
            )

    def _report_unhandled(self, key: Any, failure: Exception) -> None:
        self._emit(
            "failure_unhandled",
            {
                "key": key,
                "error_type": type(failure).__name__,
                "reported": self._config.report_unhandled_failures,
            },
            error=failure,
        )

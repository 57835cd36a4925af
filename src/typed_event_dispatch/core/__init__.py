"""Core primitives for typed-event-dispatch."""

from typed_event_dispatch.core.config import DispatcherConfig
from typed_event_dispatch.core.dispatcher import EventDispatcher, stderr_sink
from typed_event_dispatch.core.events import DiagnosticEvent, Event
from typed_event_dispatch.core.exceptions import (
    DispatchFailure,
    DuplicateRegistration,
    EventDispatchError,
    ExceptionHandlerFailure,
    HandlerFailure,
    InvalidArgument,
    RegistrationError,
)
from typed_event_dispatch.core.handlers import (
    ExceptionHandler,
    ExceptionHandlerChain,
    compose_handlers,
)
from typed_event_dispatch.core.manager import ListenersManager, ListenersManagerProvider
from typed_event_dispatch.core.priority import Priority
from typed_event_dispatch.core.registry import (
    ConsumerRegistration,
    ConsumerRegistry,
    ListenerRegistry,
)
from typed_event_dispatch.core.routing import (
    HandlerBinding,
    Listener,
    RoutingTable,
    method_binding,
    on_event_binding,
)

__all__ = [
    "EventDispatchError",
    "RegistrationError",
    "InvalidArgument",
    "DuplicateRegistration",
    "DispatchFailure",
    "HandlerFailure",
    "ExceptionHandlerFailure",
    "Event",
    "DiagnosticEvent",
    "Priority",
    "HandlerBinding",
    "Listener",
    "RoutingTable",
    "method_binding",
    "on_event_binding",
    "ExceptionHandler",
    "ExceptionHandlerChain",
    "compose_handlers",
    "ListenerRegistry",
    "ConsumerRegistry",
    "ConsumerRegistration",
    "DispatcherConfig",
    "EventDispatcher",
    "stderr_sink",
    "ListenersManager",
    "ListenersManagerProvider",
]

from __future__ import annotations

from typing import Any


class EventDispatchError(Exception):
    """Base error for typed-event-dispatch."""


class RegistrationError(EventDispatchError):
    """Raised when a registration call is rejected."""


class InvalidArgument(RegistrationError, ValueError):
    """A required reference was missing or had the wrong shape."""


class DuplicateRegistration(InvalidArgument):
    """The same listener was registered twice while duplicates are disabled."""


class DispatchFailure(EventDispatchError):
    """Failure observed during dispatch. Never raised out of `dispatch()`."""


class HandlerFailure(DispatchFailure):
    """A listener binding or consumer raised while handling an event."""

    def __init__(self, listener: Any, event: Any, failure: BaseException) -> None:
        self.listener = listener
        self.event = event
        self.failure = failure
        super().__init__(f"Handler raised {type(failure).__name__}: {failure}")


class ExceptionHandlerFailure(DispatchFailure):
    """An exception handler raised while handling a dispatch failure."""

    def __init__(self, original: BaseException, failure: BaseException) -> None:
        self.original = original
        self.failure = failure
        super().__init__(
            f"Exception handler failed on {type(original).__name__}: {failure}"
        )

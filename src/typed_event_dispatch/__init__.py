"""typed-event-dispatch: priority-ordered, in-process event dispatch."""

from typed_event_dispatch.core import *  # noqa: F401,F403
from typed_event_dispatch.core import __all__

__version__ = "0.1.0"

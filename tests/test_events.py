import time
from dataclasses import dataclass

import pytest
from pydantic import ValidationError

from typed_event_dispatch.core import DispatcherConfig, Event, InvalidArgument, Priority


@dataclass(eq=False)
class FileEvent(Event):
    path: str = ""


class PlainEvent(Event):
    def __init__(self, code: int) -> None:
        super().__init__()
        self.code = code


def test_event_starts_unconsumed_with_timestamp() -> None:
    before = time.time()
    event = Event()
    after = time.time()

    assert before <= event.created_at <= after
    assert event.get_created_at() == event.created_at
    assert event.get_timestamp() == event.created_at
    assert event.consumed is False
    assert event.is_consumed() is False


def test_consume_is_idempotent() -> None:
    event = Event()
    created = event.created_at

    event.consume()
    event.consume()

    assert event.consumed is True
    assert event.is_consumed() is True
    assert event.created_at == created


def test_created_at_is_read_only() -> None:
    event = Event()
    with pytest.raises(AttributeError):
        event.created_at = 0.0  # type: ignore[misc]
    with pytest.raises(AttributeError):
        event.consumed = False  # type: ignore[misc]


def test_event_subclasses_keep_base_state() -> None:
    file_event = FileEvent(path="/tmp/x")
    plain = PlainEvent(7)

    assert file_event.path == "/tmp/x"
    assert file_event.consumed is False
    assert plain.code == 7
    assert plain.created_at > 0
    plain.consume()
    assert plain.consumed is True


class BareEvent(Event):
    def __init__(self, code: int) -> None:
        self.code = code


def test_subclass_without_super_init_still_has_base_state() -> None:
    before = time.time()
    event = BareEvent(3)

    assert event.code == 3
    assert event.created_at >= before
    assert event.consumed is False
    event.consume()
    assert event.is_consumed() is True


def test_dataclass_subclass_repr_shows_only_its_fields() -> None:
    assert repr(FileEvent(path="/tmp/y")) == "FileEvent(path='/tmp/y')"


def test_priority_order_and_coercion() -> None:
    assert Priority.ordered() == (Priority.HIGHEST, Priority.HIGH, Priority.NORMAL, Priority.LOW)
    assert list(Priority) == list(Priority.ordered())
    assert Priority.coerce("high") is Priority.HIGH
    assert Priority.coerce(" LOW ") is Priority.LOW
    assert Priority.coerce(0) is Priority.HIGHEST
    assert Priority.coerce(Priority.NORMAL) is Priority.NORMAL

    for bad in ("urgent", 9, True, None, 1.5):
        with pytest.raises(InvalidArgument):
            Priority.coerce(bad)


def test_dispatcher_config_defaults_and_validation() -> None:
    config = DispatcherConfig()
    assert config.default_priority is Priority.NORMAL
    assert config.allow_duplicate_listeners is True
    assert config.report_unhandled_failures is False
    assert config.thread_safe is False

    loaded = DispatcherConfig.from_mapping({"default_priority": "low", "thread_safe": True})
    assert loaded.default_priority is Priority.LOW
    assert loaded.thread_safe is True

    with pytest.raises(ValidationError):
        DispatcherConfig(default_priority="urgent")
    with pytest.raises(ValidationError):
        DispatcherConfig(unknown_option=True)  # type: ignore[call-arg]
    with pytest.raises(ValidationError):
        config.thread_safe = True  # type: ignore[misc]

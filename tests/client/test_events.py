import pytest
from unittest.mock import MagicMock

from spark_io.events import ListenerBus
from spark_io.models import AnalogRead, DigitalRead, Lifecycle, event_name

"""
Client Tests: listener bus and typed event names.
"""


@pytest.mark.parametrize("event, expected", [
    (DigitalRead("D0"), "digital-read-D0"),
    (DigitalRead("A3"), "digital-read-A3"),
    (AnalogRead("A7"), "analog-read-A7"),
    (Lifecycle.READY, "ready"),
    (Lifecycle.ERROR, "error"),
    ("connect", "connect"),
])
def test_event_names(event, expected):
    assert event_name(event) == expected


def test_typed_and_string_names_share_listeners():
    bus = ListenerBus()
    handler = MagicMock()
    bus.on(DigitalRead("D5"), handler)

    assert bus.listener_count("digital-read-D5") == 1
    assert bus.emit("digital-read-D5", 1) is True
    handler.assert_called_once_with(1)


def test_emit_without_listeners_returns_false():
    assert ListenerBus().emit("ready") is False


def test_handlers_run_in_registration_order():
    bus = ListenerBus()
    calls = []
    bus.on("ready", lambda: calls.append(1))
    bus.on("ready", lambda: calls.append(2))

    bus.emit(Lifecycle.READY)
    assert calls == [1, 2]


def test_non_callable_handler_is_rejected():
    with pytest.raises(TypeError):
        ListenerBus().on("ready", "not a function")


def test_digital_and_analog_events_are_distinct():
    assert DigitalRead("A0") != AnalogRead("A0")
    assert DigitalRead("A0") == DigitalRead("A0")

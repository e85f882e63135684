"""
Data Models shared by the protocol, connection and controller layers.

Defines the wire action codes, the decoded frame, the discovered endpoint,
the RGB state and the typed events consumers subscribe to.
"""
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import ClassVar, Optional


class Action(IntEnum):
    PIN_MODE = 0x00
    DIGITAL_WRITE = 0x01
    ANALOG_WRITE = 0x02
    DIGITAL_READ = 0x03
    ANALOG_READ = 0x04
    REPORTING = 0x05
    SAMPLE_INTERVAL = 0x06
    INTERNAL_RGB = 0x07
    SERVO_WRITE = 0x41


class Lifecycle(str, Enum):
    READY = "ready"
    CONNECT = "connect"
    ERROR = "error"


class ControllerState(str, Enum):
    CREATED = "created"
    DISCOVERING = "discovering"
    CONNECTING = "connecting"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class DecodedFrame:
    """One incoming 4-byte frame, with the 7-bit pair already joined."""
    action: int
    pin: int
    value: int


@dataclass(frozen=True)
class Endpoint:
    """Host and port of the device's binary protocol, as reported by the cloud."""
    host: str
    port: int

    @classmethod
    def parse(cls, address: str) -> "Endpoint":
        host, _, port = address.rpartition(":")
        if not host or not port:
            raise ValueError(f"Expected 'host:port', got {address!r}")
        return cls(host=host, port=int(port, 10))

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


# --- Events ---

@dataclass(frozen=True)
class ReadEvent:
    """Base class for input-read events. `name` is the string form used by the listener bus."""
    kind: ClassVar[str] = ""
    pin: str

    @property
    def name(self) -> str:
        return f"{self.kind}-read-{self.pin}"


@dataclass(frozen=True)
class DigitalRead(ReadEvent):
    kind: ClassVar[str] = "digital"


@dataclass(frozen=True)
class AnalogRead(ReadEvent):
    kind: ClassVar[str] = "analog"


def event_name(event) -> str:
    """Accepts a string, a Lifecycle member or a ReadEvent and returns its bus name."""
    if isinstance(event, ReadEvent):
        return event.name
    if isinstance(event, Lifecycle):
        return event.value
    return str(event)


# --- RGB ---

def _clamp(value, lower: int = 0, upper: int = 255) -> int:
    return min(upper, max(lower, int(value)))


@dataclass(frozen=True)
class RgbColor:
    """State of the on-board RGB LED. Channels are None until first set."""
    red: Optional[int] = None
    green: Optional[int] = None
    blue: Optional[int] = None

    @classmethod
    def parse(cls, *args) -> "RgbColor":
        """
        Resolves the accepted input shapes into a clamped color:
        - three channel values: parse(255, 128, 0)
        - a 3-element sequence: parse([255, 128, 0])
        - a mapping or object with red/green/blue: parse({"red": 255, ...})
        - a hex string, '#' optional: parse("#ff8000")
        """
        if len(args) == 3:
            values = args
        elif len(args) == 1:
            values = cls._unpack(args[0])
        else:
            raise TypeError(f"Expected 1 or 3 arguments, got {len(args)}")

        red, green, blue = (_clamp(v) for v in values)
        return cls(red=red, green=green, blue=blue)

    @staticmethod
    def _unpack(value):
        if isinstance(value, str):
            text = value.strip().lstrip("#")
            if len(text) != 6:
                raise ValueError(f"Expected a 6 digit hex color, got {value!r}")
            return int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16)
        if isinstance(value, Mapping):
            return value["red"], value["green"], value["blue"]
        if isinstance(value, (list, tuple, bytes, bytearray)):
            if len(value) != 3:
                raise ValueError(f"Expected 3 channel values, got {len(value)}")
            return tuple(value)
        if all(hasattr(value, channel) for channel in ("red", "green", "blue")):
            return value.red, value.green, value.blue
        raise TypeError(f"Unsupported RGB input: {value!r}")

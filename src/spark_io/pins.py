"""
Pin Capability Table.

Describes the 18 pin slots exposed by the voodoospark firmware and the
modes each of them accepts. This module is responsible for:
- Defining the `ModeCode` values understood by the firmware.
- Building the per-controller `PinDescriptor` records.
- Translating "Dn"/"An" pin names into firmware pin indices.
- Rejecting mode requests a pin cannot honour.
"""
import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import List, Optional, Union

from spark_io.errors import UnsupportedModeError

logger = logging.getLogger(__name__)


class ModeCode(IntEnum):
    INPUT = 0
    OUTPUT = 1
    ANALOG = 2
    PWM = 3
    SERVO = 4


# Offset of A0 inside the pin table. Slots 8 and 9 are reserved.
ANALOG_OFFSET = 10

_IO = (ModeCode.INPUT, ModeCode.OUTPUT)
_PWM_SERVO = (ModeCode.PWM, ModeCode.SERVO)

PINS = (
    ("D0", _IO + _PWM_SERVO),
    ("D1", _IO + _PWM_SERVO),
    ("D2", _IO),
    ("D3", _IO),
    ("D4", _IO),
    ("D5", _IO),
    ("D6", _IO),
    ("D7", _IO),
    ("", ()),
    ("", ()),
    ("A0", _IO + (ModeCode.ANALOG,) + _PWM_SERVO),
    ("A1", _IO + (ModeCode.ANALOG,) + _PWM_SERVO),
    ("A2", _IO + (ModeCode.ANALOG,)),
    ("A3", _IO + (ModeCode.ANALOG,)),
    ("A4", _IO + (ModeCode.ANALOG,) + _PWM_SERVO),
    ("A5", _IO + (ModeCode.ANALOG,) + _PWM_SERVO),
    ("A6", _IO + (ModeCode.ANALOG,) + _PWM_SERVO),
    ("A7", _IO + (ModeCode.ANALOG,) + _PWM_SERVO),
)

# Analog channel numbers, A0..A7
ANALOG_PINS = list(range(len(PINS) - ANALOG_OFFSET))

# The table accepts PWM on more pins than the firmware has been confirmed to drive.
CONFIRMED_PWM_PINS = frozenset({"D0", "D1", "A0", "A1", "A5"})

PinRef = Union[str, int]


@dataclass
class PinDescriptor:
    """Per-pin record of supported modes, current mode and last value."""
    name: str
    supported_modes: frozenset
    mode: Optional[ModeCode] = None
    value: int = 0

    @property
    def is_reserved(self) -> bool:
        return not self.supported_modes


def build_pin_table() -> List[PinDescriptor]:
    """Creates a fresh, mutable set of descriptors for one controller."""
    return [
        PinDescriptor(
            name=name,
            supported_modes=frozenset(modes),
            mode=modes[0] if modes else None,
        )
        for name, modes in PINS
    ]


def resolve_index(pin: PinRef, analog: bool = False) -> int:
    """
    Maps a pin reference onto its index in the pin table.

    "D3" -> 3, "A3" -> 13. A bare integer is a digital index, unless
    `analog` is set, in which case it names an analog channel ("A<n>").
    No bounds check is done here.
    """
    if isinstance(pin, int):
        return pin + ANALOG_OFFSET if analog else pin

    name = str(pin).strip().upper()
    if name.startswith("A"):
        return int(name[1:]) + ANALOG_OFFSET
    if name.startswith("D"):
        return int(name[1:])
    return resolve_index(int(name), analog=analog)


def normalize_name(pin: PinRef, analog: bool = False) -> str:
    """Canonical "Dn"/"An" spelling of a pin reference, used in event names."""
    if isinstance(pin, int):
        return f"A{pin}" if analog else f"D{pin}"
    name = str(pin).strip().upper()
    if name[:1] not in ("A", "D"):
        return f"A{int(name)}" if analog else f"D{int(name)}"
    return name


def validate_mode(pins: List[PinDescriptor], index: int, mode: ModeCode):
    """Raises UnsupportedModeError if `mode` is not in the pin's capability set."""
    descriptor = pins[index]
    if mode not in descriptor.supported_modes:
        raise UnsupportedModeError(descriptor.name or f"#{index}", mode)

    if mode == ModeCode.PWM and descriptor.name not in CONFIRMED_PWM_PINS:
        logger.debug(f"PWM requested on {descriptor.name}; true PWM is only confirmed on {sorted(CONFIRMED_PWM_PINS)}")

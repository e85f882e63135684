"""
Event Router.

Turns decoded frames into named read events, caching the latest value on
the addressed pin descriptor before emitting:
- DIGITAL_READ  -> "digital-read-D<pin>" with the raw value.
- ANALOG_READ   -> "analog-read-A<pin - 10>" with the value shifted to 10 bits.
- REPORTING     -> one "digital-read-{D|A}<bit>" event per listened bit of
                   an 8-bit port bitmask.
Any other action is dropped.
"""
import logging
from typing import List

from spark_io.codec import to_analog_resolution
from spark_io.events import ListenerBus
from spark_io.models import Action, AnalogRead, DecodedFrame, DigitalRead
from spark_io.pins import ANALOG_OFFSET, PinDescriptor

logger = logging.getLogger(__name__)

PORT_WIDTH = 8


class EventRouter:
    pins: List[PinDescriptor]
    bus: ListenerBus

    def __init__(self, pins: List[PinDescriptor], bus: ListenerBus):
        self.pins = pins
        self.bus = bus

    def route(self, frame: DecodedFrame):
        if frame.action == Action.REPORTING:
            self._route_port_report(frame)
        elif frame.action == Action.DIGITAL_READ:
            self._publish(frame.pin, DigitalRead(f"D{frame.pin}"), frame.value)
        elif frame.action == Action.ANALOG_READ:
            event = AnalogRead(f"A{frame.pin - ANALOG_OFFSET}")
            self._publish(frame.pin, event, to_analog_resolution(frame.value))
        else:
            logger.debug(f"Dropping frame with unknown action 0x{frame.action:02x}: {frame}")

    def _route_port_report(self, frame: DecodedFrame):
        port = frame.pin
        prefix = "A" if port else "D"

        for bit in range(PORT_WIDTH):
            event = DigitalRead(f"{prefix}{bit}")
            # Bits nobody listens to are neither cached nor emitted
            if not self.bus.has_listeners(event):
                continue
            self._publish(bit + ANALOG_OFFSET * port, event, frame.value & (1 << bit))

    def _publish(self, index: int, event, value: int):
        if not 0 <= index < len(self.pins):
            logger.debug(f"Dropping {event.name}: pin index {index} is outside the pin table")
            return
        self.pins[index].value = value
        logger.debug(f"{event.name} -> {value}")
        self.bus.emit(event, value)

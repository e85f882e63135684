"""
Wire codec for the voodoospark binary protocol.

This module is responsible for:
- The 7-bit pair encoding used for values above 127.
- Compressing analog readings to the 10-bit convention consumers expect.
- Reassembling the incoming byte stream into fixed 4-byte frames.
"""
import logging
from typing import List, Optional, Sequence, Tuple, Union

from spark_io.models import DecodedFrame

logger = logging.getLogger(__name__)

FRAME_SIZE = 4


def to_seven_bit_pair(value: int) -> Tuple[int, int]:
    """Splits a 14-bit value into (lsb, msb), 7 bits each."""
    return value & 0x7F, (value >> 7) & 0x7F


def from_seven_bit_pair(lsb: Union[int, Sequence[int]], msb: Optional[int] = None) -> int:
    """Joins a 7-bit pair back into an integer. Accepts (lsb, msb) or a single [lsb, msb]."""
    if msb is None:
        lsb, msb = lsb
    return lsb | (msb << 7)


def to_analog_resolution(value: int) -> int:
    # Firmata-style 10-bit ADC values
    return value >> 2


class FrameDecoder:
    """
    Accumulates incoming bytes and cuts them into 4-byte frames.

    Frames are `[action, pin, value_lsb, value_msb]`. There is no
    checksum and no resynchronisation: a dropped byte misaligns every
    frame that follows.
    """
    _queue: bytearray

    def __init__(self):
        self._queue = bytearray()

    @property
    def pending(self) -> int:
        """Number of queued bytes not yet forming a full frame."""
        return len(self._queue)

    def feed(self, chunk: bytes) -> List[DecodedFrame]:
        self._queue.extend(chunk)

        frames = []
        while len(self._queue) >= FRAME_SIZE:
            action, pin, lsb, msb = self._queue[:FRAME_SIZE]
            del self._queue[:FRAME_SIZE]
            frames.append(DecodedFrame(action=action, pin=pin, value=from_seven_bit_pair(lsb, msb)))

        if self._queue:
            logger.debug(f"{len(self._queue)} byte(s) buffered awaiting frame alignment")
        return frames

"""
TCP Connection to the device firmware.

This module provides:
- `DeviceConnection`, which owns the asyncio stream pair for one device.
- Fire-and-forget writes of raw command buffers.
- A single background read loop that feeds the `FrameDecoder` and hands
  every decoded frame, in arrival order, to the `on_frame` callback.
"""
import asyncio
import logging
from typing import Callable, Optional

from spark_io.codec import FrameDecoder
from spark_io.errors import NotConnectedError
from spark_io.models import DecodedFrame

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 1024


class DeviceConnection:
    host: Optional[str]
    port: Optional[int]
    is_reading: bool
    decoder: FrameDecoder
    on_frame: Optional[Callable[[DecodedFrame], None]]
    _reader: Optional[asyncio.StreamReader]
    _writer: Optional[asyncio.StreamWriter]
    _read_task: Optional[asyncio.Task]

    def __init__(self, on_frame: Optional[Callable[[DecodedFrame], None]] = None, decoder: Optional[FrameDecoder] = None):
        self.host = None
        self.port = None
        self.is_reading = False
        self.decoder = decoder or FrameDecoder()
        self.on_frame = on_frame
        self._reader = None
        self._writer = None
        self._read_task = None

    @property
    def is_open(self) -> bool:
        return self._writer is not None and not self._writer.is_closing()

    async def open(self, host: str, port: int):
        """
        Connects to the device and starts the read loop.
        Connection failures (OSError) propagate to the caller.
        """
        if self._writer is not None:
            raise RuntimeError("DeviceConnection.open() may only be called once")

        logger.info(f"Opening TCP connection to {host}:{port}...")
        reader, writer = await asyncio.open_connection(host, port)
        self.host, self.port = host, port
        self._reader, self._writer = reader, writer
        logger.info(f"Connected to device at {host}:{port}")

        self.start_reading()

    def start_reading(self):
        """Installs the read loop. Safe to call any number of times; only one loop ever runs."""
        if self.is_reading or self._reader is None:
            return
        self.is_reading = True
        self._read_task = asyncio.create_task(self._read_loop(), name="spark-io-reader")

    def write(self, buffer: bytes):
        if self._writer is None:
            raise NotConnectedError("No connection to the device; wait for the 'ready' event")
        logger.debug(f"-> {bytes(buffer).hex(' ')}")
        self._writer.write(bytes(buffer))

    async def _read_loop(self):
        try:
            while True:
                chunk = await self._reader.read(READ_CHUNK_SIZE)
                if not chunk:
                    logger.warning("Device closed the connection.")
                    break
                logger.debug(f"<- {chunk.hex(' ')}")

                for frame in self.decoder.feed(chunk):
                    if self.on_frame is None:
                        continue
                    try:
                        self.on_frame(frame)
                    except Exception as e:
                        logger.error(f"Error handling frame {frame}: {e}")

        except asyncio.CancelledError:
            logger.info("Read loop has been cancelled.")
            raise
        except ConnectionError as e:
            logger.error(f"Connection to device lost: {e}")

    async def close(self):
        """Stops the read loop and closes the socket. There is no way to reopen it."""
        if self._read_task:
            self._read_task.cancel()
            try:
                await self._read_task
            except asyncio.CancelledError:
                pass
            self._read_task = None

        if self._writer is not None and not self._writer.is_closing():
            self._writer.close()
            try:
                await self._writer.wait_closed()
            except ConnectionError as e:
                logger.debug(f"Ignoring error while closing socket: {e}")
        logger.info("Device connection closed.")

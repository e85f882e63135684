"""
Pytest Configuration and Fixtures for the spark_io project.

Provides logging setup for test runs and a recording stand-in for the
device connection, so controller tests can inspect the exact bytes that
would have gone over the wire without opening a socket.
"""

import sys
import logging
import pytest

from spark_io.codec import FrameDecoder


class RecordingConnection:
    """Stand-in for DeviceConnection that keeps every written buffer."""

    def __init__(self):
        self.writes = []
        self.on_frame = None
        self.decoder = FrameDecoder()
        self.is_reading = False
        self.start_reading_calls = 0
        self.opened_with = None
        self.closed = False

    async def open(self, host, port):
        self.opened_with = (host, port)
        self.start_reading()

    def start_reading(self):
        self.start_reading_calls += 1
        self.is_reading = True

    def write(self, buffer):
        self.writes.append(bytes(buffer))

    def receive(self, chunk: bytes):
        """Simulates bytes arriving from the device."""
        for frame in self.decoder.feed(chunk):
            self.on_frame(frame)

    async def close(self):
        self.closed = True


@pytest.fixture(scope="session", autouse=True)
def setup_test_logging():
    """
    Configures the Python logging framework globally for all tests.
    Because tests bypass main.py, this ensures our logs are formatted
    and visible exactly how we want them during test runs.
    """
    formatter = logging.Formatter(fmt="%(levelname)-8s %(message)s - %(funcName)s:%(lineno)d ")
    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(formatter)
    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG)
    logger.addHandler(handler)


@pytest.fixture
def connection():
    return RecordingConnection()


@pytest.fixture
def controller(connection):
    """A controller wired to a RecordingConnection, without running discovery."""
    from spark_io.controller import DeviceController
    return DeviceController("device-id", "token", connection=connection, auto_connect=False)

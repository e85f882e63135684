"""
spark_io

An asyncio client for Spark Core boards running the voodoospark
firmware: it locates the board through the Spark cloud, keeps a binary
TCP connection to it, and exposes pin modes, digital/analog/servo/RGB
writes and subscribable digital/analog readings.
"""
__version__ = "0.1.0"

from spark_io.controller import DeviceController
from spark_io.errors import (
    CloudError,
    CloudResponseError,
    CloudUnreachableError,
    FirmwareHandshakeError,
    NotConnectedError,
    SparkIOError,
    UnsupportedModeError,
)
from spark_io.models import AnalogRead, ControllerState, DigitalRead, Lifecycle, RgbColor
from spark_io.pins import ModeCode

__all__ = [
    "DeviceController",
    "ModeCode",
    "DigitalRead",
    "AnalogRead",
    "Lifecycle",
    "ControllerState",
    "RgbColor",
    "SparkIOError",
    "CloudError",
    "CloudResponseError",
    "CloudUnreachableError",
    "FirmwareHandshakeError",
    "UnsupportedModeError",
    "NotConnectedError",
]

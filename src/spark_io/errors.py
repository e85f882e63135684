"""
Error taxonomy for the spark_io client.

Discovery and connection failures are raised inside the controller's
bootstrap task and reported through the "error" event. Configuration
errors (`UnsupportedModeError`) are raised synchronously to the caller.
"""
from typing import Optional


class SparkIOError(Exception):
    """Base class for every error raised by this package."""


class CloudUnreachableError(SparkIOError):
    """The cloud directory service did not answer with HTTP 200."""

    def __init__(self, status_code: Optional[int] = None, reason: str = ""):
        self.status_code = status_code
        self.reason = reason
        message = "Unable to connect to spark cloud."
        if status_code is not None:
            message += f": code: {status_code}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class CloudResponseError(SparkIOError):
    """The cloud answered, but the JSON envelope carries an error field."""

    def __init__(self, code=None, description: str = "", error: str = ""):
        self.code = code
        self.description = description
        self.error = error
        super().__init__(f"ERROR: {code} {description}")


# Shorter name used by callers that only care about "the cloud said no".
CloudError = CloudResponseError


class FirmwareHandshakeError(SparkIOError):
    """The device answered, but not with the expected firmware marker."""

    def __init__(self, detail: str = ""):
        message = "Unable to connect to the voodoospark firmware, has it been loaded?"
        if detail:
            message += f" ({detail})"
        super().__init__(message)


class UnsupportedModeError(SparkIOError, ValueError):
    def __init__(self, pin: str, mode):
        self.pin = pin
        self.mode = mode
        mode_name = getattr(mode, "name", str(mode))
        super().__init__(f"Unsupported pin mode: {mode_name} for {pin}")


class NotConnectedError(SparkIOError):
    """A command was issued before the device socket was opened."""

"""
Device Controller, the public facade of spark_io.

This module is responsible for:
- Running the bootstrap sequence: cloud discovery, then the TCP connection.
- Reporting the lifecycle through "connect", "ready" and "error" events.
- Translating pin operations into wire commands.
- Keeping the per-pin and RGB caches consumers can inspect.

    controller = DeviceController(device_id, token)
    controller.on("ready", lambda: controller.pin_mode("D7", ModeCode.OUTPUT))
    await controller.wait_ready()
"""
import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional

from spark_io.codec import to_seven_bit_pair
from spark_io.connection import DeviceConnection
from spark_io.discovery import DEFAULT_CLOUD_URL, ServiceDiscovery
from spark_io.events import ListenerBus
from spark_io.models import Action, AnalogRead, ControllerState, DigitalRead, Lifecycle, RgbColor
from spark_io.pins import ANALOG_PINS, ModeCode, PinDescriptor, PinRef, build_pin_table, normalize_name, resolve_index, validate_mode
from spark_io.router import EventRouter

logger = logging.getLogger(__name__)

DEFAULT_PORT = 8001
MIN_SAMPLING_INTERVAL = 10
MAX_SAMPLING_INTERVAL = (1 << 14) - 1

# Continuous-read request payloads
_READ_DIGITAL = 1
_READ_ANALOG = 2


class DeviceController:
    MODES = ModeCode
    HIGH = 1
    LOW = 0

    name: str = "spark-io"
    config: dict
    device_id: Optional[str]
    token: Optional[str]
    host: Optional[str]
    port: int
    state: ControllerState
    is_connected: bool
    pins: List[PinDescriptor]
    analog_pins: List[int]
    rgb: RgbColor
    sampling_interval: Optional[int]
    error: Optional[BaseException]
    _main_task: Optional[asyncio.Task]

    def __init__(
        self,
        device_id: Optional[str] = None,
        token: Optional[str] = None,
        config: Optional[Dict[str, Any]] = None,
        *,
        discovery: Optional[ServiceDiscovery] = None,
        connection: Optional[DeviceConnection] = None,
        auto_connect: bool = True,
    ):
        # Configuration extraction with defaults; explicit arguments win
        self.config = config or {}
        spark_conf = self.config.get('spark') or {}
        self.device_id = device_id or spark_conf.get('device_id')
        self.token = token or spark_conf.get('token')
        self.host = None
        self.port = int(spark_conf.get('port', DEFAULT_PORT))

        self.discovery = discovery or ServiceDiscovery(
            cloud_url=spark_conf.get('cloud_url', DEFAULT_CLOUD_URL),
            timeout=spark_conf.get('timeout'),
        )

        self.bus = ListenerBus()
        self.pins = build_pin_table()
        self.analog_pins = list(ANALOG_PINS)
        self.router = EventRouter(self.pins, self.bus)
        self.connection = connection or DeviceConnection()
        self.connection.on_frame = self.router.route

        # Internal state
        self.state = ControllerState.CREATED
        self.is_connected = False
        self.rgb = RgbColor()
        self.sampling_interval = None
        self.error = None
        self._main_task = None

        if auto_connect:
            self.connect()

    # --- Lifecycle ---

    @property
    def is_ready(self) -> bool:
        return self.state == ControllerState.READY

    def connect(self) -> "DeviceController":
        """
        Launches the bootstrap sequence in the background. Must be called with
        a running event loop. Only the first call has any effect.
        """
        if self._main_task is None:
            self._main_task = asyncio.create_task(self._bootstrap(), name="spark-io-bootstrap")
        return self

    async def wait_ready(self) -> "DeviceController":
        """Waits for the bootstrap sequence and re-raises its failure, if any."""
        if self._main_task is None:
            raise RuntimeError("connect() has not been called")
        await self._main_task
        if self.error is not None:
            raise self.error
        return self

    async def _bootstrap(self):
        try:
            if not self.device_id or not self.token:
                raise ValueError("Both a device id and an access token are required")

            self.state = ControllerState.DISCOVERING
            endpoint = await self.discovery.resolve(self.device_id, self.token)
            self.host, self.port = endpoint.host, endpoint.port
            self.is_connected = True

            self.state = ControllerState.CONNECTING
            self.bus.emit(Lifecycle.CONNECT)

            await self.connection.open(self.host, self.port)
            self.state = ControllerState.READY
            logger.info(f"Device {self.device_id} is ready.")
            self.bus.emit(Lifecycle.READY)

        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.state = ControllerState.FAILED
            self.error = e
            logger.error(f"Failed to connect to device {self.device_id}: {e}")
            if not self.bus.emit(Lifecycle.ERROR, e):
                logger.warning("No 'error' listener registered; the failure is only logged.")

    async def close(self):
        """Closes the device connection. The controller cannot be reconnected afterwards."""
        if self._main_task and not self._main_task.done():
            self._main_task.cancel()
            try:
                await self._main_task
            except asyncio.CancelledError:
                pass
        await self.connection.close()

    def reset(self) -> "DeviceController":
        return self

    # --- Events ---

    def on(self, event, handler: Callable[..., Any]) -> "DeviceController":
        self.bus.on(event, handler)
        return self

    def listener_count(self, event) -> int:
        return self.bus.listener_count(event)

    # --- Pin operations ---

    def pin_mode(self, pin: PinRef, mode) -> "DeviceController":
        """
        Sets the mode of a pin. Raises UnsupportedModeError before anything is
        written if the pin cannot take `mode`. PWM goes out on the wire as
        OUTPUT; the descriptor keeps PWM.
        """
        mode = ModeCode(int(mode))
        index = resolve_index(pin, analog=mode == ModeCode.ANALOG)
        validate_mode(self.pins, index, mode)

        wire_mode = ModeCode.OUTPUT if mode == ModeCode.PWM else mode
        self._write(Action.PIN_MODE, index, wire_mode)
        self.pins[index].mode = mode
        return self

    def digital_write(self, pin: PinRef, value: int) -> "DeviceController":
        return self._write_pin(Action.DIGITAL_WRITE, pin, value)

    def analog_write(self, pin: PinRef, value: int) -> "DeviceController":
        return self._write_pin(Action.ANALOG_WRITE, pin, value)

    def servo_write(self, pin: PinRef, value: int) -> "DeviceController":
        return self._write_pin(Action.SERVO_WRITE, pin, value)

    def digital_read(self, pin: PinRef, handler: Callable[[int], Any]) -> "DeviceController":
        """Subscribes `handler` to "digital-read-<pin>" and asks the device to report the pin continuously."""
        event = DigitalRead(normalize_name(pin))
        return self._subscribe_read(event, resolve_index(pin), _READ_DIGITAL, handler)

    def analog_read(self, pin: PinRef, handler: Callable[[int], Any]) -> "DeviceController":
        """Like digital_read, for "analog-read-A<n>". A bare number names an analog channel."""
        event = AnalogRead(normalize_name(pin, analog=True))
        return self._subscribe_read(event, resolve_index(pin, analog=True), _READ_ANALOG, handler)

    def internal_rgb(self, *args):
        """
        Without arguments, returns the current RGB state.
        Otherwise accepts (r, g, b), [r, g, b], {"red": r, ...} or "#rrggbb",
        clamps each channel to 0-255 and sets the on-board LED.
        """
        if not args:
            return self.rgb

        color = RgbColor.parse(*args)
        self._write(Action.INTERNAL_RGB, color.red, color.green, color.blue)
        self.rgb = color
        return self

    def set_sampling_interval(self, interval: int) -> "DeviceController":
        safe_interval = max(min(MAX_SAMPLING_INTERVAL, int(interval)), MIN_SAMPLING_INTERVAL)
        self._write(Action.SAMPLE_INTERVAL, *to_seven_bit_pair(safe_interval))
        self.sampling_interval = safe_interval
        return self

    # --- Internals ---

    def _write_pin(self, action: Action, pin: PinRef, value: int) -> "DeviceController":
        index = resolve_index(pin)
        self._write(action, index, value)
        self.pins[index].value = value
        return self

    def _subscribe_read(self, event, index: int, read_type: int, handler) -> "DeviceController":
        # Tell the board we have a new pin to read; a failed write leaves no subscription behind
        self._write(Action.REPORTING, index, read_type)
        self.bus.on(event, handler)
        self.connection.start_reading()
        return self

    def _write(self, *values: int):
        self.connection.write(bytes(int(v) for v in values))

"""
Command-line entry point for the spark_io client.

This module is responsible for:
- Parsing command-line arguments and the config.yaml file.
- Configuring logging for the whole application.
- Connecting a DeviceController and running one of the demo commands:
  `blink` toggles a digital output, `watch` logs analog readings.
- Shutting down cleanly on SIGINT/SIGTERM.
"""

import argparse
import asyncio
import logging
import signal
from typing import Any, Dict, List, Optional

from spark_io.config_loader import load_config
from spark_io.controller import DeviceController
from spark_io.pins import ModeCode

LOG_FORMAT = '%(asctime)s [%(levelname)-8s] %(name)s.%(funcName)s: %(message)s'

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO"):
    """
    Configures the global logging settings for the entire application.
    This should be called as early as possible during startup.
    """
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    logging.getLogger().setLevel(level.upper())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="spark-io", description="Control a Spark Core running the voodoospark firmware.")
    parser.add_argument("--config", default="config.yaml", help="path to the YAML configuration file")
    commands = parser.add_subparsers(dest="command", required=True)

    blink_cmd = commands.add_parser("blink", help="toggle a digital output")
    blink_cmd.add_argument("pin", nargs="?", default="D7")
    blink_cmd.add_argument("--interval", type=float, default=1.0, help="seconds between toggles")

    watch_cmd = commands.add_parser("watch", help="log the readings of an analog input")
    watch_cmd.add_argument("pin", nargs="?", default="A7")
    return parser


async def blink(controller: DeviceController, pin: str, interval: float):
    """Toggles `pin` forever."""
    controller.pin_mode(pin, ModeCode.OUTPUT)
    value = DeviceController.LOW
    while True:
        value ^= 1
        controller.digital_write(pin, value)
        logger.info(f"{pin} {'on' if value else 'off'}")
        await asyncio.sleep(interval)


def watch(controller: DeviceController, pin: str):
    """Subscribes to the analog readings of `pin` and logs them."""
    controller.pin_mode(pin, ModeCode.ANALOG)
    controller.analog_read(pin, lambda value: logger.info(f"{pin}: {value}"))


async def shutdown(signal_name: str, controller: DeviceController):
    """Graceful shutdown handler."""
    logger.info(f"Received exit signal {signal_name}...")

    await controller.close()

    # Cancel all running tasks (like the blink loop)
    tasks = [t for t in asyncio.all_tasks() if t is not asyncio.current_task()]
    for task in tasks:
        task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)


async def main_application_runner(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging()

    config: Dict[str, Any] = load_config(args.config)
    setup_logging(config.get('logging', {}).get('level', 'INFO'))

    controller = DeviceController(config=config)
    try:
        await controller.wait_ready()
    except Exception as e:
        logger.error(f"Could not reach the device: {e}")
        return 1

    if config.get('sampling_interval') is not None:
        controller.set_sampling_interval(config['sampling_interval'])

    command_task = None
    if args.command == "blink":
        command_task = asyncio.create_task(blink(controller, args.pin, args.interval))
    else:
        watch(controller, args.pin)

    # Setup Signal Handlers for OS interrupts
    loop = asyncio.get_running_loop()
    stop_requested = asyncio.Event()
    received = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, lambda s=sig: (received.append(s.name), stop_requested.set()))

    logger.info("spark-io is running. Press Ctrl+C to exit.")
    try:
        await stop_requested.wait()
    finally:
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.remove_signal_handler(sig)

    if command_task:
        command_task.cancel()
    await shutdown(received[0] if received else "unknown", controller)
    return 0


def main() -> int:
    try:
        return asyncio.run(main_application_runner())
    except KeyboardInterrupt:
        # Handled by the signal handler, but good to catch here just in case.
        return 0


if __name__ == "__main__":
    raise SystemExit(main())

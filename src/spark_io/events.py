"""
Listener bus for controller events.

Handlers are registered against an event name ("ready",
"digital-read-D0", ...) or a typed event (`DigitalRead("D0")`,
`Lifecycle.READY`) and called synchronously in registration order, so
readings reach consumers in the order their frames arrived.

Coroutine handlers are scheduled on the running loop as tasks, created
in the same order. A handler that raises is logged and stays registered.
"""
import asyncio
import logging
from typing import Any, Callable, Dict, List

from spark_io.models import event_name

logger = logging.getLogger(__name__)


class ListenerBus:
    _listeners: Dict[str, List[Callable[..., Any]]]

    def __init__(self):
        self._listeners = {}
        self._pending_tasks = set()

    def on(self, event, handler: Callable[..., Any]):
        """Registers `handler` for `event`. The same event may have any number of handlers."""
        if not callable(handler):
            raise TypeError(f"Handler for '{event_name(event)}' is not callable: {handler!r}")
        self._listeners.setdefault(event_name(event), []).append(handler)

    def listener_count(self, event) -> int:
        return len(self._listeners.get(event_name(event), ()))

    def has_listeners(self, event) -> bool:
        return self.listener_count(event) > 0

    def emit(self, event, *args) -> bool:
        """Calls every handler for `event`. Returns False if nobody was listening."""
        name = event_name(event)
        handlers = list(self._listeners.get(name, ()))
        if not handlers:
            return False

        for handler in handlers:
            try:
                result = handler(*args)
                if asyncio.iscoroutine(result):
                    self._schedule(name, result)
            except Exception:
                logger.exception(f"Handler {handler} for '{name}' raised")
        return True

    def _schedule(self, name: str, coro):
        task = asyncio.get_running_loop().create_task(coro)
        # Keep a reference until the task is done so it is not garbage collected
        self._pending_tasks.add(task)
        task.add_done_callback(self._pending_tasks.discard)
        task.add_done_callback(lambda t: self._log_task_failure(name, t))

    @staticmethod
    def _log_task_failure(name: str, task: asyncio.Task):
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Async handler for '{name}' raised: {task.exception()!r}")

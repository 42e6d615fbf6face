"""Collects container events and forwards their logs to a consumer."""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable
from concurrent.futures import CancelledError
from dataclasses import dataclass
from enum import Enum, auto
from typing import Protocol

_log = logging.getLogger(__name__)

_POLL_INTERVAL = 0.05


class ContainerEventType(Enum):
    """Kinds of events a log printer reacts to."""

    ATTACH = auto()
    EXIT = auto()
    LOG = auto()
    USER_CANCEL = auto()


@dataclass(frozen=True)
class ContainerEvent:
    """Something that happened to an application container."""

    type: ContainerEventType
    container: str = ""
    service: str = ""
    line: str = ""
    exit_code: int = 0
    restarting: bool = False


class LogConsumer(Protocol):
    """Receives container log lines and status messages."""

    def log(self, container: str, service: str, message: str) -> None: ...

    def status(self, container: str, msg: str) -> None: ...

    def register(self, container: str) -> None: ...


class LogPrinter:
    """Watches application containers and passes their logs to a consumer."""

    def __init__(self, consumer: LogConsumer) -> None:
        self.consumer = consumer
        self._queue: queue.Queue[ContainerEvent] = queue.Queue()

    def handle_event(self, event: ContainerEvent) -> None:
        self._queue.put(event)

    def cancel(self) -> None:
        """Signal that the user asked to stop."""
        self._queue.put(ContainerEvent(type=ContainerEventType.USER_CANCEL))

    def run(
        self,
        cascade_stop: bool,
        exit_code_from: str,
        stop_fn: Callable[[], None],
        cancel: threading.Event | None = None,
    ) -> int:
        """Process events until the last attached container exits; return the exit code.

        Raises CancelledError if ``cancel`` is set first; errors from ``stop_fn`` propagate.
        """
        aborting = False
        exit_code = 0
        containers: set[str] = set()
        while True:
            if cancel is not None and cancel.is_set():
                raise CancelledError("context canceled")
            try:
                event = self._queue.get(timeout=_POLL_INTERVAL)
            except queue.Empty:
                continue
            container = event.container
            if event.type is ContainerEventType.USER_CANCEL:
                aborting = True
            elif event.type is ContainerEventType.ATTACH:
                if container in containers:
                    continue
                containers.add(container)
                self.consumer.register(container)
            elif event.type is ContainerEventType.EXIT:
                if not event.restarting:
                    containers.discard(container)
                if not aborting:
                    self.consumer.status(container, f"exited with code {event.exit_code}")
                if cascade_stop:
                    if not aborting:
                        aborting = True
                        print("Aborting on container exit...")
                        stop_fn()
                    if not exit_code_from:
                        exit_code_from = event.service
                    if exit_code_from == event.service:
                        _log.error(event.exit_code)
                        exit_code = event.exit_code
                if not containers:
                    return exit_code
            elif event.type is ContainerEventType.LOG:
                if not aborting:
                    self.consumer.log(container, event.service, event.line)
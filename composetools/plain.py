"""A progress writer that prints one line per event."""

from __future__ import annotations

import sys
import threading
from concurrent.futures import CancelledError
from typing import TextIO

from composetools.event import Event

_POLL_INTERVAL = 0.05


class PlainWriter:
    """Writes each event and tail message as a plain text line."""

    def __init__(self, out: TextIO | None = None) -> None:
        self.out = out if out is not None else sys.stderr
        self._done = threading.Event()

    def start(self, cancel: threading.Event | None = None) -> None:
        """Block until :meth:`stop` is called; raise CancelledError if ``cancel`` is set first."""
        while not self._done.wait(_POLL_INTERVAL):
            if cancel is not None and cancel.is_set():
                raise CancelledError("context canceled")

    def event(self, event: Event) -> None:
        print(event.id, event.text, event.status_text, file=self.out)

    def tail_msgf(self, msg: str, *args) -> None:
        print(msg, *args, file=self.out)

    def stop(self) -> None:
        self._done.set()
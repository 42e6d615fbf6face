"""A progress writer that discards everything."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field

from composetools.event import Event


@dataclass
class NoopWriter:
    """Progress writer that shows nothing.

    Events and tail messages are dropped; only a count of what was dropped
    and whether the writer has been stopped are kept. Neither takes part in
    equality, so every NoopWriter compares equal to every other.
    """

    discarded: int = field(default=0, compare=False, repr=False)
    stopped: bool = field(default=False, compare=False, repr=False)
    _lock: threading.Lock = field(
        default_factory=threading.Lock, compare=False, repr=False
    )

    def start(self, cancel: threading.Event | None = None) -> None:
        """Return at once; there is nothing to render."""
        with self._lock:
            self.stopped = False

    def event(self, event: Event) -> None:
        """Drop a progress event."""
        with self._lock:
            self.discarded += 1

    def tail_msgf(self, msg: str, *args) -> None:
        """Drop a message meant for the end of the output."""
        with self._lock:
            self.discarded += 1

    def stop(self) -> None:
        """Mark the writer as stopped."""
        with self._lock:
            self.stopped = True
"""A progress writer that redraws a live block of status lines on a terminal."""

from __future__ import annotations

import shutil
import sys
import threading
import time
from collections.abc import Callable, Mapping
from concurrent.futures import CancelledError
from dataclasses import replace
from typing import TextIO

from composetools.event import Event, EventStatus, Spinner
from composetools.stringutils import string_contains

_TICK = 0.1

_UP = "\x1b[1A"
_DOWN = "\x1b[1B"
_COLUMN_ZERO = "\x1b[0G"
_HIDE_CURSOR = "\x1b[?25l"
_SHOW_CURSOR = "\x1b[?25h"

_WHITE = "37"
_BLUE = "34"
_RED = "31"


def _apply_color(text: str, color: str) -> str:
    return f"\x1b[{color}m{text}\x1b[0m"


def _terminal_width() -> int:
    return shutil.get_terminal_size().columns


class TtyWriter:
    """Keeps the latest state of every event and repaints them in place."""

    def __init__(
        self,
        out: TextIO | None = None,
        width: Callable[[], int] | None = None,
    ) -> None:
        self.out = out if out is not None else sys.stderr
        self.events: dict[str, Event] = {}
        self.event_ids: list[str] = []
        self.repeated = False
        self.num_lines = 0
        self.tail_events: list[str] = []
        self._width = width if width is not None else _terminal_width
        self._done = threading.Event()
        self._lock = threading.Lock()

    def start(self, cancel: threading.Event | None = None) -> None:
        """Repaint every 100ms until stopped; raise CancelledError if ``cancel`` is set."""
        while True:
            if cancel is not None and cancel.is_set():
                self.print_events()
                self.print_tail_events()
                raise CancelledError("context canceled")
            if self._done.wait(_TICK):
                self.print_events()
                self.print_tail_events()
                return
            self.print_events()

    def stop(self) -> None:
        self._done.set()

    def event(self, event: Event) -> None:
        """Record a new event or update the state of a known one."""
        with self._lock:
            if not string_contains(self.event_ids, event.id):
                self.event_ids.append(event.id)
            last = self.events.get(event.id)
            if last is not None:
                if event.status in (EventStatus.DONE, EventStatus.ERROR) and last.status != event.status:
                    last.stop()
                last.status = event.status
                last.text = event.text
                last.status_text = event.status_text
                last.parent_id = event.parent_id
            else:
                fresh = replace(event, start_time=time.monotonic(), end_time=None, spinner=Spinner())
                if fresh.status in (EventStatus.DONE, EventStatus.ERROR):
                    fresh.stop()
                self.events[fresh.id] = fresh

    def tail_msgf(self, msg: str, *args) -> None:
        """Queue a message to be printed once the writer stops."""
        with self._lock:
            self.tail_events.append(msg % args if args else msg)

    def print_tail_events(self) -> None:
        with self._lock:
            for msg in self.tail_events:
                print(msg, file=self.out)
            self.out.flush()

    def print_events(self) -> None:
        """Move the cursor back over the previous block and draw the current state."""
        with self._lock:
            if not self.event_ids:
                return
            terminal_width = self._width()
            moves = _UP * (self.num_lines + 1)
            if not self.repeated:
                moves += _DOWN
            self.repeated = True
            self.out.write(moves + _COLUMN_ZERO)

            self.out.write(_HIDE_CURSOR)
            try:
                done = num_done(self.events)
                first_line = f"[+] Running {done}/{self.num_lines}"
                if self.num_lines != 0 and done == self.num_lines:
                    first_line = _apply_color(first_line, _BLUE)
                self.out.write(first_line + "\n")

                status_padding = 0
                for event_id in self.event_ids:
                    event = self.events[event_id]
                    status_padding = max(status_padding, len(f"{event.id} {event.text}"))
                    if event.parent_id:
                        status_padding -= 2

                color = sys.platform != "win32"
                count = 0
                for event_id in self.event_ids:
                    event = self.events[event_id]
                    if event.parent_id:
                        continue
                    self.out.write(line_text(event, "", terminal_width, status_padding, color))
                    count += 1
                    for child_id in self.event_ids:
                        child = self.events[child_id]
                        if child.parent_id == event.id:
                            self.out.write(line_text(child, "  ", terminal_width, status_padding, color))
                            count += 1
                self.num_lines = count
            finally:
                self.out.write(_SHOW_CURSOR)
                self.out.flush()


def line_text(event: Event, pad: str, terminal_width: int, status_padding: int, color: bool) -> str:
    """Format one status line, right-aligning the elapsed time."""
    now = time.monotonic()
    start = event.start_time if event.start_time is not None else now
    if event.status == EventStatus.WORKING:
        end = now
    else:
        end = event.end_time if event.end_time is not None else start
    elapsed = end - start

    text_len = len(f"{event.id} {event.text}")
    padding = max(status_padding - text_len, 0)
    # long error messages would otherwise wrap and break the layout
    max_status_len = terminal_width - text_len - status_padding - 15
    status = event.status_text
    if max_status_len > 0 and len(status) > max_status_len:
        status = status[:max_status_len] + "..."
    spinner = event.spinner.render() if event.spinner is not None else ""
    text = f"{pad} {spinner} {event.id} {event.text}{' ' * padding} {status}"
    timer = f"{elapsed:.1f}s\n"
    line = align(text, timer, terminal_width)

    if color:
        shade = _WHITE
        if event.status == EventStatus.DONE:
            shade = _BLUE
        if event.status == EventStatus.ERROR:
            shade = _RED
        return _apply_color(line, shade)
    return line


def num_done(events: Mapping[str, Event]) -> int:
    """Count the events whose status is DONE."""
    return sum(1 for event in events.values() if event.status == EventStatus.DONE)


def align(left: str, right: str, width: int) -> str:
    """Pad ``left`` so that ``right`` ends at column ``width``."""
    return f"{left.ljust(abs(width - len(right) - 1))} {right}"
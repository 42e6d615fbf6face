"""Progress events and the spinner shown next to them."""

from __future__ import annotations

import sys
import time
from dataclasses import dataclass, field
from enum import IntEnum


class EventStatus(IntEnum):
    """State of the task an event reports on."""

    WORKING = 0
    DONE = 1
    ERROR = 2


_SPINNER_CHARS = ["⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏"]
_SPINNER_DONE = "⠿"


class Spinner:
    """A text spinner that advances once more than 100ms have passed since creation."""

    def __init__(self, chars: list[str] | None = None, done: str | None = None) -> None:
        if sys.platform == "win32":
            default_chars, default_done = ["-"], "-"
        else:
            default_chars, default_done = list(_SPINNER_CHARS), _SPINNER_DONE
        self.chars = list(chars) if chars is not None else default_chars
        self.done = done if done is not None else default_done
        self.index = 0
        self.started = time.monotonic()
        self.stopped = False

    def render(self) -> str:
        """Return the character to display now."""
        if self.stopped:
            return self.done
        if (time.monotonic() - self.started) * 1000 > 100:
            self.index = (self.index + 1) % len(self.chars)
        return self.chars[self.index]

    def __str__(self) -> str:
        return self.render()

    def stop(self) -> None:
        """Freeze the spinner on its 'done' character."""
        self.stopped = True


@dataclass
class Event:
    """A progress event for one task."""

    id: str
    parent_id: str = ""
    text: str = ""
    status: EventStatus = EventStatus.WORKING
    status_text: str = ""
    start_time: float | None = None
    end_time: float | None = None
    spinner: Spinner | None = field(default=None, compare=False)

    def stop(self) -> None:
        """Record the end time and stop the spinner."""
        self.end_time = time.monotonic()
        if self.spinner is not None:
            self.spinner.stop()


def new_event(event_id: str, status: EventStatus, status_text: str) -> Event:
    """Create an event with the given status."""
    return Event(id=event_id, status=status, status_text=status_text)


def error_message_event(event_id: str, msg: str) -> Event:
    return new_event(event_id, EventStatus.ERROR, msg)


def error_event(event_id: str) -> Event:
    return new_event(event_id, EventStatus.ERROR, "Error")


def creating_event(event_id: str) -> Event:
    return new_event(event_id, EventStatus.WORKING, "Creating")


def starting_event(event_id: str) -> Event:
    return new_event(event_id, EventStatus.WORKING, "Starting")


def started_event(event_id: str) -> Event:
    return new_event(event_id, EventStatus.DONE, "Started")


def restarting_event(event_id: str) -> Event:
    return new_event(event_id, EventStatus.WORKING, "Restarting")


def restarted_event(event_id: str) -> Event:
    return new_event(event_id, EventStatus.DONE, "Restarted")


def running_event(event_id: str) -> Event:
    return new_event(event_id, EventStatus.DONE, "Running")


def created_event(event_id: str) -> Event:
    return new_event(event_id, EventStatus.DONE, "Created")


def stopping_event(event_id: str) -> Event:
    return new_event(event_id, EventStatus.WORKING, "Stopping")


def stopped_event(event_id: str) -> Event:
    return new_event(event_id, EventStatus.DONE, "Stopped")


def killing_event(event_id: str) -> Event:
    return new_event(event_id, EventStatus.WORKING, "Killing")


def killed_event(event_id: str) -> Event:
    return new_event(event_id, EventStatus.DONE, "Killed")


def removing_event(event_id: str) -> Event:
    return new_event(event_id, EventStatus.WORKING, "Removing")


def removed_event(event_id: str) -> Event:
    return new_event(event_id, EventStatus.DONE, "Removed")
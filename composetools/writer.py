"""Selecting a progress writer and running work alongside it."""

from __future__ import annotations

import sys
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Protocol, TextIO, TypeVar

from composetools.event import Event
from composetools.noop import NoopWriter
from composetools.plain import PlainWriter
from composetools.tty import TtyWriter

T = TypeVar("T")


class Writer(Protocol):
    """Anything that can display multiple progress events."""

    def start(self, cancel: threading.Event | None = None) -> None: ...

    def stop(self) -> None: ...

    def event(self, event: Event) -> None: ...

    def tail_msgf(self, msg: str, *args) -> None: ...


_current_writer: ContextVar[Writer | None] = ContextVar("progress_writer", default=None)


@contextmanager
def with_context_writer(writer: Writer) -> Iterator[Writer]:
    """Make ``writer`` the current progress writer inside the block."""
    token = _current_writer.set(writer)
    try:
        yield writer
    finally:
        _current_writer.reset(token)


def context_writer() -> Writer:
    """Return the current progress writer, or a writer that discards everything."""
    writer = _current_writer.get()
    return writer if writer is not None else NoopWriter()


def run(func: Callable[[], object]) -> None:
    """Run ``func`` while a progress writer on stderr is active."""
    run_with_status(func)


def run_with_status(func: Callable[[], T]) -> T:
    """Run ``func`` while a progress writer on stderr is active and return its result."""
    writer = new_writer(sys.stderr)
    failures: list[BaseException] = []

    def _display() -> None:
        try:
            writer.start()
        except BaseException as exc:  # surfaced to the caller after join
            failures.append(exc)

    thread = threading.Thread(target=_display, daemon=True)
    thread.start()
    try:
        with with_context_writer(writer):
            result = func()
    finally:
        writer.stop()
        thread.join()
    if failures:
        raise failures[0]
    return result


def new_writer(out: TextIO) -> Writer:
    """Return a live terminal writer when ``out`` is a tty, a plain line writer otherwise."""
    isatty = getattr(out, "isatty", None)
    if isatty is not None and isatty():
        return TtyWriter(out)
    return PlainWriter(out)
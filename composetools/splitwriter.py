"""A byte sink that hands complete lines to a callback."""

from __future__ import annotations

from collections.abc import Callable


class SplitWriter:
    """Collects written bytes and calls ``consumer`` once per newline-terminated line.

    Whatever is left without a trailing newline is passed on by :meth:`close`.
    """

    def __init__(self, consumer: Callable[[str], None]) -> None:
        self._consumer = consumer
        self._buffer = bytearray()

    def write(self, data: bytes) -> int:
        """Append ``data`` and emit every complete line; return the number of bytes taken."""
        self._buffer.extend(data)
        while (index := self._buffer.find(b"\n")) >= 0:
            line = bytes(self._buffer[:index])
            del self._buffer[: index + 1]
            self._consumer(line.decode("utf-8", errors="replace"))
        return len(data)

    def close(self) -> None:
        """Emit any remaining partial line."""
        if not self._buffer:
            return
        rest = bytes(self._buffer)
        self._buffer.clear()
        self._consumer(rest.decode("utf-8", errors="replace"))

    def __enter__(self) -> SplitWriter:
        return self

    def __exit__(self, *args) -> None:
        self.close()


def get_writer(consumer: Callable[[str], None]) -> SplitWriter:
    """Create a writer that splits its input into lines for ``consumer``."""
    return SplitWriter(consumer)
"""Interactive questions asked on a terminal."""

from __future__ import annotations

import getpass
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TextIO

_YES = ("y", "yes")
_NO = ("n", "no")


@dataclass
class User:
    """Asks the user questions on the given streams (the process's own by default)."""

    stdin: TextIO | None = None
    stdout: TextIO | None = None

    @property
    def _in(self) -> TextIO:
        return self.stdin if self.stdin is not None else sys.stdin

    @property
    def _out(self) -> TextIO:
        return self.stdout if self.stdout is not None else sys.stdout

    def _ask(self, prompt: str) -> str:
        self._out.write(prompt)
        self._out.flush()
        line = self._in.readline()
        if line == "":
            raise EOFError("no answer given")
        return line.rstrip("\r\n")

    def select(self, message: str, options: Sequence[str]) -> int:
        """Show a numbered list and return the index of the chosen option."""
        if not options:
            raise ValueError("please provide options to select from")
        out = self._out
        out.write(f"? {message}\n")
        for number, option in enumerate(options, start=1):
            out.write(f"  {number}) {option}\n")
        while True:
            answer = self._ask(f"  Answer [1-{len(options)}]: ").strip()
            if answer.isdigit() and 1 <= int(answer) <= len(options):
                return int(answer) - 1
            out.write(f"Sorry, your reply was invalid: {answer!r} is not an option\n")

    def input(self, message: str, default_value: str) -> str:
        """Ask for a line of text; an empty answer gives ``default_value``."""
        prompt = f"? {message} ({default_value}) " if default_value else f"? {message} "
        answer = self._ask(prompt)
        return answer if answer else default_value

    def confirm(self, message: str, default_value: bool) -> bool:
        """Ask a yes/no question; an empty answer gives ``default_value``."""
        suffix = "(Y/n)" if default_value else "(y/N)"
        while True:
            answer = self._ask(f"? {message} {suffix} ").strip().lower()
            if not answer:
                return default_value
            if answer in _YES:
                return True
            if answer in _NO:
                return False
            self._out.write(f"Sorry, your reply was invalid: {answer!r} is not a valid answer\n")

    def password(self, message: str) -> str:
        """Ask for a secret without echoing it when reading from the terminal."""
        if self.stdin is None:
            return getpass.getpass(f"? {message} ", stream=self.stdout)
        return self._ask(f"? {message} ")
from __future__ import annotations

import sys
from typing import Protocol, TextIO


class Console(Protocol):
    verbose: bool

    def write(self, message: str, newline: bool = True) -> None:
        ...

    def write_error(self, message: str, newline: bool = True) -> None:
        ...


class ConsoleIO:
    """Operator output: regular messages on stdout, warnings and errors on stderr."""

    def __init__(self, *, verbose: bool = False, stdout: TextIO | None = None, stderr: TextIO | None = None) -> None:
        self.verbose = verbose
        self._stdout = stdout
        self._stderr = stderr

    def write(self, message: str, newline: bool = True) -> None:
        print(message, end="\n" if newline else "", file=self._stdout or sys.stdout)

    def write_error(self, message: str, newline: bool = True) -> None:
        print(message, end="\n" if newline else "", file=self._stderr or sys.stderr)


def warn(console: Console, message: str) -> None:
    console.write_error(f"warning: {message}")

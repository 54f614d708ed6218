"""Terminal abstraction for raw-mode stdin/stdout interaction.

Provides a ``Terminal`` protocol and a concrete ``ProcessTerminal`` that
reads keys from the controlling terminal and manages raw mode with
:mod:`tty` and :mod:`termios`.
"""

from __future__ import annotations

import contextlib
import os
import select
import sys
import termios
import tty
from collections.abc import Iterator
from typing import Protocol, TextIO

from wrash.term.input import KeyReader

# ---------------------------------------------------------------------------
# ANSI escape constants
# ---------------------------------------------------------------------------

_CLEAR_SCREEN = "\x1b[2J\x1b[H"

DEFAULT_COLUMNS = 80


# ---------------------------------------------------------------------------
# Terminal protocol
# ---------------------------------------------------------------------------


class Terminal(Protocol):
    """Interface for terminal I/O operations."""

    def raw_mode(self) -> contextlib.AbstractContextManager[None]: ...

    def read_key(self) -> str | None: ...

    def write(self, data: str) -> None: ...

    @property
    def columns(self) -> int: ...

    def clear_screen(self) -> None: ...


# ---------------------------------------------------------------------------
# ProcessTerminal implementation
# ---------------------------------------------------------------------------


class ProcessTerminal:
    """Terminal backed by the process's stdin and stdout.

    Input is read straight from the stdin file descriptor (bypassing
    ``sys.stdin`` buffering) and split into key sequences by a
    :class:`~wrash.term.input.KeyReader`.
    """

    def __init__(self, stdin_fd: int | None = None, stdout: TextIO | None = None) -> None:
        self._fd = sys.stdin.fileno() if stdin_fd is None else stdin_fd
        self._stdout = sys.stdout if stdout is None else stdout
        self._reader = KeyReader(self._read_bytes, self._wait_for_input)

    # -- properties ---------------------------------------------------------

    @property
    def columns(self) -> int:
        try:
            return os.get_terminal_size(self._stdout.fileno()).columns
        except (ValueError, OSError):
            return DEFAULT_COLUMNS

    # -- raw mode -----------------------------------------------------------

    @contextlib.contextmanager
    def raw_mode(self) -> Iterator[None]:
        """Put the terminal in raw mode for the duration of the block.

        The saved attributes are restored however the block exits.

        Raises:
            termios.error: the terminal attributes cannot be read or set.
        """
        original = termios.tcgetattr(self._fd)
        tty.setraw(self._fd)
        try:
            yield
        finally:
            termios.tcsetattr(self._fd, termios.TCSADRAIN, original)

    # -- input --------------------------------------------------------------

    def read_key(self) -> str | None:
        """Block until one key sequence is read; ``None`` at end of input."""
        return self._reader.read_sequence()

    def _read_bytes(self) -> bytes:
        return os.read(self._fd, 1024)

    def _wait_for_input(self, timeout: float) -> bool:
        ready, _, _ = select.select([self._fd], [], [], timeout)
        return bool(ready)

    # -- output -------------------------------------------------------------

    def write(self, data: str) -> None:
        self._stdout.write(data)
        self._stdout.flush()

    def clear_screen(self) -> None:
        self.write(_CLEAR_SCREEN)


def is_interactive(fd: int | None = None) -> bool:
    """Whether *fd* (stdin by default) is attached to a terminal."""
    if fd is None:
        try:
            fd = sys.stdin.fileno()
        except (OSError, ValueError):
            return False
    return os.isatty(fd)

"""Splitting raw terminal input into complete key sequences.

Terminal reads can return several keys at once (typed ahead or pasted) or
half of an escape sequence. :class:`KeyReader` buffers the decoded input and
hands back exactly one key sequence per call, so each one can be passed to
:func:`wrash.term.keys.parse_key`.
"""

from __future__ import annotations

import codecs
from collections import deque
from typing import Callable, Literal

ESC = "\x1b"

SequenceStatus = Literal["complete", "incomplete", "not-escape"]

# How long a lone ESC waits for the rest of a sequence before it is
# reported as the Escape key.
DEFAULT_ESCAPE_TIMEOUT = 0.05


def _is_complete_sequence(data: str) -> SequenceStatus:
    """Whether *data* is a complete escape sequence or needs more input."""
    if not data.startswith(ESC):
        return "not-escape"

    if len(data) == 1:
        return "incomplete"

    introducer = data[1]

    # CSI: ESC [ params final, final byte in 0x40-0x7E
    if introducer == "[":
        if len(data) < 3:
            return "incomplete"
        return "complete" if 0x40 <= ord(data[-1]) <= 0x7E else "incomplete"

    # OSC: ESC ] ... BEL or ST
    if introducer == "]":
        if data.endswith("\x07") or data.endswith(ESC + "\\"):
            return "complete"
        return "incomplete"

    # SS3: ESC O key
    if introducer == "O":
        return "complete" if len(data) >= 3 else "incomplete"

    # Meta: ESC followed by one character
    return "complete"


def _extract_complete_sequences(buffer: str) -> tuple[list[str], str]:
    """Split *buffer* into complete sequences and an incomplete remainder."""
    sequences: list[str] = []
    pos = 0

    while pos < len(buffer):
        if buffer[pos] != ESC:
            sequences.append(buffer[pos])
            pos += 1
            continue

        end = pos + 1
        while True:
            status = _is_complete_sequence(buffer[pos:end])
            if status != "incomplete":
                break
            if end >= len(buffer):
                return sequences, buffer[pos:]
            end += 1

        sequences.append(buffer[pos:end])
        pos = end

    return sequences, ""


class KeyReader:
    """Reads one complete key sequence at a time from a byte source.

    *read* blocks until at least one byte is available and returns ``b""``
    at end of input. *wait* blocks for up to the given number of seconds
    and reports whether more input is ready; it lets a lone ESC be told
    apart from the start of an arrow-key sequence.
    """

    def __init__(
        self,
        read: Callable[[], bytes],
        wait: Callable[[float], bool],
        *,
        escape_timeout: float = DEFAULT_ESCAPE_TIMEOUT,
    ) -> None:
        self._read = read
        self._wait = wait
        self._escape_timeout = escape_timeout
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self._ready: deque[str] = deque()

    def _feed(self, data: bytes) -> None:
        self._buffer += self._decoder.decode(data)
        sequences, self._buffer = _extract_complete_sequences(self._buffer)
        self._ready.extend(sequences)

    def read_sequence(self) -> str | None:
        """Return the next complete key sequence, or ``None`` at end of input."""
        while not self._ready:
            if self._buffer and not self._wait(self._escape_timeout):
                # Nothing followed the partial sequence; report it as typed.
                pending, self._buffer = self._buffer, ""
                return pending

            data = self._read()
            if not data:
                pending, self._buffer = self._buffer, ""
                return pending or None

            self._feed(data)

        return self._ready.popleft()

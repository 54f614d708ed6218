"""Errors raised while expanding a command line into arguments."""

from __future__ import annotations


class ArgumentError(Exception):
    """Base class for user-syntax errors found during expansion."""

    char: str | None = None

    def __eq__(self, other: object) -> bool:
        if type(self) is not type(other):
            return NotImplemented
        return self.char == other.char  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self), self.char))


class UnexpectedCharacter(ArgumentError):
    """A character appeared where it is not allowed."""

    def __init__(self, char: str) -> None:
        super().__init__(f"received unexpected character '{char}'")
        self.char = char


class UnexpectedEndOfLine(ArgumentError):
    """The line ended while more input was needed."""

    def __init__(self) -> None:
        super().__init__("received unexpected end of line")


class UnterminatedSequence(ArgumentError):
    """A quote or ``${`` was opened but never closed."""

    def __init__(self, char: str) -> None:
        super().__init__(f"received unterminated '{char}' sequence")
        self.char = char


class InvalidEscape(ArgumentError):
    """A backslash escaped a character that cannot be escaped."""

    def __init__(self, char: str) -> None:
        super().__init__(f"received invalid escape character '{char}'")
        self.char = char


ExpansionError = ArgumentError

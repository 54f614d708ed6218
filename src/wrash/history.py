"""Ordered, persisted log of the commands entered in a shell session.

The history file is a YAML list of records, one per committed line::

    - argv: add -A
      base: git
      mode: Wrapped
      is_builtin: false

Entries are kept in insertion order and are never modified once pushed.
The whole file is rewritten on :meth:`History.sync`.
"""

from __future__ import annotations

import contextlib
import logging
import os
import re
import tempfile
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, StrictBool, StrictStr, ValidationError

logger = logging.getLogger(__name__)

HISTORY_DIR_NAME = "wrash"
HISTORY_FILE_NAME = "history.yaml"


# --- Types ---


class SessionMode(str, Enum):
    """How bare input is executed.

    ``WRAPPED`` passes the input as arguments to the session's base command,
    ``NORMAL`` runs the first word as a program.
    """

    WRAPPED = "Wrapped"
    NORMAL = "Normal"

    @classmethod
    def parse(cls, value: str) -> SessionMode:
        """Parse a mode name case-insensitively (``wrapped``, ``Normal``, ...)."""
        for mode in cls:
            if mode.value.lower() == value.strip().lower():
                return mode
        raise ValueError(f"unknown session mode '{value}'")

    def __str__(self) -> str:
        return self.value.lower()


class HistoryEntry(BaseModel):
    """One committed input line and the session state it was entered in."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    argv: StrictStr
    base: StrictStr | None = None
    mode: SessionMode
    is_builtin: StrictBool = False

    def get_command(self) -> str:
        """The full command line, including the base command if any."""
        if self.base:
            return f"{self.base} {self.argv}"
        return self.argv

    def recall_text(self) -> str:
        """The text placed in the editor when this entry is recalled.

        Wrapped, non-builtin entries omit their base since it is implied by
        the session.
        """
        if self.mode is SessionMode.WRAPPED and not self.is_builtin:
            return self.argv
        return self.get_command()


# --- Errors ---


class HistoryError(Exception):
    """Base class for history persistence errors."""


class HistoryIoError(HistoryError):
    """The history file could not be located, read, or written."""


class HistoryParseError(HistoryError):
    """An existing history file holds malformed content."""

    def __init__(
        self,
        message: str,
        *,
        index: int | None = None,
        field: str | None = None,
        expected: str | None = None,
    ) -> None:
        self.message = message
        self.index = index
        self.field = field
        self.expected = expected
        super().__init__(self._describe())

    def _describe(self) -> str:
        parts: list[str] = []
        if self.index is not None:
            parts.append(f"record {self.index}")
        if self.field:
            parts.append(f"field '{self.field}'")
        location = ", ".join(parts)
        detail = f"{self.message} (expected {self.expected})" if self.expected else self.message
        return f"{location}: {detail}" if location else detail


# --- Filtering ---


@dataclass
class HistoryFilter:
    """Predicate over history entries; unset criteria match everything.

    ``base`` keeps entries with that base and entries without a base.
    ``builtins`` set to ``True`` keeps only builtins, ``False`` drops them.
    ``pattern`` is searched for in the entry's ``argv``.
    """

    mode: SessionMode | None = None
    base: str | None = None
    builtins: bool | None = None
    pattern: re.Pattern[str] | None = None

    def matches(self, entry: HistoryEntry) -> bool:
        if self.builtins is not None and entry.is_builtin != self.builtins:
            return False
        if self.mode is not None and entry.mode is not self.mode:
            return False
        if self.base is not None and entry.base is not None and entry.base != self.base:
            return False
        if self.pattern is not None and not self.pattern.search(entry.argv):
            return False
        return True


def in_session_view(entry: HistoryEntry, mode: SessionMode, base: str) -> bool:
    """Whether *entry* is relevant to a session running *base* in *mode*.

    Builtins are always relevant; other entries must share the mode and
    either have no base or the same base.
    """
    return entry.is_builtin or (
        entry.mode is mode and (entry.base is None or entry.base == base)
    )


# --- Serialization ---


def parse_entries(text: str) -> list[HistoryEntry]:
    """Parse the YAML content of a history file."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as err:
        raise HistoryParseError(f"invalid YAML: {err}") from err

    if data is None:
        return []

    if not isinstance(data, list):
        raise HistoryParseError(
            f"top level is a {type(data).__name__}", expected="a list of records"
        )

    entries: list[HistoryEntry] = []
    for index, record in enumerate(data):
        try:
            entries.append(HistoryEntry.model_validate(record))
        except ValidationError as err:
            first = err.errors()[0]
            field = ".".join(str(part) for part in first["loc"]) or None
            raise HistoryParseError(
                first["msg"], index=index, field=field, expected=first["type"]
            ) from err

    return entries


def dump_entries(entries: Iterable[HistoryEntry]) -> str:
    records = [entry.model_dump(mode="json") for entry in entries]
    return yaml.safe_dump(records, sort_keys=False, allow_unicode=True)


def find_history_file() -> Path:
    """Return the default history file path under the user data directory.

    Uses ``$XDG_DATA_HOME`` when set to an absolute path, otherwise
    ``~/.local/share``.

    Raises:
        HistoryIoError: the home directory cannot be determined.
    """
    data_home = os.environ.get("XDG_DATA_HOME", "")
    if data_home and os.path.isabs(data_home):
        base_dir = Path(data_home)
    else:
        try:
            base_dir = Path.home() / ".local" / "share"
        except (RuntimeError, KeyError) as err:
            raise HistoryIoError("could not determine the user data directory") from err

    return base_dir / HISTORY_DIR_NAME / HISTORY_FILE_NAME


# --- History ---


class History:
    """Insertion-ordered history entries with an optional backing file.

    Use :meth:`load` to read an existing file or :meth:`in_memory` for a
    store that is never persisted.
    """

    def __init__(
        self,
        entries: Iterable[HistoryEntry] = (),
        path: str | os.PathLike[str] | None = None,
    ) -> None:
        self._entries: list[HistoryEntry] = list(entries)
        self._path = Path(path) if path is not None else None

    @classmethod
    def load(cls, path: str | os.PathLike[str]) -> History:
        """Load history from *path*.

        A missing file yields an empty history bound to *path*.

        Raises:
            HistoryIoError: the file exists but cannot be read.
            HistoryParseError: the file content is malformed.
        """
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info("No history file at %s, starting empty", path)
            return cls(path=path)
        except OSError as err:
            raise HistoryIoError(f"could not read history file '{path}': {err}") from err

        entries = parse_entries(text)
        logger.info("Loaded %d history entries from %s", len(entries), path)
        return cls(entries, path)

    @classmethod
    def in_memory(cls, entries: Iterable[HistoryEntry] = ()) -> History:
        return cls(entries)

    @property
    def path(self) -> Path | None:
        return self._path

    # --- Access ---

    def push(self, entry: HistoryEntry) -> None:
        self._entries.append(entry)

    def get(self, index: int) -> HistoryEntry | None:
        if 0 <= index < len(self._entries):
            return self._entries[index]
        return None

    def get_from_end(self, index: int) -> HistoryEntry | None:
        """Get the entry *index* positions back from the newest (0 = newest)."""
        return self.get(len(self._entries) - 1 - index)

    def last(self) -> HistoryEntry | None:
        return self.get_from_end(0)

    def __iter__(self) -> Iterator[HistoryEntry]:
        return iter(self._entries)

    def __reversed__(self) -> Iterator[HistoryEntry]:
        return reversed(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    # --- Queries ---

    def filter(self, flt: HistoryFilter) -> list[tuple[int, HistoryEntry]]:
        """Entries matching *flt*, numbered by their position in the result."""
        return list(enumerate(entry for entry in self._entries if flt.matches(entry)))

    def session_view(
        self, mode: SessionMode, base: str, *, newest_first: bool = False
    ) -> list[HistoryEntry]:
        """Entries relevant to a session, see :func:`in_session_view`."""
        source = reversed(self._entries) if newest_first else iter(self._entries)
        return [entry for entry in source if in_session_view(entry, mode, base)]

    # --- Persistence ---

    def sync(self) -> None:
        """Atomically overwrite the backing file with the full history.

        Raises:
            HistoryIoError: there is no backing file or writing it failed.
        """
        if self._path is None:
            raise HistoryIoError("history has no backing file")

        data = dump_entries(self._entries)
        directory = self._path.parent

        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=f".{self._path.name}.", dir=directory)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(data)
                os.replace(tmp_path, self._path)
            except BaseException:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_path)
                raise
        except OSError as err:
            raise HistoryIoError(f"could not write history file '{self._path}': {err}") from err

        logger.info("Synced %d history entries to %s", len(self._entries), self._path)

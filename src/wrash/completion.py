"""Tab completion: filesystem prefix search and candidate formatting.

Handles path completion relative to the shell's working directory, command
completion from a ``:``-delimited search path, the common-prefix narrowing
used by the first Tab press, and the column layout used by the second.
"""

from __future__ import annotations

import fnmatch
import logging
import os
from typing import Callable

from wrash.argv.split import GLOB_CHARS
from wrash.term.utils import is_whitespace_char, pad_to_width, visible_width

logger = logging.getLogger(__name__)

DEFAULT_COLUMN_PADDING = 2


def _path_from_env() -> str:
    return os.environ.get("PATH", "")


# ---------------------------------------------------------------------------
# Buffer helpers
# ---------------------------------------------------------------------------


def get_word_start(buffer: str, cursor: int) -> int:
    """Offset in *buffer* where the word ending at *cursor* begins.

    Whitespace escaped with a backslash belongs to the word.
    """
    position = cursor
    while position > 0:
        if is_whitespace_char(buffer[position - 1]) and buffer[position - 2 : position - 1] != "\\":
            break
        position -= 1
    return position


def get_common_prefix(candidates: list[str]) -> str | None:
    """Longest string every candidate starts with, or ``None`` if empty.

    Starts from the shortest candidate and drops characters from its end
    until it prefixes all of them.
    """
    if not candidates:
        return None

    guess = min(candidates, key=len)
    while guess:
        if all(candidate.startswith(guess) for candidate in candidates):
            return guess
        guess = guess[:-1]

    return None


def display_name(candidate: str) -> str:
    """Final path segment of *candidate*, keeping a trailing ``/``."""
    stripped = candidate.rstrip("/")
    if not stripped:
        return candidate
    name = stripped.rpartition("/")[2]
    return f"{name}/" if candidate.endswith("/") else name


def format_columns(
    candidates: list[str], width: int, padding: int = DEFAULT_COLUMN_PADDING
) -> list[str]:
    """Lay out *candidates* in rows of equal-width columns.

    Each column is as wide as the longest candidate plus *padding*; as many
    columns as fit in *width* are used, and at least one.
    """
    if not candidates:
        return []

    column_width = max(visible_width(candidate) for candidate in candidates) + padding
    columns = max(1, width // column_width)

    lines: list[str] = []
    for start in range(0, len(candidates), columns):
        row = candidates[start : start + columns]
        lines.append("".join(pad_to_width(candidate, column_width) for candidate in row).rstrip())
    return lines


# ---------------------------------------------------------------------------
# Filesystem search
# ---------------------------------------------------------------------------


def _is_executable_file(entry: os.DirEntry[str]) -> bool:
    try:
        return entry.is_file() and os.access(entry.path, os.X_OK)
    except OSError:
        return False


def _is_directory(entry: os.DirEntry[str]) -> bool:
    try:
        return entry.is_dir()
    except OSError:
        return False


def _matches_segment(name: str, segment: str) -> bool:
    """Whether *name* completes *segment*; glob characters in *segment* are honoured."""
    if any(char in GLOB_CHARS for char in segment):
        return fnmatch.fnmatchcase(name, segment + "*")
    return name.startswith(segment)


class CompletionSearch:
    """Prefix search over the filesystem.

    *cwd* and *search_path* are called on every search so that completion
    follows ``cd`` and changes to ``PATH``.
    """

    def __init__(
        self,
        cwd: Callable[[], str] = os.getcwd,
        search_path: Callable[[], str] = _path_from_env,
    ) -> None:
        self._cwd = cwd
        self._search_path = search_path

    def _scan(self, directory: str, segment: str) -> list[os.DirEntry[str]]:
        """Entries of *directory* whose name starts with *segment*.

        Hidden entries are only included when *segment* starts with ``.``.
        Unreadable directories, including a removed working directory,
        produce no entries.
        """
        target = os.path.expanduser(directory or ".")
        try:
            if not os.path.isabs(target):
                target = os.path.join(self._cwd(), target)
            with os.scandir(target) as it:
                entries = [
                    entry
                    for entry in it
                    if _matches_segment(entry.name, segment)
                    and (segment.startswith(".") or not entry.name.startswith("."))
                ]
        except OSError as err:
            logger.debug("Skipping unreadable directory %s: %s", target, err)
            return []

        entries.sort(key=lambda entry: entry.name)
        return entries

    def _split(self, prefix: str) -> tuple[str, str]:
        """Split *prefix* into its directory part (with ``/``) and final segment."""
        directory, slash, segment = prefix.rpartition("/")
        return directory + slash, segment

    def search_dir(self, prefix: str) -> list[str]:
        """Paths whose final segment starts with the final segment of *prefix*.

        Results keep the directory part exactly as typed (including a
        leading ``./`` or ``~/``); directories end with ``/``.
        """
        directory, segment = self._split(prefix)
        return [
            directory + entry.name + ("/" if _is_directory(entry) else "")
            for entry in self._scan(directory, segment)
        ]

    def search_path(self, prefix: str, path_value: str | None = None) -> list[str]:
        """Base names of executables on the search path starting with *prefix*.

        *path_value* is a ``:``-delimited directory list and defaults to the
        configured search path.
        """
        if path_value is None:
            path_value = self._search_path()

        found: list[str] = []
        seen: set[str] = set()
        for directory in path_value.split(":"):
            if not directory:
                continue
            for entry in self._scan(directory, prefix):
                if entry.name in seen or _is_directory(entry) or not _is_executable_file(entry):
                    continue
                seen.add(entry.name)
                found.append(entry.name)

        return sorted(found)

    def get_completions(self, prefix: str, is_command: bool) -> list[str]:
        """Candidates that could replace *prefix*.

        Arguments complete to any path. Commands complete to directories and
        executables; a command without a ``/`` also searches the search path.
        """
        if not is_command:
            return self.search_dir(prefix)

        directory, segment = self._split(prefix)
        local: list[str] = []
        for entry in self._scan(directory, segment):
            if _is_directory(entry):
                local.append(f"{directory}{entry.name}/")
            elif directory and _is_executable_file(entry):
                local.append(directory + entry.name)

        if directory:
            return local

        # Bare names only run from the search path, so local files are skipped.
        return local + self.search_path(prefix)

"""Shell-word expansion: tilde, variables, splitting, filenames, quotes.

The stages always run in the same order::

    expand_tilde -> expand_vars -> split_words -> expand_filenames -> expand_quotes

Text substituted by an earlier stage is escaped with
:func:`~wrash.argv.split.escape_literal`, so a variable whose value holds
spaces or ``*`` is neither split nor globbed by the later stages.
"""

from __future__ import annotations

import glob
import os
from pathlib import Path
from typing import Callable

from wrash.argv.errors import (
    InvalidEscape,
    UnexpectedCharacter,
    UnexpectedEndOfLine,
    UnterminatedSequence,
)
from wrash.argv.split import ESCAPABLE, GLOB_CHARS, QUOTES, escape_literal, split_words

HomeProvider = Callable[[], str | None]
VariableLookup = Callable[[str], str | None]
CwdProvider = Callable[[], str]


def default_home() -> str | None:
    """Return the current user's home directory, or ``None`` if unknown."""
    try:
        return str(Path.home())
    except (RuntimeError, KeyError):
        return None


# ---------------------------------------------------------------------------
# Tilde expansion
# ---------------------------------------------------------------------------


def expand_tilde(source: str, home: HomeProvider = default_home) -> str:
    """Replace every unquoted, unescaped ``~`` with the home directory.

    When *home* returns ``None`` the ``~`` is left as is.

    Raises:
        UnterminatedSequence: a quote opened in *source* is never closed.
    """
    result: list[str] = []
    quote: str | None = None
    i = 0

    while i < len(source):
        char = source[i]

        if quote is not None:
            if char == "\\" and quote == '"':
                result.append(source[i : i + 2])
                i += 2
                continue
            if char == quote:
                quote = None
        elif char == "\\":
            result.append(source[i : i + 2])
            i += 2
            continue
        elif char in QUOTES:
            quote = char
        elif char == "~":
            value = home()
            if value is not None:
                result.append(escape_literal(value))
                i += 1
                continue

        result.append(char)
        i += 1

    if quote is not None:
        raise UnterminatedSequence(quote)

    return "".join(result)


# ---------------------------------------------------------------------------
# Variable expansion
# ---------------------------------------------------------------------------


def _is_name_char(char: str) -> bool:
    return char.isalnum() or char == "_"


def _read_variable(source: str, start: int) -> tuple[str | None, int]:
    """Read the variable reference whose ``$`` sits at *start*.

    Returns the variable name (``None`` when the ``$`` is not followed by a
    name and stays literal) and the index just past the reference.
    """
    i = start + 1
    if i >= len(source):
        raise UnterminatedSequence("$")

    if source[i] == "{":
        end = source.find("}", i + 1)
        if end == -1:
            raise UnterminatedSequence("{")
        name = source[i + 1 : end]
        for char in name:
            if not _is_name_char(char):
                raise UnexpectedCharacter(char)
        return name, end + 1

    end = i
    while end < len(source) and _is_name_char(source[end]):
        end += 1

    if end == i:
        return None, i

    return source[i:end], end


def expand_vars(source: str, lookup: VariableLookup = os.environ.get) -> str:
    """Substitute ``$NAME`` and ``${NAME}`` references.

    Undefined variables expand to the empty string. References inside single
    quotes are left untouched; double quotes do not suppress expansion.

    Raises:
        UnterminatedSequence: ``${`` without a closing ``}`` (char ``{``), or
            a ``$`` at the very end of the line (char ``$``).
        UnexpectedCharacter: a ``${...}`` name holds a character that is not
            alphanumeric or ``_``.
    """
    result: list[str] = []
    quote: str | None = None
    i = 0

    while i < len(source):
        char = source[i]

        if char == "\\" and quote != "'":
            result.append(source[i : i + 2])
            i += 2
            continue

        if char in QUOTES:
            if quote is None:
                quote = char
            elif quote == char:
                quote = None
            result.append(char)
            i += 1
            continue

        if char == "$" and quote != "'":
            name, i = _read_variable(source, i)
            if name is None:
                result.append("$")
            else:
                value = lookup(name)
                if value:
                    result.append(escape_literal(value))
            continue

        result.append(char)
        i += 1

    return "".join(result)


# ---------------------------------------------------------------------------
# Filename expansion
# ---------------------------------------------------------------------------


def _glob_pattern(word: str) -> str | None:
    """Translate *word* into a glob pattern.

    Quoted and escaped characters are made literal. Returns ``None`` when the
    word has no unquoted, unescaped glob metacharacter, or holds an escape
    the quote removal pass would reject.
    """
    pattern: list[str] = []
    quote: str | None = None
    has_glob = False
    i = 0

    while i < len(word):
        char = word[i]

        if char == "\\" and quote != "'":
            if i + 1 >= len(word) or word[i + 1] not in ESCAPABLE:
                return None
            pattern.append(glob.escape(word[i + 1]))
            i += 2
            continue

        if quote is not None:
            if char == quote:
                quote = None
            else:
                pattern.append(glob.escape(char))
        elif char in QUOTES:
            quote = char
        elif char in GLOB_CHARS:
            has_glob = True
            pattern.append(char)
        else:
            pattern.append(char)

        i += 1

    return "".join(pattern) if has_glob else None


def expand_filenames(words: list[str], cwd: CwdProvider = os.getcwd) -> list[str]:
    """Replace each glob word with the sorted paths it matches.

    Relative patterns are resolved against the directory *cwd* returns. A
    pattern that matches nothing is kept unchanged, as is a relative pattern
    when the working directory no longer exists.
    """
    expanded: list[str] = []

    for word in words:
        pattern = _glob_pattern(word)
        if pattern is None:
            expanded.append(word)
            continue

        try:
            root_dir = None if os.path.isabs(pattern) else cwd()
        except OSError:
            expanded.append(word)
            continue

        matches = sorted(glob.glob(pattern, root_dir=root_dir))
        if matches:
            expanded.extend(escape_literal(match) for match in matches)
        else:
            expanded.append(word)

    return expanded


# ---------------------------------------------------------------------------
# Quote removal
# ---------------------------------------------------------------------------


def _remove_quotes(word: str) -> str:
    result: list[str] = []
    quote: str | None = None
    i = 0

    while i < len(word):
        char = word[i]

        if char == "\\" and quote != "'":
            if i + 1 >= len(word):
                raise UnexpectedEndOfLine()
            escaped = word[i + 1]
            if escaped not in ESCAPABLE:
                raise InvalidEscape(escaped)
            result.append(escaped)
            i += 2
            continue

        if quote is None and char in QUOTES:
            quote = char
        elif char == quote:
            quote = None
        else:
            result.append(char)

        i += 1

    if quote is not None:
        raise UnterminatedSequence(quote)

    return "".join(result)


def expand_quotes(words: list[str]) -> list[str]:
    """Remove quote delimiters and resolve backslash escapes in each word.

    A quote of the other kind inside a quoted span is kept literally. Inside
    single quotes a backslash is an ordinary character.

    Raises:
        InvalidEscape: a backslash escapes a character outside the escapable set.
        UnexpectedEndOfLine: a word ends with a lone backslash.
        UnterminatedSequence: a quote is still open at the end of a word.
    """
    return [_remove_quotes(word) for word in words]


# ---------------------------------------------------------------------------
# Full pipeline
# ---------------------------------------------------------------------------


def expand(
    source: str,
    *,
    home: HomeProvider = default_home,
    lookup: VariableLookup = os.environ.get,
    cwd: CwdProvider = os.getcwd,
) -> list[str]:
    """Expand a raw command line into its argument vector."""
    text = expand_tilde(source, home)
    text = expand_vars(text, lookup)
    words = split_words(text)
    words = expand_filenames(words, cwd)
    return expand_quotes(words)

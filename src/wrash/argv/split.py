"""Quote- and escape-aware word splitting."""

from __future__ import annotations

QUOTES = frozenset({"'", '"'})
DELIMITERS = frozenset({" ", "\t"})
GLOB_CHARS = frozenset({"*", "?", "["})

# Characters a backslash may escape outside single quotes.
ESCAPABLE = frozenset({'"', "'", " ", "\t", "~", "\\", "$"}) | GLOB_CHARS


def escape_literal(text: str) -> str:
    """Backslash-escape *text* so later expansion stages treat it verbatim.

    Used for values substituted into the line (home directory, variable
    values, glob matches): they are never re-split, re-globbed, or have
    their quotes removed.
    """
    return "".join(f"\\{char}" if char in ESCAPABLE else char for char in text)


def unescape_literal(text: str) -> str:
    """Undo :func:`escape_literal`: drop the backslash before escapable characters."""
    result: list[str] = []
    i = 0
    while i < len(text):
        if text[i] == "\\" and i + 1 < len(text) and text[i + 1] in ESCAPABLE:
            i += 1
        result.append(text[i])
        i += 1
    return "".join(result)


def split_words(source: str) -> list[str]:
    """Split *source* on runs of unquoted, unescaped spaces and tabs.

    Quote characters and backslashes are kept in the returned words; they
    are removed by the quote removal pass. An empty quoted span (``''``)
    still produces a word.
    """
    words: list[str] = []
    word = ""
    in_word = False
    quote: str | None = None
    i = 0

    while i < len(source):
        char = source[i]

        if quote is not None:
            word += char
            if char == "\\" and quote == '"' and i + 1 < len(source):
                word += source[i + 1]
                i += 1
            elif char == quote:
                quote = None
        elif char == "\\":
            word += source[i : i + 2]
            in_word = True
            i += 1
        elif char in DELIMITERS:
            if in_word:
                words.append(word)
                word = ""
                in_word = False
        else:
            if char in QUOTES:
                quote = char
            word += char
            in_word = True

        i += 1

    if in_word:
        words.append(word)

    return words

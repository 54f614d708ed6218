"""Display-width measurement and character classification for the terminal."""

from __future__ import annotations

import re
import unicodedata

import grapheme
import wcwidth as _wcwidth

# SGR/cursor CSI sequences and OSC titles, which occupy no columns.
_STRIP_RE = re.compile(r"\x1b\[[0-9;?]*[A-Za-z]|\x1b\][^\x07]*\x07")

_width_cache: dict[str, int] = {}
_WIDTH_CACHE_MAX = 512


def _cache_width(key: str, value: int) -> int:
    if len(_width_cache) >= _WIDTH_CACHE_MAX:
        _width_cache.clear()
    _width_cache[key] = value
    return value


def _grapheme_width(g: str) -> int:
    """Columns taken by one grapheme cluster.

    Control characters and lone combining marks take none; emoji sequences
    (VS16, ZWJ, skin tones, flags) take two; everything else is measured by
    wcwidth on its first codepoint.
    """
    if len(g) == 1:
        cp = ord(g)
        if cp < 0x20 or 0x7F <= cp <= 0x9F:
            return 0
        return max(_wcwidth.wcwidth(g), 0)

    for ch in g:
        cp = ord(ch)
        if cp in (0xFE0F, 0x200D) or 0x1F3FB <= cp <= 0x1F3FF or 0x1F1E6 <= cp <= 0x1F1FF:
            return 2

    first = g[0]
    if ord(first) >= 0x1F000:
        return 2
    if unicodedata.category(first)[0] == "M" or unicodedata.category(first) == "Cf":
        return 0
    return max(_wcwidth.wcwidth(first), 0)


def visible_width(text: str) -> int:
    """Number of terminal columns *text* occupies, ignoring escape sequences."""
    if not text:
        return 0

    stripped = _STRIP_RE.sub("", text)
    if stripped.isascii() and stripped.isprintable():
        return len(stripped)

    cached = _width_cache.get(stripped)
    if cached is not None:
        return cached

    total = sum(_grapheme_width(g) for g in grapheme.graphemes(stripped))
    return _cache_width(stripped, total)


def pad_to_width(text: str, width: int) -> str:
    """Right-pad *text* with spaces to *width* display columns."""
    return text + " " * max(0, width - visible_width(text))


def is_whitespace_char(char: str) -> bool:
    return char in (" ", "\t", "\n", "\r", "\f", "\v")

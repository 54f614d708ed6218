"""Decoding raw terminal input into key identifiers.

A key identifier is a string such as ``"a"``, ``"ctrl+a"``, ``"alt+left"`` or
``"enter"``: zero or more modifiers (always in ``ctrl``, ``shift``, ``alt``
order) joined to a key name with ``+``. Only the legacy xterm/VT sequences
are understood; the shell never enables extended keyboard protocols.
"""

from __future__ import annotations

import re

KeyId = str

MODIFIER_ORDER = ("ctrl", "shift", "alt")

# Bit values used in the ``1;<n>`` modifier parameter (n - 1 is the bit set).
MODIFIERS: dict[str, int] = {
    "shift": 1,
    "alt": 2,
    "ctrl": 4,
}

LEGACY_KEY_SEQUENCES: dict[str, str] = {
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1b[C": "right",
    "\x1b[D": "left",
    "\x1b[H": "home",
    "\x1b[F": "end",
    "\x1bOA": "up",
    "\x1bOB": "down",
    "\x1bOC": "right",
    "\x1bOD": "left",
    "\x1bOH": "home",
    "\x1bOF": "end",
    "\x1b[1~": "home",
    "\x1b[2~": "insert",
    "\x1b[3~": "delete",
    "\x1b[4~": "end",
    "\x1b[5~": "pageUp",
    "\x1b[6~": "pageDown",
    "\x1b[7~": "home",
    "\x1b[8~": "end",
    "\x1b[Z": "shift+tab",
}

_CSI_LETTER_KEYS: dict[str, str] = {
    "A": "up",
    "B": "down",
    "C": "right",
    "D": "left",
    "H": "home",
    "F": "end",
}

_CSI_TILDE_KEYS: dict[str, str] = {
    "1": "home",
    "2": "insert",
    "3": "delete",
    "4": "end",
    "5": "pageUp",
    "6": "pageDown",
}

_NAMED_KEYS: dict[str, str] = {
    "pageup": "pageUp",
    "pagedown": "pageDown",
}

# ESC [ 1 ; <mod> <letter>   and   ESC [ <n> ; <mod> ~
_MODIFIED_LETTER_RE = re.compile(r"^\x1b\[1;(\d+)([ABCDHF])$")
_MODIFIED_TILDE_RE = re.compile(r"^\x1b\[(\d+);(\d+)~$")


def _modifier_prefix(param: int) -> str:
    bits = param - 1
    return "".join(
        f"{name}+" for name in MODIFIER_ORDER if bits & MODIFIERS[name]
    )


def normalize_key_id(key_id: str) -> KeyId:
    """Canonicalize a user-written key id (``"Alt+Ctrl+B"`` -> ``"ctrl+alt+b"``)."""
    parts = key_id.strip().split("+")
    # A trailing "+" means the key itself is "+".
    if len(parts) > 1 and parts[-1] == "":
        parts = parts[:-2] + ["+"]
    *modifiers, key = parts
    modifiers = [modifier.lower() for modifier in modifiers]
    for modifier in modifiers:
        if modifier not in MODIFIERS:
            raise ValueError(f"unknown modifier '{modifier}' in key '{key_id}'")
    if len(key) > 1 or modifiers:
        key = _NAMED_KEYS.get(key.lower(), key.lower())
    prefix = "".join(f"{name}+" for name in MODIFIER_ORDER if name in modifiers)
    return prefix + key


def parse_key(data: str) -> KeyId | None:  # noqa: C901
    """Return the key identifier for one complete input sequence, or ``None``."""
    if not data:
        return None

    if data in LEGACY_KEY_SEQUENCES:
        return LEGACY_KEY_SEQUENCES[data]

    match = _MODIFIED_LETTER_RE.match(data)
    if match:
        return _modifier_prefix(int(match.group(1))) + _CSI_LETTER_KEYS[match.group(2)]

    match = _MODIFIED_TILDE_RE.match(data)
    if match:
        key = _CSI_TILDE_KEYS.get(match.group(1))
        if key is None:
            return None
        return _modifier_prefix(int(match.group(2))) + key

    # --- Single-byte keys ---
    if data == "\x1b":
        return "escape"
    if data in ("\r", "\n"):
        return "enter"
    if data == "\t":
        return "tab"
    if data == " ":
        return "space"
    if data in ("\x7f", "\x08"):
        return "backspace"
    if data == "\x00":
        return "ctrl+space"
    if data == "\x1f":
        return "ctrl+-"
    if len(data) == 1 and 1 <= ord(data) <= 26:
        return "ctrl+" + chr(ord(data) + ord("a") - 1)

    # --- Alt + key (ESC prefix) ---
    if len(data) == 2 and data[0] == "\x1b":
        ch = data[1]
        if ch in ("\r", "\n"):
            return "alt+enter"
        if ch in ("\x7f", "\x08"):
            return "alt+backspace"
        if 1 <= ord(ch) <= 26:
            return "ctrl+alt+" + chr(ord(ch) + ord("a") - 1)
        if ch.isupper():
            return "shift+alt+" + ch.lower()
        if ch.isprintable():
            return "alt+" + ch

    if len(data) == 1 and data.isprintable():
        return data

    return None


def matches_key(data: str, key_id: str) -> bool:
    """Whether raw input *data* is the key named by *key_id*."""
    parsed = parse_key(data)
    return parsed is not None and parsed == normalize_key_id(key_id)


def is_printable_input(data: str) -> bool:
    """Whether *data* is plain text (no control or escape characters)."""
    return bool(data) and not any(
        ord(ch) < 32 or ord(ch) == 0x7F or 0x80 <= ord(ch) <= 0x9F for ch in data
    )

"""Raw terminal input, key decoding and display width."""

from wrash.term.keybindings import (
    DEFAULT_EDITOR_KEYBINDINGS,
    EditorAction,
    EditorKeybindingsManager,
    get_editor_keybindings,
    set_editor_keybindings,
)
from wrash.term.keys import KeyId, matches_key, normalize_key_id, parse_key
from wrash.term.terminal import ProcessTerminal, Terminal
from wrash.term.utils import visible_width

__all__ = [
    # Keys
    "KeyId",
    "matches_key",
    "normalize_key_id",
    "parse_key",
    # Keybindings
    "DEFAULT_EDITOR_KEYBINDINGS",
    "EditorAction",
    "EditorKeybindingsManager",
    "get_editor_keybindings",
    "set_editor_keybindings",
    # Terminal
    "ProcessTerminal",
    "Terminal",
    "visible_width",
]

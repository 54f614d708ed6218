"""Line editor keybindings."""

from __future__ import annotations

import logging
from typing import Literal, get_args

from wrash.term.keys import KeyId, normalize_key_id, parse_key

logger = logging.getLogger(__name__)

EditorAction = Literal[
    # Cursor movement
    "cursorLeft",
    "cursorRight",
    "cursorWordLeft",
    "cursorWordRight",
    "cursorLineStart",
    "cursorLineEnd",
    # History
    "historyPrevious",
    "historyNext",
    # Deletion
    "deleteCharBackward",
    "deleteCharForward",
    "deleteWordBackward",
    "deleteToLineStart",
    "deleteToLineEnd",
    # Line control
    "clearScreen",
    "exit",
    "cancel",
    "submit",
    "tab",
]

EDITOR_ACTIONS: tuple[str, ...] = get_args(EditorAction)

EditorKeybindingsConfig = dict[EditorAction, KeyId | list[KeyId]]

DEFAULT_EDITOR_KEYBINDINGS: dict[EditorAction, KeyId | list[KeyId]] = {
    # Cursor movement
    "cursorLeft": ["left", "ctrl+b"],
    "cursorRight": ["right", "ctrl+f"],
    "cursorWordLeft": ["ctrl+left", "alt+left", "alt+b"],
    "cursorWordRight": ["ctrl+right", "alt+right", "alt+f"],
    "cursorLineStart": ["home", "ctrl+a"],
    "cursorLineEnd": ["end", "ctrl+e"],
    # History
    "historyPrevious": "up",
    "historyNext": "down",
    # Deletion
    "deleteCharBackward": "backspace",
    "deleteCharForward": "delete",
    "deleteWordBackward": ["ctrl+w", "alt+backspace"],
    "deleteToLineStart": "ctrl+u",
    "deleteToLineEnd": "ctrl+k",
    # Line control
    "clearScreen": "ctrl+l",
    "exit": "ctrl+d",
    "cancel": "ctrl+c",
    "submit": "enter",
    "tab": "tab",
}


def _as_list(keys: KeyId | list[KeyId]) -> list[KeyId]:
    return list(keys) if isinstance(keys, list) else [keys]


class EditorKeybindingsManager:
    """Maps key identifiers to editor actions.

    User configuration replaces the whole key list of each action it names;
    unnamed actions keep their defaults. Unknown actions and malformed key
    ids in the configuration are logged and ignored.
    """

    def __init__(self, config: EditorKeybindingsConfig | None = None) -> None:
        self._action_to_keys: dict[EditorAction, list[KeyId]] = {}
        self._key_to_action: dict[KeyId, EditorAction] = {}
        self._build_maps(config or {})

    def _build_maps(self, config: EditorKeybindingsConfig) -> None:
        self._action_to_keys.clear()
        self._key_to_action.clear()

        for action, keys in DEFAULT_EDITOR_KEYBINDINGS.items():
            self._action_to_keys[action] = _as_list(keys)

        for action, keys in config.items():
            if action not in EDITOR_ACTIONS:
                logger.warning("Ignoring keybinding for unknown action '%s'", action)
                continue
            normalized: list[KeyId] = []
            for key in _as_list(keys):
                try:
                    normalized.append(normalize_key_id(key))
                except ValueError as err:
                    logger.warning("Ignoring keybinding for '%s': %s", action, err)
            self._action_to_keys[action] = normalized

        # A configured action takes its keys away from default ones.
        for action, keys in self._action_to_keys.items():
            for key in keys:
                if action in config or key not in self._key_to_action:
                    self._key_to_action[key] = action

    def action_for(self, data: str) -> EditorAction | None:
        """The action bound to raw input *data*, if any."""
        key = parse_key(data)
        if key is None:
            return None
        return self._key_to_action.get(key)

    def matches(self, data: str, action: EditorAction) -> bool:
        """Check if input matches a specific action."""
        key = parse_key(data)
        return key is not None and key in self._action_to_keys.get(action, [])

    def get_keys(self, action: EditorAction) -> list[KeyId]:
        """Get keys bound to an action."""
        return self._action_to_keys.get(action, [])

    def set_config(self, config: EditorKeybindingsConfig) -> None:
        self._build_maps(config)


_global_editor_keybindings: EditorKeybindingsManager | None = None


def get_editor_keybindings() -> EditorKeybindingsManager:
    global _global_editor_keybindings
    if _global_editor_keybindings is None:
        _global_editor_keybindings = EditorKeybindingsManager()
    return _global_editor_keybindings


def set_editor_keybindings(manager: EditorKeybindingsManager) -> None:
    global _global_editor_keybindings
    _global_editor_keybindings = manager

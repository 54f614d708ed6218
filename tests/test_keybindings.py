"""Tests for wrash.term.keybindings."""

from __future__ import annotations

import logging

from wrash.term.keybindings import (
    DEFAULT_EDITOR_KEYBINDINGS,
    EDITOR_ACTIONS,
    EditorKeybindingsManager,
    get_editor_keybindings,
    set_editor_keybindings,
)


class TestDefaultEditorKeybindings:
    def test_every_action_has_a_default(self) -> None:
        assert set(DEFAULT_EDITOR_KEYBINDINGS) == set(EDITOR_ACTIONS)


class TestEditorKeybindingsManager:
    def test_default_actions(self) -> None:
        kb = EditorKeybindingsManager()
        assert kb.action_for("\r") == "submit"
        assert kb.action_for("\t") == "tab"
        assert kb.action_for("\x1b[A") == "historyPrevious"
        assert kb.action_for("\x01") == "cursorLineStart"
        assert kb.action_for("\x1b[H") == "cursorLineStart"
        assert kb.action_for("\x1b[1;5D") == "cursorWordLeft"
        assert kb.action_for("\x04") == "exit"
        assert kb.action_for("\x0c") == "clearScreen"

    def test_unbound_keys(self) -> None:
        kb = EditorKeybindingsManager()
        assert kb.action_for("a") is None
        assert kb.action_for("\x1b[99~") is None

    def test_matches(self) -> None:
        kb = EditorKeybindingsManager()
        assert kb.matches("\x02", "cursorLeft")
        assert not kb.matches("\x02", "cursorRight")

    def test_override_replaces_keys(self) -> None:
        kb = EditorKeybindingsManager({"exit": "Ctrl+Q"})
        assert kb.get_keys("exit") == ["ctrl+q"]
        assert kb.action_for("\x11") == "exit"
        assert kb.action_for("\x04") is None

    def test_override_takes_key_from_default(self) -> None:
        kb = EditorKeybindingsManager({"historyPrevious": ["up", "ctrl+p"], "clearScreen": "ctrl+b"})
        assert kb.action_for("\x10") == "historyPrevious"
        assert kb.action_for("\x02") == "clearScreen"

    def test_unknown_action_ignored(self, caplog) -> None:
        with caplog.at_level(logging.WARNING):
            kb = EditorKeybindingsManager({"launchRockets": "ctrl+r"})
        assert kb.action_for("\x12") is None
        assert "launchRockets" in caplog.text

    def test_bad_key_ignored(self, caplog) -> None:
        with caplog.at_level(logging.WARNING):
            kb = EditorKeybindingsManager({"exit": ["hyper+x", "ctrl+q"]})
        assert kb.get_keys("exit") == ["ctrl+q"]

    def test_set_config(self) -> None:
        kb = EditorKeybindingsManager({"exit": "ctrl+q"})
        kb.set_config({})
        assert kb.action_for("\x04") == "exit"


class TestGlobalKeybindings:
    def test_set_and_get(self) -> None:
        previous = get_editor_keybindings()
        custom = EditorKeybindingsManager({"exit": "ctrl+q"})
        try:
            set_editor_keybindings(custom)
            assert get_editor_keybindings() is custom
        finally:
            set_editor_keybindings(previous)

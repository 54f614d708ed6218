"""Tests for wrash.session."""

from __future__ import annotations

import os

import pytest

from wrash.history import History, HistoryEntry, HistoryIoError, SessionMode
from wrash.session import Session, SessionFrozenError


class ScriptedEditor:
    """Returns scripted lines and records the recall list of each read."""

    def __init__(self, lines: list[str] | None = None) -> None:
        self.lines = list(lines or [])
        self.prompts: list[str] = []
        self.recalls: list[list[HistoryEntry]] = []

    def take_input(self, prompt, recall=()):
        self.prompts.append(prompt)
        self.recalls.append(list(recall))
        return self.lines.pop(0) if self.lines else "exit"


def make_session(mode=SessionMode.WRAPPED, is_frozen=False, history=None, editor=None) -> Session:
    return Session(
        history if history is not None else History.in_memory(),
        "git",
        editor or ScriptedEditor(),
        mode=mode,
        is_frozen=is_frozen,
    )


class TestSessionMode:
    def test_defaults(self) -> None:
        session = make_session()
        assert session.mode() is SessionMode.WRAPPED
        assert session.base == "git"
        assert not session.is_frozen

    def test_set_mode(self) -> None:
        session = make_session()
        session.set_mode(SessionMode.NORMAL)
        assert session.mode() is SessionMode.NORMAL

    def test_frozen_rejects_change(self) -> None:
        session = make_session(is_frozen=True)
        with pytest.raises(SessionFrozenError):
            session.set_mode(SessionMode.NORMAL)
        assert session.mode() is SessionMode.WRAPPED

    def test_frozen_accepts_same_mode(self) -> None:
        session = make_session(is_frozen=True)
        session.set_mode(SessionMode.WRAPPED)
        assert session.mode() is SessionMode.WRAPPED

    def test_frozen_cannot_start_normal(self) -> None:
        with pytest.raises(SessionFrozenError):
            make_session(mode=SessionMode.NORMAL, is_frozen=True)


class TestEnviron:
    def test_defaults_to_copy_of_process_environment(self, monkeypatch) -> None:
        monkeypatch.setenv("WRASH_TEST_VAR", "1")
        session = make_session()
        assert session.environ["WRASH_TEST_VAR"] == "1"
        session.environ["WRASH_TEST_VAR"] = "2"
        assert os.environ["WRASH_TEST_VAR"] == "1"

    def test_given_mapping_is_used(self) -> None:
        environ = {"A": "1"}
        session = Session(History.in_memory(), "git", ScriptedEditor(), environ=environ)
        assert session.environ is environ


class TestPushToHistory:
    def test_wrapped_entry_records_base(self) -> None:
        session = make_session()
        assert session.push_to_history("add -A")
        assert session.history.last() == HistoryEntry(
            argv="add -A", base="git", mode=SessionMode.WRAPPED, is_builtin=False
        )

    def test_builtin_has_no_base(self) -> None:
        session = make_session()
        session.push_to_history("mode normal", is_builtin=True)
        assert session.history.last().base is None
        assert session.history.last().is_builtin

    def test_normal_entry_has_no_base(self) -> None:
        session = make_session(mode=SessionMode.NORMAL)
        session.push_to_history("ls -la")
        assert session.history.last() == HistoryEntry(argv="ls -la", mode=SessionMode.NORMAL)

    def test_line_is_trimmed(self) -> None:
        session = make_session()
        session.push_to_history("  status  ")
        assert session.history.last().argv == "status"

    def test_blank_line_not_recorded(self) -> None:
        session = make_session()
        assert not session.push_to_history("   ")
        assert len(session.history) == 0

    def test_consecutive_duplicate_not_recorded(self) -> None:
        session = make_session()
        session.push_to_history("status")
        assert not session.push_to_history("status")
        session.push_to_history("log")
        session.push_to_history("status")
        assert [e.argv for e in session.history_iter()] == ["status", "log", "status"]

    def test_same_line_in_other_mode_is_recorded(self) -> None:
        session = make_session()
        session.push_to_history("status")
        session.set_mode(SessionMode.NORMAL)
        assert session.push_to_history("status")


class TestTakeInput:
    def test_passes_newest_first_session_view(self) -> None:
        history = History.in_memory(
            [
                HistoryEntry(argv="add -A", base="git", mode=SessionMode.WRAPPED),
                HistoryEntry(argv="ls", mode=SessionMode.NORMAL),
                HistoryEntry(argv="clippy", base="cargo", mode=SessionMode.WRAPPED),
                HistoryEntry(argv="status", base="git", mode=SessionMode.WRAPPED),
            ]
        )
        editor = ScriptedEditor(["log"])
        session = make_session(history=history, editor=editor)
        assert session.take_input("$ ") == "log"
        assert editor.prompts == ["$ "]
        assert [e.argv for e in editor.recalls[0]] == ["status", "add -A"]


class TestHistorySync:
    def test_sync_writes_file(self, tmp_path) -> None:
        path = tmp_path / "history.yaml"
        session = make_session(history=History.load(path))
        session.push_to_history("status")
        session.history_sync()
        assert [e.argv for e in History.load(path)] == ["status"]

    def test_sync_in_memory_fails(self) -> None:
        with pytest.raises(HistoryIoError):
            make_session().history_sync()

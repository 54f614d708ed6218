"""Tests for the wrash command line entry point."""

from __future__ import annotations

import logging
import sys

from click.testing import CliRunner

from wrash import __version__
from wrash.cli import _open_history, main


def invoke(*args: str):
    return CliRunner().invoke(main, list(args))


class TestMain:
    def test_version(self) -> None:
        result = invoke("--version")
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_command_required(self) -> None:
        assert invoke().exit_code == 2

    def test_frozen_normal_is_usage_error(self) -> None:
        result = invoke("--frozen", "--mode", "normal", sys.executable)
        assert result.exit_code == 2
        assert "--frozen" in result.output

    def test_unparsable_base(self) -> None:
        result = invoke("'git")
        assert result.exit_code == 2
        assert "could not parse base command" in result.output

    def test_missing_base(self) -> None:
        result = invoke("wrash-no-such-command")
        assert result.exit_code == 1
        assert "command not found: wrash-no-such-command" in result.output

    def test_requires_terminal(self) -> None:
        result = invoke(sys.executable)
        assert result.exit_code == 1
        assert "not a terminal" in result.output


class TestOpenHistory:
    def test_no_path_is_in_memory(self) -> None:
        assert _open_history(None).path is None

    def test_corrupt_file_warns_once(self, tmp_path, capsys, caplog) -> None:
        path = tmp_path / "history.yaml"
        path.write_text("- {argv: x}\n")
        with caplog.at_level(logging.WARNING):
            history = _open_history(str(path))
        assert history.path is None
        assert len(history) == 0
        assert capsys.readouterr().err.count("could not load history file") == 1
        assert caplog.records == []
        assert path.read_text() == "- {argv: x}\n"

"""The read-expand-dispatch loop of an interactive wrash session."""

from __future__ import annotations

import getpass
import logging
import os
import subprocess
from typing import Callable

import click

from wrash.argv import ArgumentError, expand
from wrash.argv.expand import default_home
from wrash.builtins import is_builtin, run_builtin
from wrash.history import HistoryError, SessionMode
from wrash.session import Session

logger = logging.getLogger(__name__)

STATUS_SYNTAX_ERROR = 2
STATUS_NOT_EXECUTABLE = 126
STATUS_NOT_FOUND = 127
STATUS_INTERRUPTED = 130

Runner = Callable[[list[str], dict[str, str]], int]


# ---------------------------------------------------------------------------
# Prompt
# ---------------------------------------------------------------------------


def abbreviate_home(path: str, home: str | None) -> str:
    """Replace a leading *home* directory in *path* with ``~``."""
    if not home:
        return path
    home = home.rstrip("/") or "/"
    if path == home:
        return "~"
    if home != "/" and path.startswith(home + "/"):
        return "~" + path[len(home) :]
    return path


def _current_user() -> str:
    try:
        return getpass.getuser()
    except (OSError, KeyError):
        return "?"


def format_prompt(user: str, cwd: str, mode: SessionMode, base: str) -> str:
    """``[user cwd] base > `` in wrapped mode, ``[user cwd] $ `` in normal mode."""
    marker = f"{base} >" if mode is SessionMode.WRAPPED else "$"
    return f"[{user} {cwd}] {marker} "


# ---------------------------------------------------------------------------
# Process execution
# ---------------------------------------------------------------------------


def run_process(argv: list[str], env: dict[str, str] | None = None) -> int:
    """Run *argv* in the foreground with environment *env*; return its status.

    A process killed by a signal reports ``128 + signal``, the way POSIX
    shells do.
    """
    try:
        completed = subprocess.run(argv, env=env)
    except FileNotFoundError:
        click.echo(f"command not found: {argv[0]}", err=True)
        return STATUS_NOT_FOUND
    except OSError as err:
        click.echo(f"{argv[0]}: {err.strerror}", err=True)
        return STATUS_NOT_EXECUTABLE
    except KeyboardInterrupt:
        click.echo()
        return STATUS_INTERRUPTED

    if completed.returncode < 0:
        return 128 - completed.returncode
    return completed.returncode


# ---------------------------------------------------------------------------
# Shell
# ---------------------------------------------------------------------------


class Shell:
    """Reads lines from a :class:`Session`, expands and runs them.

    In wrapped mode every non-builtin line becomes arguments to
    *base_argv*; in normal mode the first word is the program to run.
    """

    def __init__(
        self,
        session: Session,
        base_argv: list[str],
        *,
        autosave_history: bool = True,
        runner: Runner = run_process,
    ) -> None:
        self.session = session
        self._base_argv = list(base_argv)
        self._autosave_history = autosave_history
        self._runner = runner
        self.last_status = 0
        self._exit_code: int | None = None

    @property
    def exit_code(self) -> int | None:
        """Status requested by ``exit``, ``None`` while the shell runs."""
        return self._exit_code

    def request_exit(self, code: int) -> None:
        self._exit_code = code

    def prompt(self) -> str:
        try:
            cwd = abbreviate_home(os.getcwd(), default_home())
        except OSError:
            # The working directory was removed from under the shell.
            cwd = os.environ.get("PWD") or "?"
        return format_prompt(_current_user(), cwd, self.session.mode(), self.session.base)

    def run_line(self, line: str) -> int:
        """Expand and run one input line; return the resulting status."""
        try:
            argv = expand(line, lookup=self.session.environ.get)
        except ArgumentError as err:
            click.echo(f"Error: {err}", err=True)
            self.last_status = STATUS_SYNTAX_ERROR
            return self.last_status

        if not argv:
            return self.last_status

        builtin = is_builtin(argv[0])
        if builtin:
            status = run_builtin(self, argv)
        elif self.session.mode() is SessionMode.WRAPPED:
            status = self._runner([*self._base_argv, *argv], self.session.environ)
        else:
            status = self._runner(argv, self.session.environ)

        logger.debug("Command %s exited with status %d", argv, status)
        self.session.push_to_history(line, is_builtin=builtin)
        self.last_status = status
        return status

    def run(self) -> int:
        """Run until ``exit``; return the shell's exit status.

        History is synced on the way out when autosave is enabled and the
        history has a backing file.
        """
        try:
            while self._exit_code is None:
                line = self.session.take_input(self.prompt())
                self.run_line(line)
        finally:
            if self._autosave_history and self.session.history.path is not None:
                self._save_history()

        return self._exit_code

    def _save_history(self) -> None:
        try:
            self.session.history_sync()
        except HistoryError as err:
            logger.debug("History sync failed: %s", err)
            click.echo(f"Warning: could not save history: {err}", err=True)

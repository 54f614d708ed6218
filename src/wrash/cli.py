"""CLI entry point for wrash. Uses Click for argument parsing."""

from __future__ import annotations

import logging
import os
import shutil
import sys
import termios

import click

from wrash import __version__
from wrash.argv import ArgumentError, expand
from wrash.completion import CompletionSearch
from wrash.editor import LineEditor
from wrash.history import History, HistoryError, SessionMode, find_history_file
from wrash.settings import Settings, load_settings
from wrash.session import Session
from wrash.shell import Shell
from wrash.term.keybindings import EditorKeybindingsManager
from wrash.term.terminal import ProcessTerminal, is_interactive

logger = logging.getLogger(__name__)

LOG_LEVELS = ["debug", "info", "warning", "error"]


def _configure_logging(level: str, log_file: str | None) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        filename=log_file,
    )


def _resolve_history_path(history_file: str | None, settings: Settings) -> str | None:
    """History file path: flag, then setting, then environment, then default."""
    for candidate in (history_file, settings.history_file, os.environ.get("WRASH_HISTORY_FILE")):
        if candidate:
            return os.path.expanduser(candidate)
    try:
        return str(find_history_file())
    except HistoryError as err:
        click.echo(f"Warning: {err}; history will not be saved", err=True)
        return None


def _open_history(path: str | None) -> History:
    """Load history from *path*, falling back to an unsaved in-memory store.

    A corrupt file is left untouched so that it can be repaired by hand.
    """
    if path is None:
        return History.in_memory()
    try:
        return History.load(path)
    except HistoryError as err:
        logger.debug("Could not load history from %s: %s", path, err)
        click.echo(
            f"Warning: could not load history file '{path}': {err}\n"
            "continuing with an in-memory history (changes will not be saved)",
            err=True,
        )
        return History.in_memory()


@click.command(context_settings={"allow_interspersed_args": False})
@click.argument("command", nargs=-1, required=True)
@click.option("-F", "--frozen", is_flag=True, help="Freeze the session in wrapped mode")
@click.option(
    "--mode",
    type=click.Choice(["wrapped", "normal"], case_sensitive=False),
    default="wrapped",
    show_default=True,
    help="Initial execution mode",
)
@click.option("--history-file", type=click.Path(dir_okay=False), default=None, help="History file to load and save")
@click.option("--no-history", is_flag=True, help="Keep history in memory only")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    envvar="WRASH_LOG_LEVEL",
    default="warning",
    show_default=True,
)
@click.option("--log-file", type=click.Path(dir_okay=False), default=None, help="Write log records to this file")
@click.version_option(__version__, prog_name="wrash")
def main(command, frozen, mode, history_file, no_history, log_level, log_file):
    """Run an interactive shell wrapped around COMMAND.

    Input is passed as arguments to COMMAND; builtins like 'mode' and
    'history' are handled by the shell itself. Type '?' for help.
    """
    _configure_logging(log_level, log_file)

    initial_mode = SessionMode.parse(mode)
    if frozen and initial_mode is not SessionMode.WRAPPED:
        raise click.UsageError("--mode normal cannot be combined with --frozen")

    base = " ".join(command)
    try:
        base_argv = expand(base)
    except ArgumentError as err:
        raise click.UsageError(f"could not parse base command: {err}") from err
    if not base_argv:
        raise click.UsageError("the base command is empty")
    if shutil.which(base_argv[0]) is None:
        raise click.ClickException(f"command not found: {base_argv[0]}")

    if not is_interactive():
        raise click.ClickException("standard input is not a terminal")

    settings = load_settings(overrides={"historyFile": history_file})
    history = History.in_memory() if no_history else _open_history(
        _resolve_history_path(history_file, settings)
    )

    environ = dict(os.environ)
    editor = LineEditor(
        ProcessTerminal(),
        CompletionSearch(search_path=lambda: environ.get("PATH", "")),
        EditorKeybindingsManager(settings.keybindings),
        column_padding=settings.completion_padding,
    )
    session = Session(history, base, editor, mode=initial_mode, is_frozen=frozen, environ=environ)
    shell = Shell(session, base_argv, autosave_history=settings.autosave_history)

    logger.info("Starting session around %s (mode=%s, frozen=%s)", base_argv, initial_mode, frozen)
    try:
        status = shell.run()
    except termios.error as err:
        raise click.ClickException(f"could not configure the terminal: {err}") from err
    sys.exit(status)


if __name__ == "__main__":
    main()

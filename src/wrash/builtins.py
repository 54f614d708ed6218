"""Builtin shell commands. Uses Click for argument parsing.

Builtins run inside the shell process in either mode and are never passed
to the base command. Each one receives the running shell as the Click
context object.
"""

from __future__ import annotations

import logging
import os
import re

import click

from wrash.argv.expand import default_home
from wrash.history import HistoryEntry, HistoryFilter, HistoryIoError, SessionMode
from wrash.session import SessionFrozenError

logger = logging.getLogger(__name__)

HELP_TEXT = """\
wrash is a minimal interactive wrapper shell around a base command. If the
base command is 'git' you can type 'add -A' rather than 'git add -A'.

Other programs on the system can be run after switching to normal mode with
'mode normal'; 'mode wrapped' switches back. A frozen session always stays in
wrapped mode.

Builtins (pass '--help' to any of them for details):
    exit       exit the shell with a given status code
    cd         change the current working directory of the shell
    mode       show or set the current execution mode
    help, ?    show this help text
    env        show or set variables for this session
    history    show, filter and sync the command history"""


def _compile_pattern(ctx, param, value):
    if value is None:
        return None
    try:
        return re.compile(value)
    except re.error as err:
        raise click.BadParameter(f"invalid regular expression: {err}") from err


def _echo_entries(entries: list[tuple[int, HistoryEntry]]) -> None:
    for index, entry in entries:
        click.echo(f"{index}: {entry.get_command()}")


# ---------------------------------------------------------------------------
# exit / cd / mode / help
# ---------------------------------------------------------------------------


@click.command("exit")
@click.argument("code", type=click.IntRange(min=0), required=False)
@click.pass_obj
def exit_builtin(shell, code):
    """Exit the shell with the given status code (default: last status)."""
    shell.request_exit(shell.last_status if code is None else code)


@click.command("cd")
@click.argument("directory", required=False)
def cd_builtin(directory):
    """Change the current working directory (default: home directory)."""
    target = directory if directory is not None else default_home()
    if target is None:
        raise click.ClickException("could not determine the home directory")
    try:
        os.chdir(target)
    except OSError as err:
        raise click.ClickException(f"{target}: {err.strerror}") from err


@click.command("mode")
@click.argument("mode", type=click.Choice(["wrapped", "normal"], case_sensitive=False), required=False)
@click.pass_obj
def mode_builtin(shell, mode):
    """Show the execution mode, or set it to MODE."""
    session = shell.session
    if mode is None:
        click.echo(str(session.mode()))
        return
    try:
        session.set_mode(SessionMode.parse(mode))
    except SessionFrozenError as err:
        raise click.ClickException(f"could not set session mode: {err}") from err


@click.command("help")
def help_builtin():
    """Show basic information about wrash and its builtins."""
    click.echo(HELP_TEXT)


# ---------------------------------------------------------------------------
# history
# ---------------------------------------------------------------------------


@click.group("history", invoke_without_command=True)
@click.pass_context
def history_builtin(ctx):
    """Examine and manage the command history.

    Without a subcommand, shows builtins plus the commands run with the
    current mode and base command.
    """
    if ctx.invoked_subcommand is None:
        session = ctx.obj.session
        _echo_entries(list(enumerate(session.history.session_view(session.mode(), session.base))))


@history_builtin.command("show")
@click.argument("pattern", required=False, callback=_compile_pattern)
@click.option("-n", "count", type=click.IntRange(min=0), default=None, help="Only show the last N matches")
@click.pass_obj
def history_show(shell, pattern, count):
    """Show every history entry whose arguments match PATTERN."""
    entries = shell.session.history.filter(HistoryFilter(pattern=pattern))
    if count is not None:
        entries = entries[max(0, len(entries) - count) :]
    _echo_entries(entries)


@history_builtin.command("filter")
@click.argument("pattern", required=False, callback=_compile_pattern)
@click.option("-m", "--mode", type=click.Choice(["wrapped", "normal"], case_sensitive=False), default=None, help="Only show commands run in this mode")
@click.option("-b", "--base", default=None, help="Only show commands run with this base command, or with none")
@click.option("--builtins/--no-builtins", default=None, help="Only show builtins, or hide them")
@click.pass_obj
def history_filter(shell, pattern, mode, base, builtins):
    """Show history entries matching every given criterion."""
    flt = HistoryFilter(
        mode=SessionMode.parse(mode) if mode else None,
        base=base,
        builtins=builtins,
        pattern=pattern,
    )
    _echo_entries(shell.session.history.filter(flt))


@history_builtin.command("sync")
@click.pass_obj
def history_sync(shell):
    """Write the in-memory history to the history file."""
    try:
        shell.session.history_sync()
    except HistoryIoError as err:
        raise click.ClickException(f"could not sync history: {err}") from err


# ---------------------------------------------------------------------------
# env
# ---------------------------------------------------------------------------


@click.group("env", invoke_without_command=True)
@click.pass_context
def env_builtin(ctx):
    """Show or set the variables of this session.

    Session variables are used for $NAME expansion and passed to every
    command the shell runs. Without a subcommand, shows them.
    """
    if ctx.invoked_subcommand is None:
        ctx.invoke(env_show)


@env_builtin.command("show")
@click.pass_obj
def env_show(shell):
    """List the session variables, sorted by name."""
    environ = shell.session.environ
    for key in sorted(environ):
        click.echo(f"{key}='{environ[key]}'")


@env_builtin.command("set")
@click.argument("key", required=False)
@click.argument("value", required=False)
@click.pass_obj
def env_set(shell, key, value):
    """Set KEY to VALUE, or unset KEY when VALUE is omitted."""
    if key is None:
        return
    if value is None:
        shell.session.environ.pop(key, None)
        logger.debug("Unset session variable %s", key)
    else:
        shell.session.environ[key] = value
        logger.debug("Set session variable %s", key)


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


BUILTINS: dict[str, click.Command] = {
    "exit": exit_builtin,
    "cd": cd_builtin,
    "mode": mode_builtin,
    "help": help_builtin,
    "?": help_builtin,
    "history": history_builtin,
    "env": env_builtin,
}


def is_builtin(name: str) -> bool:
    return name in BUILTINS


def run_builtin(shell, argv: list[str]) -> int:
    """Run the builtin named by ``argv[0]`` and return its exit status.

    Usage errors are reported on stderr with status 2 and other failures
    with status 1; ``--help`` prints the builtin's help with status 0.
    """
    name, *args = argv
    command = BUILTINS[name]
    try:
        result = command.main(args=args, prog_name=name, standalone_mode=False, obj=shell)
    except click.ClickException as err:
        err.show()
        return err.exit_code
    except click.Abort:
        return 1

    logger.debug("Builtin %s finished", name)
    return result if isinstance(result, int) else 0

"""Session state: base command, mode, history and the line editor."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator

from wrash.editor import LineEditor
from wrash.history import History, HistoryEntry, SessionMode

logger = logging.getLogger(__name__)


class SessionFrozenError(Exception):
    """The session is frozen and its mode cannot change."""

    def __init__(self, requested: SessionMode) -> None:
        self.requested = requested
        super().__init__(f"session is frozen, cannot switch to {requested} mode")


class Session:
    """One interactive session around a base command.

    The session owns its :class:`~wrash.history.History` for its whole
    lifetime. A frozen session stays in wrapped mode. *environ* defaults to
    a copy of the process environment.
    """

    def __init__(
        self,
        history: History,
        base: str,
        editor: LineEditor,
        *,
        mode: SessionMode = SessionMode.WRAPPED,
        is_frozen: bool = False,
        environ: dict[str, str] | None = None,
    ) -> None:
        if is_frozen and mode is not SessionMode.WRAPPED:
            raise SessionFrozenError(mode)
        self._history = history
        self._base = base
        self._editor = editor
        self._mode = mode
        self._is_frozen = is_frozen
        self._environ = dict(os.environ) if environ is None else environ

    @property
    def base(self) -> str:
        return self._base

    @property
    def is_frozen(self) -> bool:
        return self._is_frozen

    @property
    def history(self) -> History:
        return self._history

    @property
    def environ(self) -> dict[str, str]:
        """Session variables used for expansion and passed to child processes."""
        return self._environ

    def mode(self) -> SessionMode:
        return self._mode

    def set_mode(self, mode: SessionMode) -> None:
        """Switch the session mode.

        Raises:
            SessionFrozenError: the session is frozen and *mode* differs
                from the current mode.
        """
        if mode is self._mode:
            return
        if self._is_frozen:
            raise SessionFrozenError(mode)
        logger.info("Session mode changed from %s to %s", self._mode, mode)
        self._mode = mode

    def take_input(self, prompt: str) -> str:
        """Read one line, recalling the history relevant to this session."""
        recall = self._history.session_view(self._mode, self._base, newest_first=True)
        return self._editor.take_input(prompt, recall)

    def push_to_history(self, raw_line: str, is_builtin: bool = False) -> bool:
        """Record a committed line; return whether an entry was added.

        Blank lines and repeats of the newest entry are not recorded.
        Builtins and normal-mode lines are stored without a base.
        """
        argv = raw_line.strip()
        if not argv:
            return False

        base = self._base if self._mode is SessionMode.WRAPPED and not is_builtin else None
        entry = HistoryEntry(argv=argv, base=base, mode=self._mode, is_builtin=is_builtin)
        if self._history.last() == entry:
            return False

        self._history.push(entry)
        return True

    def history_iter(self) -> Iterator[HistoryEntry]:
        return iter(self._history)

    def history_sync(self) -> None:
        """Write history to its backing file, see :meth:`History.sync`."""
        self._history.sync()

"""Line editor - reads one command line from a raw terminal, key by key."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from wrash.argv.split import escape_literal, unescape_literal
from wrash.completion import (
    DEFAULT_COLUMN_PADDING,
    CompletionSearch,
    display_name,
    format_columns,
    get_common_prefix,
    get_word_start,
)
from wrash.history import HistoryEntry
from wrash.term.keybindings import EditorKeybindingsManager, get_editor_keybindings
from wrash.term.keys import is_printable_input
from wrash.term.terminal import Terminal
from wrash.term.utils import is_whitespace_char, visible_width

logger = logging.getLogger(__name__)

EXIT_TEXT = "exit"

_CLEAR_LINE = "\r\x1b[2K"
_CURSOR_RIGHT_FMT = "\x1b[{}C"


@dataclass
class EditorState:
    """Mutable state of one :meth:`LineEditor.take_input` call.

    ``history_index`` points into the newest-first recall view while the
    user is browsing history; ``snapshot`` holds the buffer as it was before
    browsing started.
    """

    buffer: str = ""
    cursor: int = 0
    history_index: int | None = None
    snapshot: str | None = None
    last_was_tab: bool = False

    def replace(self, start: int, end: int, text: str) -> None:
        """Replace ``buffer[start:end]`` with *text*, cursor after it."""
        self.buffer = self.buffer[:start] + text + self.buffer[end:]
        self.cursor = start + len(text)

    def set_text(self, text: str) -> None:
        self.buffer = text
        self.cursor = len(text)


# ---------------------------------------------------------------------------
# Word boundaries
# ---------------------------------------------------------------------------


def get_next_boundary(buffer: str, cursor: int) -> int:
    """First offset after *cursor* whose character class differs.

    The class (whitespace or not) is taken from the character at *cursor*.
    """
    if cursor >= len(buffer):
        return len(buffer)
    whitespace = is_whitespace_char(buffer[cursor])
    position = cursor + 1
    while position < len(buffer) and is_whitespace_char(buffer[position]) == whitespace:
        position += 1
    return position


def get_previous_boundary(buffer: str, cursor: int) -> int:
    """Mirror of :func:`get_next_boundary` scanning towards the start."""
    if cursor <= 0:
        return 0
    whitespace = is_whitespace_char(buffer[cursor - 1])
    position = cursor - 1
    while position > 0 and is_whitespace_char(buffer[position - 1]) == whitespace:
        position -= 1
    return position


def _escape_candidate(candidate: str, prefix: str) -> str:
    """Escape the part of *candidate* past the directory typed in *prefix*.

    The typed directory is kept as written so that ``~/`` still expands.
    """
    typed_directory = prefix[: prefix.rfind("/") + 1]
    directory = unescape_literal(typed_directory)
    return typed_directory + escape_literal(candidate[len(directory) :])


# ---------------------------------------------------------------------------
# Editor
# ---------------------------------------------------------------------------


class LineEditor:
    """Interactive single-line editor with history recall and completion.

    The editor holds no state between calls: each :meth:`take_input` starts
    from an empty :class:`EditorState` and ends when a line is committed.
    """

    def __init__(
        self,
        terminal: Terminal,
        completion: CompletionSearch | None = None,
        keybindings: EditorKeybindingsManager | None = None,
        column_padding: int = DEFAULT_COLUMN_PADDING,
    ) -> None:
        self._terminal = terminal
        self._completion = completion or CompletionSearch()
        self._keybindings = keybindings
        self._column_padding = column_padding

    @property
    def keybindings(self) -> EditorKeybindingsManager:
        return self._keybindings or get_editor_keybindings()

    def take_input(self, prompt: str, recall: Sequence[HistoryEntry] = ()) -> str:
        """Read one line from the terminal.

        *recall* is the newest-first list of history entries Up and Down
        step through. Returns the committed text without a line terminator;
        ``"exit"`` when Ctrl-D is pressed or input ends, and ``""`` when the
        line is cancelled with Ctrl-C.

        Raises:
            termios.error: raw mode cannot be entered or left.
            OSError: reading from or writing to the terminal failed.
        """
        state = EditorState()
        with self._terminal.raw_mode():
            self._render(prompt, state)
            while True:
                data = self._terminal.read_key()
                if data is None:
                    logger.debug("Input closed, treating as exit")
                    return self._finish(prompt, state, EXIT_TEXT)

                line = self._handle_key(data, prompt, state, recall)
                if line is not None:
                    return line
                self._render(prompt, state)

    # -- key dispatch -------------------------------------------------------

    def _handle_key(  # noqa: C901
        self,
        data: str,
        prompt: str,
        state: EditorState,
        recall: Sequence[HistoryEntry],
    ) -> str | None:
        """Apply one key to *state*; return the line once it is committed."""
        action = self.keybindings.action_for(data)
        was_tab = state.last_was_tab
        state.last_was_tab = action == "tab"

        if action == "submit":
            return self._finish(prompt, state, state.buffer)

        if action == "exit":
            return self._finish(prompt, state, EXIT_TEXT)

        if action == "cancel":
            self._terminal.write("^C\r\n")
            return ""

        if action == "tab":
            self._complete(state, was_tab)
            return None

        if action == "historyPrevious":
            self._recall_older(state, recall)
        elif action == "historyNext":
            self._recall_newer(state, recall)
        elif action == "cursorLeft":
            state.cursor = max(0, state.cursor - 1)
        elif action == "cursorRight":
            state.cursor = min(len(state.buffer), state.cursor + 1)
        elif action == "cursorWordLeft":
            state.cursor = get_previous_boundary(state.buffer, state.cursor)
        elif action == "cursorWordRight":
            state.cursor = get_next_boundary(state.buffer, state.cursor)
        elif action == "cursorLineStart":
            state.cursor = 0
        elif action == "cursorLineEnd":
            state.cursor = len(state.buffer)
        elif action == "deleteCharBackward":
            if state.cursor > 0:
                state.replace(state.cursor - 1, state.cursor, "")
        elif action == "deleteCharForward":
            if state.cursor < len(state.buffer):
                state.buffer = state.buffer[: state.cursor] + state.buffer[state.cursor + 1 :]
        elif action == "deleteWordBackward":
            self._delete_word_backwards(state)
        elif action == "deleteToLineStart":
            state.replace(0, state.cursor, "")
        elif action == "deleteToLineEnd":
            state.buffer = state.buffer[: state.cursor]
        elif action == "clearScreen":
            self._terminal.clear_screen()
        elif action is None and is_printable_input(data):
            state.replace(state.cursor, state.cursor, data)

        return None

    def _finish(self, prompt: str, state: EditorState, line: str) -> str:
        state.set_text(line)
        self._render(prompt, state)
        self._terminal.write("\r\n")
        return line

    # -- editing ------------------------------------------------------------

    def _delete_word_backwards(self, state: EditorState) -> None:
        start = get_previous_boundary(state.buffer, state.cursor)
        # Whitespace before the cursor goes together with the word before it.
        if start < state.cursor and is_whitespace_char(state.buffer[start]):
            start = get_previous_boundary(state.buffer, start)
        state.replace(start, state.cursor, "")

    def _recall_older(self, state: EditorState, recall: Sequence[HistoryEntry]) -> None:
        if not recall:
            return
        if state.history_index is None:
            state.snapshot = state.buffer
            state.history_index = 0
        else:
            state.history_index = min(state.history_index + 1, len(recall) - 1)
        state.set_text(recall[state.history_index].recall_text())

    def _recall_newer(self, state: EditorState, recall: Sequence[HistoryEntry]) -> None:
        if state.history_index is None:
            return
        if state.history_index == 0:
            state.set_text(state.snapshot or "")
            state.history_index = None
            state.snapshot = None
            return
        state.history_index -= 1
        state.set_text(recall[state.history_index].recall_text())

    # -- completion ---------------------------------------------------------

    def _complete(self, state: EditorState, was_tab: bool) -> None:
        start = get_word_start(state.buffer, state.cursor)
        prefix = state.buffer[start : state.cursor]
        candidates = self._completion.get_completions(unescape_literal(prefix), is_command=start == 0)

        if not candidates:
            return

        if len(candidates) == 1:
            state.replace(start, state.cursor, _escape_candidate(candidates[0], prefix))
            return

        if was_tab:
            self._list_candidates(candidates)
            return

        common = get_common_prefix([_escape_candidate(candidate, prefix) for candidate in candidates])
        if common is not None and len(common) > len(prefix):
            state.replace(start, state.cursor, common)

    def _list_candidates(self, candidates: list[str]) -> None:
        lines = format_columns(
            [display_name(candidate) for candidate in candidates],
            self._terminal.columns,
            self._column_padding,
        )
        self._terminal.write("\r\n" + "\r\n".join(lines) + "\r\n")

    # -- rendering ----------------------------------------------------------

    def _render(self, prompt: str, state: EditorState) -> None:
        column = visible_width(prompt + state.buffer[: state.cursor])
        output = _CLEAR_LINE + prompt + state.buffer + "\r"
        if column > 0:
            output += _CURSOR_RIGHT_FMT.format(column)
        self._terminal.write(output)

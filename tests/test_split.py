"""Tests for wrash.argv.split."""

from __future__ import annotations

from wrash.argv.split import escape_literal, split_words, unescape_literal


class TestSplitWords:
    """split_words breaks a line on unquoted, unescaped whitespace."""

    def test_empty(self) -> None:
        assert split_words("") == []

    def test_only_whitespace(self) -> None:
        assert split_words(" \t  ") == []

    def test_single_word(self) -> None:
        assert split_words("status") == ["status"]

    def test_runs_of_spaces_and_tabs(self) -> None:
        assert split_words("  add\t -A   file ") == ["add", "-A", "file"]

    def test_escaped_space_is_not_a_split_point(self) -> None:
        assert split_words(r"a\ b c") == [r"a\ b", "c"]

    def test_quotes_are_kept(self) -> None:
        assert split_words("commit -m 'a message'") == ["commit", "-m", "'a message'"]

    def test_double_quoted_span(self) -> None:
        assert split_words('echo "a  b" c') == ["echo", '"a  b"', "c"]

    def test_quoted_span_inside_word(self) -> None:
        assert split_words("a'b c'd e") == ["a'b c'd", "e"]

    def test_other_quote_inside_quoted_span(self) -> None:
        assert split_words("\"it's here\" x") == ["\"it's here\"", "x"]

    def test_escaped_quote_inside_double_quotes(self) -> None:
        assert split_words(r'"a \" b" c') == [r'"a \" b"', "c"]

    def test_empty_quotes_make_a_word(self) -> None:
        assert split_words("a '' b") == ["a", "''", "b"]

    def test_unterminated_quote_runs_to_end(self) -> None:
        assert split_words("cmd a 'b c") == ["cmd", "a", "'b c"]

    def test_trailing_backslash_is_kept(self) -> None:
        assert split_words("a\\") == ["a\\"]


class TestEscapeLiteral:
    """escape_literal protects substituted text from later stages."""

    def test_plain_text_unchanged(self) -> None:
        assert escape_literal("/home/user") == "/home/user"

    def test_space_and_glob_escaped(self) -> None:
        assert escape_literal("a b*") == r"a\ b\*"

    def test_quotes_and_backslash_escaped(self) -> None:
        assert escape_literal("it's \\") == "it\\'s\\ \\\\"


class TestUnescapeLiteral:
    def test_reverses_escape_literal(self) -> None:
        text = "my file $HOME *.txt 'q' \"d\" \\ ~"
        assert unescape_literal(escape_literal(text)) == text

    def test_other_backslashes_kept(self) -> None:
        assert unescape_literal(r"a\nb\ c") == r"a\nb c"
        assert unescape_literal("end\\") == "end\\"

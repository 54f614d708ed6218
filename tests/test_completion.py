"""Tests for wrash.completion."""

from __future__ import annotations

import os

import pytest

from wrash.completion import (
    CompletionSearch,
    display_name,
    format_columns,
    get_common_prefix,
    get_word_start,
)


def make_executable(path) -> None:
    path.write_text("#!/bin/sh\n")
    os.chmod(path, 0o755)


@pytest.fixture
def workdir(tmp_path):
    cwd = tmp_path / "cwd"
    cwd.mkdir()
    for name in ("a_file", "a_file_too", "b_file", ".a_hidden"):
        (cwd / name).write_text("")
    (cwd / "a_dir").mkdir()
    make_executable(cwd / "a_script")
    return cwd


@pytest.fixture
def bindirs(tmp_path):
    first = tmp_path / "bin1"
    second = tmp_path / "bin2"
    first.mkdir()
    second.mkdir()
    make_executable(first / "mytool")
    make_executable(second / "mytool")
    make_executable(second / "myother")
    (first / "mydata").write_text("")
    (first / "mydir").mkdir()
    return f"{first}:{second}"


# ---------------------------------------------------------------------------
# Buffer helpers
# ---------------------------------------------------------------------------


class TestGetCommonPrefix:
    def test_shared_prefix(self) -> None:
        assert get_common_prefix(["a_file", "a_file_too", "a_file_as_well"]) == "a_file"

    def test_no_shared_prefix(self) -> None:
        assert get_common_prefix(["a_file", "a_file_too", "some_new_file"]) is None

    def test_empty(self) -> None:
        assert get_common_prefix([]) is None

    def test_single(self) -> None:
        assert get_common_prefix(["only"]) == "only"

    def test_partial_prefix(self) -> None:
        assert get_common_prefix(["abcd", "abxy", "abz"]) == "ab"


class TestGetWordStart:
    def test_first_word(self) -> None:
        assert get_word_start("gi", 2) == 0

    def test_later_word(self) -> None:
        assert get_word_start("git ad", 6) == 4

    def test_cursor_after_space(self) -> None:
        assert get_word_start("git ", 4) == 4

    def test_cursor_inside_word(self) -> None:
        assert get_word_start("git add", 6) == 4

    def test_escaped_space_is_part_of_word(self) -> None:
        assert get_word_start("cat my\\ f", 9) == 4


class TestDisplayName:
    def test_file(self) -> None:
        assert display_name("src/wrash/cli.py") == "cli.py"

    def test_directory_keeps_slash(self) -> None:
        assert display_name("src/wrash/") == "wrash/"

    def test_bare(self) -> None:
        assert display_name("mytool") == "mytool"

    def test_root(self) -> None:
        assert display_name("/") == "/"


class TestFormatColumns:
    def test_fits_on_one_row(self) -> None:
        assert format_columns(["a", "bb", "ccc"], 20, 2) == ["a    bb   ccc"]

    def test_wraps_rows(self) -> None:
        assert format_columns(["a", "bb", "ccc"], 10, 2) == ["a    bb", "ccc"]

    def test_at_least_one_column(self) -> None:
        assert format_columns(["long_name", "x"], 4, 2) == ["long_name", "x"]

    def test_empty(self) -> None:
        assert format_columns([], 80) == []


# ---------------------------------------------------------------------------
# Filesystem search
# ---------------------------------------------------------------------------


class TestSearchDir:
    def test_prefix_in_cwd(self, workdir) -> None:
        search = CompletionSearch(cwd=lambda: str(workdir))
        assert search.search_dir("a_") == ["a_dir/", "a_file", "a_file_too", "a_script"]

    def test_keeps_dot_slash(self, workdir) -> None:
        search = CompletionSearch(cwd=lambda: str(workdir))
        assert search.search_dir("./a_f") == ["./a_file", "./a_file_too"]

    def test_hidden_only_with_dot(self, workdir) -> None:
        search = CompletionSearch(cwd=lambda: str(workdir))
        assert ".a_hidden" not in search.search_dir("")
        assert search.search_dir(".a") == [".a_hidden"]

    def test_subdirectory(self, workdir) -> None:
        (workdir / "a_dir" / "inner.txt").write_text("")
        search = CompletionSearch(cwd=lambda: str(workdir))
        assert search.search_dir("a_dir/") == ["a_dir/inner.txt"]

    def test_absolute_path(self, workdir) -> None:
        search = CompletionSearch(cwd=lambda: "/")
        assert search.search_dir(f"{workdir}/b_") == [f"{workdir}/b_file"]

    def test_missing_directory_yields_nothing(self, workdir) -> None:
        search = CompletionSearch(cwd=lambda: str(workdir))
        assert search.search_dir("nope/x") == []

    def test_glob_characters_in_prefix(self, workdir) -> None:
        search = CompletionSearch(cwd=lambda: str(workdir))
        assert search.search_dir("*_file") == ["a_file", "a_file_too", "b_file"]
        assert search.search_dir("?_f") == ["a_file", "a_file_too", "b_file"]
        assert search.search_dir("[b]") == ["b_file"]

    def test_removed_working_directory(self, workdir) -> None:
        def cwd():
            raise FileNotFoundError("gone")

        search = CompletionSearch(cwd=cwd)
        assert search.search_dir("a_") == []
        assert search.search_dir(f"{workdir}/b_") == [f"{workdir}/b_file"]


class TestSearchPath:
    def test_executables_only(self, workdir, bindirs) -> None:
        search = CompletionSearch(cwd=lambda: str(workdir))
        assert search.search_path("my", bindirs) == ["myother", "mytool"]

    def test_defaults_to_configured_path(self, workdir, bindirs) -> None:
        search = CompletionSearch(cwd=lambda: str(workdir), search_path=lambda: bindirs)
        assert search.search_path("myt") == ["mytool"]

    def test_skips_empty_and_missing_entries(self, workdir, bindirs, tmp_path) -> None:
        search = CompletionSearch(cwd=lambda: str(workdir))
        assert search.search_path("myt", f"::{tmp_path / 'missing'}:{bindirs}") == ["mytool"]


class TestGetCompletions:
    def test_argument_completes_any_path(self, workdir, bindirs) -> None:
        search = CompletionSearch(cwd=lambda: str(workdir), search_path=lambda: bindirs)
        assert search.get_completions("b", is_command=False) == ["b_file"]

    def test_bare_command_uses_search_path(self, workdir, bindirs) -> None:
        (workdir / "my_local_dir").mkdir()
        (workdir / "my_local_file").write_text("")
        search = CompletionSearch(cwd=lambda: str(workdir), search_path=lambda: bindirs)
        assert search.get_completions("my", is_command=True) == ["my_local_dir/", "myother", "mytool"]

    def test_command_with_directory_part(self, workdir, bindirs) -> None:
        search = CompletionSearch(cwd=lambda: str(workdir), search_path=lambda: bindirs)
        assert search.get_completions("./a_", is_command=True) == ["./a_dir/", "./a_script"]

    def test_no_matches(self, workdir, bindirs) -> None:
        search = CompletionSearch(cwd=lambda: str(workdir), search_path=lambda: bindirs)
        assert search.get_completions("zzz", is_command=True) == []

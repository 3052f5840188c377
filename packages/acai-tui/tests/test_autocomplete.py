"""Tests for acai.tui.autocomplete -- fuzzy scoring and the combined provider."""

from __future__ import annotations

from pathlib import Path

import pytest

from acai.tui.autocomplete import CombinedAutocompleteProvider, SlashCommand, fuzzy_score
from acai.tui.components.select_list import SelectItem


class TestFuzzyScore:
    def test_empty_query_matches(self) -> None:
        assert fuzzy_score("", "anything") == 0.0

    def test_out_of_order_does_not_match(self) -> None:
        assert fuzzy_score("ba", "ab") is None

    def test_case_insensitive(self) -> None:
        assert fuzzy_score("MOD", "model") is not None

    def test_contiguous_beats_scattered(self) -> None:
        tight = fuzzy_score("mod", "model")
        loose = fuzzy_score("mod", "my_old_data")
        assert tight is not None and loose is not None
        assert tight < loose


@pytest.fixture
def project(tmp_path: Path) -> Path:
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "main.py").write_text("")
    (tmp_path / "setup.cfg").write_text("")
    (tmp_path / ".hidden").write_text("")
    return tmp_path


def provider(base: Path) -> CombinedAutocompleteProvider:
    return CombinedAutocompleteProvider(
        [SlashCommand("help"), SlashCommand("history"), SlashCommand("model")],
        str(base),
    )


class TestCommands:
    def test_slash_lists_matching_commands(self, project: Path) -> None:
        result = provider(project).get_suggestions(["/h"], 0, 2)
        assert result is not None
        assert result.prefix == "/h"
        assert [item.value for item in result.items] == ["help", "history"]

    def test_only_first_line(self, project: Path) -> None:
        assert provider(project).get_suggestions(["x", "/h"], 1, 2) is None

    def test_no_commands_after_space(self, project: Path) -> None:
        assert provider(project).get_suggestions(["/help me"], 0, 8) is None

    def test_apply_adds_slash_and_space(self, project: Path) -> None:
        done = provider(project).apply_completion(["/he"], 0, 3, SelectItem("help", "/help"), "/he")
        assert done.lines == ["/help "]
        assert done.cursor_col == 6


class TestPaths:
    def test_at_reference_lists_directory(self, project: Path) -> None:
        result = provider(project).get_suggestions(["look at @s"], 0, 10)
        assert result is not None
        assert result.prefix == "@s"
        assert [item.value for item in result.items] == ["@src/", "@setup.cfg"]

    def test_hidden_files_need_dot(self, project: Path) -> None:
        result = provider(project).get_suggestions(["@"], 0, 1)
        assert result is not None
        assert "@.hidden" not in [item.value for item in result.items]
        dotted = provider(project).get_suggestions(["@."], 0, 2)
        assert dotted is not None
        assert [item.value for item in dotted.items] == ["@.hidden"]

    def test_nested_directory(self, project: Path) -> None:
        result = provider(project).get_force_file_suggestions(["src/m"], 0, 5)
        assert result is not None
        assert [item.value for item in result.items] == ["src/main.py"]

    def test_directory_completion_keeps_cursor_inside(self, project: Path) -> None:
        done = provider(project).apply_completion(["@s"], 0, 2, SelectItem("@src/", "src/"), "@s")
        assert done.lines == ["@src/"]
        assert done.cursor_col == 5

    def test_missing_directory(self, project: Path) -> None:
        assert provider(project).get_force_file_suggestions(["nope/x"], 0, 6) is None

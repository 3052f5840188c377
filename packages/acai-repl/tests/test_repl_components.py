"""Tests for transcript and chrome components of the REPL."""

from __future__ import annotations

import os

from acai.repl.components import AssistantMessage, Footer, ThinkingBlock, UserMessage, Welcome
from acai.repl.components.footer import format_tokens, shorten_home
from acai.tui.utils import strip_ansi, visible_width


def plain(component: object, width: int = 80) -> list[str]:
    return [strip_ansi(line).rstrip() for line in component.render(width)]  # type: ignore[attr-defined]


def joined(component: object, width: int = 80) -> str:
    return "\n".join(plain(component, width))


# ---------------------------------------------------------------------------
# ThinkingBlock
# ---------------------------------------------------------------------------


class TestThinkingBlock:
    def test_streaming_shows_spinner(self) -> None:
        block = ThinkingBlock(None, "weighing options")
        out = joined(block)
        assert "thinking…" in out
        assert "weighing options" not in out
        assert not block.sealed

    def test_sealed_collapsed_hint(self) -> None:
        block = ThinkingBlock(None, "weighing options")
        block.end_thinking()
        assert block.sealed
        assert joined(block).strip() == "thinking… (ctrl+o to expand)"

    def test_sealed_without_content(self) -> None:
        block = ThinkingBlock(None, "", sealed=True)
        assert joined(block).strip() == "thinking…"

    def test_end_thinking_replaces_content(self) -> None:
        block = ThinkingBlock(None, "partial")
        block.end_thinking("final thought")
        assert block.content == "final thought"

    def test_end_thinking_keeps_content_when_empty(self) -> None:
        block = ThinkingBlock(None, "partial")
        block.end_thinking("")
        assert block.content == "partial"

    def test_verbose_shows_content(self) -> None:
        block = ThinkingBlock(None, "weighing options", verbose=True)
        assert "weighing options" in joined(block)

    def test_toggle_verbose(self) -> None:
        block = ThinkingBlock(None, "weighing options", sealed=True)
        block.set_verbose_mode(True)
        assert block.verbose
        assert "weighing options" in joined(block)
        block.set_verbose_mode(False)
        assert "weighing options" not in joined(block)

    def test_update_content(self) -> None:
        block = ThinkingBlock(None, "a", verbose=True)
        block.update_content("a then b")
        assert "a then b" in joined(block)


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------


class TestAssistantMessage:
    def test_streaming_updates(self) -> None:
        message = AssistantMessage()
        message.update_content("Hello")
        message.update_content("Hello **world**")
        assert "Hello world" in joined(message)
        assert message.content == "Hello **world**"

    def test_content_is_trimmed(self) -> None:
        message = AssistantMessage("\n\n  hi  \n")
        assert message.content == "hi"

    def test_seal(self) -> None:
        message = AssistantMessage("draft")
        message.seal("final")
        assert message.sealed
        assert message.content == "final"

    def test_seal_without_content_keeps_text(self) -> None:
        message = AssistantMessage("draft")
        message.seal()
        assert message.content == "draft"


class TestUserMessage:
    def test_renders_text_with_padding(self) -> None:
        rows = plain(UserMessage("fix the bug"))
        assert rows[0] == ""
        assert rows[-1] == ""
        assert any("fix the bug" in row for row in rows)

    def test_rows_fill_width(self) -> None:
        for row in UserMessage("fix the bug").render(40):
            assert visible_width(row) == 40


# ---------------------------------------------------------------------------
# Footer
# ---------------------------------------------------------------------------


class TestFormatTokens:
    def test_small(self) -> None:
        assert format_tokens(0) == "0"
        assert format_tokens(999) == "999"

    def test_thousands(self) -> None:
        assert format_tokens(1500) == "1.5k"

    def test_tens_of_thousands(self) -> None:
        assert format_tokens(12345) == "12k"
        assert format_tokens(128000) == "128k"


class TestFooter:
    def test_two_rows(self) -> None:
        footer = Footer("/tmp/project", "gpt-x", "Normal")
        rows = plain(footer, 60)
        assert rows[0] == "/tmp/project"
        assert rows[1].startswith("↑0 ↓0  Normal")
        assert rows[1].endswith("gpt-x")
        assert visible_width(rows[1]) == 60

    def test_usage_and_mode(self) -> None:
        footer = Footer("/tmp/project")
        footer.set_usage(1500, 20000)
        footer.set_mode("Planning")
        assert plain(footer)[1] == "↑1.5k ↓20k  Planning"

    def test_narrow_drops_model(self) -> None:
        footer = Footer("/tmp/project", "a-very-long-model-name")
        row = plain(footer, 20)[1]
        assert "a-very-long-model-name" not in row
        assert visible_width(row) <= 20

    def test_reset_keeps_model(self) -> None:
        footer = Footer("/tmp/project", "m1", "Normal")
        footer.set_model("m2")
        footer.set_mode("Research")
        footer.set_usage(10, 10)
        footer.reset()
        assert footer.state.model == "m2"
        assert footer.state.mode == "Normal"
        assert footer.state.input_tokens == 0

    def test_shorten_home(self) -> None:
        home = os.path.expanduser("~")
        assert shorten_home(os.path.join(home, "src")) == os.path.join("~", "src")
        assert shorten_home("/elsewhere") == "/elsewhere"


# ---------------------------------------------------------------------------
# Welcome
# ---------------------------------------------------------------------------


class TestWelcome:
    def test_banner(self) -> None:
        out = joined(Welcome("1.2.3", "/tmp/project"))
        assert "Welcome to acai" in out
        assert "Version 1.2.3" in out
        assert "The current working directory is /tmp/project" in out
        assert "/help" in out

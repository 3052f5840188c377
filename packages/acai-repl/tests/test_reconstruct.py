"""Tests for saved-session parsing and transcript reconstruction."""

from __future__ import annotations

import json

import pytest

from acai.repl.adapter import StreamAdapter
from acai.repl.components import AssistantMessage, ThinkingBlock, ToolExecution, UserMessage
from acai.repl.events import AgentStart
from acai.repl.session import (
    AssistantModelMessage,
    SessionFormatError,
    ToolCallPart,
    ToolModelMessage,
    UserModelMessage,
    parse_messages,
    reasoning_of,
    text_of,
    tool_calls_of,
)
from acai.tui.components import Editor, Notification, Spacer
from acai.tui.tui import TUI, Container
from acai.tui.utils import strip_ansi

from virtual_terminal import VirtualTerminal

USER = {"role": "user", "content": "list the files"}
ASSISTANT = {
    "role": "assistant",
    "content": [
        {"type": "reasoning", "text": "use ls"},
        {"type": "text", "text": "Listing now."},
        {"type": "tool-call", "toolCallId": "c1", "toolName": "bash", "input": {"cmd": "ls"}},
        {"type": "tool-call", "toolCallId": "c2", "toolName": "read", "input": {"path": "x"}},
    ],
}
TOOL = {
    "role": "tool",
    "content": [
        {"type": "tool-result", "toolCallId": "c1", "toolName": "bash", "output": {"type": "text", "value": "a.txt"}},
        {
            "type": "tool-result",
            "toolCallId": "c2",
            "toolName": "read",
            "output": {"type": "error-text", "value": "no such file"},
        },
    ],
}


def make_adapter(tool_display=None) -> StreamAdapter:  # type: ignore[no-untyped-def]
    tui = TUI(VirtualTerminal())
    return StreamAdapter(
        tui,
        Container(),
        Container(),
        Editor(tui),
        Notification(tui, auto_dismiss_ms=0),
        tool_display=tool_display,
    )


def content(adapter: StreamAdapter) -> list[object]:
    return [child for child in adapter.chat.children if not isinstance(child, Spacer)]


def plain(adapter: StreamAdapter) -> list[str]:
    return [strip_ansi(line).rstrip() for line in adapter.chat.render(80)]


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class TestParseMessages:
    def test_roles_and_aliases(self) -> None:
        messages = parse_messages([USER, ASSISTANT, TOOL])
        user, assistant, tool = messages
        assert isinstance(user, UserModelMessage)
        assert isinstance(assistant, AssistantModelMessage)
        assert isinstance(tool, ToolModelMessage)
        calls = tool_calls_of(assistant)
        assert [c.tool_call_id for c in calls] == ["c1", "c2"]
        assert calls[0].tool_name == "bash"
        assert tool.content[1].output is not None and tool.content[1].output.is_error

    def test_json_document(self) -> None:
        messages = parse_messages(json.dumps([USER, ASSISTANT]))
        assert len(messages) == 2

    def test_snake_case_names_accepted(self) -> None:
        part = ToolCallPart(tool_call_id="c9", tool_name="grep")
        assert part.tool_call_id == "c9"

    def test_text_helpers(self) -> None:
        assistant = parse_messages([ASSISTANT])[0]
        assert isinstance(assistant, AssistantModelMessage)
        assert text_of(assistant) == "Listing now."
        assert reasoning_of(assistant) == "use ls"

    def test_string_content(self) -> None:
        assistant = parse_messages([{"role": "assistant", "content": "plain"}])[0]
        assert isinstance(assistant, AssistantModelMessage)
        assert text_of(assistant) == "plain"
        assert reasoning_of(assistant) == ""
        assert tool_calls_of(assistant) == []

    def test_unknown_role(self) -> None:
        with pytest.raises(SessionFormatError):
            parse_messages([{"role": "robot", "content": "beep"}])

    def test_invalid_json(self) -> None:
        with pytest.raises(SessionFormatError):
            parse_messages("[{")


# ---------------------------------------------------------------------------
# Reconstruction
# ---------------------------------------------------------------------------


class TestReconstruct:
    def test_component_order(self) -> None:
        adapter = make_adapter()
        adapter.reconstruct(parse_messages([USER, ASSISTANT, TOOL]))
        kinds = [type(c) for c in content(adapter)]
        assert kinds == [UserMessage, ThinkingBlock, AssistantMessage, ToolExecution, ToolExecution]

    def test_everything_is_sealed(self) -> None:
        adapter = make_adapter()
        adapter.reconstruct(parse_messages([USER, ASSISTANT, TOOL]))
        for child in content(adapter):
            if isinstance(child, (ThinkingBlock, AssistantMessage, ToolExecution)):
                assert child.sealed

    def test_results_pair_with_calls(self) -> None:
        adapter = make_adapter()
        adapter.reconstruct(parse_messages([USER, ASSISTANT, TOOL]))
        tools = [c for c in content(adapter) if isinstance(c, ToolExecution)]
        assert [t.status for t in tools] == ["tool-call-end", "tool-call-error"]
        assert tools[0].events[-1].msg == "a.txt"
        assert tools[1].events[-1].msg == "no such file"

    def test_result_position_does_not_matter(self) -> None:
        before = make_adapter()
        before.reconstruct(parse_messages([TOOL, USER, ASSISTANT]))
        after = make_adapter()
        after.reconstruct(parse_messages([USER, ASSISTANT, TOOL]))
        assert plain(before) == plain(after)

    def test_calls_without_results_are_skipped(self) -> None:
        adapter = make_adapter()
        adapter.reconstruct(parse_messages([USER, ASSISTANT]))
        assert not any(isinstance(c, ToolExecution) for c in content(adapter))

    def test_tool_display_sets_start_message(self) -> None:
        adapter = make_adapter(lambda name, args: f"{name} {args.get('cmd', args.get('path'))}")
        adapter.reconstruct(parse_messages([USER, ASSISTANT, TOOL]))
        tools = [c for c in content(adapter) if isinstance(c, ToolExecution)]
        assert tools[0].events[0].msg == "bash ls"

    def test_start_message_defaults_to_tool_name(self) -> None:
        adapter = make_adapter()
        adapter.reconstruct(parse_messages([USER, ASSISTANT, TOOL]))
        tools = [c for c in content(adapter) if isinstance(c, ToolExecution)]
        assert [t.events[0].msg for t in tools] == ["bash", "read"]

    def test_replaces_existing_transcript(self) -> None:
        adapter = make_adapter()
        adapter.reconstruct(parse_messages([USER]))
        adapter.reconstruct(parse_messages([USER]))
        assert len(content(adapter)) == 1

    def test_closes_open_turn(self) -> None:
        adapter = make_adapter()
        adapter.handle(AgentStart())
        adapter.reconstruct(parse_messages([USER]))
        assert not adapter.busy

    def test_blank_user_message_skipped(self) -> None:
        adapter = make_adapter()
        adapter.reconstruct(parse_messages([{"role": "user", "content": "  "}, {"role": "system", "content": "sys"}]))
        assert content(adapter) == []

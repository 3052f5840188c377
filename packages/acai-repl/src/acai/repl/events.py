"""Agent events consumed by the REPL.

Every event is a small dataclass with a ``type`` literal, so a stream can
be dispatched with ``match`` on the class. ``AgentEvent`` is the closed
union of all of them.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Literal

Role = Literal["user", "assistant"]

ToolPhase = Literal[
    "tool-call-start",
    "tool-call-init",
    "tool-call-update",
    "tool-call-end",
    "tool-call-error",
]

PHASE_RANK: dict[str, int] = {
    "tool-call-start": 0,
    "tool-call-init": 1,
    "tool-call-update": 2,
    "tool-call-end": 3,
    "tool-call-error": 3,
}

TERMINAL_PHASES = frozenset({"tool-call-end", "tool-call-error"})


# --- Agent lifecycle ---


@dataclass
class AgentStart:
    type: Literal["agent-start"] = "agent-start"


@dataclass
class AgentStop:
    type: Literal["agent-stop"] = "agent-stop"


@dataclass
class AgentError:
    message: str
    type: Literal["agent-error"] = "agent-error"


@dataclass
class StepStart:
    type: Literal["step-start"] = "step-start"


@dataclass
class StepStop:
    type: Literal["step-stop"] = "step-stop"


# --- Thinking ---


@dataclass
class ThinkingStart:
    content: str = ""
    type: Literal["thinking-start"] = "thinking-start"


@dataclass
class Thinking:
    content: str
    type: Literal["thinking"] = "thinking"


@dataclass
class ThinkingEnd:
    content: str = ""
    type: Literal["thinking-end"] = "thinking-end"


# --- Messages ---


@dataclass
class MessageStart:
    role: Role = "assistant"
    content: str = ""
    type: Literal["message-start"] = "message-start"


@dataclass
class Message:
    """A user prompt, or the accumulated assistant text so far."""

    role: Role
    content: str
    type: Literal["message"] = "message"


@dataclass
class MessageEnd:
    role: Role = "assistant"
    content: str = ""
    type: Literal["message-end"] = "message-end"


# --- Tool calls ---


@dataclass
class ToolEvent:
    """One phase of a tool call. ``msg`` is phase-specific display text."""

    type: ToolPhase
    name: str
    tool_call_id: str
    msg: str = ""
    args: Any = None

    @property
    def rank(self) -> int:
        return PHASE_RANK[self.type]

    @property
    def is_terminal(self) -> bool:
        return self.type in TERMINAL_PHASES


@dataclass
class ToolCallLifecycle:
    """Full phase log of one tool call, re-sent whenever it grows."""

    tool_call_id: str
    events: list[ToolEvent] = field(default_factory=list)
    type: Literal["tool-call-lifecycle"] = "tool-call-lifecycle"


AgentEvent = (
    AgentStart
    | AgentStop
    | AgentError
    | StepStart
    | StepStop
    | ThinkingStart
    | Thinking
    | ThinkingEnd
    | MessageStart
    | Message
    | MessageEnd
    | ToolCallLifecycle
)


def sort_by_phase(events: list[ToolEvent]) -> list[ToolEvent]:
    """Order a phase log by rank; updates keep their delivery order."""
    return sorted(events, key=lambda event: event.rank)


_EVENT_TYPES: dict[str, type] = {
    cls.type: cls  # type: ignore[attr-defined]
    for cls in (
        AgentStart,
        AgentStop,
        AgentError,
        StepStart,
        StepStop,
        ThinkingStart,
        Thinking,
        ThinkingEnd,
        MessageStart,
        Message,
        MessageEnd,
    )
}


def _tool_event_from_dict(data: dict[str, Any]) -> ToolEvent:
    if data.get("type") not in PHASE_RANK:
        raise ValueError(f"unknown tool phase {data.get('type')!r}")
    return ToolEvent(
        type=data["type"],
        name=data.get("name", ""),
        tool_call_id=data.get("toolCallId", data.get("tool_call_id", "")),
        msg=data.get("msg", ""),
        args=data.get("args"),
    )


def event_from_dict(data: dict[str, Any]) -> AgentEvent:
    """Decode one event as written by the agent (camelCase keys)."""
    kind = data.get("type")
    if kind == "tool-call-lifecycle":
        return ToolCallLifecycle(
            tool_call_id=data.get("toolCallId", data.get("tool_call_id", "")),
            events=[_tool_event_from_dict(e) for e in data.get("events", [])],
        )
    cls = _EVENT_TYPES.get(kind)  # type: ignore[arg-type]
    if cls is None:
        raise ValueError(f"unknown event type {kind!r}")
    names = {f.name for f in fields(cls)} - {"type"}
    try:
        return cls(**{k: v for k, v in data.items() if k in names})
    except TypeError as exc:
        raise ValueError(f"malformed {kind} event: {exc}") from exc

"""acai-repl: interactive terminal front end for the acai coding agent."""

__version__ = "0.1.0"

from acai.repl.adapter import StreamAdapter  # noqa: E402
from acai.repl.editor_launcher import EditorLaunchError, EditorLaunchResult, launch_editor  # noqa: E402
from acai.repl.events import (  # noqa: E402
    AgentError,
    AgentEvent,
    AgentStart,
    AgentStop,
    Message,
    MessageEnd,
    MessageStart,
    StepStart,
    StepStop,
    Thinking,
    ThinkingEnd,
    ThinkingStart,
    ToolCallLifecycle,
    ToolEvent,
    event_from_dict,
)
from acai.repl.modes import ModeManager  # noqa: E402
from acai.repl.repl import Repl, ReplHooks  # noqa: E402
from acai.repl.session import SessionFormatError, SessionMessage, parse_messages  # noqa: E402
from acai.repl.settings import Settings  # noqa: E402
from acai.repl.turn import TurnScope  # noqa: E402

__all__ = [
    "AgentError",
    "AgentEvent",
    "AgentStart",
    "AgentStop",
    "EditorLaunchError",
    "EditorLaunchResult",
    "Message",
    "MessageEnd",
    "MessageStart",
    "ModeManager",
    "Repl",
    "ReplHooks",
    "SessionFormatError",
    "SessionMessage",
    "Settings",
    "StepStart",
    "StepStop",
    "StreamAdapter",
    "Thinking",
    "ThinkingEnd",
    "ThinkingStart",
    "ToolCallLifecycle",
    "ToolEvent",
    "TurnScope",
    "__version__",
    "event_from_dict",
    "launch_editor",
    "parse_messages",
]

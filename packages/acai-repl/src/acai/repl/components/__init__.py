"""REPL transcript and chrome components."""

from acai.repl.components.assistant_message import AssistantMessage
from acai.repl.components.footer import Footer, FooterState
from acai.repl.components.thinking_block import ThinkingBlock
from acai.repl.components.tool_execution import ToolExecution
from acai.repl.components.user_message import UserMessage
from acai.repl.components.welcome import Welcome

__all__ = [
    "AssistantMessage",
    "Footer",
    "FooterState",
    "ThinkingBlock",
    "ToolExecution",
    "UserMessage",
    "Welcome",
]

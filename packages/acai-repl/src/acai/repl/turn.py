"""State that lives for exactly one agent turn."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from acai.repl.components import AssistantMessage, ThinkingBlock, ToolExecution
    from acai.tui.components import Loader


@dataclass
class TurnScope:
    """Pointers the adapter needs between ``agent-start`` and ``agent-stop``.

    Dropping the scope drops every reference at once, so a late event for
    a finished turn can never mutate a component from that turn.
    """

    loader: Loader | None = None
    streaming_message: AssistantMessage | None = None
    thinking_block: ThinkingBlock | None = None
    pending_tools: dict[str, ToolExecution] = field(default_factory=dict)

    def close(self) -> None:
        if self.loader is not None:
            self.loader.stop()
            self.loader = None
        if self.thinking_block is not None:
            self.thinking_block.end_thinking()
            self.thinking_block = None
        for tool in self.pending_tools.values():
            tool.stop()
        self.pending_tools.clear()
        self.streaming_message = None

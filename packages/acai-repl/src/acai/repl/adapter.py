"""Turns agent events into mutations of the transcript.

``StreamAdapter.handle`` applies one event; ``consume`` drains an async
stream of them. Everything a turn creates (loader, streaming message,
thinking block, tool displays) hangs off a :class:`TurnScope` that is
discarded when the turn stops, errors, or the stream ends early.

Malformed sequences are normalized rather than rejected: a ``message``
or ``thinking`` without its start creates the component, a tool log
without a start phase gets one, and a log for a finished tool call starts
a fresh display.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, AsyncIterable, Callable, assert_never

from acai.repl.components import AssistantMessage, ThinkingBlock, ToolExecution, UserMessage
from acai.repl.components.tool_execution import normalize_events
from acai.repl.events import (
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
)
from acai.repl.session import (
    AssistantModelMessage,
    SessionMessage,
    SystemModelMessage,
    ToolModelMessage,
    UserModelMessage,
    reasoning_of,
    text_of,
    tool_calls_of,
)
from acai.repl.turn import TurnScope
from acai.tui.components import Loader, Spacer
from acai.tui.tui import Component, Container

if TYPE_CHECKING:
    from acai.tui.components import Editor, Notification
    from acai.tui.tui import TUI

logger = logging.getLogger(__name__)

WORKING_MESSAGE = "Working... (esc to interrupt)"

ToolDisplayFn = Callable[[str, Any], str]


class StreamAdapter:
    def __init__(
        self,
        tui: TUI,
        chat: Container,
        status: Container,
        editor: Editor,
        notification: Notification,
        *,
        verbose: bool = False,
        tool_display: ToolDisplayFn | None = None,
    ) -> None:
        self.tui = tui
        self.chat = chat
        self.status = status
        self.editor = editor
        self.notification = notification
        self.tool_display = tool_display
        self.on_turn_end: Callable[[], None] | None = None
        self._verbose = verbose
        self._turn: TurnScope | None = None
        self._active = False

    @property
    def turn(self) -> TurnScope | None:
        return self._turn

    @property
    def busy(self) -> bool:
        """True between agent-start and its stop or error."""
        return self._active

    @property
    def verbose(self) -> bool:
        return self._verbose

    def set_verbose(self, verbose: bool) -> None:
        """Apply *verbose* to every thinking block and tool display."""
        self._verbose = verbose
        for child in self.chat.children:
            if isinstance(child, (ThinkingBlock, ToolExecution)):
                child.set_verbose_mode(verbose)
        self.tui.request_render()

    # ------------------------------------------------------------------
    # Streaming
    # ------------------------------------------------------------------

    def handle(self, event: AgentEvent) -> None:
        """Apply one event. Failures are logged and shown, never raised."""
        try:
            self._dispatch(event)
        except Exception as exc:
            logger.exception("failed to display %s event", getattr(event, "type", "?"))
            self.notification.show(f"Display error: {exc}")
        self.tui.request_render()

    async def consume(self, events: AsyncIterable[AgentEvent]) -> None:
        """Drain *events*; the turn is always closed when the stream ends."""
        try:
            async for event in events:
                self.handle(event)
        finally:
            if self._turn is not None:
                logger.warning("event stream ended without agent-stop")
                self.end_turn()
                self.tui.request_render()

    def _dispatch(self, event: AgentEvent) -> None:
        logger.debug("event %s", event.type)
        match event:
            case AgentStart():
                self._start_turn()
            case StepStart() | StepStop():
                pass
            case MessageStart(role="assistant"):
                self._message_start(event.content)
            case MessageStart():
                pass
            case Message(role="user"):
                if event.content:
                    self._append(UserMessage(event.content))
                self.editor.set_text("")
            case Message():
                self._message_update(event.content)
            case MessageEnd(role="assistant"):
                self._message_end(event.content)
            case MessageEnd():
                pass
            case ThinkingStart():
                self._thinking_start(event.content)
            case Thinking():
                self._thinking_update(event.content)
            case ThinkingEnd():
                self._thinking_end(event.content)
            case ToolCallLifecycle():
                self._tool_lifecycle(event)
            case AgentStop():
                self.end_turn()
            case AgentError():
                logger.error("agent error: %s", event.message)
                self.end_turn()
                self.notification.show(f"Error: {event.message}")
            case _:
                assert_never(event)

    # ------------------------------------------------------------------

    def _append(self, component: Component) -> None:
        self.chat.add_child(Spacer(1))
        self.chat.add_child(component)

    def _scope(self) -> TurnScope:
        if self._turn is None:
            # Collects stray events without locking the prompt.
            logger.warning("event outside a turn, opening one")
            self._turn = TurnScope()
        return self._turn

    def _start_turn(self) -> None:
        if self._turn is not None:
            self._turn.close()
        self.editor.disable_submit = True
        self.status.clear()
        loader = Loader(self.tui, WORKING_MESSAGE)
        self.status.add_child(loader)
        self._turn = TurnScope(loader=loader)
        self._active = True

    def end_turn(self) -> None:
        """Close the current turn, if any, and unlock the prompt."""
        turn, self._turn = self._turn, None
        self._active = False
        if turn is not None:
            turn.close()
        self.status.clear()
        self.editor.disable_submit = False
        if turn is not None and self.on_turn_end is not None:
            self.on_turn_end()

    def _message_start(self, content: str) -> None:
        scope = self._scope()
        if scope.streaming_message is not None:
            scope.streaming_message.seal()
        message = AssistantMessage(content)
        scope.streaming_message = message
        self._append(message)

    def _message_update(self, content: str) -> None:
        scope = self._scope()
        if scope.streaming_message is None:
            logger.warning("assistant message without message-start")
            scope.streaming_message = AssistantMessage()
            self._append(scope.streaming_message)
        scope.streaming_message.update_content(content)

    def _message_end(self, content: str) -> None:
        scope = self._scope()
        message = scope.streaming_message
        if message is None:
            if not content.strip():
                return
            logger.warning("message-end without message-start")
            message = AssistantMessage()
            self._append(message)
        message.seal(content)
        scope.streaming_message = None

    def _thinking_start(self, content: str) -> None:
        scope = self._scope()
        if scope.thinking_block is not None:
            scope.thinking_block.end_thinking()
        block = ThinkingBlock(self.tui, content, verbose=self._verbose)
        scope.thinking_block = block
        self._append(block)

    def _thinking_update(self, content: str) -> None:
        scope = self._scope()
        if scope.thinking_block is None:
            logger.warning("thinking without thinking-start")
            self._thinking_start(content)
            return
        scope.thinking_block.update_content(content)

    def _thinking_end(self, content: str) -> None:
        scope = self._scope()
        if scope.thinking_block is not None:
            scope.thinking_block.end_thinking(content)
            scope.thinking_block = None

    def _tool_lifecycle(self, event: ToolCallLifecycle) -> None:
        if not event.events:
            logger.warning("empty lifecycle for tool call %s", event.tool_call_id)
            return
        scope = self._scope()
        existing = scope.pending_tools.get(event.tool_call_id)
        if existing is not None and existing.sealed:
            if normalize_events(event.events) == existing.events:
                return
            logger.warning("tool call %s reused after it finished", event.tool_call_id)
            existing = None
        if existing is not None:
            existing.update(event.events)
            return
        if not any(e.type == "tool-call-start" for e in event.events):
            logger.warning("tool call %s has no start phase", event.tool_call_id)
        component = ToolExecution(self.tui, event.events, verbose=self._verbose)
        scope.pending_tools[event.tool_call_id] = component
        self._append(component)

    # ------------------------------------------------------------------
    # Session reconstruction
    # ------------------------------------------------------------------

    def reconstruct(self, messages: list[SessionMessage]) -> None:
        """Rebuild the transcript from persisted messages.

        The first pass indexes tool results by call id so the second pass,
        walking messages in order, can pair every call with its outcome no
        matter where the result message sits.
        """
        if self._turn is not None:
            self.end_turn()
        self.chat.clear()

        results: dict[str, tuple[str, bool]] = {}
        for message in messages:
            if isinstance(message, ToolModelMessage):
                for part in message.content:
                    output = part.output
                    if output is None:
                        results[part.tool_call_id] = ("", False)
                    else:
                        results[part.tool_call_id] = (output.as_text(), output.is_error)

        for message in messages:
            match message:
                case UserModelMessage():
                    text = text_of(message)
                    if text.strip():
                        self._append(UserMessage(text))
                case AssistantModelMessage():
                    self._reconstruct_assistant(message, results)
                case ToolModelMessage() | SystemModelMessage():
                    pass
                case _:
                    assert_never(message)
        logger.debug("reconstructed %d messages", len(messages))
        self.tui.request_render()

    def _reconstruct_assistant(self, message: AssistantModelMessage, results: dict[str, tuple[str, bool]]) -> None:
        reasoning = reasoning_of(message)
        if reasoning.strip():
            self._append(ThinkingBlock(self.tui, reasoning, verbose=self._verbose, sealed=True))
        text = text_of(message)
        if text.strip():
            reply = AssistantMessage(text)
            reply.seal()
            self._append(reply)
        for call in tool_calls_of(message):
            if call.tool_call_id not in results:
                continue
            output, is_error = results[call.tool_call_id]
            start_msg = self.tool_display(call.tool_name, call.input) if self.tool_display else call.tool_name
            events = [
                ToolEvent("tool-call-start", call.tool_name, call.tool_call_id, start_msg, call.input),
                ToolEvent(
                    "tool-call-error" if is_error else "tool-call-end",
                    call.tool_name,
                    call.tool_call_id,
                    output,
                    call.input,
                ),
            ]
            self._append(ToolExecution(self.tui, events, verbose=self._verbose))

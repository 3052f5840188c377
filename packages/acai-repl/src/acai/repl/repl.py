"""Interactive REPL: screen layout, global key chords and host hooks.

Layout, top to bottom::

    Welcome
    chat          transcript, scrolls
    status        working indicator, scrolls
    ---------------------------------- fixed footer from here
    Spacer
    editor
    Footer
    Notification

The host application talks to the REPL through :class:`ReplHooks` and
feeds agent events to :attr:`Repl.adapter`.
"""

from __future__ import annotations

import asyncio
import logging
import os
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, AsyncIterable, Callable

from acai.repl import __version__
from acai.repl.adapter import StreamAdapter, ToolDisplayFn
from acai.repl.components import Footer, Welcome
from acai.repl.editor_launcher import EditorLaunchError, launch_editor
from acai.repl.modes import ModeManager
from acai.repl.settings import Settings
from acai.tui import style
from acai.tui.components import Editor, EditorTheme, Modal, Notification, SelectItem, SelectList, Spacer
from acai.tui.tui import TUI, Component, Container

if TYPE_CHECKING:
    from acai.repl.events import AgentEvent
    from acai.repl.session import SessionMessage
    from acai.tui.autocomplete import AutocompleteProvider
    from acai.tui.keys import KeyEvent
    from acai.tui.terminal import Terminal

logger = logging.getLogger(__name__)

EXIT_CONFIRM_SECONDS = 1.0
EXIT_CONFIRM_MESSAGE = "Press Ctrl+C again to exit"


@dataclass
class ReplHooks:
    """Callbacks into the host application. All are optional."""

    on_submit: Callable[[str], None] | None = None
    on_escape: Callable[[], None] | None = None
    on_save: Callable[[], None] | None = None
    on_review: Callable[[], Component | None] | None = None
    list_models: Callable[[], list[str]] | None = None
    on_model_selected: Callable[[str], None] | None = None
    on_new_session: Callable[[], None] | None = None
    on_exit: Callable[[], None] | None = None


class Repl:
    def __init__(
        self,
        terminal: Terminal,
        settings: Settings | None = None,
        hooks: ReplHooks | None = None,
        *,
        cwd: str | None = None,
        autocomplete: AutocompleteProvider | None = None,
        tool_display: ToolDisplayFn | None = None,
        modes: ModeManager | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.hooks = hooks or ReplHooks()
        self.cwd = cwd or os.getcwd()
        self.modes = modes or ModeManager(self.settings.mode)  # type: ignore[arg-type]

        self.tui = TUI(terminal, show_hardware_cursor=self.settings.hardware_cursor)
        self.tui.on_error = self._on_handler_error
        self.welcome = Welcome(__version__, self.cwd)
        self.chat = Container()
        self.status = Container()
        self.editor = Editor(self.tui, EditorTheme(border_color=style.gray), padding_x=self.settings.editor_padding_x)
        self.editor_container = Container()
        self.editor_container.add_child(self.editor)
        self.footer = Footer(self.cwd, self.settings.model, self.modes.display_name())
        self.notification = Notification(self.tui, auto_dismiss_ms=self.settings.notification_ms)
        self.adapter = StreamAdapter(
            self.tui,
            self.chat,
            self.status,
            self.editor,
            self.notification,
            verbose=self.settings.verbose,
            tool_display=tool_display,
        )

        if autocomplete is not None:
            self.editor.set_autocomplete_provider(autocomplete)
        self.editor.on_submit = self._on_submit
        self.editor.on_escape = self._on_escape

        self.tui.add_child(self.welcome)
        self.tui.add_child(self.chat)
        self.tui.add_child(self.status)
        self.tui.set_fixed_footer_start()
        self.tui.add_child(Spacer(1))
        self.tui.add_child(self.editor_container)
        self.tui.add_child(self.footer)
        self.tui.add_child(self.notification)
        self.tui.set_focus(self.editor)

        self._exit_deadline: float | None = None
        self._exit_timer: asyncio.TimerHandle | None = None
        self._closed = asyncio.Event()
        self._input_waiter: asyncio.Future[str] | None = None
        self._bind_chords()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    @property
    def exit_pending(self) -> bool:
        return self._exit_deadline is not None

    def start(self) -> None:
        self.tui.terminal.set_title(f"acai: {self.cwd}")
        self.tui.start()

    def stop(self) -> None:
        self._cancel_exit_confirm()
        self.notification.clear()
        if self.adapter.turn is not None:
            self.adapter.turn.close()
        self.tui.stop()

    def exit(self) -> None:
        """Save, restore the terminal and release :meth:`wait_closed`."""
        if self.closed:
            return
        if self.adapter.busy and self.hooks.on_escape is not None:
            self.hooks.on_escape()
        if self.hooks.on_save is not None:
            self.hooks.on_save()
        self.stop()
        self._closed.set()
        if self._input_waiter is not None and not self._input_waiter.done():
            self._input_waiter.cancel()
        if self.hooks.on_exit is not None:
            self.hooks.on_exit()

    async def wait_closed(self) -> None:
        await self._closed.wait()

    async def run(self) -> None:
        self.start()
        await self.wait_closed()

    async def get_user_input(self) -> str:
        """Wait for the next submitted prompt."""
        self._input_waiter = asyncio.get_running_loop().create_future()
        try:
            return await self._input_waiter
        finally:
            self._input_waiter = None

    # ------------------------------------------------------------------
    # Agent side
    # ------------------------------------------------------------------

    def handle(self, event: AgentEvent) -> None:
        self.adapter.handle(event)

    async def consume(self, events: AsyncIterable[AgentEvent]) -> None:
        await self.adapter.consume(events)

    def reconstruct(self, messages: list[SessionMessage]) -> None:
        self.adapter.reconstruct(messages)

    def set_model(self, model: str) -> None:
        self.settings.model = model
        self.footer.set_model(model)
        self.tui.request_render()

    def set_usage(self, input_tokens: int, output_tokens: int) -> None:
        self.footer.set_usage(input_tokens, output_tokens)
        self.tui.request_render()

    # ------------------------------------------------------------------
    # Editor callbacks
    # ------------------------------------------------------------------

    def _on_submit(self, text: str) -> None:
        if not text.strip():
            return
        self.editor.add_to_history(text)
        if self._input_waiter is not None and not self._input_waiter.done():
            self._input_waiter.set_result(text)
        if self.hooks.on_submit is not None:
            self.hooks.on_submit(text)

    def _on_escape(self) -> None:
        if self.adapter.busy and self.hooks.on_escape is not None:
            logger.debug("interrupt requested")
            self.hooks.on_escape()

    def _on_handler_error(self, exc: Exception) -> None:
        self.notification.show(f"Error: {exc}")

    # ------------------------------------------------------------------
    # Chords
    # ------------------------------------------------------------------

    def _bind_chords(self) -> None:
        terminal = self.tui.terminal
        self.tui.add_input_listener(self._on_any_input)
        self.tui.bind_chord("ctrl+z", self.background, when=lambda: not terminal.paste_in_progress)
        self.tui.bind_chord("ctrl+c", self.ctrl_c)
        self.tui.bind_chord("ctrl+d", self.ctrl_d)
        self.tui.bind_chord("ctrl+o", self.toggle_verbose)
        self.tui.bind_chord("ctrl+r", self.show_review)
        self.tui.bind_chord("ctrl+n", self.new_session)
        self.tui.bind_chord("ctrl+m", self.show_model_picker)
        self.tui.bind_chord("ctrl+g", self.open_external_editor)
        self.tui.bind_chord(
            "shift+tab",
            self.cycle_mode,
            when=lambda: self.tui.modal is None and not self.tui.focused_wants_navigation_keys(),
        )

    def _on_any_input(self, event: KeyEvent) -> None:
        if self._exit_deadline is None or event.kind == "mouse" or event.name == "ctrl+c":
            return
        self._cancel_exit_confirm()
        self.notification.clear()

    def ctrl_c(self) -> None:
        """First press clears the prompt; a second press within a second exits."""
        now = time.monotonic()
        if self._exit_deadline is not None and now < self._exit_deadline:
            self._cancel_exit_confirm()
            self.notification.clear()
            self.exit()
            return

        self.editor.clear()
        self.notification.show(EXIT_CONFIRM_MESSAGE)
        self._cancel_exit_confirm()
        self._exit_deadline = now + EXIT_CONFIRM_SECONDS
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._exit_timer = loop.call_later(EXIT_CONFIRM_SECONDS, self._expire_exit_confirm)

    def _expire_exit_confirm(self) -> None:
        self._exit_timer = None
        self._exit_deadline = None
        if self.notification.message == EXIT_CONFIRM_MESSAGE:
            self.notification.clear()

    def _cancel_exit_confirm(self) -> None:
        if self._exit_timer is not None:
            self._exit_timer.cancel()
            self._exit_timer = None
        self._exit_deadline = None

    def ctrl_d(self) -> None:
        """Exit, but only when the prompt is empty."""
        if self.editor.get_text().strip():
            return
        self._cancel_exit_confirm()
        self.exit()

    def background(self) -> None:
        self.tui.terminal.background()
        self.tui.force_full_redraw()

    def toggle_verbose(self) -> None:
        verbose = not self.adapter.verbose
        self.settings.verbose = verbose
        self.adapter.set_verbose(verbose)
        self.notification.show(f"Verbose mode: {'ON' if verbose else 'OFF'}")

    def cycle_mode(self) -> None:
        self.modes.cycle_mode()
        self.footer.set_mode(self.modes.display_name())
        logger.debug("mode is now %s", self.modes.mode)

    def show_review(self) -> None:
        content = self.hooks.on_review() if self.hooks.on_review is not None else None
        if content is None:
            self.notification.show("Nothing to review")
            return
        self.tui.show_modal(Modal("Review", content))

    def new_session(self) -> None:
        if self.hooks.on_save is not None:
            self.hooks.on_save()
        self.adapter.end_turn()
        self.modes.reset()
        self.chat.clear()
        self.status.clear()
        self.editor.clear()
        self.footer.reset()
        self.footer.set_mode(self.modes.display_name())
        self.tui.terminal.set_title(f"acai: {self.cwd}")
        if self.hooks.on_new_session is not None:
            self.hooks.on_new_session()
        self.tui.force_full_redraw()

    def show_model_picker(self) -> None:
        models = self.hooks.list_models() if self.hooks.list_models is not None else list(self.settings.models)
        if not models:
            self.notification.show("No models configured")
            return
        picker = SelectList([SelectItem(model, model) for model in models])
        if self.settings.model in models:
            picker.set_selected_index(models.index(self.settings.model))
        modal = Modal("Select model", picker)

        def select(item: SelectItem) -> None:
            modal.close()
            self.set_model(item.value)
            if self.hooks.on_model_selected is not None:
                self.hooks.on_model_selected(item.value)

        picker.on_select = select
        picker.on_cancel = modal.close
        self.tui.show_modal(modal)

    def open_external_editor(self) -> None:
        try:
            result = launch_editor(self.tui.terminal, self.editor.get_text(), ".md")
        except EditorLaunchError as exc:
            logger.error("external editor failed: %s", exc)
            self.notification.show(str(exc))
            return
        finally:
            self.tui.force_full_redraw()
        if not result.aborted:
            self.editor.set_text(result.content.rstrip("\n"))

"""Spinner with a message, animated on the event loop."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Callable

from acai.tui import style
from acai.tui.components.text import Text

if TYPE_CHECKING:
    from acai.tui.tui import TUI

FRAMES = ("⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏")
FRAME_INTERVAL = 0.08


class Loader(Text):
    def __init__(
        self,
        ui: TUI | None,
        message: str = "Loading...",
        spinner_color_fn: Callable[[str], str] = style.cyan,
        message_color_fn: Callable[[str], str] = style.dim,
        padding_x: int = 1,
        bg_fn: Callable[[str], str] | None = None,
    ) -> None:
        super().__init__("", padding_x, 0, bg_fn)
        self._ui = ui
        self._message = message
        self._spinner_color_fn = spinner_color_fn
        self._message_color_fn = message_color_fn
        self._frame = 0
        self._handle: asyncio.TimerHandle | None = None
        self._running = False
        self.start()

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        self._running = True
        self._refresh()
        self._schedule()

    def stop(self) -> None:
        self._running = False
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def set_message(self, message: str) -> None:
        self._message = message
        self._refresh()

    def _schedule(self) -> None:
        try:
            self._handle = asyncio.get_running_loop().call_later(FRAME_INTERVAL, self._tick)
        except RuntimeError:
            self._handle = None

    def _tick(self) -> None:
        if not self._running:
            return
        self._frame = (self._frame + 1) % len(FRAMES)
        self._refresh()
        self._schedule()

    def _refresh(self) -> None:
        spinner = self._spinner_color_fn(FRAMES[self._frame])
        self.set_text(f"{spinner} {self._message_color_fn(self._message)}")
        if self._ui is not None:
            self._ui.request_render()

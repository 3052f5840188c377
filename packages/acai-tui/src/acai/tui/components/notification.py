"""Transient one-line message that dismisses itself after a delay."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Callable

from acai.tui import style
from acai.tui.utils import apply_background_to_line, wrap_text_with_ansi

if TYPE_CHECKING:
    from acai.tui.tui import TUI

DEFAULT_DISMISS_MS = 3000


class Notification:
    def __init__(
        self,
        ui: TUI | None = None,
        *,
        bg_fn: Callable[[str], str] = style.bg_rgb(52, 53, 65),
        text_fn: Callable[[str], str] = style.yellow,
        padding_x: int = 1,
        auto_dismiss_ms: int = DEFAULT_DISMISS_MS,
        on_dismiss: Callable[[], None] | None = None,
    ) -> None:
        self._ui = ui
        self._bg_fn = bg_fn
        self._text_fn = text_fn
        self._padding_x = padding_x
        self._auto_dismiss_ms = auto_dismiss_ms
        self.on_dismiss = on_dismiss
        self._message = ""
        self._timer: asyncio.TimerHandle | None = None

    @property
    def message(self) -> str:
        return self._message

    @property
    def auto_dismiss_ms(self) -> int:
        return self._auto_dismiss_ms

    def set_auto_dismiss_ms(self, ms: int) -> None:
        self._auto_dismiss_ms = ms

    def show(self, message: str) -> None:
        """Display *message*, replacing any current one and restarting the timer."""
        self._cancel_timer()
        self._message = message
        if self._auto_dismiss_ms > 0:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                loop = None
            if loop is not None:
                self._timer = loop.call_later(self._auto_dismiss_ms / 1000, self._expire)
        self._request_render()

    def clear(self) -> None:
        self._cancel_timer()
        if self._message:
            self._message = ""
            self._request_render()

    def _expire(self) -> None:
        self._timer = None
        self._message = ""
        if self.on_dismiss is not None:
            self.on_dismiss()
        self._request_render()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _request_render(self) -> None:
        if self._ui is not None:
            self._ui.request_render()

    def render(self, width: int) -> list[str]:
        if not self._message:
            return []
        margin = " " * self._padding_x
        inner = max(1, width - 2 * self._padding_x)
        rows = wrap_text_with_ansi(self._text_fn(self._message), inner)
        return [apply_background_to_line(margin + row, width, self._bg_fn) for row in rows] + [""]

"""Container that pads its children and paints a background behind them."""

from __future__ import annotations

from typing import Callable

from acai.tui.tui import Container
from acai.tui.utils import apply_background_to_line, pad_to_width


class Box(Container):
    def __init__(
        self,
        padding_x: int = 1,
        padding_y: int = 1,
        bg_fn: Callable[[str], str] | None = None,
    ) -> None:
        super().__init__()
        self._padding_x = padding_x
        self._padding_y = padding_y
        self._bg_fn = bg_fn

    def render(self, width: int) -> list[str]:
        inner = max(1, width - 2 * self._padding_x)
        margin = " " * self._padding_x
        body = [margin + line for line in super().render(inner)]
        if not body:
            return []
        blank = [""] * self._padding_y
        return [self._paint(line, width) for line in (*blank, *body, *blank)]

    def _paint(self, line: str, width: int) -> str:
        if self._bg_fn is not None:
            return apply_background_to_line(line, width, self._bg_fn)
        return pad_to_width(line, width)

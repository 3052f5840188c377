"""Wrapped, padded text block."""

from __future__ import annotations

from typing import Callable

from acai.tui.utils import apply_background_to_line, pad_to_width, wrap_text_with_ansi


class Text:
    def __init__(
        self,
        text: str = "",
        padding_x: int = 1,
        padding_y: int = 1,
        custom_bg_fn: Callable[[str], str] | None = None,
    ) -> None:
        self._text = text
        self._padding_x = padding_x
        self._padding_y = padding_y
        self._bg_fn = custom_bg_fn
        self._cache: tuple[int, list[str]] | None = None

    @property
    def text(self) -> str:
        return self._text

    def set_text(self, text: str) -> None:
        if text != self._text:
            self._text = text
            self._cache = None

    def set_custom_bg_fn(self, custom_bg_fn: Callable[[str], str] | None) -> None:
        self._bg_fn = custom_bg_fn
        self._cache = None

    def invalidate(self) -> None:
        self._cache = None

    def render(self, width: int) -> list[str]:
        if self._cache is not None and self._cache[0] == width:
            return self._cache[1]

        lines: list[str] = []
        if self._text.strip():
            inner = max(1, width - 2 * self._padding_x)
            margin = " " * self._padding_x
            body = [margin + row for row in wrap_text_with_ansi(self._text.replace("\t", "   "), inner)]
            blank = [""] * self._padding_y
            lines = [self._paint(line, width) for line in (*blank, *body, *blank)]

        self._cache = (width, lines)
        return lines

    def _paint(self, line: str, width: int) -> str:
        if self._bg_fn is not None:
            return apply_background_to_line(line, width, self._bg_fn)
        return pad_to_width(line, width)

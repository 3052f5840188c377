"""Blank vertical space."""

from __future__ import annotations

from typing import Callable


class Spacer:
    """``lines`` empty rows, optionally painted with a background."""

    def __init__(self, lines: int = 1, bg_fn: Callable[[str], str] | None = None) -> None:
        self._lines = lines
        self._bg_fn = bg_fn

    def render(self, width: int) -> list[str]:
        if self._bg_fn is None:
            return [""] * self._lines
        return [self._bg_fn(" " * width) for _ in range(self._lines)]

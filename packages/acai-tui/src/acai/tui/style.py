"""Small SGR styling helpers.

Components take styling as ``Callable[[str], str]`` so tests can pass an
identity function; these are the functions used in the real application.
"""

from __future__ import annotations

from typing import Callable

StyleFn = Callable[[str], str]


def _sgr(on: str, off: str) -> StyleFn:
    def apply(text: str) -> str:
        return f"\x1b[{on}m{text}\x1b[{off}m"

    return apply


bold = _sgr("1", "22")
dim = _sgr("2", "22")
italic = _sgr("3", "23")
underline = _sgr("4", "24")
inverse = _sgr("7", "27")
strikethrough = _sgr("9", "29")

red = _sgr("31", "39")
green = _sgr("32", "39")
yellow = _sgr("33", "39")
blue = _sgr("34", "39")
magenta = _sgr("35", "39")
cyan = _sgr("36", "39")
gray = _sgr("90", "39")


def fg_rgb(r: int, g: int, b: int) -> StyleFn:
    return _sgr(f"38;2;{r};{g};{b}", "39")


def bg_rgb(r: int, g: int, b: int) -> StyleFn:
    return _sgr(f"48;2;{r};{g};{b}", "49")


def plain(text: str) -> str:
    return text


def compose(*fns: StyleFn) -> StyleFn:
    """Apply *fns* innermost-last: ``compose(bold, red)("x") == bold(red("x"))``."""

    def apply(text: str) -> str:
        for fn in reversed(fns):
            text = fn(text)
        return text

    return apply

"""Bordered overlay that captures input while it is open.

A ``Modal`` is shown with :meth:`acai.tui.tui.TUI.show_modal`. While open
it replaces the whole frame: a box centred in the viewport, a title row
with the visible line range, and the content scrolled inside. Closing it
(Escape, :meth:`Modal.close` or being replaced by another modal) fires
``on_close`` exactly once.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from acai.tui import style
from acai.tui.keys import parse_key
from acai.tui.tui import Component
from acai.tui.utils import truncate_to_width

if TYPE_CHECKING:
    from acai.tui.tui import TUI

MIN_WIDTH = 40
MIN_HEIGHT = 8
PAGE = 10
# top border, title, separator, bottom border
_CHROME_ROWS = 4


class Modal:
    def __init__(
        self,
        title: str,
        content: Component,
        *,
        dismissible: bool = True,
        on_close: Callable[[], None] | None = None,
        title_style: Callable[[str], str] = style.bold,
    ) -> None:
        self.title = title
        self.content = content
        self.dismissible = dismissible
        self.on_close = on_close
        self.focused = False
        self.viewport_rows = 24
        self._title_style = title_style
        self._scroll = 0
        self._closed = False
        self._tui: TUI | None = None

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def scroll(self) -> int:
        return self._scroll

    def attach(self, tui: TUI) -> None:
        self._tui = tui

    def close(self) -> None:
        """Dismiss this modal, restoring focus if it is the open one."""
        if self._tui is not None and self._tui.modal is self:
            self._tui.hide_modal()
        else:
            self.notify_closed()

    def notify_closed(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self.on_close is not None:
            self.on_close()

    def scroll_by(self, delta: int) -> None:
        self._scroll = max(0, self._scroll + delta)

    def handle_input(self, data: str) -> None:
        wants_keys = getattr(self.content, "wants_navigation_keys", None)
        if not (callable(wants_keys) and wants_keys()):
            key = parse_key(data)
            if key == "up":
                self.scroll_by(-1)
                return
            if key == "down":
                self.scroll_by(1)
                return
            if key == "pageUp":
                self.scroll_by(-PAGE)
                return
            if key == "pageDown":
                self.scroll_by(PAGE)
                return
            if key in ("home", "g"):
                self._scroll = 0
                return
            if key in ("end", "G"):
                # Clamped to the real bottom on the next render.
                self._scroll = 1 << 30
                return
        handler = getattr(self.content, "handle_input", None)
        if callable(handler):
            handler(data)

    def render(self, width: int) -> list[str]:
        box_width = min(width, max(MIN_WIDTH, width - 2))
        inner = max(1, box_width - 4)
        rows = max(1, self.viewport_rows)

        content = self.content.render(inner)
        height = min(rows, max(MIN_HEIGHT, len(content) + _CHROME_ROWS))
        body_rows = max(0, height - _CHROME_ROWS)
        self._scroll = max(0, min(self._scroll, len(content) - body_rows))
        visible = content[self._scroll : self._scroll + body_rows]

        first = self._scroll + 1 if visible else 0
        heading = f"{self.title} ({first}-{self._scroll + len(visible)}/{len(content)})"
        if self.dismissible:
            heading += " [esc to exit]"

        bar = "─" * (box_width - 2)
        framed = [
            f"┌{bar}┐",
            f"│ {self._title_style(truncate_to_width(heading, inner, pad=True))} │",
            f"├{bar}┤",
        ]
        for i in range(body_rows):
            line = visible[i] if i < len(visible) else ""
            framed.append(f"│ {truncate_to_width(line, inner, pad=True)} │")
        framed.append(f"└{bar}┘")

        margin = " " * ((width - box_width) // 2)
        above = (rows - len(framed)) // 2
        lines = [""] * above + [margin + row for row in framed]
        lines.extend([""] * (rows - len(lines)))
        return lines[:rows]

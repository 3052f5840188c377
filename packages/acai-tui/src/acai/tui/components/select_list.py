"""Scrollable single-choice list."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from acai.tui import style
from acai.tui.keybindings import get_keybindings
from acai.tui.utils import truncate_to_width

_LABEL_COLUMN = 32


@dataclass
class SelectItem:
    value: str
    label: str
    description: str | None = None


@dataclass
class SelectListTheme:
    selected_prefix: Callable[[str], str] = style.cyan
    selected_text: Callable[[str], str] = style.bold
    description: Callable[[str], str] = style.dim
    scroll_info: Callable[[str], str] = style.dim
    no_match: Callable[[str], str] = style.dim


class SelectList:
    def __init__(
        self,
        items: list[SelectItem],
        max_visible: int = 10,
        theme: SelectListTheme | None = None,
        empty_message: str = "No matches",
    ) -> None:
        self._items = list(items)
        self._visible_items = list(items)
        self._selected = 0
        self._max_visible = max(1, max_visible)
        self._theme = theme or SelectListTheme()
        self._empty_message = empty_message

        self.on_select: Callable[[SelectItem], None] | None = None
        self.on_cancel: Callable[[], None] | None = None
        self.on_selection_change: Callable[[SelectItem], None] | None = None

    @property
    def selected_index(self) -> int:
        return self._selected

    def get_selected_item(self) -> SelectItem | None:
        if 0 <= self._selected < len(self._visible_items):
            return self._visible_items[self._selected]
        return None

    def set_selected_index(self, index: int) -> None:
        self._selected = max(0, min(index, len(self._visible_items) - 1))

    def set_filter(self, prefix: str) -> None:
        needle = prefix.lower()
        self._visible_items = [
            item for item in self._items
            if item.value.lower().startswith(needle) or item.label.lower().startswith(needle)
        ]
        self._selected = 0

    def wants_navigation_keys(self) -> bool:
        return True

    def render(self, width: int) -> list[str]:
        if not self._visible_items:
            return [self._theme.no_match(f"  {self._empty_message}")]

        count = len(self._visible_items)
        first = max(0, min(self._selected - self._max_visible // 2, count - self._max_visible))
        last = min(count, first + self._max_visible)

        lines = [self._render_item(i, width) for i in range(first, last)]
        if first > 0 or last < count:
            info = f"  ({self._selected + 1}/{count})"
            lines.append(self._theme.scroll_info(truncate_to_width(info, max(1, width - 2), "")))
        return lines

    def _render_item(self, index: int, width: int) -> str:
        item = self._visible_items[index]
        selected = index == self._selected
        label = item.label or item.value
        description = " ".join((item.description or "").split())

        if description and width > 40:
            label = truncate_to_width(label, min(30, width - 6), "")
            gap = " " * max(1, _LABEL_COLUMN - len(label))
            room = width - 2 - len(label) - len(gap) - 2
            if room > 10:
                tail = gap + truncate_to_width(description, room, "")
                if selected:
                    return self._theme.selected_prefix("→ ") + self._theme.selected_text(label + tail)
                return "  " + label + self._theme.description(tail)

        label = truncate_to_width(label, max(1, width - 4), "")
        if selected:
            return self._theme.selected_prefix("→ ") + self._theme.selected_text(label)
        return "  " + label

    def handle_input(self, data: str) -> None:
        kb = get_keybindings()
        count = len(self._visible_items)
        if kb.matches(data, "selectUp") and count:
            self._selected = (self._selected - 1) % count
            self._notify_change()
        elif kb.matches(data, "selectDown") and count:
            self._selected = (self._selected + 1) % count
            self._notify_change()
        elif kb.matches(data, "selectPageUp") and count:
            self._selected = max(0, self._selected - self._max_visible)
            self._notify_change()
        elif kb.matches(data, "selectPageDown") and count:
            self._selected = min(count - 1, self._selected + self._max_visible)
            self._notify_change()
        elif kb.matches(data, "selectConfirm"):
            item = self.get_selected_item()
            if item is not None and self.on_select is not None:
                self.on_select(item)
        elif kb.matches(data, "selectCancel"):
            if self.on_cancel is not None:
                self.on_cancel()

    def _notify_change(self) -> None:
        item = self.get_selected_item()
        if item is not None and self.on_selection_change is not None:
            self.on_selection_change(item)

"""Multi-line input editor with history, paste markers and autocomplete."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

import grapheme

from acai.tui import style
from acai.tui.components.select_list import SelectList, SelectListTheme
from acai.tui.keybindings import get_keybindings
from acai.tui.keys import decode_key
from acai.tui.tui import CURSOR_MARKER
from acai.tui.utils import grapheme_width, visible_width

if TYPE_CHECKING:
    from acai.tui.autocomplete import AutocompleteProvider, Suggestions
    from acai.tui.tui import TUI

HISTORY_LIMIT = 100
LARGE_PASTE_LINES = 10
LARGE_PASTE_CHARS = 1000

_PASTE_MARKER_RE = re.compile(r"\[paste #(\d+)(?: (?:\+\d+ lines|\d+ chars))?\]")


@dataclass
class EditorState:
    lines: list[str] = field(default_factory=lambda: [""])
    cursor_line: int = 0
    cursor_col: int = 0


@dataclass
class EditorTheme:
    border_color: Callable[[str], str] = style.gray
    select_list: SelectListTheme = field(default_factory=SelectListTheme)


@dataclass
class _VisualLine:
    line: int
    start: int
    end: int


def word_wrap_line(line: str, width: int) -> list[tuple[int, int]]:
    """Split *line* into ``(start, end)`` index spans no wider than *width*.

    Breaks after the last space that fits; a word wider than the whole row
    is split between graphemes. A space that overflows stays at the end of
    its row, so a row may be one column wider than *width*.
    """
    if width <= 0 or not line:
        return [(0, len(line))]
    spans: list[tuple[int, int]] = []
    start = 0
    used = 0
    last_space = -1
    pos = 0
    for g in grapheme.graphemes(line):
        w = grapheme_width(g)
        if used + w > width and pos > start:
            if g == " ":
                pos += 1
                spans.append((start, pos))
                start, used, last_space = pos, 0, -1
                continue
            if last_space > start:
                spans.append((start, last_space))
                used = visible_width(line[last_space:pos])
                start = last_space
                if used + w > width:
                    spans.append((start, pos))
                    start, used = pos, 0
            else:
                spans.append((start, pos))
                start, used = pos, 0
            last_space = -1
        if g == " ":
            last_space = pos + 1
        used += w
        pos += len(g)
    spans.append((start, len(line)))
    return spans


class Editor:
    def __init__(
        self,
        tui: TUI,
        theme: EditorTheme | None = None,
        *,
        padding_x: int = 0,
        autocomplete_max_visible: int = 5,
    ) -> None:
        self._tui = tui
        self._theme = theme or EditorTheme()
        self._padding_x = padding_x
        self._autocomplete_max_visible = autocomplete_max_visible
        self._state = EditorState()
        self._scroll = 0
        self._wrap_width = 80

        self._history: list[str] = []
        self._history_index = -1
        self._draft = ""

        self._pastes: dict[int, str] = {}
        self._paste_counter = 0

        self._provider: AutocompleteProvider | None = None
        self._suggestions: Suggestions | None = None
        self._suggestion_list: SelectList | None = None

        self.focused = False
        self.disable_submit = False
        self.on_submit: Callable[[str], None] | None = None
        self.on_change: Callable[[str], None] | None = None
        self.on_escape: Callable[[], None] | None = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def set_autocomplete_provider(self, provider: AutocompleteProvider | None) -> None:
        self._provider = provider
        self._close_suggestions()

    def get_text(self) -> str:
        return "\n".join(self._state.lines)

    def get_expanded_text(self) -> str:
        """Buffer text with paste markers replaced by the pasted content."""
        return self._expand_pastes(self.get_text())

    def get_lines(self) -> list[str]:
        return list(self._state.lines)

    def get_cursor(self) -> tuple[int, int]:
        return self._state.cursor_line, self._state.cursor_col

    def set_text(self, text: str) -> None:
        lines = text.replace("\r\n", "\n").split("\n")
        self._state = EditorState(lines, len(lines) - 1, len(lines[-1]))
        self._scroll = 0
        self._history_index = -1
        self._close_suggestions()
        self._changed()

    def clear(self) -> None:
        self._pastes.clear()
        self._paste_counter = 0
        self.set_text("")

    def insert_text_at_cursor(self, text: str) -> None:
        self._history_index = -1
        st = self._state
        current = st.lines[st.cursor_line]
        pieces = text.split("\n")
        head, tail = current[: st.cursor_col], current[st.cursor_col :]
        if len(pieces) == 1:
            st.lines[st.cursor_line] = head + text + tail
            st.cursor_col += len(text)
        else:
            new = [head + pieces[0], *pieces[1:-1], pieces[-1] + tail]
            st.lines[st.cursor_line : st.cursor_line + 1] = new
            st.cursor_line += len(pieces) - 1
            st.cursor_col = len(pieces[-1])
        self._changed()

    def add_to_history(self, text: str) -> None:
        text = text.strip()
        if not text or (self._history and self._history[0] == text):
            return
        self._history.insert(0, text)
        del self._history[HISTORY_LIMIT:]

    @property
    def history(self) -> list[str]:
        return list(self._history)

    def is_showing_autocomplete(self) -> bool:
        return self._suggestion_list is not None

    def wants_navigation_keys(self) -> bool:
        return self.is_showing_autocomplete()

    def invalidate(self) -> None:
        pass

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def handle_input(self, data: str) -> None:  # noqa: C901
        event = decode_key(data)
        kb = get_keybindings()

        if event.kind == "paste":
            self._paste(event.data)
            return

        if self._suggestion_list is not None:
            if kb.matches(data, "selectCancel"):
                self._close_suggestions()
                return
            if kb.matches(data, "selectUp") or kb.matches(data, "selectDown"):
                self._suggestion_list.handle_input(data)
                return
            if kb.matches(data, "tab") or kb.matches(data, "selectConfirm"):
                self._accept_suggestion()
                return

        if event.kind == "char":
            self.insert_text_at_cursor(event.data)
            self._refresh_suggestions(explicit=False)
            return

        if kb.matches(data, "selectCancel"):
            if self.on_escape is not None:
                self.on_escape()
            return
        if kb.matches(data, "newLine"):
            self.insert_text_at_cursor("\n")
            return
        if kb.matches(data, "submit"):
            if self.disable_submit:
                return
            st = self._state
            line = st.lines[st.cursor_line]
            # A trailing backslash continues the input on a new line.
            if st.cursor_col > 0 and line[st.cursor_col - 1] == "\\":
                st.lines[st.cursor_line] = line[: st.cursor_col - 1] + line[st.cursor_col :]
                st.cursor_col -= 1
                self.insert_text_at_cursor("\n")
                return
            self._submit()
            return
        if kb.matches(data, "tab"):
            self._refresh_suggestions(explicit=True)
            return

        if kb.matches(data, "deleteCharBackward"):
            self._backspace()
        elif kb.matches(data, "deleteCharForward"):
            self._delete_forward()
        elif kb.matches(data, "deleteWordBackward"):
            self._delete_word_backward()
        elif kb.matches(data, "deleteToLineStart"):
            st = self._state
            st.lines[st.cursor_line] = st.lines[st.cursor_line][st.cursor_col :]
            st.cursor_col = 0
            self._changed()
        elif kb.matches(data, "deleteToLineEnd"):
            st = self._state
            st.lines[st.cursor_line] = st.lines[st.cursor_line][: st.cursor_col]
            self._changed()
        elif kb.matches(data, "cursorUp"):
            self._vertical(-1)
        elif kb.matches(data, "cursorDown"):
            self._vertical(1)
        elif kb.matches(data, "cursorLeft"):
            self._horizontal(-1)
        elif kb.matches(data, "cursorRight"):
            self._horizontal(1)
        elif kb.matches(data, "cursorWordLeft"):
            self._word_left()
        elif kb.matches(data, "cursorWordRight"):
            self._word_right()
        elif kb.matches(data, "cursorLineStart"):
            self._state.cursor_col = 0
        elif kb.matches(data, "cursorLineEnd"):
            self._state.cursor_col = len(self._state.lines[self._state.cursor_line])
        else:
            return
        if self._suggestion_list is not None:
            self._refresh_suggestions(explicit=False)

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change(self.get_text())

    def _paste(self, text: str) -> None:
        self._history_index = -1
        text = text.replace("\r\n", "\n").replace("\r", "\n").replace("\t", "    ")
        text = "".join(ch for ch in text if ch == "\n" or ord(ch) >= 32)
        rows = text.split("\n")
        if len(rows) > LARGE_PASTE_LINES or len(text) > LARGE_PASTE_CHARS:
            self._paste_counter += 1
            self._pastes[self._paste_counter] = text
            if len(rows) > LARGE_PASTE_LINES:
                marker = f"[paste #{self._paste_counter} +{len(rows)} lines]"
            else:
                marker = f"[paste #{self._paste_counter} {len(text)} chars]"
            self.insert_text_at_cursor(marker)
            return
        self.insert_text_at_cursor(text)

    def _expand_pastes(self, text: str) -> str:
        def replace(match: re.Match[str]) -> str:
            return self._pastes.get(int(match.group(1)), match.group(0))

        return _PASTE_MARKER_RE.sub(replace, text)

    def _submit(self) -> None:
        raw = self.get_text().strip()
        value = self._expand_pastes(raw)
        self._state = EditorState()
        self._pastes.clear()
        self._paste_counter = 0
        self._history_index = -1
        self._scroll = 0
        self._close_suggestions()
        self._changed()
        if self.on_submit is not None:
            self.on_submit(value)

    def _backspace(self) -> None:
        st = self._state
        if st.cursor_col > 0:
            line = st.lines[st.cursor_line]
            before = line[: st.cursor_col]
            last = list(grapheme.graphemes(before))[-1]
            st.lines[st.cursor_line] = before[: -len(last)] + line[st.cursor_col :]
            st.cursor_col -= len(last)
        elif st.cursor_line > 0:
            prev = st.lines[st.cursor_line - 1]
            st.lines[st.cursor_line - 1] = prev + st.lines.pop(st.cursor_line)
            st.cursor_line -= 1
            st.cursor_col = len(prev)
        else:
            return
        self._changed()

    def _delete_forward(self) -> None:
        st = self._state
        line = st.lines[st.cursor_line]
        if st.cursor_col < len(line):
            first = next(iter(grapheme.graphemes(line[st.cursor_col :])))
            st.lines[st.cursor_line] = line[: st.cursor_col] + line[st.cursor_col + len(first) :]
        elif st.cursor_line < len(st.lines) - 1:
            st.lines[st.cursor_line] = line + st.lines.pop(st.cursor_line + 1)
        else:
            return
        self._changed()

    def _delete_word_backward(self) -> None:
        st = self._state
        if st.cursor_col == 0:
            self._backspace()
            return
        line = st.lines[st.cursor_line]
        start = self._word_start(line, st.cursor_col)
        st.lines[st.cursor_line] = line[:start] + line[st.cursor_col :]
        st.cursor_col = start
        self._changed()

    @staticmethod
    def _word_start(line: str, col: int) -> int:
        i = col
        while i > 0 and line[i - 1] == " ":
            i -= 1
        while i > 0 and line[i - 1] != " ":
            i -= 1
        return i

    # ------------------------------------------------------------------
    # Cursor movement
    # ------------------------------------------------------------------

    def _horizontal(self, delta: int) -> None:
        st = self._state
        line = st.lines[st.cursor_line]
        if delta < 0:
            if st.cursor_col > 0:
                last = list(grapheme.graphemes(line[: st.cursor_col]))[-1]
                st.cursor_col -= len(last)
            elif st.cursor_line > 0:
                st.cursor_line -= 1
                st.cursor_col = len(st.lines[st.cursor_line])
        else:
            if st.cursor_col < len(line):
                st.cursor_col += len(next(iter(grapheme.graphemes(line[st.cursor_col :]))))
            elif st.cursor_line < len(st.lines) - 1:
                st.cursor_line += 1
                st.cursor_col = 0

    def _word_left(self) -> None:
        st = self._state
        if st.cursor_col == 0:
            self._horizontal(-1)
            return
        st.cursor_col = self._word_start(st.lines[st.cursor_line], st.cursor_col)

    def _word_right(self) -> None:
        st = self._state
        line = st.lines[st.cursor_line]
        if st.cursor_col >= len(line):
            self._horizontal(1)
            return
        i = st.cursor_col
        while i < len(line) and line[i] == " ":
            i += 1
        while i < len(line) and line[i] != " ":
            i += 1
        st.cursor_col = i

    def _visual_lines(self) -> list[_VisualLine]:
        out: list[_VisualLine] = []
        for index, line in enumerate(self._state.lines):
            out.extend(_VisualLine(index, a, b) for a, b in word_wrap_line(line, self._wrap_width))
        return out

    def _cursor_visual_index(self, visual: list[_VisualLine]) -> int:
        st = self._state
        found = 0
        for i, vl in enumerate(visual):
            if vl.line == st.cursor_line and vl.start <= st.cursor_col:
                found = i
        return found

    def _vertical(self, delta: int) -> None:
        visual = self._visual_lines()
        current = self._cursor_visual_index(visual)
        target = current + delta
        if target < 0 or target >= len(visual):
            # Past the first or last row: browse history instead.
            self._browse_history(-delta)
            return
        st = self._state
        offset = st.cursor_col - visual[current].start
        dest = visual[target]
        st.cursor_line = dest.line
        st.cursor_col = min(dest.start + offset, dest.end)

    def _browse_history(self, direction: int) -> None:
        if not self._history:
            return
        index = self._history_index + direction
        if index < -1 or index >= len(self._history):
            return
        if self._history_index == -1:
            self._draft = self.get_text()
        self._history_index = index
        text = self._draft if index == -1 else self._history[index]
        lines = text.split("\n")
        self._state = EditorState(lines, len(lines) - 1, len(lines[-1]))
        self._changed()

    # ------------------------------------------------------------------
    # Autocomplete
    # ------------------------------------------------------------------

    def _refresh_suggestions(self, *, explicit: bool) -> None:
        if self._provider is None:
            return
        st = self._state
        suggestions = self._provider.get_suggestions(st.lines, st.cursor_line, st.cursor_col)
        if suggestions is None and explicit:
            force = getattr(self._provider, "get_force_file_suggestions", None)
            if callable(force):
                suggestions = force(st.lines, st.cursor_line, st.cursor_col)
        if suggestions is None or not suggestions.items:
            self._close_suggestions()
            return
        if explicit and len(suggestions.items) == 1:
            self._suggestions = suggestions
            self._suggestion_list = SelectList(suggestions.items, self._autocomplete_max_visible, self._theme.select_list)
            self._accept_suggestion()
            return
        self._suggestions = suggestions
        self._suggestion_list = SelectList(suggestions.items, self._autocomplete_max_visible, self._theme.select_list)

    def _accept_suggestion(self) -> None:
        assert self._suggestion_list is not None and self._suggestions is not None
        item = self._suggestion_list.get_selected_item()
        prefix = self._suggestions.prefix
        self._close_suggestions()
        if item is None or self._provider is None:
            return
        st = self._state
        result = self._provider.apply_completion(st.lines, st.cursor_line, st.cursor_col, item, prefix)
        self._state = EditorState(result.lines, result.cursor_line, result.cursor_col)
        self._changed()

    def _close_suggestions(self) -> None:
        self._suggestions = None
        self._suggestion_list = None

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self, width: int) -> list[str]:
        pad = min(self._padding_x, max(0, (width - 1) // 2))
        content_width = max(1, width - 2 * pad)
        # One column is kept free for the cursor or a hanging space.
        self._wrap_width = max(1, content_width - 1)
        border = self._theme.border_color

        visual = self._visual_lines()
        cursor_index = self._cursor_visual_index(visual)
        max_rows = max(5, self._tui.terminal.rows * 3 // 10)
        if cursor_index < self._scroll:
            self._scroll = cursor_index
        elif cursor_index >= self._scroll + max_rows:
            self._scroll = cursor_index - max_rows + 1
        self._scroll = max(0, min(self._scroll, len(visual) - max_rows))
        shown = visual[self._scroll : self._scroll + max_rows]

        def rule(label: str) -> str:
            if not label:
                return border("─" * width)
            text = f"─── {label} "
            return border(text + "─" * max(0, width - visible_width(text)))

        lines = [rule(f"↑ {self._scroll} more" if self._scroll else "")]
        margin = " " * pad
        st = self._state
        for i, vl in enumerate(shown, start=self._scroll):
            text = self._state.lines[vl.line][vl.start : vl.end]
            if i == cursor_index:
                col = st.cursor_col - vl.start
                before, after = text[:col], text[col:]
                marker = CURSOR_MARKER if self.focused and self._suggestion_list is None else ""
                if after:
                    first = next(iter(grapheme.graphemes(after)))
                    text = before + marker + style.inverse(first) + after[len(first) :]
                else:
                    text = before + marker + style.inverse(" ")
            gap = max(0, content_width - visible_width(text))
            lines.append(margin + text + " " * gap + margin)
        below = len(visual) - (self._scroll + len(shown))
        lines.append(rule(f"↓ {below} more" if below > 0 else ""))

        if self._suggestion_list is not None:
            for row in self._suggestion_list.render(content_width):
                lines.append(margin + row)
        return lines

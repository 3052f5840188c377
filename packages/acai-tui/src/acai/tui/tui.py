"""Retained-mode terminal UI with differential rendering.

``Container`` composes components; ``TUI`` is the root container. It owns
the terminal, turns the tree into a frame of lines, paints only the lines
that changed since the previous frame, and routes decoded input to global
chords, the open modal, or the focused component, in that order.

Children added after :meth:`TUI.set_fixed_footer_start` form the fixed
footer: they are always painted at the bottom of the viewport while the
children above them scroll.
"""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Literal, Protocol, runtime_checkable

from acai.tui.keys import KeyEvent, decode_key
from acai.tui.utils import visible_width

if TYPE_CHECKING:
    from acai.tui.components.modal import Modal
    from acai.tui.terminal import Terminal

logger = logging.getLogger(__name__)

CURSOR_MARKER = "\x1b_acai:c\x07"

WHEEL_STEP = 3

InputState = Literal["normal", "modal-captured"]


# ---------------------------------------------------------------------------
# Protocols
# ---------------------------------------------------------------------------


class Component(Protocol):
    """Anything that can draw itself as lines.

    ``handle_input``, ``invalidate`` and ``wants_navigation_keys`` are
    optional and looked up with ``getattr`` at the call site.
    """

    def render(self, width: int) -> list[str]: ...


@runtime_checkable
class Focusable(Protocol):
    focused: bool


def _call_optional(component: object, name: str, *args: object) -> object:
    method = getattr(component, name, None)
    if callable(method):
        return method(*args)
    return None


# ---------------------------------------------------------------------------
# Container
# ---------------------------------------------------------------------------


class Container:
    """Ordered children rendered top to bottom."""

    def __init__(self) -> None:
        self._children: list[Component] = []

    @property
    def children(self) -> tuple[Component, ...]:
        return tuple(self._children)

    def add_child(self, component: Component) -> None:
        self._children.append(component)

    def remove_child(self, component: Component) -> None:
        if component in self._children:
            self._children.remove(component)

    def clear(self) -> None:
        self._children.clear()

    def invalidate(self) -> None:
        for child in self._children:
            _call_optional(child, "invalidate")

    def render(self, width: int) -> list[str]:
        lines: list[str] = []
        for child in self._children:
            lines.extend(child.render(width))
        return lines


# ---------------------------------------------------------------------------
# TUI
# ---------------------------------------------------------------------------


@dataclass
class _Chord:
    key: str
    handler: Callable[[], None]
    when: Callable[[], bool] | None = None


class TUI(Container):
    def __init__(self, terminal: Terminal, show_hardware_cursor: bool | None = None) -> None:
        super().__init__()
        self.terminal = terminal

        # Previous frame.
        self._previous_lines: list[str] = []
        self._previous_width = 0
        self._previous_height = 0
        self._cursor_row = 0
        self._full_redraw_count = 0
        self._force_full = False

        # Scheduling.
        self._render_requested = False
        self._is_rendering = False
        self._render_again = False
        self._stopped = True

        # Layout.
        self._fixed_footer_start: int | None = None
        self._scroll_offset = 0
        self._max_scroll = 0
        self._stick_to_bottom = True

        # Focus and input.
        self._focused: Component | None = None
        self._modal: Modal | None = None
        self._modal_pre_focus: Component | None = None
        self._chords: list[_Chord] = []
        self._input_listeners: list[Callable[[KeyEvent], None]] = []
        self.on_error: Callable[[Exception], None] | None = None

        self._show_hardware_cursor = (
            show_hardware_cursor
            if show_hardware_cursor is not None
            else os.environ.get("ACAI_HARDWARE_CURSOR") == "1"
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def full_redraws(self) -> int:
        return self._full_redraw_count

    @property
    def previous_lines(self) -> list[str]:
        return list(self._previous_lines)

    @property
    def focused(self) -> Component | None:
        return self._focused

    @property
    def modal(self) -> Modal | None:
        return self._modal

    @property
    def input_state(self) -> InputState:
        return "modal-captured" if self._modal is not None else "normal"

    @property
    def scroll_offset(self) -> int:
        return self._scroll_offset

    @property
    def is_scrolled_up(self) -> bool:
        return not self._stick_to_bottom

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        self._stopped = False
        self.terminal.start(self.handle_input, self._on_resize)
        self.terminal.hide_cursor()
        self.request_render()

    def stop(self) -> None:
        if self._stopped:
            return
        self._stopped = True
        lines_below = len(self._previous_lines) - self._cursor_row - 1
        if lines_below > 0:
            self.terminal.write(f"\x1b[{lines_below}B")
        self.terminal.write("\r\n")
        self.terminal.show_cursor()
        self.terminal.stop()

    def _on_resize(self) -> None:
        self._force_full = True
        self.request_render()

    def force_full_redraw(self) -> None:
        self._force_full = True
        self.request_render()

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def set_fixed_footer_start(self) -> None:
        """Pin every child added after this call to the bottom of the viewport."""
        self._fixed_footer_start = len(self._children)

    def scroll_up(self, lines: int = WHEEL_STEP) -> None:
        if self._max_scroll == 0:
            return
        current = self._max_scroll if self._stick_to_bottom else self._scroll_offset
        self._scroll_offset = max(0, current - lines)
        self._stick_to_bottom = False
        self.request_render()

    def scroll_down(self, lines: int = WHEEL_STEP) -> None:
        if self._stick_to_bottom:
            return
        self._scroll_offset += lines
        if self._scroll_offset >= self._max_scroll:
            self._stick_to_bottom = True
        self.request_render()

    def scroll_to_bottom(self) -> None:
        if not self._stick_to_bottom:
            self._stick_to_bottom = True
            self.request_render()

    # ------------------------------------------------------------------
    # Focus and modal slot
    # ------------------------------------------------------------------

    def set_focus(self, component: Component | None) -> None:
        if self._focused is component:
            return
        if isinstance(self._focused, Focusable):
            self._focused.focused = False
        self._focused = component
        if isinstance(component, Focusable):
            component.focused = True

    def show_modal(self, modal: Modal) -> None:
        """Give *modal* exclusive input until it is dismissed.

        There is a single modal slot. Showing a modal while another is open
        closes the old one first; focus still returns to whatever was
        focused before the first modal opened.
        """
        if self._modal is modal:
            return
        if self._modal is not None:
            replaced = self._modal
            self._modal = None
            logger.debug("modal %r replaced by %r", replaced.title, modal.title)
            replaced.notify_closed()
        else:
            self._modal_pre_focus = self._focused
        self._modal = modal
        modal.attach(self)
        self.set_focus(modal)
        logger.debug("modal %r opened", modal.title)
        self.request_render()

    def hide_modal(self) -> None:
        if self._modal is None:
            return
        modal = self._modal
        self._modal = None
        self.set_focus(self._modal_pre_focus)
        self._modal_pre_focus = None
        logger.debug("modal %r closed", modal.title)
        modal.notify_closed()
        self.request_render()

    # ------------------------------------------------------------------
    # Input routing
    # ------------------------------------------------------------------

    def bind_chord(
        self,
        key: str,
        handler: Callable[[], None],
        *,
        when: Callable[[], bool] | None = None,
    ) -> None:
        """Register a global chord checked before the modal and focused widget."""
        self._chords.append(_Chord(key, handler, when))

    def add_input_listener(self, listener: Callable[[KeyEvent], None]) -> None:
        """Observe every decoded event before it is routed."""
        self._input_listeners.append(listener)

    def focused_wants_navigation_keys(self) -> bool:
        return bool(_call_optional(self._focused, "wants_navigation_keys"))

    def handle_input(self, data: str) -> None:
        if self._stopped:
            return
        event = decode_key(data)
        for listener in self._input_listeners:
            listener(event)

        if event.kind == "mouse":
            self._handle_mouse(event)
            return

        if event.kind == "key" and event.name is not None:
            for chord in self._chords:
                if chord.key == event.name and (chord.when is None or chord.when()):
                    self._run_chord(chord)
                    return

        if self._modal is not None:
            if event.name == "escape" and self._modal.dismissible:
                self.hide_modal()
            else:
                self._modal.handle_input(data)
                self.request_render()
            return

        if self._focused is not None and callable(getattr(self._focused, "handle_input", None)):
            self._focused.handle_input(data)  # type: ignore[attr-defined]
            self._stick_to_bottom = True
            self.request_render()

    def _run_chord(self, chord: _Chord) -> None:
        try:
            chord.handler()
        except Exception as exc:
            logger.exception("handler for %s failed", chord.key)
            if self.on_error is None:
                raise
            self.on_error(exc)
        self.request_render()

    def _handle_mouse(self, event: KeyEvent) -> None:
        if event.name is None:
            return
        step = -WHEEL_STEP if event.name == "wheelUp" else WHEEL_STEP
        if self._modal is not None:
            self._modal.scroll_by(step)
            self.request_render()
        elif step < 0:
            self.scroll_up(-step)
        else:
            self.scroll_down(step)

    # ------------------------------------------------------------------
    # Render scheduling
    # ------------------------------------------------------------------

    def request_render(self) -> None:
        """Schedule one repaint; repeated calls before it runs are merged."""
        if self._stopped:
            return
        if self._is_rendering:
            self._render_again = True
            return
        if self._render_requested:
            return
        self._render_requested = True
        try:
            asyncio.get_running_loop().call_soon(self._render_tick)
        except RuntimeError:
            self._render_tick()

    def _render_tick(self) -> None:
        self._render_requested = False
        if self._stopped:
            return
        self.do_render()

    # ------------------------------------------------------------------
    # Frame composition
    # ------------------------------------------------------------------

    def compose(self, width: int, height: int) -> list[str]:
        """Lines of the next frame for a *width* x *height* viewport."""
        if self._modal is not None:
            self._modal.viewport_rows = height
            return self._modal.render(width)

        split = len(self._children) if self._fixed_footer_start is None else self._fixed_footer_start
        body: list[str] = []
        for child in self._children[:split]:
            body.extend(child.render(width))
        if self._fixed_footer_start is None:
            return body[-height:] if len(body) > height else body

        footer: list[str] = []
        for child in self._children[split:]:
            footer.extend(child.render(width))
        if len(footer) > height:
            footer = footer[-height:]

        viewport = max(0, height - len(footer))
        self._max_scroll = max(0, len(body) - viewport)
        if self._stick_to_bottom:
            self._scroll_offset = self._max_scroll
        else:
            self._scroll_offset = min(self._scroll_offset, self._max_scroll)
            if self._scroll_offset == self._max_scroll:
                self._stick_to_bottom = True
        visible = body[self._scroll_offset : self._scroll_offset + viewport]
        return visible + footer

    @staticmethod
    def _extract_cursor(lines: list[str]) -> tuple[list[str], tuple[int, int] | None]:
        for row, line in enumerate(lines):
            at = line.find(CURSOR_MARKER)
            if at != -1:
                cleaned = list(lines)
                cleaned[row] = line[:at] + line[at + len(CURSOR_MARKER) :]
                return cleaned, (row, visible_width(line[:at]))
        return lines, None

    # ------------------------------------------------------------------
    # Painting
    # ------------------------------------------------------------------

    def do_render(self) -> None:
        """Paint the next frame, writing only what changed."""
        if self._is_rendering:
            self._render_again = True
            return
        self._is_rendering = True
        try:
            self._paint()
            # One extra pass for requests made while painting.
            if self._render_again:
                self._render_again = False
                self._paint()
        finally:
            self._is_rendering = False
            self._render_again = False

    def _paint(self) -> None:
        width = self.terminal.columns
        height = self.terminal.rows
        if width <= 0 or height <= 0:
            return

        full = self._force_full or width != self._previous_width or height != self._previous_height
        if width != self._previous_width and self._previous_width:
            # Cached wrapping is width-specific.
            self.invalidate()

        lines, cursor = self._extract_cursor(self.compose(width, height))
        cursor_row = cursor[0] if cursor else max(0, len(lines) - 1)
        cursor_col = cursor[1] if cursor else 0

        if not full and lines == self._previous_lines and cursor_row == self._cursor_row:
            return

        out: list[str] = []
        if self._cursor_row > 0:
            out.append(f"\x1b[{self._cursor_row}A")
        out.append("\r")

        old = self._previous_lines
        if full:
            self._full_redraw_count += 1
            out.append("\x1b[J")
            out.append("\n".join(line + "\x1b[K" for line in lines))
            last_row = max(0, len(lines) - 1)
        else:
            total = max(len(lines), len(old))
            for i in range(total):
                if i > 0:
                    out.append("\n")
                if i >= len(lines):
                    out.append("\r\x1b[K")
                elif i >= len(old) or lines[i] != old[i]:
                    out.append("\r" + lines[i] + "\x1b[K")
            last_row = max(0, total - 1)

        delta = last_row - cursor_row
        if delta > 0:
            out.append(f"\x1b[{delta}A")
        elif delta < 0:
            out.append(f"\x1b[{-delta}B")
        out.append("\r")
        if cursor_col > 0:
            out.append(f"\x1b[{cursor_col}C")
        if self._show_hardware_cursor:
            out.append("\x1b[?25h" if cursor else "\x1b[?25l")

        self._previous_lines = lines
        self._previous_width = width
        self._previous_height = height
        self._cursor_row = cursor_row
        self._force_full = False
        if full:
            logger.debug("full redraw %d at %dx%d", self._full_redraw_count, width, height)
        self.terminal.write("".join(out))

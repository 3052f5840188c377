"""Terminal I/O adapter.

``Terminal`` is the whole boundary between the UI engine and the operating
terminal. ``ProcessTerminal`` implements it over ``sys.stdin``/``sys.stdout``:
raw mode through :mod:`tty`/:mod:`termios`, bracketed paste, the kitty
keyboard protocol, SGR mouse wheel reporting and SIGWINCH resize events.

Raw mode is a resource: ``start``/``stop`` acquire and release it for the
session, ``enter_external_mode``/``exit_external_mode`` release and
re-acquire it around a subprocess that needs the real terminal.
"""

from __future__ import annotations

import asyncio
import codecs
import logging
import os
import re
import signal
import sys
import termios
import tty
from typing import Callable, Protocol

from acai.tui.keys import PASTE_END, PASTE_START, set_kitty_protocol_active
from acai.tui.stdin_buffer import StdinBuffer

logger = logging.getLogger(__name__)

_PASTE_ON = "\x1b[?2004h"
_PASTE_OFF = "\x1b[?2004l"
_KITTY_QUERY = "\x1b[?u"
_KITTY_ON = "\x1b[>1u"
_KITTY_OFF = "\x1b[<u"
# Wheel reports only (1000) in SGR encoding (1006).
_MOUSE_ON = "\x1b[?1000h\x1b[?1006h"
_MOUSE_OFF = "\x1b[?1000l\x1b[?1006l"
_HIDE_CURSOR = "\x1b[?25l"
_SHOW_CURSOR = "\x1b[?25h"

_KITTY_REPLY_RE = re.compile(r"^\x1b\[\?(\d+)u$")


class Terminal(Protocol):
    """Operations the renderer and input router need from a terminal."""

    def start(self, on_input: Callable[[str], None], on_resize: Callable[[], None]) -> None: ...

    def stop(self) -> None: ...

    def write(self, data: str) -> None: ...

    @property
    def columns(self) -> int: ...

    @property
    def rows(self) -> int: ...

    @property
    def paste_in_progress(self) -> bool: ...

    def move_by(self, lines: int) -> None: ...

    def hide_cursor(self) -> None: ...

    def show_cursor(self) -> None: ...

    def clear_line(self) -> None: ...

    def clear_from_cursor(self) -> None: ...

    def clear_screen(self) -> None: ...

    def set_title(self, title: str) -> None: ...

    def enter_external_mode(self) -> None: ...

    def exit_external_mode(self) -> None: ...

    def background(self) -> None: ...


class ProcessTerminal:
    def __init__(self, *, enable_mouse: bool = True) -> None:
        self._on_input: Callable[[str], None] | None = None
        self._on_resize: Callable[[], None] | None = None
        self._saved_attrs: list | None = None
        self._prev_winch: object = None
        self._buffer: StdinBuffer | None = None
        self._reading = False
        self._external = False
        self._kitty_active = False
        self._enable_mouse = enable_mouse
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    @staticmethod
    def is_interactive() -> bool:
        """True when both stdin and stdout are attached to a TTY."""
        try:
            return os.isatty(sys.stdin.fileno()) and os.isatty(sys.stdout.fileno())
        except (ValueError, OSError):
            return False

    @property
    def columns(self) -> int:
        try:
            return os.get_terminal_size(sys.stdout.fileno()).columns
        except (ValueError, OSError):
            return 80

    @property
    def rows(self) -> int:
        try:
            return os.get_terminal_size(sys.stdout.fileno()).lines
        except (ValueError, OSError):
            return 24

    @property
    def paste_in_progress(self) -> bool:
        return self._buffer is not None and self._buffer.in_paste

    # -- lifecycle ----------------------------------------------------------

    def start(self, on_input: Callable[[str], None], on_resize: Callable[[], None]) -> None:
        self._on_input = on_input
        self._on_resize = on_resize
        self._buffer = StdinBuffer(self._dispatch, self._dispatch_paste)
        self._decoder.reset()

        fd = sys.stdin.fileno()
        self._saved_attrs = termios.tcgetattr(fd)
        tty.setraw(fd)
        self._prev_winch = signal.getsignal(signal.SIGWINCH)
        signal.signal(signal.SIGWINCH, self._handle_winch)

        self._write_modes(enable=True)
        self._attach_reader()
        self._raw_write(_KITTY_QUERY)

    def stop(self) -> None:
        self._write_modes(enable=False)
        self._raw_write(_SHOW_CURSOR)
        self._detach_reader()
        if self._buffer is not None:
            self._buffer.clear()
            self._buffer = None
        self._decoder.reset()
        if self._prev_winch is not None:
            signal.signal(signal.SIGWINCH, self._prev_winch)
            self._prev_winch = None
        self._restore_attrs()
        self._on_input = None
        self._on_resize = None

    def enter_external_mode(self) -> None:
        """Hand the terminal to a child process in cooked mode."""
        if self._external:
            return
        self._external = True
        self._detach_reader()
        self._write_modes(enable=False)
        self._raw_write("\x1b[0m" + _SHOW_CURSOR)
        if self._saved_attrs is not None:
            termios.tcsetattr(sys.stdin.fileno(), termios.TCSADRAIN, self._saved_attrs)

    def exit_external_mode(self) -> None:
        """Take the terminal back after a child process returns."""
        if not self._external:
            return
        self._external = False
        if self._saved_attrs is not None:
            tty.setraw(sys.stdin.fileno())
        self._write_modes(enable=True)
        self._raw_write(_HIDE_CURSOR)
        self._attach_reader()
        # Whatever the child drew is now on screen; have the owner repaint.
        if self._on_resize is not None:
            self._on_resize()

    def background(self) -> None:
        """Suspend the process like a shell job (Ctrl-Z) and resume on SIGCONT."""
        self.enter_external_mode()
        try:
            os.kill(os.getpid(), signal.SIGSTOP)
        finally:
            self.exit_external_mode()

    # -- output -------------------------------------------------------------

    def write(self, data: str) -> None:
        self._raw_write(data)

    def move_by(self, lines: int) -> None:
        if lines < 0:
            self._raw_write(f"\x1b[{-lines}A")
        elif lines > 0:
            self._raw_write(f"\x1b[{lines}B")

    def hide_cursor(self) -> None:
        self._raw_write(_HIDE_CURSOR)

    def show_cursor(self) -> None:
        self._raw_write(_SHOW_CURSOR)

    def clear_line(self) -> None:
        self._raw_write("\x1b[2K\r")

    def clear_from_cursor(self) -> None:
        self._raw_write("\x1b[J")

    def clear_screen(self) -> None:
        self._raw_write("\x1b[2J\x1b[H")

    def set_title(self, title: str) -> None:
        self._raw_write(f"\x1b]0;{title}\x07")

    # -- internals ----------------------------------------------------------

    def _write_modes(self, *, enable: bool) -> None:
        if enable:
            self._raw_write(_PASTE_ON + (_MOUSE_ON if self._enable_mouse else ""))
            if self._kitty_active:
                self._raw_write(_KITTY_ON)
        else:
            self._raw_write(_PASTE_OFF + (_MOUSE_OFF if self._enable_mouse else ""))
            if self._kitty_active:
                self._raw_write(_KITTY_OFF)

    def _dispatch(self, data: str) -> None:
        if _KITTY_REPLY_RE.match(data):
            if not self._kitty_active:
                logger.debug("kitty keyboard protocol detected")
                self._kitty_active = True
                set_kitty_protocol_active(True)
                self._raw_write(_KITTY_ON)
            return
        if self._on_input is not None:
            self._on_input(data)

    def _dispatch_paste(self, text: str) -> None:
        if self._on_input is not None:
            self._on_input(PASTE_START + text + PASTE_END)

    def _attach_reader(self) -> None:
        if self._reading:
            return
        try:
            asyncio.get_running_loop().add_reader(sys.stdin.fileno(), self._read_stdin)
        except RuntimeError:
            logger.warning("no running event loop; stdin is not being read")
            return
        self._reading = True

    def _detach_reader(self) -> None:
        if not self._reading:
            return
        try:
            asyncio.get_running_loop().remove_reader(sys.stdin.fileno())
        except RuntimeError:
            pass
        self._reading = False

    def _read_stdin(self) -> None:
        try:
            raw = os.read(sys.stdin.fileno(), 4096)
        except OSError:
            return
        if not raw or self._buffer is None:
            return
        # A multi-byte character may be split across reads.
        text = self._decoder.decode(raw)
        if text:
            self._buffer.feed(text)

    def _handle_winch(self, signum: int, frame: object) -> None:
        if self._on_resize is not None:
            self._on_resize()

    def _restore_attrs(self) -> None:
        if self._saved_attrs is None:
            return
        termios.tcsetattr(sys.stdin.fileno(), termios.TCSADRAIN, self._saved_attrs)
        self._saved_attrs = None
        if self._kitty_active:
            self._kitty_active = False
            set_kitty_protocol_active(False)

    def _raw_write(self, data: str) -> None:
        try:
            sys.stdout.write(data)
            sys.stdout.flush()
        except OSError:
            pass

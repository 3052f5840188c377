"""Split raw stdin chunks into single key sequences and paste payloads.

Terminals deliver input in arbitrary chunks: one read may hold several
keys, or half of an escape sequence. ``StdinBuffer`` accumulates bytes,
emits each complete sequence through ``on_data`` and each bracketed paste
through ``on_paste``. A lone trailing ESC (or any unterminated sequence)
is flushed after a short timeout so a bare Escape key still arrives.
"""

from __future__ import annotations

import asyncio
from typing import Callable

from acai.tui.keys import PASTE_END, PASTE_START

ESC = "\x1b"


def _sequence_length(buf: str) -> int:
    """Length of the complete sequence at the start of *buf*, or 0 if partial."""
    if not buf.startswith(ESC):
        return 1
    if len(buf) == 1:
        return 0
    kind = buf[1]
    if kind == "[":
        if buf.startswith("\x1b[M"):
            # X10 mouse: ESC [ M b x y
            return 6 if len(buf) >= 6 else 0
        for i in range(2, len(buf)):
            if 0x40 <= ord(buf[i]) <= 0x7E:
                return i + 1
        return 0
    if kind in "]P_":
        # OSC/DCS/APC end with BEL or ST
        for i in range(2, len(buf)):
            if buf[i] == "\x07":
                return i + 1
            if buf[i] == ESC and i + 1 < len(buf) and buf[i + 1] == "\\":
                return i + 2
        return 0
    if kind == "O":
        return 3 if len(buf) >= 3 else 0
    if kind == ESC:
        # ESC ESC <seq> is alt+<seq>; a doubled ESC alone is alt+escape
        rest = _sequence_length(buf[1:])
        return rest + 1 if rest else 0
    return 2


def split_sequences(buf: str) -> tuple[list[str], str]:
    """Split *buf* into complete sequences and an incomplete remainder."""
    out: list[str] = []
    pos = 0
    while pos < len(buf):
        n = _sequence_length(buf[pos:])
        if n == 0:
            return out, buf[pos:]
        out.append(buf[pos : pos + n])
        pos += n
    return out, ""


class StdinBuffer:
    def __init__(
        self,
        on_data: Callable[[str], None],
        on_paste: Callable[[str], None],
        *,
        timeout: float = 0.01,
    ) -> None:
        self._on_data = on_data
        self._on_paste = on_paste
        self._timeout = timeout
        self._pending = ""
        self._paste: str | None = None
        self._flush_handle: asyncio.TimerHandle | None = None

    @property
    def in_paste(self) -> bool:
        return self._paste is not None

    @property
    def pending(self) -> str:
        return self._pending

    def feed(self, chunk: str) -> None:
        self._cancel_flush()
        data = self._pending + chunk
        self._pending = ""

        while data:
            if self._paste is not None:
                end = data.find(PASTE_END)
                if end == -1:
                    self._paste += data
                    return
                payload = self._paste + data[:end]
                self._paste = None
                data = data[end + len(PASTE_END) :]
                self._on_paste(payload)
                continue

            start = data.find(PASTE_START)
            head = data if start == -1 else data[:start]
            sequences, rest = split_sequences(head)
            for seq in sequences:
                self._on_data(seq)
            if start == -1:
                self._pending = rest
                break
            # An unterminated sequence right before a paste is emitted as-is.
            if rest:
                self._on_data(rest)
            self._paste = ""
            data = data[start + len(PASTE_START) :]

        if self._pending:
            self._schedule_flush()

    def flush(self) -> None:
        """Emit whatever partial sequence is buffered."""
        self._cancel_flush()
        if self._pending:
            pending, self._pending = self._pending, ""
            self._on_data(pending)

    def clear(self) -> None:
        self._cancel_flush()
        self._pending = ""
        self._paste = None

    def _schedule_flush(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.flush()
            return
        self._flush_handle = loop.call_later(self._timeout, self.flush)

    def _cancel_flush(self) -> None:
        if self._flush_handle is not None:
            self._flush_handle.cancel()
            self._flush_handle = None

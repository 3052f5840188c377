"""ANSI-aware text measurement, wrapping and truncation.

Every function here treats escape sequences (SGR, OSC 8 hyperlinks and
APC markers) as zero-width and measures the remaining text in terminal
columns using grapheme clusters.
"""

from __future__ import annotations

import re
import unicodedata
from typing import Callable

import grapheme
import wcwidth

RESET = "\x1b[0m"

# SGR/erase CSI, OSC 8 hyperlinks, APC payloads.
_ESCAPE_RE = re.compile(
    r"\x1b\[[0-9;:?]*[A-Za-z~]"
    r"|\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)"
    r"|\x1b_[^\x07\x1b]*(?:\x07|\x1b\\)"
)

_width_cache: dict[str, int] = {}
_WIDTH_CACHE_MAX = 1024


# ---------------------------------------------------------------------------
# Measurement
# ---------------------------------------------------------------------------


def strip_ansi(text: str) -> str:
    return _ESCAPE_RE.sub("", text)


def grapheme_width(cluster: str) -> int:
    """Column width of one grapheme cluster (0, 1 or 2)."""
    if not cluster:
        return 0
    if cluster == "\t":
        return 3
    first = cluster[0]
    if len(cluster) > 1:
        # Emoji presentation, ZWJ sequences, skin tones and flags are wide.
        for ch in cluster:
            cp = ord(ch)
            if cp in (0xFE0F, 0x200D) or 0x1F3FB <= cp <= 0x1F3FF or 0x1F1E6 <= cp <= 0x1F1FF:
                return 2
        if ord(first) >= 0x1F000:
            return 2
        if unicodedata.category(first) in ("Mn", "Me", "Cf"):
            return 0
    cp = ord(first)
    if cp < 0x20 or 0x7F <= cp <= 0x9F:
        return 0
    return max(wcwidth.wcwidth(first), 0)


def visible_width(text: str) -> int:
    """Number of terminal columns *text* occupies once escapes are removed."""
    if not text:
        return 0
    plain = strip_ansi(text)
    if plain.isascii() and plain.isprintable():
        return len(plain)
    cached = _width_cache.get(plain)
    if cached is not None:
        return cached
    width = sum(grapheme_width(g) for g in grapheme.graphemes(plain))
    if len(_width_cache) >= _WIDTH_CACHE_MAX:
        _width_cache.clear()
    _width_cache[plain] = width
    return width


def _tokens(text: str) -> list[tuple[str, int]]:
    """Split *text* into ``(piece, width)`` pairs; escapes have width -1."""
    out: list[tuple[str, int]] = []
    pos = 0
    for match in _ESCAPE_RE.finditer(text):
        if match.start() > pos:
            out.extend((g, grapheme_width(g)) for g in grapheme.graphemes(text[pos : match.start()]))
        out.append((match.group(), -1))
        pos = match.end()
    if pos < len(text):
        out.extend((g, grapheme_width(g)) for g in grapheme.graphemes(text[pos:]))
    return out


# ---------------------------------------------------------------------------
# SGR state
# ---------------------------------------------------------------------------


_SGR_SLOTS = {
    1: "bold", 2: "dim", 3: "italic", 4: "underline",
    5: "blink", 7: "inverse", 8: "hidden", 9: "strike",
}
_SGR_OFF = {
    22: ("bold", "dim"), 23: ("italic",), 24: ("underline",), 25: ("blink",),
    27: ("inverse",), 28: ("hidden",), 29: ("strike",), 39: ("fg",), 49: ("bg",),
}


class SgrState:
    """Active SGR attributes, so a wrapped row can re-open the style it inherits."""

    def __init__(self) -> None:
        self._active: dict[str, str] = {}

    def feed(self, code: str) -> None:
        if not (code.startswith("\x1b[") and code.endswith("m")):
            return
        params = [int(p) if p.isdigit() else 0 for p in code[2:-1].split(";")]
        i = 0
        while i < len(params):
            p = params[i]
            if p == 0:
                self._active.clear()
            elif p in _SGR_SLOTS:
                self._active[_SGR_SLOTS[p]] = f"\x1b[{p}m"
            elif p in _SGR_OFF:
                for slot in _SGR_OFF[p]:
                    self._active.pop(slot, None)
            elif 30 <= p <= 37 or 90 <= p <= 97:
                self._active["fg"] = f"\x1b[{p}m"
            elif 40 <= p <= 47 or 100 <= p <= 107:
                self._active["bg"] = f"\x1b[{p}m"
            elif p in (38, 48) and i + 1 < len(params):
                span = 3 if params[i + 1] == 5 else 5 if params[i + 1] == 2 else 2
                extended = ";".join(str(x) for x in params[i : i + span])
                self._active["fg" if p == 38 else "bg"] = f"\x1b[{extended}m"
                i += span - 1
            i += 1

    @property
    def prefix(self) -> str:
        return "".join(self._active.values())

    def __bool__(self) -> bool:
        return bool(self._active)


# ---------------------------------------------------------------------------
# Wrapping
# ---------------------------------------------------------------------------


def _wrap_rows(tokens: list[tuple[str, int]], width: int) -> list[list[tuple[str, int]]]:
    rows: list[list[tuple[str, int]]] = []
    row: list[tuple[str, int]] = []
    used = 0
    last_space = -1
    for token in tokens:
        piece, w = token
        if w < 0:
            row.append(token)
            continue
        if used + w > width and used > 0:
            if piece == " ":
                rows.append(row)
                row, used, last_space = [], 0, -1
                continue
            if last_space > 0:
                carry = row[last_space + 1 :]
                rows.append(row[:last_space])
                row = carry
                used = sum(t[1] for t in carry if t[1] > 0)
                if used + w > width:
                    rows.append(row)
                    row, used = [], 0
            else:
                rows.append(row)
                row, used = [], 0
            last_space = -1
        if piece == " ":
            if used == 0 and rows:
                continue
            last_space = len(row)
        row.append(token)
        used += w
    rows.append(row)
    return rows


def wrap_text_with_ansi(text: str, width: int) -> list[str]:
    """Word-wrap *text* to *width* columns keeping styles intact.

    Embedded newlines start new rows. Words longer than the width are
    broken mid-word. A style that is open at the end of a row is reset
    there and re-opened at the start of the next row.
    """
    if width <= 0:
        return [text]
    state = SgrState()
    lines: list[str] = []
    for physical in text.split("\n"):
        for row in _wrap_rows(_tokens(physical), width):
            parts = [state.prefix]
            for piece, w in row:
                if w < 0:
                    state.feed(piece)
                parts.append(piece)
            if state:
                parts.append(RESET)
            lines.append("".join(parts))
    return lines


# ---------------------------------------------------------------------------
# Truncation and padding
# ---------------------------------------------------------------------------


def take_columns(text: str, max_cols: int) -> str:
    """Longest prefix of *text* that fits in *max_cols* columns."""
    out: list[str] = []
    cols = 0
    for piece, w in _tokens(text):
        if w > 0 and cols + w > max_cols:
            break
        out.append(piece)
        cols += max(w, 0)
    return "".join(out)


def truncate_to_width(text: str, max_width: int, ellipsis: str = "...", pad: bool = False) -> str:
    if max_width <= 0:
        return ""
    current = visible_width(text)
    if current <= max_width:
        return pad_to_width(text, max_width) if pad else text
    room = max_width - visible_width(ellipsis)
    if room <= 0:
        return take_columns(ellipsis, max_width)
    head = take_columns(text, room)
    if "\x1b[" in head:
        head += RESET
    result = head + ellipsis
    return pad_to_width(result, max_width) if pad else result


def pad_to_width(line: str, width: int) -> str:
    gap = width - visible_width(line)
    return line + " " * gap if gap > 0 else line


def apply_background_to_line(line: str, width: int, bg_fn: Callable[[str], str]) -> str:
    """Pad *line* to *width* and paint the whole row with *bg_fn*."""
    return bg_fn(pad_to_width(line, width))

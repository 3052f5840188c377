"""Decode raw terminal input into key names.

Key names are lower-case strings with modifiers in a fixed order:
``ctrl+shift+alt+<key>``, e.g. ``"ctrl+c"``, ``"shift+tab"``, ``"pageUp"``.

Three encodings are understood: legacy VT sequences, the kitty keyboard
protocol (``CSI codepoint ; modifier u``) and xterm modifyOtherKeys
(``CSI 27 ; modifier ; code ~``). The latter two are the only way to tell
``ctrl+m`` apart from Enter.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

PASTE_START = "\x1b[200~"
PASTE_END = "\x1b[201~"

SHIFT = 1
ALT = 2
CTRL = 4
LOCK_MASK = 64 + 128

_KITTY_CSI_U_RE = re.compile(r"^\x1b\[(\d+)(?::\d*)?(?::\d+)?(?:;(\d+)(?::(\d+))?)?u$")
_MODIFY_OTHER_KEYS_RE = re.compile(r"^\x1b\[27;(\d+);(\d+)~$")
# CSI 1;mod X  and  CSI n;mod ~
_MODIFIED_CSI_RE = re.compile(r"^\x1b\[1;(\d+)(?::\d+)?([A-DHFPQRS])$")
_MODIFIED_TILDE_RE = re.compile(r"^\x1b\[(\d+);(\d+)(?::\d+)?~$")
_MOUSE_SGR_RE = re.compile(r"^\x1b\[<(\d+);(\d+);(\d+)([Mm])$")

_CSI_LETTERS = {
    "A": "up", "B": "down", "C": "right", "D": "left",
    "H": "home", "F": "end", "P": "f1", "Q": "f2", "R": "f3", "S": "f4",
}
_TILDE_NUMBERS = {
    1: "home", 2: "insert", 3: "delete", 4: "end", 5: "pageUp", 6: "pageDown",
    7: "home", 8: "end", 15: "f5", 17: "f6", 18: "f7", 19: "f8",
    20: "f9", 21: "f10", 23: "f11", 24: "f12",
}
_KITTY_CODEPOINTS = {
    9: "tab", 13: "enter", 27: "escape", 32: "space", 127: "backspace",
    57414: "enter",
}

_PLAIN_SEQUENCES = {
    "\x1b": "escape",
    "\r": "enter",
    "\n": "enter",
    "\t": "tab",
    " ": "space",
    "\x7f": "backspace",
    "\x08": "backspace",
    "\x00": "ctrl+space",
    "\x1b[Z": "shift+tab",
    "\x1b[E": "clear",
    "\x1bOA": "up",
    "\x1bOB": "down",
    "\x1bOC": "right",
    "\x1bOD": "left",
    "\x1bOH": "home",
    "\x1bOF": "end",
    "\x1bOP": "f1",
    "\x1bOQ": "f2",
    "\x1bOR": "f3",
    "\x1bOS": "f4",
}

_kitty_protocol_active = False


def set_kitty_protocol_active(active: bool) -> None:
    global _kitty_protocol_active
    _kitty_protocol_active = active


def is_kitty_protocol_active() -> bool:
    return _kitty_protocol_active


def _with_modifiers(mod_field: int, key: str) -> str:
    mod = (mod_field - 1) & ~LOCK_MASK
    prefix = ""
    if mod & CTRL:
        prefix += "ctrl+"
    if mod & SHIFT:
        prefix += "shift+"
    if mod & ALT:
        prefix += "alt+"
    return prefix + key


def _codepoint_key(cp: int) -> str | None:
    if cp in _KITTY_CODEPOINTS:
        return _KITTY_CODEPOINTS[cp]
    if cp > 0 and chr(cp).isprintable():
        return chr(cp).lower()
    return None


def parse_key(data: str) -> str | None:
    """Return the key name for one input sequence, or ``None``."""
    if not data:
        return None

    if data in _PLAIN_SEQUENCES:
        return _PLAIN_SEQUENCES[data]

    m = _KITTY_CSI_U_RE.match(data)
    if m:
        key = _codepoint_key(int(m.group(1)))
        if key is None:
            return None
        return _with_modifiers(int(m.group(2) or 1), key)

    m = _MODIFY_OTHER_KEYS_RE.match(data)
    if m:
        key = _codepoint_key(int(m.group(2)))
        return _with_modifiers(int(m.group(1)), key) if key else None

    m = _MODIFIED_CSI_RE.match(data)
    if m:
        return _with_modifiers(int(m.group(1)), _CSI_LETTERS[m.group(2)])

    m = _MODIFIED_TILDE_RE.match(data)
    if m and int(m.group(1)) in _TILDE_NUMBERS:
        return _with_modifiers(int(m.group(2)), _TILDE_NUMBERS[int(m.group(1))])

    if data.startswith("\x1b[") and len(data) >= 3:
        body = data[2:]
        if body in _CSI_LETTERS:
            return _CSI_LETTERS[body]
        if body.endswith("~") and body[:-1].isdigit():
            return _TILDE_NUMBERS.get(int(body[:-1]))
        return None

    if len(data) == 1:
        code = ord(data)
        if 1 <= code <= 26:
            return "ctrl+" + chr(code + ord("a") - 1)
        if data.isprintable():
            return data
        return None

    # ESC-prefixed printable or control byte: alt+<key>
    if len(data) == 2 and data[0] == "\x1b":
        inner = parse_key(data[1])
        if inner is None:
            return None
        if len(inner) == 1 and inner.isupper():
            return "shift+alt+" + inner.lower()
        if inner.startswith("ctrl+"):
            return "ctrl+alt+" + inner[5:]
        return "alt+" + inner

    return None


def normalize_key_id(key_id: str) -> str:
    """Reorder modifiers of a key id into canonical ``ctrl+shift+alt`` order."""
    parts = key_id.split("+")
    if len(parts) == 1 or key_id == "+":
        return key_id if len(key_id) != 1 else key_id.lower()
    mods = {p.lower() for p in parts[:-1]}
    key = parts[-1]
    prefix = "".join(f"{name}+" for name in ("ctrl", "shift", "alt") if name in mods)
    return prefix + (key.lower() if len(key) == 1 else key)


def matches_key(data: str, key_id: str) -> bool:
    """True when raw *data* is the key named by *key_id*."""
    parsed = parse_key(data)
    if parsed is None:
        return False
    target = normalize_key_id(key_id)
    if target == "esc":
        target = "escape"
    if parsed == target:
        return True
    # A plain space is delivered as "space" but printable as " ".
    return target == " " and parsed == "space"


# ---------------------------------------------------------------------------
# Decoded events
# ---------------------------------------------------------------------------


KeyEventKind = Literal["char", "key", "paste", "mouse"]


@dataclass(frozen=True)
class KeyEvent:
    """One logical input event.

    ``kind`` is ``"char"`` for printable text, ``"key"`` for named keys and
    chords, ``"paste"`` for a bracketed paste payload and ``"mouse"`` for
    SGR mouse reports (``name`` is ``"wheelUp"``/``"wheelDown"`` or ``None``).
    """

    kind: KeyEventKind
    name: str | None
    data: str


def decode_key(data: str) -> KeyEvent:
    if data.startswith(PASTE_START):
        body = data[len(PASTE_START) :]
        if body.endswith(PASTE_END):
            body = body[: -len(PASTE_END)]
        return KeyEvent("paste", None, body)

    mouse = _MOUSE_SGR_RE.match(data)
    if mouse:
        button = int(mouse.group(1))
        name = {64: "wheelUp", 65: "wheelDown"}.get(button)
        return KeyEvent("mouse", name, data)

    name = parse_key(data)
    if name is not None and not data.startswith("\x1b") and (len(name) == 1 or name == "space"):
        return KeyEvent("char", name if name != "space" else " ", data)
    if name is None and data and not data.startswith("\x1b") and data.isprintable():
        return KeyEvent("char", None, data)
    return KeyEvent("key", name, data)

"""Editor and list action bindings.

Widget-level bindings (cursor movement, deletion, list selection) can be
remapped; the application's global chords are fixed and live in the
router, not here.
"""

from __future__ import annotations

from typing import Literal

from acai.tui.keys import matches_key

EditorAction = Literal[
    "cursorUp",
    "cursorDown",
    "cursorLeft",
    "cursorRight",
    "cursorWordLeft",
    "cursorWordRight",
    "cursorLineStart",
    "cursorLineEnd",
    "deleteCharBackward",
    "deleteCharForward",
    "deleteWordBackward",
    "deleteToLineStart",
    "deleteToLineEnd",
    "newLine",
    "submit",
    "tab",
    "selectUp",
    "selectDown",
    "selectPageUp",
    "selectPageDown",
    "selectConfirm",
    "selectCancel",
]

KeyBindingsConfig = dict[EditorAction, str | list[str]]

DEFAULT_KEYBINDINGS: KeyBindingsConfig = {
    "cursorUp": "up",
    "cursorDown": "down",
    "cursorLeft": ["left", "ctrl+b"],
    "cursorRight": ["right", "ctrl+f"],
    "cursorWordLeft": ["alt+left", "ctrl+left", "alt+b"],
    "cursorWordRight": ["alt+right", "ctrl+right", "alt+f"],
    "cursorLineStart": ["home", "ctrl+a"],
    "cursorLineEnd": ["end", "ctrl+e"],
    "deleteCharBackward": "backspace",
    "deleteCharForward": "delete",
    "deleteWordBackward": ["ctrl+w", "alt+backspace"],
    "deleteToLineStart": "ctrl+u",
    "deleteToLineEnd": "ctrl+k",
    "newLine": ["shift+enter", "alt+enter"],
    "submit": "enter",
    "tab": "tab",
    "selectUp": "up",
    "selectDown": "down",
    "selectPageUp": "pageUp",
    "selectPageDown": "pageDown",
    "selectConfirm": "enter",
    "selectCancel": "escape",
}


class KeybindingsManager:
    def __init__(self, config: KeyBindingsConfig | None = None) -> None:
        self._keys: dict[EditorAction, list[str]] = {}
        self.set_config(config or {})

    def set_config(self, config: KeyBindingsConfig) -> None:
        merged = {**DEFAULT_KEYBINDINGS, **config}
        self._keys = {
            action: list(keys) if isinstance(keys, list) else [keys]
            for action, keys in merged.items()
        }

    def matches(self, data: str, action: EditorAction) -> bool:
        return any(matches_key(data, key) for key in self._keys.get(action, ()))

    def get_keys(self, action: EditorAction) -> list[str]:
        return list(self._keys.get(action, ()))


_keybindings: KeybindingsManager | None = None


def get_keybindings() -> KeybindingsManager:
    global _keybindings
    if _keybindings is None:
        _keybindings = KeybindingsManager()
    return _keybindings


def set_keybindings(manager: KeybindingsManager) -> None:
    global _keybindings
    _keybindings = manager

"""acai-tui: terminal UI engine with differential rendering."""

# Components (re-exported from components package)
from acai.tui.components import (
    Box,
    Editor,
    EditorState,
    EditorTheme,
    Loader,
    Markdown,
    MarkdownTheme,
    Modal,
    Notification,
    SelectItem,
    SelectList,
    SelectListTheme,
    Spacer,
    Text,
)

# Autocomplete support
from acai.tui.autocomplete import (
    AutocompleteProvider,
    CombinedAutocompleteProvider,
    SlashCommand,
    fuzzy_score,
)

# Keybindings
from acai.tui.keybindings import (
    DEFAULT_KEYBINDINGS,
    EditorAction,
    KeybindingsManager,
    get_keybindings,
    set_keybindings,
)

# Keyboard input handling
from acai.tui.keys import (
    KeyEvent,
    decode_key,
    is_kitty_protocol_active,
    matches_key,
    parse_key,
    set_kitty_protocol_active,
)

# Input buffering
from acai.tui.stdin_buffer import StdinBuffer

# Terminal interface and implementations
from acai.tui.terminal import ProcessTerminal, Terminal

# Core engine
from acai.tui.tui import CURSOR_MARKER, TUI, Component, Container, Focusable

# Utilities
from acai.tui.utils import truncate_to_width, visible_width, wrap_text_with_ansi

__all__ = [
    "AutocompleteProvider",
    "Box",
    "CURSOR_MARKER",
    "CombinedAutocompleteProvider",
    "Component",
    "Container",
    "DEFAULT_KEYBINDINGS",
    "Editor",
    "EditorAction",
    "EditorState",
    "EditorTheme",
    "Focusable",
    "KeyEvent",
    "KeybindingsManager",
    "Loader",
    "Markdown",
    "MarkdownTheme",
    "Modal",
    "Notification",
    "ProcessTerminal",
    "SelectItem",
    "SelectList",
    "SelectListTheme",
    "SlashCommand",
    "Spacer",
    "StdinBuffer",
    "TUI",
    "Terminal",
    "Text",
    "decode_key",
    "fuzzy_score",
    "get_keybindings",
    "is_kitty_protocol_active",
    "matches_key",
    "parse_key",
    "set_keybindings",
    "set_kitty_protocol_active",
    "truncate_to_width",
    "visible_width",
    "wrap_text_with_ansi",
]

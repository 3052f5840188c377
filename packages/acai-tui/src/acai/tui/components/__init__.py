"""TUI components."""

from acai.tui.components.box import Box
from acai.tui.components.editor import Editor, EditorState, EditorTheme
from acai.tui.components.loader import Loader
from acai.tui.components.markdown import Markdown, MarkdownTheme
from acai.tui.components.modal import Modal
from acai.tui.components.notification import Notification
from acai.tui.components.select_list import SelectItem, SelectList, SelectListTheme
from acai.tui.components.spacer import Spacer
from acai.tui.components.text import Text

__all__ = [
    "Box",
    "Editor",
    "EditorState",
    "EditorTheme",
    "Loader",
    "Markdown",
    "MarkdownTheme",
    "Modal",
    "Notification",
    "SelectItem",
    "SelectList",
    "SelectListTheme",
    "Spacer",
    "Text",
]

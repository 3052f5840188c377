"""The user's prompt, painted on a shaded background."""

from __future__ import annotations

from acai.tui import style
from acai.tui.components import Markdown
from acai.tui.tui import Container

BG = style.bg_rgb(52, 53, 65)


class UserMessage(Container):
    def __init__(self, text: str) -> None:
        super().__init__()
        self.text = text
        self.add_child(Markdown(text, padding_x=1, padding_y=1, custom_bg_fn=BG))

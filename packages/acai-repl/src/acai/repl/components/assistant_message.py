"""Assistant reply, re-rendered as the text streams in."""

from __future__ import annotations

from acai.tui.components import Markdown
from acai.tui.tui import Container


class AssistantMessage(Container):
    def __init__(self, content: str = "") -> None:
        super().__init__()
        self._markdown = Markdown(content.strip(), padding_x=1, padding_y=0)
        self._sealed = False
        self.add_child(self._markdown)

    @property
    def content(self) -> str:
        return self._markdown.text

    @property
    def sealed(self) -> bool:
        return self._sealed

    def update_content(self, content: str) -> None:
        self._markdown.set_text(content.strip())

    def seal(self, content: str | None = None) -> None:
        if content:
            self.update_content(content)
        self._sealed = True

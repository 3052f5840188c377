"""Model reasoning, collapsed to a one-line indicator unless verbose."""

from __future__ import annotations

from typing import TYPE_CHECKING

from acai.tui import style
from acai.tui.components import Loader, Markdown, Text
from acai.tui.tui import Container

if TYPE_CHECKING:
    from acai.tui.tui import TUI

INDICATOR = "thinking…"


class ThinkingBlock(Container):
    def __init__(self, tui: TUI | None, content: str = "", *, verbose: bool = False, sealed: bool = False) -> None:
        super().__init__()
        self._tui = tui
        self._content = content
        self._verbose = verbose
        self._sealed = sealed
        self._loader: Loader | None = None
        self._rebuild()

    @property
    def content(self) -> str:
        return self._content

    @property
    def sealed(self) -> bool:
        return self._sealed

    @property
    def verbose(self) -> bool:
        return self._verbose

    def update_content(self, content: str) -> None:
        self._content = content
        self._rebuild()

    def end_thinking(self, content: str | None = None) -> None:
        if content:
            self._content = content
        self._sealed = True
        self._rebuild()

    def set_verbose_mode(self, verbose: bool) -> None:
        if verbose != self._verbose:
            self._verbose = verbose
            self._rebuild()

    def stop(self) -> None:
        if self._loader is not None:
            self._loader.stop()
            self._loader = None

    def _rebuild(self) -> None:
        self.clear()
        if self._verbose:
            self.stop()
            if self._content.strip():
                self.add_child(Markdown(self._content.strip(), padding_x=1, text_style=style.dim))
            return
        if self._sealed:
            self.stop()
            hint = INDICATOR if not self._content.strip() else f"{INDICATOR} (ctrl+o to expand)"
            self.add_child(Text(style.dim(style.italic(hint)), 1, 0))
            return
        if self._loader is None:
            self._loader = Loader(self._tui, INDICATOR, spinner_color_fn=style.magenta)
        self.add_child(self._loader)

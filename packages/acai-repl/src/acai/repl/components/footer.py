"""Status footer: working directory, model, mode and token usage."""

from __future__ import annotations

import os
from dataclasses import dataclass

from acai.tui import style
from acai.tui.utils import truncate_to_width, visible_width


def format_tokens(count: int) -> str:
    if count < 1000:
        return str(count)
    if count < 10000:
        return f"{count / 1000:.1f}k"
    return f"{round(count / 1000)}k"


def shorten_home(path: str) -> str:
    home = os.path.expanduser("~")
    if home and home != "~" and (path == home or path.startswith(home + os.sep)):
        return "~" + path[len(home) :]
    return path


@dataclass
class FooterState:
    cwd: str
    model: str = ""
    mode: str = "Normal"
    input_tokens: int = 0
    output_tokens: int = 0


class Footer:
    def __init__(self, cwd: str, model: str = "", mode: str = "Normal") -> None:
        self._initial = FooterState(cwd, model, mode)
        self.state = FooterState(cwd, model, mode)

    def set_model(self, model: str) -> None:
        self.state.model = model

    def set_mode(self, mode: str) -> None:
        self.state.mode = mode

    def set_usage(self, input_tokens: int, output_tokens: int) -> None:
        self.state.input_tokens = input_tokens
        self.state.output_tokens = output_tokens

    def reset(self) -> None:
        """Back to the state given at construction, keeping the current model."""
        self.state = FooterState(self._initial.cwd, self.state.model, self._initial.mode)

    def render(self, width: int) -> list[str]:
        state = self.state
        pwd = truncate_to_width(shorten_home(state.cwd), width)

        left = f"↑{format_tokens(state.input_tokens)} ↓{format_tokens(state.output_tokens)}  {state.mode}"
        right = state.model
        gap = width - visible_width(left) - visible_width(right)
        if right and gap >= 2:
            stats = left + " " * gap + right
        else:
            stats = truncate_to_width(left, width)
        return [style.gray(pwd), style.gray(stats)]

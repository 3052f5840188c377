"""Start-up banner."""

from __future__ import annotations

from acai.tui import style
from acai.tui.components import Box, Text

LOGO = """\
   █████╗  ██████╗ █████╗ ██╗
  ██╔══██╗██╔════╝██╔══██╗██║
  ███████║██║     ███████║██║
  ██╔══██║██║     ██╔══██║██║
  ██║  ██║╚██████╗██║  ██║██║
  ╚═╝  ╚═╝ ╚═════╝╚═╝  ╚═╝╚═╝"""

TIPS = (
    "Type `/help` to see available commands.",
    f"You can ask {style.magenta('acai')} to explain code, fix issues, or perform tasks.",
    f'{style.yellow("Example:")} "Please analyze this codebase and explain its structure."',
    "Shift+Tab cycles modes, Ctrl+O toggles verbose output, Ctrl+G opens your editor.",
    "Press Ctrl+C twice to exit.",
)


class Welcome:
    def __init__(self, version: str, cwd: str) -> None:
        self.version = version
        self.cwd = cwd
        self._tips = Box(padding_x=1, padding_y=0, bg_fn=style.bg_rgb(52, 53, 65))
        for tip in TIPS:
            self._tips.add_child(Text(tip, 0, 0))

    def render(self, width: int) -> list[str]:
        lines = [style.magenta(row) for row in LOGO.split("\n")]
        lines.append("")
        lines.append(style.magenta("  Welcome to acai"))
        lines.append(style.gray(f"  Version {self.version}"))
        lines.append("")
        lines.extend(self._tips.render(width))
        lines.append("")
        lines.append(style.yellow(f"The current working directory is {self.cwd}"))
        return lines

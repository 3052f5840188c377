"""Display of one tool call, rebuilt from its phase log."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from acai.repl.events import ToolEvent, sort_by_phase
from acai.tui import style
from acai.tui.components import Loader, Markdown, Spacer, Text
from acai.tui.tui import Container

if TYPE_CHECKING:
    from acai.tui.tui import TUI

BG = style.bg_rgb(52, 53, 65)
ARGS_PREVIEW = 50
COLLAPSED_LINES = 5


def _preview_args(args: object) -> str:
    try:
        encoded = json.dumps(args)
    except (TypeError, ValueError):
        encoded = repr(args)
    return encoded[:ARGS_PREVIEW]


def normalize_events(events: list[ToolEvent]) -> list[ToolEvent]:
    """Add a start phase when the log lacks one, then sort by phase rank.

    While the call is running, updates keep their delivery order. Once an
    end or error phase is present the log is final, so updates are ordered
    by their text and any delivery order renders the same.
    """
    if not events:
        return []
    log = list(events)
    first = log[0]
    if not any(event.type == "tool-call-start" for event in log):
        log.insert(0, ToolEvent("tool-call-start", first.name, first.tool_call_id, "", first.args))
    ordered = sort_by_phase(log)
    if any(event.is_terminal for event in ordered):
        ordered.sort(key=lambda event: (event.rank, event.msg if event.type == "tool-call-update" else ""))
    return ordered


class ToolExecution(Container):
    def __init__(self, tui: TUI | None, events: list[ToolEvent], *, verbose: bool = False) -> None:
        super().__init__()
        self._tui = tui
        self._verbose = verbose
        self._loader: Loader | None = None
        self._events: list[ToolEvent] = []
        self.update(events)

    @property
    def tool_call_id(self) -> str:
        return self._events[0].tool_call_id if self._events else ""

    @property
    def events(self) -> list[ToolEvent]:
        return list(self._events)

    @property
    def status(self) -> str:
        return self._events[-1].type if self._events else "tool-call-start"

    @property
    def sealed(self) -> bool:
        return bool(self._events) and self._events[-1].is_terminal

    @property
    def loader(self) -> Loader | None:
        return self._loader

    def update(self, events: list[ToolEvent]) -> None:
        self._events = normalize_events(events)
        self._rebuild()

    def set_verbose_mode(self, verbose: bool) -> None:
        if verbose != self._verbose:
            self._verbose = verbose
            self._rebuild()

    def stop(self) -> None:
        if self._loader is not None:
            self._loader.stop()
            self._loader = None

    # ------------------------------------------------------------------

    def _rebuild(self) -> None:
        self.clear()
        if not self._events:
            return
        self.add_child(Spacer(1, BG))

        updates: list[str] = []
        for event in self._events:
            match event.type:
                case "tool-call-start":
                    self._add_status(event)
                case "tool-call-init":
                    self.add_child(Text(f"→ {style.bold(event.msg)}", 1, 0, BG))
                case "tool-call-update":
                    updates.append(event.msg)
                    if self._verbose:
                        self.add_child(Markdown(event.msg, padding_x=3, custom_bg_fn=BG))
                case "tool-call-end":
                    self._add_collapsed(updates)
                    self.add_child(Text(f"└ {style.bold(event.msg)}", 1, 0, BG))
                case "tool-call-error":
                    self._add_collapsed(updates)
                    self.add_child(Text(f"└ {style.bold(style.red(event.msg))}", 1, 0, BG))
        if not self.sealed:
            self._add_collapsed(updates)

        self.add_child(Spacer(1, BG))

    def _add_status(self, start: ToolEvent) -> None:
        label = self._start_label(start)
        match self.status:
            case "tool-call-init" | "tool-call-update":
                if self._loader is None:
                    self._loader = Loader(self._tui, label, message_color_fn=style.plain, bg_fn=BG)
                else:
                    self._loader.set_message(label)
                self.add_child(self._loader)
            case "tool-call-end":
                self.stop()
                self.add_child(Text(f"{style.bold(style.green('●'))} {label}", 1, 0, BG))
            case "tool-call-error":
                self.stop()
                self.add_child(Text(f"{style.bold(style.red('●'))} {label}", 1, 0, BG))
            case _:
                self.add_child(Text(f"{style.bold(style.blue('●'))} {label}", 1, 0, BG))

    def _start_label(self, start: ToolEvent) -> str:
        name = self._events[0].name or start.name
        parts = [style.bold(name[:1].upper() + name[1:])]
        if start.msg.strip():
            parts.append(style.bold(start.msg))
        if start.args is not None:
            parts.append(style.dim(_preview_args(start.args)))
        return " ".join(parts)

    def _add_collapsed(self, updates: list[str]) -> None:
        """Show only the tail of the update output unless verbose."""
        if self._verbose or not updates:
            return
        lines = "\n".join(updates).rstrip("\n").split("\n")
        hidden = len(lines) - COLLAPSED_LINES
        if hidden > 0:
            self.add_child(Text(style.dim(f"… {hidden} earlier lines (ctrl+o to expand)"), 3, 0, BG))
            lines = lines[-COLLAPSED_LINES:]
        self.add_child(Text("\n".join(lines), 3, 0, BG))
        updates.clear()

"""Interaction modes: normal, planning and research."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

Mode = Literal["normal", "planning", "research"]


@dataclass(frozen=True)
class ModeDefinition:
    name: Mode
    display_name: str
    initial_prompt: str
    reminder_prompt: str


MODE_DEFINITIONS: dict[str, ModeDefinition] = {
    "normal": ModeDefinition("normal", "Normal", "", ""),
    "planning": ModeDefinition(
        "planning",
        "Planning",
        "You are in PLANNING MODE. Before writing any code:\n\n"
        "1. First, understand the requirements fully\n"
        "2. Identify the core problem and constraints\n"
        "3. Design the solution architecture\n"
        "4. Consider edge cases\n"
        "5. Plan implementation\n"
        "6. Identify dependencies",
        "Remember: You are still in PLANNING MODE. Continue focusing on architectural design, "
        "systematic planning, and high-level considerations.",
    ),
    "research": ModeDefinition(
        "research",
        "Research",
        "You are in RESEARCH MODE. Your goal is to thoroughly investigate:\n\n"
        "1. Current state and context\n"
        "2. Existing solutions\n"
        "3. Best practices\n"
        "4. Trade-offs\n"
        "5. Potential pitfalls",
        "Remember: You are still in RESEARCH MODE. Continue investigating thoroughly. Synthesize findings.",
    ),
}

ALL_MODES: tuple[Mode, ...] = ("normal", "planning", "research")


class ModeManager:
    """Current mode plus whether its first prompt has been sent."""

    def __init__(self, mode: Mode = "normal") -> None:
        self._mode: Mode = mode if mode in ALL_MODES else "normal"
        self._first_message = True

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def definition(self) -> ModeDefinition:
        return MODE_DEFINITIONS[self._mode]

    def display_name(self) -> str:
        return self.definition.display_name

    def is_normal(self) -> bool:
        return self._mode == "normal"

    def cycle_mode(self) -> Mode:
        self._mode = ALL_MODES[(ALL_MODES.index(self._mode) + 1) % len(ALL_MODES)]
        self._first_message = True
        return self._mode

    def is_first_message(self) -> bool:
        return self._first_message

    def mark_first_message_sent(self) -> None:
        self._first_message = False

    def initial_prompt(self) -> str:
        return self.definition.initial_prompt

    def reminder_prompt(self) -> str | None:
        """Text to remind the model of the mode on later prompts, if any."""
        if self.is_normal() or self._first_message:
            return None
        return self.definition.reminder_prompt or None

    def reset(self) -> None:
        self._mode = "normal"
        self._first_message = True

    def to_json(self) -> dict[str, Any]:
        return {"mode": self._mode}

    def from_json(self, data: dict[str, Any]) -> None:
        mode = data.get("mode")
        if mode in ALL_MODES:
            self._mode = mode
        self._first_message = False

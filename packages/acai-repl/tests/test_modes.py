"""Tests for acai.repl.modes."""

from __future__ import annotations

from acai.repl.modes import ALL_MODES, MODE_DEFINITIONS, ModeManager


class TestModeManager:
    def test_defaults_to_normal(self) -> None:
        modes = ModeManager()
        assert modes.mode == "normal"
        assert modes.is_normal()
        assert modes.display_name() == "Normal"

    def test_unknown_initial_mode(self) -> None:
        assert ModeManager("chaos").mode == "normal"  # type: ignore[arg-type]

    def test_cycle_wraps(self) -> None:
        modes = ModeManager()
        seen = [modes.cycle_mode() for _ in range(len(ALL_MODES))]
        assert seen == ["planning", "research", "normal"]

    def test_cycle_resets_first_message(self) -> None:
        modes = ModeManager()
        modes.mark_first_message_sent()
        modes.cycle_mode()
        assert modes.is_first_message()

    def test_prompts(self) -> None:
        modes = ModeManager("planning")
        assert modes.initial_prompt().startswith("You are in PLANNING MODE")
        assert modes.reminder_prompt() is None
        modes.mark_first_message_sent()
        assert modes.reminder_prompt() == MODE_DEFINITIONS["planning"].reminder_prompt

    def test_normal_has_no_reminder(self) -> None:
        modes = ModeManager()
        modes.mark_first_message_sent()
        assert modes.reminder_prompt() is None

    def test_reset(self) -> None:
        modes = ModeManager("research")
        modes.mark_first_message_sent()
        modes.reset()
        assert modes.mode == "normal"
        assert modes.is_first_message()


class TestSerialization:
    def test_round_trip(self) -> None:
        modes = ModeManager("research")
        restored = ModeManager()
        restored.from_json(modes.to_json())
        assert restored.mode == "research"
        assert not restored.is_first_message()

    def test_invalid_mode_is_ignored(self) -> None:
        modes = ModeManager("planning")
        modes.from_json({"mode": "bogus"})
        assert modes.mode == "planning"

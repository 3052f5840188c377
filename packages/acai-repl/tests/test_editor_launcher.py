"""Tests for handing the prompt to an external editor."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Any

import pytest

from acai.repl.editor_launcher import EditorLaunchError, editor_command, launch_editor

from virtual_terminal import VirtualTerminal


class FakeEditor:
    """Stands in for ``subprocess.run``; edits the file it is given."""

    def __init__(self, terminal: VirtualTerminal, *, new_text: str | None = None, code: int = 0, delete: bool = False):
        self.terminal = terminal
        self.new_text = new_text
        self.code = code
        self.delete = delete
        self.commands: list[list[str]] = []
        self.seen_text = ""
        self.external_during_run = False

    def __call__(self, command: list[str], check: bool = False, **_: Any) -> subprocess.CompletedProcess[bytes]:
        self.commands.append(command)
        self.external_during_run = self.terminal.external_mode
        path = Path(command[-1])
        self.seen_text = path.read_text(encoding="utf-8")
        if self.new_text is not None:
            path.write_text(self.new_text, encoding="utf-8")
        if self.delete:
            path.unlink()
        return subprocess.CompletedProcess(command, self.code)


@pytest.fixture(autouse=True)
def editor_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EDITOR", "myedit --wait")
    monkeypatch.delenv("VISUAL", raising=False)


class TestEditorCommand:
    def test_editor_is_split(self) -> None:
        assert editor_command() == ["myedit", "--wait"]

    def test_falls_back_to_visual_then_vi(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("EDITOR")
        monkeypatch.setenv("VISUAL", "nano")
        assert editor_command() == ["nano"]
        monkeypatch.delenv("VISUAL")
        assert editor_command() == ["vi"]


class TestLaunchEditor:
    def test_returns_edited_text(self, monkeypatch: pytest.MonkeyPatch) -> None:
        terminal = VirtualTerminal()
        fake = FakeEditor(terminal, new_text="edited\n")
        monkeypatch.setattr(subprocess, "run", fake)
        result = launch_editor(terminal, "draft", ".md")
        assert result.content == "edited\n"
        assert not result.aborted
        assert fake.seen_text == "draft"
        assert fake.commands[0][:2] == ["myedit", "--wait"]
        assert fake.commands[0][-1].endswith(".md")

    def test_terminal_is_released_while_editing(self, monkeypatch: pytest.MonkeyPatch) -> None:
        terminal = VirtualTerminal()
        fake = FakeEditor(terminal)
        monkeypatch.setattr(subprocess, "run", fake)
        launch_editor(terminal, "draft")
        assert fake.external_during_run
        assert not terminal.external_mode
        assert terminal.external_mode_entries == 1

    def test_nonzero_exit(self, monkeypatch: pytest.MonkeyPatch) -> None:
        terminal = VirtualTerminal()
        monkeypatch.setattr(subprocess, "run", FakeEditor(terminal, code=2))
        with pytest.raises(EditorLaunchError, match="code 2"):
            launch_editor(terminal, "draft")
        assert not terminal.external_mode

    def test_missing_binary(self, monkeypatch: pytest.MonkeyPatch) -> None:
        terminal = VirtualTerminal()

        def missing(command: list[str], check: bool = False) -> None:
            raise FileNotFoundError(command[0])

        monkeypatch.setattr(subprocess, "run", missing)
        with pytest.raises(EditorLaunchError, match="Could not start editor myedit"):
            launch_editor(terminal, "draft")
        assert not terminal.external_mode

    def test_deleted_file_is_aborted(self, monkeypatch: pytest.MonkeyPatch) -> None:
        terminal = VirtualTerminal()
        monkeypatch.setattr(subprocess, "run", FakeEditor(terminal, delete=True))
        result = launch_editor(terminal, "draft")
        assert result.aborted
        assert result.content == "draft"

    def test_empty_editor_setting(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("EDITOR", "   ")
        with pytest.raises(EditorLaunchError, match="No editor configured"):
            launch_editor(VirtualTerminal(), "draft")

"""Hand the prompt buffer to ``$EDITOR`` and read it back."""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from acai.tui.terminal import Terminal

logger = logging.getLogger(__name__)


class EditorLaunchError(RuntimeError):
    """The external editor could not be started or exited unsuccessfully."""


@dataclass
class EditorLaunchResult:
    content: str
    aborted: bool = False


def editor_command() -> list[str]:
    """``$EDITOR``, then ``$VISUAL``, then ``vi``, split like a shell would."""
    command = os.environ.get("EDITOR") or os.environ.get("VISUAL") or "vi"
    return shlex.split(command)


def launch_editor(terminal: Terminal, initial: str = "", postfix: str = ".md") -> EditorLaunchResult:
    """Edit *initial* in an external editor; blocks until it exits.

    The terminal leaves raw mode for the duration of the editor and is
    restored afterwards, also when the editor fails.
    """
    command = editor_command()
    if not command:
        raise EditorLaunchError("No editor configured")

    with tempfile.TemporaryDirectory(prefix="acai-editor-") as temp_dir:
        path = Path(temp_dir) / f"edit{postfix}"
        path.write_text(initial, encoding="utf-8")

        terminal.enter_external_mode()
        try:
            logger.debug("launching editor %s", command[0])
            try:
                result = subprocess.run([*command, str(path)], check=False)
            except OSError as exc:
                raise EditorLaunchError(f"Could not start editor {command[0]}: {exc}") from exc
        finally:
            terminal.exit_external_mode()

        if result.returncode != 0:
            raise EditorLaunchError(f"Editor exited with code {result.returncode}")
        if not path.exists():
            return EditorLaunchResult(initial, aborted=True)
        return EditorLaunchResult(path.read_text(encoding="utf-8"))


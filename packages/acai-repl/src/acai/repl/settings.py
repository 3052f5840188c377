"""User settings from ``~/.acai/settings.json`` with environment overrides.

Precedence: environment > settings file > defaults. ``ACAI_HOME`` moves
the whole configuration directory.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = ".acai"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_TRUTHY = frozenset({"1", "true", "yes", "on"})


def acai_home() -> Path:
    """Configuration directory (``$ACAI_HOME`` or ``~/.acai``)."""
    override = os.environ.get("ACAI_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / CONFIG_DIR_NAME


def _env_flag(name: str) -> bool | None:
    value = os.environ.get(name)
    if value is None:
        return None
    return value.strip().lower() in _TRUTHY


@dataclass
class Settings:
    verbose: bool = False
    model: str = ""
    models: list[str] = field(default_factory=list)
    mode: str = "normal"
    editor_padding_x: int = 0
    notification_ms: int = 3000
    log_level: str = "WARNING"
    hardware_cursor: bool = False

    path: Path | None = field(default=None, repr=False, compare=False)
    load_error: Exception | None = field(default=None, repr=False, compare=False)

    # --- Loading ---

    @classmethod
    def load(cls, path: Path | None = None, *, apply_env: bool = True) -> Settings:
        """Read *path* (default ``acai_home()/settings.json``).

        A missing file gives defaults. An unreadable or malformed file also
        gives defaults, logs a warning, and is never overwritten by ``save``.
        """
        path = path or acai_home() / "settings.json"
        data, error = _load_from_file(path)
        if error is not None:
            logger.warning("ignoring unreadable settings file %s: %s", path, error)
        settings = cls.from_dict(data)
        settings.path = path
        settings.load_error = error
        if apply_env:
            settings.apply_env()
        return settings

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Settings:
        """Build settings from *data*, ignoring unknown keys and bad types."""
        settings = cls()
        for f in fields(cls):
            if f.name in ("path", "load_error") or f.name not in data:
                continue
            value = data[f.name]
            default = getattr(settings, f.name)
            if isinstance(default, bool):
                ok = isinstance(value, bool)
            elif isinstance(default, int):
                ok = isinstance(value, int) and not isinstance(value, bool)
            elif isinstance(default, list):
                ok = isinstance(value, list) and all(isinstance(v, str) for v in value)
            else:
                ok = isinstance(value, str)
            if ok:
                setattr(settings, f.name, value)
            else:
                logger.warning("ignoring setting %s=%r", f.name, value)
        settings.log_level = settings.log_level.upper()
        return settings

    def apply_env(self) -> None:
        verbose = _env_flag("ACAI_VERBOSE")
        if verbose is not None:
            self.verbose = verbose
        cursor = _env_flag("ACAI_HARDWARE_CURSOR")
        if cursor is not None:
            self.hardware_cursor = cursor
        model = os.environ.get("ACAI_MODEL")
        if model:
            self.model = model
        level = os.environ.get("ACAI_LOG_LEVEL")
        if level:
            self.log_level = level.upper()

    # --- Persistence ---

    def to_dict(self) -> dict[str, Any]:
        return {
            f.name: list(value) if isinstance(value := getattr(self, f.name), list) else value
            for f in fields(self)
            if f.name not in ("path", "load_error")
        }

    def save(self) -> None:
        if self.path is None:
            return
        if self.load_error is not None:
            logger.warning("not saving over unreadable settings file %s", self.path)
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self.to_dict(), indent=2, ensure_ascii=False) + "\n", encoding="utf-8")

    @property
    def log_dir(self) -> Path:
        base = self.path.parent if self.path is not None else acai_home()
        return base / "logs"


def _load_from_file(path: Path) -> tuple[dict[str, Any], Exception | None]:
    if not path.exists():
        return {}, None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        return {}, e
    if not isinstance(data, dict):
        return {}, ValueError("settings file must contain a JSON object")
    return data, None

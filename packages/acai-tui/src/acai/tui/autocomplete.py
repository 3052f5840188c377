"""Completion candidates for the input editor.

The editor asks a provider for suggestions at the cursor and, once the
user picks one, asks it to splice the choice into the buffer. The bundled
provider completes ``/commands`` at the start of the input, ``@path``
references anywhere, and bare paths when Tab is pressed.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from typing import Protocol

from acai.tui.components.select_list import SelectItem

MAX_PATH_SUGGESTIONS = 50

_AT_TOKEN_RE = re.compile(r"(?:^|\s)(@[^\s]*)$")
_WORD_BOUNDARY = " \t-_./:"


@dataclass
class SlashCommand:
    name: str
    description: str | None = None


@dataclass
class Suggestions:
    items: list[SelectItem]
    # Text before the cursor that a chosen item replaces.
    prefix: str


@dataclass
class Completion:
    lines: list[str]
    cursor_line: int
    cursor_col: int


class AutocompleteProvider(Protocol):
    def get_suggestions(self, lines: list[str], cursor_line: int, cursor_col: int) -> Suggestions | None: ...

    def apply_completion(
        self,
        lines: list[str],
        cursor_line: int,
        cursor_col: int,
        item: SelectItem,
        prefix: str,
    ) -> Completion: ...


def fuzzy_score(query: str, text: str) -> float | None:
    """Score *text* against *query*; lower is better, ``None`` means no match.

    Every query character must appear in order. Consecutive runs and
    matches at word starts are rewarded, gaps are penalised.
    """
    query = query.lower()
    text = text.lower()
    if not query:
        return 0.0
    score = 0.0
    last = -1
    run = 0
    qi = 0
    for i, ch in enumerate(text):
        if qi == len(query):
            break
        if ch != query[qi]:
            continue
        if last == i - 1:
            run += 1
            score -= run * 5
        else:
            run = 0
            if last >= 0:
                score += (i - last - 1) * 2
        if i == 0 or text[i - 1] in _WORD_BOUNDARY:
            score -= 10
        score += i * 0.1
        last = i
        qi += 1
    return score if qi == len(query) else None


@dataclass
class CombinedAutocompleteProvider:
    commands: list[SlashCommand] = field(default_factory=list)
    base_path: str = field(default_factory=os.getcwd)

    def get_suggestions(self, lines: list[str], cursor_line: int, cursor_col: int) -> Suggestions | None:
        before = lines[cursor_line][:cursor_col]

        if cursor_line == 0 and before.startswith("/") and " " not in before:
            items = self._command_items(before[1:])
            return Suggestions(items, before) if items else None

        at = _AT_TOKEN_RE.search(before)
        if at:
            token = at.group(1)
            items = [
                SelectItem("@" + item.value, item.label, item.description)
                for item in self._path_items(token[1:])
            ]
            return Suggestions(items, token) if items else None
        return None

    def get_force_file_suggestions(self, lines: list[str], cursor_line: int, cursor_col: int) -> Suggestions | None:
        """Path completion for the token before the cursor, used on Tab."""
        before = lines[cursor_line][:cursor_col]
        token = re.split(r"[\s\"'=]", before)[-1]
        if token.startswith("@"):
            return self.get_suggestions(lines, cursor_line, cursor_col)
        items = self._path_items(token)
        return Suggestions(items, token) if items else None

    def apply_completion(
        self,
        lines: list[str],
        cursor_line: int,
        cursor_col: int,
        item: SelectItem,
        prefix: str,
    ) -> Completion:
        line = lines[cursor_line]
        start = cursor_col - len(prefix)
        value = item.value
        if prefix.startswith("/") and start == 0:
            value = "/" + value
        # Keep completing inside a directory; otherwise move past the token.
        if not value.endswith("/"):
            value += " "
        new_lines = list(lines)
        new_lines[cursor_line] = line[:start] + value + line[cursor_col:]
        return Completion(new_lines, cursor_line, start + len(value))

    def _command_items(self, query: str) -> list[SelectItem]:
        ranked: list[tuple[float, SlashCommand]] = []
        for command in self.commands:
            score = fuzzy_score(query, command.name)
            if score is not None:
                ranked.append((score, command))
        ranked.sort(key=lambda pair: (pair[0], pair[1].name))
        return [SelectItem(c.name, "/" + c.name, c.description) for _, c in ranked]

    def _path_items(self, token: str) -> list[SelectItem]:
        directory, _, partial = token.rpartition("/")
        if token.startswith("/") and not directory:
            directory = "/"
        dir_prefix = "" if not directory else (directory if directory.endswith("/") else directory + "/")
        search_dir = os.path.expanduser(directory) if directory else "."
        if not os.path.isabs(search_dir):
            search_dir = os.path.join(self.base_path, search_dir)

        try:
            entries = sorted(os.scandir(search_dir), key=lambda e: e.name.lower())
        except OSError:
            return []

        items: list[SelectItem] = []
        for entry in entries:
            if entry.name.startswith(".") and not partial.startswith("."):
                continue
            if not entry.name.lower().startswith(partial.lower()):
                continue
            is_dir = entry.is_dir()
            name = entry.name + ("/" if is_dir else "")
            items.append(SelectItem(dir_prefix + name, name))
            if len(items) >= MAX_PATH_SUGGESTIONS:
                break
        # Directories first, as a shell would list them.
        items.sort(key=lambda item: not item.value.endswith("/"))
        return items

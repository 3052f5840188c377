"""Tests for ProcessTerminal stdin decoding."""

from __future__ import annotations

import pytest

import acai.tui.terminal as terminal_module
from acai.tui.keys import PASTE_END, PASTE_START
from acai.tui.stdin_buffer import StdinBuffer
from acai.tui.terminal import ProcessTerminal


class FakeStdin:
    def fileno(self) -> int:
        return 0


class Reads:
    """Stands in for ``os.read``; returns queued chunks in order."""

    def __init__(self, *chunks: bytes) -> None:
        self.chunks = list(chunks)

    def __call__(self, fd: int, size: int) -> bytes:
        return self.chunks.pop(0)


def reading_terminal(monkeypatch: pytest.MonkeyPatch, *chunks: bytes) -> tuple[ProcessTerminal, list[str]]:
    received: list[str] = []
    term = ProcessTerminal(enable_mouse=False)
    term._buffer = StdinBuffer(received.append, received.append)
    monkeypatch.setattr(terminal_module.sys, "stdin", FakeStdin())
    monkeypatch.setattr(terminal_module.os, "read", Reads(*chunks))
    return term, received


class TestStdinDecoding:
    def test_character_split_across_reads(self, monkeypatch: pytest.MonkeyPatch) -> None:
        encoded = "é".encode()
        term, received = reading_terminal(monkeypatch, encoded[:1], encoded[1:])
        term._read_stdin()
        assert received == []
        term._read_stdin()
        assert received == ["é"]

    def test_wide_character_split_three_ways(self, monkeypatch: pytest.MonkeyPatch) -> None:
        encoded = "日".encode()
        term, received = reading_terminal(monkeypatch, encoded[:1], encoded[1:2], encoded[2:])
        for _ in range(3):
            term._read_stdin()
        assert received == ["日"]

    def test_invalid_bytes_are_replaced(self, monkeypatch: pytest.MonkeyPatch) -> None:
        term, received = reading_terminal(monkeypatch, b"\xffa")
        term._read_stdin()
        assert received == ["�", "a"]

    def test_paste_split_inside_character(self, monkeypatch: pytest.MonkeyPatch) -> None:
        encoded = (PASTE_START + "héllo" + PASTE_END).encode()
        cut = encoded.index("é".encode()) + 1
        term, received = reading_terminal(monkeypatch, encoded[:cut], encoded[cut:])
        term._read_stdin()
        term._read_stdin()
        assert received == ["héllo"]

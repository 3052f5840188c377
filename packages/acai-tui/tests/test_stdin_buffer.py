"""Tests for acai.tui.stdin_buffer.StdinBuffer."""

from __future__ import annotations

import asyncio

import pytest

from acai.tui.keys import PASTE_END, PASTE_START
from acai.tui.stdin_buffer import StdinBuffer, split_sequences


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class Collector:
    """Collects emitted data/paste events for assertions."""

    def __init__(self) -> None:
        self.data: list[str] = []
        self.pastes: list[str] = []

    def on_data(self, d: str) -> None:
        self.data.append(d)

    def on_paste(self, d: str) -> None:
        self.pastes.append(d)


def make_buffer(timeout: float = 0.01) -> tuple[StdinBuffer, Collector]:
    col = Collector()
    return StdinBuffer(col.on_data, col.on_paste, timeout=timeout), col


# ---------------------------------------------------------------------------
# split_sequences
# ---------------------------------------------------------------------------


class TestSplitSequences:
    def test_plain_characters(self) -> None:
        assert split_sequences("ab") == (["a", "b"], "")

    def test_csi_sequence(self) -> None:
        assert split_sequences("a\x1b[Ab") == (["a", "\x1b[A", "b"], "")

    def test_incomplete_csi_is_remainder(self) -> None:
        assert split_sequences("x\x1b[1;") == (["x"], "\x1b[1;")

    def test_sgr_mouse(self) -> None:
        assert split_sequences("\x1b[<64;3;4M") == (["\x1b[<64;3;4M"], "")

    def test_ss3(self) -> None:
        assert split_sequences("\x1bOP") == (["\x1bOP"], "")

    def test_alt_letter(self) -> None:
        assert split_sequences("\x1bb") == (["\x1bb"], "")

    def test_lone_escape_is_incomplete(self) -> None:
        assert split_sequences("\x1b") == ([], "\x1b")

    def test_osc_terminated_by_bel(self) -> None:
        assert split_sequences("\x1b]0;t\x07z") == (["\x1b]0;t\x07", "z"], "")


# ---------------------------------------------------------------------------
# StdinBuffer
# ---------------------------------------------------------------------------


class TestStdinBuffer:
    def test_emits_each_key(self) -> None:
        buf, col = make_buffer()
        buf.feed("ab\x1b[B")
        assert col.data == ["a", "b", "\x1b[B"]

    def test_sequence_split_across_chunks(self) -> None:
        buf, col = make_buffer()
        buf._pending = "\x1b["
        buf.feed("A")
        assert col.data == ["\x1b[A"]

    def test_paste_across_chunks(self) -> None:
        buf, col = make_buffer()
        buf.feed(PASTE_START + "hel")
        assert buf.in_paste
        buf.feed("lo" + PASTE_END + "x")
        assert col.pastes == ["hello"]
        assert col.data == ["x"]
        assert not buf.in_paste

    def test_paste_content_is_not_split(self) -> None:
        buf, col = make_buffer()
        buf.feed(PASTE_START + "\x1b[A\r" + PASTE_END)
        assert col.pastes == ["\x1b[A\r"]
        assert col.data == []

    def test_without_loop_partial_is_flushed_immediately(self) -> None:
        buf, col = make_buffer()
        buf.feed("\x1b")
        assert col.data == ["\x1b"]
        assert buf.pending == ""

    def test_clear_drops_state(self) -> None:
        buf, col = make_buffer()
        buf.feed(PASTE_START + "abc")
        buf.clear()
        assert not buf.in_paste
        buf.feed("z")
        assert col.data == ["z"]
        assert col.pastes == []

    @pytest.mark.asyncio
    async def test_lone_escape_flushes_after_timeout(self) -> None:
        buf, col = make_buffer(timeout=0.01)
        buf.feed("\x1b")
        assert col.data == []
        assert buf.pending == "\x1b"
        await asyncio.sleep(0.05)
        assert col.data == ["\x1b"]

    @pytest.mark.asyncio
    async def test_completed_sequence_cancels_flush(self) -> None:
        buf, col = make_buffer(timeout=0.01)
        buf.feed("\x1b[")
        buf.feed("A")
        await asyncio.sleep(0.05)
        assert col.data == ["\x1b[A"]

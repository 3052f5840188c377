"""Tests for the tool-call display: phase ordering, status line and collapsing."""

from __future__ import annotations

import itertools

from acai.repl.components.tool_execution import COLLAPSED_LINES, ToolExecution, normalize_events
from acai.repl.events import ToolEvent
from acai.tui.utils import strip_ansi


def ev(phase: str, msg: str = "", args: object = None) -> ToolEvent:
    return ToolEvent(phase, "bash", "call-1", msg, args)  # type: ignore[arg-type]


def plain(component: ToolExecution, width: int = 60) -> list[str]:
    return [strip_ansi(line).rstrip() for line in component.render(width)]


def text_of(component: ToolExecution, width: int = 200) -> str:
    return "\n".join(plain(component, width))


# ---------------------------------------------------------------------------
# normalize_events
# ---------------------------------------------------------------------------


class TestNormalize:
    def test_empty(self) -> None:
        assert normalize_events([]) == []

    def test_synthesizes_missing_start(self) -> None:
        log = normalize_events([ev("tool-call-update", "out", {"cmd": "ls"})])
        assert [e.type for e in log] == ["tool-call-start", "tool-call-update"]
        assert log[0].msg == ""
        assert log[0].args == {"cmd": "ls"}

    def test_keeps_existing_start(self) -> None:
        log = normalize_events([ev("tool-call-end", "ok"), ev("tool-call-start", "ls")])
        assert [e.type for e in log] == ["tool-call-start", "tool-call-end"]
        assert log[0].msg == "ls"

    def test_sealed_log_orders_updates_by_text(self) -> None:
        log = normalize_events([ev("tool-call-start"), ev("tool-call-update", "b"), ev("tool-call-update", "a"), ev("tool-call-end")])
        assert [e.msg for e in log] == ["", "a", "b", ""]

    def test_open_log_keeps_update_order(self) -> None:
        log = normalize_events([ev("tool-call-start"), ev("tool-call-update", "b"), ev("tool-call-update", "a")])
        assert [e.msg for e in log] == ["", "b", "a"]


# ---------------------------------------------------------------------------
# Rendering per phase
# ---------------------------------------------------------------------------


class TestStatusLine:
    def test_start_only(self) -> None:
        tool = ToolExecution(None, [ev("tool-call-start", "", {"cmd": "ls"})])
        out = text_of(tool)
        assert "● Bash" in out
        assert '{"cmd": "ls"}' in out
        assert tool.loader is None
        assert not tool.sealed

    def test_name_keeps_case_after_first_letter(self) -> None:
        tool = ToolExecution(None, [ToolEvent("tool-call-start", "readFile", "t", "")])
        assert "ReadFile" in text_of(tool)

    def test_args_preview_is_truncated(self) -> None:
        tool = ToolExecution(None, [ev("tool-call-start", "", {"text": "x" * 200})])
        row = next(line for line in plain(tool, 200) if "Bash" in line)
        assert "x" * 60 not in row

    def test_missing_args_have_no_preview(self) -> None:
        tool = ToolExecution(None, [ev("tool-call-start", "ls -la"), ev("tool-call-end", "ok")])
        row = next(line for line in plain(tool, 200) if "Bash" in line)
        assert "null" not in row
        assert row.strip() == "● Bash ls -la"

    def test_in_progress_uses_loader(self) -> None:
        tool = ToolExecution(None, [ev("tool-call-start"), ev("tool-call-init", "Running ls")])
        assert tool.loader is not None
        assert tool.loader.running
        assert "→ Running ls" in text_of(tool)

    def test_end_stops_loader(self) -> None:
        tool = ToolExecution(None, [ev("tool-call-start"), ev("tool-call-init", "Running")])
        loader = tool.loader
        assert loader is not None
        tool.update([ev("tool-call-start"), ev("tool-call-init", "Running"), ev("tool-call-end", "Done")])
        assert not loader.running
        assert tool.loader is None
        assert tool.sealed
        assert tool.status == "tool-call-end"
        assert "└ Done" in text_of(tool)

    def test_error(self) -> None:
        tool = ToolExecution(None, [ev("tool-call-start"), ev("tool-call-error", "exit 1")])
        assert tool.status == "tool-call-error"
        assert tool.sealed
        assert "└ exit 1" in text_of(tool)

    def test_stop_is_idempotent(self) -> None:
        tool = ToolExecution(None, [ev("tool-call-start"), ev("tool-call-init", "x")])
        tool.stop()
        tool.stop()
        assert tool.loader is None


class TestDeliveryOrder:
    LOG = [
        ev("tool-call-start", "ls -la", {"cmd": "ls"}),
        ev("tool-call-init", "Running"),
        ev("tool-call-update", "alpha"),
        ev("tool-call-update", "beta"),
        ev("tool-call-update", "gamma"),
        ev("tool-call-end", "Done"),
    ]

    def test_any_arrival_order_renders_the_same(self) -> None:
        for verbose in (False, True):
            expected = plain(ToolExecution(None, self.LOG, verbose=verbose))
            for order in itertools.permutations(self.LOG):
                assert plain(ToolExecution(None, list(order), verbose=verbose)) == expected

    def test_finished_updates_in_any_order(self) -> None:
        start, init, *updates, end = self.LOG
        for verbose in (False, True):
            renders = {
                tuple(plain(ToolExecution(None, [start, init, *order, end], verbose=verbose)))
                for order in itertools.permutations(updates)
            }
            assert len(renders) == 1

    def test_error_seals_the_order_too(self) -> None:
        start, init, *updates, _ = self.LOG
        failed = ev("tool-call-error", "exit 1")
        first = plain(ToolExecution(None, [start, init, *updates, failed]))
        assert plain(ToolExecution(None, [start, init, *reversed(updates), failed])) == first

    def test_running_output_keeps_delivery_order(self) -> None:
        start, init, alpha, beta, _, _ = self.LOG
        out = text_of(ToolExecution(None, [start, init, beta, alpha]))
        assert out.index("beta") < out.index("alpha")

    def test_tool_call_id(self) -> None:
        assert ToolExecution(None, [ev("tool-call-start")]).tool_call_id == "call-1"


# ---------------------------------------------------------------------------
# Output collapsing
# ---------------------------------------------------------------------------


class TestCollapse:
    def _many_lines(self, count: int) -> list[ToolEvent]:
        output = "\n".join(f"line {i}" for i in range(count))
        return [ev("tool-call-start"), ev("tool-call-update", output), ev("tool-call-end", "Done")]

    def test_short_output_is_shown_whole(self) -> None:
        out = text_of(ToolExecution(None, self._many_lines(3)))
        assert "line 0" in out
        assert "line 2" in out
        assert "earlier lines" not in out

    def test_long_output_shows_tail(self) -> None:
        out = text_of(ToolExecution(None, self._many_lines(12)))
        assert f"… {12 - COLLAPSED_LINES} earlier lines (ctrl+o to expand)" in out
        assert "line 11" in out
        assert "line 6" not in out
        assert "line 0" not in out

    def test_tail_keeps_line_breaks(self) -> None:
        rows = plain(ToolExecution(None, self._many_lines(3)))
        assert any(row.strip() == "line 1" for row in rows)

    def test_verbose_shows_everything(self) -> None:
        tool = ToolExecution(None, self._many_lines(12), verbose=True)
        out = text_of(tool)
        assert "line 0" in out
        assert "earlier lines" not in out

    def test_toggle_verbose_rebuilds(self) -> None:
        tool = ToolExecution(None, self._many_lines(12))
        assert "line 0" not in text_of(tool)
        tool.set_verbose_mode(True)
        assert "line 0" in text_of(tool)
        tool.set_verbose_mode(False)
        assert "line 0" not in text_of(tool)

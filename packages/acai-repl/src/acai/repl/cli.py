"""CLI entry point for acai.

Interactive when stdin and stdout are terminals; otherwise (or with
``--print``) the transcript is built from stdin and printed as plain text.
Stdin lines that are JSON objects are decoded as agent events, any other
line is shown as a user prompt.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import shutil
import sys
from pathlib import Path
from typing import AsyncIterator, Iterable

from acai.repl import __version__
from acai.repl.adapter import StreamAdapter
from acai.repl.events import AgentEvent, AgentStop, Message, event_from_dict
from acai.repl.repl import Repl, ReplHooks
from acai.repl.session import SessionFormatError, SessionMessage, parse_messages
from acai.repl.settings import LOG_LEVELS, Settings
from acai.tui.autocomplete import CombinedAutocompleteProvider, SlashCommand
from acai.tui.components import Editor, Notification, Text
from acai.tui.terminal import ProcessTerminal
from acai.tui.tui import TUI, Container
from acai.tui.utils import strip_ansi

logger = logging.getLogger(__name__)

COMMANDS = [
    SlashCommand("help", "Show available commands"),
    SlashCommand("model", "Pick a model"),
    SlashCommand("mode", "Cycle normal / planning / research"),
    SlashCommand("new", "Start a new session"),
    SlashCommand("verbose", "Toggle verbose output"),
    SlashCommand("exit", "Save and quit"),
]


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="acai",
        description="Terminal front end for the acai coding agent",
    )
    parser.add_argument("--session", help="JSON file of saved messages to show")
    parser.add_argument("--replay", help="JSONL file of agent events to stream into the transcript")
    parser.add_argument("-m", "--model", help="Model shown in the footer")
    parser.add_argument("--verbose", action="store_true", default=None, help="Expand thinking and tool output")
    parser.add_argument("--print", dest="print_mode", action="store_true", help="Print mode (non-interactive)")
    parser.add_argument("--cwd", default=os.getcwd(), help="Working directory")
    parser.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS, help="Log level for ~/.acai/logs/acai.log")
    parser.add_argument("--version", action="version", version=f"acai {__version__}")
    return parser.parse_args(argv)


def configure_logging(settings: Settings) -> Path:
    """Log to a file; the terminal belongs to the UI."""
    log_dir = settings.log_dir
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "acai.log"
    logging.basicConfig(
        filename=log_file,
        level=getattr(logging, settings.log_level, logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    return log_file


def load_session(path: str) -> list[SessionMessage]:
    return parse_messages(Path(path).read_bytes())


def decode_line(line: str) -> AgentEvent | None:
    """An event for a JSON line, a user message for plain text, else None."""
    text = line.strip()
    if not text:
        return None
    if text.startswith("{"):
        try:
            return event_from_dict(json.loads(text))
        except ValueError:
            logger.warning("undecodable event line: %.80s", text)
    return Message("user", line.rstrip("\n"))


async def iter_events(path: str) -> AsyncIterator[AgentEvent]:
    with open(path, encoding="utf-8") as f:
        for line in f:
            event = decode_line(line)
            if event is not None:
                yield event
                # Let the renderer paint between events.
                await asyncio.sleep(0)


# --- Print mode ---


def render_plain(lines: Iterable[str], width: int, settings: Settings, session: list[SessionMessage] | None) -> list[str]:
    """Build the transcript for *lines* off-screen and return it unstyled."""
    # Never started, so nothing is written to the terminal.
    tui = TUI(ProcessTerminal(enable_mouse=False))
    chat = Container()
    notification = Notification(tui, auto_dismiss_ms=0)
    adapter = StreamAdapter(
        tui,
        chat,
        Container(),
        Editor(tui),
        notification,
        verbose=settings.verbose,
    )
    if session is not None:
        adapter.reconstruct(session)
    for line in lines:
        event = decode_line(line)
        if event is not None:
            adapter.handle(event)
    if adapter.turn is not None:
        adapter.handle(AgentStop())
    output = [strip_ansi(row).rstrip() for row in chat.render(width)]
    if notification.message:
        output.extend(["", notification.message])
    return output


def run_print_mode(args: argparse.Namespace, settings: Settings) -> int:
    session = load_session(args.session) if args.session else None
    lines = sys.stdin.read().splitlines() if not sys.stdin.isatty() else []
    width = shutil.get_terminal_size().columns
    for row in render_plain(lines, width, settings, session):
        print(row)
    return 0


# --- Interactive mode ---


def _help_text() -> str:
    rows = [f"/{command.name:<10} {command.description}" for command in COMMANDS]
    rows.append("")
    rows.append("Esc interrupt · Ctrl+C twice exit · Ctrl+D exit on empty prompt · Ctrl+O verbose")
    rows.append("Ctrl+R review · Ctrl+N new session · Ctrl+G external editor · Shift+Tab mode")
    return "\n".join(rows)


def install_commands(repl: Repl) -> None:
    """Route slash commands to the REPL; other prompts go to the transcript."""

    def on_submit(text: str) -> None:
        command = text.strip()
        if command == "/exit":
            repl.exit()
        elif command == "/new":
            repl.new_session()
        elif command == "/model":
            repl.show_model_picker()
        elif command == "/mode":
            repl.cycle_mode()
        elif command == "/verbose":
            repl.toggle_verbose()
        elif command == "/help":
            repl.chat.add_child(Text(_help_text(), 1, 1))
        else:
            repl.handle(Message("user", text))
            repl.notification.show("No agent connected")

    repl.hooks.on_submit = on_submit


async def run_interactive(args: argparse.Namespace, settings: Settings) -> int:
    session = load_session(args.session) if args.session else None
    hooks = ReplHooks(on_save=settings.save, on_model_selected=lambda _model: settings.save())
    repl = Repl(
        ProcessTerminal(),
        settings,
        hooks,
        cwd=args.cwd,
        autocomplete=CombinedAutocompleteProvider(COMMANDS, args.cwd),
    )
    install_commands(repl)
    repl.start()
    if session is not None:
        repl.reconstruct(session)

    replay: asyncio.Task[None] | None = None
    if args.replay:
        replay = asyncio.create_task(repl.consume(iter_events(args.replay)))
    try:
        await repl.wait_closed()
    finally:
        if replay is not None:
            replay.cancel()
        repl.stop()
    return 0


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    settings = Settings.load()
    if args.model:
        settings.model = args.model
    if args.verbose is not None:
        settings.verbose = args.verbose
    if args.log_level:
        settings.log_level = args.log_level
    log_file = configure_logging(settings)
    logger.info("acai %s starting, log file %s", __version__, log_file)

    try:
        if args.print_mode or not ProcessTerminal.is_interactive():
            code = run_print_mode(args, settings)
        else:
            code = asyncio.run(run_interactive(args, settings))
    except (OSError, SessionFormatError) as exc:
        logger.error("%s", exc)
        print(f"acai: {exc}", file=sys.stderr)
        code = 1
    except KeyboardInterrupt:
        code = 130
    sys.exit(code)


if __name__ == "__main__":
    main()

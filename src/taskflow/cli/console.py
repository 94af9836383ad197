# src/taskflow/cli/console.py

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from ..core.state import AppState
from .commands import preview_task
from .commands import registry as command_registry

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


async def _read_line(prompt: str) -> str:
    return await asyncio.to_thread(input, prompt)


async def _read_block() -> str:
    """Read pasted lines until an empty line (or EOF)."""
    lines: list[str] = []
    while True:
        try:
            line = await _read_line("... ")
        except EOFError:
            break
        if not line.strip():
            break
        lines.append(line)
    return "\n".join(lines)


async def run_console_loop(state: AppState) -> None:
    logger.info("Console started (remote=%s).", state.use_remote and state.remote_available)
    _print_ts("[CONSOLE] Describe a task, or use /meeting for a transcript. /help for commands, /exit to quit.\n")

    while True:
        try:
            user_input = (await _read_line(">>> ")).strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        if user_input.lower() == "/meeting":
            _print_ts("[meeting] Paste the transcript, then an empty line.")
            block = await _read_block()
            user_input = f"/meeting\n{block}"

        try:
            reply = await command_registry.handle(state, user_input, emit=_print_ts)
            if reply is None:
                reply = await preview_task(state, user_input)
        except Exception:
            logger.exception("Console handler crashed.")
            reply = "Internal error while handling the input."

        _print_ts(reply)

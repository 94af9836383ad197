# src/taskflow/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import cast

from ..core.models import ParsedTask, Task, describe_due, promote_parsed_task
from ..core.orchestrator import ParseOutcome, ParsePath
from ..core.state import AppState

CommandEmitter = Callable[[str], None]
CommandResult = str | Awaitable[str]
CommandHandler3 = Callable[[AppState, list[str], str], CommandResult]
CommandHandler4 = Callable[[AppState, list[str], str, CommandEmitter | None], CommandResult]
CommandHandler = CommandHandler3 | CommandHandler4

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Slash-command registry used by the console (/help, /meeting, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        Handlers get the split args plus the raw remainder of the line (line
        breaks kept), and may be plain functions or coroutines.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]
        raw = line[1 + len(parts[0]) :].strip()

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 4

        if nparams >= 4:
            result = cast(CommandHandler4, handler)(state, args, raw, emit)
        else:
            result = cast(CommandHandler3, handler)(state, args, raw)

        if inspect.isawaitable(result):
            result = await result
        return cast(str, result)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def format_parsed_task(index: int, parsed: ParsedTask) -> str:
    assignee = parsed.assignee or "unassigned"
    label = f" ({parsed.priority_text})" if parsed.priority_text else ""
    lines = [
        f"  [{index}] {parsed.title}",
        f"      assignee: {assignee}",
        f"      due: {describe_due(parsed)}",
        f"      priority: {parsed.priority}{label}",
    ]
    if parsed.priority_reason:
        lines.append(f"      why: {parsed.priority_reason}")
    if parsed.context:
        lines.append(f"      context: {parsed.context}")
    return "\n".join(lines)


def format_task(task: Task) -> str:
    assignee = task.assignee or "unassigned"
    return f"  {task.id[:8]} [{task.status}] {task.priority} {task.title} -> {assignee}, due {task.due_date}"


def render_outcome(outcome: ParseOutcome[list[ParsedTask]]) -> str:
    tasks = outcome.result
    source = "hosted model" if outcome.path is ParsePath.REMOTE else "local parser"

    lines: list[str] = []
    if outcome.warning:
        lines.append(f"[note] Remote parsing failed, used the local parser instead: {outcome.warning}")
    if not tasks:
        lines.append(f"No tasks found ({source}).")
        return "\n".join(lines)

    lines.append(f"Parsed {len(tasks)} task(s) via {source}:")
    lines.extend(format_parsed_task(i, t) for i, t in enumerate(tasks, start=1))
    lines.append("Use /add to confirm (or /add <n>).")
    return "\n".join(lines)


async def preview_task(state: AppState, text: str) -> str:
    """Parse one free-text task and keep it pending until /add."""
    outcome = await state.orchestrator.parse_task(text, use_remote=state.use_remote)
    state.pending = [outcome.result]
    return render_outcome(ParseOutcome([outcome.result], outcome.path, outcome.warning))


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def cmd_help(state: AppState, args: list[str], raw: str) -> str:
    return registry.build_help() + "\n  (any other text is parsed as a single task)"


def cmd_status(state: AppState, args: list[str], raw: str) -> str:
    settings = state.settings
    if not state.remote_available:
        remote = "unavailable (no API key)"
    else:
        remote = "ON" if state.use_remote else "OFF"
    return (
        "Status:\n"
        f"  Remote parsing: {remote}\n"
        f"  Models (task / transcript): {getattr(settings, 'llm_model', '?')} / "
        f"{getattr(settings, 'llm_transcript_model', '?')}\n"
        f"  Pending: {len(state.pending)}\n"
        f"  Confirmed tasks: {len(state.tasks)}"
    )


def cmd_remote(state: AppState, args: list[str], raw: str) -> str:
    """
    /remote       -> show status
    /remote on    -> prefer the hosted model
    /remote off   -> local parser only
    """
    if not args:
        return f"Remote parsing is currently {'ON' if state.use_remote else 'OFF'}. Use /remote on or /remote off."

    arg = args[0].lower()

    if arg in ("on", "1", "true", "yes"):
        state.use_remote = True
        state.orchestrator.use_remote = True
        if not state.remote_available:
            return "Remote parsing enabled, but no API key is configured: the local parser will be used."
        return "Remote parsing enabled."

    if arg in ("off", "0", "false", "no"):
        state.use_remote = False
        state.orchestrator.use_remote = False
        return "Remote parsing disabled. Using the local parser only."

    return "Usage: /remote on | /remote off"


async def cmd_meeting(state: AppState, args: list[str], raw: str, emit: CommandEmitter | None = None) -> str:
    if not raw:
        return "Usage: /meeting <transcript text>"

    if emit and state.use_remote and state.remote_available:
        emit("[meeting] Asking the hosted model...")

    outcome = await state.orchestrator.parse_transcript(raw, use_remote=state.use_remote)
    state.pending = list(outcome.result)
    return render_outcome(outcome)


def cmd_add(state: AppState, args: list[str], raw: str) -> str:
    if not state.pending:
        return "Nothing to add. Type a task or use /meeting first."

    if not args or args[0].lower() == "all":
        chosen = list(state.pending)
        state.pending.clear()
    else:
        try:
            idx = int(args[0])
        except ValueError:
            return "Usage: /add [n|all]"
        if not 1 <= idx <= len(state.pending):
            return f"No pending task #{idx} (have {len(state.pending)})."
        chosen = [state.pending.pop(idx - 1)]

    now = datetime.now().astimezone()
    added = [promote_parsed_task(p, now=now) for p in chosen]
    state.tasks.extend(added)
    logger.debug("Promoted %d task(s); total=%d", len(added), len(state.tasks))

    lines = [f"Added {len(added)} task(s):"]
    lines.extend(format_task(t) for t in added)
    return "\n".join(lines)


def cmd_tasks(state: AppState, args: list[str], raw: str) -> str:
    if not state.tasks:
        return "No tasks yet."
    lines = [f"Tasks ({len(state.tasks)}):"]
    lines.extend(format_task(t) for t in state.tasks)
    return "\n".join(lines)


def cmd_clear(state: AppState, args: list[str], raw: str) -> str:
    n_pending, n_tasks = len(state.pending), len(state.tasks)
    state.pending.clear()
    state.tasks.clear()
    return f"Cleared {n_pending} pending and {n_tasks} confirmed task(s)."


registry.register("help", cmd_help, "show this help", aliases=["h", "?"])
registry.register("status", cmd_status, "show remote parsing mode and task counts")
registry.register("remote", cmd_remote, "toggle hosted-model parsing: /remote on | /remote off")
registry.register(
    "meeting",
    cmd_meeting,
    "extract tasks from a transcript: /meeting <text>, or /meeting alone to paste lines (end with an empty line)",
)
registry.register("add", cmd_add, "confirm pending parsed tasks: /add [n|all]")
registry.register("tasks", cmd_tasks, "list confirmed tasks")
registry.register("clear", cmd_clear, "forget pending and confirmed tasks")
registry.register("exit", lambda state, args, raw: "Bye.", "quit", aliases=["quit"])

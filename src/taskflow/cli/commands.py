# src/taskflow/cli/commands.py

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any, cast

from ..core.errors import GenerationError, TaskflowError
from ..core.state import AppState
from ..llm.client import friendly_llm_error_message
from ..tasks.backup import export_backup, import_backup
from ..tasks.breakdown import BreakdownOutcome, BreakdownState
from ..tasks.task_models import FilterType, Priority, Task
from ..tasks.task_tree import build_task_tree
from .render import render_tree, short_id

CommandEmitter = Callable[[str], None]
CommandResult = str | Awaitable[str]
CommandHandler2 = Callable[[AppState, list[str]], CommandResult]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], CommandResult]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Slash-command registry used by the console (/help, /add, /break, ...)."""

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

        Recoverable task errors (bad import, AI failure, ...) are turned into
        the reply text; the store stays usable.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        try:
            if nparams >= 3:
                result = cast(CommandHandler3, handler)(state, args, emit)
            else:
                result = cast(CommandHandler2, handler)(state, args)
            if inspect.isawaitable(result):
                result = await result
        except TaskflowError as e:
            logger.info("Command /%s failed: %s", name, e)
            return str(e)
        return cast(str, result)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        lines.append("  (any line without a leading / adds a task)")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- helpers ----


def resolve_task(state: AppState, token: str) -> Task | str:
    """Find a task by full id or unique id prefix; returns an error message otherwise."""
    snapshot = state.store.snapshot()
    for t in snapshot:
        if t.id == token:
            return t
    matches = [t for t in snapshot if t.id.startswith(token)]
    if not matches:
        return f"No task matches id '{token}'."
    if len(matches) > 1:
        return f"Id '{token}' is ambiguous ({len(matches)} tasks). Use more characters."
    return matches[0]


def _task_arg(state: AppState, args: list[str], usage: str) -> Task | str:
    if not args:
        return f"Usage: {usage}"
    return resolve_task(state, args[0])


def _spawn(state: AppState, coro: Awaitable[None]) -> asyncio.Task[None]:
    job: asyncio.Task[None] = asyncio.ensure_future(coro)
    state.background_tasks.add(job)
    job.add_done_callback(state.background_tasks.discard)
    return job


def add_from_text(state: AppState, text: str) -> str:
    """/add semantics for a raw line: optional leading !high / !low / !medium."""
    words = text.split()
    priority = Priority.MEDIUM
    if words and words[0].startswith("!"):
        priority = Priority.parse(words[0][1:])
        words = words[1:]
    if not words:
        return "Usage: /add [!high|!low] <text>"
    task = state.store.add(" ".join(words), priority)
    return f"Added {short_id(task.id)} ({task.priority.value}): {task.text}"


# ---- handlers ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_add(state: AppState, args: list[str]) -> str:
    return add_from_text(state, " ".join(args))


def cmd_sub(state: AppState, args: list[str]) -> str:
    """/sub <id> <text> -> add a manual subtask (parent gets expanded)."""
    task = _task_arg(state, args, "/sub <id> <text>")
    if isinstance(task, str):
        return task
    text = " ".join(args[1:]).strip()
    if not text:
        return "Usage: /sub <id> <text>"
    if task.is_child:
        return "Subtasks can only be added to top-level tasks."
    child = state.store.add_subtask(task.id, text)
    if child is None:
        return f"Task {short_id(task.id)} no longer exists."
    return f"Added subtask {short_id(child.id)} under {short_id(task.id)}: {child.text}"


def cmd_done(state: AppState, args: list[str]) -> str:
    task = _task_arg(state, args, "/done <id>")
    if isinstance(task, str):
        return task
    state.store.toggle_completed(task.id)
    status = "active" if task.completed else "completed"
    return f"Marked {short_id(task.id)} as {status}."


def cmd_fold(state: AppState, args: list[str]) -> str:
    task = _task_arg(state, args, "/fold <id>")
    if isinstance(task, str):
        return task
    state.store.toggle_expanded(task.id)
    return f"{'Collapsed' if task.expanded else 'Expanded'} {short_id(task.id)}."


def cmd_prio(state: AppState, args: list[str]) -> str:
    task = _task_arg(state, args, "/prio <id> low|medium|high")
    if isinstance(task, str):
        return task
    if len(args) < 2 or args[1].lower() not in {p.value for p in Priority}:
        return "Usage: /prio <id> low|medium|high"
    priority = Priority(args[1].lower())
    state.store.set_priority(task.id, priority)
    return f"Priority of {short_id(task.id)} set to {priority.value}."


def cmd_rm(state: AppState, args: list[str]) -> str:
    task = _task_arg(state, args, "/rm <id>")
    if isinstance(task, str):
        return task
    removed = state.store.delete(task.id)
    extra = f" (and {removed - 1} subtasks)" if removed > 1 else ""
    return f"Deleted {short_id(task.id)}{extra}."


def cmd_list(state: AppState, args: list[str]) -> str:
    """
    /list               -> show tasks with the current filter
    /list active        -> switch filter (all | active | completed) and show
    """
    if args:
        try:
            state.filter = FilterType.parse(args[0])
        except ValueError as e:
            return str(e)

    tree = build_task_tree(state.store.snapshot(), state.filter)
    active, _ = state.store.counts()
    header = f"My Tasks [{state.filter.value.lower()}] - you have {active} active tasks"
    return header + "\n" + render_tree(tree, busy_ids=state.synchronizer.breaking_down_ids)


_OUTCOME_MESSAGES = {
    BreakdownOutcome.APPLIED: "[AI] Subtasks ready for {sid}.",
    BreakdownOutcome.NO_SUGGESTIONS: "[AI] No subtasks suggested for {sid}; kept the existing ones.",
    BreakdownOutcome.MISSING: "[AI] Task {sid} was deleted; suggestions discarded.",
    BreakdownOutcome.BUSY: "[AI] Task {sid} is already being broken down.",
    BreakdownOutcome.NESTED: "[AI] Only top-level tasks can be broken down.",
}


async def _run_breakdown(state: AppState, task_id: str, emit: CommandEmitter | None) -> None:
    try:
        outcome = await state.synchronizer.break_down(task_id)
        msg = _OUTCOME_MESSAGES[outcome].format(sid=short_id(task_id))
    except GenerationError as e:
        msg = f"[AI] {friendly_llm_error_message(e)}"
    except Exception:
        logger.exception("Breakdown crashed task_id=%s", task_id)
        msg = "[AI] Internal error while generating subtasks."
    if emit is not None:
        emit(msg)


def cmd_break(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """/break <id> -> regenerate the task's subtasks with AI (runs in background)."""
    task = _task_arg(state, args, "/break <id>")
    if isinstance(task, str):
        return task
    if task.is_child:
        return _OUTCOME_MESSAGES[BreakdownOutcome.NESTED]
    if state.synchronizer.state_of(task.id) == BreakdownState.BREAKING_DOWN:
        return _OUTCOME_MESSAGES[BreakdownOutcome.BUSY].format(sid=short_id(task.id))

    _spawn(state, _run_breakdown(state, task.id, emit))
    return f"[AI] Breaking down {short_id(task.id)}: {task.text} ..."


async def fetch_insight(state: AppState) -> str:
    active, completed = state.store.counts()
    try:
        text = await state.insight_generator.insight(active, completed)
    except GenerationError as e:
        return f"[AI] {friendly_llm_error_message(e)}"
    state.insight = text
    return f"[AI] {text}"


async def cmd_insight(state: AppState, args: list[str]) -> str:
    return await fetch_insight(state)


def cmd_export(state: AppState, args: list[str]) -> str:
    directory = args[0] if args else state.settings.backup_dir
    path = export_backup(state.store.snapshot(), directory)
    return f"Exported {len(state.store)} tasks to {path}"


def cmd_import(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /import <file>"
    result = import_backup(state.store, " ".join(args))
    if result.nothing_new:
        return "No new tasks found in backup (all tasks already exist)."
    return f"Imported {result.added} new tasks."


def cmd_status(state: AppState, args: list[str]) -> str:
    settings: Any = state.settings
    active, completed = state.store.counts()
    models = ", ".join(list(getattr(settings, "llm_models", []) or []))
    busy = state.synchronizer.breaking_down_id
    return (
        "Status:\n"
        f"  Tasks: {len(state.store)} ({active} active, {completed} completed), version {state.store.version}\n"
        f"  Storage: {getattr(settings, 'tasks_path', '-')}\n"
        f"  LLM client: {type(state.llm).__name__}\n"
        f"  Models (priority -> fallback): {models}\n"
        f"  Breaking down: {short_id(busy) if busy else '-'}"
    )


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("add", cmd_add, help_text="Add a task: /add [!high|!low] <text>.", aliases=["a"])
registry.register("sub", cmd_sub, help_text="Add a subtask: /sub <id> <text>.")
registry.register("done", cmd_done, help_text="Toggle completion: /done <id>.", aliases=["x"])
registry.register("fold", cmd_fold, help_text="Collapse/expand a task: /fold <id>.")
registry.register("prio", cmd_prio, help_text="Set priority: /prio <id> low|medium|high.")
registry.register("rm", cmd_rm, help_text="Delete a task and its subtasks: /rm <id>.", aliases=["del"])
registry.register("list", cmd_list, help_text="Show tasks: /list [all|active|completed].", aliases=["ls"])
registry.register("break", cmd_break, help_text="AI breakdown into subtasks: /break <id>.")
registry.register("insight", cmd_insight, help_text="Get an AI productivity tip.")
registry.register("export", cmd_export, help_text="Write a JSON backup: /export [dir].")
registry.register("import", cmd_import, help_text="Merge a JSON backup: /import <file>.")
registry.register("status", cmd_status, help_text="Show storage / model status.")

# src/taskflow/cli/console.py

from __future__ import annotations

import asyncio
import contextlib
import logging
from datetime import datetime

from ..core.state import AppState
from .commands import add_from_text, fetch_insight
from .commands import registry as command_registry

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


async def _initial_insight(state: AppState) -> None:
    _print_ts(await fetch_insight(state))


async def run_console_loop(state: AppState) -> None:
    """
    Interactive REPL.

    input() runs in a worker thread, so background jobs (AI breakdowns) keep
    progressing and the user can keep editing tasks while they run.
    """
    logger.info("Console started (tasks=%s).", len(state.store))
    app_name = str(getattr(state.settings, "app_name", "taskflow"))
    _print_ts(f"[{app_name}] Type a task to add it. Use /help for commands, /exit to quit.\n")

    def emit(text: str) -> None:
        # Background results (AI breakdown finished, ...)
        _print_ts(text)

    if len(state.store):
        job = asyncio.ensure_future(_initial_insight(state))
        state.background_tasks.add(job)
        job.add_done_callback(state.background_tasks.discard)

    while True:
        try:
            line = (await asyncio.to_thread(input, "> ")).strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not line:
            continue

        if line.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            reply = await command_registry.handle(state, line, emit=emit)
            if reply is None:
                reply = add_from_text(state, line)
        except Exception:
            logger.exception("Command handler crashed.")
            reply = "Internal error while handling a command."

        _print_ts(reply)

    pending = list(state.background_tasks)
    for job in pending:
        job.cancel()
    for job in pending:
        with contextlib.suppress(asyncio.CancelledError):
            await job

    logger.info("Console finished.")

# src/taskflow/tasks/breakdown.py

from __future__ import annotations

"""
Subtree synchronizer ("break task into subtasks").

Per task id: IDLE -> BREAKING_DOWN -> IDLE.

Protocol for one request on task T:
1. expand T, mark it BREAKING_DOWN
2. await the subtask generator with T's text (the store stays usable meanwhile)
3. non-empty result: replace T's children in one store transition;
   empty result: keep the existing children
4. generator failure: no mutation, GenerationError to the caller
5. always return T to IDLE

If T is deleted while the request is in flight, the result is dropped.
A second request for a task that is already BREAKING_DOWN is rejected (BUSY);
requests for different tasks may run concurrently.
"""

import logging
from enum import Enum

from ..core.errors import GenerationError
from ..core.ports import SubtaskGenerator
from .task_store import TaskStore

logger = logging.getLogger(__name__)


class BreakdownState(str, Enum):
    IDLE = "idle"
    BREAKING_DOWN = "breaking_down"


class BreakdownOutcome(str, Enum):
    APPLIED = "applied"
    NO_SUGGESTIONS = "no_suggestions"
    BUSY = "busy"
    MISSING = "missing"
    NESTED = "nested"


class SubtaskSynchronizer:
    def __init__(self, store: TaskStore, generator: SubtaskGenerator) -> None:
        self._store = store
        self._generator = generator
        # insertion order == start order; last key is the most recent request
        self._in_flight: dict[str, None] = {}

    def state_of(self, task_id: str) -> BreakdownState:
        if task_id in self._in_flight:
            return BreakdownState.BREAKING_DOWN
        return BreakdownState.IDLE

    @property
    def breaking_down_ids(self) -> frozenset[str]:
        return frozenset(self._in_flight)

    @property
    def breaking_down_id(self) -> str | None:
        """Most recently started in-flight task id (what the UI highlights)."""
        if not self._in_flight:
            return None
        return next(reversed(self._in_flight))

    async def break_down(self, task_id: str) -> BreakdownOutcome:
        task = self._store.get(task_id)
        if task is None:
            logger.debug("break_down: stale id=%s", task_id)
            return BreakdownOutcome.MISSING
        if task.is_child:
            return BreakdownOutcome.NESTED
        if task_id in self._in_flight:
            logger.info("break_down: already in progress id=%s", task_id)
            return BreakdownOutcome.BUSY

        self._store.expand(task_id)
        self._in_flight[task_id] = None
        logger.info("break_down: started id=%s", task_id)

        try:
            try:
                suggestions = await self._generator.break_down(task.text)
            except GenerationError:
                logger.info("break_down: generator failed id=%s", task_id)
                raise
            except Exception as e:
                logger.info("break_down: generator failed id=%s (%s)", task_id, e.__class__.__name__)
                raise GenerationError("Could not generate subtasks. Try again.") from e

            if not suggestions:
                logger.info("break_down: no suggestions id=%s", task_id)
                return BreakdownOutcome.NO_SUGGESTIONS

            if not self._store.replace_children(task_id, suggestions):
                logger.info("break_down: task deleted while in flight id=%s", task_id)
                return BreakdownOutcome.MISSING

            logger.info("break_down: applied id=%s subtasks=%s", task_id, len(suggestions))
            return BreakdownOutcome.APPLIED
        finally:
            self._in_flight.pop(task_id, None)

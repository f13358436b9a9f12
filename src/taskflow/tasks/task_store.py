# src/taskflow/tasks/task_store.py

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Callable, Iterable, Sequence
from dataclasses import replace
from typing import Any

from ..core.ports import TaskPersistence
from .task_import import ImportResult, resolve_import
from .task_models import AiSuggestion, Priority, Task

logger = logging.getLogger(__name__)

Clock = Callable[[], int]
IdFactory = Callable[[], str]


def now_ms() -> int:
    return int(time.time() * 1000)


def new_id() -> str:
    return str(uuid.uuid4())


# ---- pure operations ----
#
# Each function takes the current collection and returns a new list.
# The input is never mutated. Unknown ids leave the collection unchanged.


def _clean_text(text: str) -> str:
    clean = (text or "").strip()
    if not clean:
        raise ValueError("task text is required")
    return clean


def _update_one(tasks: Sequence[Task], task_id: str, fn: Callable[[Task], Task]) -> list[Task]:
    return [fn(t) if t.id == task_id else t for t in tasks]


def find_task(tasks: Iterable[Task], task_id: str) -> Task | None:
    for t in tasks:
        if t.id == task_id:
            return t
    return None


def add_task(
    tasks: Sequence[Task],
    text: str,
    *,
    priority: Priority = Priority.MEDIUM,
    ai_generated: bool = False,
    clock: Clock = now_ms,
    id_factory: IdFactory = new_id,
) -> list[Task]:
    task = Task(
        id=id_factory(),
        text=_clean_text(text),
        created_at=clock(),
        priority=priority,
        is_ai_generated=ai_generated,
        is_expanded=True,
    )
    return [task, *tasks]


def add_subtask(
    tasks: Sequence[Task],
    parent_id: str,
    text: str,
    *,
    clock: Clock = now_ms,
    id_factory: IdFactory = new_id,
) -> list[Task]:
    """
    Append a manual child under parent_id and force the parent expanded.

    No-op when the parent is missing (stale id) or is itself a child
    (children are exactly one level deep).
    """
    clean = _clean_text(text)

    parent = find_task(tasks, parent_id)
    if parent is None:
        logger.debug("add_subtask: stale parent id=%s", parent_id)
        return list(tasks)
    if parent.is_child:
        logger.debug("add_subtask: refusing nested subtask under child id=%s", parent_id)
        return list(tasks)

    child = Task(
        id=id_factory(),
        text=clean,
        created_at=clock(),
        parent_id=parent_id,
        is_expanded=True,
    )
    updated = _update_one(tasks, parent_id, lambda t: replace(t, is_expanded=True))
    updated.append(child)
    return updated


def toggle_completed(tasks: Sequence[Task], task_id: str) -> list[Task]:
    return _update_one(tasks, task_id, lambda t: replace(t, completed=not t.completed))


def toggle_expanded(tasks: Sequence[Task], task_id: str) -> list[Task]:
    return _update_one(tasks, task_id, lambda t: replace(t, is_expanded=not t.expanded))


def expand_task(tasks: Sequence[Task], task_id: str) -> list[Task]:
    return _update_one(tasks, task_id, lambda t: replace(t, is_expanded=True))


def set_priority(tasks: Sequence[Task], task_id: str, priority: Priority) -> list[Task]:
    return _update_one(tasks, task_id, lambda t: replace(t, priority=priority))


def delete_task(tasks: Sequence[Task], task_id: str) -> list[Task]:
    """Remove the task and every task whose parent_id is task_id (one level)."""
    return [t for t in tasks if t.id != task_id and t.parent_id != task_id]


def replace_children(
    tasks: Sequence[Task],
    parent_id: str,
    suggestions: Sequence[AiSuggestion],
    *,
    clock: Clock = now_ms,
    id_factory: IdFactory = new_id,
) -> list[Task]:
    """
    Regenerate parent_id's subtree: drop all of its children, keep it
    expanded, append one AI child per suggestion.

    No-op when the parent no longer exists (no resurrection of children).
    """
    if find_task(tasks, parent_id) is None:
        logger.debug("replace_children: stale parent id=%s", parent_id)
        return list(tasks)

    created_at = clock()
    fresh = [
        Task(
            id=id_factory(),
            text=_clean_text(s.text),
            created_at=created_at,
            priority=s.priority,
            is_ai_generated=True,
            parent_id=parent_id,
            is_expanded=True,
        )
        for s in suggestions
    ]

    kept = [
        replace(t, is_expanded=True) if t.id == parent_id else t
        for t in tasks
        if t.parent_id != parent_id
    ]
    return kept + fresh


def dedupe_ids(tasks: Iterable[Task]) -> list[Task]:
    """Keep the first task for every id."""
    seen: set[str] = set()
    out: list[Task] = []
    for t in tasks:
        if t.id in seen:
            continue
        seen.add(t.id)
        out.append(t)
    return out


# ---- owning store ----


class TaskStore:
    """
    In-memory owner of the canonical task collection.

    - holds an immutable snapshot (tuple of frozen Tasks) and a version number
    - every public mutation applies one pure operation and commits its result
      as a single transition
    - a commit only happens when the collection actually changed
    - after each commit the optional persistence hook receives the full
      collection; save failures are logged and do not roll back memory state
    """

    def __init__(
        self,
        tasks: Iterable[Task] = (),
        *,
        persistence: TaskPersistence | None = None,
        clock: Clock = now_ms,
        id_factory: IdFactory = new_id,
    ) -> None:
        self._tasks: tuple[Task, ...] = tuple(dedupe_ids(tasks))
        self._version = 0
        self._persistence = persistence
        self._clock = clock
        self._id_factory = id_factory

    @classmethod
    def load(
        cls,
        persistence: TaskPersistence,
        *,
        clock: Clock = now_ms,
        id_factory: IdFactory = new_id,
    ) -> TaskStore:
        """Build a store from persisted records, skipping malformed ones."""
        tasks: list[Task] = []
        for raw in persistence.load():
            if not isinstance(raw, dict):
                continue
            try:
                tasks.append(Task.from_dict(raw))
            except ValueError:
                logger.warning("Skipping malformed persisted task record: %r", raw)

        store = cls(tasks, persistence=persistence, clock=clock, id_factory=id_factory)
        logger.info("TaskStore ready total=%s", len(store))
        return store

    # ---- read side ----

    @property
    def version(self) -> int:
        return self._version

    def snapshot(self) -> tuple[Task, ...]:
        return self._tasks

    def get(self, task_id: str) -> Task | None:
        return find_task(self._tasks, task_id)

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_id: object) -> bool:
        return any(t.id == task_id for t in self._tasks)

    def counts(self) -> tuple[int, int]:
        """(active, completed) across the whole collection."""
        done = sum(1 for t in self._tasks if t.completed)
        return len(self._tasks) - done, done

    def to_records(self) -> list[dict[str, Any]]:
        return [t.to_dict() for t in self._tasks]

    # ---- commit ----

    def _commit(self, new_tasks: Sequence[Task], *, op: str) -> bool:
        candidate = tuple(new_tasks)
        if candidate == self._tasks:
            return False

        self._tasks = candidate
        self._version += 1
        logger.debug("TaskStore %s -> version=%s total=%s", op, self._version, len(candidate))

        if self._persistence is not None:
            try:
                self._persistence.save(self.to_records())
            except Exception:
                logger.exception("TaskStore save failed after %s (version=%s)", op, self._version)
        return True

    # ---- mutations ----

    def add(
        self,
        text: str,
        priority: Priority = Priority.MEDIUM,
        *,
        ai_generated: bool = False,
    ) -> Task:
        new_tasks = add_task(
            self._tasks,
            text,
            priority=priority,
            ai_generated=ai_generated,
            clock=self._clock,
            id_factory=self._id_factory,
        )
        self._commit(new_tasks, op="add")
        return new_tasks[0]

    def add_subtask(self, parent_id: str, text: str) -> Task | None:
        """Returns the new child, or None when the parent id is stale/nested."""
        new_tasks = add_subtask(
            self._tasks,
            parent_id,
            text,
            clock=self._clock,
            id_factory=self._id_factory,
        )
        if not self._commit(new_tasks, op="add_subtask"):
            return None
        child = new_tasks[-1]
        return child if child.parent_id == parent_id else None

    def toggle_completed(self, task_id: str) -> bool:
        return self._commit(toggle_completed(self._tasks, task_id), op="toggle_completed")

    def toggle_expanded(self, task_id: str) -> bool:
        return self._commit(toggle_expanded(self._tasks, task_id), op="toggle_expanded")

    def expand(self, task_id: str) -> bool:
        return self._commit(expand_task(self._tasks, task_id), op="expand")

    def set_priority(self, task_id: str, priority: Priority) -> bool:
        return self._commit(set_priority(self._tasks, task_id, priority), op="set_priority")

    def delete(self, task_id: str) -> int:
        """Returns how many tasks were removed (0 for a stale id)."""
        before = len(self._tasks)
        self._commit(delete_task(self._tasks, task_id), op="delete")
        return before - len(self._tasks)

    def replace_children(self, parent_id: str, suggestions: Sequence[AiSuggestion]) -> bool:
        """
        False when the parent no longer exists. An empty suggestion list
        keeps the existing children.
        """
        if parent_id not in self:
            logger.debug("replace_children: stale parent id=%s", parent_id)
            return False
        if not suggestions:
            return True
        new_tasks = replace_children(
            self._tasks,
            parent_id,
            suggestions,
            clock=self._clock,
            id_factory=self._id_factory,
        )
        self._commit(new_tasks, op="replace_children")
        return True

    def merge(self, payload: Any) -> ImportResult:
        """
        Validate and merge an external record list.

        Raises ImportValidationError for malformed payloads. A result with
        nothing_new=True leaves the store untouched.
        """
        result = resolve_import(self._tasks, payload)
        if not result.nothing_new:
            self._commit(result.tasks, op="merge")
        logger.info("Import: added=%s skipped=%s", result.added, result.skipped)
        return result

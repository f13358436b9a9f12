# src/taskflow/tasks/task_import.py

"""
Merge/import resolver.

Validates an externally supplied task list and merges it into the current
collection by id. Purely additive: existing tasks are never rewritten and no
ids are invented.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from ..core.errors import ImportValidationError
from .task_models import Task


@dataclass(slots=True, frozen=True)
class ImportResult:
    tasks: tuple[Task, ...]
    added: int
    skipped: int

    @property
    def nothing_new(self) -> bool:
        return self.added == 0


def parse_import_records(payload: Any) -> list[Task]:
    """
    All-or-nothing validation: the payload must be a list of mappings, each
    with a non-empty id and a non-empty text.
    """
    if not isinstance(payload, list):
        raise ImportValidationError("Invalid backup format: expected a list of tasks.")

    tasks: list[Task] = []
    for i, raw in enumerate(payload):
        if not isinstance(raw, dict):
            raise ImportValidationError(f"Invalid backup format: item #{i} is not an object.")
        try:
            tasks.append(Task.from_dict(raw))
        except ValueError as e:
            raise ImportValidationError(f"Invalid backup format: item #{i}: {e}.") from e
    return tasks


def merge_tasks(existing: Sequence[Task], incoming: Sequence[Task]) -> list[Task]:
    """
    existing + every incoming task whose id is new, sorted by createdAt
    (newest first, stable). Repeated ids inside the incoming batch keep the
    first occurrence. Returns existing unchanged when nothing is new.
    """
    seen = {t.id for t in existing}
    unique: list[Task] = []
    for t in incoming:
        if t.id in seen:
            continue
        seen.add(t.id)
        unique.append(t)

    if not unique:
        return list(existing)

    combined = [*existing, *unique]
    combined.sort(key=lambda t: t.created_at, reverse=True)
    return combined


def resolve_import(existing: Sequence[Task], payload: Any) -> ImportResult:
    incoming = parse_import_records(payload)
    merged = merge_tasks(existing, incoming)
    added = len(merged) - len(existing)
    return ImportResult(
        tasks=tuple(merged),
        added=added,
        skipped=len(incoming) - added,
    )

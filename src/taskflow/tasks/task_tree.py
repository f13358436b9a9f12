# src/taskflow/tasks/task_tree.py

"""
Two-level display tree derived from the flat task collection.

Steps (run on every read, no state kept between calls):
1. filter (ALL / ACTIVE / COMPLETED)
2. classify roots: no parent_id, or the parent is not in the filtered set
   (orphan self-healing, re-applied per filter view)
3. group the remaining tasks by parent_id
4. sort roots and every child group with sort_key()
"""

from __future__ import annotations

from collections.abc import Collection, Iterable, Iterator, Sequence
from dataclasses import dataclass, field

from .task_models import FilterType, Task


def apply_filter(tasks: Iterable[Task], filter_type: FilterType = FilterType.ALL) -> list[Task]:
    if filter_type == FilterType.ACTIVE:
        return [t for t in tasks if not t.completed]
    if filter_type == FilterType.COMPLETED:
        return [t for t in tasks if t.completed]
    return list(tasks)


def is_root(task: Task, visible_ids: Collection[str]) -> bool:
    return task.parent_id is None or task.parent_id not in visible_ids


def sort_key(task: Task) -> tuple[int, int, str]:
    # priority desc, createdAt desc, id asc
    return (-task.priority.weight, -task.created_at, task.id)


def sort_tasks(tasks: Iterable[Task]) -> list[Task]:
    return sorted(tasks, key=sort_key)


@dataclass(slots=True, frozen=True)
class TaskTree:
    roots: tuple[Task, ...] = ()
    children: dict[str, tuple[Task, ...]] = field(default_factory=dict)

    def children_of(self, task_id: str) -> tuple[Task, ...]:
        return self.children.get(task_id, ())

    def progress(self, task_id: str) -> tuple[int, int] | None:
        """(completed children, total children), or None without children."""
        kids = self.children_of(task_id)
        if not kids:
            return None
        return sum(1 for t in kids if t.completed), len(kids)

    def __iter__(self) -> Iterator[Task]:
        yield from self.roots
        for group in self.children.values():
            yield from group

    def __len__(self) -> int:
        return len(self.roots) + sum(len(g) for g in self.children.values())


def build_task_tree(tasks: Sequence[Task], filter_type: FilterType = FilterType.ALL) -> TaskTree:
    visible = apply_filter(tasks, filter_type)
    visible_ids = {t.id for t in visible}

    roots: list[Task] = []
    groups: dict[str, list[Task]] = {}
    for task in visible:
        if is_root(task, visible_ids):
            roots.append(task)
        else:
            groups.setdefault(task.parent_id, []).append(task)  # type: ignore[arg-type]

    return TaskTree(
        roots=tuple(sort_tasks(roots)),
        children={pid: tuple(sort_tasks(group)) for pid, group in groups.items()},
    )

# src/taskflow/cli/render.py

from __future__ import annotations

from collections.abc import Collection

from ..tasks.task_models import Priority, Task
from ..tasks.task_tree import TaskTree

SHORT_ID_LEN = 8

_PRIORITY_LABEL = {
    Priority.HIGH: "HIGH",
    Priority.MEDIUM: "MED ",
    Priority.LOW: "LOW ",
}


def short_id(task_id: str) -> str:
    return task_id[:SHORT_ID_LEN]


def _line(
    task: Task,
    *,
    indent: str,
    progress: tuple[int, int] | None,
    busy: bool,
    fold_marker: str,
) -> str:
    box = "[x]" if task.completed else "[ ]"
    parts = [f"{indent}{fold_marker}{box} {_PRIORITY_LABEL[task.priority]} {short_id(task.id)}  {task.text}"]
    if progress is not None:
        done, total = progress
        parts.append(f"({done}/{total})")
    if task.is_ai_generated:
        parts.append("*AI")
    if busy:
        parts.append("... breaking down")
    return " ".join(parts)


def render_tree(tree: TaskTree, *, busy_ids: Collection[str] = ()) -> str:
    """
    Plain-text view of the task tree.

    Children are listed under their root unless the root is collapsed;
    collapsed roots show '+', expanded roots with children show '-'.
    """
    if not tree.roots:
        return "All caught up! You have no tasks on your list."

    lines: list[str] = []
    for root in tree.roots:
        kids = tree.children_of(root.id)
        if kids:
            fold = "- " if root.expanded else "+ "
        else:
            fold = "  "
        lines.append(
            _line(
                root,
                indent="",
                progress=tree.progress(root.id),
                busy=root.id in busy_ids,
                fold_marker=fold,
            )
        )
        if not root.expanded:
            continue
        for child in kids:
            lines.append(_line(child, indent="    ", progress=None, busy=False, fold_marker=""))
    return "\n".join(lines)

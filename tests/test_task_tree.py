# tests/test_task_tree.py

from __future__ import annotations

from collections import Counter

import pytest

from taskflow.tasks.task_models import FilterType, Priority
from taskflow.tasks.task_tree import build_task_tree, is_root

from .fakes import make_task


def _mixed():
    return [
        make_task("p1", priority=Priority.HIGH, created_at=10),
        make_task("c1", parent_id="p1", completed=True, created_at=11),
        make_task("c2", parent_id="p1", created_at=12),
        make_task("p2", completed=True, created_at=20),
        make_task("c3", parent_id="p2", created_at=21),
        make_task("c4", parent_id="p2", completed=True, created_at=22),
        make_task("orphan", parent_id="deleted", created_at=30),
        make_task("p3", priority=Priority.LOW, created_at=40),
    ]


def test_progress_counts_completed_children() -> None:
    tasks = [
        make_task("1", "Plan trip", priority=Priority.HIGH),
        make_task("2", parent_id="1", completed=True),
        make_task("3", parent_id="1"),
    ]
    tree = build_task_tree(tasks, FilterType.ALL)

    assert tree.progress("1") == (1, 2)


def test_progress_is_none_without_children() -> None:
    tree = build_task_tree([make_task("1")])
    assert tree.progress("1") is None


def test_roots_sorted_by_priority_then_newest_first() -> None:
    tasks = [
        make_task("low-new", priority=Priority.LOW, created_at=300),
        make_task("high-old", priority=Priority.HIGH, created_at=100),
        make_task("med-old", created_at=100),
        make_task("high-new", priority=Priority.HIGH, created_at=200),
        make_task("med-new", created_at=200),
    ]
    tree = build_task_tree(tasks)

    assert [t.id for t in tree.roots] == ["high-new", "high-old", "med-new", "med-old", "low-new"]


def test_child_groups_use_the_same_ordering() -> None:
    tasks = [
        make_task("p"),
        make_task("a", parent_id="p", priority=Priority.LOW, created_at=5),
        make_task("b", parent_id="p", priority=Priority.HIGH, created_at=1),
        make_task("c", parent_id="p", created_at=9),
    ]
    tree = build_task_tree(tasks)

    assert [t.id for t in tree.children_of("p")] == ["b", "c", "a"]


def test_equal_keys_are_ordered_deterministically() -> None:
    tasks = [make_task(i, created_at=7) for i in ("d", "b", "a", "c")]

    first = [t.id for t in build_task_tree(tasks).roots]
    again = [t.id for t in build_task_tree(list(reversed(tasks))).roots]

    assert first == again == ["a", "b", "c", "d"]


def test_orphan_with_missing_parent_becomes_root() -> None:
    tree = build_task_tree(_mixed())

    assert "orphan" in {t.id for t in tree.roots}
    assert "deleted" not in tree.children


def test_child_of_filtered_out_parent_becomes_root() -> None:
    tree = build_task_tree(_mixed(), FilterType.ACTIVE)

    root_ids = {t.id for t in tree.roots}
    # p2 is completed, so its active child c3 is promoted
    assert "c3" in root_ids
    assert "p2" not in root_ids
    assert [t.id for t in tree.children_of("p1")] == ["c2"]


def test_completed_filter() -> None:
    tree = build_task_tree(_mixed(), FilterType.COMPLETED)

    assert {t.id for t in tree} == {"c1", "p2", "c4"}
    assert {t.id for t in tree.roots} == {"c1", "p2"}
    assert tree.progress("p2") == (1, 1)


@pytest.mark.parametrize("filter_type", list(FilterType))
def test_every_visible_task_is_placed_exactly_once(filter_type: FilterType) -> None:
    tasks = _mixed()
    tree = build_task_tree(tasks, filter_type)

    placed = Counter(t.id for t in tree)
    assert all(n == 1 for n in placed.values())
    assert len(tree) == len(placed)

    for parent_id, group in tree.children.items():
        assert all(t.parent_id == parent_id for t in group)


def test_is_root_classification() -> None:
    child = make_task("c", parent_id="p")
    assert is_root(make_task("p"), {"p", "c"})
    assert not is_root(child, {"p", "c"})
    assert is_root(child, {"c"})

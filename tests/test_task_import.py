# tests/test_task_import.py

from __future__ import annotations

import pytest

from taskflow.core.errors import ImportValidationError
from taskflow.tasks.task_import import merge_tasks, parse_import_records, resolve_import
from taskflow.tasks.task_models import Priority
from taskflow.tasks.task_store import TaskStore

from .fakes import MemoryPersistence, make_task


def test_import_adds_only_unknown_ids() -> None:
    store = TaskStore([make_task("1", "Existing")])

    result = store.merge([{"id": 1, "text": "X"}, {"id": 2, "text": "Y"}])

    assert result.added == 1
    assert result.skipped == 1
    assert len(store) == 2
    assert store.get("2").text == "Y"
    # existing record is never rewritten
    assert store.get("1").text == "Existing"


def test_record_without_text_rejects_whole_batch() -> None:
    persistence = MemoryPersistence()
    store = TaskStore([make_task("1")], persistence=persistence)
    before = store.snapshot()

    with pytest.raises(ImportValidationError):
        store.merge([{"id": "ok", "text": "Fine"}, {"id": "bad"}])

    assert store.snapshot() == before
    assert persistence.saves == []


@pytest.mark.parametrize(
    "payload",
    [
        {"id": "1", "text": "not a list"},
        "[]",
        None,
        [["id", "text"]],
        [{"text": "no id"}],
        [{"id": "", "text": "blank id"}],
        [{"id": True, "text": "bool id"}],
        [{"id": "x", "text": "   "}],
    ],
)
def test_malformed_payloads_are_rejected(payload) -> None:
    with pytest.raises(ImportValidationError):
        parse_import_records(payload)


def test_nothing_new_is_a_status_not_a_mutation() -> None:
    persistence = MemoryPersistence()
    store = TaskStore([make_task("1"), make_task("2")], persistence=persistence)

    result = store.merge([{"id": "1", "text": "a"}, {"id": "2", "text": "b"}])

    assert result.nothing_new
    assert store.version == 0
    assert persistence.saves == []


def test_merge_is_idempotent_on_ids() -> None:
    existing = [make_task("a", created_at=1), make_task("b", created_at=2)]
    incoming = parse_import_records(
        [
            {"id": "b", "text": "dup", "createdAt": 9},
            {"id": "c", "text": "new", "createdAt": 3},
            {"id": "d", "text": "new too", "createdAt": 0},
        ]
    )

    once = merge_tasks(existing, incoming)
    twice = merge_tasks(once, incoming)

    assert {t.id for t in once} == {t.id for t in twice} == {"a", "b", "c", "d"}


def test_merge_sorts_by_created_at_newest_first() -> None:
    existing = [make_task("old", created_at=10), make_task("mid", created_at=20)]
    incoming = [make_task("new", created_at=30), make_task("older", created_at=5)]

    merged = merge_tasks(existing, incoming)

    assert [t.id for t in merged] == ["new", "mid", "old", "older"]


def test_repeated_ids_inside_one_batch_keep_first() -> None:
    result = resolve_import([], [{"id": "x", "text": "first"}, {"id": "x", "text": "second"}])

    assert result.added == 1
    assert result.skipped == 1
    assert [t.text for t in result.tasks] == ["first"]


def test_imported_fields_are_read_leniently() -> None:
    [task] = parse_import_records(
        [
            {
                "id": "k",
                "text": "Child",
                "priority": "urgent",
                "parentId": "p",
                "isAiGenerated": True,
                "completed": True,
            }
        ]
    )

    assert task.priority == Priority.MEDIUM
    assert task.parent_id == "p"
    assert task.is_ai_generated is True
    assert task.completed is True
    assert task.created_at == 0
    assert task.is_expanded is None


def test_non_finite_created_at_reads_as_zero() -> None:
    store = TaskStore([make_task("1", "Existing")])

    result = store.merge(
        [
            {"id": "2", "text": "Y", "createdAt": float("inf")},
            {"id": "3", "text": "Z", "createdAt": float("nan")},
        ]
    )

    assert result.added == 2
    assert store.get("2").created_at == 0
    assert store.get("3").created_at == 0


def test_string_flags_are_parsed_not_truthy() -> None:
    done, open_, odd = parse_import_records(
        [
            {"id": "a", "text": "A", "completed": "true", "isExpanded": "no"},
            {"id": "b", "text": "B", "completed": "false", "isAiGenerated": "0"},
            {"id": "c", "text": "C", "completed": "maybe", "isExpanded": "maybe"},
        ]
    )

    assert done.completed is True
    assert done.is_expanded is False
    assert open_.completed is False
    assert open_.is_ai_generated is False
    assert odd.completed is False
    assert odd.is_expanded is None

# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from taskflow.core.state import AppState
from taskflow.tasks.breakdown import SubtaskSynchronizer
from taskflow.tasks.task_models import Priority
from taskflow.tasks.task_store import TaskStore

from .fakes import (
    FakeInsightGenerator,
    FakeLLMClient,
    MemoryPersistence,
    ScriptedSubtaskGenerator,
    SequentialIds,
    StepClock,
    make_task,
)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the CLI.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskflow-test",
        data_dir=tmp_path,
        tasks_path=tmp_path / "tasks.json",
        backup_dir=tmp_path / "backups",
        llm_models=["fake/model"],
        offline=True,
    )


@pytest.fixture()
def persistence() -> MemoryPersistence:
    return MemoryPersistence()


@pytest.fixture()
def store(persistence: MemoryPersistence) -> TaskStore:
    """Store seeded with one HIGH parent ("1") holding two children."""
    seed = [
        make_task("1", "Plan trip", priority=Priority.HIGH, created_at=100, is_expanded=True),
        make_task("2", "Pick dates", parent_id="1", created_at=101, completed=True),
        make_task("3", "Ask friends", parent_id="1", created_at=102),
        make_task("4", "Water plants", priority=Priority.LOW, created_at=50),
    ]
    return TaskStore(seed, persistence=persistence, clock=StepClock(), id_factory=SequentialIds())


@pytest.fixture()
def generator() -> ScriptedSubtaskGenerator:
    return ScriptedSubtaskGenerator()


@pytest.fixture()
def state(settings: SimpleNamespace, store: TaskStore, generator: ScriptedSubtaskGenerator) -> AppState:
    """AppState wired with deterministic fakes."""
    return AppState(
        settings=settings,
        llm=FakeLLMClient(),
        store=store,
        synchronizer=SubtaskSynchronizer(store, generator),
        insight_generator=FakeInsightGenerator(),
    )

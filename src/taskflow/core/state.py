# src/taskflow/core/state.py

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

from ..tasks.breakdown import SubtaskSynchronizer
from ..tasks.task_models import FilterType
from ..tasks.task_store import TaskStore
from .ports import InsightGenerator, LLMClient


@dataclass
class AppState:
    """
    Explicitly owned application state.

    The task collection lives only inside `store`; everything else reads
    snapshots from it and mutates it through its methods.
    """

    settings: Any
    llm: LLMClient
    store: TaskStore
    synchronizer: SubtaskSynchronizer
    insight_generator: InsightGenerator

    filter: FilterType = FilterType.ALL
    insight: str = ""

    # Running background jobs (AI breakdowns, insight fetches); kept referenced until done.
    background_tasks: set[asyncio.Task[None]] = field(default_factory=set)

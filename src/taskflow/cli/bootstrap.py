# src/taskflow/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppState (LLM, storage, task engine).
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import LLMClient
from ..core.state import AppState
from ..llm.client import OpenRouterLLMClient
from ..llm.offline import OfflineLLMClient
from ..llm.suggestions import LLMInsightGenerator, LLMSubtaskGenerator
from ..storage.json_storage import JsonTaskPersistence
from ..tasks.breakdown import SubtaskSynchronizer
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_path.parent.mkdir(parents=True, exist_ok=True)


def _make_llm_client(settings) -> LLMClient:
    if getattr(settings, "offline", False):
        logger.info("Offline mode requested; using the offline LLM client.")
        return OfflineLLMClient()
    try:
        return OpenRouterLLMClient(settings)
    except RuntimeError as e:
        # Fallback for local runs without external services.
        logger.warning("LLM client unavailable (%s); using the offline LLM client.", e)
        return OfflineLLMClient()


def create_initial_state(*, settings=None, llm: LLMClient | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings (and the LLM client) injectable makes the app easier to
    test and avoids hidden global config reads. If settings is None, falls
    back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    llm_client = llm if llm is not None else _make_llm_client(settings)
    store = TaskStore.load(JsonTaskPersistence(settings.tasks_path))

    return AppState(
        settings=settings,
        llm=llm_client,
        store=store,
        synchronizer=SubtaskSynchronizer(store, LLMSubtaskGenerator(llm_client)),
        insight_generator=LLMInsightGenerator(llm_client),
    )

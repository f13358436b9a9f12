# src/taskflow/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The task engine depends on Protocols instead of concrete implementations,
so the LLM provider and the storage backend stay swappable and tests can use
in-memory fakes.
"""

from typing import Any, Awaitable, Iterable, Protocol

from ..tasks.task_models import AiSuggestion

ChatMessage = dict[str, str]
# OpenAI-style chat messages: {"role": "...", "content": "..."}.

TaskRecord = dict[str, Any]
# Persisted task shape (camelCase keys, see Task.to_dict()).


class LLMClient(Protocol):
    """Streaming chat completion client (OpenAI/OpenRouter-compatible)."""
    def stream_chat(self, messages: list[ChatMessage], system_prompt: str) -> Iterable[str]: ...


class SubtaskGenerator(Protocol):
    """
    Suggests subtasks for a task text.

    May suspend on I/O. Raising means "no subtasks were produced"; the
    synchronizer leaves the collection untouched in that case.
    """

    def break_down(self, task_text: str) -> Awaitable[list[AiSuggestion]]: ...


class InsightGenerator(Protocol):
    """One-shot productivity tip. Has no access to the task store."""

    def insight(self, active_count: int, completed_count: int) -> Awaitable[str]: ...


class TaskPersistence(Protocol):
    """
    Load/save hook for the raw task collection.

    load() returns the last saved ordered list of records (empty if none);
    save() receives the full current collection after every store mutation.
    """

    def load(self) -> list[TaskRecord]: ...
    def save(self, records: list[TaskRecord]) -> None: ...

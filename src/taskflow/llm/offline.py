# src/taskflow/llm/offline.py

from __future__ import annotations

import json
from collections.abc import Iterable

from ..core.ports import ChatMessage


class OfflineLLMClient:
    """
    Offline deterministic LLM client used when no external API is configured.

    Behavior:
    - Subtask planner prompts -> a fixed three-step JSON breakdown
    - Insight prompts -> a fixed productivity tip
    - Anything else -> a short notice
    """

    def stream_chat(self, messages: list[ChatMessage], system_prompt: str) -> Iterable[str]:
        sp = (system_prompt or "").lower()

        if "subtask planner" in sp:
            yield json.dumps(
                [
                    {"text": "Clarify the goal and the finish line", "priority": "high"},
                    {"text": "Do the first concrete step", "priority": "medium"},
                    {"text": "Review the result and tidy up", "priority": "low"},
                ]
            )
            return

        if "productivity coach" in sp:
            yield "Pick the smallest next step and start it now."
            return

        yield "Offline mode: no external LLM is configured."

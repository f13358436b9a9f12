# src/taskflow/llm/suggestions.py

"""
LLM-backed collaborators for the task engine.

- LLMSubtaskGenerator: task text -> 3..5 suggested subtasks (JSON array)
- LLMInsightGenerator: (active, completed) -> one short productivity tip

The LLM client is synchronous (streaming iterator), so calls run in a worker
thread to keep the event loop responsive while a request is in flight.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from ..core.errors import GenerationError
from ..core.ports import LLMClient
from ..tasks.task_models import AiSuggestion, Priority

logger = logging.getLogger(__name__)

BREAKDOWN_SYSTEM_PROMPT = """
You are a subtask planner for a personal todo list.

Input: a single task.

Task:
- Break it down into 3 to 5 smaller, actionable subtasks.
- Assign each subtask a priority: "low", "medium" or "high".

Output format (strict):
- Only a JSON array, no prose, no markdown.
- Each item: {"text": "<subtask>", "priority": "low" | "medium" | "high"}
""".strip()

INSIGHT_SYSTEM_PROMPT = """
You are a productivity coach.

Reply with a very short, punchy, 1-sentence motivational quote or productivity
tip relevant to the user's todo list. Do not use quote characters.
""".strip()

DEFAULT_INSIGHT = "Keep moving forward!"


def _collect(llm: LLMClient, messages: list[dict[str, str]], system_prompt: str) -> str:
    raw = ""
    for piece in llm.stream_chat(messages, system_prompt):
        raw += piece
    return raw


def _extract_json_array(raw: str) -> str:
    raw = raw.strip()
    if raw.startswith("[") and raw.endswith("]"):
        return raw
    first = raw.find("[")
    last = raw.rfind("]")
    if first != -1 and last != -1 and last > first:
        return raw[first : last + 1]
    return raw


def parse_suggestions(raw: str) -> list[AiSuggestion]:
    """
    Parse the planner reply.

    - blank reply -> []
    - non-JSON / not a list -> GenerationError
    - items without text are dropped; unknown priorities become MEDIUM
    """
    raw = (raw or "").strip()
    if not raw:
        return []

    try:
        data: Any = json.loads(_extract_json_array(raw))
    except json.JSONDecodeError as e:
        logger.info("Subtask planner returned non-JSON: %r", raw[:500])
        raise GenerationError("AI returned an unreadable subtask list. Try again.") from e

    if not isinstance(data, list):
        raise GenerationError("AI returned an unexpected subtask format. Try again.")

    out: list[AiSuggestion] = []
    for item in data:
        if not isinstance(item, dict):
            continue
        text = item.get("text")
        if not isinstance(text, str) or not text.strip():
            continue
        out.append(AiSuggestion(text=text.strip(), priority=Priority.parse(item.get("priority"))))
    return out


class LLMSubtaskGenerator:
    def __init__(self, llm: LLMClient) -> None:
        self._llm = llm

    async def break_down(self, task_text: str) -> list[AiSuggestion]:
        messages = [{"role": "user", "content": f'Task: "{task_text}"'}]
        try:
            raw = await asyncio.to_thread(_collect, self._llm, messages, BREAKDOWN_SYSTEM_PROMPT)
        except Exception as e:
            logger.info("Subtask planner call failed (%s)", e.__class__.__name__)
            raise GenerationError(str(e) or "Could not generate subtasks.") from e

        suggestions = parse_suggestions(raw)
        logger.debug("Subtask planner produced %d suggestions", len(suggestions))
        return suggestions


class LLMInsightGenerator:
    def __init__(self, llm: LLMClient) -> None:
        self._llm = llm

    async def insight(self, active_count: int, completed_count: int) -> str:
        content = (
            f"I have a todo list with {active_count} active tasks "
            f"and {completed_count} completed tasks today."
        )
        messages = [{"role": "user", "content": content}]
        try:
            raw = await asyncio.to_thread(_collect, self._llm, messages, INSIGHT_SYSTEM_PROMPT)
        except Exception as e:
            logger.info("Insight call failed (%s)", e.__class__.__name__)
            raise GenerationError(str(e) or "Could not get an insight.") from e

        text = raw.strip().strip('"').strip()
        return text or DEFAULT_INSIGHT

# src/taskflow/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def weight(self) -> int:
        return _PRIORITY_WEIGHT[self]

    @classmethod
    def parse(cls, raw: Any) -> Priority:
        """Lenient parse: unknown / missing values fall back to MEDIUM."""
        if isinstance(raw, Priority):
            return raw
        if not isinstance(raw, str) or not raw.strip():
            return cls.MEDIUM
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return cls.MEDIUM


_PRIORITY_WEIGHT = {
    Priority.LOW: 1,
    Priority.MEDIUM: 2,
    Priority.HIGH: 3,
}


class FilterType(StrEnum):
    ALL = "ALL"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"

    @classmethod
    def parse(cls, raw: str | None) -> FilterType:
        if not raw:
            return cls.ALL
        try:
            return cls(raw.strip().upper())
        except ValueError as e:
            raise ValueError(f"Unknown filter: {raw!r} (use all, active or completed)") from e


@dataclass(slots=True, frozen=True)
class AiSuggestion:
    text: str
    priority: Priority = Priority.MEDIUM


@dataclass(slots=True, frozen=True)
class Task:
    """
    A single task record.

    Attributes are snake_case; to_dict()/from_dict() use the persisted
    camelCase field names (id, text, completed, priority, createdAt,
    isAiGenerated, parentId, isExpanded).

    is_expanded=None means "expanded".
    """

    id: str
    text: str
    created_at: int
    completed: bool = False
    priority: Priority = Priority.MEDIUM
    is_ai_generated: bool = False
    parent_id: str | None = None
    is_expanded: bool | None = None

    @property
    def is_child(self) -> bool:
        return self.parent_id is not None

    @property
    def expanded(self) -> bool:
        return True if self.is_expanded is None else self.is_expanded

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "text": self.text,
            "completed": self.completed,
            "priority": self.priority.value,
            "createdAt": self.created_at,
            "isAiGenerated": self.is_ai_generated,
        }
        if self.parent_id is not None:
            out["parentId"] = self.parent_id
        if self.is_expanded is not None:
            out["isExpanded"] = self.is_expanded
        return out

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Task:
        """
        Build a Task from a persisted/imported record.

        Raises ValueError if id or text is missing/empty. Other fields are
        read leniently (defaults for missing values).
        """
        task_id = normalize_id(raw.get("id"))
        if task_id is None:
            raise ValueError("task record is missing a non-empty id")

        text = raw.get("text")
        if not isinstance(text, str) or not text.strip():
            raise ValueError(f"task record id={task_id} is missing a non-empty text")

        created_raw = raw.get("createdAt")
        try:
            created_at = int(created_raw) if created_raw is not None else 0
        except (TypeError, ValueError, OverflowError):
            # NaN / Infinity / 1e400 are valid JSON for Python's parser
            created_at = 0

        return cls(
            id=task_id,
            text=text,
            created_at=created_at,
            completed=parse_flag(raw.get("completed"), False),
            priority=Priority.parse(raw.get("priority")),
            is_ai_generated=parse_flag(raw.get("isAiGenerated"), False),
            parent_id=normalize_id(raw.get("parentId")),
            is_expanded=parse_flag(raw.get("isExpanded"), None),
        )


_TRUE_STRINGS = {"1", "true", "yes", "y", "on"}
_FALSE_STRINGS = {"0", "false", "no", "n", "off", ""}


def parse_flag(raw: Any, default: bool | None) -> bool | None:
    """Read a boolean field from a hand-edited record ("false" is False)."""
    if raw is None:
        return default
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, (int, float)):
        return raw != 0
    if isinstance(raw, str):
        s = raw.strip().lower()
        if s in _TRUE_STRINGS:
            return True
        if s in _FALSE_STRINGS:
            return False
    return default


def normalize_id(raw: Any) -> str | None:
    """Ids are opaque strings; integer ids from hand-written files are accepted."""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return str(raw)
    if isinstance(raw, str) and raw.strip():
        return raw
    return None

# src/taskflow/tasks/backup.py

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from datetime import date
from pathlib import Path
from typing import Any

from ..core.errors import BackupParseError
from .task_import import ImportResult
from .task_models import Task
from .task_store import TaskStore

logger = logging.getLogger(__name__)


def backup_filename(day: date | None = None) -> str:
    day = day or date.today()
    return f"taskflow-backup-{day.isoformat()}.json"


def export_backup(tasks: Iterable[Task], directory: str | Path, *, day: date | None = None) -> Path:
    """Write the full collection as pretty-printed JSON; returns the file path."""
    out_dir = Path(directory).expanduser()
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / backup_filename(day)

    records = [t.to_dict() for t in tasks]
    path.write_text(json.dumps(records, ensure_ascii=False, indent=2), "utf-8")
    logger.info("Exported %d tasks to %s", len(records), path)
    return path


def read_backup(path: str | Path) -> Any:
    """Parse a backup file. Shape validation happens in the import resolver."""
    p = Path(path).expanduser()
    try:
        return json.loads(p.read_text("utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.info("Failed to parse backup %s (%s)", p, e.__class__.__name__)
        raise BackupParseError(f"Failed to parse backup file: {p.name}") from e


def import_backup(store: TaskStore, path: str | Path) -> ImportResult:
    return store.merge(read_backup(path))

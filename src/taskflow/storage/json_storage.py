# src/taskflow/storage/json_storage.py

from __future__ import annotations

import contextlib
import json
import logging
import os
import time
from pathlib import Path

from ..core.ports import TaskRecord

logger = logging.getLogger(__name__)


class JsonTaskPersistence:
    """
    Local task storage: one JSON file holding the ordered list of task records.

    - load(): missing file -> []; unreadable/corrupt file is moved aside to
      "<name>.corrupt-<unix ts>" and [] is returned, so the next save never
      overwrites data that could not be parsed
    - save(): atomic replace through a temp file; file kept private on disk
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> list[TaskRecord]:
        if not self._path.exists():
            return []
        try:
            data = json.loads(self._path.read_text("utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError):
            logger.exception("Failed to load tasks from %s", self._path)
            self._quarantine()
            return []

        if not isinstance(data, list):
            logger.warning("Ignoring tasks file %s: expected a list, got %s", self._path, type(data).__name__)
            self._quarantine()
            return []

        records = [r for r in data if isinstance(r, dict)]
        logger.info("Loaded %d task records from %s", len(records), self._path)
        return records

    def save(self, records: list[TaskRecord]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(".tmp")
        tmp.write_text(json.dumps(records, ensure_ascii=False, indent=2), "utf-8")
        os.replace(tmp, self._path)
        with contextlib.suppress(OSError):
            os.chmod(self._path, 0o600)
        logger.debug("Saved %d task records to %s", len(records), self._path)

    def _quarantine(self) -> Path:
        target = self._path.with_name(f"{self._path.name}.corrupt-{int(time.time())}")
        n = 1
        while target.exists():
            target = self._path.with_name(f"{self._path.name}.corrupt-{int(time.time())}-{n}")
            n += 1
        # a failed rename must not lead to save() clobbering the file
        os.replace(self._path, target)
        logger.warning("Moved unreadable tasks file %s to %s", self._path, target)
        return target

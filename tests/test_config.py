# tests/test_config.py

from __future__ import annotations

from pathlib import Path

import pytest

from taskflow.cli.bootstrap import create_initial_state
from taskflow.config import Settings
from taskflow.llm.offline import OfflineLLMClient


def test_settings_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("TASKFLOW_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("TASKFLOW_LLM_MODELS", "a/one, b/two")
    monkeypatch.setenv("TASKFLOW_OFFLINE", "yes")
    monkeypatch.setenv("TASKFLOW_LLM_FIRST_TOKEN_TIMEOUT_SECONDS", "40")
    monkeypatch.setenv("TASKFLOW_LLM_READ_TIMEOUT_SECONDS", "not-a-number")
    monkeypatch.delenv("TASKFLOW_TASKS_PATH", raising=False)

    s = Settings.from_env()

    assert s.tasks_path == tmp_path / "tasks.json"
    assert s.backup_dir == tmp_path / "backups"
    assert s.llm_models == ["a/one", "b/two"]
    assert s.offline is True
    assert s.llm_first_token_timeout == 40.0
    # read timeout never drops below the first-token timeout
    assert s.llm_read_timeout == 40.0


def test_bootstrap_without_api_key_uses_offline_client(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("TASKFLOW_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("TASKFLOW_OPENROUTER_API_KEY", raising=False)
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
    monkeypatch.delenv("TASKFLOW_TASKS_PATH", raising=False)
    monkeypatch.delenv("TASKFLOW_OFFLINE", raising=False)

    state = create_initial_state(settings=Settings.from_env())

    assert isinstance(state.llm, OfflineLLMClient)
    assert len(state.store) == 0
    assert tmp_path.exists()

# tests/test_llm_client.py

from __future__ import annotations

from types import SimpleNamespace

import httpx
import pytest

from taskflow.llm.client import OpenRouterLLMClient, friendly_llm_error_message


def _settings(**overrides) -> SimpleNamespace:
    base = dict(
        openrouter_api_key="test-key",
        openrouter_base_url="https://openrouter.example/api/v1",
        llm_models=["first/model", "second/model"],
        extra_headers={"X-Title": "taskflow"},
        llm_connect_timeout=1.0,
        llm_read_timeout=2.0,
        llm_first_token_timeout=2.0,
    )
    base.update(overrides)
    return SimpleNamespace(**base)


def _chunk(text: str) -> SimpleNamespace:
    return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=text))])


class _FakeCompletions:
    def __init__(self, script: dict[str, object]) -> None:
        self.script = script
        self.models: list[str] = []

    def create(self, *, model: str, **kwargs):
        self.models.append(model)
        outcome = self.script[model]
        if isinstance(outcome, Exception):
            raise outcome
        return iter(outcome)


def _client_with(script: dict[str, object], **overrides) -> tuple[OpenRouterLLMClient, _FakeCompletions]:
    client = OpenRouterLLMClient(_settings(**overrides))  # type: ignore[arg-type]
    completions = _FakeCompletions(script)
    client._client = SimpleNamespace(chat=SimpleNamespace(completions=completions))  # type: ignore[assignment]
    return client, completions


def test_falls_back_to_next_model_on_network_error() -> None:
    client, completions = _client_with(
        {
            "first/model": httpx.ConnectTimeout("slow"),
            "second/model": [_chunk("Hello"), _chunk(" there")],
        }
    )

    out = "".join(client.stream_chat([{"role": "user", "content": "hi"}], "system"))

    assert out == "Hello there"
    assert completions.models == ["first/model", "second/model"]


def test_all_models_failing_raises_runtime_error() -> None:
    client, _ = _client_with(
        {
            "first/model": httpx.ConnectTimeout("slow"),
            "second/model": httpx.ReadTimeout("slow"),
        }
    )

    with pytest.raises(RuntimeError, match="network/timeout"):
        list(client.stream_chat([], "system"))


def test_missing_api_key_fails_construction() -> None:
    with pytest.raises(RuntimeError) as exc:
        OpenRouterLLMClient(_settings(openrouter_api_key=None))  # type: ignore[arg-type]

    assert "TASKFLOW_OPENROUTER_API_KEY" in friendly_llm_error_message(exc.value)


def test_empty_model_list() -> None:
    client, _ = _client_with({}, llm_models=[])

    with pytest.raises(RuntimeError, match="model list is empty"):
        list(client.stream_chat([], "system"))

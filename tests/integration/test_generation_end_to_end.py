from __future__ import annotations

from collections import Counter

import httpx
import pytest

from charmline.apps.runtime_support import build_orchestrator
from charmline.core.config.schema import AppConfig
from charmline.core.providers.base import GenerationContext
from charmline.core.providers.fallback import pickup_line_candidates


class _Endpoint:
    def __init__(self, response_for) -> None:
        self.response_for = response_for
        self.calls: Counter[str] = Counter()

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls[request.url.host] += 1
        return self.response_for(request)


async def _no_sleep(_seconds: float) -> None:
    return None


def _orchestrator(env: dict[str, str], endpoint: _Endpoint | None = None):
    client = httpx.AsyncClient(transport=httpx.MockTransport(endpoint)) if endpoint else None
    return build_orchestrator(AppConfig(), env, client=client, sleep=_no_sleep)


@pytest.mark.asyncio
async def test_no_credentials_returns_local_pickup_line():
    orchestrator = _orchestrator({})
    assert orchestrator.providers == ()

    result = await orchestrator.generate("hi", {"type": "pickup_line"})

    assert result.provider == "fallback"
    assert result.model == "local"
    assert result.text
    assert result.text in pickup_line_candidates(GenerationContext(kind="pickup_line"))


@pytest.mark.asyncio
async def test_server_errors_exhaust_retry_budget_then_fall_back():
    endpoint = _Endpoint(lambda request: httpx.Response(500, json={"error": "boom"}))
    orchestrator = _orchestrator({"OPENAI_API_KEY": "sk-test"}, endpoint)

    result = await orchestrator.generate("hi", {"type": "pickup_line"})

    assert result.provider == "fallback"
    assert endpoint.calls == Counter({"api.openai.com": 3})


@pytest.mark.asyncio
async def test_empty_success_body_is_not_retried():
    endpoint = _Endpoint(
        lambda request: httpx.Response(200, json={"choices": [{"message": {"content": ""}}]})
    )
    orchestrator = _orchestrator({"OPENAI_API_KEY": "sk-test"}, endpoint)

    result = await orchestrator.generate("hi")

    assert result.provider == "fallback"
    assert endpoint.calls == Counter({"api.openai.com": 1})


@pytest.mark.asyncio
async def test_chain_walks_configured_providers_by_priority():
    def respond(request: httpx.Request) -> httpx.Response:
        if request.url.host == "api.openai.com":
            return httpx.Response(429)
        if request.url.host == "api.anthropic.com":
            assert request.headers["x-api-key"] == "ak-test"
            assert request.headers["anthropic-version"] == "2023-06-01"
            return httpx.Response(503)
        assert request.headers["Authorization"] == "Bearer hf-test"
        return httpx.Response(200, json=[{"generated_text": "hi Tujhe dekha to ye jaana sanam"}])

    endpoint = _Endpoint(respond)
    orchestrator = _orchestrator(
        {"OPENAI_API_KEY": "sk-test", "ANTHROPIC_API_KEY": "ak-test", "HF_TOKEN": "hf-test"},
        endpoint,
    )
    assert orchestrator.provider_names() == ["openai", "anthropic", "huggingface"]

    result = await orchestrator.generate("hi")

    assert result.provider == "huggingface"
    assert result.model == "microsoft/DialoGPT-small"
    assert result.text == "Tujhe dekha to ye jaana sanam"
    assert endpoint.calls == Counter(
        {"api.openai.com": 3, "api.anthropic.com": 3, "api-inference.huggingface.co": 1}
    )

import asyncio

import pytest
import requests

from src.core import providers
from src.core.providers import (
    AnthropicProvider,
    LocalAIProvider,
    OpenAIProvider,
    ProviderResult,
    generate_with_fallback,
)


class _FakeResponse:
    def __init__(self, status_code: int = 200, payload=None):
        self.status_code = status_code
        self._payload = payload

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


@pytest.fixture(autouse=True)
def _no_env_keys(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)


def _generate(provider, query="hi") -> ProviderResult:
    return asyncio.run(provider.generate(query))


def test_openai_without_key_fails_without_calling_network(store, monkeypatch):
    def _boom(*args, **kwargs):
        raise AssertionError("network should not be touched")

    monkeypatch.setattr(providers.requests, "post", _boom)
    result = _generate(OpenAIProvider(store))
    assert not result.ok
    assert "key not found" in result.error


def test_openai_with_stored_key_returns_text(store, monkeypatch):
    store.set_item("openai_api_key", "sk-test")
    seen = {}

    def _post(url, json, headers, timeout):
        seen.update(url=url, json=json, headers=headers, timeout=timeout)
        return _FakeResponse(200, {"choices": [{"message": {"content": "Hello!"}}]})

    monkeypatch.setattr(providers.requests, "post", _post)
    result = _generate(OpenAIProvider(store), "What is mining?")

    assert result.ok
    assert result.text == "Hello!"
    assert result.labelled_text() == "[OpenAI AI Response]\n\nHello!"
    assert seen["headers"]["Authorization"] == "Bearer sk-test"
    assert seen["json"]["messages"] == [{"role": "user", "content": "What is mining?"}]
    assert seen["json"]["max_tokens"] == 500


def test_openai_http_error_is_a_failure(store, monkeypatch):
    store.set_item("openai_api_key", "sk-test")
    monkeypatch.setattr(
        providers.requests, "post", lambda *a, **k: _FakeResponse(401, {"error": "nope"})
    )
    result = _generate(OpenAIProvider(store))
    assert not result.ok
    assert "HTTP 401" in result.error


def test_openai_malformed_payload_is_a_failure(store, monkeypatch):
    store.set_item("openai_api_key", "sk-test")
    monkeypatch.setattr(providers.requests, "post", lambda *a, **k: _FakeResponse(200, {}))
    assert not _generate(OpenAIProvider(store)).ok


def test_anthropic_always_fails(store):
    assert "key not found" in _generate(AnthropicProvider(store)).error
    store.set_item("anthropic_api_key", "key")
    assert "not implemented" in _generate(AnthropicProvider(store)).error


def test_local_provider_unreachable(monkeypatch):
    def _refuse(*args, **kwargs):
        raise requests.ConnectionError("refused")

    monkeypatch.setattr(providers.requests, "post", _refuse)
    result = _generate(LocalAIProvider(url="http://localhost:1/api/generate"))
    assert not result.ok
    assert result.error == "Local AI service not available"


def test_local_provider_timeout_is_a_failure(monkeypatch):
    def _slow(*args, **kwargs):
        raise requests.Timeout("too slow")

    monkeypatch.setattr(providers.requests, "post", _slow)
    assert not _generate(LocalAIProvider()).ok


def test_local_provider_returns_generated_text(monkeypatch):
    monkeypatch.setattr(
        providers.requests,
        "post",
        lambda *a, **k: _FakeResponse(200, {"response": "local answer"}),
    )
    result = _generate(LocalAIProvider())
    assert result.ok
    assert result.labelled_text().startswith("[Local AI Response]")


def test_local_provider_non_ok_status(monkeypatch):
    monkeypatch.setattr(providers.requests, "post", lambda *a, **k: _FakeResponse(500))
    assert not _generate(LocalAIProvider()).ok


class _StubProvider:
    def __init__(self, name, text=None):
        self.name = name
        self.text = text
        self.calls = 0

    async def generate(self, query):
        self.calls += 1
        if self.text:
            return ProviderResult(self.name, text=self.text)
        return ProviderResult(self.name, error="down")


def test_fallback_short_circuits_on_first_success():
    first = _StubProvider("A")
    second = _StubProvider("B", text="from B")
    third = _StubProvider("C", text="from C")

    winner, failures = asyncio.run(generate_with_fallback([first, second, third], "q"))

    assert winner.provider == "B"
    assert [f.provider for f in failures] == ["A"]
    assert (first.calls, second.calls, third.calls) == (1, 1, 0)


def test_fallback_all_fail_returns_none():
    chain = [_StubProvider("A"), _StubProvider("B")]
    winner, failures = asyncio.run(generate_with_fallback(chain, "q"))
    assert winner is None
    assert len(failures) == 2


def test_default_providers_order(store, monkeypatch):
    monkeypatch.setattr(providers.settings, "AI_PROVIDERS_ENABLED", True)
    assert [p.name for p in providers.default_providers(store)] == [
        "OpenAI",
        "Anthropic",
        "Local",
    ]
    monkeypatch.setattr(providers.settings, "AI_PROVIDERS_ENABLED", False)
    assert providers.default_providers(store) == []

# src/core/providers.py
from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

import requests

from src.config import settings
from src.core.local_store import LocalStore

logger = logging.getLogger(__name__)


class ExternalProviderError(RuntimeError):
    """Raised inside a provider when it cannot produce text."""


@dataclass(slots=True)
class ProviderResult:
    provider: str
    text: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return bool(self.text)

    def labelled_text(self) -> str:
        return f"[{self.provider} AI Response]\n\n{self.text}"


class TextProvider(Protocol):
    name: str

    async def generate(self, query: str) -> ProviderResult: ...


class _HttpProvider:
    """
    Shared plumbing: run the blocking request in a worker thread and turn
    every failure into a ProviderResult instead of letting it escape.
    """

    name = "http"

    def __init__(self, timeout_s: float = settings.PROVIDER_REQUEST_TIMEOUT_S) -> None:
        self.timeout_s = timeout_s

    async def generate(self, query: str) -> ProviderResult:
        try:
            text = await asyncio.to_thread(self._request, query)
        except (ExternalProviderError, requests.RequestException) as exc:
            return ProviderResult(self.name, error=str(exc))
        if not text:
            return ProviderResult(self.name, error="empty response")
        return ProviderResult(self.name, text=text)

    def _request(self, query: str) -> str:
        raise NotImplementedError

    def _post_json(self, url: str, payload: dict, headers: dict | None = None) -> dict:
        resp = requests.post(
            url,
            json=payload,
            headers={"User-Agent": settings.PROVIDER_USER_AGENT, **(headers or {})},
            timeout=self.timeout_s,
        )
        if not resp.ok:
            raise ExternalProviderError(f"{self.name} returned HTTP {resp.status_code}")
        try:
            return resp.json()
        except ValueError as exc:
            raise ExternalProviderError(f"{self.name} returned invalid JSON") from exc


def _credential(store: LocalStore, store_key: str, env_var: str) -> Optional[str]:
    return store.get_item(store_key) or os.getenv(env_var) or None


class OpenAIProvider(_HttpProvider):
    name = "OpenAI"

    def __init__(self, store: LocalStore, **kwargs) -> None:
        super().__init__(**kwargs)
        self.store = store

    def _request(self, query: str) -> str:
        api_key = _credential(self.store, settings.OPENAI_KEY_STORE_KEY, "OPENAI_API_KEY")
        if not api_key:
            raise ExternalProviderError("OpenAI API key not found")

        data = self._post_json(
            settings.OPENAI_CHAT_URL,
            {
                "model": settings.OPENAI_MODEL,
                "messages": [{"role": "user", "content": query}],
                "max_tokens": settings.OPENAI_MAX_TOKENS,
            },
            headers={"Authorization": f"Bearer {api_key}"},
        )
        try:
            return data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise ExternalProviderError(f"Unexpected OpenAI payload: {data}") from exc


class AnthropicProvider(_HttpProvider):
    name = "Anthropic"

    def __init__(self, store: LocalStore, **kwargs) -> None:
        super().__init__(**kwargs)
        self.store = store

    def _request(self, query: str) -> str:
        api_key = _credential(
            self.store, settings.ANTHROPIC_KEY_STORE_KEY, "ANTHROPIC_API_KEY"
        )
        if not api_key:
            raise ExternalProviderError("Anthropic API key not found")
        raise ExternalProviderError("Anthropic API not implemented in demo")


class LocalAIProvider(_HttpProvider):
    """Ollama-style generation service on the local machine."""

    name = "Local"

    def __init__(self, url: str = settings.LOCAL_AI_URL, **kwargs) -> None:
        super().__init__(**kwargs)
        self.url = url

    def _request(self, query: str) -> str:
        try:
            data = self._post_json(
                self.url,
                {"model": settings.LOCAL_AI_MODEL, "prompt": query, "stream": False},
            )
        except requests.ConnectionError as exc:
            raise ExternalProviderError("Local AI service not available") from exc
        response = data.get("response") if isinstance(data, dict) else None
        return response or ""


def default_providers(store: LocalStore) -> list[TextProvider]:
    if not settings.AI_PROVIDERS_ENABLED:
        return []
    return [OpenAIProvider(store), AnthropicProvider(store), LocalAIProvider()]


async def generate_with_fallback(
    providers: Sequence[TextProvider],
    query: str,
) -> tuple[Optional[ProviderResult], list[ProviderResult]]:
    """
    Try providers in order and stop at the first one that returns text.

    Returns (winner or None, every failed attempt).
    """
    failures: list[ProviderResult] = []
    for provider in providers:
        result = await provider.generate(query)
        if result.ok:
            return result, failures
        logger.info("%s AI failed: %s", result.provider, result.error)
        failures.append(result)
    return None, failures

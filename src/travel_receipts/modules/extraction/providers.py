"""Language model providers behind a single ``complete(prompt) -> str`` operation.

Both the cloud (OpenAI) and the local (Ollama) provider speak the OpenAI
compatible ``/chat/completions`` protocol; they differ only in endpoint,
credential and the structured-output hint. The provider is chosen once from
``ProviderConfig`` when the application starts.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Literal, Protocol

import httpx

from travel_receipts.core.config import Settings
from travel_receipts.core.errors import ConfigError, UpstreamError
from travel_receipts.core.logging import get_logger, log_event

logger = get_logger(__name__)

ProviderKind = Literal["openai", "ollama"]


@dataclass(frozen=True)
class ProviderConfig:
    kind: ProviderKind
    base_url: str
    api_key: str
    model: str
    timeout_seconds: float = 60.0
    max_tokens: int = 700


def build_provider_config(settings: Settings) -> ProviderConfig:
    kind = (settings.llm_provider or "").lower()
    if kind == "openai":
        if not settings.openai_api_key:
            raise ConfigError("OPENAI_API_KEY is missing")
        base_url = settings.llm_base_url or settings.openai_base_url
        api_key = settings.openai_api_key
        model = settings.openai_model
    elif kind == "ollama":
        base_url = settings.llm_base_url or settings.ollama_base_url
        api_key = "ollama"
        model = settings.ollama_model or ""
    else:
        raise ConfigError(f"Invalid LLM_PROVIDER: {settings.llm_provider}")

    if not model:
        raise ConfigError(f"No model configured for provider {kind}")

    return ProviderConfig(
        kind=kind,
        base_url=base_url.rstrip("/"),
        api_key=api_key,
        model=model,
        timeout_seconds=float(settings.llm_timeout_seconds),
        max_tokens=int(settings.llm_max_tokens),
    )


class CompletionProvider(Protocol):
    name: str
    model: str

    def complete(self, prompt: str) -> str: ...

    def close(self) -> None: ...


class ChatCompletionsProvider:
    """Deterministic single-message chat completion over httpx."""

    name: str = "chat"

    def __init__(
        self, config: ProviderConfig, *, transport: httpx.BaseTransport | None = None
    ) -> None:
        self.config = config
        self.model = config.model
        self._client = httpx.Client(
            base_url=config.base_url,
            timeout=httpx.Timeout(config.timeout_seconds, connect=10.0),
            headers={
                "Authorization": f"Bearer {config.api_key}",
                "Content-Type": "application/json",
            },
            follow_redirects=True,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def structured_output_hint(self) -> dict[str, Any]:
        return {}

    def build_payload(self, prompt: str) -> dict[str, Any]:
        return {
            "model": self.config.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": 0,
            "max_tokens": self.config.max_tokens,
            **self.structured_output_hint(),
        }

    def complete(self, prompt: str) -> str:
        payload = self.build_payload(prompt)
        try:
            resp = self._client.post("/chat/completions", json=payload)
        except httpx.HTTPError as e:
            log_event(
                logger,
                "provider.request.failed",
                provider=self.name,
                model=self.model,
                error=str(e) or e.__class__.__name__,
            )
            raise UpstreamError(str(e) or e.__class__.__name__) from e

        try:
            data = resp.json()
        except ValueError as e:
            raise UpstreamError(
                f"Provider returned a non-JSON response (HTTP {resp.status_code})"
            ) from e

        error = data.get("error") if isinstance(data, dict) else None
        if error:
            message = error if isinstance(error, str) else json.dumps(error)
            log_event(
                logger,
                "provider.request.error",
                provider=self.name,
                model=self.model,
                status_code=resp.status_code,
            )
            raise UpstreamError(message)
        if resp.status_code >= 400:
            raise UpstreamError(f"HTTP {resp.status_code}")

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            content = None
        return content if isinstance(content, str) else ""


class OpenAIProvider(ChatCompletionsProvider):
    name = "openai"

    def structured_output_hint(self) -> dict[str, Any]:
        return {"response_format": {"type": "json_object"}}


class OllamaProvider(ChatCompletionsProvider):
    name = "ollama"

    def structured_output_hint(self) -> dict[str, Any]:
        return {"format": "json"}


_PROVIDERS: dict[str, type[ChatCompletionsProvider]] = {
    "openai": OpenAIProvider,
    "ollama": OllamaProvider,
}


def make_provider(
    config: ProviderConfig, *, transport: httpx.BaseTransport | None = None
) -> ChatCompletionsProvider:
    return _PROVIDERS[config.kind](config, transport=transport)

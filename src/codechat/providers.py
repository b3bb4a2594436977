"""Provider registry -- static connection metadata for supported LLM APIs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from .config import Settings

HeaderFactory = Callable[[str, "Settings"], dict[str, str]]


@dataclass(frozen=True)
class ProviderDescriptor:
    """How to address and authenticate to one provider."""

    key: str
    name: str
    base_url: str
    default_model: str
    model_env: str  # env var holding the per-provider model override
    headers: HeaderFactory


def _gemini_headers(api_key: str, settings: Settings) -> dict[str, str]:
    return {
        "Content-Type": "application/json",
        "x-goog-api-key": api_key,
    }


def _openrouter_headers(api_key: str, settings: Settings) -> dict[str, str]:
    return {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {api_key}",
        "HTTP-Referer": settings.openrouter_referrer,
        "X-Title": settings.openrouter_title,
    }


PROVIDERS: dict[str, ProviderDescriptor] = {
    "gemini": ProviderDescriptor(
        key="gemini",
        name="Gemini",
        base_url="https://generativelanguage.googleapis.com/v1beta/models",
        default_model="gemini-1.5-flash-002",
        model_env="GEMINI_MODEL",
        headers=_gemini_headers,
    ),
    "openrouter": ProviderDescriptor(
        key="openrouter",
        name="OpenRouter",
        base_url="https://openrouter.ai/api/v1",
        default_model="meta-llama/llama-3.1-405b-instruct",
        model_env="OPENROUTER_MODEL",
        headers=_openrouter_headers,
    ),
}


def describe(name: str) -> ProviderDescriptor | None:
    """Look up a provider by key. Returns None for unknown names."""
    return PROVIDERS.get(name)


def provider_names() -> list[str]:
    return sorted(PROVIDERS)

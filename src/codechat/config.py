"""Configuration resolver -- derives the active provider from environment state.

Resolution happens on every request.  Nothing here is cached, so a rotated
key or a fixed typo in ``AI_PROVIDER`` takes effect without a restart, and a
misconfiguration fails the request that hits it instead of the process.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from .errors import ConfigurationError
from .providers import PROVIDERS, ProviderDescriptor, describe

DEFAULT_PROVIDER = "gemini"
DEFAULT_OPENROUTER_REFERRER = "http://localhost:3001"
DEFAULT_OPENROUTER_TITLE = "Claude Code UI"
DEFAULT_REQUEST_TIMEOUT = 60.0
DEFAULT_FILE_READ_TIMEOUT = 10.0


def _env_str(environ: Mapping[str, str], key: str) -> str | None:
    value = environ.get(key, "").strip()
    return value or None


def _env_float(environ: Mapping[str, str], key: str, default: float) -> float:
    raw = _env_str(environ, key)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{key} must be a number of seconds, got {raw!r}") from exc
    if value <= 0:
        raise ConfigurationError(f"{key} must be positive, got {raw!r}")
    return value


@dataclass(frozen=True)
class Settings:
    """Explicit snapshot of the environment variables codechat reads."""

    provider: str = DEFAULT_PROVIDER
    api_key: str | None = field(default=None, repr=False)
    model_overrides: dict[str, str] = field(default_factory=dict)  # provider key -> model
    openrouter_referrer: str = DEFAULT_OPENROUTER_REFERRER
    openrouter_title: str = DEFAULT_OPENROUTER_TITLE
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    file_read_timeout: float = DEFAULT_FILE_READ_TIMEOUT

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from *environ* (``os.environ`` when omitted).

        Blank values are treated as unset.
        """
        env = os.environ if environ is None else environ
        overrides = {}
        for key, descriptor in PROVIDERS.items():
            model = _env_str(env, descriptor.model_env)
            if model:
                overrides[key] = model
        return cls(
            provider=_env_str(env, "AI_PROVIDER") or DEFAULT_PROVIDER,
            api_key=_env_str(env, "AI_API_KEY"),
            model_overrides=overrides,
            openrouter_referrer=_env_str(env, "OPENROUTER_REFERRER") or DEFAULT_OPENROUTER_REFERRER,
            openrouter_title=_env_str(env, "OPENROUTER_TITLE") or DEFAULT_OPENROUTER_TITLE,
            request_timeout=_env_float(env, "AI_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT),
            file_read_timeout=_env_float(env, "AI_FILE_READ_TIMEOUT", DEFAULT_FILE_READ_TIMEOUT),
        )


@dataclass(frozen=True)
class ActiveConfiguration:
    """The provider, credential, and model to use for one request."""

    provider: str
    descriptor: ProviderDescriptor
    api_key: str = field(repr=False)
    model: str
    settings: Settings = field(default_factory=Settings, repr=False)

    def auth_headers(self) -> dict[str, str]:
        return self.descriptor.headers(self.api_key, self.settings)


def resolve(settings: Settings) -> ActiveConfiguration:
    """Resolve *settings* into an :class:`ActiveConfiguration`.

    Raises :class:`ConfigurationError` when the provider is not registered or
    no credential is set.  A per-provider model override wins over the
    provider's default model.
    """
    descriptor = describe(settings.provider)
    if descriptor is None:
        raise ConfigurationError(f"Unsupported AI provider: {settings.provider}")
    if not settings.api_key:
        raise ConfigurationError(
            f"AI_API_KEY environment variable is required for {descriptor.name}"
        )
    model = settings.model_overrides.get(descriptor.key) or descriptor.default_model
    return ActiveConfiguration(
        provider=descriptor.key,
        descriptor=descriptor,
        api_key=settings.api_key,
        model=model,
        settings=settings,
    )


def resolve_from_env(environ: Mapping[str, str] | None = None) -> ActiveConfiguration:
    """Read the environment and resolve it in one step."""
    return resolve(Settings.from_env(environ))

"""Tests for the provider registry and configuration resolver."""

from __future__ import annotations

import pytest

from codechat.config import Settings, resolve, resolve_from_env
from codechat.errors import ConfigurationError
from codechat.providers import PROVIDERS, describe, provider_names


class TestRegistry:
    def test_known_providers(self):
        assert provider_names() == ["gemini", "openrouter"]
        assert describe("gemini").name == "Gemini"

    def test_unknown_provider(self):
        assert describe("nope") is None

    def test_gemini_headers(self):
        headers = PROVIDERS["gemini"].headers("k-123", Settings())
        assert headers == {"Content-Type": "application/json", "x-goog-api-key": "k-123"}

    def test_openrouter_headers_use_attribution_defaults(self):
        headers = PROVIDERS["openrouter"].headers("k-123", Settings())
        assert headers["Authorization"] == "Bearer k-123"
        assert headers["HTTP-Referer"] == "http://localhost:3001"
        assert headers["X-Title"] == "Claude Code UI"

    def test_openrouter_headers_from_environment(self):
        settings = Settings.from_env({"OPENROUTER_REFERRER": "https://x.dev", "OPENROUTER_TITLE": "X"})
        headers = PROVIDERS["openrouter"].headers("k", settings)
        assert headers["HTTP-Referer"] == "https://x.dev"
        assert headers["X-Title"] == "X"


class TestResolve:
    def test_defaults_to_gemini_with_default_model(self):
        config = resolve_from_env({"AI_API_KEY": "secret"})
        assert config.provider == "gemini"
        assert config.model == PROVIDERS["gemini"].default_model
        assert config.api_key == "secret"

    def test_model_override_wins(self):
        config = resolve_from_env({
            "AI_PROVIDER": "openrouter",
            "AI_API_KEY": "secret",
            "OPENROUTER_MODEL": "openai/gpt-4o-mini",
            "GEMINI_MODEL": "ignored",
        })
        assert config.provider == "openrouter"
        assert config.model == "openai/gpt-4o-mini"

    def test_other_providers_override_is_ignored(self):
        config = resolve_from_env({"AI_API_KEY": "s", "OPENROUTER_MODEL": "x/y"})
        assert config.model == PROVIDERS["gemini"].default_model

    def test_missing_credential(self):
        with pytest.raises(ConfigurationError, match="AI_API_KEY environment variable is required for Gemini"):
            resolve_from_env({})

    def test_blank_credential_counts_as_missing(self):
        with pytest.raises(ConfigurationError):
            resolve_from_env({"AI_API_KEY": "   "})

    def test_unknown_provider(self):
        with pytest.raises(ConfigurationError, match="Unsupported AI provider: claude"):
            resolve_from_env({"AI_PROVIDER": "claude", "AI_API_KEY": "s"})

    def test_invalid_timeout(self):
        with pytest.raises(ConfigurationError, match="AI_REQUEST_TIMEOUT"):
            resolve_from_env({"AI_API_KEY": "s", "AI_REQUEST_TIMEOUT": "soon"})

    def test_timeouts_from_environment(self):
        settings = Settings.from_env({"AI_REQUEST_TIMEOUT": "5", "AI_FILE_READ_TIMEOUT": "1.5"})
        assert settings.request_timeout == 5.0
        assert settings.file_read_timeout == 1.5

    def test_reresolved_each_call(self):
        env = {"AI_API_KEY": "old"}
        assert resolve_from_env(env).api_key == "old"
        env["AI_API_KEY"] = "new"
        assert resolve_from_env(env).api_key == "new"

    def test_credential_not_in_repr(self):
        config = resolve(Settings(api_key="super-secret"))
        assert "super-secret" not in repr(config)
        assert "super-secret" not in repr(config.settings)

    def test_auth_headers_come_from_descriptor(self):
        config = resolve(Settings(provider="openrouter", api_key="k"))
        assert config.auth_headers()["Authorization"] == "Bearer k"

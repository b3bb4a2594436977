"""Provider adapter -- translates conversations to provider wire formats.

Provider identity matters in exactly one place: the two translation branches
below.  Authentication headers always come from the provider descriptor.
"""

from __future__ import annotations

import asyncio
import json
import logging
import urllib.error
import urllib.request
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from .config import ActiveConfiguration
from .errors import UnknownProviderError, UpstreamError
from .models import Message

logger = logging.getLogger(__name__)

NO_RESPONSE = "No response generated"

TEMPERATURE = 0.7
MAX_OUTPUT_TOKENS = 2048
TOP_K = 40
TOP_P = 0.95


@dataclass(frozen=True)
class ProviderRequest:
    """A fully translated HTTP request, ready to send."""

    url: str
    headers: dict[str, str]
    body: dict[str, Any]


# ---------------------------------------------------------------------------
# Branch A: chat-completions (OpenRouter)
# ---------------------------------------------------------------------------

_CHAT_COMPLETIONS_ROLES = {"system": "system", "user": "user", "model-response": "assistant"}


def _chat_completions_body(conversation: Sequence[Message], model: str) -> dict[str, Any]:
    return {
        "model": model,
        "messages": [
            {"role": _CHAT_COMPLETIONS_ROLES[m.role], "content": m.content}
            for m in conversation
        ],
        "temperature": TEMPERATURE,
        "max_tokens": MAX_OUTPUT_TOKENS,
    }


def _chat_completions_text(payload: Any) -> str | None:
    try:
        return payload["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return None


# ---------------------------------------------------------------------------
# Branch B: generate-content (Gemini)
# ---------------------------------------------------------------------------

def _generate_content_body(conversation: Sequence[Message]) -> dict[str, Any]:
    body: dict[str, Any] = {
        "contents": [
            {
                "role": "user" if m.role == "user" else "model",
                "parts": [{"text": m.content}],
            }
            for m in conversation
            if m.role != "system"
        ],
        "generationConfig": {
            "temperature": TEMPERATURE,
            "topK": TOP_K,
            "topP": TOP_P,
            "maxOutputTokens": MAX_OUTPUT_TOKENS,
        },
    }
    system = next((m for m in conversation if m.role == "system"), None)
    if system is not None:
        body["systemInstruction"] = {"parts": [{"text": system.content}]}
    return body


def _generate_content_text(payload: Any) -> str | None:
    try:
        return payload["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

def build_request(conversation: Sequence[Message], config: ActiveConfiguration) -> ProviderRequest:
    """Translate *conversation* into the configured provider's request."""
    base_url = config.descriptor.base_url.rstrip("/")
    if config.provider == "gemini":
        url = f"{base_url}/{config.model}:generateContent"
        body = _generate_content_body(conversation)
    elif config.provider == "openrouter":
        url = f"{base_url}/chat/completions"
        body = _chat_completions_body(conversation, config.model)
    else:
        raise UnknownProviderError(f"Unknown AI provider: {config.provider}")
    return ProviderRequest(url=url, headers=config.auth_headers(), body=body)


def extract_text(provider: str, payload: Any) -> str:
    """Pull the generated text out of a provider response.

    An empty or missing answer is not an error; it yields ``NO_RESPONSE``.
    """
    if provider == "gemini":
        text = _generate_content_text(payload)
    elif provider == "openrouter":
        text = _chat_completions_text(payload)
    else:
        raise UnknownProviderError(f"Unknown AI provider: {provider}")
    if not isinstance(text, str) or not text:
        return NO_RESPONSE
    return text


# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------

def _post_json(request: ProviderRequest, timeout: float) -> tuple[int, str]:
    """POST *request* and return ``(status, body)``. Blocking."""
    http_request = urllib.request.Request(
        request.url,
        data=json.dumps(request.body).encode("utf-8"),
        headers=request.headers,
        method="POST",
    )
    try:
        with urllib.request.urlopen(http_request, timeout=timeout) as resp:
            return resp.status, resp.read().decode("utf-8", errors="replace")
    except urllib.error.HTTPError as exc:
        error_body = exc.read().decode("utf-8", errors="replace")
        raise UpstreamError(exc.code, error_body) from exc
    except urllib.error.URLError as exc:
        if isinstance(exc.reason, TimeoutError):
            raise UpstreamError(None, f"Request timed out after {timeout} seconds") from exc
        raise UpstreamError(None, f"Connection failed: {exc.reason}") from exc
    except TimeoutError as exc:
        raise UpstreamError(None, f"Request timed out after {timeout} seconds") from exc


def invoke_sync(conversation: Sequence[Message], config: ActiveConfiguration) -> str:
    """Send *conversation* to the configured provider and return its answer."""
    request = build_request(conversation, config)
    timeout = config.settings.request_timeout
    logger.info("Calling %s (model %s)", config.descriptor.name, config.model)
    try:
        status, body = _post_json(request, timeout)
    except UpstreamError as exc:
        logger.error("%s request failed: %s", config.descriptor.name, exc)
        raise

    try:
        payload = json.loads(body)
    except json.JSONDecodeError as exc:
        error = UpstreamError(status, f"Invalid JSON in response: {body[:500]}")
        logger.error("%s request failed: %s", config.descriptor.name, error)
        raise error from exc
    return extract_text(config.provider, payload)


async def invoke(conversation: Sequence[Message], config: ActiveConfiguration) -> str:
    """Async :func:`invoke_sync`; the blocking call runs in a worker thread."""
    return await asyncio.to_thread(invoke_sync, conversation, config)

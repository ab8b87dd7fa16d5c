"""Thin client for the OpenRouter chat-completions endpoint.

Both helper flows send a single user message and read back the first
choice's message content. Failures are mapped onto two error types so the
routers can tell configuration problems (503) from upstream ones (502).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Union

from itinerary_ace.core.config import Settings
from itinerary_ace.services.http_client import HttpError, post_json

logger = logging.getLogger("itinerary_ace.ai")

PLACEHOLDER_KEYS = {"your_openrouter_api_key_here"}


class AIError(Exception):
    pass


class AIConfigError(AIError):
    """The endpoint cannot be called with the current configuration."""


class AIResponseError(AIError):
    """The upstream call failed or its reply could not be used."""


def _api_key(settings: Settings) -> str:
    key = (settings.openrouter_api_key or "").strip()
    if not key or key in PLACEHOLDER_KEYS:
        raise AIConfigError(
            "OpenRouter API key is not configured (set OPENROUTER_API_KEY)"
        )
    return key


def _headers(settings: Settings) -> Dict[str, str]:
    headers = {"Authorization": f"Bearer {_api_key(settings)}"}
    if settings.openrouter_http_referer:
        headers["HTTP-Referer"] = settings.openrouter_http_referer
    if settings.openrouter_x_title:
        headers["X-Title"] = settings.openrouter_x_title
    return headers


def chat_completion(
    settings: Settings,
    model: str,
    content: Union[str, List[Dict[str, Any]]],
    response_format: Optional[Dict[str, Any]] = None,
) -> str:
    """Send one user message and return the reply text."""
    headers = _headers(settings)
    url = str(settings.openrouter_base_url).rstrip("/") + "/chat/completions"
    payload: Dict[str, Any] = {
        "model": model,
        "messages": [{"role": "user", "content": content}],
    }
    if response_format is not None:
        payload["response_format"] = response_format
    try:
        data = post_json(
            url, payload, headers=headers, timeout=max(settings.http_timeout_seconds, 30.0)
        )
    except HttpError as e:
        logger.warning("OpenRouter request failed (status=%s): %s", e.status, e)
        raise AIResponseError(f"OpenRouter request failed: {e}") from e
    try:
        reply = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        reply = None
    if not reply or not isinstance(reply, str):
        logger.warning("unexpected OpenRouter response shape for model %s", model)
        raise AIResponseError("OpenRouter returned no message content")
    return reply

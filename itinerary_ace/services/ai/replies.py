"""Helpers for turning a model's JSON reply into a validated model."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Type, TypeVar

from pydantic import BaseModel, ValidationError

from itinerary_ace.services.ai.openrouter import AIResponseError

logger = logging.getLogger("itinerary_ace.ai")

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")

M = TypeVar("M", bound=BaseModel)


def strip_code_fence(text: str) -> str:
    content = text.strip()
    if content.startswith("```"):
        content = content[3:]
        if content.lower().startswith("json"):
            content = content[4:]
        if content.rstrip().endswith("```"):
            content = content.rstrip()[:-3]
    return content.strip()


def snake_keys(data: Any) -> Any:
    """Recursively convert camelCase object keys to snake_case."""
    if isinstance(data, dict):
        return {_CAMEL_RE.sub("_", str(k)).lower(): snake_keys(v) for k, v in data.items()}
    if isinstance(data, list):
        return [snake_keys(v) for v in data]
    return data


def parse_json_reply(reply: str, model: Type[M], label: str) -> M:
    content = strip_code_fence(reply)
    try:
        data = json.loads(content)
    except ValueError as e:
        logger.warning("%s reply is not JSON: %.200s", label, content)
        raise AIResponseError(f"model reply is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise AIResponseError("model reply is not a JSON object")
    try:
        return model.model_validate(snake_keys(data))
    except ValidationError as e:
        logger.warning("%s reply failed validation: %s", label, e)
        raise AIResponseError(
            f"model reply does not match the {label} shape ({e.error_count()} errors)"
        ) from e

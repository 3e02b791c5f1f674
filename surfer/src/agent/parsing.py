"""Parsing helpers for decision service replies."""

from __future__ import annotations

import json
from typing import Any

from pydantic import TypeAdapter, ValidationError

from .errors import ActionParseError
from .models import ACTION_TAGS, Action

_ACTION_ADAPTER: TypeAdapter[Any] = TypeAdapter(Action)


def strip_fences(text: str) -> str:
    cleaned = (text or "").strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    if cleaned.startswith("```"):
        cleaned = cleaned[3:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    return cleaned.strip()


def parse_action(text: str) -> Action:
    cleaned = strip_fences(text)
    if not cleaned:
        raise ActionParseError("Failed to parse LLM response: empty reply", raw=text)

    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise ActionParseError(f"Failed to parse LLM response: {exc}", raw=text) from exc

    if not isinstance(payload, dict):
        raise ActionParseError(
            f"Failed to parse LLM response: expected a JSON object, got {type(payload).__name__}",
            raw=text,
        )

    tag = payload.get("action")
    if tag not in ACTION_TAGS:
        raise ActionParseError(
            f"Failed to parse LLM response: unknown action {tag!r} (expected one of {', '.join(ACTION_TAGS)})",
            raw=text,
        )

    try:
        return _ACTION_ADAPTER.validate_python(payload)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'][1:]) or 'payload'}: {err['msg']}"
            for err in exc.errors()
        )
        raise ActionParseError(f"Failed to parse LLM response: {tag} {problems}", raw=text) from exc

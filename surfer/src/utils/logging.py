"""Structured log events shared by the agent components."""
from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any


def get_logger(component: str) -> logging.Logger:
    return logging.getLogger(f"surfer.{component}")


def log_event(logger: logging.Logger, event: str, *, level: int = logging.INFO, **fields: Any) -> None:
    """Emit one JSON object per line: component, event, timestamp and extra fields."""
    if not logger.isEnabledFor(level):
        return
    payload = {
        "component": logger.name.rsplit(".", 1)[-1],
        "event": event,
        "timestamp": datetime.now().isoformat(),
    }
    payload.update(fields)
    logger.log(level, json.dumps(payload, default=str, ensure_ascii=False))


def configure_logging(level: str | int = "INFO") -> None:
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger("surfer")
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)
    root.setLevel(level)

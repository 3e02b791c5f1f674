"""Persistent, append-only conversation log for the decision service."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List

from pydantic import ValidationError

from surfer.src.utils.logging import get_logger, log_event

from .models import ChatMessage

LOGGER = get_logger("conversation")


class ConversationStore:
    """Ordered system/user/assistant turns, rewritten to disk after every append.

    Turn 0 is always the system instruction. History from earlier tasks is kept
    so the agent remembers across tasks and restarts.
    """

    def __init__(self, path: Path | str, system_prompt: str, *, load: bool = True) -> None:
        self.path = Path(path)
        self._messages: List[ChatMessage] = [ChatMessage(role="system", content=system_prompt)]
        if load:
            self.load()

    @property
    def messages(self) -> List[ChatMessage]:
        return list(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def append(self, message: ChatMessage) -> None:
        self._messages.append(message)
        self.save()

    def load(self) -> bool:
        """Replace the fresh history with the saved one when it starts with a system turn."""
        if not self.path.exists():
            return False
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            log_event(LOGGER, "memory_load_failed", path=str(self.path), error=str(exc), level=logging.WARNING)
            return False
        if not isinstance(data, list) or not data:
            return False
        try:
            saved = [ChatMessage.model_validate(row) for row in data]
        except ValidationError as exc:
            log_event(LOGGER, "memory_load_failed", path=str(self.path), error=str(exc), level=logging.WARNING)
            return False
        if saved[0].role != "system":
            return False
        self._messages = saved
        log_event(LOGGER, "memory_loaded", path=str(self.path), messages=len(saved))
        return True

    def save(self) -> Path:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps([m.model_dump() for m in self._messages], ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
        return self.path

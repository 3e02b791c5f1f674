"""Lifecycle events and the fan-out bus that streams them to observers."""
from __future__ import annotations

import asyncio
import json
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Literal, Union

from pydantic import BaseModel

from surfer.src.utils.logging import get_logger, log_event

LOGGER = get_logger("events")


class _Event(BaseModel):
    kind: str

    def to_sse(self) -> str:
        data = json.dumps(self.model_dump(), ensure_ascii=False)
        return f"event: {self.kind}\ndata: {data}\n\n"


class ThinkingEvent(_Event):
    kind: Literal["thinking"] = "thinking"


class StepEvent(_Event):
    kind: Literal["step"] = "step"
    sequence: int
    description: str


class StepErrorEvent(_Event):
    kind: Literal["step_error"] = "step_error"
    message: str


class TaskCompleteEvent(_Event):
    kind: Literal["task_complete"] = "task_complete"
    summary: str


class TaskErrorEvent(_Event):
    kind: Literal["task_error"] = "task_error"
    message: str


class ReadyEvent(_Event):
    kind: Literal["ready"] = "ready"


AgentEvent = Union[
    ThinkingEvent,
    StepEvent,
    StepErrorEvent,
    TaskCompleteEvent,
    TaskErrorEvent,
    ReadyEvent,
]


class EventBus:
    """
    Single writer, many readers.

    Every subscriber gets its own bounded queue. ``publish`` never waits: a
    subscriber whose queue is full misses the event. The bus is a progress
    feed, not a log.
    """

    def __init__(self, buffer_size: int = 64) -> None:
        self.buffer_size = buffer_size
        self._subscribers: List[asyncio.Queue] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def publish(self, event: AgentEvent) -> int:
        """Deliver to every subscriber with room; returns the number reached."""
        delivered = 0
        for queue in list(self._subscribers):
            try:
                queue.put_nowait(event)
                delivered += 1
            except asyncio.QueueFull:
                log_event(LOGGER, "event_dropped", kind=event.kind, level=logging.DEBUG)
        return delivered

    @asynccontextmanager
    async def subscribe(self) -> AsyncIterator[asyncio.Queue]:
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.buffer_size)
        self._subscribers.append(queue)
        log_event(LOGGER, "subscribed", subscribers=len(self._subscribers), level=logging.DEBUG)
        try:
            yield queue
        finally:
            self._subscribers.remove(queue)
            log_event(LOGGER, "unsubscribed", subscribers=len(self._subscribers), level=logging.DEBUG)

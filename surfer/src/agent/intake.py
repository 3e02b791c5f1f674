"""Single-slot command queue feeding the task loop."""
from __future__ import annotations

import asyncio

from surfer.src.utils.logging import get_logger, log_event

LOGGER = get_logger("intake")


class CommandIntake:
    """Holds at most one waiting command.

    ``submit`` waits for the slot instead of dropping, so only one task runs at a
    time and tasks start in the order they were sent.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[str] = asyncio.Queue(maxsize=1)
        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    async def submit(self, command: str) -> None:
        text = (command or "").strip()
        if not text:
            raise ValueError("command must not be empty")
        await self._queue.put(text)
        log_event(LOGGER, "command_queued", command=text[:120])

    async def next_command(self) -> str:
        command = await self._queue.get()
        self._busy = True
        return command

    def finish(self) -> None:
        self._busy = False
        self._queue.task_done()

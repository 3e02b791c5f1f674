"""HTTP surface: command intake endpoint and the live event stream."""
from __future__ import annotations

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, Optional

from fastapi import FastAPI, HTTPException, Response
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from surfer.src.agent.events import EventBus, TaskErrorEvent
from surfer.src.agent.intake import CommandIntake
from surfer.src.utils.logging import get_logger, log_event

LOGGER = get_logger("server")


class CommandRequest(BaseModel):
    command: str = Field(..., description="Task for the agent, in plain language.")


async def event_stream(events: EventBus, keepalive_seconds: float = 15.0) -> AsyncIterator[str]:
    """Yield one SSE frame per event, with a comment line while idle."""
    async with events.subscribe() as queue:
        while True:
            try:
                event = await asyncio.wait_for(queue.get(), timeout=keepalive_seconds)
            except asyncio.TimeoutError:
                yield ": keepalive\n\n"
                continue
            yield event.to_sse()


def create_app(
    events: EventBus,
    intake: CommandIntake,
    background: Optional[Callable[[], Awaitable[None]]] = None,
    keepalive_seconds: float = 15.0,
    startup: Optional[Callable[[], Awaitable[None]]] = None,
    shutdown: Optional[Callable[[], Awaitable[None]]] = None,
) -> FastAPI:
    """Build the app.

    ``startup`` (usually ``TaskLoop.start``) runs before the server accepts
    requests; if it raises, startup aborts. ``background`` (usually
    ``TaskLoop.run_forever``) runs for the app's lifespan and ``shutdown``
    runs after it is cancelled.
    """
    state = {"worker": None}

    def _worker_exited(task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        message = f"Agent loop stopped: {exc!r}" if exc else "Agent loop stopped"
        log_event(LOGGER, "worker_exited", error=repr(exc) if exc else None, level=logging.ERROR)
        events.publish(TaskErrorEvent(message=message))

    def _worker_running() -> bool:
        worker = state["worker"]
        return worker is None or not worker.done()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if startup is not None:
            await startup()
        task: Optional[asyncio.Task] = None
        if background is not None:
            task = asyncio.create_task(background())
            task.add_done_callback(_worker_exited)
        state["worker"] = task
        try:
            yield
        finally:
            if task is not None and not task.done():
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
            if shutdown is not None:
                await shutdown()

    app = FastAPI(
        title="Surfer",
        description="Browser agent driven by a language model, one action at a time",
        lifespan=lifespan,
    )

    @app.get("/")
    async def root():
        return {"message": "Surfer agent is running."}

    @app.get("/favicon.ico", include_in_schema=False)
    async def favicon():
        return Response(status_code=204)

    @app.post("/command")
    async def command(request: CommandRequest):
        """Queue a task. Waits for the single slot but never for the task itself."""
        log_event(LOGGER, "command_received", command=request.command[:120])
        if not _worker_running():
            raise HTTPException(status_code=503, detail="agent loop is not running")
        try:
            await intake.submit(request.command)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        return {"status": "ok"}

    @app.get("/events")
    async def stream_events():
        return StreamingResponse(
            event_stream(events, keepalive_seconds),
            media_type="text/event-stream",
            headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
        )

    @app.get("/status")
    async def status():
        return {
            "running": _worker_running(),
            "busy": intake.busy,
            "pending": intake.pending,
            "subscribers": events.subscriber_count,
        }

    return app

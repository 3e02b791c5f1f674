"""
Task loop orchestration.

One command becomes one task session: ask the decision service, apply the
action on the browser thread, observe the page, repeat until Done, a decision
failure, or the step budget runs out.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from surfer.src.utils.config import AgentConfig
from surfer.src.utils.logging import get_logger, log_event

from .errors import DecisionError, SessionControlError
from .events import (
    EventBus,
    ReadyEvent,
    StepErrorEvent,
    StepEvent,
    TaskCompleteEvent,
    TaskErrorEvent,
    ThinkingEvent,
)
from .executor import ActionExecutor
from .intake import CommandIntake
from .models import Action, NewTab, PageState
from .perception import capture_page_state

LOGGER = get_logger("runtime")


@dataclass(slots=True)
class TaskOutcome:
    status: str
    steps: int
    message: str = ""

    @property
    def success(self) -> bool:
        return self.status == "complete"


class StepBudget:
    """Counts actions in one task session."""

    def __init__(self, max_steps: int):
        self.max_steps = max(int(max_steps or 0), 1)
        self.step_count = 0

    def can_continue(self) -> bool:
        return self.step_count < self.max_steps

    def begin_step(self) -> int:
        self.step_count += 1
        return self.step_count

    @property
    def exhausted_message(self) -> str:
        return f"Reached maximum step limit ({self.max_steps})"


class TaskLoop:
    def __init__(
        self,
        browser: Any,
        brain: Any,
        events: EventBus,
        intake: CommandIntake,
        config: Optional[AgentConfig] = None,
        executor: Optional[ActionExecutor] = None,
    ) -> None:
        self.browser = browser
        self.brain = brain
        self.events = events
        self.intake = intake
        self.config = config or AgentConfig()
        self.executor = executor or ActionExecutor(agent_config=self.config)

    async def start(self) -> None:
        """Launch or attach the browser. Failures propagate so startup can abort."""
        log_event(LOGGER, "browser_starting")
        await self.browser.start()

    async def stop(self) -> None:
        await self.browser.close()
        log_event(LOGGER, "browser_closed")

    async def run_forever(self) -> None:
        self.events.publish(ReadyEvent())
        log_event(LOGGER, "waiting_for_commands")
        while True:
            command = await self.intake.next_command()
            try:
                await self.run_task(command)
            except Exception as exc:
                LOGGER.exception("task crashed: %s", command)
                self.events.publish(TaskErrorEvent(message=f"Task crashed: {exc}"))
                self.events.publish(ReadyEvent())
            finally:
                self.intake.finish()

    async def run_task(self, command: str) -> TaskOutcome:
        log_event(LOGGER, "task_started", command=command)
        self.brain.start_task(command)

        if self.config.new_tab_per_task:
            await self._open_new_page()

        budget = StepBudget(self.config.max_steps)

        while True:
            if not budget.can_continue():
                message = budget.exhausted_message
                log_event(LOGGER, "step_limit", max_steps=budget.max_steps, level=logging.WARNING)
                self.events.publish(TaskErrorEvent(message=message))
                outcome = TaskOutcome(status="error", steps=budget.step_count, message=message)
                break

            self.events.publish(ThinkingEvent())
            try:
                action = await self.brain.decide()
            except DecisionError as exc:
                message = str(exc)
                log_event(LOGGER, "decision_failed", error=message, level=logging.ERROR)
                self.events.publish(TaskErrorEvent(message=message))
                outcome = TaskOutcome(status="error", steps=budget.step_count, message=message)
                break

            step_number = budget.begin_step()

            if action.is_terminal:
                log_event(LOGGER, "task_complete", step=step_number, summary=action.summary)
                self.events.publish(TaskCompleteEvent(summary=action.summary))
                outcome = TaskOutcome(status="complete", steps=step_number, message=action.summary)
                break

            if isinstance(action, NewTab):
                await self._open_new_page()

            description = action.describe()
            log_event(LOGGER, "step", step=step_number, description=description)
            self.events.publish(StepEvent(sequence=step_number, description=description))

            page_state = await self.browser.run(self._act_and_observe, action)

            if page_state.error:
                self.events.publish(StepErrorEvent(message=page_state.error))
            self.brain.observe(page_state)

        self.events.publish(ReadyEvent())
        return outcome

    def _act_and_observe(self, page: Any, action: Action) -> PageState:
        """Runs on the browser thread: apply the action, then read the settled page."""
        result = self.executor.apply(page, action)
        extracted = [result.extraction] if result.extraction else []
        return capture_page_state(
            page,
            extracted=extracted,
            error=result.error,
            max_chars=self.config.snapshot_max_chars,
        )

    async def _open_new_page(self) -> bool:
        try:
            await self.browser.new_page()
        except SessionControlError as exc:
            log_event(LOGGER, "new_tab_failed", error=str(exc), level=logging.WARNING)
            return False
        return True

"""
Agent control loop

perceive -> decide -> act, one action per round:
- Brain: conversation + decision service client
- ActionExecutor: applies one Action to the live page
- perception: DOM snapshot with [eN] element ids
- EventBus / CommandIntake: live progress feed and single-slot command queue
- TaskLoop: ties them together under a step budget
"""

from .brain import SYSTEM_PROMPT, Brain
from .browser import BrowserSession
from .conversation import ConversationStore
from .errors import ActionError, ActionParseError, DecisionError, SessionControlError, SurferError
from .events import (
    AgentEvent,
    EventBus,
    ReadyEvent,
    StepErrorEvent,
    StepEvent,
    TaskCompleteEvent,
    TaskErrorEvent,
    ThinkingEvent,
)
from .executor import ActionExecutor, ActionOutcome
from .intake import CommandIntake
from .models import (
    Action,
    ChatMessage,
    Click,
    Done,
    Extract,
    Extraction,
    Navigate,
    NewTab,
    PageState,
    PressKey,
    Screenshot,
    TypeInto,
    WaitFor,
)
from .parsing import parse_action, strip_fences
from .perception import capture_page_state, resolve_selector, selector_for, truncate_snapshot
from .runtime import StepBudget, TaskLoop, TaskOutcome

__all__ = [
    # Decision
    "SYSTEM_PROMPT",
    "Brain",
    "ConversationStore",
    "parse_action",
    "strip_fences",
    # Actions and observations
    "Action",
    "ChatMessage",
    "Click",
    "Done",
    "Extract",
    "Extraction",
    "Navigate",
    "NewTab",
    "PageState",
    "PressKey",
    "Screenshot",
    "TypeInto",
    "WaitFor",
    "ActionExecutor",
    "ActionOutcome",
    "capture_page_state",
    "resolve_selector",
    "selector_for",
    "truncate_snapshot",
    # Session and loop
    "BrowserSession",
    "CommandIntake",
    "EventBus",
    "AgentEvent",
    "ReadyEvent",
    "StepErrorEvent",
    "StepEvent",
    "TaskCompleteEvent",
    "TaskErrorEvent",
    "ThinkingEvent",
    "StepBudget",
    "TaskLoop",
    "TaskOutcome",
    # Errors
    "SurferError",
    "DecisionError",
    "ActionParseError",
    "ActionError",
    "SessionControlError",
]

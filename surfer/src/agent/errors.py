"""Error taxonomy for the agent loop."""
from __future__ import annotations


class SurferError(Exception):
    """Base class for agent errors."""


class DecisionError(SurferError):
    """The decision service failed or replied with something unusable. Ends the task."""


class ActionParseError(DecisionError):
    """The reply could not be decoded into exactly one known action."""

    def __init__(self, message: str, raw: str = "") -> None:
        super().__init__(message)
        self.raw = raw


class ActionError(SurferError):
    """An action could not be applied to the page. Reported back as an observation."""


class SessionControlError(SurferError):
    """The browser session could not switch pages."""

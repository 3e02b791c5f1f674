"""Surfer package root exposing the agent loop and its HTTP server."""

from surfer.src.agent import Brain, BrowserSession, CommandIntake, ConversationStore, EventBus, TaskLoop
from surfer.src.server import create_app

__all__ = [
    "Brain",
    "BrowserSession",
    "CommandIntake",
    "ConversationStore",
    "EventBus",
    "TaskLoop",
    "create_app",
]

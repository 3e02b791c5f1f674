"""HTTP server for the agent."""
from surfer.src.server.app import CommandRequest, create_app, event_stream

__all__ = ["CommandRequest", "create_app", "event_stream"]

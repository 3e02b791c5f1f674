"""Utility exports for Surfer."""
from surfer.src.utils.config import CONFIG, AgentConfig, AppConfig, BrowserConfig, LLMConfig, ServerConfig
from surfer.src.utils.logging import configure_logging, get_logger, log_event

__all__ = [
    "CONFIG",
    "AgentConfig",
    "AppConfig",
    "BrowserConfig",
    "LLMConfig",
    "ServerConfig",
    "configure_logging",
    "get_logger",
    "log_event",
]

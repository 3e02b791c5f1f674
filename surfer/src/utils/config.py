"""Configuration helpers for the Surfer agent."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

MAX_STEPS_PER_TASK = 25
DOM_SNAPSHOT_MAX_CHARS = 4000
EXTRACT_MAX_CHARS = 2000
HISTORY_WARNING_THRESHOLD = 20


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(slots=True)
class LLMConfig:
    """Settings for the decision service."""

    api_key: Optional[str] = os.getenv("OPENAI_API_KEY")
    base_url: Optional[str] = os.getenv("OPENAI_BASE_URL")
    model: str = os.getenv("SURFER_LLM_MODEL", "gpt-4.1")
    temperature: float = 0.2
    request_timeout: float = float(os.getenv("SURFER_LLM_TIMEOUT", "60"))
    history_warning_threshold: int = HISTORY_WARNING_THRESHOLD
    # 0 sends the whole conversation
    context_window: int = 0

    def __post_init__(self) -> None:
        window = os.getenv("SURFER_CONTEXT_WINDOW")
        if window:
            try:
                self.context_window = max(0, int(window))
            except ValueError:
                self.context_window = 0


@dataclass(slots=True)
class BrowserConfig:
    """Connection and pacing details for the Chromium session."""

    cdp_url: str = os.getenv("SURFER_CDP_URL", "http://127.0.0.1:9222")
    profile_dir: str = os.getenv("SURFER_PROFILE_DIR", "agent_profile")
    headless: bool = _env_bool("SURFER_HEADLESS", False)
    navigate_settle_ms: int = 1500
    click_settle_ms: int = 1000
    key_settle_ms: int = 1000
    action_timeout_ms: int = 10000


@dataclass(slots=True)
class AgentConfig:
    """Budgets for one task session."""

    max_steps: int = int(os.getenv("SURFER_MAX_STEPS", str(MAX_STEPS_PER_TASK)))
    snapshot_max_chars: int = DOM_SNAPSHOT_MAX_CHARS
    extract_max_chars: int = EXTRACT_MAX_CHARS
    memory_path: str = os.getenv("SURFER_MEMORY_PATH", "memory.json")
    new_tab_per_task: bool = _env_bool("SURFER_NEW_TAB_PER_TASK", True)


@dataclass(slots=True)
class ServerConfig:
    host: str = os.getenv("SURFER_HOST", "127.0.0.1")
    port: int = int(os.getenv("SURFER_PORT", "3000"))
    port_attempts: int = 10
    keepalive_seconds: float = 15.0


@dataclass(slots=True)
class AppConfig:
    """Aggregated configuration for the agent."""

    llm: LLMConfig = field(default_factory=LLMConfig)
    browser: BrowserConfig = field(default_factory=BrowserConfig)
    agent: AgentConfig = field(default_factory=AgentConfig)
    server: ServerConfig = field(default_factory=ServerConfig)


CONFIG = AppConfig()

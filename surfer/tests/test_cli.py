import socket

from surfer.cli import _apply_overrides, _parse_args, find_free_port
from surfer.src.utils.config import (
    DOM_SNAPSHOT_MAX_CHARS,
    EXTRACT_MAX_CHARS,
    HISTORY_WARNING_THRESHOLD,
    MAX_STEPS_PER_TASK,
    AgentConfig,
    AppConfig,
    LLMConfig,
)


def test_overrides_replace_only_given_values():
    config = _apply_overrides(AppConfig(), _parse_args(["--port", "3100", "--max-steps", "5", "--headless"]))
    assert config.server.port == 3100
    assert config.agent.max_steps == 5
    assert config.browser.headless is True
    assert config.agent.memory_path == AppConfig().agent.memory_path


def test_find_free_port_skips_taken_port():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as taken:
        taken.bind(("127.0.0.1", 0))
        port = taken.getsockname()[1]

        assert find_free_port("127.0.0.1", port, 1) is None
        found = find_free_port("127.0.0.1", port, 10)
        assert found is not None and port < found < port + 10


def test_context_window_from_environment(monkeypatch):
    monkeypatch.setenv("SURFER_CONTEXT_WINDOW", "6")
    assert LLMConfig().context_window == 6
    monkeypatch.setenv("SURFER_CONTEXT_WINDOW", "lots")
    assert LLMConfig().context_window == 0
    monkeypatch.delenv("SURFER_CONTEXT_WINDOW")
    assert LLMConfig().context_window == 0


def test_config_defaults_follow_module_constants():
    agent = AgentConfig()
    assert (agent.snapshot_max_chars, agent.extract_max_chars) == (DOM_SNAPSHOT_MAX_CHARS, EXTRACT_MAX_CHARS)
    assert LLMConfig().history_warning_threshold == HISTORY_WARNING_THRESHOLD
    assert MAX_STEPS_PER_TASK == 25

"""Console entry point for Surfer."""
from __future__ import annotations

import argparse
import socket
import sys
from pathlib import Path
from typing import Optional, Sequence

# Load environment variables before configuration defaults are read
from dotenv import load_dotenv

load_dotenv(Path.cwd() / ".env")

import uvicorn

from surfer.src.agent import (
    SYSTEM_PROMPT,
    Brain,
    BrowserSession,
    CommandIntake,
    ConversationStore,
    DecisionError,
    EventBus,
    TaskLoop,
)
from surfer.src.agent.executor import ActionExecutor
from surfer.src.server import create_app
from surfer.src.utils.config import AppConfig
from surfer.src.utils.logging import configure_logging, get_logger, log_event

LOGGER = get_logger("cli")


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="surfer",
        description="Drive a browser with a language model and stream progress over SSE.",
    )
    parser.add_argument("--host", help="bind address (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, help="first port to try (default: 3000)")
    parser.add_argument("--max-steps", type=int, help="actions allowed per task (default: 25)")
    parser.add_argument("--memory", help="conversation file (default: memory.json)")
    parser.add_argument("--model", help="decision service model name")
    parser.add_argument("--cdp-url", help="Chrome DevTools endpoint to attach to")
    parser.add_argument("--headless", action="store_true", help="launch Chromium headless")
    parser.add_argument("--log-level", default="INFO", help="logging level (default: INFO)")
    return parser.parse_args(argv)


def _apply_overrides(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    if args.host:
        config.server.host = args.host
    if args.port:
        config.server.port = args.port
    if args.max_steps:
        config.agent.max_steps = args.max_steps
    if args.memory:
        config.agent.memory_path = args.memory
    if args.model:
        config.llm.model = args.model
    if args.cdp_url:
        config.browser.cdp_url = args.cdp_url
    if args.headless:
        config.browser.headless = True
    return config


def find_free_port(host: str, first_port: int, attempts: int) -> Optional[int]:
    for port in range(first_port, first_port + max(attempts, 1)):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            try:
                sock.bind((host, port))
            except OSError:
                continue
            return port
    return None


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    configure_logging(args.log_level)
    config = _apply_overrides(AppConfig(), args)

    store = ConversationStore(config.agent.memory_path, SYSTEM_PROMPT)
    try:
        brain = Brain(store, config.llm)
    except DecisionError as exc:
        print(f"[surfer] {exc}", file=sys.stderr)
        return 1

    events = EventBus()
    intake = CommandIntake()
    loop = TaskLoop(
        BrowserSession(config.browser),
        brain,
        events,
        intake,
        config=config.agent,
        executor=ActionExecutor(config.browser, config.agent),
    )
    app = create_app(
        events,
        intake,
        background=loop.run_forever,
        keepalive_seconds=config.server.keepalive_seconds,
        startup=loop.start,
        shutdown=loop.stop,
    )

    port = find_free_port(config.server.host, config.server.port, config.server.port_attempts)
    if port is None:
        last = config.server.port + config.server.port_attempts - 1
        print(
            f"[surfer] Could not bind to any port {config.server.port}-{last}. Stop the old agent first.",
            file=sys.stderr,
        )
        return 1

    log_event(LOGGER, "server_start", url=f"http://{config.server.host}:{port}", messages=len(store))
    uvicorn.run(app, host=config.server.host, port=port, log_level=args.log_level.lower())
    return 0


if __name__ == "__main__":
    sys.exit(main())

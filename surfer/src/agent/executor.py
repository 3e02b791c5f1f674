"""Applies one parsed Action to a live Playwright page."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Optional

from playwright.sync_api import Error as PlaywrightError

from surfer.src.utils.config import AgentConfig, BrowserConfig
from surfer.src.utils.logging import get_logger, log_event

from .errors import ActionError
from .models import (
    Action,
    Click,
    Done,
    Extract,
    Extraction,
    Navigate,
    NewTab,
    PressKey,
    Screenshot,
    TypeInto,
    WaitFor,
)
from .perception import resolve_selector

LOGGER = get_logger("executor")

_CLEAR_VALUE_JS = "(sel) => { const el = document.querySelector(sel); if (el) el.value = ''; }"
_INNER_TEXT_JS = "(sel) => { const el = document.querySelector(sel); return el ? (el.innerText || '') : ''; }"


@dataclass(slots=True)
class ActionOutcome:
    extraction: Optional[Extraction] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None


class ActionExecutor:
    """Runs on the browser worker thread; every call blocks until the action settles."""

    def __init__(
        self,
        browser_config: Optional[BrowserConfig] = None,
        agent_config: Optional[AgentConfig] = None,
        sleep=time.sleep,
    ) -> None:
        self.browser_config = browser_config or BrowserConfig()
        self.agent_config = agent_config or AgentConfig()
        self._sleep = sleep

    def apply(self, page: Any, action: Action) -> ActionOutcome:
        try:
            return self._apply(page, action)
        except (ActionError, PlaywrightError) as exc:
            message = str(exc).strip() or type(exc).__name__
            log_event(LOGGER, "action_failed", action=action.action, error=message, level=logging.WARNING)
            return ActionOutcome(error=message)

    def _apply(self, page: Any, action: Action) -> ActionOutcome:
        cfg = self.browser_config

        if isinstance(action, Navigate):
            page.goto(action.url, wait_until="domcontentloaded")
            page.wait_for_selector("body", state="attached", timeout=cfg.action_timeout_ms)
            self._settle(cfg.navigate_settle_ms)

        elif isinstance(action, WaitFor):
            page.wait_for_selector(resolve_selector(action.selector), state="attached", timeout=action.timeout_ms)

        elif isinstance(action, TypeInto):
            element = self._find(page, action.selector)
            element.click(timeout=cfg.action_timeout_ms)
            page.evaluate(_CLEAR_VALUE_JS, resolve_selector(action.selector))
            page.keyboard.type(action.text)

        elif isinstance(action, Click):
            element = self._find(page, action.selector)
            element.click(timeout=cfg.action_timeout_ms)
            self._settle(cfg.click_settle_ms)

        elif isinstance(action, PressKey):
            page.keyboard.press(action.key)
            self._settle(cfg.key_settle_ms)

        elif isinstance(action, Extract):
            content = page.evaluate(_INNER_TEXT_JS, resolve_selector(action.selector))
            text = content if isinstance(content, str) else ""
            return ActionOutcome(
                extraction=Extraction(
                    label=action.label,
                    content=text[: self.agent_config.extract_max_chars],
                )
            )

        elif isinstance(action, (Screenshot, NewTab, Done)):
            # tab switching belongs to the browser session
            pass

        return ActionOutcome()

    @staticmethod
    def _find(page: Any, selector: str) -> Any:
        element = page.query_selector(resolve_selector(selector))
        if element is None:
            raise ActionError(f"No element matches selector {selector}")
        return element

    def _settle(self, delay_ms: int) -> None:
        if delay_ms > 0:
            self._sleep(delay_ms / 1000)

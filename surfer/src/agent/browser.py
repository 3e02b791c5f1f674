"""Browser session bound to a dedicated worker thread.

Playwright's sync API objects belong to the thread that created them, so every
call goes through ``run``: the orchestrator hands a callable to the single
worker and awaits its result. The current page is passed in as the first
argument and is never shared with another thread.
"""
from __future__ import annotations

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from surfer.src.utils.config import BrowserConfig
from surfer.src.utils.logging import get_logger, log_event

from .errors import SessionControlError

LOGGER = get_logger("browser")

T = TypeVar("T")

LAUNCH_ARGS = [
    "--no-first-run",
    "--no-default-browser-check",
    "--disable-blink-features=AutomationControlled",
    "--disable-infobars",
    "--password-store=basic",
]


class BrowserSession:
    """Attach to a running Chrome over CDP, or launch a persistent profile."""

    def __init__(self, config: Optional[BrowserConfig] = None) -> None:
        self.config = config or BrowserConfig()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="surfer-browser")
        self._playwright = None
        self._browser = None
        self._context = None
        self.page = None

    async def start(self) -> None:
        await self._submit(self._start_blocking)

    async def run(self, fn: Callable[..., T], *args: Any) -> T:
        """Run ``fn(page, *args)`` on the browser thread."""
        return await self._submit(lambda: fn(self.page, *args))

    async def new_page(self) -> None:
        await self._submit(self._new_page_blocking)

    async def close(self) -> None:
        try:
            await self._submit(self._close_blocking)
        finally:
            self._executor.shutdown(wait=False)

    async def _submit(self, fn: Callable[[], T]) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, fn)

    def _start_blocking(self) -> None:
        self._playwright = sync_playwright().start()
        chromium = self._playwright.chromium

        log_event(LOGGER, "attach_attempt", cdp_url=self.config.cdp_url)
        try:
            self._browser = chromium.connect_over_cdp(self.config.cdp_url, timeout=3000)
        except PlaywrightError as exc:
            log_event(LOGGER, "attach_failed", error=str(exc).splitlines()[0] if str(exc) else "")
            self._browser = None

        if self._browser is not None:
            contexts = self._browser.contexts
            self._context = contexts[0] if contexts else self._browser.new_context()
            pages = self._context.pages
            self.page = pages[0] if pages else self._context.new_page()
            log_event(LOGGER, "attached", reused_page=bool(pages))
            return

        profile = Path(self.config.profile_dir)
        profile.mkdir(parents=True, exist_ok=True)
        log_event(LOGGER, "launch", profile=str(profile.resolve()), headless=self.config.headless)
        self._context = chromium.launch_persistent_context(
            str(profile),
            headless=self.config.headless,
            args=LAUNCH_ARGS,
        )
        pages = self._context.pages
        self.page = pages[0] if pages else self._context.new_page()
        log_event(LOGGER, "ready")

    def _new_page_blocking(self) -> None:
        if self._context is None:
            raise SessionControlError("Browser session is not started")
        try:
            page = self._context.new_page()
        except PlaywrightError as exc:
            raise SessionControlError(f"Failed to open new tab: {exc}") from exc
        self.page = page

    def _close_blocking(self) -> None:
        try:
            if self._browser is not None:
                # Attached browsers stay open; only the connection is dropped.
                self._browser.close()
            elif self._context is not None:
                self._context.close()
        except PlaywrightError as exc:
            log_event(LOGGER, "close_failed", error=str(exc), level=logging.WARNING)
        finally:
            if self._playwright is not None:
                self._playwright.stop()
            self._playwright = None
            self._browser = None
            self._context = None
            self.page = None

import asyncio
import threading

import pytest
from playwright.sync_api import Error as PlaywrightError

from surfer.src.agent import browser as browser_module
from surfer.src.agent.browser import BrowserSession
from surfer.src.agent.errors import SessionControlError
from surfer.src.utils.config import BrowserConfig


class StubContext:
    def __init__(self, pages=None, fail_new_page=False):
        self.pages = list(pages or [])
        self.fail_new_page = fail_new_page
        self.closed = False

    def new_page(self):
        if self.fail_new_page:
            raise PlaywrightError("Target page, context or browser has been closed")
        page = f"page-{len(self.pages)}"
        self.pages.append(page)
        return page

    def close(self):
        self.closed = True


class StubChromium:
    def __init__(self, context):
        self.context = context
        self.cdp_urls = []
        self.launches = []

    def connect_over_cdp(self, url, timeout=None):
        self.cdp_urls.append(url)
        raise PlaywrightError("connect ECONNREFUSED 127.0.0.1:9222")

    def launch_persistent_context(self, user_data_dir, headless=False, args=None):
        self.launches.append((user_data_dir, headless))
        return self.context


class StubPlaywright:
    def __init__(self, context):
        self.chromium = StubChromium(context)
        self.stopped = False

    def stop(self):
        self.stopped = True


class StubManager:
    def __init__(self, playwright):
        self.playwright = playwright

    def start(self):
        return self.playwright


def _session(tmp_path, **overrides):
    return BrowserSession(BrowserConfig(profile_dir=str(tmp_path / "profile"), **overrides))


def test_start_falls_back_to_persistent_profile(tmp_path, monkeypatch):
    context = StubContext(pages=["existing"])
    playwright = StubPlaywright(context)
    monkeypatch.setattr(browser_module, "sync_playwright", lambda: StubManager(playwright))
    session = _session(tmp_path, cdp_url="http://127.0.0.1:9222", headless=True)

    asyncio.run(session.start())

    assert playwright.chromium.cdp_urls == ["http://127.0.0.1:9222"]
    assert playwright.chromium.launches == [(str(tmp_path / "profile"), True)]
    assert (tmp_path / "profile").is_dir()
    assert session.page == "existing"
    asyncio.run(session.close())


def test_run_passes_current_page_on_worker_thread(tmp_path):
    session = _session(tmp_path)
    session.page = "current"

    def describe_call(page, suffix):
        return page, suffix, threading.current_thread().name

    page, suffix, thread_name = asyncio.run(session.run(describe_call, "!"))

    assert (page, suffix) == ("current", "!")
    assert thread_name.startswith("surfer-browser")
    assert thread_name != threading.current_thread().name


def test_new_page_switches_current_page(tmp_path):
    session = _session(tmp_path)
    session._context = StubContext(pages=["page-0"])

    asyncio.run(session.new_page())

    assert session.page == "page-1"


def test_new_page_failure_raises_session_control_error(tmp_path):
    session = _session(tmp_path)
    session._context = StubContext(fail_new_page=True)
    session.page = "old"

    with pytest.raises(SessionControlError, match="Failed to open new tab"):
        asyncio.run(session.new_page())
    assert session.page == "old"


def test_new_page_before_start_is_rejected(tmp_path):
    with pytest.raises(SessionControlError, match="not started"):
        asyncio.run(_session(tmp_path).new_page())


def test_close_resets_state(tmp_path):
    session = _session(tmp_path)
    context = StubContext()
    playwright = StubPlaywright(context)
    session._context = context
    session._playwright = playwright
    session.page = "current"

    asyncio.run(session.close())

    assert context.closed and playwright.stopped
    assert session.page is None and session._context is None and session._playwright is None

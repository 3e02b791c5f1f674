import pytest

from surfer.src.agent.executor import ActionExecutor
from surfer.src.agent.models import (
    Click,
    Done,
    Extract,
    Navigate,
    NewTab,
    PressKey,
    Screenshot,
    TypeInto,
    WaitFor,
)
from surfer.src.utils.config import AgentConfig, BrowserConfig

from surfer.tests.fakes import FakePage


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def executor(sleeps):
    return ActionExecutor(
        BrowserConfig(navigate_settle_ms=1500, click_settle_ms=1000, key_settle_ms=1000),
        AgentConfig(extract_max_chars=10),
        sleep=sleeps.append,
    )


def test_navigate_loads_and_settles(executor, sleeps):
    page = FakePage()
    outcome = executor.apply(page, Navigate(url="https://example.com"))
    assert outcome.success
    assert page.visited == ["https://example.com"]
    assert page.waited[0][0] == "body"
    assert sleeps == [1.5]


def test_type_into_clears_then_types(executor):
    page = FakePage(selectors=["#q"])
    outcome = executor.apply(page, TypeInto(selector="#q", text="rust async"))
    assert outcome.success
    assert page.elements["#q"].clicks == 1
    assert page.cleared == ["#q"]
    assert page.keyboard.typed == ["rust async"]


def test_click_missing_element_reports_error(executor, sleeps):
    outcome = executor.apply(FakePage(), Click(selector="#missing"))
    assert not outcome.success
    assert outcome.error == "No element matches selector #missing"
    assert sleeps == []


def test_click_and_press_key_settle(executor, sleeps):
    page = FakePage(selectors=["#go"])
    assert executor.apply(page, Click(selector="#go")).success
    assert executor.apply(page, PressKey(key="Enter")).success
    assert page.elements["#go"].clicks == 1
    assert page.keyboard.pressed == ["Enter"]
    assert sleeps == [1.0, 1.0]


def test_wait_for_uses_requested_timeout(executor):
    page = FakePage(selectors=["#results"])
    assert executor.apply(page, WaitFor(selector="#results", timeout_ms=5000)).success
    assert page.waited == [("#results", 5000)]


def test_wait_for_timeout_becomes_step_error(executor):
    outcome = executor.apply(FakePage(), WaitFor(selector="#never", timeout_ms=100))
    assert not outcome.success
    assert "#never" in outcome.error


def test_extract_caps_content(executor):
    page = FakePage(texts={"body": "0123456789abcdef"})
    outcome = executor.apply(page, Extract(selector="body", label="result"))
    assert outcome.extraction.label == "result"
    assert outcome.extraction.content == "0123456789"


def test_extract_of_missing_element_is_empty(executor):
    outcome = executor.apply(FakePage(), Extract(selector="#nothing", label="x"))
    assert outcome.success
    assert outcome.extraction.content == ""


def test_new_tab_leaves_page_alone(executor):
    page = FakePage()
    outcome = executor.apply(page, NewTab())
    assert outcome.success
    assert page.visited == [] and page.keyboard.typed == []


def test_bare_element_ids_resolve_to_snapshot_attribute(executor):
    page = FakePage(selectors=['[data-eid="[e2]"]'], texts={'[data-eid="[e5]"]': "Price: 10"})
    assert executor.apply(page, Click(selector="e2")).success
    assert page.elements['[data-eid="[e2]"]'].clicks == 1
    outcome = executor.apply(page, Extract(selector="[e5]", label="price"))
    assert outcome.extraction.content == "Price: 10"


def test_missing_bare_element_id_names_original_selector(executor):
    outcome = executor.apply(FakePage(), TypeInto(selector="e9", text="x"))
    assert outcome.error == "No element matches selector e9"


def test_screenshot_and_done_do_nothing(executor, sleeps):
    page = FakePage()
    for action in (Screenshot(), Done(summary="ok")):
        outcome = executor.apply(page, action)
        assert outcome.success
        assert outcome.extraction is None
    assert page.visited == [] and sleeps == []


def test_page_script_failure_becomes_step_error(executor):
    page = FakePage(selectors=["#q"], fail_scripts=True)
    outcome = executor.apply(page, TypeInto(selector="#q", text="x"))
    assert outcome.error == "Execution context was destroyed"

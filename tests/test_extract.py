"""Tests for the shared extraction flow with a mocked page."""
import json
import os
import tempfile
from unittest.mock import MagicMock, PropertyMock

import pytest
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from webdesk_kit.engine.errors import (
    AccessDeniedError,
    NavigationTimeoutError,
    NotAuthenticatedError,
    Outcome,
    WebdeskError,
)
from webdesk_kit.engine.extract import classify_landing, navigate, run_extraction
from webdesk_kit.engine.failure_bundle import BundleVerbosity


class FakeAdapter:
    name = "fake"
    navigation_timeout_ms = 1234
    content_selectors = [".content"]

    def __init__(self, outcome=Outcome.OK):
        self.outcome = outcome
        self.prepared = False

    def check_access(self, page):
        return self.outcome

    def prepare(self, page, url):
        self.prepared = True

    def extract(self, page):
        return {"source": "content"}

    def extract_fallback(self, page):
        return {"source": "fallback"}


def _make_page(url="https://example.com/doc"):
    page = MagicMock()
    type(page).url = PropertyMock(return_value=url)
    page.title.return_value = "Doc"
    return page


def test_classify_landing():
    assert classify_landing("https://accounts.google.com/signin", "",
                            login_markers=("accounts.google.com",)) is Outcome.NOT_AUTHENTICATED
    assert classify_landing("https://docs.google.com/d/1", "Request access",
                            denied_titles=("Request access",)) is Outcome.ACCESS_DENIED
    assert classify_landing("https://docs.google.com/d/1", "Plan") is Outcome.OK
    assert classify_landing(None, None) is Outcome.OK


def test_navigate_uses_bounds():
    page = _make_page()
    navigate(page, "https://example.com", timeout_ms=5000, wait_until="networkidle")
    page.goto.assert_called_once_with("https://example.com", wait_until="networkidle", timeout=5000)


def test_navigate_timeout():
    page = _make_page()
    page.goto.side_effect = PlaywrightTimeoutError("Timeout 5000ms exceeded")
    with pytest.raises(NavigationTimeoutError):
        navigate(page, "https://example.com", timeout_ms=5000)


def test_navigate_other_failure():
    page = _make_page()
    page.goto.side_effect = PlaywrightError("net::ERR_NAME_NOT_RESOLVED")
    with pytest.raises(WebdeskError) as exc:
        navigate(page, "https://example.com")
    assert not isinstance(exc.value, NavigationTimeoutError)


def test_extracts_when_marker_matches():
    page = _make_page()
    adapter = FakeAdapter()
    result = run_extraction(page, adapter, "https://example.com/doc")

    assert result.ok
    assert result.record == {"source": "content"}
    assert adapter.prepared
    page.goto.assert_called_once_with("https://example.com/doc",
                                      wait_until="domcontentloaded", timeout=1234)


def test_falls_back_when_no_marker():
    page = _make_page()
    page.wait_for_selector.side_effect = PlaywrightTimeoutError("not found")
    result = run_extraction(page, FakeAdapter(), "https://example.com/doc")
    assert result.ok
    assert result.record == {"source": "fallback"}


def test_login_redirect_is_outcome_not_exception():
    page = _make_page("https://accounts.google.com/signin/v2")
    adapter = FakeAdapter(Outcome.NOT_AUTHENTICATED)
    result = run_extraction(page, adapter, "https://docs.google.com/document/d/1/edit")

    assert not result.ok
    assert result.outcome is Outcome.NOT_AUTHENTICATED
    assert isinstance(result.error, NotAuthenticatedError)
    assert result.record is None
    assert not adapter.prepared
    page.screenshot.assert_not_called()


def test_access_denied_outcome():
    result = run_extraction(_make_page(), FakeAdapter(Outcome.ACCESS_DENIED), "https://example.com/doc")
    assert result.outcome is Outcome.ACCESS_DENIED
    assert isinstance(result.error, AccessDeniedError)


def test_navigation_timeout_captures_screenshot_and_raises():
    page = _make_page()
    page.goto.side_effect = PlaywrightTimeoutError("Timeout 1234ms exceeded")
    events = MagicMock()

    with tempfile.TemporaryDirectory() as tmpdir:
        with pytest.raises(NavigationTimeoutError):
            run_extraction(page, FakeAdapter(), "https://example.com/doc",
                           screenshot_dir=tmpdir, event_logger=events)
        page.screenshot.assert_called_once()
        path = page.screenshot.call_args.kwargs["path"]
        assert os.path.basename(path).startswith("fake-error-")

    events.log_failure.assert_called_once()
    bundle = events.log_failure.call_args.args[0]
    assert bundle["reason"] == "NavigationTimeoutError"
    events.log_navigate.assert_not_called()


def test_failure_details_saved_beside_screenshot():
    page = _make_page()
    page.goto.side_effect = PlaywrightTimeoutError("Timeout 1234ms exceeded")

    with tempfile.TemporaryDirectory() as tmpdir:
        with pytest.raises(NavigationTimeoutError):
            run_extraction(page, FakeAdapter(), "https://example.com/doc", screenshot_dir=tmpdir)
        shot = page.screenshot.call_args.kwargs["path"]
        saved = os.path.splitext(shot)[0] + ".json"
        assert os.listdir(tmpdir) == [os.path.basename(saved)]
        with open(saved) as f:
            data = json.load(f)

    assert data["reason"] == "NavigationTimeoutError"
    assert data["target"] == "https://example.com/doc"
    assert data["screenshot_path"] == shot


def test_bundle_off_writes_nothing():
    page = _make_page()
    page.goto.side_effect = PlaywrightTimeoutError("Timeout 1234ms exceeded")
    events = MagicMock()

    with tempfile.TemporaryDirectory() as tmpdir:
        with pytest.raises(NavigationTimeoutError):
            run_extraction(page, FakeAdapter(), "https://example.com/doc", screenshot_dir=tmpdir,
                           verbosity=BundleVerbosity.OFF, event_logger=events)
        assert os.listdir(tmpdir) == []

    page.screenshot.assert_not_called()
    assert events.log_failure.call_args.args[0]["page_url"] == ""


def test_playwright_error_during_extract_is_wrapped():
    page = _make_page()

    class BrokenAdapter(FakeAdapter):
        def extract(self, page):
            raise PlaywrightError("Target closed")

    with pytest.raises(WebdeskError) as exc:
        run_extraction(page, BrokenAdapter(), "https://example.com/doc")
    assert "Target closed" in str(exc.value)
    assert isinstance(exc.value.__cause__, PlaywrightError)


def test_navigate_event_logged():
    page = _make_page("https://example.com/landed")
    events = MagicMock()
    run_extraction(page, FakeAdapter(), "https://example.com/doc", event_logger=events)
    events.log_navigate.assert_called_once_with("https://example.com/doc", "https://example.com/landed")

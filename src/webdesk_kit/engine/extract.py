"""Shared page-extraction flow.

Requires an injected page; never opens a browser. The CLI layer owns the
session and hands a fresh tab to ``run_extraction`` together with the
site adapter.
"""
import logging
from dataclasses import dataclass
from typing import Any

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from .errors import (
    AccessDeniedError,
    NavigationTimeoutError,
    NotAuthenticatedError,
    Outcome,
    WebdeskError,
)
from .failure_bundle import BundleVerbosity, capture_failure_bundle, save_failure_bundle
from .selectors import MatcherChain

log = logging.getLogger(__name__)


@dataclass
class ExtractionResult:
    outcome: Outcome
    record: Any = None
    error: WebdeskError | None = None

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.OK


def classify_landing(url: str, title: str, *,
                     login_markers: tuple[str, ...] = (),
                     denied_titles: tuple[str, ...] = ()) -> Outcome:
    """Classify a landing page by URL and title substrings."""
    url = url or ""
    title = title or ""
    if any(marker in url for marker in login_markers):
        return Outcome.NOT_AUTHENTICATED
    if any(marker in title for marker in denied_titles):
        return Outcome.ACCESS_DENIED
    return Outcome.OK


def navigate(page, url: str, *, timeout_ms: int = 30000,
             wait_until: str = "domcontentloaded") -> None:
    """``page.goto`` with Playwright failures mapped to package errors."""
    log.info("Navigating to %s", url)
    try:
        page.goto(url, wait_until=wait_until, timeout=timeout_ms)
    except PlaywrightTimeoutError as e:
        raise NavigationTimeoutError(
            f"Navigation to {url} timed out after {timeout_ms}ms"
        ) from e
    except PlaywrightError as e:
        raise WebdeskError(
            f"Navigation to {url} failed: {e}",
            hint="Check your network connection and that the URL is correct.",
        ) from e
    log.info("Landed on %s", page.url)


def outcome_error(outcome: Outcome, site: str, url: str) -> WebdeskError | None:
    if outcome is Outcome.NOT_AUTHENTICATED:
        return NotAuthenticatedError(f"Not authenticated with {site} (landed on {url})")
    if outcome is Outcome.ACCESS_DENIED:
        return AccessDeniedError(f"Access denied to {url}; you need permission to view it")
    return None


def run_extraction(page, adapter, url: str, *,
                   screenshot_dir: str = "",
                   verbosity: str = BundleVerbosity.FULL,
                   event_logger=None) -> ExtractionResult:
    """Navigate to *url* and extract a record with *adapter*.

    Login redirects and permission walls come back as an ExtractionResult
    with a non-OK outcome. Navigation and extraction failures are terminal:
    a diagnostic bundle is captured (and saved to *screenshot_dir* unless
    *verbosity* is OFF), then the error is raised.
    """
    try:
        navigate(page, url, timeout_ms=adapter.navigation_timeout_ms)
        if event_logger is not None:
            event_logger.log_navigate(url, page.url)

        outcome = adapter.check_access(page)
        if outcome is not Outcome.OK:
            log.warning("%s: %s", adapter.name, outcome.value)
            return ExtractionResult(outcome, error=outcome_error(outcome, adapter.name, page.url))

        adapter.prepare(page, url)

        chain = MatcherChain.waiting(adapter.content_selectors)
        matched = chain.first_match(page)
        if matched:
            log.info("Found content using selector: %s", matched)
            record = adapter.extract(page)
        else:
            log.warning("No content marker matched, falling back to whole-page text")
            record = adapter.extract_fallback(page)
    except (WebdeskError, PlaywrightError) as e:
        bundle = capture_failure_bundle(
            page, adapter.name, url, type(e).__name__,
            error=str(e), verbosity=verbosity, screenshot_dir=screenshot_dir,
        )
        if screenshot_dir and verbosity != BundleVerbosity.OFF:
            path = save_failure_bundle(bundle, screenshot_dir)
            if path:
                log.info("Failure details saved to: %s", path)
        if event_logger is not None:
            event_logger.log_failure(bundle.to_dict())
        if isinstance(e, WebdeskError):
            raise
        raise WebdeskError(f"Extraction from {url} failed: {e}") from e

    return ExtractionResult(Outcome.OK, record)

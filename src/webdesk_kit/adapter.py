"""SiteAdapter Protocol: the interface each page extractor implements.

Methods, not config dicts; each adapter owns its DOM interaction fully.
The shared extraction flow calls these methods; it never touches
site-specific selectors or URLs directly.
"""
from typing import Any, Protocol, runtime_checkable

from .engine.errors import Outcome


@runtime_checkable
class SiteAdapter(Protocol):
    """Protocol that page extractors must implement.

    Each site (Google Docs, Slack, ...) provides a concrete class. The
    extraction flow navigates, asks the adapter to classify the landing
    page, waits for the adapter's content markers, then asks for a record.
    """

    name: str                   # "google-docs", "slack"
    navigation_timeout_ms: int  # bound on page.goto

    # Prioritised content markers. Items are selectors or
    # ``(selector, timeout_ms)`` pairs; the first that appears wins.
    content_selectors: list

    def check_access(self, page: Any) -> Outcome:
        """Classify the page after navigation.

        Returns Outcome.OK, NOT_AUTHENTICATED or ACCESS_DENIED. Must not raise
        for a login redirect or permission wall.
        """
        ...

    def prepare(self, page: Any, url: str) -> None:
        """Get past interstitials (app-launch redirects etc.) before waiting."""
        ...

    def extract(self, page: Any) -> Any:
        """Extract a structured record once a content marker matched."""
        ...

    def extract_fallback(self, page: Any) -> Any:
        """Coarse whole-page extraction when no content marker matched."""
        ...

"""Ordered matcher chains with first-match-wins semantics.

Third-party markup is not stable, so content markers are expressed as a
priority list of matchers. Each matcher is tried in order; the first one
that reports a match wins and later ones are never run.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

log = logging.getLogger(__name__)

Matcher = Callable[[Any], bool]

DEFAULT_TIMEOUT_MS = 5000


def wait_for(selector: str, timeout_ms: int = DEFAULT_TIMEOUT_MS) -> Matcher:
    """Matcher that waits up to *timeout_ms* for *selector* to attach."""

    def _match(page) -> bool:
        try:
            page.wait_for_selector(selector, timeout=timeout_ms)
            return True
        except PlaywrightTimeoutError:
            return False

    _match.__name__ = f"wait_for({selector!r})"
    return _match


def present(selector: str) -> Matcher:
    """Matcher that checks *selector* once, without waiting."""

    def _match(page) -> bool:
        return page.query_selector(selector) is not None

    _match.__name__ = f"present({selector!r})"
    return _match


def url_contains(*fragments: str) -> Matcher:
    """Matcher on the page's current URL."""

    def _match(page) -> bool:
        url = page.url or ""
        return any(f in url for f in fragments)

    _match.__name__ = f"url_contains{fragments!r}"
    return _match


@dataclass
class MatcherChain:
    """Named matchers tried in priority order."""

    matchers: list[tuple[str, Matcher]] = field(default_factory=list)

    @classmethod
    def waiting(cls, selectors: Iterable[str | tuple[str, int]],
                timeout_ms: int = DEFAULT_TIMEOUT_MS) -> "MatcherChain":
        """Chain of ``wait_for`` matchers. Items may be ``(selector, timeout_ms)``."""
        chain = cls()
        for item in selectors:
            if isinstance(item, tuple):
                selector, ms = item
            else:
                selector, ms = item, timeout_ms
            chain.add(selector, wait_for(selector, ms))
        return chain

    @classmethod
    def instant(cls, selectors: Iterable[str]) -> "MatcherChain":
        chain = cls()
        for selector in selectors:
            chain.add(selector, present(selector))
        return chain

    def add(self, name: str, matcher: Matcher) -> "MatcherChain":
        self.matchers.append((name, matcher))
        return self

    def first_match(self, page) -> str | None:
        """Return the name of the first matcher that matches, or None."""
        for name, matcher in self.matchers:
            if matcher(page):
                log.debug("Matched %s", name)
                return name
        return None

    def __len__(self) -> int:
        return len(self.matchers)

"""Browser session lifecycle: probe, launch-or-reuse, attach, teardown.

A session wraps one external browser process and at most one CDP
connection to it. When the debugger is already answering, the session
attaches to it and does not own the process: cleanup only disconnects. When
nothing answers, the session spawns the browser itself, owns it, and may
kill it on ``terminate()``.

The playwright object is injected, so callers own the
``sync_playwright()`` lifetime.
"""
import logging
import subprocess
from contextlib import contextmanager
from typing import Any

from playwright.sync_api import Error as PlaywrightError

from ..engine.errors import BrowserConnectionError, NotFoundError, SessionStateError
from .chrome import find_system_browser, kill_browser, probe_debug_endpoint, settle, spawn_debug_browser

log = logging.getLogger(__name__)

DEFAULT_PORT = 9222
DEFAULT_SETTLE_SECONDS = 3.0


class BrowserSession:
    """One browser process plus zero-or-one live CDP connection."""

    def __init__(self, playwright: Any, port: int = DEFAULT_PORT, *,
                 profile_dir: str = "", settle_seconds: float = DEFAULT_SETTLE_SECONDS):
        self.playwright = playwright
        self.port = port
        self.profile_dir = profile_dir
        self.settle_seconds = settle_seconds
        self.process: subprocess.Popen | None = None
        self.browser = None
        self.context = None

    @property
    def owns_process(self) -> bool:
        return self.process is not None

    @property
    def is_connected(self) -> bool:
        return self.browser is not None

    @property
    def endpoint(self) -> str:
        return f"http://localhost:{self.port}"

    @classmethod
    def ensure_available(cls, playwright: Any, port: int = DEFAULT_PORT, *,
                         profile_dir: str = "",
                         settle_seconds: float = DEFAULT_SETTLE_SECONDS) -> "BrowserSession":
        """Attach to a running debug browser on *port*, or launch one and attach.

        Raises NotFoundError when no browser executable is installed and
        BrowserConnectionError when attaching fails.
        """
        session = cls(playwright, port, profile_dir=profile_dir, settle_seconds=settle_seconds)

        if probe_debug_endpoint(port) is not None:
            log.info("Reusing browser already listening on port %d", port)
            session.attach()
            return session

        browser_path = find_system_browser()
        if not browser_path:
            raise NotFoundError(
                "No Microsoft Edge or Chrome installation found",
                hint="Install Microsoft Edge or Google Chrome and run the command again.",
            )

        log.info("No browser on port %d, launching a new one", port)
        session.process = spawn_debug_browser(
            browser_path, port=port, user_data_dir=profile_dir,
        )
        settle(settle_seconds)
        try:
            session.attach()
        except BrowserConnectionError:
            kill_browser(session.process)
            session.process = None
            raise
        log.info("You can now log in using the browser window; debugger at %s", session.endpoint)
        return session

    def attach(self):
        """Connect over CDP and adopt the first browsing context (or create one)."""
        if self.browser is not None:
            raise SessionStateError("Session is already connected")
        try:
            browser = self.playwright.chromium.connect_over_cdp(self.endpoint)
        except PlaywrightError as e:
            raise BrowserConnectionError(
                f"Failed to connect to browser on port {self.port}: {e}"
            ) from e

        self.browser = browser
        if browser.contexts:
            self.context = browser.contexts[0]
            log.info("Connected to existing browser context")
        else:
            self.context = browser.new_context()
            log.info("Created new browser context")
        return self.browser

    def new_page(self):
        if self.context is None:
            raise SessionStateError("Not connected to a browser; call attach() first")
        page = self.context.new_page()
        log.debug("Opened new tab")
        return page

    def all_pages(self) -> list:
        if self.context is None:
            raise SessionStateError("Not connected to a browser; call attach() first")
        return list(self.context.pages)

    def disconnect(self) -> None:
        """Close the CDP connection only; the browser keeps running."""
        if self.browser is None:
            return
        try:
            self.browser.close()
        except PlaywrightError as e:
            log.warning("Failed to close browser connection cleanly: %s", e)
        finally:
            self.browser = None
            self.context = None
        log.info("Disconnected from browser (still running)")

    def terminate(self) -> None:
        """Disconnect, then kill the browser if this session launched it."""
        self.disconnect()
        if self.process is not None:
            kill_browser(self.process)
            self.process = None
            log.info("Closed browser process")


@contextmanager
def open_session(playwright: Any, *, port: int = DEFAULT_PORT, profile_dir: str = "",
                 settle_seconds: float = DEFAULT_SETTLE_SECONDS):
    """Ensure a debug browser, open a fresh tab, yield ``(session, page)``.

    On exit the tab is closed and the connection dropped; the browser
    process is left running for the next invocation.
    """
    session = BrowserSession.ensure_available(
        playwright, port, profile_dir=profile_dir, settle_seconds=settle_seconds,
    )
    page = None
    try:
        page = session.new_page()
        yield session, page
    finally:
        if page is not None:
            try:
                page.close()
            except PlaywrightError as e:
                log.warning("Failed to close tab cleanly: %s", e)
        session.disconnect()

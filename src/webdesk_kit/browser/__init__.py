"""browser: locate, launch and attach to a debuggable Chromium-family browser.

Zero site-specific dependencies. macOS and Linux only.
"""
from .chrome import find_system_browser, probe_debug_endpoint, spawn_debug_browser, kill_browser  # noqa: F401
from .session import BrowserSession, open_session  # noqa: F401
from .capabilities import apply_user_agent, block_app_launches, build_user_agent  # noqa: F401

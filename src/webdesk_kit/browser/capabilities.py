"""Best-effort page tweaks: user-agent override and app-launch blocking.

Every helper checks the capability first and returns a result instead of
raising, so a missing feature degrades to a warning.
"""
import logging

from playwright.sync_api import Error as PlaywrightError

log = logging.getLogger(__name__)

DESKTOP_CHROME_VERSION = "131.0.0.0"

BLOCKED_URL_PREFIXES = ("slack://", "msteams://", "intent://")
BLOCKED_URL_SUBSTRINGS = ("app-store-link",)

_WINDOW_OPEN_GUARD = """
(() => {
    const blocked = %s;
    const originalOpen = window.open;
    window.open = function(url, ...args) {
        if (typeof url === 'string' && blocked.some(p => url.startsWith(p))) {
            console.log('Blocked app launch via window.open:', url);
            return null;
        }
        return originalOpen.call(window, url, ...args);
    };
})();
"""


def build_user_agent(chrome_version: str = DESKTOP_CHROME_VERSION, template: str = "") -> str:
    """Build a desktop Chrome User-Agent string for *chrome_version*."""
    if not template:
        template = (
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
            "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/{version} Safari/537.36"
        )
    return template.format(version=chrome_version)


def supports_cdp(page) -> bool:
    """True when *page* belongs to a Chromium browser that can open CDP sessions."""
    try:
        browser = page.context.browser
        return browser is not None and browser.browser_type.name == "chromium"
    except (AttributeError, PlaywrightError):
        return False


def apply_user_agent(page, user_agent: str):
    """Override the page's User-Agent through CDP.

    Returns the CDP session (keep it alive for the override to persist), or
    None when the capability is unavailable.
    """
    if not supports_cdp(page):
        log.warning("User-agent override unavailable: not a Chromium CDP page")
        return None
    try:
        cdp = page.context.new_cdp_session(page)
        cdp.send("Network.setUserAgentOverride", {"userAgent": user_agent})
    except PlaywrightError as e:
        log.warning("Could not set user agent: %s", e)
        return None
    log.debug("User agent overridden via CDP")
    return cdp


def is_app_launch(url: str) -> bool:
    return url.startswith(BLOCKED_URL_PREFIXES) or any(s in url for s in BLOCKED_URL_SUBSTRINGS)


def block_app_launches(page, *, header_host: str = "", extra_headers: dict | None = None) -> bool:
    """Abort requests that would hand off to a desktop app.

    Requests whose URL contains *header_host* get *extra_headers* merged in,
    which is how a site is nudged into serving its web client. Returns True
    when interception was installed.
    """

    def _handle(route):
        request = route.request
        url = request.url
        if is_app_launch(url):
            log.info("Blocked external app launch: %s", url)
            route.abort()
            return
        if header_host and extra_headers and header_host in url:
            route.continue_(headers={**request.headers, **extra_headers})
            return
        route.continue_()

    try:
        page.route("**/*", _handle)
    except PlaywrightError as e:
        log.warning("Could not set up route blocking: %s", e)
        return False

    try:
        blocked = "[" + ", ".join(f"'{p}'" for p in BLOCKED_URL_PREFIXES) + "]"
        page.add_init_script(_WINDOW_OPEN_GUARD % blocked)
    except PlaywrightError as e:
        log.warning("Could not add app-launch guard script: %s", e)
    return True

"""Slack web client: thread extractor, auth check, and announcement poster."""
import logging
from urllib.parse import urlparse

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from ..browser.capabilities import apply_user_agent, block_app_launches, build_user_agent
from ..compose.driver import ComposerTiming, clear_composer, replay
from ..compose.plan import ComposerKeys, plan_keystrokes
from ..engine.errors import NavigationTimeoutError, NotAuthenticatedError, Outcome, WebdeskError
from ..engine.extract import classify_landing, navigate
from ..records import ExtractedThread, ThreadMessage

log = logging.getLogger(__name__)

LOGIN_MARKERS = ("signin", "login")

MESSAGE_INPUT = '[data-qa="message_input"]'
SEND_BUTTON = '[data-qa="texty_send_button"]'
BROWSER_LINK = 'a[href*="/messages/"]'

MESSAGE_SELECTORS = ['[data-qa="message"]', ".c-message_kit__message", ".c-message__body"]
AUTHOR_SELECTORS = [
    '[data-qa="message_sender_name"]',
    ".c-message__sender_link",
    ".c-message__sender",
    ".c-message_kit__sender_name",
]
TIME_SELECTORS = ['[data-qa="message_time"]', ".c-timestamp", ".c-message__ts"]
CONTENT_SELECTORS = [
    '[data-qa="message_content"]',
    ".c-message__body",
    ".p-rich_text_section",
    ".c-message_kit__text",
]
CHANNEL_SELECTORS = ['[data-qa="channel_name"]', ".p-channel_header__name", ".c-channel_header__name"]

WORKSPACE_INDICATORS = [
    '[data-qa="workspace-name"]',
    ".p-client_container",
    '[data-qa="client_container"]',
    ".p-workspace__sidebar",
    '[data-qa="channel_list"]',
    ".p-channel_sidebar",
    ".p-client",
    ".c-workspace__primary_view",
    ".p-workspace_layout",
    ".c-message_list",
    ".c-texty_input",
]
SIGNIN_INDICATORS = ['input[name="identifier"]', ".signin", ".login", 'form[action*="signin"]']
CLIENT_URL_FRAGMENTS = ("/client/", "/messages/", "/archives/")

WEB_CLIENT_HEADERS = {
    "Accept": (
        "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,"
        "image/webp,image/apng,*/*;q=0.8,application/signed-exchange;v=b3;q=0.7"
    ),
    "Sec-Ch-Ua": '"Google Chrome";v="131", "Chromium";v="131", "Not_A Brand";v="24"',
    "Sec-Ch-Ua-Platform": '"macOS"',
    "Sec-Ch-Ua-Mobile": "?0",
}

_FIRST_TEXT_JS = """
(root, selectors, attr) => {
    for (const selector of selectors) {
        const el = root.querySelector(selector);
        if (el) {
            return (attr && el.getAttribute(attr)) || el.textContent.trim();
        }
    }
    return null;
}
"""

_THREAD_JS = """
(args) => {
    const firstText = %s;
    let elements = [];
    for (const selector of args.messageSelectors) {
        elements = document.querySelectorAll(selector);
        if (elements.length > 0) break;
    }
    const messages = [];
    elements.forEach((el, i) => {
        messages.push({
            index: i + 1,
            author: firstText(el, args.authorSelectors, null) || 'Unknown',
            time: firstText(el, args.timeSelectors, 'datetime') || 'Unknown',
            content: firstText(el, args.contentSelectors, null) || 'No content',
        });
    });
    return {
        url: window.location.href,
        channel: firstText(document, args.channelSelectors, null) || 'Unknown Channel',
        messages,
    };
}
""" % _FIRST_TEXT_JS.strip()

_REDIRECT_JS = """
() => {
    const title = document.title || '';
    const body = document.body ? document.body.innerText : '';
    return title.includes('Redirecting') ||
           body.includes('Launching') ||
           body.includes('open this link in your browser');
}
"""

_AUTH_JS = """
(args) => {
    for (const selector of args.workspace) {
        if (document.querySelectorAll(selector).length > 0) return 'workspace';
    }
    const url = window.location.href;
    if (args.clientFragments.some(f => url.includes(f))) return 'workspace';
    for (const selector of args.signin) {
        if (document.querySelector(selector)) return 'signin';
    }
    return 'unknown';
}
"""

_BODY_TEXT_JS = "() => document.body ? document.body.innerText : ''"


def browser_url(thread_url: str) -> str:
    """Rewrite an archive link to the in-browser client path."""
    return thread_url.replace("/archives/", "/messages/")


def prepare_web_client(page):
    """Force the web client: override UA and block desktop-app hand-offs.

    Returns the CDP session holding the UA override (or None).
    """
    cdp = apply_user_agent(page, build_user_agent())
    block_app_launches(
        page,
        header_host="slack.com",
        extra_headers={"User-Agent": build_user_agent(), **WEB_CLIENT_HEADERS},
    )
    return cdp


def check_authentication(page, workspace_url: str) -> Outcome:
    """Open the workspace and decide whether the operator is logged in."""
    navigate(page, workspace_url, timeout_ms=30000)
    try:
        page.wait_for_load_state("networkidle", timeout=10000)
    except PlaywrightTimeoutError:
        log.debug("Workspace never went network-idle, checking anyway")

    url = page.url
    if classify_landing(url, "", login_markers=LOGIN_MARKERS) is Outcome.NOT_AUTHENTICATED:
        return Outcome.NOT_AUTHENTICATED

    state = page.evaluate(_AUTH_JS, {
        "workspace": WORKSPACE_INDICATORS,
        "signin": SIGNIN_INDICATORS,
        "clientFragments": list(CLIENT_URL_FRAGMENTS),
    })
    log.info("Slack auth probe: %s (%s)", state, url)
    if state == "signin":
        return Outcome.NOT_AUTHENTICATED
    if state == "workspace":
        return Outcome.OK
    # No sign-in form and still on the workspace host: assume logged in
    if urlparse(workspace_url).netloc in url:
        return Outcome.OK
    return Outcome.NOT_AUTHENTICATED


class SlackThreadAdapter:
    """Extracts the messages of one thread or channel view."""

    name = "slack"
    navigation_timeout_ms = 15000
    content_selectors = MESSAGE_SELECTORS + [".p-rich_text_section"]

    def __init__(self, redirect_wait_ms: int = 2000, settle_ms: int = 3000):
        self.redirect_wait_ms = redirect_wait_ms
        self.settle_ms = settle_ms

    def check_access(self, page) -> Outcome:
        return classify_landing(page.url, page.title(), login_markers=LOGIN_MARKERS)

    def prepare(self, page, url: str) -> None:
        page.wait_for_timeout(self.redirect_wait_ms)
        if page.evaluate(_REDIRECT_JS):
            log.info("Detected app-launch redirect page, following the browser link")
            try:
                page.wait_for_selector(BROWSER_LINK, timeout=5000)
                page.click(BROWSER_LINK)
                page.wait_for_load_state("networkidle", timeout=15000)
            except PlaywrightTimeoutError:
                log.warning("Browser link not usable, navigating to the web client URL")
                navigate(page, browser_url(url), timeout_ms=15000, wait_until="networkidle")
        page.wait_for_timeout(self.settle_ms)

    def extract(self, page) -> ExtractedThread:
        data = page.evaluate(_THREAD_JS, {
            "messageSelectors": MESSAGE_SELECTORS,
            "authorSelectors": AUTHOR_SELECTORS,
            "timeSelectors": TIME_SELECTORS,
            "contentSelectors": CONTENT_SELECTORS,
            "channelSelectors": CHANNEL_SELECTORS,
        })
        messages = tuple(
            ThreadMessage(index=m["index"], author=m["author"], time=m["time"], content=m["content"])
            for m in data.get("messages") or []
        )
        return ExtractedThread(url=data.get("url") or page.url,
                               channel=data.get("channel") or "Unknown Channel",
                               messages=messages)

    def extract_fallback(self, page) -> ExtractedThread:
        return ExtractedThread(url=page.url, channel="Unknown Channel",
                               page_text=page.evaluate(_BODY_TEXT_JS) or "", fallback=True)


class Poster:
    """Types a document into a DM composer and sends it."""

    def __init__(self, keys: ComposerKeys | None = None, timing: ComposerTiming | None = None,
                 after_navigation_ms: int = 3000, after_send_ms: int = 2000,
                 composer_timeout_ms: int = 30000):
        self.keys = keys or ComposerKeys()
        self.timing = timing or ComposerTiming()
        self.after_navigation_ms = after_navigation_ms
        self.after_send_ms = after_send_ms
        self.composer_timeout_ms = composer_timeout_ms

    def post(self, page, dm_url: str, text: str) -> int:
        """Post *text* to *dm_url*. Returns the number of key actions sent."""
        actions = plan_keystrokes(text, self.keys)

        navigate(page, dm_url, timeout_ms=30000)
        if classify_landing(page.url, "", login_markers=LOGIN_MARKERS) is not Outcome.OK:
            raise NotAuthenticatedError(f"Not authenticated with Slack (landed on {page.url})")

        try:
            page.wait_for_selector(MESSAGE_INPUT, timeout=self.composer_timeout_ms)
        except PlaywrightTimeoutError as e:
            raise NavigationTimeoutError("Message composer did not appear") from e
        try:
            page.wait_for_timeout(self.after_navigation_ms)
            page.click(MESSAGE_INPUT)
            clear_composer(page)
            page.wait_for_timeout(self.after_navigation_ms)

            log.info("Typing announcement (%d key actions)", len(actions))
            replay(page, actions, self.timing)

            log.info("Sending message")
            page.click(SEND_BUTTON)
            page.wait_for_timeout(self.after_send_ms)
        except PlaywrightTimeoutError as e:
            raise NavigationTimeoutError(
                f"Composer stopped responding while posting: {e}",
                hint="Check the DM in the browser; the message may be partly typed and unsent.",
            ) from e
        except PlaywrightError as e:
            raise WebdeskError(
                f"Posting to {dm_url} failed: {e}",
                hint="Check the DM in the browser; the message may be partly typed and unsent.",
            ) from e
        return len(actions)


def check_login(report, page, workspace_url: str):
    """Record whether the tab is signed in to the Slack workspace. Returns *report*."""
    outcome = check_authentication(page, workspace_url)
    report.record("Slack authentication", outcome is Outcome.OK, page.url)
    return report

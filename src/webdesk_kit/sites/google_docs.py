"""Google Docs extractor: title, body text, outline, word count."""
import logging
import re

from ..engine.errors import Outcome, UsageError
from ..engine.extract import classify_landing, navigate
from ..records import ExtractedDocument, Heading

log = logging.getLogger(__name__)

HOME_URL = "https://docs.google.com"
LOGIN_MARKERS = ("accounts.google.com", "signin")
DENIED_TITLES = ("Request access", "You need permission")
TITLE_SUFFIX = " - Google Docs"

# Menu-bar labels that leak into whole-page text.
MENU_WORDS = frozenset({
    "File", "Edit", "View", "Insert", "Format", "Tools",
    "Extensions", "Help", "Share", "Editing",
})

HEADING_SELECTORS = [
    "h1", "h2", "h3", "h4", "h5", "h6",
    '[role="heading"]',
    '.kix-paragraphrenderer[style*="font-size: 20pt"]',
    '.kix-paragraphrenderer[style*="font-size: 16pt"]',
    '.kix-paragraphrenderer[style*="font-size: 14pt"]',
]

_DOC_ID = re.compile(r"/d/([a-zA-Z0-9_-]+)")

_EXTRACT_JS = """
(args) => {
    let content = '';
    const pages = document.querySelectorAll(args.pageSelector);
    pages.forEach((page, i) => {
        if (i > 0) content += '\\n\\n--- Page Break ---\\n\\n';
        page.querySelectorAll(args.wordSelector).forEach(el => {
            content += el.textContent || '';
        });
    });
    if (!content.trim()) {
        const editor = document.querySelector(args.editorSelector);
        if (editor) content = editor.innerText || '';
    }

    const titleInput = document.querySelector(args.titleSelector);
    const title = titleInput ? titleInput.value : document.title;

    const headings = [];
    args.headingSelectors.forEach(selector => {
        document.querySelectorAll(selector).forEach(el => {
            const text = (el.textContent || '').trim();
            let level = 1;
            const tag = /^H([1-6])$/.exec(el.tagName || '');
            if (tag) {
                level = parseInt(tag[1], 10);
            } else if (el.getAttribute('aria-level')) {
                level = parseInt(el.getAttribute('aria-level'), 10) || 1;
            }
            headings.push({level, text});
        });
    });

    return {title, content: content.trim(), headings};
}
"""

_BODY_TEXT_JS = "() => ({title: document.title, text: document.body ? document.body.innerText : ''})"

_ACCOUNT_JS = """
() => {
    const button = document.querySelector('[aria-label*="Google Account"]');
    const label = button ? button.getAttribute('aria-label') : '';
    const match = label ? label.match(/\\(([^)]+)\\)/) : null;
    return match ? match[1] : null;
}
"""


def validate_document_url(url: str) -> str:
    if not url or "docs.google.com" not in url:
        raise UsageError(
            f"Invalid Google Docs URL: {url!r}",
            hint="Provide a URL like https://docs.google.com/document/d/<id>/edit",
        )
    return url


def document_id_from_url(url: str) -> str | None:
    m = _DOC_ID.search(url or "")
    return m.group(1) if m else None


def clean_title(title: str) -> str:
    title = (title or "").strip()
    if title.endswith(TITLE_SUFFIX):
        title = title[: -len(TITLE_SUFFIX)]
    return title.strip()


def order_headings(raw: list[dict], content: str) -> tuple[Heading, ...]:
    """Drop noise and duplicates, then order headings by position in *content*."""
    seen = set()
    headings = []
    for item in raw:
        text = (item.get("text") or "").strip()
        if not (2 < len(text) < 200) or text in seen:
            continue
        seen.add(text)
        headings.append(Heading(level=int(item.get("level") or 1), text=text))

    def _position(h: Heading) -> int:
        pos = content.find(h.text)
        return pos if pos >= 0 else len(content)

    return tuple(sorted(headings, key=_position))


def strip_menu_lines(text: str) -> str:
    lines = [line for line in text.splitlines() if line.strip() not in MENU_WORDS]
    return "\n".join(lines).strip()


class GoogleDocsAdapter:
    """Extracts one Google Doc from an authenticated tab."""

    name = "google-docs"
    navigation_timeout_ms = 30000
    content_selectors = [
        (".kix-page-content-wrapper", 15000),
        ".kix-page",
        ".kix-document",
        '[role="textbox"]',
        ".docs-texteventtarget-iframe",
    ]

    def __init__(self, settle_ms: int = 2000):
        self.settle_ms = settle_ms

    def check_access(self, page) -> Outcome:
        return classify_landing(
            page.url, page.title(),
            login_markers=LOGIN_MARKERS, denied_titles=DENIED_TITLES,
        )

    def prepare(self, page, url: str) -> None:
        return None

    def extract(self, page) -> ExtractedDocument:
        # Let dynamic content settle before reading it
        page.wait_for_timeout(self.settle_ms)
        data = page.evaluate(_EXTRACT_JS, {
            "pageSelector": ".kix-page-content-wrapper",
            "wordSelector": ".kix-wordhtmlgenerator-word-node",
            "editorSelector": "#docs-editor",
            "titleSelector": ".docs-title-input",
            "headingSelectors": HEADING_SELECTORS,
        })
        content = data.get("content") or ""
        if not content:
            log.warning("Document body was empty, using whole-page text")
            return self.extract_fallback(page)
        url = page.url
        return ExtractedDocument(
            url=url,
            title=clean_title(data.get("title", "")),
            content=content,
            headings=order_headings(data.get("headings") or [], content),
            document_id=document_id_from_url(url),
        )

    def extract_fallback(self, page) -> ExtractedDocument:
        data = page.evaluate(_BODY_TEXT_JS)
        url = page.url
        return ExtractedDocument(
            url=url,
            title=clean_title(data.get("title", "")),
            content=strip_menu_lines(data.get("text") or ""),
            document_id=document_id_from_url(url),
            fallback=True,
        )


def signed_in_account(page) -> str | None:
    """Email of the signed-in Google account, when the account button shows it."""
    return page.evaluate(_ACCOUNT_JS)


def check_login(report, page):
    """Record whether the tab is signed in to Google Docs. Returns *report*."""
    navigate(page, HOME_URL, timeout_ms=30000, wait_until="networkidle")
    outcome = classify_landing(page.url, "", login_markers=LOGIN_MARKERS)
    if not report.record("Google authentication", outcome is Outcome.OK, page.url):
        return report
    account = signed_in_account(page)
    report.record("Signed-in account", bool(account), account or "not shown", required=False)
    return report

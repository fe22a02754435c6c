"""Diagnostic snapshot capture when an extraction fails.

Captures the page URL, title, a text snippet and (at FULL verbosity) a
full-page screenshot so a failed run can be debugged offline.
"""
import json
import logging
import os
import time
from dataclasses import dataclass, field, asdict

log = logging.getLogger(__name__)


class BundleVerbosity:
    OFF = "off"             # No capture at all
    MINIMAL = "minimal"     # reason + error only
    STANDARD = "standard"   # + page URL/title/text snippet
    FULL = "full"           # + screenshot


@dataclass
class FailureBundle:
    site: str
    target: str
    reason: str
    error: str = ""
    page_url: str = ""
    page_title: str = ""
    page_text_snippet: str = ""
    screenshot_path: str = ""
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict:
        return asdict(self)


def _stamp() -> str:
    return time.strftime("%Y%m%d_%H%M%S") + f"_{int(time.time() * 1000) % 1000:03d}"


def capture_failure_bundle(
    page,
    site: str,
    target: str,
    reason: str,
    error: str = "",
    verbosity: str = BundleVerbosity.FULL,
    screenshot_dir: str = "",
) -> FailureBundle:
    """Best-effort capture of failure diagnostics. Never raises."""
    bundle = FailureBundle(site=site, target=target, reason=reason, error=error)
    if verbosity == BundleVerbosity.OFF or page is None:
        return bundle

    if verbosity in (BundleVerbosity.STANDARD, BundleVerbosity.FULL):
        try:
            bundle.page_url = page.url or ""
        except Exception:
            pass
        try:
            bundle.page_title = page.title() or ""
        except Exception:
            pass
        try:
            snippet = page.evaluate("() => document.body?.innerText?.slice(0, 2000) || ''")
            bundle.page_text_snippet = snippet or ""
        except Exception:
            pass

    if verbosity == BundleVerbosity.FULL and screenshot_dir:
        try:
            os.makedirs(screenshot_dir, exist_ok=True)
            path = os.path.join(screenshot_dir, f"{site}-error-{_stamp()}.png")
            page.screenshot(path=path, full_page=True)
            bundle.screenshot_path = path
            log.info("Screenshot saved to: %s", path)
        except Exception as e:
            log.debug(f"Failed to capture screenshot: {e}")

    return bundle


def save_failure_bundle(bundle: FailureBundle, base_dir: str) -> str:
    """Save bundle to JSON beside its screenshot. Returns file path, or '' on failure."""
    try:
        os.makedirs(base_dir, exist_ok=True)
        if bundle.screenshot_path:
            name = os.path.splitext(os.path.basename(bundle.screenshot_path))[0] + ".json"
        else:
            name = f"{bundle.site or 'unknown'}-error-{_stamp()}.json"
        path = os.path.join(base_dir, name)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(bundle.to_dict(), f, ensure_ascii=False, indent=2, default=str)
        return path
    except Exception as e:
        log.debug(f"Failed to save failure bundle: {e}")
        return ""

"""Browser discovery, debug-endpoint probing, and detached launch.

macOS and Linux only. The launched browser is meant to outlive the
process that spawned it, so the operator can log in once and every later
invocation reuses that window.
"""
import json
import logging
import os
import platform
import shutil
import subprocess
import time
import urllib.error
import urllib.request

log = logging.getLogger(__name__)

_DARWIN_CANDIDATES = [
    "/Applications/Microsoft Edge.app/Contents/MacOS/Microsoft Edge",
    "/Applications/Microsoft Edge Beta.app/Contents/MacOS/Microsoft Edge Beta",
    "/Applications/Microsoft Edge Dev.app/Contents/MacOS/Microsoft Edge Dev",
    "/Applications/Microsoft Edge Canary.app/Contents/MacOS/Microsoft Edge Canary",
    "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome",
    "/Applications/Chromium.app/Contents/MacOS/Chromium",
]

_LINUX_CANDIDATES = [
    "microsoft-edge",
    "microsoft-edge-stable",
    "microsoft-edge-beta",
    "microsoft-edge-dev",
    "google-chrome",
    "google-chrome-stable",
    "chromium-browser",
    "chromium",
]

LAUNCH_FLAGS = [
    "--no-first-run",
    "--no-default-browser-check",
    "--disable-background-mode",
    "--disable-background-timer-throttling",
    "--disable-backgrounding-occluded-windows",
]


def find_system_browser() -> str | None:
    """Find an Edge or Chrome binary from an ordered list of install paths.

    Returns the path to the first candidate that exists, or None.
    """
    system = platform.system()
    if system == "Darwin":
        for candidate in _DARWIN_CANDIDATES:
            if os.path.isfile(candidate):
                return candidate
    elif system == "Linux":
        for candidate in _LINUX_CANDIDATES:
            path = shutil.which(candidate)
            if path:
                return path
    return None


def probe_debug_endpoint(port: int, timeout: float = 2.0) -> dict | None:
    """Return the ``/json/version`` payload if a debugger answers on *port*.

    Only HTTP 200 with a JSON body containing a ``Browser`` field counts.
    Any other result (refused, timeout, bad status, bad body) returns None.
    """
    url = f"http://localhost:{port}/json/version"
    try:
        with urllib.request.urlopen(url, timeout=timeout) as resp:
            if resp.status != 200:
                return None
            data = json.loads(resp.read().decode("utf-8"))
    except (urllib.error.URLError, OSError, ValueError):
        return None
    if not isinstance(data, dict) or "Browser" not in data:
        return None
    log.info("Found existing browser on port %d: %s", port, data["Browser"])
    return data


def spawn_debug_browser(
    browser_path: str,
    *,
    port: int = 9222,
    user_data_dir: str = "",
    extra_args: list[str] | None = None,
) -> subprocess.Popen:
    """Spawn *browser_path* detached with remote debugging on *port*.

    The caller waits for the debugger; this function does not block.
    """
    if user_data_dir:
        os.makedirs(user_data_dir, exist_ok=True)

    args = [browser_path, f"--remote-debugging-port={port}"]
    if user_data_dir:
        args.append(f"--user-data-dir={user_data_dir}")
    args.extend(LAUNCH_FLAGS)
    if extra_args:
        args.extend(extra_args)

    log.info("Launching %s with remote debugging on port %d",
             os.path.basename(browser_path), port)
    return subprocess.Popen(
        args,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        start_new_session=True,
    )


def settle(seconds: float) -> None:
    """Flat wait for a freshly spawned browser to bring up its UI and debugger."""
    log.debug("Waiting %.1fs for the browser to settle", seconds)
    time.sleep(seconds)


def kill_browser(proc: subprocess.Popen) -> None:
    """Terminate *proc*, escalating to kill if it does not exit."""
    if proc.poll() is not None:
        return
    proc.terminate()
    try:
        proc.wait(timeout=5)
    except subprocess.TimeoutExpired:
        proc.kill()
        proc.wait(timeout=5)

"""Normalized outcomes and errors for browser/REST glue.

Site code maps Playwright, HTTP and process failures into these types so
every CLI entry point can report them the same way: a message, a
remediation hint, and exit code 1.
"""
from enum import Enum


class Outcome(Enum):
    """Normalized outcome of one extraction or posting run."""
    OK = "ok"
    NOT_AUTHENTICATED = "not_authenticated"  # landed on a login surface
    ACCESS_DENIED = "access_denied"          # permission-gated resource
    NOT_FOUND = "not_found"                  # executable/config/selector missing
    CONNECTION = "connection"                # debug endpoint unreachable
    TIMEOUT = "timeout"                      # navigation/wait exceeded bound
    API = "api"                              # non-2xx REST response
    FAILED = "failed"                        # anything else, unrecoverable


class WebdeskError(Exception):
    """Base error carrying an Outcome and a human remediation hint."""

    outcome = Outcome.FAILED
    default_hint = ""

    def __init__(self, message: str = "", hint: str = ""):
        self.hint = hint or self.default_hint
        super().__init__(message or self.outcome.value)


class NotFoundError(WebdeskError):
    outcome = Outcome.NOT_FOUND


class NotAuthenticatedError(WebdeskError):
    outcome = Outcome.NOT_AUTHENTICATED
    default_hint = "Log in using the browser window, then run the command again."


class AccessDeniedError(WebdeskError):
    outcome = Outcome.ACCESS_DENIED
    default_hint = "Request access to the resource, then run the command again."


class BrowserConnectionError(WebdeskError, ConnectionError):
    outcome = Outcome.CONNECTION
    default_hint = (
        "Make sure the browser is running with remote debugging enabled "
        "and nothing else is bound to the debugging port."
    )


class NavigationTimeoutError(WebdeskError, TimeoutError):
    outcome = Outcome.TIMEOUT
    default_hint = "Check your network connection and that the URL is correct."


class SessionStateError(WebdeskError, RuntimeError):
    """Operation called in the wrong session state (e.g. new_page before attach)."""


class UsageError(WebdeskError):
    """Bad command-line argument."""


class ConfigError(WebdeskError):
    outcome = Outcome.NOT_FOUND
    default_hint = "Set the missing variables in your environment or .env file."


class ApiError(WebdeskError):
    """Non-2xx REST response."""

    outcome = Outcome.API

    def __init__(self, status: int, body: str = "", hint: str = ""):
        self.status = status
        self.body = body
        super().__init__(f"API error ({status}): {body}", hint)

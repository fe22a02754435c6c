"""Environment-backed settings.

A ``.env`` file in the working directory is loaded first; real environment
variables win over it.
"""
import os
import tempfile
from dataclasses import dataclass

from dotenv import find_dotenv, load_dotenv

from .engine.errors import ConfigError
from .engine.failure_bundle import BundleVerbosity


def _int_env(name: str, default: int) -> int:
    value = os.environ.get(name, "").strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {value!r}")


def _float_env(name: str, default: float) -> float:
    value = os.environ.get(name, "").strip()
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {value!r}")


_BUNDLE_LEVELS = (BundleVerbosity.OFF, BundleVerbosity.MINIMAL, BundleVerbosity.STANDARD, BundleVerbosity.FULL)


def _bundle_env(name: str, default: str) -> str:
    value = os.environ.get(name, "").strip().lower()
    if not value:
        return default
    if value not in _BUNDLE_LEVELS:
        raise ConfigError(f"{name} must be one of {', '.join(_BUNDLE_LEVELS)}, got {value!r}")
    return value


def _default_jira_email() -> str:
    domain = os.environ.get("JIRA_EMAIL_DOMAIN", "").strip()
    user = os.environ.get("USER", "").strip()
    if domain and user:
        return f"{user}@{domain}"
    return ""


@dataclass(frozen=True)
class Settings:
    debug_port: int = 9222
    profile_dir: str = ""
    settle_seconds: float = 3.0
    output_dir: str = "."
    event_log_dir: str = ""
    log_level: str = "INFO"
    failure_bundle: str = BundleVerbosity.FULL
    slack_workspace_url: str = "https://app.slack.com"
    slack_dm_url: str = ""
    jira_base_url: str = ""
    jira_api_token: str = ""
    jira_email: str = ""
    jira_project_key: str = ""

    @classmethod
    def from_env(cls, dotenv_path: str | None = None) -> "Settings":
        load_dotenv(dotenv_path or find_dotenv(usecwd=True))
        env = os.environ.get
        return cls(
            debug_port=_int_env("WEBDESK_DEBUG_PORT", 9222),
            profile_dir=env("WEBDESK_PROFILE_DIR")
            or os.path.join(tempfile.gettempdir(), "webdesk-remote-debug"),
            settle_seconds=_float_env("WEBDESK_SETTLE_SECONDS", 3.0),
            output_dir=env("WEBDESK_OUTPUT_DIR") or ".",
            event_log_dir=env("WEBDESK_EVENT_LOG_DIR", ""),
            log_level=(env("WEBDESK_LOG_LEVEL") or "INFO").upper(),
            failure_bundle=_bundle_env("WEBDESK_FAILURE_BUNDLE", BundleVerbosity.FULL),
            slack_workspace_url=env("SLACK_WORKSPACE_URL") or "https://app.slack.com",
            slack_dm_url=env("SLACK_DM_URL", ""),
            jira_base_url=(env("JIRA_BASE_URL") or "").rstrip("/"),
            jira_api_token=env("ATLASSIAN_API_TOKEN", ""),
            jira_email=env("JIRA_EMAIL") or _default_jira_email(),
            jira_project_key=env("JIRA_PROJECT_KEY", ""),
        )

    def missing_jira(self) -> list[str]:
        missing = []
        if not self.jira_base_url:
            missing.append("JIRA_BASE_URL")
        if not self.jira_api_token:
            missing.append("ATLASSIAN_API_TOKEN")
        if not self.jira_email:
            missing.append("JIRA_EMAIL")
        return missing

    def require_jira(self) -> None:
        missing = self.missing_jira()
        if missing:
            raise ConfigError(f"Missing required Jira settings: {', '.join(missing)}")

    def require_slack_dm(self) -> None:
        if not self.slack_dm_url:
            raise ConfigError("Missing required Slack setting: SLACK_DM_URL")

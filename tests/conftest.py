import pytest

ENV_VARS = (
    "WEBDESK_DEBUG_PORT", "WEBDESK_PROFILE_DIR", "WEBDESK_SETTLE_SECONDS",
    "WEBDESK_OUTPUT_DIR", "WEBDESK_EVENT_LOG_DIR", "WEBDESK_LOG_LEVEL",
    "SLACK_WORKSPACE_URL", "SLACK_DM_URL", "JIRA_BASE_URL", "ATLASSIAN_API_TOKEN",
    "JIRA_EMAIL", "JIRA_EMAIL_DOMAIN", "JIRA_PROJECT_KEY", "WEBDESK_FAILURE_BUNDLE",
)


@pytest.fixture
def clean_env(monkeypatch):
    """Unset every setting variable; values loaded from a .env are undone too."""
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return monkeypatch

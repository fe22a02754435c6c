"""Tests for environment-backed Settings."""
from dataclasses import FrozenInstanceError

import pytest

from webdesk_kit.config import Settings
from webdesk_kit.engine.errors import ConfigError


def test_defaults(clean_env, tmp_path):
    settings = Settings.from_env(str(tmp_path / "missing.env"))
    assert settings.debug_port == 9222
    assert settings.settle_seconds == 3.0
    assert settings.output_dir == "."
    assert settings.event_log_dir == ""
    assert settings.log_level == "INFO"
    assert settings.slack_workspace_url == "https://app.slack.com"
    assert settings.profile_dir.endswith("webdesk-remote-debug")
    assert settings.missing_jira() == ["JIRA_BASE_URL", "ATLASSIAN_API_TOKEN", "JIRA_EMAIL"]


def test_environment_overrides(clean_env, tmp_path):
    clean_env.setenv("WEBDESK_DEBUG_PORT", "9333")
    clean_env.setenv("WEBDESK_SETTLE_SECONDS", "0.5")
    clean_env.setenv("WEBDESK_LOG_LEVEL", "debug")
    clean_env.setenv("JIRA_BASE_URL", "https://example.atlassian.net/")
    settings = Settings.from_env(str(tmp_path / "missing.env"))
    assert settings.debug_port == 9333
    assert settings.settle_seconds == 0.5
    assert settings.log_level == "DEBUG"
    assert settings.jira_base_url == "https://example.atlassian.net"


def test_dotenv_file_loaded(clean_env, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("ATLASSIAN_API_TOKEN=from-file\nSLACK_DM_URL=https://app.slack.com/client/T1/D1\n")
    settings = Settings.from_env(str(env_file))
    assert settings.jira_api_token == "from-file"
    assert settings.slack_dm_url == "https://app.slack.com/client/T1/D1"


def test_real_environment_wins_over_dotenv(clean_env, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("JIRA_PROJECT_KEY=FILE\n")
    clean_env.setenv("JIRA_PROJECT_KEY", "ENV")
    assert Settings.from_env(str(env_file)).jira_project_key == "ENV"


def test_jira_email_fallback(clean_env, tmp_path):
    clean_env.setenv("USER", "ada")
    clean_env.setenv("JIRA_EMAIL_DOMAIN", "example.com")
    assert Settings.from_env(str(tmp_path / "missing.env")).jira_email == "ada@example.com"


def test_bad_port(clean_env, tmp_path):
    clean_env.setenv("WEBDESK_DEBUG_PORT", "ninety")
    with pytest.raises(ConfigError) as exc:
        Settings.from_env(str(tmp_path / "missing.env"))
    assert "WEBDESK_DEBUG_PORT" in str(exc.value)


def test_require_jira():
    with pytest.raises(ConfigError) as exc:
        Settings(jira_base_url="https://x").require_jira()
    assert "ATLASSIAN_API_TOKEN" in str(exc.value)
    Settings(jira_base_url="https://x", jira_api_token="t", jira_email="e").require_jira()


def test_require_slack_dm():
    with pytest.raises(ConfigError):
        Settings().require_slack_dm()
    Settings(slack_dm_url="https://app.slack.com/client/T1/D1").require_slack_dm()


def test_settings_are_frozen():
    settings = Settings()
    with pytest.raises(FrozenInstanceError):
        settings.debug_port = 1


def test_dotenv_found_in_working_directory(clean_env, tmp_path):
    tmp_path.joinpath(".env").write_text("JIRA_BASE_URL=https://cwd.atlassian.net\n")
    clean_env.chdir(tmp_path)
    assert Settings.from_env().jira_base_url == "https://cwd.atlassian.net"


def test_failure_bundle_level(clean_env, tmp_path):
    env_file = str(tmp_path / "missing.env")
    assert Settings.from_env(env_file).failure_bundle == "full"
    clean_env.setenv("WEBDESK_FAILURE_BUNDLE", "Minimal")
    assert Settings.from_env(env_file).failure_bundle == "minimal"
    clean_env.setenv("WEBDESK_FAILURE_BUNDLE", "verbose")
    with pytest.raises(ConfigError) as exc:
        Settings.from_env(env_file)
    assert "WEBDESK_FAILURE_BUNDLE" in str(exc.value)

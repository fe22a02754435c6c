"""Tests for console-script exit codes with the browser layer patched out."""
import json
import os
from contextlib import contextmanager
from unittest.mock import MagicMock, PropertyMock, patch

import pytest
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from webdesk_kit import cli
from webdesk_kit.engine.errors import WebdeskError

DOC_URL = "https://docs.google.com/document/d/1AbC/edit"


@pytest.fixture
def workspace(clean_env, tmp_path):
    clean_env.setenv("WEBDESK_OUTPUT_DIR", str(tmp_path / "out"))
    clean_env.chdir(tmp_path)
    return tmp_path


def _fake_tab(page):
    @contextmanager
    def _tab(settings):
        yield page
    return _tab


def _make_page(url):
    page = MagicMock()
    type(page).url = PropertyMock(return_value=url)
    page.title.return_value = "Plan - Google Docs"
    return page


def test_missing_argument_exits_1(workspace, capsys):
    assert cli.gdoc_main([]) == 1
    assert "usage" in capsys.readouterr().err


def test_invalid_gdoc_url_exits_1(workspace, capsys):
    assert cli.gdoc_main(["https://example.com/doc"]) == 1
    assert "Invalid Google Docs URL" in capsys.readouterr().err


def test_gdoc_login_redirect_exits_1(workspace, capsys):
    page = _make_page("https://accounts.google.com/signin/v2/identifier")
    with patch.object(cli, "browser_tab", _fake_tab(page)):
        assert cli.gdoc_main([DOC_URL]) == 1
    err = capsys.readouterr().err
    assert "Not authenticated" in err
    assert not os.path.exists(workspace / "out") or os.listdir(workspace / "out") == []


def test_gdoc_success_writes_artifacts(workspace, capsys):
    page = _make_page(DOC_URL)
    page.evaluate.return_value = {
        "title": "Plan - Google Docs",
        "content": "Overview\nThe plan is simple",
        "headings": [{"level": 1, "text": "Overview"}],
    }
    with patch.object(cli, "browser_tab", _fake_tab(page)):
        assert cli.gdoc_main([DOC_URL]) == 0

    files = sorted(os.listdir(workspace / "out"))
    assert len(files) == 2
    assert files[0].startswith("google-doc-") and files[0].endswith(".json")
    assert files[1].endswith(".txt")
    with open(workspace / "out" / files[0]) as f:
        data = json.load(f)
    assert data["title"] == "Plan"
    assert data["documentId"] == "1AbC"
    assert "Document: Plan" in capsys.readouterr().out


def test_slack_thread_rejects_non_url(workspace):
    assert cli.slack_thread_main(["not a url"]) == 1


def test_slack_post_needs_dm_url(workspace, capsys):
    assert cli.slack_post_main(["announcement.txt"]) == 1
    assert "SLACK_DM_URL" in capsys.readouterr().err


def test_slack_post_missing_file(workspace, clean_env, capsys):
    clean_env.setenv("SLACK_DM_URL", "https://app.slack.com/client/T1/D1")
    assert cli.slack_post_main([str(workspace / "nope.txt")]) == 1
    assert "Error reading file" in capsys.readouterr().err


def test_jira_missing_config_exits_1(workspace, capsys):
    assert cli.jira_main([]) == 1
    assert "Missing required Jira settings" in capsys.readouterr().err


def test_jira_no_tickets(workspace, clean_env, capsys):
    workspace.joinpath("out").mkdir()
    clean_env.setenv("JIRA_BASE_URL", "https://example.atlassian.net")
    clean_env.setenv("ATLASSIAN_API_TOKEN", "tok")
    clean_env.setenv("JIRA_EMAIL", "me@example.com")

    user = MagicMock(ok=True, status_code=200)
    user.json.return_value = {"displayName": "Ada", "emailAddress": "me@example.com"}
    search = MagicMock(ok=True, status_code=200)
    search.json.return_value = {"issues": [], "total": 0}
    with patch("webdesk_kit.sites.jira.requests.Session") as session_cls:
        session_cls.return_value.get.side_effect = [user, search]
        assert cli.jira_main([]) == 0

    assert "No unresolved tickets" in capsys.readouterr().out
    assert os.listdir(workspace / "out") == []


def test_jira_check_reports_missing_config(workspace, capsys):
    assert cli.jira_check_main([]) == 1
    out = capsys.readouterr().out
    assert "JIRA_BASE_URL" in out
    assert "NOT SET" in out


def test_run_command_interrupt(workspace):
    def _action(settings, argument, events):
        raise KeyboardInterrupt

    assert cli.run_command("webdesk-test", _action, []) == 130


def test_run_command_writes_event_log(workspace, clean_env):
    log_dir = workspace / "events"
    clean_env.setenv("WEBDESK_EVENT_LOG_DIR", str(log_dir))

    def _action(settings, argument, events):
        assert argument == "arg"

    assert cli.run_command("webdesk-test", _action, ["arg"], argument_help="anything") == 0
    files = os.listdir(log_dir)
    assert len(files) == 1
    with open(log_dir / files[0]) as f:
        events = [json.loads(line) for line in f]
    assert [e["event"] for e in events] == ["run_start", "outcome", "run_end"]
    assert events[0]["argument"] == "arg"
    assert events[2]["exit_code"] == 0


def test_run_command_maps_error(workspace, capsys):
    def _action(settings, argument, events):
        raise WebdeskError("boom", hint="do the thing")

    assert cli.run_command("webdesk-test", _action, []) == 1
    err = capsys.readouterr().err
    assert "boom" in err
    assert "do the thing" in err


def test_slack_post_send_timeout_exits_1(workspace, clean_env, capsys):
    clean_env.setenv("SLACK_DM_URL", "https://app.slack.com/client/T1/D1")
    announcement = workspace / "announcement.txt"
    announcement.write_text("Release today\n- api\n")
    page = _make_page("https://app.slack.com/client/T1/D1")
    page.click.side_effect = [None, PlaywrightTimeoutError("Timeout 30000ms exceeded")]

    with patch.object(cli, "browser_tab", _fake_tab(page)), \
            patch.object(cli.slack, "prepare_web_client"):
        assert cli.slack_post_main([str(announcement)]) == 1

    captured = capsys.readouterr()
    assert "❌" in captured.err
    assert "posted successfully" not in captured.out


def test_run_command_maps_raw_browser_error(workspace, capsys):
    def _action(settings, argument, events):
        raise PlaywrightError("Target page, context or browser has been closed")

    assert cli.run_command("webdesk-test", _action, []) == 1
    err = capsys.readouterr().err
    assert "Browser operation failed" in err
    assert "has been closed" in err


def test_jira_base_url_without_scheme_exits_1(workspace, clean_env, capsys):
    clean_env.setenv("JIRA_BASE_URL", "example.atlassian.net")
    clean_env.setenv("ATLASSIAN_API_TOKEN", "tok")
    clean_env.setenv("JIRA_EMAIL", "me@example.com")

    assert cli.jira_main([]) == 1
    assert "https://your-company.atlassian.net" in capsys.readouterr().err

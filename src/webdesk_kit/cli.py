"""Console-script entry points.

Each command takes at most one positional argument, performs one task
against the shared debug browser (or the Jira API), and exits 0 on
success or 1 on any handled failure.
"""
import argparse
import logging
import sys
from contextlib import contextmanager

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from .browser.session import open_session
from .config import Settings
from .engine.checks import CheckReport
from .engine.errors import NotFoundError, Outcome, UsageError, WebdeskError
from .engine.extract import run_extraction
from .output import artifact_stamp, format_document, format_thread, write_json, write_text
from .sites import google_docs, jira, slack
from .telemetry.events import make_event_logger

log = logging.getLogger(__name__)

VIEWPORT = {"width": 1920, "height": 1080}


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def report_error(err: WebdeskError) -> None:
    print(f"❌ {err}", file=sys.stderr)
    if err.hint:
        print(f"   {err.hint}", file=sys.stderr)


@contextmanager
def browser_tab(settings: Settings):
    """Fresh tab in the shared debug browser; the browser stays up afterwards."""
    with sync_playwright() as p:
        with open_session(p, port=settings.debug_port, profile_dir=settings.profile_dir,
                          settle_seconds=settings.settle_seconds) as (_session, page):
            yield page


def run_command(tool: str, action, argv=None, *,
                argument_help: str = "", needs_argument: bool = False) -> int:
    """Parse the optional positional argument, run *action*, map errors to exit codes."""
    parser = argparse.ArgumentParser(prog=tool)
    if argument_help:
        parser.add_argument("argument", nargs="?", default="", help=argument_help)
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)
    argument = getattr(args, "argument", "")

    try:
        settings = Settings.from_env()
    except WebdeskError as e:
        report_error(e)
        return 1
    configure_logging(settings.log_level)

    if needs_argument and not argument:
        parser.print_usage(sys.stderr)
        return 1

    log.debug("Running %s with argument %r", tool, argument)
    with make_event_logger(tool, settings.event_log_dir) as events:
        events.log_run_start(argument)
        try:
            try:
                action(settings, argument, events)
            except PlaywrightError as e:
                raise WebdeskError(
                    f"Browser operation failed: {e}",
                    hint="Check the browser window, then run the command again.",
                ) from e
        except WebdeskError as e:
            report_error(e)
            events.log_outcome(e.outcome.value, str(e))
            events.log_run_end("error", 1)
            return 1
        except KeyboardInterrupt:
            events.log_run_end("interrupted", 130)
            return 130
        events.log_outcome(Outcome.OK.value)
        events.log_run_end("ok", 0)
    return 0


# ── Extractors ──────────────────────────────────────────────────────────────

def _save(events, path: str, kind: str) -> None:
    events.log_artifact(path, kind)
    print(f"💾 Saved {kind}: {path}")


def gdoc_action(settings: Settings, url: str, events) -> None:
    google_docs.validate_document_url(url)
    with browser_tab(settings) as page:
        page.set_viewport_size(VIEWPORT)
        result = run_extraction(page, google_docs.GoogleDocsAdapter(), url,
                                screenshot_dir=settings.output_dir,
                                verbosity=settings.failure_bundle, event_logger=events)
        if not result.ok:
            raise result.error
        doc = result.record

    print(format_document(doc))
    stamp = artifact_stamp()
    _save(events, write_json(doc.to_dict(), settings.output_dir, "google-doc", stamp), "json")
    _save(events, write_text(format_document(doc), settings.output_dir, "google-doc", stamp), "text")


def slack_thread_action(settings: Settings, url: str, events) -> None:
    if not url.startswith(("http://", "https://")):
        raise UsageError(f"Invalid thread URL: {url!r}",
                         hint="Copy the link to the thread from Slack and pass it as the argument.")
    with browser_tab(settings) as page:
        slack.prepare_web_client(page)
        result = run_extraction(page, slack.SlackThreadAdapter(), url,
                                screenshot_dir=settings.output_dir,
                                verbosity=settings.failure_bundle, event_logger=events)
        if not result.ok:
            raise result.error
        thread = result.record

    print(format_thread(thread))
    stamp = artifact_stamp()
    _save(events, write_json(thread.to_dict(), settings.output_dir, "slack-thread", stamp), "json")
    _save(events, write_text(format_thread(thread), settings.output_dir, "slack-thread", stamp), "text")


def slack_post_action(settings: Settings, path: str, events) -> None:
    settings.require_slack_dm()
    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    except OSError as e:
        raise NotFoundError(f"Error reading file {path}: {e}",
                            hint="Pass the path of an existing UTF-8 text file.") from e

    with browser_tab(settings) as page:
        slack.prepare_web_client(page)
        count = slack.Poster().post(page, settings.slack_dm_url, text)
    events.log_post_plan(count, len(text.splitlines()))
    print("✅ Announcement posted successfully")


def jira_action(settings: Settings, _argument: str, events) -> None:
    client = jira.JiraClient.from_settings(settings)
    client.get_current_user()
    tickets = jira.fetch_tickets(client)
    print(jira.format_tickets(tickets))
    path = jira.save_tickets(tickets, settings.output_dir)
    if path:
        _save(events, path, "json")


# ── Connectivity checks ─────────────────────────────────────────────────────

def _finish_report(report: CheckReport, hint: str) -> None:
    print(report.render())
    if not report.ok:
        raise WebdeskError(f"{report.title} failed", hint=hint)


def gdoc_check_action(settings: Settings, _argument: str, events) -> None:
    report = CheckReport("Google Docs connectivity")
    with browser_tab(settings) as page:
        report.record("Browser session", True, f"port {settings.debug_port}")
        page.set_viewport_size(VIEWPORT)
        google_docs.check_login(report, page)
    _finish_report(report, "Log in to Google in the browser window, then run this check again.")


def slack_check_action(settings: Settings, _argument: str, events) -> None:
    report = CheckReport("Slack connectivity")
    with browser_tab(settings) as page:
        report.record("Browser session", True, f"port {settings.debug_port}")
        slack.prepare_web_client(page)
        slack.check_login(report, page, settings.slack_workspace_url)
    _finish_report(report, "Complete authentication in the browser window and verify SLACK_WORKSPACE_URL.")


def jira_check_action(settings: Settings, _argument: str, events) -> None:
    report = CheckReport("Jira connectivity")
    jira.check_config(report, settings)
    if report.ok:
        jira.check_api(report, jira.JiraClient.from_settings(settings))
    _finish_report(report, "Check your .env Jira credentials and that your API token is valid.")


# ── Console scripts ─────────────────────────────────────────────────────────

def gdoc_main(argv=None) -> int:
    return run_command("webdesk-gdoc", gdoc_action, argv, needs_argument=True,
                       argument_help="Google Docs URL")


def slack_thread_main(argv=None) -> int:
    return run_command("webdesk-slack-thread", slack_thread_action, argv, needs_argument=True,
                       argument_help="Slack thread URL")


def slack_post_main(argv=None) -> int:
    return run_command("webdesk-slack-post", slack_post_action, argv, needs_argument=True,
                       argument_help="path of the announcement text file")


def jira_main(argv=None) -> int:
    return run_command("webdesk-jira", jira_action, argv)


def gdoc_check_main(argv=None) -> int:
    return run_command("webdesk-gdoc-check", gdoc_check_action, argv)


def slack_check_main(argv=None) -> int:
    return run_command("webdesk-slack-check", slack_check_action, argv)


def jira_check_main(argv=None) -> int:
    return run_command("webdesk-jira-check", jira_check_action, argv)

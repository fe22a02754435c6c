"""Jira Cloud REST client and the unresolved-tickets extractor.

One bounded search, no pagination. Results keep the order the JQL asked
for (created ascending); nothing is re-sorted client-side.
"""
import base64
import logging
from datetime import datetime

import requests

from ..engine.errors import ApiError, NavigationTimeoutError, WebdeskError
from ..output import write_json
from ..records import ExtractedTicket, utc_now_iso

log = logging.getLogger(__name__)

ENDPOINTS = {
    "search": "/rest/api/3/search",
    "myself": "/rest/api/3/myself",
}

JQL_UNRESOLVED_ASSIGNED_TO_ME = (
    "assignee = currentUser() AND resolution = Unresolved ORDER BY created ASC"
)
JQL_MY_OPEN_ISSUES = "assignee = currentUser() AND status != Done ORDER BY created ASC"
JQL_MY_IN_PROGRESS = 'assignee = currentUser() AND status = "In Progress" ORDER BY created ASC'

SEARCH_FIELDS = (
    "summary", "status", "priority", "assignee", "reporter", "created",
    "updated", "description", "issuetype", "components", "labels",
)
DEFAULT_MAX_RESULTS = 100
REQUEST_TIMEOUT = 30

_STATUS_HINTS = {
    401: "Verify your Atlassian API token and JIRA_EMAIL.",
    403: "Your account does not have access to this Jira instance.",
    404: "Check JIRA_BASE_URL.",
}


def basic_auth_header(email: str, api_token: str) -> str:
    token = base64.b64encode(f"{email}:{api_token}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


class JiraClient:
    """Minimal authenticated client for the few endpoints we call."""

    def __init__(self, base_url: str, email: str, api_token: str, *,
                 http: requests.Session | None = None, timeout: float = REQUEST_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.email = email
        self.timeout = timeout
        self.http = http or requests.Session()
        self.headers = {
            "Authorization": basic_auth_header(email, api_token),
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

    @classmethod
    def from_settings(cls, settings, http: requests.Session | None = None) -> "JiraClient":
        settings.require_jira()
        return cls(settings.jira_base_url, settings.jira_email, settings.jira_api_token, http=http)

    def request(self, endpoint: str, params: dict | None = None) -> dict:
        url = f"{self.base_url}{endpoint}"
        try:
            resp = self.http.get(url, headers=self.headers, params=params, timeout=self.timeout)
        except requests.Timeout as e:
            raise NavigationTimeoutError(f"Jira request to {endpoint} timed out") from e
        except requests.ConnectionError as e:
            raise WebdeskError(
                f"Network error: unable to connect to Jira at {self.base_url}",
                hint="Check your internet connection and JIRA_BASE_URL.",
            ) from e
        except requests.RequestException as e:
            raise WebdeskError(
                f"Jira request to {url} failed: {e}",
                hint="JIRA_BASE_URL must be a full URL like https://your-company.atlassian.net",
            ) from e

        if not resp.ok:
            raise ApiError(resp.status_code, resp.text, hint=_STATUS_HINTS.get(resp.status_code, ""))
        try:
            return resp.json()
        except ValueError as e:
            # SSO interstitials answer 200 with an HTML page
            raise ApiError(
                resp.status_code, resp.text[:200],
                hint="Jira did not return JSON; check JIRA_BASE_URL and that your token is valid.",
            ) from e

    def get_current_user(self) -> dict:
        log.info("Fetching current user information")
        user = self.request(ENDPOINTS["myself"])
        log.info("Connected as %s (%s)", user.get("displayName"), user.get("emailAddress"))
        return user

    def search_issues(self, jql: str, max_results: int = DEFAULT_MAX_RESULTS) -> dict:
        log.info("Searching for issues with JQL: %s", jql)
        return self.request(ENDPOINTS["search"], params={
            "jql": jql,
            "maxResults": str(max_results),
            "fields": ",".join(SEARCH_FIELDS),
        })


def _parse_jira_time(value: str) -> datetime | None:
    for fmt in ("%Y-%m-%dT%H:%M:%S.%f%z", "%Y-%m-%dT%H:%M:%S%z"):
        try:
            return datetime.strptime(value, fmt)
        except (TypeError, ValueError):
            continue
    return None


def iso_time(value: str) -> str:
    parsed = _parse_jira_time(value)
    return parsed.isoformat() if parsed else (value or "")


def display_time(value: str) -> str:
    parsed = _parse_jira_time(value)
    return parsed.strftime("%b %d, %Y, %I:%M %p") if parsed else (value or "Unknown")


def map_issue(issue: dict, index: int, base_url: str, retrieved_at: str = "") -> ExtractedTicket:
    fields = issue.get("fields") or {}
    priority = fields.get("priority") or {}
    reporter = fields.get("reporter") or {}
    return ExtractedTicket(
        index=index,
        key=issue["key"],
        summary=fields.get("summary") or "",
        status=(fields.get("status") or {}).get("name", "Unknown"),
        priority=priority.get("name") or "None",
        issue_type=(fields.get("issuetype") or {}).get("name", "Unknown"),
        reporter=reporter.get("displayName") or "Unknown",
        created=iso_time(fields.get("created", "")),
        updated=iso_time(fields.get("updated", "")),
        url=f"{base_url.rstrip('/')}/browse/{issue['key']}",
        components=tuple(c.get("name", "") for c in fields.get("components") or []),
        labels=tuple(fields.get("labels") or []),
        retrieved_at=retrieved_at or utc_now_iso(),
    )


def fetch_tickets(client: JiraClient, jql: str = JQL_UNRESOLVED_ASSIGNED_TO_ME,
                  max_results: int = DEFAULT_MAX_RESULTS) -> list[ExtractedTicket]:
    """Run *jql* once and map the issues, in server order."""
    result = client.search_issues(jql, max_results=max_results)
    issues = result.get("issues") or []
    if not issues:
        log.info("Search returned no issues (total=%s)", result.get("total", 0))
        return []
    log.info("Found %d issue(s)", len(issues))
    retrieved_at = utc_now_iso()
    return [
        map_issue(issue, i, client.base_url, retrieved_at)
        for i, issue in enumerate(issues, start=1)
    ]


def format_tickets(tickets: list[ExtractedTicket]) -> str:
    if not tickets:
        return "No unresolved tickets assigned to you!"
    rule = "=" * 80
    lines = ["Unresolved Tickets Assigned to You (sorted by creation date):", rule]
    for t in tickets:
        lines.append("")
        lines.append(f"{t.index}. {t.key} - {t.summary}")
        lines.append(f"   Status: {t.status} | Priority: {t.priority} | Type: {t.issue_type}")
        lines.append(f"   Reporter: {t.reporter}")
        lines.append(f"   Created: {display_time(t.created)}")
        lines.append(f"   Updated: {display_time(t.updated)}")
        lines.append(f"   URL: {t.url}")
        if t.components:
            lines.append(f"   Components: {', '.join(t.components)}")
        if t.labels:
            lines.append(f"   Labels: {', '.join(t.labels)}")
    lines.extend(["", rule, f"Total: {len(tickets)} unresolved ticket(s)"])
    return "\n".join(lines)


def save_tickets(tickets: list[ExtractedTicket], output_dir: str,
                 query: str = JQL_UNRESOLVED_ASSIGNED_TO_ME) -> str | None:
    """Write the ticket batch as JSON. Nothing is written for an empty batch."""
    if not tickets:
        return None
    return write_json({
        "retrievedAt": utc_now_iso(),
        "totalTickets": len(tickets),
        "query": query,
        "tickets": [t.to_dict() for t in tickets],
    }, output_dir, "jira-tickets")


def check_config(report, settings):
    """Record which Jira settings are present; the token is masked. Returns *report*."""
    token = settings.jira_api_token
    report.record("JIRA_BASE_URL", bool(settings.jira_base_url), settings.jira_base_url or "NOT SET")
    report.record("ATLASSIAN_API_TOKEN", bool(token), "*" * len(token) if token else "NOT SET")
    report.record("JIRA_EMAIL", bool(settings.jira_email), settings.jira_email or "NOT SET")
    report.record("JIRA_PROJECT_KEY", bool(settings.jira_project_key),
                  settings.jira_project_key or "NOT SET", required=False)
    return report


def check_api(report, client: JiraClient):
    """Record whether the token authenticates and search works. Returns *report*."""
    try:
        user = client.get_current_user()
    except WebdeskError as e:
        report.record("Authentication (/myself)", False, str(e))
        return report
    report.record("Authentication (/myself)", True,
                  f"{user.get('displayName')} ({user.get('emailAddress')})")
    try:
        result = client.search_issues(JQL_UNRESOLVED_ASSIGNED_TO_ME, max_results=1)
    except WebdeskError as e:
        report.record("Issue search", False, str(e))
        return report
    report.record("Issue search", True, f"{result.get('total', 0)} unresolved ticket(s) assigned to you")
    return report

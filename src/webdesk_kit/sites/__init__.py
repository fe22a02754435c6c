"""sites: per-service extractors (Google Docs, Slack, Jira)."""

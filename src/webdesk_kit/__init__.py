"""webdesk-kit: browser and REST glue for pulling work context out of web apps.

Attaches to a locally running Chromium-family browser over CDP, extracts
Google Docs and Slack threads from authenticated tabs, lists Jira tickets
through the REST API, and posts formatted announcements into a Slack DM.
"""
from .adapter import SiteAdapter  # noqa: F401
from .config import Settings  # noqa: F401
from .engine.errors import Outcome, WebdeskError  # noqa: F401
from .engine.extract import ExtractionResult, run_extraction  # noqa: F401
from .records import ExtractedDocument, ExtractedThread, ExtractedTicket  # noqa: F401

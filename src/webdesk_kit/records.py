"""Read-only value records produced by the extractors.

Records are never mutated after creation. ``to_dict()`` returns the JSON
shape written to artifact files (camelCase keys, ISO timestamps).
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class Heading:
    level: int
    text: str


@dataclass(frozen=True)
class ExtractedDocument:
    url: str
    title: str
    content: str
    headings: tuple[Heading, ...] = ()
    document_id: str | None = None
    fallback: bool = False  # True when only whole-page text was available
    retrieved_at: str = field(default_factory=utc_now_iso)

    @property
    def word_count(self) -> int:
        return len(self.content.split())

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "url": self.url,
            "documentId": self.document_id,
            "content": self.content,
            "headings": [{"level": h.level, "text": h.text} for h in self.headings],
            "wordCount": self.word_count,
            "fallback": self.fallback,
            "retrievedAt": self.retrieved_at,
        }


@dataclass(frozen=True)
class ThreadMessage:
    index: int
    author: str
    time: str
    content: str


@dataclass(frozen=True)
class ExtractedThread:
    url: str
    channel: str
    messages: tuple[ThreadMessage, ...] = ()
    page_text: str = ""  # only set on whole-page fallback
    fallback: bool = False
    retrieved_at: str = field(default_factory=utc_now_iso)

    @property
    def message_count(self) -> int:
        return len(self.messages)

    def to_dict(self) -> dict:
        data = {
            "url": self.url,
            "channel": self.channel,
            "messageCount": self.message_count,
            "messages": [
                {"index": m.index, "author": m.author, "time": m.time, "content": m.content}
                for m in self.messages
            ],
            "fallback": self.fallback,
            "retrievedAt": self.retrieved_at,
        }
        if self.fallback:
            data["pageText"] = self.page_text
        return data


@dataclass(frozen=True)
class ExtractedTicket:
    index: int
    key: str
    summary: str
    status: str
    priority: str
    issue_type: str
    reporter: str
    created: str
    updated: str
    url: str
    components: tuple[str, ...] = ()
    labels: tuple[str, ...] = ()
    retrieved_at: str = field(default_factory=utc_now_iso)

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "key": self.key,
            "summary": self.summary,
            "status": self.status,
            "priority": self.priority,
            "issueType": self.issue_type,
            "reporter": self.reporter,
            "created": self.created,
            "updated": self.updated,
            "url": self.url,
            "components": list(self.components),
            "labels": list(self.labels),
            "retrievedAt": self.retrieved_at,
        }

"""Timestamped JSON and plain-text artifacts in an output directory."""
import json
import logging
import os
import time

log = logging.getLogger(__name__)

RULE = "═" * 50


def artifact_stamp() -> str:
    """Sortable ``YYYYmmdd_HHMMSS_mmm`` stamp shared by one run's artifacts."""
    return time.strftime("%Y%m%d_%H%M%S") + f"_{int(time.time() * 1000) % 1000:03d}"


def write_json(data: dict, output_dir: str, prefix: str, stamp: str = "") -> str:
    """Write *data* to ``<output_dir>/<prefix>-<stamp>.json``. Returns the path."""
    os.makedirs(output_dir or ".", exist_ok=True)
    path = os.path.join(output_dir or ".", f"{prefix}-{stamp or artifact_stamp()}.json")
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2, default=str)
    log.info("Saved JSON artifact: %s", path)
    return path


def write_text(text: str, output_dir: str, prefix: str, stamp: str = "") -> str:
    """Write *text* to ``<output_dir>/<prefix>-<stamp>.txt``. Returns the path."""
    os.makedirs(output_dir or ".", exist_ok=True)
    path = os.path.join(output_dir or ".", f"{prefix}-{stamp or artifact_stamp()}.txt")
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)
    log.info("Saved text artifact: %s", path)
    return path


def format_document(doc) -> str:
    """Human-readable transcript of an ExtractedDocument."""
    lines = [
        f"Document: {doc.title}",
        f"URL: {doc.url}",
        f"Document ID: {doc.document_id}",
        f"Word Count: {doc.word_count}",
        f"Extracted: {doc.retrieved_at}",
        RULE,
        "",
    ]
    if doc.headings:
        lines.append("Document Outline:")
        for heading in doc.headings:
            lines.append(f"{'  ' * (heading.level - 1)}• {heading.text}")
        lines.extend(["", RULE, ""])
    lines.extend(["Content:", "", doc.content])
    return "\n".join(lines)


def format_thread(thread) -> str:
    """Human-readable transcript of an ExtractedThread."""
    lines = [
        f"Channel: {thread.channel}",
        f"URL: {thread.url}",
        f"Messages: {thread.message_count}",
        f"Extracted: {thread.retrieved_at}",
        RULE,
    ]
    for msg in thread.messages:
        lines.append("")
        lines.append(f"{msg.index}. {msg.author} ({msg.time})")
        lines.append(f"   {msg.content}")
    if thread.fallback:
        lines.extend(["", "Page text:", "", thread.page_text])
    return "\n".join(lines)

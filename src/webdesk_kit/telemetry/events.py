"""Structured JSONL event logging for one CLI invocation."""
import json
import logging
import os
import time
import uuid

log = logging.getLogger(__name__)


class RunEventLogger:
    """Writes one JSON line per event to ``<log_dir>/<tool>_<run_id>.jsonl``.

    All logging is best-effort; methods never raise exceptions.
    Supports context-manager protocol for automatic close.
    """

    def __init__(self, tool: str, log_dir: str, run_id: str = ""):
        self.tool = tool
        self.run_id = run_id or time.strftime("%Y%m%d_%H%M%S") + "_" + uuid.uuid4().hex[:6]
        self.path = ""
        self._started = time.monotonic()
        self._f = None
        try:
            os.makedirs(log_dir, exist_ok=True)
            self.path = os.path.join(log_dir, f"{tool}_{self.run_id}.jsonl")
            self._f = open(self.path, "a", encoding="utf-8")
        except Exception as e:
            log.warning(f"RunEventLogger: failed to open log file: {e}")

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _write(self, event: dict):
        if self._f is None:
            return
        try:
            event["ts"] = time.time()
            event["run_id"] = self.run_id
            event["tool"] = self.tool
            self._f.write(json.dumps(event, ensure_ascii=False, default=str) + "\n")
            self._f.flush()
        except Exception as e:
            log.warning(f"RunEventLogger: write failed: {e}")

    def log_run_start(self, argument: str = ""):
        self._write({"event": "run_start", "argument": argument})

    def log_navigate(self, requested_url: str, landed_url: str):
        self._write({"event": "navigate", "requested_url": requested_url, "landed_url": landed_url})

    def log_outcome(self, outcome: str, detail: str = ""):
        self._write({"event": "outcome", "outcome": outcome, "detail": detail})

    def log_artifact(self, path: str, kind: str):
        self._write({"event": "artifact", "path": path, "kind": kind})

    def log_post_plan(self, actions: int, lines: int):
        self._write({"event": "post_plan", "actions": actions, "lines": lines})

    def log_failure(self, bundle: dict):
        self._write({"event": "failure", "bundle": bundle})

    def log_run_end(self, status: str, exit_code: int):
        self._write({
            "event": "run_end",
            "status": status,
            "exit_code": exit_code,
            "duration": round(time.monotonic() - self._started, 3),
        })

    def close(self):
        if self._f is not None:
            try:
                self._f.flush()
                self._f.close()
            except Exception:
                pass
            self._f = None


class NullEventLogger:
    """Stand-in used when no event log directory is configured."""

    path = ""

    def __getattr__(self, name):
        if name.startswith("log_"):
            return lambda *args, **kwargs: None
        raise AttributeError(name)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        pass

    def close(self):
        pass


def make_event_logger(tool: str, log_dir: str):
    return RunEventLogger(tool, log_dir) if log_dir else NullEventLogger()

"""telemetry: structured JSONL run events."""
from .events import NullEventLogger, RunEventLogger, make_event_logger  # noqa: F401

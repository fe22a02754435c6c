"""engine: extraction flow, matcher chains, errors and connectivity checks."""
from .errors import Outcome, WebdeskError  # noqa: F401
from .selectors import MatcherChain  # noqa: F401
from .extract import ExtractionResult, classify_landing, navigate, run_extraction  # noqa: F401
from .failure_bundle import FailureBundle, BundleVerbosity, capture_failure_bundle, save_failure_bundle  # noqa: F401
from .checks import CheckReport, CheckResult  # noqa: F401

"""Pass/fail accumulator for connectivity checks.

Each check function takes a CheckReport, records its results on it and
returns it; nothing is counted through module-level state.
"""
from dataclasses import dataclass, field


@dataclass(frozen=True)
class CheckResult:
    name: str
    passed: bool
    detail: str = ""
    required: bool = True


@dataclass
class CheckReport:
    """Ordered list of check results for one connectivity test run."""

    title: str
    results: list[CheckResult] = field(default_factory=list)

    def record(self, name: str, passed: bool, detail: str = "", required: bool = True) -> bool:
        """Record one result and return *passed* so callers can branch on it."""
        self.results.append(CheckResult(name, bool(passed), detail, required))
        return bool(passed)

    @property
    def passed(self) -> int:
        return sum(1 for r in self.results if r.passed)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.passed)

    @property
    def ok(self) -> bool:
        """True unless a required check failed."""
        return not any(r.required and not r.passed for r in self.results)

    @property
    def stats(self) -> dict:
        return {"passed": self.passed, "failed": self.failed, "total": len(self.results), "ok": self.ok}

    def render(self) -> str:
        lines = [self.title]
        for r in self.results:
            mark = "✅" if r.passed else ("❌" if r.required else "⚠️ ")
            suffix = f": {r.detail}" if r.detail else ""
            optional = "" if r.required else " (optional)"
            lines.append(f"   {mark} {r.name}{optional}{suffix}")
        lines.append(f"{self.passed} passed, {self.failed} failed")
        return "\n".join(lines)

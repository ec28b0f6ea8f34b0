"""Per-test and per-batch outcomes."""

from dataclasses import dataclass, field
from typing import Optional

from ..definitions.schema import RunStatus


@dataclass
class TestOutcome:
    """What happened to one test."""
    __test__ = False

    label: str
    run_id: Optional[str] = None
    status: Optional[RunStatus] = None
    error: Optional[str] = None
    duration_s: float = 0.0

    @property
    def passed(self) -> bool:
        return self.error is None and self.status is RunStatus.SUCCESS


@dataclass
class BatchOutcome:
    """Accumulated result of a batch."""
    outcomes: list[TestOutcome] = field(default_factory=list)
    skipped_files: list[str] = field(default_factory=list)
    cancelled: bool = False

    def record(self, outcome: TestOutcome) -> None:
        self.outcomes.append(outcome)

    @property
    def failed(self) -> list[str]:
        """Labels of failed tests, one per failed test, in execution order."""
        return [o.label for o in self.outcomes if not o.passed]

    @property
    def total_count(self) -> int:
        return len(self.outcomes)

    @property
    def passed_count(self) -> int:
        return sum(1 for o in self.outcomes if o.passed)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    @property
    def success(self) -> bool:
        return not self.cancelled and not self.failed

    def summary(self) -> str:
        """Human-readable one-line result."""
        if self.cancelled:
            return "Tests stopped by user"
        if self.failed:
            return f"{self.failed_count} test(s) failed: {', '.join(self.failed)}"
        return "All tests succeeded"

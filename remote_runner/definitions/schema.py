"""Data models for test definitions and remote run state."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class RunStatus(str, Enum):
    """Status of a remote run as reported by the executor."""
    PENDING = "PENDING"
    WAITING = "WAITING"
    RUNNING = "RUNNING"
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: Any) -> "RunStatus":
        """Map a backend status string to a member; unrecognised values become UNKNOWN."""
        try:
            return cls(str(value).upper())
        except ValueError:
            return cls.UNKNOWN

    @property
    def is_terminal(self) -> bool:
        return self in (RunStatus.SUCCESS, RunStatus.ERROR)


@dataclass(frozen=True)
class Step:
    """One instruction of a test, with the result the executor should observe."""
    action: str
    expected_result: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"action": self.action, "expectedResult": self.expected_result}


@dataclass(frozen=True)
class Secret:
    name: str
    value: str


@dataclass(frozen=True)
class TestContext:
    """Free-form context submitted with a test, plus optional secrets."""
    __test__ = False

    data: dict[str, Any] = field(default_factory=dict)
    secrets: Optional[tuple[Secret, ...]] = None

    def to_dict(self) -> dict[str, Any]:
        result = dict(self.data)
        if self.secrets is not None:
            result["secrets"] = [
                {"name": s.name, "value": s.value} for s in self.secrets
            ]
        return result


@dataclass(frozen=True)
class TestSpecification:
    """A single test read from a definition file."""
    __test__ = False  # not a pytest test class

    source: str
    position: int
    url: str
    steps: tuple[Step, ...] = ()
    name: Optional[str] = None
    context: Optional[TestContext] = None

    def to_payload(self) -> dict[str, Any]:
        """Body submitted to the executor. The name is not part of it."""
        payload: dict[str, Any] = {
            "url": self.url,
            "steps": [step.to_dict() for step in self.steps],
        }
        if self.context is not None:
            payload["context"] = self.context.to_dict()
        return payload


@dataclass
class DefinitionFile:
    """A parsed definition file.

    Test entries are kept raw so that one malformed entry fails only its
    own test; see parser.build_specification.
    """
    path: str
    url: str
    tests: list[Any] = field(default_factory=list)

    @property
    def total_tests(self) -> int:
        return len(self.tests)


@dataclass(frozen=True)
class StepStatus:
    """Progress marker of one step in a remote run."""
    start: Optional[str] = None
    end: Optional[str] = None

    @property
    def is_done(self) -> bool:
        return self.end is not None


@dataclass(frozen=True)
class RunStatusReport:
    """Result of one status query."""
    status: RunStatus
    raw_status: str = ""
    step_statuses: tuple[StepStatus, ...] = ()

    @property
    def completed_steps(self) -> int:
        return sum(1 for s in self.step_statuses if s.is_done)

    @property
    def total_steps(self) -> int:
        return len(self.step_statuses)

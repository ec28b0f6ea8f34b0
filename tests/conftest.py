"""Shared fixtures: an in-memory executor, a fake clock and definition files."""

import json
import logging
from pathlib import Path
from typing import Any, Callable, Optional

import pytest

from remote_runner.definitions.schema import RunStatus, RunStatusReport, StepStatus


def report(status: str, done: int = 0, total: int = 0) -> RunStatusReport:
    """Build a status report with `done` of `total` steps finished."""
    steps = tuple(
        StepStatus(start="t0", end="t1" if i < done else None) for i in range(total)
    )
    return RunStatusReport(status=RunStatus.parse(status), raw_status=status, step_statuses=steps)


class FakeExecutor:
    """Executor client that replays scripted statuses.

    `scripts` maps a run number (1-based, in submission order) to the list
    of status strings, reports or exceptions returned by successive status
    queries. The last entry repeats once the list is exhausted.
    """

    def __init__(
        self,
        scripts: Optional[dict[int, list[Any]]] = None,
        default: Optional[list[Any]] = None,
        on_status: Optional[Callable[[str, int], None]] = None,
        create_errors: Optional[dict[int, Exception]] = None,
        stop_error: Optional[Exception] = None,
    ):
        self.scripts = scripts or {}
        self.default = default or ["SUCCESS"]
        self.on_status = on_status
        self.create_errors = create_errors or {}
        self.stop_error = stop_error
        self.payloads: list[dict] = []
        self.status_calls: list[str] = []
        self.stop_calls: list[str] = []
        self.closed = False
        self._created = 0

    def create_run(self, payload: dict) -> str:
        self._created += 1
        if self._created in self.create_errors:
            raise self.create_errors[self._created]
        self.payloads.append(payload)
        return f"run-{self._created}"

    def get_run_status(self, run_id: str) -> RunStatusReport:
        self.status_calls.append(run_id)
        number = int(run_id.split("-")[1])
        script = self.scripts.get(number, self.default)
        calls = self.status_calls.count(run_id)
        item = script[min(calls, len(script)) - 1]

        if self.on_status:
            self.on_status(run_id, calls)
        if isinstance(item, Exception):
            raise item
        if isinstance(item, RunStatusReport):
            return item
        return report(item)

    def stop_run(self, run_id: str) -> None:
        self.stop_calls.append(run_id)
        if self.stop_error:
            raise self.stop_error

    def close(self) -> None:
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


class FakeClock:
    """Monotonic clock advanced only by sleep()."""

    def __init__(self):
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture(autouse=True)
def _info_logs(caplog):
    caplog.set_level(logging.INFO)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def write_definition(tmp_path: Path) -> Callable[..., Path]:
    """Write a definition file; `content` may be a dict or raw text."""

    def _write(name: str, content: Any) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        text = content if isinstance(content, str) else json.dumps(content)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


def simple_test(name: Optional[str] = "login", action: str = "Open the page") -> dict:
    test: dict[str, Any] = {
        "steps": [{"action": action, "expectedResult": "The page is shown"}],
    }
    if name is not None:
        test["name"] = name
    return test

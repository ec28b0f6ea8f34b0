"""Runner module - batch orchestration, polling and cancellation."""

from .cancellation import CancellationController, CancellationState, stop_run_quietly
from .orchestrator import BatchOrchestrator
from .outcome import BatchOutcome, TestOutcome
from .poller import RunPoller

__all__ = [
    "BatchOrchestrator",
    "BatchOutcome",
    "CancellationController",
    "CancellationState",
    "RunPoller",
    "TestOutcome",
    "stop_run_quietly",
]

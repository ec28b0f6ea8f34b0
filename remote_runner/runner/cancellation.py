"""Cooperative cancellation of a batch.

A CancellationState is shared by the orchestrator, the poller's stop
predicate and the signal handlers installed by CancellationController.
Signal handlers run on the main thread between bytecodes, so the state
needs no lock; the stop flag is an Event so that a handler also wakes the
poller's inter-poll wait.
"""

import logging
import signal
import threading
from typing import Any, Optional, Sequence

logger = logging.getLogger(__name__)

DEFAULT_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class CancellationState:
    """Stop flag plus the run currently in flight."""

    def __init__(self):
        self._stop = threading.Event()
        self.run_id: Optional[str] = None
        self.label: str = ""
        self._stop_sent: set[str] = set()

    @property
    def stop_requested(self) -> bool:
        return self._stop.is_set()

    def request_stop(self) -> None:
        self._stop.set()

    def wait(self, timeout: float) -> bool:
        """Sleep up to `timeout` seconds; returns early with True once a stop is requested."""
        return self._stop.wait(timeout)

    def activate(self, run_id: str, label: str) -> None:
        self.run_id = run_id
        self.label = label

    def clear(self) -> None:
        self.run_id = None
        self.label = ""

    def mark_stop_sent(self, run_id: str) -> bool:
        """Record a stop request for `run_id`. Returns False if one was already sent."""
        if run_id in self._stop_sent:
            return False
        self._stop_sent.add(run_id)
        return True


def stop_run_quietly(client: Any, state: CancellationState, run_id: str, label: str) -> bool:
    """Ask the executor to stop a run without ever raising.

    Does nothing when the client has no stop operation or a stop was
    already sent for this run.

    Returns:
        True if the stop request was sent successfully.
    """
    stop = getattr(client, "stop_run", None)
    if not callable(stop):
        logger.info("[%s] Executor client cannot stop runs; %s keeps running remotely", label, run_id)
        return False
    if not state.mark_stop_sent(run_id):
        return False

    logger.info("[%s] Stopping test run %s...", label, run_id)
    try:
        stop(run_id)
    except Exception as e:
        logger.warning("[%s] Failed to stop: %s", label, e)
        return False
    return True


class CancellationController:
    """Installs interrupt handlers for the duration of a batch.

    The handlers only set the stop flag. The request that stops the
    remote run is sent by the orchestrator once the client call in flight
    has returned, so the HTTP session is never entered from a handler.

    Usage:
        with CancellationController(state):
            ...  # run the batch
    """

    def __init__(
        self,
        state: CancellationState,
        signals: Sequence[signal.Signals] = DEFAULT_SIGNALS,
    ):
        self.state = state
        self.signals = tuple(signals)
        self.received_signal: Optional[signal.Signals] = None
        self._previous: dict[signal.Signals, Any] = {}

    def handle_signal(self, signum: int, frame: Any = None) -> None:
        """Set the stop flag, waking the poller if it is between polls."""
        self.received_signal = signal.Signals(signum)
        self.state.request_stop()

        if self.state.run_id:
            logger.info("[%s] Received %s", self.state.label, self.received_signal.name)
        else:
            logger.info("Received %s, stopping the batch", self.received_signal.name)

    def install(self) -> None:
        try:
            for sig in self.signals:
                self._previous[sig] = signal.signal(sig, self.handle_signal)
        except (ValueError, OSError):
            # Not on the main thread, or the platform refuses the signal
            self.uninstall()
            raise

    def uninstall(self) -> None:
        while self._previous:
            sig, previous = self._previous.popitem()
            signal.signal(sig, previous if previous is not None else signal.SIG_DFL)

    def __enter__(self):
        self.install()
        return self

    def __exit__(self, *args):
        self.uninstall()

"""Polls one remote run until it reaches a terminal status."""

import logging
import time
from typing import Callable

from ..config import POLL_INTERVAL, TEST_TIMEOUT
from ..definitions.schema import RunStatus
from ..transport.http_client import ExecutorClient

logger = logging.getLogger(__name__)


class RunPoller:
    """Drives a single remote run to completion, timeout or abort."""

    def __init__(
        self,
        client: ExecutorClient,
        interval: float = POLL_INTERVAL,
        timeout: float = TEST_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], object] = time.sleep,
    ):
        """Initialize poller.

        Args:
            client: Executor client used for status queries.
            interval: Seconds between two status queries.
            timeout: Ceiling in seconds for one run, measured from the first query.
            clock: Monotonic clock.
            sleep: Called with `interval` between queries. May return early.
        """
        self.client = client
        self.interval = interval
        self.timeout = timeout
        self.clock = clock
        self.sleep = sleep

    def await_completion(
        self,
        run_id: str,
        label: str,
        should_stop: Callable[[], bool],
    ) -> RunStatus:
        """Poll `run_id` until it finishes.

        The first query happens immediately. Errors raised by the status
        query propagate to the caller.

        Returns:
            The terminal status, or ERROR on timeout or when `should_stop()`
            turns true. The two cases are logged differently.
        """
        start = self.clock()

        while self.clock() - start < self.timeout and not should_stop():
            report = self.client.get_run_status(run_id)
            status = report.status

            if status.is_terminal:
                logger.info("[%s] Finished with status: %s", label, status.value)
                return status

            if status is RunStatus.UNKNOWN:
                logger.warning(
                    "[%s] Unrecognised status %r, still waiting", label, report.raw_status
                )
            else:
                logger.info(
                    "[%s] Status: %s (step %d/%d)",
                    label,
                    status.value,
                    report.completed_steps + 1,
                    report.total_steps,
                )
            self.sleep(self.interval)

        if should_stop():
            logger.warning("[%s] Aborted by user", label)
            return RunStatus.ERROR

        logger.warning("[%s] Timed out after %s", label, _format_duration(self.timeout))
        return RunStatus.ERROR


def _format_duration(seconds: float) -> str:
    if seconds >= 60 and seconds % 60 == 0:
        minutes = int(seconds // 60)
        return f"{minutes} minute{'s' if minutes != 1 else ''}"
    return f"{seconds:g} seconds"

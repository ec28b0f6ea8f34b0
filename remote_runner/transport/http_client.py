"""HTTP client for the remote test executor.

Implements the executor API:
- POST /test-runs                   - Submit a test run
- GET  /test-runs/:id/full-status   - Poll run and step status
- POST /test-runs/stop              - Ask the executor to abort runs

Failed calls are not retried; a failure ends the current test's attempt.
"""

import logging
from typing import Any, Optional, Protocol

import requests

from ..definitions.schema import RunStatus, RunStatusReport, StepStatus
from ..errors import ExecutorError

logger = logging.getLogger(__name__)


class ExecutorClient(Protocol):
    """Operations the runner needs from an executor.

    ``stop_run`` is optional: callers check for it before use.
    """

    def create_run(self, payload: dict[str, Any]) -> str: ...

    def get_run_status(self, run_id: str) -> RunStatusReport: ...


class RemoteExecutorClient:
    """HTTP client for the remote test executor."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        request_timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        """Initialize HTTP client.

        Args:
            base_url: Base URL of the executor API (e.g., https://api.example.com/v1).
            api_key: API key sent with every request.
            request_timeout: Timeout in seconds for each request.
            session: Pre-built session (mainly for tests).
        """
        self.base_url = base_url.rstrip("/")
        self.request_timeout = request_timeout
        self._session = session or requests.Session()
        self._session.headers.update({
            "Content-Type": "application/json",
            "Accept": "application/json",
            "X-API-Key": api_key,
        })

    def create_run(self, payload: dict[str, Any]) -> str:
        """Submit a test for execution.

        POST /test-runs

        Args:
            payload: Test body (url, steps, context).

        Returns:
            Identifier of the created run.

        Raises:
            ExecutorError: On HTTP or connection errors, or a response without an id.
        """
        data = self._request("POST", "/test-runs", json=payload)
        run_id = data.get("id") if isinstance(data, dict) else None
        if not run_id:
            raise ExecutorError("Executor response has no run id")
        return str(run_id)

    def get_run_status(self, run_id: str) -> RunStatusReport:
        """Get the current status of a run and of each of its steps.

        GET /test-runs/:id/full-status
        """
        data = self._request("GET", f"/test-runs/{run_id}/full-status")
        if not isinstance(data, dict) or "status" not in data:
            raise ExecutorError(f"Executor status response for {run_id} has no status")

        raw_status = str(data["status"])
        step_statuses = tuple(
            StepStatus(start=s.get("start"), end=s.get("end"))
            for s in data.get("stepStatuses") or []
            if isinstance(s, dict)
        )
        return RunStatusReport(
            status=RunStatus.parse(raw_status),
            raw_status=raw_status,
            step_statuses=step_statuses,
        )

    def stop_run(self, run_id: str) -> None:
        """Ask the executor to abort a run.

        POST /test-runs/stop
        """
        self._request("POST", "/test-runs/stop", json={"ids": [run_id]}, expect_json=False)

    def _request(
        self,
        method: str,
        path: str,
        expect_json: bool = True,
        **kwargs,
    ) -> Any:
        """Execute a single HTTP request.

        Raises:
            ExecutorError: On connection errors, timeouts, HTTP errors or invalid JSON.
        """
        url = f"{self.base_url}{path}"
        kwargs.setdefault("timeout", self.request_timeout)
        logger.debug("%s %s", method, url)

        try:
            response = self._session.request(method, url, **kwargs)
        except requests.RequestException as e:
            raise ExecutorError(f"{method} {path} failed: {e}")

        if response.status_code >= 400:
            raise ExecutorError(
                f"{method} {path} returned HTTP {response.status_code}: {_error_text(response)}",
                status_code=response.status_code,
            )

        if not expect_json:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ExecutorError(f"{method} {path} returned invalid JSON: {e}")

    def close(self) -> None:
        """Close the HTTP session."""
        self._session.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


def _error_text(response: requests.Response, limit: int = 200) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text[:limit]
    if isinstance(data, dict) and "message" in data:
        return str(data["message"])
    return response.text[:limit]

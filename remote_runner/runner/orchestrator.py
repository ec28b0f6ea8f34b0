"""Batch orchestrator - runs every test of every definition file in turn.

For each test:
1. Resolve placeholders
2. Submit the run (HTTP)
3. Poll until it finishes, times out or is aborted
4. Record the outcome

Tests run strictly one after another; the run in flight is the only one a
cancellation has to reach.
"""

import logging
import time
from dataclasses import replace
from pathlib import Path
from typing import Callable, Iterable, Optional, Union

from ..definitions.parser import build_specification, parse_definition_file, raw_test_name
from ..definitions.schema import DefinitionFile, RunStatus
from ..errors import DefinitionError
from ..placeholders import PlaceholderResolver
from ..transport.http_client import ExecutorClient
from .cancellation import CancellationController, CancellationState, stop_run_quietly
from .outcome import BatchOutcome, TestOutcome
from .poller import RunPoller

logger = logging.getLogger(__name__)

DefinitionLoader = Callable[[Union[str, Path]], DefinitionFile]


class BatchOrchestrator:
    """Runs a batch of definition files against a remote executor."""

    def __init__(
        self,
        client: ExecutorClient,
        resolver: Optional[PlaceholderResolver] = None,
        state: Optional[CancellationState] = None,
        poller: Optional[RunPoller] = None,
        install_signals: bool = True,
        loader: DefinitionLoader = parse_definition_file,
    ):
        """Initialize orchestrator.

        Args:
            client: Executor client.
            resolver: Placeholder resolver. Default: environment and CI inputs.
            state: Shared cancellation state. Default: a fresh one.
            poller: Run poller. Default: 30 s interval, 30 min ceiling, sleeping
                on the cancellation state so a stop wakes it up.
            install_signals: Install SIGINT/SIGTERM handlers during run_batch.
            loader: Reads one definition file.
        """
        self.client = client
        self.resolver = resolver or PlaceholderResolver()
        self.state = state or CancellationState()
        self.poller = poller or RunPoller(client, sleep=self.state.wait)
        self.install_signals = install_signals
        self.loader = loader

    def run_batch(self, paths: Iterable[Union[str, Path]]) -> BatchOutcome:
        """Run every test in `paths`, in order.

        Returns:
            BatchOutcome with per-test results and the cancellation flag.
        """
        outcome = BatchOutcome()

        if self.install_signals:
            with CancellationController(self.state):
                self._run_files(paths, outcome)
        else:
            self._run_files(paths, outcome)

        outcome.cancelled = self.state.stop_requested
        return outcome

    def _run_files(self, paths: Iterable[Union[str, Path]], outcome: BatchOutcome) -> None:
        for path in paths:
            if self.state.stop_requested:
                break

            try:
                definition = self.loader(path)
            except DefinitionError as e:
                logger.error("Skipping %s: %s", path, e)
                outcome.skipped_files.append(str(path))
                continue

            logger.info("Running %d test(s) from %s", definition.total_tests, path)
            for index in range(definition.total_tests):
                if self.state.stop_requested:
                    break
                outcome.record(self._run_test(definition, index))

    def _run_test(self, definition: DefinitionFile, index: int) -> TestOutcome:
        label = self._label(definition, index)
        result = TestOutcome(label=label)
        start = time.monotonic()

        try:
            spec = build_specification(definition, index)
            spec = replace(
                spec,
                steps=self.resolver.resolve_steps(spec.steps),
                context=self.resolver.resolve_context(spec.context),
            )

            run_id = self.client.create_run(spec.to_payload())
            result.run_id = run_id
            self.state.activate(run_id, label)
            logger.info("[%s] TestRun created: %s", label, run_id)

            try:
                result.status = self.poller.await_completion(
                    run_id, label, lambda: self.state.stop_requested
                )
            except Exception:
                stop_run_quietly(self.client, self.state, run_id, label)
                raise

            # Signal handlers only raise the flag; the remote run is stopped here
            if self.state.stop_requested:
                stop_run_quietly(self.client, self.state, run_id, label)

            if result.status is not RunStatus.SUCCESS:
                logger.error("[%s] Test failed with status %s", label, result.status.value)

        except Exception as e:
            logger.error("[%s] Error occurred while test execution: %s", label, e)
            result.error = str(e) or type(e).__name__

        finally:
            self.state.clear()
            result.duration_s = time.monotonic() - start

        return result

    def _label(self, definition: DefinitionFile, index: int) -> str:
        name = self.resolver.resolve(raw_test_name(definition.tests[index]))
        return f"{Path(definition.path).name}#{index + 1}:{name or 'unnamed'}"

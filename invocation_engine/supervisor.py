"""Deadline enforcement around the test lifecycle."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from invocation_engine.lifecycle import LifecycleRunner
from invocation_engine.messages import TEST_TIMEOUT
from invocation_engine.models.outcome import Outcome
from invocation_engine.models.result import FailureDescriptor, TestResult
from invocation_engine.thread_operations import DeadlineRun

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class TimeoutSupervisor:
    """Runs the lifecycle directly, or on a worker bounded by the method's timeout.

    Timed-out workers cannot be stopped reliably. They are kept in
    ``abandoned_runs`` so callers can tell whether one is still executing
    before trusting process-wide state again.
    """

    runner: LifecycleRunner
    _abandoned: list[DeadlineRun] = field(default_factory=list, init=False, repr=False)

    @property
    def abandoned_runs(self) -> Sequence[DeadlineRun]:
        """Timed-out runs whose worker thread is still alive."""
        return [run for run in self._abandoned if run.is_alive]

    def execute(self, arguments: Sequence[Any] = ()) -> TestResult:
        method = self.runner.method
        if not method.is_timeout_set:
            return self.runner.run(arguments)

        outcome: list[TestResult] = []
        failure: list[BaseException] = []

        def run_lifecycle() -> None:
            try:
                outcome.append(self.runner.run(arguments))
            except BaseException as e:  # re-raised on the waiting thread
                failure.append(e)

        run = self.runner.thread_operations.run_with_deadline(run_lifecycle, method.timeout)
        if run.completed:
            if failure:
                raise failure[0]
            return outcome[0]

        self._abandoned.append(run)
        log.warning(
            "%s.%s timed out after %d ms (worker alive: %s)",
            method.class_name,
            method.name,
            method.timeout,
            run.is_alive,
        )
        return TestResult(
            outcome=Outcome.TIMEOUT,
            failure=FailureDescriptor(
                outcome=Outcome.TIMEOUT,
                message=TEST_TIMEOUT.format(method_name=method.name),
            ),
        )

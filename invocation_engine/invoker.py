"""Entry point of the engine: one call, one test invocation, one result."""

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import replace
from typing import Any

from invocation_engine.config import EngineConfig
from invocation_engine.context import ExecutionContext, TestContext
from invocation_engine.lifecycle import LifecycleRunner
from invocation_engine.log_capture import LogCapture, LogMessageListener
from invocation_engine.messages import NOT_RUNNABLE
from invocation_engine.models.descriptor import MethodDescriptor
from invocation_engine.models.outcome import Outcome
from invocation_engine.models.result import FailureDescriptor, TestResult
from invocation_engine.supervisor import TimeoutSupervisor
from invocation_engine.thread_operations import (
    DeadlineRun,
    DefaultThreadOperations,
    ThreadOperations,
)

log = logging.getLogger(__name__)


class TestMethodInvoker:
    """Invokes a test method and decorates its result with timing and output.

    Args:
        method: Descriptor of the test method to run
        context: Execution context owned by this invocation
        config: Engine configuration
        thread_operations: Override of the thread primitives
        log_capture_factory: Override of the output capture scope

    """

    __test__ = False

    def __init__(
        self,
        method: MethodDescriptor,
        context: ExecutionContext,
        config: EngineConfig | None = None,
        thread_operations: ThreadOperations | None = None,
        log_capture_factory: Callable[[], LogCapture] | None = None,
    ) -> None:
        self.method = method
        self.context = context
        self.config = config or EngineConfig()
        self._log_capture_factory = log_capture_factory or self._default_log_capture
        self._supervisor = TimeoutSupervisor(
            runner=LifecycleRunner(
                method=method,
                context=context,
                thread_operations=thread_operations
                or DefaultThreadOperations(
                    abort_on_timeout=self.config.abort_on_timeout,
                    thread_name=self.config.worker_thread_name,
                ),
            )
        )

    @property
    def abandoned_runs(self) -> Sequence[DeadlineRun]:
        """Timed-out workers of this invoker that are still running."""
        return self._supervisor.abandoned_runs

    def _default_log_capture(self) -> LogCapture:
        return LogMessageListener(
            capture_output=self.config.capture_output,
            logger_name=self.config.debug_trace_logger,
            level=self.config.debug_trace_level,
            fmt=self.config.debug_trace_format,
        )

    def invoke(self, arguments: Sequence[Any] = ()) -> TestResult:
        """Run the test method once.

        Args:
            arguments: Positional arguments passed to the test method

        Returns:
            The result, including duration, captured output and result files.

        """
        method = self.method
        if not method.is_runnable:
            log.info(
                "Skipping %s.%s: %s",
                method.class_name,
                method.name,
                method.not_runnable_reason,
            )
            message = NOT_RUNNABLE.format(
                class_name=method.class_name,
                method_name=method.name,
                reason=method.not_runnable_reason,
            )
            return TestResult(
                outcome=Outcome.ERROR,
                failure=FailureDescriptor(outcome=Outcome.ERROR, message=message),
            )

        with self._log_capture_factory() as listener:
            started = time.perf_counter()
            result = self._supervisor.execute(arguments)
            duration = time.perf_counter() - started
            result = replace(
                result,
                duration=duration,
                stdout=listener.standard_output,
                stderr=listener.standard_error,
                debug_trace=listener.debug_trace,
                result_files=tuple(self.context.collect_result_files()),
            )

        log.info(
            "%s.%s: %s (%.3fs)",
            method.class_name,
            method.name,
            result.outcome,
            result.duration,
        )
        return result


def run_test(
    method: MethodDescriptor,
    arguments: Sequence[Any] = (),
    *,
    context: ExecutionContext | None = None,
    config: EngineConfig | None = None,
) -> TestResult:
    """Run one test method with a fresh execution context unless one is given."""
    if context is None:
        context = TestContext(test_name=f"{method.class_name}.{method.name}")
    return TestMethodInvoker(method, context, config=config).invoke(arguments)

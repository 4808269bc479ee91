"""Per-test lifecycle: construct, inject context, set up, invoke, tear down."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from invocation_engine.classifier import (
    classify,
    describe_setup_exception,
    unwrap,
)
from invocation_engine.context import ExecutionContext
from invocation_engine.dispatch import invoke_as_synchronous
from invocation_engine.messages import (
    CLEANUP_METHOD_THROWS,
    CONTEXT_SET_ERROR,
    INSTANCE_CREATION_ERROR,
)
from invocation_engine.models.descriptor import MethodDescriptor
from invocation_engine.models.outcome import Outcome
from invocation_engine.models.result import FailureDescriptor, TestResult
from invocation_engine.stack_trace import (
    get_exception_message,
    get_stack_trace_information,
)
from invocation_engine.thread_operations import (
    DefaultThreadOperations,
    ThreadOperations,
)

log = logging.getLogger(__name__)

_NO_INSTANCE = object()
DISPOSE_METHOD_NAME = "close"


@dataclass(kw_only=True)
class _InvocationState:
    """Outcome and failure recorded so far by one invocation."""

    outcome: Outcome | None = None
    failure: FailureDescriptor | None = None

    def passed(self) -> None:
        self.outcome = Outcome.PASSED
        self.failure = None

    def failed(self, failure: FailureDescriptor) -> None:
        self.outcome = failure.outcome
        self.failure = failure


def _stage_failure(template: str, error: BaseException, **names: str) -> FailureDescriptor:
    real_exception = unwrap(error)
    return FailureDescriptor(
        outcome=Outcome.FAILED,
        message=template.format(error=get_exception_message(real_exception), **names),
        stack_trace=get_stack_trace_information(real_exception),
        cause=real_exception,
    )


@dataclass(frozen=True, kw_only=True)
class LifecycleRunner:
    """Runs one test method against a fresh instance of its class.

    Failures in user code are classified into the returned result. Teardown
    runs whenever the execution context reached the instance, whatever
    happened in setup or in the test body.
    """

    method: MethodDescriptor
    context: ExecutionContext
    thread_operations: ThreadOperations = field(default_factory=DefaultThreadOperations)

    @property
    def class_name(self) -> str:
        return self.method.class_name

    def run(self, arguments: Sequence[Any] = ()) -> TestResult:
        """Execute the full lifecycle of one invocation.

        Args:
            arguments: Positional arguments passed to the test method

        Returns:
            Result carrying the outcome and, unless passed, the failure.

        Raises:
            Exception: An error of the engine itself, re-raised after teardown
            BaseException: An interruption such as SystemExit, re-raised after
                teardown

        """
        state = _InvocationState()
        instance = self._create_instance(state)
        context_set = False
        runner_error: BaseException | None = None

        try:
            if instance is not _NO_INSTANCE and self._set_context(instance, state):
                context_set = True
                if self._run_setup(instance, state):
                    self._run_test_method(instance, arguments, state)
        except BaseException as e:
            runner_error = e

        # Teardown may look at the outcome, so it is recorded first.
        if state.outcome is not None:
            self.context.set_outcome(state.outcome)

        if context_set:
            self._run_teardown(instance, state)

        if runner_error is not None:
            log.error(
                "Invocation of %s.%s aborted by %s",
                self.class_name,
                self.method.name,
                type(runner_error).__name__,
                exc_info=runner_error,
            )
            raise runner_error

        if state.outcome is None:
            raise RuntimeError(
                f"{self.class_name}.{self.method.name} finished without an outcome"
            )
        return TestResult(outcome=state.outcome, failure=state.failure)

    def _create_instance(self, state: _InvocationState) -> Any:
        log.debug("Creating instance of %s", self.class_name)
        try:
            return invoke_as_synchronous(self.method.parent.instance_factory)
        except Exception as e:
            state.failed(
                _stage_failure(INSTANCE_CREATION_ERROR, e, class_name=self.class_name)
            )
            log.debug("Instance creation of %s failed", self.class_name)
            return _NO_INSTANCE

    def _set_context(self, instance: Any, state: _InvocationState) -> bool:
        slot = self.method.parent.context_property
        if slot is None or not slot.writable:
            return True

        try:
            setattr(instance, slot.name, self.context)
        except Exception as e:
            state.failed(_stage_failure(CONTEXT_SET_ERROR, e, class_name=self.class_name))
            log.debug("Setting %s.%s failed", self.class_name, slot.name)
            return False
        return True

    def _run_setup(self, instance: Any, state: _InvocationState) -> bool:
        setup_name = ""
        try:
            for setup_method in self.method.parent.setup_methods:
                setup_name = setup_method.__name__
                log.debug("Running setup %s.%s", self.class_name, setup_name)
                invoke_as_synchronous(setup_method, instance)
        except Exception as e:
            state.failed(describe_setup_exception(e, self.class_name, setup_name))
            log.debug("Setup %s failed with outcome %s", setup_name, state.outcome)
            return False
        return True

    def _run_test_method(
        self, instance: Any, arguments: Sequence[Any], state: _InvocationState
    ) -> None:
        method = self.method
        log.debug("Invoking %s.%s", self.class_name, method.name)

        try:
            self.thread_operations.run_with_abort_safety(
                lambda: invoke_as_synchronous(method.function, instance, *arguments)
            )
        except Exception as e:
            failure = classify(
                e, self.class_name, method.name, method.expected_exception
            )
            if failure is None:
                log.debug("%s raised its expected exception", method.name)
                state.passed()
            else:
                state.failed(failure)
            return

        if method.expected_exception is not None:
            state.failed(
                FailureDescriptor(
                    outcome=Outcome.FAILED,
                    message=method.expected_exception.no_exception_message,
                )
            )
        else:
            state.passed()

    def _run_teardown(self, instance: Any, state: _InvocationState) -> None:
        first_error: tuple[str, Exception] | None = None

        for teardown_method in self.method.parent.teardown_methods:
            log.debug("Running teardown %s.%s", self.class_name, teardown_method.__name__)
            try:
                invoke_as_synchronous(teardown_method, instance)
            except Exception as e:
                if first_error is None:
                    first_error = (teardown_method.__name__, e)

        try:
            dispose = getattr(instance, DISPOSE_METHOD_NAME, None)
            if callable(dispose):
                invoke_as_synchronous(dispose)
        except Exception as e:
            if first_error is None:
                first_error = (DISPOSE_METHOD_NAME, e)

        if first_error is None:
            return

        method_name, error = first_error
        if state.outcome is not Outcome.FAILED:
            log.info(
                "Teardown failure overrides %s outcome of %s.%s",
                state.outcome,
                self.class_name,
                self.method.name,
            )
        state.failed(
            _stage_failure(
                CLEANUP_METHOD_THROWS,
                error,
                class_name=self.class_name,
                method_name=method_name,
            )
        )

"""Tests for the timeout supervisor."""

import threading
from collections.abc import Callable
from typing import Any
from unittest.mock import Mock

import pytest

from invocation_engine.context import TestContext
from invocation_engine.lifecycle import LifecycleRunner
from invocation_engine.models.descriptor import ClassDescriptor, MethodDescriptor
from invocation_engine.models.outcome import Outcome
from invocation_engine.models.result import TestResult
from invocation_engine.thread_operations import DeadlineRun, DefaultThreadOperations
from invocation_engine.supervisor import TimeoutSupervisor


class Subject:
    """Test class without hooks."""


def make_supervisor(
    function: Callable[..., Any],
    timeout: int,
    *,
    abort_on_timeout: bool = False,
) -> TimeoutSupervisor:
    """Build a supervisor over a real lifecycle runner."""
    method = MethodDescriptor(
        function=function,
        parent=ClassDescriptor(class_type=Subject),
        timeout=timeout,
    )
    runner = LifecycleRunner(
        method=method,
        context=TestContext(),
        thread_operations=DefaultThreadOperations(abort_on_timeout=abort_on_timeout),
    )
    return TimeoutSupervisor(runner=runner)


def test_runs_on_caller_thread_without_timeout() -> None:
    """Runs synchronously on the calling thread when no timeout is set."""
    threads: list[threading.Thread] = []

    def record_thread(instance: Subject) -> None:
        threads.append(threading.current_thread())

    result = make_supervisor(record_thread, timeout=0).execute()

    assert result.outcome is Outcome.PASSED
    assert threads == [threading.current_thread()]


def test_runs_on_worker_thread_with_timeout() -> None:
    """Runs the lifecycle on another thread when a timeout is set."""
    threads: list[threading.Thread] = []

    def record_thread(instance: Subject) -> None:
        threads.append(threading.current_thread())

    result = make_supervisor(record_thread, timeout=5000).execute()

    assert result.outcome is Outcome.PASSED
    assert threads and threads[0] is not threading.current_thread()


def test_returns_worker_result_when_completed() -> None:
    """Returns the lifecycle's classified result unchanged."""

    def fails(instance: Subject) -> None:
        raise AssertionError("late but finished")

    result = make_supervisor(fails, timeout=5000).execute()

    assert result.outcome is Outcome.FAILED
    assert result.message == "late but finished"


def test_timeout_result_names_method() -> None:
    """A test outliving its deadline times out, even if it would pass."""
    release = threading.Event()

    def waits_forever(instance: Subject) -> None:
        release.wait(5)

    supervisor = make_supervisor(waits_forever, timeout=50)
    try:
        result = supervisor.execute()

        assert result.outcome is Outcome.TIMEOUT
        assert result.failure is not None
        assert result.failure.outcome is Outcome.TIMEOUT
        assert result.failure.message == (
            "Test 'waits_forever' exceeded execution timeout period."
        )
        assert len(supervisor.abandoned_runs) == 1
        run = supervisor.abandoned_runs[0]
        assert run.is_alive
    finally:
        release.set()

    run.thread.join(5)
    assert not run.is_alive
    assert supervisor.abandoned_runs == []


def test_abandoned_worker_is_asked_to_terminate() -> None:
    """A busy worker stops once the termination signal lands."""
    finished = threading.Event()

    def spins(instance: Subject) -> None:
        try:
            for _ in range(1000):
                threading.Event().wait(0.01)
        finally:
            finished.set()

    supervisor = make_supervisor(spins, timeout=50, abort_on_timeout=True)

    result = supervisor.execute()

    assert result.outcome is Outcome.TIMEOUT
    assert finished.wait(5)


def test_worker_error_propagates_to_caller() -> None:
    """An error escaping the lifecycle is re-raised, not turned into a timeout."""
    runner = Mock(spec=LifecycleRunner)
    runner.method = MethodDescriptor(
        function=lambda instance: None,
        parent=ClassDescriptor(class_type=Subject),
        timeout=5000,
    )
    runner.thread_operations = DefaultThreadOperations()
    runner.run.side_effect = RuntimeError("engine bug")

    with pytest.raises(RuntimeError, match="engine bug"):
        TimeoutSupervisor(runner=runner).execute()


def test_uses_injected_thread_operations() -> None:
    """Delegates deadline handling to the runner's thread operations."""
    runner = Mock(spec=LifecycleRunner)
    runner.method = MethodDescriptor(
        function=lambda instance: None,
        parent=ClassDescriptor(class_type=Subject),
        timeout=250,
    )
    thread_operations = Mock()
    thread_operations.run_with_deadline.return_value = DeadlineRun(
        completed=False, thread=threading.Thread(target=lambda: None)
    )
    runner.thread_operations = thread_operations

    result = TimeoutSupervisor(runner=runner).execute()

    assert isinstance(result, TestResult)
    assert result.outcome is Outcome.TIMEOUT
    assert thread_operations.run_with_deadline.call_args.args[1] == 250
    runner.run.assert_not_called()

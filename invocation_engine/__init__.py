"""Per-test invocation engine of a unit-test framework."""

from invocation_engine.config import EngineConfig
from invocation_engine.context import ExecutionContext, TestContext
from invocation_engine.exceptions import (
    AssertInconclusiveError,
    InvocationError,
    TestNotFoundError,
    ThreadTerminated,
)
from invocation_engine.expected import ExpectedException, ExpectedExceptionBase
from invocation_engine.invoker import TestMethodInvoker, run_test
from invocation_engine.markers import cleanup, expected_exception, initialize, timeout
from invocation_engine.models.descriptor import ClassDescriptor, MethodDescriptor
from invocation_engine.models.outcome import Outcome
from invocation_engine.models.result import FailureDescriptor, TestResult

__all__ = [
    "AssertInconclusiveError",
    "ClassDescriptor",
    "EngineConfig",
    "ExecutionContext",
    "ExpectedException",
    "ExpectedExceptionBase",
    "FailureDescriptor",
    "InvocationError",
    "MethodDescriptor",
    "Outcome",
    "TestContext",
    "TestMethodInvoker",
    "TestNotFoundError",
    "TestResult",
    "ThreadTerminated",
    "cleanup",
    "expected_exception",
    "initialize",
    "run_test",
    "timeout",
]

"""Decorators that declare lifecycle hooks and test method options."""

from collections.abc import Callable
from typing import Any, TypeVar

from invocation_engine.expected import ExpectedExceptionContract

INITIALIZE_MARKER = "__invocation_initialize__"
CLEANUP_MARKER = "__invocation_cleanup__"
TIMEOUT_MARKER = "__invocation_timeout__"
EXPECTED_EXCEPTION_MARKER = "__invocation_expected_exception__"

F = TypeVar("F", bound=Callable[..., Any])


def initialize(function: F) -> F:
    """Mark a method as its class's per-test setup hook."""
    setattr(function, INITIALIZE_MARKER, True)
    return function


def cleanup(function: F) -> F:
    """Mark a method as its class's per-test teardown hook."""
    setattr(function, CLEANUP_MARKER, True)
    return function


def timeout(milliseconds: int) -> Callable[[F], F]:
    """Declare the wall-clock limit of a test method, in milliseconds."""

    def decorate(function: F) -> F:
        setattr(function, TIMEOUT_MARKER, milliseconds)
        return function

    return decorate


def expected_exception(
    contract: ExpectedExceptionContract,
) -> Callable[[F], F]:
    """Declare the exception a test method is expected to raise."""

    def decorate(function: F) -> F:
        setattr(function, EXPECTED_EXCEPTION_MARKER, contract)
        return function

    return decorate

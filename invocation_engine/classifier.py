"""Mapping of exceptions raised by user code to test outcomes.

Every function here is pure: it inspects an exception (and, where relevant,
the expected-exception contract of the test method) and returns the failure
to report, or None when the exception is the test's intended outcome.
"""

import logging

from invocation_engine.exceptions import (
    AssertInconclusiveError,
    InvocationError,
    ThreadTerminated,
)
from invocation_engine.expected import ExpectedExceptionContract
from invocation_engine.messages import (
    FAILED_TO_GET_EXCEPTION,
    INITIALIZE_METHOD_THROWS,
    TEST_METHOD_THROWS,
    WRONG_THREAD,
)
from invocation_engine.models.outcome import Outcome
from invocation_engine.models.result import FailureDescriptor
from invocation_engine.stack_trace import (
    get_assertion_message,
    get_exception_message,
    get_stack_trace_information,
)

log = logging.getLogger(__name__)

# RPC_E_WRONG_THREAD: the object was used from a thread other than its owner.
WRONG_THREAD_ERROR_CODE = -2147417842


def unwrap(exception: BaseException) -> BaseException:
    """Return the exception user code raised, peeling one invocation wrapper."""
    if isinstance(exception, InvocationError) and exception.inner is not None:
        return exception.inner
    return exception


def is_inconclusive(exception: BaseException) -> bool:
    return isinstance(exception, AssertInconclusiveError)


def _is_empty_wrapper(exception: BaseException) -> bool:
    return isinstance(exception, InvocationError) and exception.inner is None


def _assertion_outcome(exception: BaseException) -> Outcome:
    return Outcome.INCONCLUSIVE if is_inconclusive(exception) else Outcome.FAILED


def _native_error_code(exception: BaseException) -> int | None:
    for attribute in ("hresult", "winerror"):
        if isinstance(code := getattr(exception, attribute, None), int):
            return code
    return None


def describe_assertion(exception: BaseException) -> FailureDescriptor:
    """Failure reported for an assertion signal, taken from the signal itself."""
    return FailureDescriptor(
        outcome=_assertion_outcome(exception),
        message=get_assertion_message(exception),
        stack_trace=get_stack_trace_information(exception),
        cause=exception,
    )


def verify_expected_exception(
    exception: BaseException,
    contract: ExpectedExceptionContract,
) -> FailureDescriptor | None:
    """Ask the contract whether the exception raised by a test was expected.

    Args:
        exception: Exception raised by the test method, possibly wrapped
        contract: Expected-exception contract declared on the test method

    Returns:
        None if the contract accepts the exception, otherwise the failure
        described by whatever the contract raised.

    """
    real_exception = unwrap(exception)
    try:
        contract.verify(real_exception)
    except Exception as verify_error:
        target = unwrap(verify_error)
        log.debug(
            "Expected-exception contract rejected %s: %s",
            type(real_exception).__name__,
            type(target).__name__,
        )
        return FailureDescriptor(
            outcome=_assertion_outcome(target),
            message=get_assertion_message(target),
            stack_trace=get_stack_trace_information(target),
            cause=target,
        )
    return None


def describe_exception(
    exception: BaseException,
    class_name: str,
    method_name: str,
) -> FailureDescriptor:
    """Describe an exception raised by a test method without a contract verdict."""
    if _is_empty_wrapper(exception):
        return FailureDescriptor(
            outcome=Outcome.ERROR,
            message=FAILED_TO_GET_EXCEPTION.format(
                class_name=class_name, method_name=method_name
            ),
            cause=exception,
        )

    real_exception = unwrap(exception)
    if isinstance(real_exception, AssertionError):
        return describe_assertion(real_exception)

    message = TEST_METHOD_THROWS.format(
        class_name=class_name,
        method_name=method_name,
        error=get_exception_message(real_exception),
    )
    if _native_error_code(real_exception) == WRONG_THREAD_ERROR_CODE:
        message = WRONG_THREAD.format(message=message)

    # A termination signal's traceback only shows where the engine was
    # interrupted, never the test code.
    stack_trace = (
        None
        if isinstance(real_exception, ThreadTerminated)
        else get_stack_trace_information(real_exception)
    )
    return FailureDescriptor(
        outcome=Outcome.FAILED,
        message=message,
        stack_trace=stack_trace,
        cause=real_exception,
    )


def classify(
    exception: BaseException,
    class_name: str,
    method_name: str,
    expected: ExpectedExceptionContract | None = None,
) -> FailureDescriptor | None:
    """Classify an exception raised while invoking a test method.

    Args:
        exception: Exception caught around the invocation
        class_name: Fully qualified name of the test class
        method_name: Name of the test method
        expected: Expected-exception contract, if the method declares one

    Returns:
        None when the contract accepts the exception (the test passed),
        otherwise the failure to report.

    """
    if expected is None or _is_empty_wrapper(exception):
        return describe_exception(exception, class_name, method_name)
    return verify_expected_exception(exception, expected)


def describe_setup_exception(
    exception: BaseException,
    class_name: str,
    method_name: str,
) -> FailureDescriptor:
    """Describe an exception raised by a per-test setup method."""
    real_exception = unwrap(exception)
    if isinstance(real_exception, AssertionError):
        return describe_assertion(real_exception)

    return FailureDescriptor(
        outcome=Outcome.FAILED,
        message=INITIALIZE_METHOD_THROWS.format(
            class_name=class_name,
            method_name=method_name,
            error=get_exception_message(real_exception),
        ),
        stack_trace=get_stack_trace_information(real_exception),
        cause=real_exception,
    )

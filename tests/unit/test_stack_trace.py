"""Tests for exception rendering helpers."""

from invocation_engine.dispatch import invoke_as_synchronous
from invocation_engine.exceptions import InvocationError
from invocation_engine.stack_trace import (
    get_assertion_message,
    get_exception_message,
    get_stack_trace_information,
)


def fail_in_user_code() -> None:
    """User function raising an error."""
    raise RuntimeError("user failure")


def test_message_includes_cause_chain() -> None:
    """Renders the chain of causes outermost first."""
    try:
        try:
            raise KeyError("inner")
        except KeyError as e:
            raise ValueError("outer") from e
    except ValueError as e:
        message = get_exception_message(e)

    assert message == "ValueError: outer ---> KeyError: 'inner'"


def test_message_of_exception_without_text() -> None:
    """Uses the bare type name when the exception has no text."""
    assert get_exception_message(RuntimeError()) == "RuntimeError"


def test_assertion_message_falls_back_to_type_name() -> None:
    """An empty assertion message becomes the type name."""
    assert get_assertion_message(AssertionError()) == "AssertionError"
    assert get_assertion_message(AssertionError("differs")) == "differs"


def test_stack_trace_excludes_engine_frames() -> None:
    """Keeps user frames and drops the dispatcher's."""
    try:
        invoke_as_synchronous(fail_in_user_code)
    except InvocationError as e:
        assert e.inner is not None
        info = get_stack_trace_information(e.inner)

    assert info is not None
    assert "fail_in_user_code" in info.stack_trace
    assert "dispatch.py" not in info.stack_trace
    assert info.file_name is not None
    assert info.file_name.endswith("test_stack_trace.py")
    assert info.line_number is not None


def test_stack_trace_of_unraised_exception_is_none() -> None:
    """An exception that was never raised has no stack trace."""
    assert get_stack_trace_information(ValueError("never raised")) is None

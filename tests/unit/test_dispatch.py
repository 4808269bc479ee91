"""Tests for calling into user code."""

import asyncio

import pytest

from invocation_engine.dispatch import invoke_as_synchronous
from invocation_engine.exceptions import InvocationError, ThreadTerminated


class Widget:
    """Object whose methods are dispatched."""

    def double(self, value: int) -> int:
        return value * 2

    async def double_later(self, value: int) -> int:
        return value * 2

    def explode(self) -> None:
        raise ValueError("kaboom")


def test_returns_callee_result() -> None:
    """Returns whatever the callee returned."""
    assert invoke_as_synchronous(Widget.double, Widget(), 21) == 42


def test_awaits_coroutine_result() -> None:
    """Drives a returned coroutine to completion."""
    assert invoke_as_synchronous(Widget.double_later, Widget(), 21) == 42


def test_wraps_callee_exception() -> None:
    """Wraps exceptions raised by user code, keeping the original."""
    with pytest.raises(InvocationError) as exc_info:
        invoke_as_synchronous(Widget.explode, Widget())

    assert isinstance(exc_info.value.inner, ValueError)
    assert exc_info.value.__cause__ is exc_info.value.inner


def test_signature_mismatch_has_no_inner() -> None:
    """A call that cannot be made raises a wrapper without inner exception."""
    with pytest.raises(InvocationError) as exc_info:
        invoke_as_synchronous(Widget.double, Widget())

    assert exc_info.value.inner is None
    assert "Widget.double" in str(exc_info.value)


def test_constructs_classes() -> None:
    """Classes are called like any other callable."""
    assert isinstance(invoke_as_synchronous(Widget), Widget)


def test_termination_signal_is_not_wrapped() -> None:
    """Base exceptions such as the termination signal pass through."""

    def terminated() -> None:
        raise ThreadTerminated

    with pytest.raises(ThreadTerminated):
        invoke_as_synchronous(terminated)


def test_awaits_coroutine_inside_running_loop() -> None:
    """Drives a returned coroutine even when the caller runs an event loop."""

    async def caller() -> int:
        return invoke_as_synchronous(Widget.double_later, Widget(), 21)

    assert asyncio.run(caller()) == 42


def test_coroutine_error_inside_running_loop_is_wrapped() -> None:
    """Errors of a coroutine driven beside a running loop are user failures."""

    async def explode_later(widget: Widget) -> None:
        widget.explode()

    async def caller() -> None:
        invoke_as_synchronous(explode_later, Widget())

    with pytest.raises(InvocationError) as exc_info:
        asyncio.run(caller())

    assert isinstance(exc_info.value.inner, ValueError)

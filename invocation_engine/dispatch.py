"""Calling into user code."""

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from invocation_engine.exceptions import InvocationError


async def _await(awaitable: Awaitable[Any]) -> Any:
    return await awaitable


def _run_awaitable(awaitable: Awaitable[Any]) -> Any:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(_await(awaitable))

    # The caller owns a running loop; drive the awaitable on a loop of its own.
    with ThreadPoolExecutor(max_workers=1, thread_name_prefix="awaitable") as executor:
        return executor.submit(asyncio.run, _await(awaitable)).result()


def _callable_name(function: Callable[..., Any]) -> str:
    return getattr(function, "__qualname__", None) or repr(function)


def invoke_as_synchronous(function: Callable[..., Any], *arguments: Any) -> Any:
    """Call user code and drive any awaitable it returns to completion.

    Exceptions raised by the callee come back wrapped in an ``InvocationError``
    whose ``inner`` is the original exception. Arguments that do not fit the
    callee's signature raise an ``InvocationError`` without ``inner``, since
    the user code never ran.

    Args:
        function: Function, method or class to call
        *arguments: Positional arguments, the instance first for methods

    Returns:
        Whatever the callee returned, or the result of awaiting it.

    Raises:
        InvocationError: If the call could not be made or the callee raised

    """
    name = _callable_name(function)
    try:
        inspect.signature(function).bind(*arguments)
    except TypeError as e:
        raise InvocationError(f"Cannot invoke {name}: {e}") from None
    except ValueError:
        # No introspectable signature; let the call itself decide.
        pass

    try:
        result = function(*arguments)
        if inspect.isawaitable(result):
            result = _run_awaitable(result)
    except Exception as e:
        raise InvocationError(f"{name} raised {type(e).__name__}", inner=e) from e
    return result

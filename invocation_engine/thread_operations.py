"""Thread primitives used to run and bound test code."""

import ctypes
import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from invocation_engine.exceptions import InvocationError, ThreadTerminated

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class DeadlineRun:
    """Handle on an action started under a deadline.

    A run that missed its deadline keeps its worker thread: stopping it is
    best effort, so ``is_alive`` tells whether it is still executing and may
    still be touching shared state.
    """

    completed: bool
    thread: threading.Thread = field(repr=False)

    @property
    def timed_out(self) -> bool:
        return not self.completed

    @property
    def is_alive(self) -> bool:
        return self.thread.is_alive()


class ThreadOperations(ABC):
    """Capabilities the engine needs to execute user code on threads."""

    @abstractmethod
    def run_with_abort_safety(self, action: Callable[[], Any]) -> Any:
        """Run an action so that a termination signal surfaces as a normal error.

        Raises:
            InvocationError: Wrapping the termination signal, if one arrived

        """

    @abstractmethod
    def run_with_deadline(
        self, action: Callable[[], None], timeout_ms: int
    ) -> DeadlineRun:
        """Run an action on another thread, waiting at most ``timeout_ms``."""


def _raise_in_thread(thread: threading.Thread, exception_type: type[BaseException]) -> bool:
    """Schedule an exception in another thread.

    The exception is only raised once the thread next executes Python
    bytecode; a thread blocked in native code never sees it.
    """
    if thread.ident is None:
        return False
    pending = ctypes.pythonapi.PyThreadState_SetAsyncExc(
        ctypes.c_ulong(thread.ident), ctypes.py_object(exception_type)
    )
    if pending > 1:
        ctypes.pythonapi.PyThreadState_SetAsyncExc(ctypes.c_ulong(thread.ident), None)
        return False
    return pending == 1


@dataclass(frozen=True, kw_only=True)
class DefaultThreadOperations(ThreadOperations):
    """Thread operations backed by ``threading``.

    With ``abort_on_timeout`` set, a worker that misses its deadline receives a
    ``ThreadTerminated`` signal. Nothing guarantees the worker stops.
    """

    abort_on_timeout: bool = True
    thread_name: str = "test-invocation"

    def run_with_abort_safety(self, action: Callable[[], Any]) -> Any:
        try:
            return action()
        except ThreadTerminated as e:
            raise InvocationError("Test thread was terminated", inner=e) from e

    def run_with_deadline(
        self, action: Callable[[], None], timeout_ms: int
    ) -> DeadlineRun:
        thread = threading.Thread(target=action, name=self.thread_name, daemon=True)
        thread.start()
        thread.join(timeout_ms / 1000)

        if not thread.is_alive():
            return DeadlineRun(completed=True, thread=thread)

        if self.abort_on_timeout:
            delivered = _raise_in_thread(thread, ThreadTerminated)
            log.warning(
                "Worker %s missed its %d ms deadline, termination %s",
                thread.name,
                timeout_ms,
                "requested" if delivered else "could not be requested",
            )
        else:
            log.warning(
                "Worker %s missed its %d ms deadline and keeps running",
                thread.name,
                timeout_ms,
            )
        return DeadlineRun(completed=False, thread=thread)

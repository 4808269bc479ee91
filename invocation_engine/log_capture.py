"""Capture of output and debug trace written while a test runs."""

import io
import logging
import sys
from abc import ABC, abstractmethod
from types import TracebackType
from typing import Self, TextIO

ENGINE_LOGGER_PREFIX = "invocation_engine"


class LogCapture(ABC):
    """Scope collecting what a test writes; released on every exit path."""

    @abstractmethod
    def __enter__(self) -> Self: ...

    @abstractmethod
    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None: ...

    @property
    @abstractmethod
    def standard_output(self) -> str: ...

    @property
    @abstractmethod
    def standard_error(self) -> str: ...

    @property
    @abstractmethod
    def debug_trace(self) -> str: ...


class _ExcludeEngineRecords(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        return not (
            record.name == ENGINE_LOGGER_PREFIX
            or record.name.startswith(f"{ENGINE_LOGGER_PREFIX}.")
        )


class LogMessageListener(LogCapture):
    """Redirects ``sys.stdout``/``sys.stderr`` and listens to a logger.

    Redirection is process wide: output from every thread lands here while
    the scope is open, including a timed-out worker that keeps running.
    Records reach the debug trace only if the logger's own level lets them
    through; the engine's own records are left out.

    Args:
        capture_output: Redirect the standard streams
        logger_name: Logger feeding the debug trace, root by default
        level: Minimum level of captured records
        fmt: Format of one debug trace line

    """

    def __init__(
        self,
        capture_output: bool = True,
        logger_name: str = "",
        level: int = logging.DEBUG,
        fmt: str = "%(levelname)s %(name)s: %(message)s",
    ) -> None:
        self._capture_output = capture_output
        self._logger = logging.getLogger(logger_name or None)
        self._stdout = io.StringIO()
        self._stderr = io.StringIO()
        self._trace = io.StringIO()
        self._handler = logging.StreamHandler(self._trace)
        self._handler.setLevel(level)
        self._handler.setFormatter(logging.Formatter(fmt))
        self._handler.addFilter(_ExcludeEngineRecords())
        self._saved_streams: tuple[TextIO, TextIO] | None = None

    def __enter__(self) -> Self:
        if self._capture_output:
            self._saved_streams = (sys.stdout, sys.stderr)
            sys.stdout = self._stdout
            sys.stderr = self._stderr
        self._logger.addHandler(self._handler)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self._logger.removeHandler(self._handler)
        if self._saved_streams is not None:
            sys.stdout, sys.stderr = self._saved_streams
            self._saved_streams = None

    @property
    def standard_output(self) -> str:
        return self._stdout.getvalue()

    @property
    def standard_error(self) -> str:
        return self._stderr.getvalue()

    @property
    def debug_trace(self) -> str:
        return self._trace.getvalue()

"""Models for test invocation results."""

from collections.abc import Sequence
from dataclasses import dataclass

from invocation_engine.models.outcome import Outcome


@dataclass(frozen=True, kw_only=True)
class StackTraceInformation:
    """Stack trace of a failure, restricted to frames outside the engine."""

    stack_trace: str
    file_name: str | None = None
    line_number: int | None = None


@dataclass(frozen=True, kw_only=True)
class FailureDescriptor:
    """Why an invocation did not pass."""

    outcome: Outcome
    message: str
    stack_trace: StackTraceInformation | None = None
    cause: BaseException | None = None


@dataclass(frozen=True, kw_only=True)
class TestResult:
    """Result of a single test invocation.

    The lifecycle runner fills ``outcome`` and ``failure``; the remaining
    fields are added by the invoker once the invocation is over.
    """

    __test__ = False

    outcome: Outcome
    failure: FailureDescriptor | None = None
    duration: float = 0.0
    stdout: str = ""
    stderr: str = ""
    debug_trace: str = ""
    result_files: Sequence[str] = ()

    def __post_init__(self) -> None:
        if self.outcome is Outcome.PASSED and self.failure is not None:
            raise ValueError("A passed result cannot carry a failure")
        if self.outcome is not Outcome.PASSED and self.failure is None:
            raise ValueError(f"A {self.outcome} result requires a failure")

    @property
    def message(self) -> str | None:
        """Failure message, if any."""
        return self.failure.message if self.failure else None

"""Outcome of a single test invocation."""

from enum import StrEnum


class Outcome(StrEnum):
    """Definitive outcome recorded for one invocation."""

    PASSED = "passed"
    FAILED = "failed"
    INCONCLUSIVE = "inconclusive"
    TIMEOUT = "timeout"
    ERROR = "error"

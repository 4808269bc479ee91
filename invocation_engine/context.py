"""Per-invocation execution context handed to test classes."""

import logging
from collections.abc import Mapping, Sequence
from os import PathLike
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from invocation_engine.models.outcome import Outcome

log = logging.getLogger(__name__)


@runtime_checkable
class ExecutionContext(Protocol):
    """Capabilities the engine needs from the context of one invocation."""

    def set_outcome(self, outcome: Outcome) -> None:
        """Record the outcome reached before teardown runs."""
        ...

    def collect_result_files(self) -> Sequence[str]:
        """Return the result artifact files attached during the invocation."""
        ...


class TestContext:
    """Default execution context.

    One instance belongs to exactly one invocation. Test classes receive it
    through their ``test_context`` slot and may read the current outcome
    during teardown, stash values in ``properties`` and attach result files.
    """

    __test__ = False

    def __init__(
        self,
        test_name: str = "",
        properties: Mapping[str, Any] | None = None,
    ) -> None:
        self.test_name = test_name
        self.properties: dict[str, Any] = dict(properties or {})
        self._outcome: Outcome | None = None
        self._result_files: list[str] = []

    @property
    def outcome(self) -> Outcome | None:
        """Outcome recorded so far, None until the test body has run."""
        return self._outcome

    def set_outcome(self, outcome: Outcome) -> None:
        self._outcome = outcome

    def add_result_file(self, path: str | PathLike[str]) -> None:
        """Attach a file produced by the test to its result."""
        resolved = str(Path(path).resolve())
        log.debug("Result file attached: test=%s path=%s", self.test_name, resolved)
        self._result_files.append(resolved)

    def collect_result_files(self) -> Sequence[str]:
        return tuple(self._result_files)

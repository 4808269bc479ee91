"""Expected-exception contracts declared on test methods."""

from abc import ABC, abstractmethod
from typing import Protocol, runtime_checkable

from invocation_engine.messages import NO_EXCEPTION_THROWN


@runtime_checkable
class ExpectedExceptionContract(Protocol):
    """Decides whether an exception raised by a test is its intended outcome.

    ``verify`` returns normally to accept the exception and raises to reject
    it. Raising ``AssertInconclusiveError`` makes the test inconclusive.
    """

    no_exception_message: str

    def verify(self, exception: BaseException) -> None:
        """Accept the exception by returning, reject it by raising."""
        ...


class ExpectedExceptionBase(ABC):
    """Base class for custom expected-exception contracts."""

    def __init__(self, no_exception_message: str | None = None) -> None:
        self._no_exception_message = no_exception_message

    @property
    def no_exception_message(self) -> str:
        """Failure message used when the test returned normally."""
        return self._no_exception_message or self.default_no_exception_message()

    def default_no_exception_message(self) -> str:
        return NO_EXCEPTION_THROWN

    @staticmethod
    def rethrow_if_assertion(exception: BaseException) -> None:
        """Re-raise assertion failures so they keep their own outcome."""
        if isinstance(exception, AssertionError):
            raise exception

    @abstractmethod
    def verify(self, exception: BaseException) -> None:
        """Accept the exception by returning, reject it by raising."""


class ExpectedException(ExpectedExceptionBase):
    """Expect an exception of a given type.

    Args:
        exception_type: Type the test is expected to raise
        no_exception_message: Message reported when nothing was raised
        allow_derived_types: Also accept subclasses of ``exception_type``

    """

    def __init__(
        self,
        exception_type: type[BaseException],
        no_exception_message: str | None = None,
        *,
        allow_derived_types: bool = False,
    ) -> None:
        if not (
            isinstance(exception_type, type)
            and issubclass(exception_type, BaseException)
        ):
            raise TypeError(f"{exception_type!r} is not an exception type")
        super().__init__(no_exception_message)
        self.exception_type = exception_type
        self.allow_derived_types = allow_derived_types

    def default_no_exception_message(self) -> str:
        return f"Expected exception {self.exception_type.__name__} was not thrown."

    def verify(self, exception: BaseException) -> None:
        thrown = type(exception)
        if self.allow_derived_types:
            accepted = issubclass(thrown, self.exception_type)
        else:
            accepted = thrown is self.exception_type

        if accepted:
            return

        self.rethrow_if_assertion(exception)

        kind = "or a type derived from it " if self.allow_derived_types else ""
        raise AssertionError(
            f"Test method threw exception {thrown.__name__}, but exception "
            f"{self.exception_type.__name__} {kind}was expected. "
            f"Exception message: {thrown.__name__}: {exception}"
        )

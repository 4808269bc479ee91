"""Exception types recognised by the invocation engine."""


class AssertInconclusiveError(AssertionError):
    """Raised by test code to report that the test could not reach a verdict."""


class InvocationError(Exception):
    """Wraps an exception raised by user code called through the engine.

    ``inner`` is the exception the user code raised. It is ``None`` when the
    call could not be made at all, for example because the arguments did not
    match the function's signature.
    """

    def __init__(self, message: str, inner: BaseException | None = None) -> None:
        super().__init__(message)
        self.inner = inner
        self.__cause__ = inner


class ThreadTerminated(BaseException):
    """Signal injected into a worker thread that outlived its deadline."""


class TestNotFoundError(Exception):
    """Raised when a test method cannot be resolved from its path."""

    __test__ = False

"""Helpers that render exceptions for test results."""

import traceback
from pathlib import Path

from invocation_engine.models.result import StackTraceInformation

_ENGINE_ROOT = Path(__file__).resolve().parent
# Test doubles shipped with the package are user code as far as traces go.
_USER_CODE_ROOTS = (_ENGINE_ROOT / "testing",)

CAUSE_SEPARATOR = " ---> "


def _is_engine_frame(filename: str) -> bool:
    path = Path(filename).resolve()
    if any(path.is_relative_to(root) for root in _USER_CODE_ROOTS):
        return False
    return path.is_relative_to(_ENGINE_ROOT)


def get_exception_message(exception: BaseException) -> str:
    """Render an exception and its chain of causes on one line.

    Args:
        exception: Outermost exception of the chain

    Returns:
        ``Type: message`` entries joined by ``" ---> "``, outermost first.

    """
    parts: list[str] = []
    seen: set[int] = set()
    current: BaseException | None = exception
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        text = str(current)
        name = type(current).__name__
        parts.append(f"{name}: {text}" if text else name)
        current = current.__cause__
    return CAUSE_SEPARATOR.join(parts)


def get_assertion_message(exception: BaseException) -> str:
    """Message of an assertion signal, falling back to its type name."""
    return str(exception) or type(exception).__name__


def get_stack_trace_information(
    exception: BaseException,
) -> StackTraceInformation | None:
    """Extract the user-code part of an exception's traceback.

    Returns:
        The filtered stack trace, or None when no user frame is left.

    """
    frames = [
        frame
        for frame in traceback.extract_tb(exception.__traceback__)
        if not _is_engine_frame(frame.filename)
    ]
    if not frames:
        return None

    innermost = frames[-1]
    return StackTraceInformation(
        stack_trace="".join(traceback.StackSummary.from_list(frames).format()),
        file_name=innermost.filename,
        line_number=innermost.lineno,
    )

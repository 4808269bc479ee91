"""Tests for output and debug trace capture."""

import logging
import sys

import pytest

from invocation_engine.log_capture import LogMessageListener


def test_captures_standard_streams() -> None:
    """Collects what is written to stdout and stderr."""
    with LogMessageListener() as listener:
        print("hello")
        print("warning", file=sys.stderr)

    assert listener.standard_output == "hello\n"
    assert listener.standard_error == "warning\n"


def test_restores_streams_on_error() -> None:
    """Puts the original streams back even when the scope fails."""
    stdout, stderr = sys.stdout, sys.stderr

    with pytest.raises(RuntimeError), LogMessageListener():
        raise RuntimeError("inside scope")

    assert sys.stdout is stdout
    assert sys.stderr is stderr


def test_captures_debug_trace_of_named_logger() -> None:
    """Collects records of the configured logger at the configured level."""
    logger = logging.getLogger("capture.subject")
    logger.setLevel(logging.DEBUG)

    with LogMessageListener(logger_name="capture.subject", level=logging.INFO) as listener:
        logger.debug("too detailed")
        logger.info("step one")

    assert listener.debug_trace == "INFO capture.subject: step one\n"


def test_excludes_engine_records() -> None:
    """Leaves the engine's own records out of the trace."""
    with LogMessageListener(level=logging.WARNING) as listener:
        logging.getLogger("invocation_engine.lifecycle").warning("engine")
        logging.getLogger("user.code").warning("user")

    assert "engine" not in listener.debug_trace
    assert "WARNING user.code: user" in listener.debug_trace


def test_handler_is_removed_after_scope() -> None:
    """Records logged after the scope are not captured."""
    with LogMessageListener(level=logging.WARNING) as listener:
        pass
    logging.getLogger("user.code").warning("after")

    assert listener.debug_trace == ""


def test_output_capture_disabled() -> None:
    """Leaves the streams untouched when output capture is disabled."""
    stdout = sys.stdout

    with LogMessageListener(capture_output=False) as listener:
        assert sys.stdout is stdout

    assert listener.standard_output == ""

"""Tests for engine configuration."""

import logging

import pytest
from pydantic import ValidationError

from invocation_engine.config import EngineConfig


def test_defaults() -> None:
    """Captures everything and aborts timed-out workers by default."""
    config = EngineConfig()

    assert config.capture_output
    assert config.debug_trace_logger == ""
    assert config.debug_trace_level == logging.DEBUG
    assert config.abort_on_timeout


def test_parses_json() -> None:
    """Reads configuration from JSON."""
    config = EngineConfig.model_validate_json(
        '{"capture_output": false, "debug_trace_level": 30}'
    )

    assert not config.capture_output
    assert config.debug_trace_level == logging.WARNING


def test_rejects_unknown_keys() -> None:
    """Unknown keys are rejected."""
    with pytest.raises(ValidationError):
        EngineConfig.model_validate({"capture": True})


def test_rejects_negative_level() -> None:
    """Trace levels cannot be negative."""
    with pytest.raises(ValidationError):
        EngineConfig(debug_trace_level=-1)


def test_is_frozen() -> None:
    """Configuration cannot change after creation."""
    config = EngineConfig()

    with pytest.raises(ValidationError):
        config.capture_output = False  # type: ignore[misc]

"""Configuration of the invocation engine."""

import logging

from pydantic import Field

from invocation_engine.models.base import Model


class EngineConfig(Model):
    """Configuration for running test invocations."""

    capture_output: bool = True
    debug_trace_logger: str = ""
    debug_trace_level: int = Field(default=logging.DEBUG, ge=0)
    debug_trace_format: str = "%(levelname)s %(name)s: %(message)s"
    # Disable to let timed-out workers run to completion undisturbed.
    abort_on_timeout: bool = True
    worker_thread_name: str = "test-invocation"

"""CLI entry point for running a single test method."""

import argparse
import json
import logging
import sys
from collections.abc import Sequence
from typing import Any

from invocation_engine.config import EngineConfig
from invocation_engine.context import TestContext
from invocation_engine.invoker import TestMethodInvoker
from invocation_engine.loading import load_test_method
from invocation_engine.models.outcome import Outcome
from invocation_engine.models.result import TestResult

STATUS_SYMBOLS = {
    Outcome.PASSED: "✓",
    Outcome.FAILED: "✗",
    Outcome.INCONCLUSIVE: "?",
    Outcome.ERROR: "!",
    Outcome.TIMEOUT: "⏱",
}


def log_result_summary(log: logging.Logger, test_path: str, result: TestResult) -> None:
    """Log a one-line summary of a test result, with its failure message."""
    symbol = STATUS_SYMBOLS.get(result.outcome, "?")
    log.info("%s %s: %s (%.2fs)", symbol, test_path, result.outcome, result.duration)
    if result.message:
        log.info("  Message: %s", result.message)
    for path in result.result_files:
        log.info("  Result file: %s", path)


def parse_arguments(raw_arguments: str) -> Sequence[Any]:
    """Parse the JSON array of positional test arguments."""
    arguments = json.loads(raw_arguments)
    if not isinstance(arguments, list):
        raise ValueError("Test arguments must be a JSON array")
    return tuple(arguments)


def format_output(test_path: str, result: TestResult) -> dict[str, Any]:
    """Format a test result for JSON output."""
    failure = result.failure
    stack_trace = failure.stack_trace if failure else None
    return {
        "test": test_path,
        "outcome": str(result.outcome),
        "duration": result.duration,
        "message": failure.message if failure else None,
        "stack_trace": stack_trace.stack_trace if stack_trace else None,
        "stdout": result.stdout,
        "stderr": result.stderr,
        "debug_trace": result.debug_trace,
        "result_files": list(result.result_files),
    }


def run(
    test_path: str,
    config_json: str = "{}",
    arguments: Sequence[Any] = (),
    timeout: int | None = None,
) -> int:
    """Run one test method and return the exit code."""
    log = logging.getLogger("invocation_engine")

    config = EngineConfig.model_validate_json(config_json)

    log.info("Loading test method: %s", test_path)
    method = load_test_method(test_path)
    if timeout is not None:
        method = method.with_timeout(timeout)

    invoker = TestMethodInvoker(method, TestContext(test_name=test_path), config=config)
    result = invoker.invoke(arguments)

    log_result_summary(log, test_path, result)
    if invoker.abandoned_runs:
        log.warning("Timed-out test is still running in the background")

    print(json.dumps(format_output(test_path, result), indent=2))

    return 0 if result.outcome is Outcome.PASSED else 1


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Run a single test method")
    parser.add_argument(
        "test",
        help="Test method path (package.module:Class.method)",
    )
    parser.add_argument(
        "--config",
        default="{}",
        help="JSON configuration for the engine",
    )
    parser.add_argument(
        "--args",
        default="[]",
        help="JSON array of positional arguments for the test method",
    )
    parser.add_argument(
        "--timeout",
        type=int,
        default=None,
        help="Timeout in milliseconds, overriding the one declared on the method",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    exit_code = run(
        test_path=args.test,
        config_json=args.config,
        arguments=parse_arguments(args.args),
        timeout=args.timeout,
    )
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()

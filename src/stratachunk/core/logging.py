import logging
import os
import sys
from typing import Any, Literal

import structlog

LogFormat = Literal["json", "plain", "auto"]


def _stderr_logger(*args: Any) -> structlog.PrintLogger:
    # sys.stderr is looked up per logger, after any redirection
    return structlog.PrintLogger(file=sys.stderr)


def _should_use_json_format() -> bool:
    """Determine if JSON format should be used based on environment."""
    # Check if running in CI
    ci_vars = ["CI", "CONTINUOUS_INTEGRATION", "GITHUB_ACTIONS", "JENKINS_URL"]
    if any(os.environ.get(var) for var in ci_vars):
        return True

    # Check if stderr is redirected (not a TTY)
    return bool(not sys.stderr.isatty())


def setup_logging(format_type: LogFormat = "auto", level: str = "info") -> None:
    """
    Setup structured logging with format control.

    Logs go to stderr so chunk output written to stdout stays clean.

    Args:
        format_type: "json" for JSON output, "plain" for human-readable,
                "auto" to auto-detect based on TTY/CI.
        level: Minimum level name to emit (debug, info, warning, error).
    """
    use_json = format_type == "json" or (format_type == "auto" and _should_use_json_format())

    if use_json:
        processors: list[Any] = [
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )


# Library use stays quiet until setup_logging() is called.
if not structlog.is_configured():
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(logging.WARNING),
        logger_factory=_stderr_logger,
    )

log = structlog.get_logger()

"""
Logging utilities for the upload action.

Provides consistent logging across the action with three output styles:
workflow commands when running inside GitHub Actions, structured JSON for
log shipping, and colorized text for local runs.

Features:
    - Workflow command output (::debug::, ::warning::, ::error::) on CI
    - Structured JSON logging with workflow run metadata
    - Entry/exit decorators with timing
    - Colorized console output for development

Example usage:
    >>> from gcs_upload.utils.logging import get_logger, log_function_call
    >>>
    >>> logger = get_logger(__name__)
    >>>
    >>> @log_function_call
    >>> def expand(pattern: str) -> list:
    >>>     logger.info("Expanding pattern", extra={"pattern": pattern})
    >>>     return []
"""

import logging
import functools
import json
import os
import sys
from typing import Any, Callable, TypeVar, cast, Dict, Optional
from datetime import datetime, timezone

import coloredlogs

from gcs_upload.utils.workflow import escape_data

# Type variable for generic decorator typing
F = TypeVar("F", bound=Callable[..., Any])

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Attributes present on every LogRecord; anything else came in via extra=
_STANDARD_RECORD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime"}


def detect_log_format() -> str:
    """
    Pick the output style from the environment.

    LOG_FORMAT wins when set to json, github or text. Otherwise runs inside
    GitHub Actions use workflow commands and everything else plain text.
    """
    requested = os.getenv("LOG_FORMAT", "").lower()
    if requested in ("json", "github", "text"):
        return requested
    if os.getenv("GITHUB_ACTIONS", "").lower() == "true":
        return "github"
    return "text"


def detect_log_level(default: str = "INFO") -> str:
    """Level from LOG_LEVEL, or DEBUG when the runner has debug logging on."""
    if os.getenv("RUNNER_DEBUG") == "1":
        return "DEBUG"
    return os.getenv("LOG_LEVEL", default).upper()


# ============================================================================
# Formatters
# ============================================================================

class WorkflowCommandFormatter(logging.Formatter):
    """
    Formats records as GitHub Actions workflow commands.

    DEBUG becomes ``::debug::``, WARNING ``::warning::`` and ERROR or worse
    ``::error::``. INFO records are printed as plain lines so the runner
    shows them verbatim.
    """

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"

        if record.levelno >= logging.ERROR:
            return f"::error::{escape_data(message)}"
        if record.levelno >= logging.WARNING:
            return f"::warning::{escape_data(message)}"
        if record.levelno >= logging.INFO:
            return message
        return f"::debug::{escape_data(message)}"


class JSONFormatter(logging.Formatter):
    """
    JSON log formatter for structured logging.

    Outputs one JSON object per line with timestamp, level, logger, message,
    source location and any fields passed through ``extra=``. When running on
    GitHub Actions the workflow, run id and job are attached as well.

    Example output:
        {
            "timestamp": "2026-01-04T10:30:15.123456+00:00",
            "level": "INFO",
            "logger": "gcs_upload.action.action",
            "message": "Uploaded: dist/app.zip",
            "workflow": {"run_id": "123", "job": "release"}
        }
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "source": {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            },
        }

        extra_fields = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _STANDARD_RECORD_ATTRS
        }
        if extra_fields:
            log_data["extra"] = extra_fields

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        if os.getenv("GITHUB_RUN_ID"):
            log_data["workflow"] = {
                "name": os.getenv("GITHUB_WORKFLOW", ""),
                "run_id": os.getenv("GITHUB_RUN_ID", ""),
                "job": os.getenv("GITHUB_JOB", ""),
            }

        return json.dumps(log_data, default=str)


def setup_logging(
    level: Optional[str] = None,
    enable_colors: bool = True,
    log_format: Optional[str] = None,
) -> str:
    """
    Configure global logging settings for the action.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL); read
            from LOG_LEVEL / RUNNER_DEBUG when omitted
        enable_colors: Whether to colorize text output (default: True)
        log_format: One of "github", "json" or "text"; detected from the
            environment when omitted

    Returns:
        The output style that was installed

    Example:
        >>> setup_logging(level="DEBUG", log_format="text")
        'text'
    """
    log_level = getattr(logging, (level or detect_log_level()).upper(), logging.INFO)
    style = log_format or detect_log_format()

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    root_logger.handlers.clear()

    # Group markers go to stdout, so every style logs there to keep ordering
    if style == "github":
        # The runner only parses workflow commands written to stdout
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(log_level)
        handler.setFormatter(WorkflowCommandFormatter())
        root_logger.addHandler(handler)
    elif style == "json":
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(log_level)
        handler.setFormatter(JSONFormatter())
        root_logger.addHandler(handler)
    elif enable_colors:
        coloredlogs.install(
            level=log_level,
            fmt=LOG_FORMAT,
            datefmt=LOG_DATE_FORMAT,
            logger=root_logger,
            stream=sys.stdout,
        )
    else:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(log_level)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        root_logger.addHandler(handler)

    return style


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the specified name.

    Args:
        name: Logger name (typically __name__ of the calling module)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)


def log_function_call(func: F) -> F:
    """
    Decorator that logs function entry and exit at DEBUG level.

    - Logs function entry with all parameter values
    - Logs function exit with return value and execution time
    - Logs exceptions with their type and message, then re-raises

    Args:
        func: Function to be decorated

    Returns:
        Wrapped function with logging

    Example:
        >>> @log_function_call
        >>> def expand_pattern(pattern: str, root: Path) -> List[str]:
        >>>     ...
        >>>
        >>> # ::debug::ENTER expand_pattern(pattern='*.png', root=...)
        >>> # ::debug::EXIT expand_pattern -> ['a.png'] (0.00s)
    """
    logger = get_logger(func.__module__)

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        arg_names = func.__code__.co_varnames[: func.__code__.co_argcount]
        args_repr = [f"{name}={value!r}" for name, value in zip(arg_names, args)]
        kwargs_repr = [f"{key}={value!r}" for key, value in kwargs.items()]
        all_args = ", ".join(args_repr + kwargs_repr)

        logger.debug(
            f"ENTER {func.__name__}({all_args})",
            extra={"function": func.__name__, "event": "function_entry"},
        )

        start_time = datetime.now()

        try:
            result = func(*args, **kwargs)
        except Exception as error:
            execution_time = (datetime.now() - start_time).total_seconds()
            logger.debug(
                f"ERROR {func.__name__} raised {type(error).__name__}: {error}",
                extra={
                    "function": func.__name__,
                    "event": "function_error",
                    "duration_seconds": execution_time,
                    "error_type": type(error).__name__,
                },
            )
            raise

        execution_time = (datetime.now() - start_time).total_seconds()
        logger.debug(
            f"EXIT {func.__name__} -> {result!r} ({execution_time:.2f}s)",
            extra={
                "function": func.__name__,
                "event": "function_exit",
                "duration_seconds": execution_time,
            },
        )
        return result

    return cast(F, wrapper)

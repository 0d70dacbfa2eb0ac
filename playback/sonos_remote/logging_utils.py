"""
Logging utilities for structured logging
"""

import logging
import json
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional, TextIO

_RESERVED_ATTRS = frozenset((
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname',
    'filename', 'module', 'lineno', 'funcName', 'created',
    'msecs', 'relativeCreated', 'thread', 'threadName', 'taskName',
    'processName', 'process', 'getMessage', 'exc_info',
    'exc_text', 'stack_info', 'message', 'asctime',
))


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging"""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON"""
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno
        }

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Add extra fields from record
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = value

        return json.dumps(log_data, ensure_ascii=False, default=str)


def setup_logging(log_level: str = "WARNING", log_format: str = "text",
                  stream: Optional[TextIO] = None) -> None:
    """
    Setup logging for the speaker remote.

    Log records go to stderr by default; stdout is reserved for the
    confirmation lines printed by the commands.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log format ("json" or "text")
        stream: Optional stream for the console handler
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.WARNING))

    # Clear existing handlers
    root_logger.handlers.clear()

    if log_format.lower() == "json":
        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(levelname)s - %(name)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    console_handler = logging.StreamHandler(stream or sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Set specific logger levels
    logging.getLogger('requests').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get logger for a speaker remote module.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def log_request(logger: logging.Logger, url: str, dry_run: bool = False) -> None:
    """
    Log an outgoing request.

    Args:
        logger: Logger instance
        url: Full request URL
        dry_run: Whether the request is only being printed
    """
    logger.debug(
        f"GET {url}",
        extra={
            "event_type": "request",
            "url": url,
            "dry_run": dry_run
        }
    )


def log_error(logger: logging.Logger, url: str, error: Exception,
              context: Optional[Dict[str, Any]] = None) -> None:
    """
    Log a failed request with context.

    Args:
        logger: Logger instance
        url: Request URL
        error: Exception that occurred
        context: Additional context
    """
    logger.warning(
        f"Request to {url} failed: {error}",
        extra={
            "event_type": "error",
            "url": url,
            "error_type": type(error).__name__,
            "error_message": str(error),
            "context": context or {}
        }
    )

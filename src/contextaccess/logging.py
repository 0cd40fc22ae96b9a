"""Logging utilities for the access inheritance engine.

This module provides:
- Logging configuration from InheritanceConfig
- Safe, length-bounded previews of settings for log lines
- Structured logging with subject/resource context
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from .config import InheritanceConfig, LogLevel

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RECORD_ATTRS = frozenset(
    {
        "name", "msg", "args", "created", "filename", "funcName",
        "levelname", "levelno", "lineno", "module", "msecs",
        "message", "pathname", "process", "processName", "relativeCreated",
        "thread", "threadName", "exc_info", "exc_text", "stack_info",
        "taskName", "subject", "resource",
    }
)


def safe_preview(value: Any, limit: int = 240) -> str:
    """Create a single-line, length-bounded preview of a value for logging.

    Args:
        value: The value to preview (any type)
        limit: Maximum length of the preview (default: 240)

    Returns:
        A truncated string representation
    """
    if value is None:
        return ""

    if isinstance(value, str):
        s = value
    elif isinstance(value, (dict, list)):
        try:
            s = json.dumps(value, default=str, ensure_ascii=False, sort_keys=False)
        except (TypeError, ValueError):
            s = str(value)
    else:
        s = str(value)

    s = " ".join(s.split())

    if len(s) > limit:
        return s[: limit - 1] + "…"

    return s


class AccessLogFormatter(logging.Formatter):
    """Formatter that adds subject/resource context and optional JSON output."""

    def __init__(self, json_format: bool = True, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.json_format = json_format

    def format(self, record: logging.LogRecord) -> str:
        subject = getattr(record, "subject", None)
        resource = getattr(record, "resource", None)

        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if subject is not None:
            log_data["subject"] = str(subject)
        if resource is not None:
            log_data["resource"] = str(resource)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRS:
                log_data[key] = safe_preview(value)

        if self.json_format:
            return json.dumps(log_data, default=str, ensure_ascii=False)

        parts = [
            f"[{log_data['timestamp']}]",
            log_data["level"],
            log_data["logger"],
        ]
        if subject is not None:
            parts.append(f"subject={log_data['subject']}")
        if resource is not None:
            parts.append(f"resource={log_data['resource']}")
        parts.append(f": {log_data['message']}")
        return " ".join(parts)


class ResolutionLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that attaches subject and resource to every record.

    Usage:
        logger = get_resolution_logger(__name__)
        logger.debug("Cache miss", subject=subject, resource=key)
    """

    def __init__(
        self,
        logger: logging.Logger,
        subject: Optional[Any] = None,
        resource: Optional[Any] = None,
    ):
        super().__init__(logger, {})
        self.subject = subject
        self.resource = resource

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        subject = kwargs.pop("subject", self.subject)
        resource = kwargs.pop("resource", self.resource)

        extra = kwargs.get("extra", {})
        if subject is not None:
            extra["subject"] = subject
        if resource is not None:
            extra["resource"] = resource
        kwargs["extra"] = extra

        return msg, kwargs


def setup_logging(
    config: Optional[InheritanceConfig] = None,
    json_format: Optional[bool] = None,
) -> None:
    """Configure the root logger from an InheritanceConfig.

    Args:
        config: InheritanceConfig instance (if None, loads from environment)
        json_format: Override ``config.log_json``
    """
    if config is None:
        from .config import load_inheritance_config_from_env

        config = load_inheritance_config_from_env()

    level_map = {
        LogLevel.DEBUG: logging.DEBUG,
        LogLevel.INFO: logging.INFO,
        LogLevel.WARNING: logging.WARNING,
        LogLevel.ERROR: logging.ERROR,
        LogLevel.CRITICAL: logging.CRITICAL,
    }
    log_level = level_map.get(config.log_level, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(
        AccessLogFormatter(json_format=config.log_json if json_format is None else json_format)
    )
    root_logger.addHandler(console_handler)


def get_resolution_logger(
    name: str,
    subject: Optional[Any] = None,
    resource: Optional[Any] = None,
) -> ResolutionLoggerAdapter:
    """Get a logger adapter that carries subject/resource context.

    Example:
        logger = get_resolution_logger(__name__)
        logger.info("Resolved settings", subject=user, resource=key)
    """
    return ResolutionLoggerAdapter(logging.getLogger(name), subject=subject, resource=resource)


__all__ = [
    "AccessLogFormatter",
    "ResolutionLoggerAdapter",
    "get_resolution_logger",
    "safe_preview",
    "setup_logging",
]

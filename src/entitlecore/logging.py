"""Logging utilities for services embedding the engine.

This module provides:
- Logging configuration from EngineConfig
- Safe, length-bounded previews of logged values
- A formatter that carries workspace/actor context (JSON or plain text)
- A logger adapter that binds workspace_id and actor_id to every record
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from .config import EngineConfig, LogLevel

_CONTEXT_KEYS = ("workspace_id", "actor_id")

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RESERVED_ATTRS = frozenset(
    {
        "name", "msg", "args", "created", "filename", "funcName",
        "levelname", "levelno", "lineno", "module", "msecs",
        "message", "pathname", "process", "processName", "relativeCreated",
        "thread", "threadName", "exc_info", "exc_text", "stack_info",
        "taskName", *_CONTEXT_KEYS,
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
    elif isinstance(value, (dict, list, tuple, set, frozenset)):
        try:
            s = json.dumps(
                sorted(value, key=str) if isinstance(value, (set, frozenset)) else value,
                default=str,
                ensure_ascii=False,
            )
        except (TypeError, ValueError):
            s = str(value)
    else:
        s = str(value)

    s = " ".join(s.split())

    if len(s) > limit:
        return s[: limit - 1] + "…"

    return s


class DecisionFormatter(logging.Formatter):
    """Formatter that includes workspace/actor context.

    Outputs JSON for structured logging, or a compact plain-text line.
    """

    def __init__(
        self,
        json_format: bool = True,
        *args: Any,
        **kwargs: Any,
    ):
        super().__init__(*args, **kwargs)
        self.json_format = json_format

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key in _CONTEXT_KEYS:
            value = getattr(record, key, None)
            if value:
                log_data[key] = str(value)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = safe_preview(value)

        if self.json_format:
            return json.dumps(log_data, default=str, ensure_ascii=False)

        parts = [
            f"[{log_data['timestamp']}]",
            log_data["level"],
            log_data["logger"],
        ]
        for key in _CONTEXT_KEYS:
            if key in log_data:
                parts.append(f"{key}={log_data[key]}")
        parts.append(f": {log_data['message']}")
        return " ".join(parts)


class DecisionLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that adds workspace_id and actor_id to log records.

    Usage:
        logger = get_decision_logger(__name__, workspace_id="ws_1")
        logger.debug("decision", actor_id="usr_1")
    """

    def __init__(
        self,
        logger: logging.Logger,
        workspace_id: Optional[str] = None,
        actor_id: Optional[str] = None,
    ):
        super().__init__(logger, {})
        self.workspace_id = workspace_id
        self.actor_id = actor_id

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        workspace_id = kwargs.pop("workspace_id", self.workspace_id)
        actor_id = kwargs.pop("actor_id", self.actor_id)

        extra = dict(kwargs.get("extra") or {})
        if workspace_id:
            extra["workspace_id"] = workspace_id
        if actor_id:
            extra["actor_id"] = actor_id
        kwargs["extra"] = extra

        return msg, kwargs


def setup_logging(
    config: Optional[EngineConfig] = None,
    json_format: Optional[bool] = None,
) -> None:
    """Configure root logging for a service embedding the engine.

    Args:
        config: EngineConfig instance (if None, loads from environment)
        json_format: Override ``config.log_json``
    """
    if config is None:
        from .config import load_config_from_env

        config = load_config_from_env()

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

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(
        DecisionFormatter(json_format=config.log_json if json_format is None else json_format)
    )
    root_logger.addHandler(console_handler)

    if config.service_name:
        logging.getLogger(config.service_name).setLevel(log_level)


def get_decision_logger(
    name: str,
    workspace_id: Optional[str] = None,
    actor_id: Optional[str] = None,
) -> DecisionLoggerAdapter:
    """Get a logger adapter bound to a workspace and actor.

    Example:
        logger = get_decision_logger(__name__, workspace_id=ws, actor_id=actor)
        logger.debug("invite_member allowed")
    """
    return DecisionLoggerAdapter(logging.getLogger(name), workspace_id=workspace_id, actor_id=actor_id)


__all__ = [
    "DecisionFormatter",
    "DecisionLoggerAdapter",
    "get_decision_logger",
    "safe_preview",
    "setup_logging",
]

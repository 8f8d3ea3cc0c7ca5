#!/usr/bin/env python3
# -*-coding: utf-8-*-
"""
Logging setup for retrolaunch.

The core only logs through module loggers under ``retrolaunch.``; whoever
embeds it (a launcher script, a frontend) calls setup_logging() once.

Features:
- Level-specific compact formats, ANSI colours on a terminal
- Optional structured JSON lines (RETROLAUNCH_LOG_JSON=1)
- Optional rotating log file
"""

import json
import logging
import logging.handlers
import os
import sys
import time
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional, Union

ROOT_LOGGER_NAME = "retrolaunch"

# =====================================================================================================
# Formatters
# =====================================================================================================

class FastFormatter(logging.Formatter):
    """Compact formatter with one pre-built format per level."""

    _FORMATS = {
        logging.ERROR: "[{asctime}] ERROR   [{name}] {message}",
        logging.WARNING: "[{asctime}] WARNING [{name}] {message}",
        logging.INFO: "[{asctime}] INFO    {message}",
        logging.DEBUG: "[{asctime}] DEBUG   {name}:{lineno} - {message}",
    }

    _COLORS = {
        logging.ERROR: '\033[91m',     # Red
        logging.WARNING: '\033[93m',   # Yellow
        logging.INFO: '\033[92m',      # Green
        logging.DEBUG: '\033[94m',     # Blue
    }
    _RESET = '\033[0m'

    def __init__(self, enable_colors: bool = False):
        super().__init__()
        self.enable_colors = enable_colors
        self._formatters = {
            level: logging.Formatter(fmt, style='{', datefmt='%H:%M:%S')
            for level, fmt in self._FORMATS.items()
        }

    def format(self, record: logging.LogRecord) -> str:
        level = record.levelno if record.levelno in self._formatters else logging.INFO
        if record.levelno >= logging.ERROR:
            level = logging.ERROR
        text = self._formatters[level].format(record)
        if self.enable_colors:
            return f"{self._COLORS[level]}{text}{self._RESET}"
        return text


class JsonFormatter(logging.Formatter):
    """Structured JSON formatter (optional)."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "pathname": record.pathname,
            "lineno": record.lineno,
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
            error = record.exc_info[1]
            to_dict = getattr(error, "to_dict", None)
            if callable(to_dict):
                payload["error"] = to_dict()
        return json.dumps(payload, ensure_ascii=False, default=str)

# =====================================================================================================
# Main Setup Function
# =====================================================================================================

def _env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    enable_console_logging: bool = True,
    max_log_size: str = "10MB",
    backup_count: int = 3,
    structured_json: Optional[bool] = None,
) -> Dict[str, logging.Handler]:
    """Configure the ``retrolaunch`` logger tree and return the installed handlers."""
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)
    use_json = structured_json if structured_json is not None else _env_bool("RETROLAUNCH_LOG_JSON")

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(numeric_level)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    handlers: Dict[str, logging.Handler] = {}

    if enable_console_logging:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(numeric_level)
        enable_colors = (hasattr(sys.stderr, 'isatty') and
                         sys.stderr.isatty() and
                         os.environ.get('TERM') != 'dumb')
        console_handler.setFormatter(JsonFormatter() if use_json else FastFormatter(enable_colors=enable_colors))
        logger.addHandler(console_handler)
        handlers['console'] = console_handler

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            str(log_path),
            maxBytes=_parse_size_string(max_log_size),
            backupCount=backup_count,
            encoding='utf-8',
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(JsonFormatter() if use_json else FastFormatter())
        logger.addHandler(file_handler)
        handlers['file'] = file_handler

    return handlers

# =====================================================================================================
# Utility functions
# =====================================================================================================

def _parse_size_string(size_str: str) -> int:
    """Parse size string into bytes."""
    size_str = size_str.upper().strip()

    multipliers = {
        'KB': 1024,
        'MB': 1024 ** 2,
        'GB': 1024 ** 3,
        'B': 1,
    }

    for suffix, multiplier in multipliers.items():
        if size_str.endswith(suffix):
            try:
                return int(float(size_str[:-len(suffix)].strip()) * multiplier)
            except ValueError:
                continue

# Try Parsing as Plain Number (Assume bytes)
    try:
        return int(float(size_str))
    except ValueError:
        pass

    return 10 * 1024 * 1024  # Default 10MB


@lru_cache(maxsize=32)
def get_logger(name: str) -> logging.Logger:
    """Get cached logger instance."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


class LoggingTimer:
    """Log how long a block took, at debug level."""

    def __init__(self, operation_name: str, logger: Optional[logging.Logger] = None):
        self.operation_name = operation_name
        self.logger = logger or get_logger("performance")
        self.start_time: Optional[float] = None
        self.duration: Optional[float] = None

    def __enter__(self) -> "LoggingTimer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.start_time is not None:
            self.duration = time.perf_counter() - self.start_time
            self.logger.debug("%s took %.3fs", self.operation_name, self.duration)

"""
climatequote Logging Configuration.

Engine modules only ever call ``logging.getLogger(__name__)``. Handlers are
installed by the host (the CLI calls ``ensure_logging()`` from its callback),
so importing the engine never touches the root logger.

Records may carry context through ``extra``:

    quote_id          quote being priced
    installation_id   installation being signed off
    refrigerant       refrigerant code of a compliance check
    step              commissioning step

Console lines append the context as ``[key=value, ...]``; the optional log
file gets one JSON object per line.

Usage:
    from climatequote.utils.logging_config import get_logger

    logger = get_logger(__name__, quote_id="Q-2024-001")
    logger.info("Quote calculated")
"""

import json
import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Union


DEFAULT_LOG_LEVEL = os.environ.get("CLIMATEQUOTE_LOG_LEVEL", "INFO").upper()

LOG_DIR = Path(os.environ.get("CLIMATEQUOTE_LOG_DIR", "logs"))

CONTEXT_KEYS = ("quote_id", "installation_id", "refrigerant", "step")


def record_context(record: logging.LogRecord) -> Dict[str, Any]:
    """Context attributes present on a record, in CONTEXT_KEYS order."""
    return {key: getattr(record, key) for key in CONTEXT_KEYS if getattr(record, key, None) is not None}


class QuoteFormatter(logging.Formatter):
    """Console formatter: level colours plus a trailing context block."""

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True, stream=None):
        stream = stream if stream is not None else sys.stderr
        self.use_colors = use_colors and hasattr(stream, "isatty") and stream.isatty()
        super().__init__(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def formatMessage(self, record: logging.LogRecord) -> str:
        line = super().formatMessage(record)
        context = record_context(record)
        if context:
            line += " [" + ", ".join(f"{k}={v}" for k, v in context.items()) + "]"
        return line

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)
        if self.use_colors:
            return f"{self.COLORS.get(record.levelname, '')}{formatted}{self.RESET}"
        return formatted


class FileFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(timespec="seconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(record_context(record))
        if record.exc_info:
            entry["error_type"] = record.exc_info[0].__name__
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str, ensure_ascii=False)


class ContextAdapter(logging.LoggerAdapter):
    """Logger adapter that merges bound context into every record's ``extra``."""

    def process(self, msg, kwargs):
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


def setup_logging(
    level: str = DEFAULT_LOG_LEVEL,
    log_to_file: bool = False,
    log_file: Optional[Union[str, Path]] = None,
    log_dir: Optional[Union[str, Path]] = None,
) -> Optional[Path]:
    """
    Install console (and optionally file) handlers on the root logger.

    Args:
        level: Console log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_to_file: Also write JSON lines to a file at DEBUG level
        log_file: Explicit log file path
        log_dir: Directory for the dated default file
            (default: CLIMATEQUOTE_LOG_DIR or ./logs)

    Returns:
        Path of the log file, or None when logging to console only
    """
    numeric_level = getattr(logging, (level or "INFO").upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(QuoteFormatter(use_colors=True, stream=sys.stderr))
    console_handler.setLevel(numeric_level)
    root_logger.addHandler(console_handler)

    path = None
    if log_to_file:
        if log_file is not None:
            path = Path(log_file)
        else:
            path = Path(log_dir or LOG_DIR) / f"climatequote_{datetime.now():%Y%m%d}.log"
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(FileFormatter())
        file_handler.setLevel(logging.DEBUG)
        root_logger.addHandler(file_handler)
        root_logger.setLevel(logging.DEBUG)
    else:
        root_logger.setLevel(numeric_level)
    return path


def get_logger(name: str, **context: Any) -> Union[logging.Logger, ContextAdapter]:
    """
    Get a logger for a module, optionally bound to quote or installation context.

    Args:
        name: Module name (typically __name__)
        **context: Values for CONTEXT_KEYS attached to every record
    """
    logger = logging.getLogger(name)
    unknown = set(context) - set(CONTEXT_KEYS)
    if unknown:
        raise KeyError(f"Unknown log context key(s): {', '.join(sorted(unknown))}")
    return ContextAdapter(logger, context) if context else logger


_initialized = False


def ensure_logging(
    level: str = DEFAULT_LOG_LEVEL,
    log_to_file: bool = False,
    log_file: Optional[Union[str, Path]] = None,
    log_dir: Optional[Union[str, Path]] = None,
) -> None:
    """Set up logging once per process; later calls are ignored."""
    global _initialized
    if not _initialized:
        setup_logging(level=level, log_to_file=log_to_file, log_file=log_file, log_dir=log_dir)
        _initialized = True

"""
Logging setup for cosmosrest.

Library modules only call ``logging.getLogger(__name__)``; applications
(and the CLI) call ``setup_logging`` once. Every handler installed here
carries a ``SensitiveDataFilter`` so master keys, authorization tokens and
signatures never reach a log sink.
"""

import json
import logging
import logging.handlers
import re
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

# Correlation ID of the current unit of work (e.g., one CLI command)
correlation_id: ContextVar[Optional[str]] = ContextVar('correlation_id', default=None)

REDACTED = "***REDACTED***"

_SIZE_PATTERN = re.compile(r'^(\d+(?:\.\d+)?)\s*(GB|MB|KB|B)?$')
_SIZE_UNITS = {None: 1, 'B': 1, 'KB': 1024, 'MB': 1024 ** 2, 'GB': 1024 ** 3}


class SensitiveDataFilter(logging.Filter):
    """Redacts credentials from the message, arguments and context of a record."""

    PATTERNS = [
        # Authorization header values, raw or percent-encoded tokens
        (re.compile(r'(Authorization["\']?\s*[:=]\s*["\']?)[^\s"\',]+', re.IGNORECASE), r'\1' + REDACTED),
        # Connection string keys
        (re.compile(r'(AccountKey=)[^;\s]+', re.IGNORECASE), r'\1' + REDACTED),
        (re.compile(r'(master_?key["\']?\s*[:=]\s*["\']?)[^\s"\',]+', re.IGNORECASE), r'\1' + REDACTED),
        # Bare token signatures
        (re.compile(r'(sig=)[^;&\s]+', re.IGNORECASE), r'\1' + REDACTED),
        (re.compile(r'(sig%3D)[^;&\s]+', re.IGNORECASE), r'\1' + REDACTED),
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = redact(record.msg)
        if record.args:
            if isinstance(record.args, dict):
                record.args = {key: _redact_value(value) for key, value in record.args.items()}
            else:
                record.args = tuple(_redact_value(arg) for arg in record.args)
        context = getattr(record, "context", None)
        if isinstance(context, dict):
            record.context = {key: _redact_value(value) for key, value in context.items()}
        return True


def redact(text: str) -> str:
    """Apply every redaction pattern to a string."""
    for pattern, replacement in SensitiveDataFilter.PATTERNS:
        text = pattern.sub(replacement, text)
    return text


def _redact_value(value: Any) -> Any:
    return redact(value) if isinstance(value, str) else value


class JSONFormatter(logging.Formatter):
    """One JSON object per line: timestamp, level, module, message, extras."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "module": record.name,
            "message": record.getMessage(),
        }

        corr_id = correlation_id.get()
        if corr_id:
            log_data["correlation_id"] = corr_id

        context = getattr(record, "context", None)
        if context:
            log_data["context"] = context

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable single line format."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


def _level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {name}")
    return level


def _install(root_logger: logging.Logger, handler: logging.Handler, formatter: logging.Formatter) -> None:
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(formatter)
    handler.addFilter(SensitiveDataFilter())
    root_logger.addHandler(handler)


def setup_logging(
    level: str = "INFO",
    format_type: str = "json",
    log_file: Optional[str] = None,
    rotation_size: str = "10MB",
    rotation_count: int = 5,
    module_levels: Optional[Dict[str, str]] = None
) -> None:
    """
    Configure the root logger.

    Console output goes to stderr so command output on stdout stays
    machine-readable.

    Args:
        level: Default log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: "json" or "text"
        log_file: Optional file path; rotated by size
        rotation_size: Size limit before rotation (e.g., "10MB")
        rotation_count: Number of rotated files to keep
        module_levels: Per-logger levels,
                      e.g., {"cosmosrest.services.cosmosdb.dispatcher": "DEBUG"}
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(_level(level))
    root_logger.handlers.clear()

    formatter = JSONFormatter() if format_type == "json" else TextFormatter()

    _install(root_logger, logging.StreamHandler(sys.stderr), formatter)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        _install(
            root_logger,
            logging.handlers.RotatingFileHandler(
                filename=log_file,
                maxBytes=_parse_size(rotation_size),
                backupCount=rotation_count,
                encoding='utf-8',
            ),
            formatter,
        )
        root_logger.info(f"Logging to file: {log_file} (rotation: {rotation_size}, count: {rotation_count})")

    for module_name, module_level in (module_levels or {}).items():
        logging.getLogger(module_name).setLevel(_level(module_level))

    root_logger.debug(f"Logging configured: level={level}, format={format_type}")


def _parse_size(size_str: str) -> int:
    """
    Parse a size such as "10MB", "1.5 GB" or "2048" into bytes.

    Raises:
        ValueError: If the size cannot be parsed
    """
    match = _SIZE_PATTERN.match(size_str.strip().upper())
    if not match:
        raise ValueError(f"Invalid size: {size_str}")
    number, unit = match.groups()
    return int(float(number) * _SIZE_UNITS[unit])


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a module."""
    return logging.getLogger(name)


def set_correlation_id(corr_id: str) -> None:
    """Set correlation ID for current context."""
    correlation_id.set(corr_id)


def clear_correlation_id() -> None:
    """Clear correlation ID from current context."""
    correlation_id.set(None)


def log_with_context(logger: logging.Logger, level: int, message: str, **context: Any) -> None:
    """
    Log a message with structured context.

    The context is attached as ``record.context`` and rendered by the JSON
    formatter. Nothing is built when the level is disabled.
    """
    if not logger.isEnabledFor(level):
        return
    logger.log(level, message, extra={"context": context} if context else {})

"""
Simple logging configuration.
"""
import logging
import logging.handlers
from enum import Enum
from pathlib import Path

from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError


class LogCategory(str, Enum):
    """Enumeration for standardized log categories."""
    APP = "reconcile"
    SCAN = "reconcile.scan"
    AUDIT = "reconcile.audit"
    LEGACY = "reconcile.legacy"
    TEARDOWN = "reconcile.teardown"
    ERRORS = "reconcile.errors"
    DB = "reconcile.db"


DEFAULT_LOG_LEVEL = logging.INFO
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Context keys whose values never reach a log line
SENSITIVE_KEYS = ("password", "secret", "token", "database_url")
MASK = "***MASKED***"


def _mask_url(text: str) -> str:
    """Hide the password of a connection URL; other strings pass through."""
    try:
        return make_url(text).render_as_string(hide_password=True)
    except (ArgumentError, ValueError):
        return text


def _sanitize_data(data):
    """
    Mask credentials in log context.

    Values under sensitive keys are replaced; connection URLs nested anywhere
    in dicts or lists keep everything but their password.
    """
    if isinstance(data, dict):
        return {
            key: MASK if any(part in str(key).lower() for part in SENSITIVE_KEYS) else _sanitize_data(value)
            for key, value in data.items()
        }
    if isinstance(data, (list, tuple)):
        return [_sanitize_data(item) for item in data]
    if isinstance(data, str) and "://" in data and "@" in data:
        return _mask_url(data)
    return data


def _resolve_log_level(level_value, default=DEFAULT_LOG_LEVEL):
    """Map a level name or number to a logging level. Returns (level, used_default)."""
    if isinstance(level_value, int):
        return level_value, False

    name = str(level_value or "").strip().upper()
    if name.isdigit():
        return int(name), False
    level = logging.getLevelName(name)
    if isinstance(level, int):
        return level, False
    return default, True


def _get_settings():
    """Lazy import to avoid circular dependency with config module."""
    from reconcile.core.config import settings
    return settings


def setup_logging(log_file_name: str = "reconcile.log", level=None, console: bool = True):
    """Setup logging configuration."""
    settings = _get_settings()

    log_dir = Path(settings.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    # Clear existing handlers
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    resolved_level, used_default_level = _resolve_log_level(
        level if level is not None else settings.log_level
    )

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    if console:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        console_handler.setLevel(resolved_level)
        root_logger.addHandler(console_handler)

    file_handler = logging.handlers.RotatingFileHandler(
        log_dir / log_file_name,
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5,
        encoding='utf-8'
    )
    file_handler.setFormatter(formatter)
    file_handler.setLevel(resolved_level)

    root_logger.setLevel(resolved_level)
    root_logger.addHandler(file_handler)

    logging.getLogger(LogCategory.APP.value).setLevel(resolved_level)
    logging.getLogger(LogCategory.DB.value).setLevel(logging.INFO)

    # Reduce noise from third-party libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("pymysql").setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    if used_default_level:
        logger.warning(
            "Invalid log level '%s' in configuration, falling back to INFO",
            settings.log_level
        )
    logger.info(
        "Logging configured - Level: %s",
        logging.getLevelName(resolved_level)
    )
    logger.info(f"File logging: {log_dir / log_file_name}")


def _log_with_context(logger: logging.Logger, level: int, message: str, exc_info: bool = False, **context):
    """Append ``key=value`` context (masked) to the message, e.g. ``(probe=user_avatar)``."""
    if context:
        pairs = ", ".join(f"{key}={value}" for key, value in _sanitize_data(context).items())
        message = f"{message} ({pairs})"
    logger.log(level, message, exc_info=exc_info)


def log_info(message: str, category: LogCategory = LogCategory.APP, **kwargs):
    """Log info messages."""
    _log_with_context(logging.getLogger(category.value), logging.INFO, message, **kwargs)


def log_warning(message: str, category: LogCategory = LogCategory.APP, **kwargs):
    """Log warning messages."""
    _log_with_context(logging.getLogger(category.value), logging.WARNING, message, **kwargs)


def log_error(error: Exception | str, **kwargs):
    """Log errors.

    Args:
        error: Exception object or error message string
        **kwargs: Additional context (e.g., probe, resource_id)
    """
    logger = logging.getLogger(LogCategory.ERRORS.value)
    message = f"Error: {str(error)}"
    # exc_info should only be True if we have an actual Exception
    exc_info = isinstance(error, Exception)
    _log_with_context(logger, logging.ERROR, message, exc_info=exc_info, **kwargs)

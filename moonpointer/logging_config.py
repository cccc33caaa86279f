"""
MOONPOINTER Logging Configuration

Centralized logging for the bearing pipeline:
- Console output and optional rotating log file
- Per-service log level configuration
- Event correlation IDs, so every log line produced while handling one
  location/heading/refresh event can be traced back to that event
- Convenience helpers (log_exception, log_timing)

Usage:
    from moonpointer.logging_config import setup_logging, get_logger, log_timing
    from moonpointer.logging_config import correlation_context

    setup_logging(log_level="INFO", log_file="moonpointer.log")

    logger = get_logger(__name__)
    logger.info("Location fix received")

    with correlation_context(prefix="heading"):
        logger.debug("Recomputing rotation")  # Includes correlation_id in output

    with log_timing(logger, "visibility"):
        engine.compute_visibility(now, lat, lon)
"""

import logging
import sys
import time
import traceback
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from pathlib import Path
from typing import Generator, Optional

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_LOG_FORMAT_WITH_CORRELATION = (
    "%(asctime)s - %(name)s - %(levelname)s - [%(correlation_id)s] - %(message)s"
)
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_MAX_BYTES = 5 * 1024 * 1024  # 5MB
DEFAULT_BACKUP_COUNT = 3

ROOT_LOGGER_NAME = "moonpointer"

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# =============================================================================
# Correlation ID Support
# =============================================================================

_correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)


class CorrelationIdFilter(logging.Filter):
    """Logging filter that stamps the current correlation ID on each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = _correlation_id.get() or "-"
        return True


def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID, or None if not set."""
    return _correlation_id.get()


def generate_correlation_id(prefix: str = "mp") -> str:
    """Generate a new unique correlation ID like ``heading-a1b2c3d4``."""
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


@contextmanager
def correlation_context(
    correlation_id: Optional[str] = None,
    prefix: str = "mp",
) -> Generator[str, None, None]:
    """Context manager for setting a correlation ID.

    Generates an ID if none is given and restores the previous one on exit,
    so nested contexts behave.

    Args:
        correlation_id: ID to use. If None, one is generated.
        prefix: Prefix for generated IDs.

    Yields:
        The correlation ID in effect.
    """
    cid = correlation_id or generate_correlation_id(prefix)
    token = _correlation_id.set(cid)
    try:
        yield cid
    finally:
        _correlation_id.reset(token)


def setup_logging(
    log_level: str = DEFAULT_LOG_LEVEL,
    log_file: Optional[str | Path] = None,
    enable_correlation: bool = True,
) -> None:
    """Configure logging for the MOONPOINTER application.

    Sets up the ``moonpointer`` logger with a console handler and an
    optional rotating file handler. Calling it again replaces the handlers.

    Args:
        log_level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to a log file; parent directories are created.
        enable_correlation: Include the event correlation ID in each line.
    """
    level = LOG_LEVELS.get(log_level.upper(), logging.INFO)

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level)

    for handler in list(root_logger.handlers):
        handler.close()
    root_logger.handlers.clear()
    root_logger.filters.clear()

    log_format = (
        DEFAULT_LOG_FORMAT_WITH_CORRELATION if enable_correlation else DEFAULT_LOG_FORMAT
    )
    formatter = logging.Formatter(log_format, DEFAULT_DATE_FORMAT)

    # Handlers pass everything; logger levels (global and per service) filter
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    handlers = [console_handler]

    if log_file:
        from logging.handlers import RotatingFileHandler

        file_path = Path(log_file)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            file_path,
            maxBytes=DEFAULT_MAX_BYTES,
            backupCount=DEFAULT_BACKUP_COUNT,
        )
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    # Records from child loggers bypass logger filters, so stamp at the handler
    for handler in handlers:
        if enable_correlation:
            handler.addFilter(CorrelationIdFilter())
        root_logger.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the moonpointer namespace.

    ``services.ephemeris.lunar_service`` becomes
    ``moonpointer.services.ephemeris.lunar_service`` so that it inherits the
    handlers installed by setup_logging().
    """
    if not name.startswith(ROOT_LOGGER_NAME):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def set_service_level(service_name: str, level: str) -> None:
    """Set log level for one service, e.g. ``set_service_level("ephemeris", "DEBUG")``."""
    logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.services.{service_name}")
    logger.setLevel(LOG_LEVELS.get(level.upper(), logging.INFO))


# =============================================================================
# Convenience Helpers
# =============================================================================


def log_exception(
    logger: logging.Logger,
    message: str,
    exc: BaseException,
    level: int = logging.ERROR,
    include_traceback: bool = True,
) -> None:
    """Log an exception with its type, message and (optionally) traceback.

    Args:
        logger: Logger instance to use
        message: What operation failed
        exc: The exception that was raised
        level: Log level to use (default: ERROR)
        include_traceback: Append the formatted traceback
    """
    exc_type = type(exc).__name__
    extra = {
        "exception_type": exc_type,
        "exception_message": str(exc),
    }

    if include_traceback:
        tb = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        extra["traceback"] = tb
        logger.log(level, f"{message}: [{exc_type}] {exc}\n{tb}", extra=extra)
    else:
        logger.log(level, f"{message}: [{exc_type}] {exc}", extra=extra)


@contextmanager
def log_timing(
    logger: logging.Logger,
    operation: str,
    level: int = logging.DEBUG,
    warn_threshold_sec: Optional[float] = None,
) -> Generator[None, None, None]:
    """Log the duration of the wrapped block.

    Emits a WARNING instead when ``warn_threshold_sec`` is exceeded.
    """
    start_time = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start_time
        extra = {"operation": operation, "elapsed_seconds": round(elapsed, 3)}

        if warn_threshold_sec is not None and elapsed > warn_threshold_sec:
            logger.warning(
                f"{operation} completed in {elapsed:.3f}s "
                f"(exceeded {warn_threshold_sec}s threshold)",
                extra=extra,
            )
        else:
            logger.log(level, f"{operation} completed in {elapsed:.3f}s", extra=extra)

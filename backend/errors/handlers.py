"""
Error handling decorators and utilities for Roger.

Detectors must never abort classification: a failing detector is logged
and reported as "not detected".
"""

import logging
from functools import wraps
from typing import Any, Callable, Optional, TypeVar

from .exceptions import RogerError, DetectorError

F = TypeVar("F", bound=Callable[..., Any])


def handle_detector_errors(detector_name: str, default: Any = None, logger: Optional[logging.Logger] = None):
    """Decorator that catches detector exceptions and returns a "not detected" value.

    Args:
        detector_name: Name of the detector for log context
        default: Value returned when the detector raises (a callable is
            invoked to build a fresh value each time)
        logger: Optional logger instance (defaults to a detector-specific logger)

    Example:
        >>> @handle_detector_errors("grief", default=GriefSignals)
        ... def detect_grief(text):
        ...     ...
    """

    def decorator(func: F) -> F:
        log = logger or logging.getLogger(f"roger.detector.{detector_name}")

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                log_error(log, DetectorError(str(e), detector=detector_name), context=detector_name)
                return default() if callable(default) else default

        return wrapper  # type: ignore

    return decorator


def log_error(
    logger: logging.Logger, error: Exception, context: Optional[str] = None, include_traceback: bool = True
) -> None:
    """Log an error with consistent formatting.

    Example:
        >>> log_error(logger, err, context="compliance")
        # Logs: "[compliance] COMPLIANCE_EXHAUSTED: Repetition retries exhausted"
    """
    if isinstance(error, RogerError):
        message = f"{error.code.value}: {error.message}"
    else:
        message = str(error)

    if context:
        message = f"[{context}] {message}"

    logger.error(message, exc_info=include_traceback)

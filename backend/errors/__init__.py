"""
Roger Error Handling Module

Provides standardized error codes, exceptions, and response builders
for consistent error handling across the conversation pipeline.

Usage:
    from errors import (
        # Error codes
        ErrorCode,

        # Exceptions
        RogerError,
        DetectorError,
        GeneratorError,
        ComplianceError,
        ValidationError,
        NotFoundError,
        DependencyError,

        # Response builders
        error_response,
        success_response,

        # Decorators
        handle_detector_errors,
        log_error,
    )

Example:
    from errors import handle_detector_errors

    @handle_detector_errors("political", default=PoliticalEmotion)
    def detect_political_emotion(text):
        ...
"""

from .codes import ErrorCode
from .exceptions import (
    RogerError,
    DetectorError,
    GeneratorError,
    ComplianceError,
    ValidationError,
    NotFoundError,
    DependencyError,
)
from .response import (
    error_response,
    success_response,
)
from .handlers import (
    handle_detector_errors,
    log_error,
)

__all__ = [
    # Error codes
    "ErrorCode",
    # Exceptions
    "RogerError",
    "DetectorError",
    "GeneratorError",
    "ComplianceError",
    "ValidationError",
    "NotFoundError",
    "DependencyError",
    # Response builders
    "error_response",
    "success_response",
    # Decorators
    "handle_detector_errors",
    "log_error",
]

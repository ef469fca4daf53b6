"""
Custom exception hierarchy for Roger.

All exceptions inherit from RogerError and include:
- code: ErrorCode for categorization
- message: Human-readable error message
- details: Optional additional context
- recoverable: Whether the pipeline can continue past the failure
- context: Additional key-value pairs for debugging
"""

from typing import Any, Optional
from .codes import ErrorCode


class RogerError(Exception):
    """Base exception for all Roger errors.

    Attributes:
        code: The ErrorCode categorizing this error
        message: Human-readable error message
        details: Optional additional context
        recoverable: Whether the pipeline can recover locally
        context: Additional debugging information
    """

    code: ErrorCode = ErrorCode.INTERNAL_UNEXPECTED
    recoverable: bool = False

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        code: Optional[ErrorCode] = None,
        recoverable: Optional[bool] = None,
        **context: Any,
    ):
        self.message = message
        self.details = details
        self.context = context if context else None

        # Allow overriding class defaults
        if code is not None:
            self.code = code
        if recoverable is not None:
            self.recoverable = recoverable

        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message

    def to_dict(self) -> dict:
        """Convert exception to dictionary for JSON serialization."""
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
            "context": self.context,
        }


class DetectorError(RogerError):
    """A single detector failed; treated as "not detected"."""

    code = ErrorCode.DETECTOR_FAILED
    recoverable = True

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        detector: Optional[str] = None,
        error_type: Optional[str] = None,
        **context: Any,
    ):
        if error_type == "timeout":
            code = ErrorCode.DETECTOR_TIMEOUT
        elif error_type == "rules":
            code = ErrorCode.DETECTOR_RULES_INVALID
        else:
            code = ErrorCode.DETECTOR_FAILED

        ctx = {**context}
        if detector:
            ctx["detector"] = detector
        super().__init__(message, details, code=code, **ctx)


class GeneratorError(RogerError):
    """Candidate generation failed; recovered with the generic pool."""

    code = ErrorCode.GENERATOR_FAILED
    recoverable = True

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        handler: Optional[str] = None,
        pool: Optional[str] = None,
        error_type: Optional[str] = None,
        **context: Any,
    ):
        if error_type == "empty_pool":
            code = ErrorCode.GENERATOR_EMPTY_POOL
        elif error_type == "entity":
            code = ErrorCode.GENERATOR_ENTITY_FAILED
        else:
            code = ErrorCode.GENERATOR_FAILED

        ctx = {**context}
        if handler:
            ctx["handler"] = handler
        if pool:
            ctx["pool"] = pool
        super().__init__(message, details, code=code, **ctx)


class ComplianceError(RogerError):
    """Compliance checks could not produce a compliant candidate."""

    code = ErrorCode.COMPLIANCE_EXHAUSTED
    recoverable = True

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        check: Optional[str] = None,
        attempts: Optional[int] = None,
        **context: Any,
    ):
        ctx = {**context}
        if check:
            ctx["check"] = check
        if attempts is not None:
            ctx["attempts"] = attempts
        super().__init__(message, details, **ctx)


class ValidationError(RogerError):
    """Error during input validation."""

    code = ErrorCode.VALIDATION_MISSING_PARAM
    recoverable = True

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        parameter: Optional[str] = None,
        expected: Optional[str] = None,
        received: Optional[str] = None,
        **context: Any,
    ):
        ctx = {**context}
        if parameter:
            ctx["parameter"] = parameter
        if expected:
            ctx["expected"] = expected
        if received:
            ctx["received"] = received
        super().__init__(message, details, **ctx)


class NotFoundError(RogerError):
    """Error when a required resource is not found."""

    code = ErrorCode.NOT_FOUND_TEMPLATE
    recoverable = True

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
        **context: Any,
    ):
        if resource_type == "session":
            code = ErrorCode.NOT_FOUND_SESSION
        elif resource_type == "handler":
            code = ErrorCode.NOT_FOUND_HANDLER
        else:
            code = ErrorCode.NOT_FOUND_TEMPLATE

        ctx = {**context}
        if resource_type:
            ctx["resource_type"] = resource_type
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message, details, code=code, **ctx)


class DependencyError(RogerError):
    """An optional detector module could not be constructed."""

    code = ErrorCode.DEPENDENCY_INIT_FAILED
    recoverable = True

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        module: Optional[str] = None,
        **context: Any,
    ):
        ctx = {**context}
        if module:
            ctx["module"] = module
        super().__init__(message, details, **ctx)

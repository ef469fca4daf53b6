"""
Error codes for Roger.

Provides a standardized taxonomy of error codes organized by category.
Use these codes consistently across all error responses.
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Standardized error codes for Roger.

    Categories:
    - DETECTOR_*: Concern/special-case detector failures
    - GENERATOR_*: Reply candidate generation failures
    - COMPLIANCE_*: Compliance filter failures
    - VALIDATION_*: Input validation errors
    - NOT_FOUND_*: Resource not found errors
    - DEPENDENCY_*: Optional detector module errors
    - INTERNAL_*: Internal/unexpected errors
    """

    # Detector errors (classification)
    DETECTOR_FAILED = "DETECTOR_FAILED"
    DETECTOR_TIMEOUT = "DETECTOR_TIMEOUT"
    DETECTOR_RULES_INVALID = "DETECTOR_RULES_INVALID"

    # Generator errors (candidate production)
    GENERATOR_FAILED = "GENERATOR_FAILED"
    GENERATOR_EMPTY_POOL = "GENERATOR_EMPTY_POOL"
    GENERATOR_ENTITY_FAILED = "GENERATOR_ENTITY_FAILED"

    # Compliance errors
    COMPLIANCE_EXHAUSTED = "COMPLIANCE_EXHAUSTED"
    COMPLIANCE_FAILED = "COMPLIANCE_FAILED"

    # Validation errors (input checking)
    VALIDATION_MISSING_PARAM = "VALIDATION_MISSING_PARAM"
    VALIDATION_INVALID_TYPE = "VALIDATION_INVALID_TYPE"
    VALIDATION_OUT_OF_RANGE = "VALIDATION_OUT_OF_RANGE"
    VALIDATION_INVALID_FORMAT = "VALIDATION_INVALID_FORMAT"

    # Not found errors (missing resources)
    NOT_FOUND_TEMPLATE = "NOT_FOUND_TEMPLATE"
    NOT_FOUND_SESSION = "NOT_FOUND_SESSION"
    NOT_FOUND_HANDLER = "NOT_FOUND_HANDLER"

    # Dependency errors (optional detector modules)
    DEPENDENCY_MISSING = "DEPENDENCY_MISSING"
    DEPENDENCY_INIT_FAILED = "DEPENDENCY_INIT_FAILED"

    # Internal errors (unexpected failures)
    INTERNAL_UNEXPECTED = "INTERNAL_UNEXPECTED"
    INTERNAL_CONFIG_ERROR = "INTERNAL_CONFIG_ERROR"
    INTERNAL_STATE_ERROR = "INTERNAL_STATE_ERROR"

"""
Standard response builders for Roger.

Provides consistent JSON shapes for the HTTP surface.
"""

from typing import Any, Optional
from .codes import ErrorCode
from .exceptions import RogerError


def error_response(error: RogerError | Exception, source: Optional[str] = None, include_context: bool = True) -> dict:
    """Build a standard error response dictionary.

    Args:
        error: The exception to convert to a response
        source: Optional component name for context
        include_context: Whether to include the context dict

    Returns:
        Standard error response dict with success=False

    Example:
        >>> from errors import NotFoundError, error_response
        >>> err = NotFoundError("Unknown session", resource_type="session", resource_id="ab12")
        >>> error_response(err, source="sessions")
        {
            "success": False,
            "error": {
                "code": "NOT_FOUND_SESSION",
                "message": "Unknown session",
                "details": None,
                "source": "sessions",
                "recoverable": True,
                "context": {"resource_type": "session", "resource_id": "ab12"}
            }
        }
    """
    if isinstance(error, RogerError):
        return {
            "success": False,
            "error": {
                "code": error.code.value,
                "message": error.message,
                "details": error.details,
                "source": source,
                "recoverable": error.recoverable,
                "context": error.context if include_context else None,
            },
        }

    # Never echo raw exception text to clients
    return {
        "success": False,
        "error": {
            "code": ErrorCode.INTERNAL_UNEXPECTED.value,
            "message": "Unexpected error",
            "details": None,
            "source": source,
            "recoverable": False,
            "context": None,
        },
    }


def success_response(data: Optional[dict] = None, **kwargs: Any) -> dict:
    """Build a standard success response dictionary.

    Example:
        >>> success_response(session_id="ab12")
        {"success": True, "session_id": "ab12"}
    """
    response = {"success": True}

    if data:
        response.update(data)
    if kwargs:
        response.update(kwargs)

    return response

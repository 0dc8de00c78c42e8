"""
NoteHub Backend: Custom Exception Hierarchy
============================================

What:  Application-specific exceptions for each error scenario.
Why:   Global handlers (registered in main.py) map each type to exactly one
       HTTP status and a JSON body, so routes never build error responses.
How:   Each exception carries a client-safe `message` and a `context` dict.
       Context is logged; it is returned to clients only for client errors.

Exception Hierarchy:
    NoteHubError (base)                → 500 Internal Server Error
    ├── ValidationError                → 400 Bad Request
    ├── MalformedRequestError          → 400 Bad Request
    ├── NotFoundError                  → 404 Not Found
    ├── StoreUnavailableError          → 503 Service Unavailable
    ├── DocumentError                  → 500 Internal Server Error
    └── StartupConfigurationError      → process exits before serving
"""

from typing import Any, Dict, Optional


class NoteHubError(Exception):
    """
    Base exception for all NoteHub application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info
    """

    status_code = 500
    error_code = "internal_server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(NoteHubError):
    """
    Raised when client input is well-formed but breaks a business rule.

    When:  Blank note title or content on create or patch.
    HTTP:  400 Bad Request
    """

    status_code = 400
    error_code = "validation_error"

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class MalformedRequestError(NoteHubError):
    """
    Raised when the path, query string, or body cannot be parsed.

    When:  Non-integer note id, non-integer body for POST /numbers,
           page/pageSize out of range, invalid JSON.
    HTTP:  400 Bad Request
    """

    status_code = 400
    error_code = "malformed_request"

    def __init__(
        self,
        message: str = "The request could not be parsed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(NoteHubError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing rows; the note store turns that into
    this exception so the handler can answer 404.
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id is not None:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = str(resource_id)
        super().__init__(message=message, context=ctx)


class StoreUnavailableError(NoteHubError):
    """
    Raised when the relational backend cannot serve a note operation.

    When:  Connection refused or lost, pool checkout timed out, constraint
           violation, any other driver-level failure.
    HTTP:  503 Service Unavailable

    Security Note:
        The response carries a generic message only. The original driver
        error is kept in `context` and logged server-side.
    """

    status_code = 503
    error_code = "store_unavailable"

    def __init__(
        self,
        message: str = "The note store is temporarily unavailable. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DocumentError(NoteHubError):
    """Raised when a file-backed document cannot be read or parsed."""

    status_code = 500
    error_code = "document_error"

    def __init__(
        self,
        message: str = "The document could not be loaded",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StartupConfigurationError(NoteHubError):
    """
    Raised when required configuration is missing or invalid.

    Never retried and never mapped to an HTTP response: the entry point
    logs the message and exits with a non-zero status before serving.
    """

    def __init__(
        self,
        message: str = "Configuration validation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)

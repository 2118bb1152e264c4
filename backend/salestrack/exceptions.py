"""
SalesTrack Backend — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for business-rule and storage failures.
How:   Each exception carries a message and an optional context dict.
       Global exception handlers (registered in main.py) turn the HTTP-facing
       ones into JSON error envelopes with the right status code.
Who:   Raised by services, the synchronizer and the document stores.

Exception Hierarchy:
    SalesTrackError (base)
    ├── ValidationError          → 400 Bad Request
    ├── AuthenticationError      → 401 Unauthorized
    ├── NotFoundError            → 404 Not Found
    ├── PersistenceError         → 500 Internal Server Error (write gave up)
    └── StoreError               (handled inside the synchronizer)
        ├── DocumentNotFoundError   nothing stored at the path yet
        ├── VersionConflictError    expected version token is stale
        └── TransportError          network or service failure
"""

from typing import Any, Dict, Optional


class SalesTrackError(Exception):
    """
    Base exception for all SalesTrack application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional details; returned as "details" for 4xx errors,
                  logged only for 5xx errors
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(SalesTrackError):
    """
    Raised when caller-supplied data violates a repository rule.

    When:    Missing required fields, negative stock, duplicate login,
             deleting a category that products still reference.
    HTTP:    400 Bad Request

    Validation errors are raised before any store I/O and are never retried.
    """

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


class AuthenticationError(SalesTrackError):
    """Login and secret do not match an active seller. HTTP 401."""

    def __init__(
        self,
        message: str = "Invalid credentials",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(SalesTrackError):
    """
    Raised when a requested entity does not exist in the document.

    When:    PUT/DELETE on /api/owner/<collection>/{id} with an unknown id.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class PersistenceError(SalesTrackError):
    """
    Raised when the synchronizer could not persist a mutation.

    When:    Write retries exhausted (conflicts or transport failures).
    HTTP:    500 Internal Server Error

    The caller's working copy already holds the mutation; the stored
    document does not.
    """

    def __init__(
        self,
        message: str = "Changes could not be saved. Please try again.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


# ══════════════════════════════════════════════════════════════════════════
# Document store errors
# ══════════════════════════════════════════════════════════════════════════

class StoreError(SalesTrackError):
    """Base class for failures reported by a DocumentStore."""

    def __init__(
        self,
        message: str = "Document store operation failed",
        path: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if path:
            ctx["path"] = path
        super().__init__(message=message, context=ctx)
        self.path = path


class DocumentNotFoundError(StoreError):
    """
    Nothing is stored at the requested path.

    This is an expected outcome on first start: the synchronizer reacts by
    seeding the default document.
    """

    def __init__(self, path: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        super().__init__(message=f"No document stored at '{path}'", path=path, context=context)


class VersionConflictError(StoreError):
    """
    A conditional write was rejected because the expected version is stale.

    The synchronizer answers with refresh, merge and retry rather than the
    backoff used for transport failures.
    """

    def __init__(
        self,
        path: Optional[str] = None,
        expected_version: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["expected_version"] = expected_version
        super().__init__(
            message=f"Version conflict writing '{path}'", path=path, context=ctx
        )
        self.expected_version = expected_version


class TransportError(StoreError):
    """The store could not be reached or answered with an unexpected status."""

    def __init__(
        self,
        message: str = "Document store is unavailable",
        path: Optional[str] = None,
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if status_code is not None:
            ctx["status_code"] = status_code
        super().__init__(message=message, path=path, context=ctx)
        self.status_code = status_code

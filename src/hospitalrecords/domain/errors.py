"""
Domain-specific error types raised by the resource-access layer.

Each error carries the HTTP status it maps to; the application's exception
handlers turn them into ``ErrorResponse`` bodies.
"""

from typing import Any, Dict, List, Optional


class DomainError(Exception):
    """Base domain error."""

    http_status: int = 400

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class InvalidIdentifierError(DomainError):
    """Identifier is not a well-formed document id."""

    def __init__(self, message: str, identifier: Any) -> None:
        super().__init__(message, "INVALID_IDENTIFIER", {"id": str(identifier)})


class ValidationFailedError(DomainError):
    """Required fields are missing or malformed."""

    def __init__(self, message: str, fields: List[str]) -> None:
        super().__init__(message, "VALIDATION_FAILED", {"fields": fields})


class EmptyUpdateError(DomainError):
    """Update payload has nothing left to apply."""

    def __init__(self) -> None:
        super().__init__("Update data cannot be empty", "EMPTY_UPDATE")


class DocumentNotFoundError(DomainError):
    """Well-formed id with no matching document."""

    http_status = 404

    def __init__(self, resource: str, identifier: str) -> None:
        message = f"{resource.capitalize()} not found"
        super().__init__(message, "NOT_FOUND", {"id": identifier})


class StoreError(DomainError):
    """The document store failed; the cause is logged, never returned."""

    http_status = 500

    def __init__(self, message: str) -> None:
        super().__init__(message, "STORE_ERROR")


class StoreNotInitializedError(StoreError):
    """The store handle was requested before the connection was established."""

    def __init__(self) -> None:
        super().__init__("Database not initialized")
        self.error_code = "STORE_NOT_INITIALIZED"


class StoreConnectionError(Exception):
    """Startup could not reach the document store."""

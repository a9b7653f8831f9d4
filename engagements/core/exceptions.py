"""Custom exceptions for the engagements core."""

from __future__ import annotations

from typing import Any


class EngagementError(Exception):
    """Base exception for the engagements core."""

    status_code = 500
    error = "Internal Server Error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(EngagementError):
    """Raised when input fails a date, financial, status or custom-field check."""

    status_code = 400
    error = "Bad Request"


class BusinessRuleError(EngagementError):
    """Raised when an operation is refused by a business guard."""

    status_code = 400
    error = "Bad Request"


class NotFoundError(EngagementError):
    """Raised when a referenced entity does not exist."""

    status_code = 404
    error = "Not Found"

    def __init__(self, entity: str, entity_id: Any, message: str | None = None) -> None:
        super().__init__(message or f"{entity} with ID {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class ConflictError(EngagementError):
    """Raised when a uniqueness rule is violated."""

    status_code = 409
    error = "Conflict"


class DatabaseError(EngagementError):
    """Raised when a database operation fails."""

    pass


class ConfigurationError(EngagementError):
    """Raised when configuration is invalid."""

    pass

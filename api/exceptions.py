"""
Exceptions raised by the book and user services.
"""

from typing import Any, Dict, Optional


class BookServiceError(Exception):
    """Base exception for service-layer failures."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class InvalidInputError(BookServiceError):
    """Raised when an identifier or payload fails validation before any store call."""


class NotFoundError(BookServiceError):
    """Raised when no record matches a well-formed identifier."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(
            f"{resource} with ID '{identifier}' not found",
            {"resource": resource, "identifier": identifier},
        )

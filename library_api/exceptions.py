"""
Domain Exceptions

Errors raised by the services and dependencies. Each carries the HTTP
status it maps to; the handlers registered in main.py render them as JSON.

Taxonomy:
- ValidationFailed: field -> messages, 422 (uniqueness conflicts included)
- Unauthenticated: missing/invalid credentials or bearer token, 401
- NotFound: unknown resource id, 404
"""

from typing import Any


class LibraryError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message}


class ValidationFailed(LibraryError):
    """
    One or more fields violated their rules.

    Attributes:
        errors: Mapping of field name to every violation message for it,
            in rule order.
    """

    status_code = 422

    def __init__(self, errors: dict[str, list[str]]) -> None:
        self.errors = errors
        super().__init__(self._summary(errors))

    @staticmethod
    def _summary(errors: dict[str, list[str]]) -> str:
        """
        Build the top-level message: the first violation, plus a count of
        the remaining ones.

        Example:
            "The title field is required. (and 2 more errors)"
        """
        messages = [message for field_messages in errors.values() for message in field_messages]
        if not messages:
            return "The given data was invalid."

        remaining = len(messages) - 1
        if remaining == 0:
            return messages[0]
        noun = "error" if remaining == 1 else "errors"
        return f"{messages[0]} (and {remaining} more {noun})"

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, "errors": self.errors}


class Unauthenticated(LibraryError):
    """Credentials or bearer token are missing, wrong, or revoked."""

    status_code = 401

    def __init__(self, message: str = "Unauthenticated.") -> None:
        super().__init__(message)


class NotFound(LibraryError):
    """The requested record does not exist."""

    status_code = 404

    def __init__(self, resource: str, resource_id: Any) -> None:
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} with id {resource_id} not found")

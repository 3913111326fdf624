from __future__ import annotations

from typing import Any


class AppError(Exception):
    """Base error for domain/application exceptions."""


class NotAuthorized(AppError):
    """Raised when the actor may not view or act on a resource."""

    def __init__(self, username: str | None, resource: str) -> None:
        self.username = username
        self.resource = resource
        super().__init__(f"User '{username}' is not authorized to access '{resource}'")


class NotFound(AppError):
    """Raised when an entity is missing."""

    def __init__(self, entity: str, field: str, value: Any) -> None:
        self.entity = entity
        self.field = field
        self.value = value
        super().__init__(f"{entity} not found with {field}: '{value}'")


class InvalidState(AppError):
    """Raised when a lifecycle operation is not allowed from the current status."""

    def __init__(self, entity: str, current_state: Any, operation: str) -> None:
        self.entity = entity
        self.current_state = getattr(current_state, "value", current_state)
        self.operation = operation
        super().__init__(f"Cannot {operation} {entity} in {self.current_state} state")


class ValidationError(AppError):
    """Raised for domain-level validation beyond schema validation."""

    def __init__(self, message: str, errors: dict[str, str] | None = None) -> None:
        self.message = message
        self.errors = errors or {}
        super().__init__(message)

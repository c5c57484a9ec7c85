"""Workflow-level error taxonomy. Each error carries the HTTP status it maps to."""

from __future__ import annotations


class WorkflowError(Exception):
    status_code: int = 500
    default_message: str = "internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInputError(WorkflowError):
    """Missing or malformed required fields; raised before any write."""

    status_code = 400
    default_message = "invalid input"


class InvalidStateError(WorkflowError):
    """The entity exists but is not in a state that allows the transition."""

    status_code = 400
    default_message = "invalid state for this operation"


class UnauthorizedError(WorkflowError):
    status_code = 401
    default_message = "Unauthorized"


class ForbiddenError(WorkflowError):
    status_code = 403
    default_message = "Forbidden"


class NotFoundError(WorkflowError):
    status_code = 404
    default_message = "not found"


class ConflictError(WorkflowError):
    status_code = 409
    default_message = "conflict"


class InternalServiceError(WorkflowError):
    """Store or gateway failure. The message is generic; the cause is only logged."""

    status_code = 500
    default_message = "internal server error"


__all__ = [
    "ConflictError",
    "ForbiddenError",
    "InternalServiceError",
    "InvalidInputError",
    "InvalidStateError",
    "NotFoundError",
    "UnauthorizedError",
    "WorkflowError",
]

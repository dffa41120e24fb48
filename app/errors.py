"""
Domain exception taxonomy.

Services raise these; the exception handlers registered in ``main.create_app``
translate them into ``{"error": message}`` JSON bodies with the matching
HTTP status code.
"""

from fastapi import status


class TaskFlowError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(TaskFlowError):
    """Missing or invalid input."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class AuthError(TaskFlowError):
    """Bad credentials or a missing/invalid bearer token."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Please authenticate"


class NotFoundError(TaskFlowError):
    """Owner-scoped lookup found nothing."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ConflictError(TaskFlowError):
    # Reported as 400 to match the register contract
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Resource already exists"


__all__ = [
    "TaskFlowError",
    "ValidationError",
    "AuthError",
    "NotFoundError",
    "ConflictError",
]

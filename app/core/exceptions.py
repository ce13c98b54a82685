"""
Domain exceptions for the production planning service.

Services raise these; the handlers registered in main.py convert them into the
`{"success": false, "error": "..."}` envelope with the matching status code.
"""
from fastapi import status


class AppError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND

    @classmethod
    def for_entity(cls, entity: str, entity_id: str) -> "NotFoundError":
        return cls(f"{entity} not found: {entity_id}")


class PreconditionError(AppError):
    """Workflow step attempted from the wrong state."""
    status_code = status.HTTP_400_BAD_REQUEST


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST


class DuplicateError(AppError):
    status_code = status.HTTP_409_CONFLICT


class AuthError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenError(AuthError):
    status_code = status.HTTP_403_FORBIDDEN


class InternalError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

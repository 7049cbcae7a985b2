"""Typed application errors mapped to HTTP responses in academy.main"""

from fastapi import status


class AppError(Exception):
    """Base for errors the service layer can name. Rendered as ErrorResponse."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    """Malformed or incomplete input"""
    status_code = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_ERROR"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "RESOURCE_NOT_FOUND"


class InvalidRelationError(AppError):
    """Two referenced records exist but are not related the way the request claims"""
    status_code = status.HTTP_400_BAD_REQUEST
    code = "INVALID_RELATION"


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"

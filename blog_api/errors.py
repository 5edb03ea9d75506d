"""
Application error taxonomy.

Services raise these; ``main.py`` renders them as
``{"success": false, "error": <message>}`` with the matching status code.
"""

from fastapi import status


class BlogAPIError(Exception):
    """Base class for errors that map onto an HTTP response"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal Server Error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(BlogAPIError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed"


class MissingFields(ValidationError):
    default_message = "Email and password are required"


class DuplicateKey(ValidationError):
    default_message = "Duplicate value violates a unique constraint"


class Unauthorized(BlogAPIError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Access token required"


class InvalidCredentials(BlogAPIError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid email or password"


class InvalidToken(BlogAPIError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Invalid or expired token"


class NotFound(BlogAPIError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class InternalError(BlogAPIError):
    pass


class MediaUploadError(InternalError):
    default_message = "Image upload failed"

"""Custom exception classes for the Bimbel marketplace service.

Every application error carries the HTTP status it is rendered with, so the
handlers registered in ``app.py`` can turn it into the standard response
envelope without each route repeating the mapping.
"""

from fastapi import status


class BimbelServiceError(Exception):
    """Base exception for all application errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "internal server error"

    def __init__(self, message: str = None):
        """Initialize the exception.

        Args:
            message: Human readable message returned to the client.
        """
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(BimbelServiceError):
    """Raised when request data is missing or malformed."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "invalid request"


class InvalidFeatureReferenceError(ValidationError):
    """Raised when a feature id does not point at an active feature."""

    default_message = "feature_id not found or inactive"


class NotATutorError(ValidationError):
    """Raised when a tutor account has no linked tutor record."""

    default_message = "user has no tutor_id"


class DuplicateEmailError(ValidationError):
    """Raised when registering an email that is already taken."""

    default_message = "email already registered"


class AuthenticationError(BimbelServiceError):
    """Raised when a request cannot be authenticated."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "unauthorized"


class InvalidCredentialsError(AuthenticationError):
    """Raised on any login failure; the cause is never disclosed."""

    default_message = "invalid email or password"


class ForbiddenError(BimbelServiceError):
    """Raised when the caller's role may not perform an action."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "forbidden"


class UnauthorizedError(BimbelServiceError):
    """Raised when a tutor touches a course owned by another tutor.

    Rendered as 403, not 401: the caller is authenticated, only the target
    course is out of reach. 401 stays reserved for the token gate.
    """

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "unauthorized"


class NotFoundError(BimbelServiceError):
    """Raised when a requested resource does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "not found"


class UserNotFoundError(NotFoundError):
    """Raised when a user cannot be found."""

    default_message = "user not found"


class ConflictError(BimbelServiceError):
    """Raised on duplicate names or when a referenced row blocks a delete."""

    status_code = status.HTTP_409_CONFLICT
    default_message = "conflict"


class InternalError(BimbelServiceError):
    """Raised when storage fails in a way the client cannot fix."""

    pass


class TokenError(Exception):
    """Base exception for bearer token verification failures."""

    pass


class InvalidSignatureError(TokenError):
    """Raised when the signature or signing algorithm is wrong."""

    pass


class MalformedTokenError(TokenError):
    """Raised when the token cannot be decoded or lacks required claims."""

    pass


class ExpiredTokenError(TokenError):
    """Raised when the token's exp claim is in the past."""

    pass

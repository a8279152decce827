"""
Domain errors - every failure a service can report to a client
"""
from typing import Optional


class BlogServiceError(Exception):
    """Base error carrying a user-facing message and an HTTP status"""

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(BlogServiceError):
    """Malformed or incomplete input"""
    status_code = 403


class AuthError(BlogServiceError):
    """Missing or invalid credentials"""
    status_code = 403


class NoTokenError(AuthError):
    status_code = 401

    def __init__(self, message: str = "No access token"):
        super().__init__(message)


class InvalidTokenError(AuthError):
    def __init__(self, message: str = "Access token is invalid"):
        super().__init__(message)


class WrongPasswordError(AuthError):
    def __init__(self, message: str = "Password is incorrect"):
        super().__init__(message)


class NotFoundError(BlogServiceError):
    status_code = 404


class ConflictError(BlogServiceError):
    status_code = 403


class DuplicateEmailError(ConflictError):
    status_code = 500

    def __init__(self, message: str = "Email already exists"):
        super().__init__(message)


class FederatedAccountConflictError(ConflictError):
    """Local and Google accounts share an email"""


class DuplicateUsernameError(ConflictError):
    """Raised by repositories when a username is already taken"""

    def __init__(self, message: str = "Username already exists"):
        super().__init__(message)


class DraftNotAccessibleError(BlogServiceError):
    status_code = 500

    def __init__(self, message: str = "Draft blogs are not accessible"):
        super().__init__(message)


class InternalError(BlogServiceError):
    """Database, storage or identity provider failure"""
    status_code = 500


class HashingError(InternalError):
    def __init__(self, message: str = "Something went wrong while checking the password"):
        super().__init__(message)


class DuplicateLikeError(ConflictError):
    """Raised inside a transaction when the like is already recorded"""

    def __init__(self, message: str = "Blog is already liked"):
        super().__init__(message)

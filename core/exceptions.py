"""
Domain errors raised by the board manager.

Each error carries the HTTP status the API layer answers with, so route
handlers can translate them without a lookup table.
"""


class BoardError(Exception):
    """Base class for lost-and-found board errors."""

    status_code: int = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class DuplicateEmailError(BoardError):
    status_code = 400

    def __init__(self, message: str = "User already exists with this email."):
        super().__init__(message)


class InvalidCredentialsError(BoardError):
    status_code = 401

    def __init__(self, message: str = "Invalid email or password."):
        super().__init__(message)


class AuthenticationError(BoardError):
    status_code = 401


class InvalidInputError(BoardError):
    status_code = 400


class InvalidUploadError(InvalidInputError):
    pass


class PostNotFoundError(BoardError):
    status_code = 404

    def __init__(self, message: str = "Post not found."):
        super().__init__(message)


class NotPostOwnerError(BoardError):
    status_code = 403

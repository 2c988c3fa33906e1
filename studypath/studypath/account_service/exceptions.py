"""
Errors raised by the credential and session lifecycle.

Cache errors are deliberately absent: the session cache absorbs its own
failures and never raises into the auth flow.
"""


class AccountServiceError(Exception):
    """Base class for account service errors."""


class DuplicateEmailError(AccountServiceError):
    """An account with this email already exists."""

    def __init__(self, email: str):
        super().__init__(f"Email already registered: {email}")
        self.email = email


class InvalidCredentialsError(AccountServiceError):
    """Unknown email or wrong password. The two cases are not distinguished."""

    def __init__(self):
        super().__init__("Invalid email or password")


class InvalidTokenError(AccountServiceError):
    """A bearer token could not be verified."""


class MalformedTokenError(InvalidTokenError):
    """Token is not a decodable JWT or lacks required claims."""


class TokenSignatureError(InvalidTokenError):
    """Token signature does not match the signing secret."""


class TokenExpiredError(InvalidTokenError):
    """Token is past its expiry."""


class HashingError(AccountServiceError):
    """Password hashing failed. Fatal to the calling operation."""

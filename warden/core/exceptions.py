"""Centralized, structured exception hierarchy for Warden.

Every error carries a machine-readable `code` for programmatic handling and a
human-readable, already translated `message` for logging and user feedback.

The hierarchy is designed to:
- Provide specific errors for each account security failure.
- Map cleanly to HTTP status codes in whatever API layer hosts the service.
- Offer a consistent structure for logging.
"""

from typing import Final

__all__: Final = [
    "WardenError",
    "AuthenticationError",
    "InvalidCredentialsError",
    "AccountInactiveError",
    "InvalidSessionTokenError",
    "AccountAlreadyExistsError",
    "AlreadyVerifiedError",
    "RateLimitError",
    "LoginRateLimitedError",
    "TokenError",
    "InvalidTokenError",
    "InvalidOrExpiredTokenError",
    "ResetTokenExpiredError",
    "EmailServiceError",
    "TemplateRenderError",
    "DatabaseError",
]


class WardenError(Exception):
    """Base exception class for all custom errors in Warden.

    Attributes:
        message (str): A human-readable error message, suitable for logging.
                       This message is usually translated.
        code (str): A unique, machine-readable error code.
    """

    __slots__ = ("message", "code")

    def __init__(self, message: str, code: str = "generic_error"):
        self.message = message
        self.code = code
        Exception.__init__(self, self.message)

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Auth-related errors (typically map to 401 / 403)
# ---------------------------------------------------------------------------


class AuthenticationError(WardenError):
    """Raised for general authentication failures.

    Base for the more specific login errors. Maps to `401 Unauthorized`.
    """

    def __init__(self, message: str, code: str = "authentication_error"):
        super().__init__(message, code)


class InvalidCredentialsError(AuthenticationError):
    """Raised when the email is unknown or the password does not match.

    Both cases share one message so callers cannot enumerate accounts.
    """

    def __init__(self, message: str, code: str = "invalid_credentials"):
        super().__init__(message, code)


class AccountInactiveError(AuthenticationError):
    """Raised when a disabled account attempts to log in. Maps to `403 Forbidden`."""

    def __init__(self, message: str, code: str = "account_inactive"):
        super().__init__(message, code)


class InvalidSessionTokenError(AuthenticationError):
    """Raised when a session token fails signature or expiry checks."""

    def __init__(self, message: str, code: str = "invalid_session_token"):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Conflict errors (typically map to 409 Conflict / 400 Bad Request)
# ---------------------------------------------------------------------------


class AccountAlreadyExistsError(WardenError):
    """Raised when registering an email that already has an account."""

    def __init__(self, message: str, code: str = "account_already_exists"):
        super().__init__(message, code)


class AlreadyVerifiedError(WardenError):
    """Raised when a verification email is requested for a verified account."""

    def __init__(self, message: str, code: str = "email_already_verified"):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Rate limiting (typically maps to 429 Too Many Requests)
# ---------------------------------------------------------------------------


class RateLimitError(WardenError):
    """Base class for rate limiting related errors."""

    def __init__(self, message: str, code: str = "rate_limit_exceeded"):
        super().__init__(message, code)


class LoginRateLimitedError(RateLimitError):
    """Raised when an account has reached the maximum number of failed logins.

    Raised before the password is compared, so the correct password does not
    bypass the lockout.
    """

    def __init__(self, message: str, code: str = "too_many_login_attempts"):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# One-time token errors (typically map to 400 Bad Request)
# ---------------------------------------------------------------------------


class TokenError(WardenError):
    """Base class for verification and reset token failures."""

    def __init__(self, message: str, code: str = "token_error"):
        super().__init__(message, code)


class InvalidTokenError(TokenError):
    """Raised when a verification token matches no account."""

    def __init__(self, message: str, code: str = "invalid_verification_token"):
        super().__init__(message, code)


class InvalidOrExpiredTokenError(TokenError):
    """Raised when a password reset token matches no account."""

    def __init__(self, message: str, code: str = "invalid_or_expired_reset_token"):
        super().__init__(message, code)


class ResetTokenExpiredError(TokenError):
    """Raised when a matching password reset token is past its expiry."""

    def __init__(self, message: str, code: str = "reset_token_expired"):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Infrastructure errors (typically map to 500 / 503)
# ---------------------------------------------------------------------------


class EmailServiceError(WardenError):
    """Raised when an email cannot be delivered."""

    def __init__(self, message: str, code: str = "email_service_error"):
        super().__init__(message, code)


class TemplateRenderError(EmailServiceError):
    """Raised when an email template cannot be loaded or rendered."""

    def __init__(self, message: str, code: str = "template_render_error"):
        super().__init__(message, code)


class DatabaseError(WardenError):
    """Raised for low-level database interaction errors.

    Wraps driver errors so callers never see SQLAlchemy types.
    """

    def __init__(self, message: str, code: str = "database_error"):
        super().__init__(message, code)

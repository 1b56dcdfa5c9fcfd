"""Tunables of the account security service."""

from dataclasses import dataclass
from datetime import timedelta

from warden.core.config.settings import Settings, settings as default_settings
from warden.domain.policies.expiry import RESET_TOKEN_TTL


@dataclass(frozen=True)
class AccountSecurityConfig:
    """Immutable configuration value object.

    Attributes:
        max_login_attempts: Failed logins after which the account is rate limited.
        session_expiry: Session token lifetime without ``remember_me``.
        remember_me_expiry: Session token lifetime with ``remember_me``.
        reset_token_ttl: Lifetime of a password reset token.
    """

    max_login_attempts: int = 5
    session_expiry: str = "1d"
    remember_me_expiry: str = "30d"
    reset_token_ttl: timedelta = RESET_TOKEN_TTL

    def __post_init__(self) -> None:
        if self.max_login_attempts < 1:
            raise ValueError("max_login_attempts must be at least 1")

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "AccountSecurityConfig":
        settings = settings or default_settings
        return cls(
            max_login_attempts=settings.MAX_LOGIN_ATTEMPTS,
            session_expiry=settings.JWT_EXPIRATION,
            remember_me_expiry=settings.JWT_REMEMBER_ME_EXPIRATION,
        )

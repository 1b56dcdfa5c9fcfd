"""Authentication settings: session token signing, lockout and hashing.
"""

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings

from warden.utils.durations import parse_expiry


class AuthSettings(BaseSettings):
    """Defines settings for session tokens, brute-force lockout and password hashing.

    Security Note:
        - JWT_SECRET signs every session token. Keep it out of version control
          and rotate it if it leaks (OWASP A02:2021 - Cryptographic Failures).
        - BCRYPT_ROUNDS trades login latency against offline cracking cost; do not
          lower it below 10 outside of tests.
    """

    # Session token settings
    JWT_SECRET: SecretStr = SecretStr("")
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRATION: str = "1d"
    JWT_REMEMBER_ME_EXPIRATION: str = "30d"

    # Brute-force protection
    MAX_LOGIN_ATTEMPTS: int = Field(ge=1, default=5)

    # Password hashing
    BCRYPT_ROUNDS: int = Field(ge=4, le=31, default=10)

    @field_validator("JWT_EXPIRATION", "JWT_REMEMBER_ME_EXPIRATION")
    @classmethod
    def _validate_expiry(cls, v: str) -> str:
        """Rejects expiry strings the token issuer cannot parse."""
        parse_expiry(v)
        return v

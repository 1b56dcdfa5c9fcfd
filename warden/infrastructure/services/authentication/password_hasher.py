"""Bcrypt password hashing through passlib."""

import structlog
from passlib.context import CryptContext

from warden.core.config.settings import settings
from warden.domain.interfaces.services import IPasswordHasher

logger = structlog.get_logger(__name__)


class BcryptPasswordHasher(IPasswordHasher):
    """Hashes and verifies passwords with bcrypt.

    Security:
        - Salt is generated per hash by bcrypt
        - Verification uses bcrypt's constant-time comparison
        - The raw password is never logged
    """

    def __init__(self, rounds: int | None = None):
        self._rounds = rounds or settings.BCRYPT_ROUNDS
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=self._rounds,
        )

    @property
    def rounds(self) -> int:
        return self._rounds

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, password: str, hashed: str) -> bool:
        try:
            return self._context.verify(password, hashed)
        except ValueError:
            # Malformed or foreign hash in storage: treat as a mismatch.
            logger.warning("Stored password hash could not be parsed")
            return False

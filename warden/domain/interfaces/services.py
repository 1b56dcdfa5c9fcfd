"""Service interfaces consumed by the account security domain service.

Each port has exactly one production adapter in the infrastructure layer and
is replaced by a fake or mock in unit tests.
"""

from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Any, Dict, Union


class IPasswordHasher(ABC):
    """One-way password hashing."""

    @abstractmethod
    def hash(self, password: str) -> str:
        """Return a salted hash of ``password``."""
        raise NotImplementedError

    @abstractmethod
    def verify(self, password: str, hashed: str) -> bool:
        """Return True when ``password`` matches ``hashed``. Never raises on a mismatch."""
        raise NotImplementedError


class ITokenIssuer(ABC):
    """Issues and checks signed session tokens."""

    @abstractmethod
    def sign(self, payload: Dict[str, Any], expires_in: Union[str, int, timedelta]) -> str:
        """Sign ``payload`` into a token that expires after ``expires_in``."""
        raise NotImplementedError

    @abstractmethod
    def verify(self, token: str) -> Dict[str, Any]:
        """Return the payload of a valid token.

        Raises:
            InvalidSessionTokenError: If the signature or expiry check fails.
        """
        raise NotImplementedError


class ISecureTokenGenerator(ABC):
    """Source of unguessable single-use tokens."""

    @abstractmethod
    def generate(self) -> str:
        raise NotImplementedError


class INotifier(ABC):
    """Delivers account emails.

    Implementations may raise on failure; callers run them detached so a
    failure never reaches the end user.
    """

    @abstractmethod
    async def send_verification_email(self, email: str, token: str, language: str = "en") -> None:
        """Send the link that verifies ``email`` using ``token``."""
        raise NotImplementedError

    @abstractmethod
    async def send_password_reset_email(self, email: str, token: str, language: str = "en") -> None:
        """Send the link that resets the password of ``email`` using ``token``."""
        raise NotImplementedError

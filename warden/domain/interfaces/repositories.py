"""Repository interfaces for abstracting account persistence in the domain layer.

The domain layer talks to these ports only; concrete adapters live in
``warden.infrastructure.repositories``.
"""

import uuid
from abc import ABC, abstractmethod
from typing import Any, Optional

from warden.domain.entities.account import Account


class IAccountRepository(ABC):
    """An interface defining the contract for account persistence operations.

    All lookups return ``None`` when nothing matches. Email lookups are
    case-insensitive.
    """

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[Account]:
        """Retrieves an account by its email address (case-insensitively).

        Args:
            email: The email address to search for.

        Returns:
            An optional `Account` entity.
        """
        raise NotImplementedError

    @abstractmethod
    async def get_by_verification_token(self, token: str) -> Optional[Account]:
        """Retrieves the account holding an exact email verification token."""
        raise NotImplementedError

    @abstractmethod
    async def get_by_reset_token(self, token: str) -> Optional[Account]:
        """Retrieves the account holding an exact password reset token.

        Expiry is not checked here; that is a domain policy decision.
        """
        raise NotImplementedError

    @abstractmethod
    async def create(self, account: Account) -> Account:
        """Persists a new account.

        Args:
            account: The new `Account` entity.

        Returns:
            The persisted entity.

        Raises:
            AccountAlreadyExistsError: If the email is already taken.
            DatabaseError: On any other persistence failure.
        """
        raise NotImplementedError

    @abstractmethod
    async def update(self, account_id: uuid.UUID, **fields: Any) -> Account:
        """Applies a partial update to an account and returns its new state.

        Only the named fields change. Fields that must change together (reset
        token and its expiry, verified flag and its token) are passed in a
        single call so they are written atomically.

        Raises:
            DatabaseError: If the account does not exist or the write fails.
        """
        raise NotImplementedError

"""In-memory test doubles for the account security ports."""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from warden.core.exceptions import AccountAlreadyExistsError, DatabaseError, EmailServiceError
from warden.domain.entities.account import Account
from warden.domain.interfaces import IAccountRepository, INotifier


class InMemoryAccountRepository(IAccountRepository):
    """Dict-backed repository that records every write it receives."""

    def __init__(self) -> None:
        self.accounts: Dict[uuid.UUID, Account] = {}
        self.writes: List[Tuple[str, Dict[str, Any]]] = []

    async def get_by_email(self, email: str) -> Optional[Account]:
        normalized = email.strip().lower()
        return next((a for a in self.accounts.values() if a.email == normalized), None)

    async def get_by_verification_token(self, token: str) -> Optional[Account]:
        return next((a for a in self.accounts.values() if token and a.email_verification_token == token), None)

    async def get_by_reset_token(self, token: str) -> Optional[Account]:
        return next((a for a in self.accounts.values() if token and a.password_reset_token == token), None)

    async def create(self, account: Account) -> Account:
        account.email = account.email.strip().lower()
        if await self.get_by_email(account.email) is not None:
            raise AccountAlreadyExistsError("Email is already registered")
        self.writes.append(("create", {"email": account.email}))
        self.accounts[account.id] = account
        return account

    async def update(self, account_id: uuid.UUID, **fields: Any) -> Account:
        account = self.accounts.get(account_id)
        if account is None:
            raise DatabaseError(f"Account not found: {account_id}")
        self.writes.append(("update", dict(fields)))
        for name, value in fields.items():
            setattr(account, name, value)
        account.updated_at = datetime.now(timezone.utc)
        return account

    def add(self, account: Account) -> Account:
        """Seed an account without recording a write."""
        self.accounts[account.id] = account
        return account


class RecordingNotifier(INotifier):
    """Notifier that remembers what it was asked to send.

    With ``fail=True`` every send raises ``EmailServiceError`` after recording.
    """

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.sent: List[Tuple[str, str, str, str]] = []

    async def send_verification_email(self, email: str, token: str, language: str = "en") -> None:
        self.sent.append(("verification", email, token, language))
        if self.fail:
            raise EmailServiceError("SMTP unavailable")

    async def send_password_reset_email(self, email: str, token: str, language: str = "en") -> None:
        self.sent.append(("password_reset", email, token, language))
        if self.fail:
            raise EmailServiceError("SMTP unavailable")

    def of_kind(self, kind: str) -> List[Tuple[str, str, str, str]]:
        return [entry for entry in self.sent if entry[0] == kind]

"""Account Repository implementation using SQLAlchemy.

Implements ``IAccountRepository`` on an injected ``AsyncSession``. Emails are
normalized to lower case on the way in, driver errors are translated into
domain exceptions, and logs never contain a full email or token.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from warden.core.exceptions import AccountAlreadyExistsError, DatabaseError
from warden.domain.entities.account import Account
from warden.domain.interfaces.repositories import IAccountRepository
from warden.domain.value_objects.email import mask_email, mask_token
from warden.utils.i18n import get_translated_message

logger = get_logger(__name__)

_IMMUTABLE_FIELDS = frozenset({"id", "created_at"})


class AccountRepository(IAccountRepository):
    """SQLAlchemy implementation of the account repository.

    Every write commits its own transaction, so a successful ``update`` call is
    durable before the domain service moves on.
    """

    def __init__(self, db_session: AsyncSession):
        self.db_session = db_session

    async def get_by_email(self, email: str) -> Optional[Account]:
        normalized = email.strip().lower()
        account = await self._first(select(Account).where(Account.email == normalized), "get_by_email")
        logger.debug(
            "Account lookup by email completed",
            email=mask_email(normalized),
            found=account is not None,
        )
        return account

    async def get_by_verification_token(self, token: str) -> Optional[Account]:
        if not token:
            return None
        account = await self._first(
            select(Account).where(Account.email_verification_token == token),
            "get_by_verification_token",
        )
        logger.debug(
            "Account lookup by verification token completed",
            token=mask_token(token),
            found=account is not None,
        )
        return account

    async def get_by_reset_token(self, token: str) -> Optional[Account]:
        if not token:
            return None
        account = await self._first(
            select(Account).where(Account.password_reset_token == token),
            "get_by_reset_token",
        )
        logger.debug(
            "Account lookup by reset token completed",
            token=mask_token(token),
            found=account is not None,
        )
        return account

    async def create(self, account: Account) -> Account:
        account.email = account.email.strip().lower()
        try:
            self.db_session.add(account)
            await self.db_session.commit()
            await self.db_session.refresh(account)
        except IntegrityError as e:
            await self.db_session.rollback()
            logger.warning("Account creation rejected: email taken", email=mask_email(account.email))
            raise AccountAlreadyExistsError(get_translated_message("email_already_registered")) from e
        except SQLAlchemyError as e:
            await self.db_session.rollback()
            logger.error("Account creation failed", error=str(e), error_type=type(e).__name__)
            raise DatabaseError(f"Failed to create account: {e}") from e

        logger.info("Account created", account_id=str(account.id), email=mask_email(account.email))
        return account

    async def update(self, account_id: uuid.UUID, **fields: Any) -> Account:
        unknown = set(fields) - set(Account.model_fields)
        if unknown or _IMMUTABLE_FIELDS & set(fields):
            raise ValueError(f"Cannot update account fields: {sorted(unknown | (_IMMUTABLE_FIELDS & set(fields)))}")

        values = dict(fields)
        values["updated_at"] = datetime.now(timezone.utc)
        if "email" in values:
            values["email"] = values["email"].strip().lower()

        try:
            await self.db_session.execute(
                update(Account).where(Account.id == account_id).values(**values)
            )
            await self.db_session.commit()
            account = await self.db_session.get(Account, account_id, populate_existing=True)
        except SQLAlchemyError as e:
            await self.db_session.rollback()
            logger.error(
                "Account update failed",
                account_id=str(account_id),
                fields=sorted(fields),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise DatabaseError(f"Failed to update account: {e}") from e

        if account is None:
            logger.error("Account update targeted a missing account", account_id=str(account_id))
            raise DatabaseError(f"Account not found: {account_id}")

        logger.debug("Account updated", account_id=str(account_id), fields=sorted(fields))
        return account

    async def _first(self, statement, operation: str) -> Optional[Account]:
        try:
            result = await self.db_session.execute(statement)
            return result.scalars().first()
        except SQLAlchemyError as e:
            logger.error(
                "Account lookup failed",
                operation=operation,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise DatabaseError(f"Account lookup failed: {e}") from e

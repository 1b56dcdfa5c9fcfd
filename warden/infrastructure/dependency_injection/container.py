"""Composition root of the account security subsystem.

Wires the concrete infrastructure adapters into ``AccountSecurityService``.
Stateless adapters (hasher, token issuer, token generator, notifier) are
built once per process; the repository is built per database session.
"""

from functools import lru_cache

from sqlalchemy.ext.asyncio import AsyncSession

from warden.core.background import dispatcher
from warden.domain.interfaces import (
    IAccountRepository,
    INotifier,
    IPasswordHasher,
    ISecureTokenGenerator,
    ITokenIssuer,
)
from warden.domain.services.account_security import AccountSecurityConfig, AccountSecurityService
from warden.infrastructure.repositories.account_repository import AccountRepository
from warden.infrastructure.services.authentication.password_hasher import BcryptPasswordHasher
from warden.infrastructure.services.authentication.token_issuer import JwtTokenIssuer
from warden.infrastructure.services.email.email_notifier import EmailNotifier
from warden.infrastructure.services.secure_token_generator import SecureTokenGenerator


def get_account_repository(db: AsyncSession) -> IAccountRepository:
    return AccountRepository(db)


@lru_cache(maxsize=1)
def get_password_hasher() -> IPasswordHasher:
    return BcryptPasswordHasher()


@lru_cache(maxsize=1)
def get_token_issuer() -> ITokenIssuer:
    """Raises ValueError when JWT_SECRET is empty."""
    return JwtTokenIssuer()


@lru_cache(maxsize=1)
def get_token_generator() -> ISecureTokenGenerator:
    return SecureTokenGenerator()


@lru_cache(maxsize=1)
def get_notifier() -> INotifier:
    return EmailNotifier()


def build_account_security_service(db: AsyncSession) -> AccountSecurityService:
    """Build a service bound to ``db``.

    Example:
        async with get_async_db() as session:
            service = build_account_security_service(session)
            await service.login(LoginRequest(email=..., password=...))
    """
    return AccountSecurityService(
        account_repository=get_account_repository(db),
        notifier=get_notifier(),
        token_issuer=get_token_issuer(),
        password_hasher=get_password_hasher(),
        token_generator=get_token_generator(),
        config=AccountSecurityConfig.from_settings(),
        dispatcher=dispatcher,
    )

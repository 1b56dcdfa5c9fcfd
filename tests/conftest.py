import os

# Settings are read at import time; pin a test environment before warden loads.
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("JWT_SECRET", "test-secret-key-that-is-long-enough-for-hs256")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_JSON", "false")

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from warden.core.background import NotificationDispatcher
from warden.domain.services.account_security import AccountSecurityConfig, AccountSecurityService
from warden.infrastructure.services.authentication.password_hasher import BcryptPasswordHasher
from warden.infrastructure.services.authentication.token_issuer import JwtTokenIssuer
from warden.infrastructure.services.secure_token_generator import SecureTokenGenerator
from tests.fakes import InMemoryAccountRepository, RecordingNotifier

TEST_JWT_SECRET = "unit-test-secret-key-with-enough-entropy-0123456789"


@pytest.fixture
def password_hasher():
    # Minimum bcrypt cost keeps the suite fast.
    return BcryptPasswordHasher(rounds=4)


@pytest.fixture
def token_issuer():
    return JwtTokenIssuer(secret=TEST_JWT_SECRET, algorithm="HS256")


@pytest.fixture
def token_generator():
    return SecureTokenGenerator()


@pytest.fixture
def account_repository():
    return InMemoryAccountRepository()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def dispatcher():
    return NotificationDispatcher()


@pytest.fixture
def security_config():
    return AccountSecurityConfig(max_login_attempts=5, session_expiry="1d", remember_me_expiry="30d")


@pytest.fixture
def account_security_service(
    account_repository,
    notifier,
    token_issuer,
    password_hasher,
    token_generator,
    security_config,
    dispatcher,
):
    return AccountSecurityService(
        account_repository=account_repository,
        notifier=notifier,
        token_issuer=token_issuer,
        password_hasher=password_hasher,
        token_generator=token_generator,
        config=security_config,
        dispatcher=dispatcher,
    )


@pytest_asyncio.fixture
async def async_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def async_session(async_engine):
    session_factory = sessionmaker(bind=async_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

import uuid
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import Column, Field, SQLModel, String


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Account(SQLModel, table=True):
    """Represents an Account entity and acts as the Aggregate Root of the
    account security subsystem.

    The account owns its credential (a bcrypt hash, never the raw password),
    its brute-force counter and the two single-use tokens that drive email
    verification and password reset.

    Attributes:
        id: The unique identifier for the account.
        name: Display name.
        email: Unique email address, stored lower-cased.
        password_hash: The bcrypt hash of the password.
        cpf, phone, birth_date: Profile fields stored verbatim.
        is_active: Inactive accounts cannot log in.
        email_verified: Whether the email address has been confirmed.
        email_verification_token: Single-use verification token, cleared on use.
        password_reset_token: Single-use reset token, set together with
            ``password_reset_expires`` and cleared together with it.
        password_reset_expires: Expiry of the reset token.
        failed_login_attempts: Consecutive failed logins since the last success.
        last_failed_login: Timestamp of the most recent failed login.
        created_at: When the account was created.
        updated_at: When the account was last modified.
    """

    __tablename__ = "accounts"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        description="The unique identifier for the account.",
    )
    name: str = Field(max_length=255, description="Display name.")
    email: str = Field(
        sa_column=Column(String(320), unique=True, index=True, nullable=False),
        description="Unique, lower-cased email address used for login.",
    )
    password_hash: str = Field(max_length=255, description="Bcrypt hash of the password.")

    cpf: Optional[str] = Field(default=None, max_length=20)
    phone: Optional[str] = Field(default=None, max_length=32)
    birth_date: Optional[date] = Field(default=None)

    is_active: bool = Field(default=True)
    email_verified: bool = Field(default=False)
    email_verification_token: Optional[str] = Field(default=None, max_length=64, index=True)

    password_reset_token: Optional[str] = Field(default=None, max_length=64, index=True)
    password_reset_expires: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True),
    )

    failed_login_attempts: int = Field(default=0, ge=0)
    last_failed_login: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True),
    )

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )

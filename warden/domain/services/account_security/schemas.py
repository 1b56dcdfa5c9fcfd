"""Request and response models of the account security operations."""

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from warden.domain.entities.account import Account

PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 128

# ---------------------------------------------------------------------------
# Requests ------------------------------------------------------------------
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Input of ``register``. Profile fields are stored as given."""

    name: str = Field(..., min_length=1, max_length=255, examples=["Ana Souza"])
    email: EmailStr = Field(..., examples=["ana@example.com"])
    password: str = Field(
        ..., min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH, examples=["Secret123"]
    )
    cpf: Optional[str] = Field(default=None, max_length=20, examples=["123.456.789-09"])
    phone: Optional[str] = Field(default=None, max_length=32, examples=["+55 11 91234-5678"])
    birth_date: Optional[date] = Field(default=None, examples=["1990-05-17"])


class LoginRequest(BaseModel):
    """Input of ``login``. ``remember_me`` selects the long session expiry."""

    email: EmailStr = Field(..., examples=["ana@example.com"])
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LENGTH)
    remember_me: bool = False


class VerifyEmailRequest(BaseModel):
    token: str = Field(..., min_length=1, max_length=128, description="Verification token received via email")


class ResendVerificationRequest(BaseModel):
    email: EmailStr = Field(..., examples=["ana@example.com"])


class ForgotPasswordRequest(BaseModel):
    email: EmailStr = Field(
        ...,
        examples=["ana@example.com"],
        description="Email address to send password reset instructions to",
    )


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1, max_length=128, description="Password reset token received via email")
    new_password: str = Field(..., min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)


# ---------------------------------------------------------------------------
# Responses -----------------------------------------------------------------
# ---------------------------------------------------------------------------


class AccountOut(BaseModel):
    """Public projection of an :class:`~warden.domain.entities.account.Account`.

    The password hash and both one-time tokens are never part of it.
    """

    id: uuid.UUID
    name: str
    email: str
    cpf: Optional[str] = None
    phone: Optional[str] = None
    birth_date: Optional[date] = None
    is_active: bool = True
    email_verified: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

    @classmethod
    def from_entity(cls, account: Account) -> "AccountOut":
        return cls.model_validate(account)


class AuthResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    account: AccountOut


class MessageResponse(BaseModel):
    message: str

"""Account Security Service.

Orchestrates registration, login with brute-force lockout, email
verification and the password reset token lifecycle. Persistence, hashing,
token signing and email delivery are injected through domain interfaces.

Enumeration safety:
    ``login`` reports an unknown email and a wrong password with the same
    error, and ``forgot_password`` / ``resend_verification`` return the same
    message whether or not the email is registered.
"""

import secrets
from datetime import datetime, timezone
from functools import partial
from typing import Optional

import structlog

from warden.core.background import NotificationDispatcher
from warden.core.exceptions import (
    AccountAlreadyExistsError,
    AccountInactiveError,
    AlreadyVerifiedError,
    InvalidCredentialsError,
    InvalidOrExpiredTokenError,
    InvalidTokenError,
    LoginRateLimitedError,
    ResetTokenExpiredError,
)
from warden.domain.entities.account import Account
from warden.domain.interfaces.repositories import IAccountRepository
from warden.domain.interfaces.services import (
    INotifier,
    IPasswordHasher,
    ISecureTokenGenerator,
    ITokenIssuer,
)
from warden.domain.policies.expiry import is_reset_token_expired, reset_token_expiry
from warden.domain.policies.lockout import is_locked_out
from warden.domain.services.account_security.config import AccountSecurityConfig
from warden.domain.services.account_security.schemas import (
    AccountOut,
    AuthResponse,
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    ResendVerificationRequest,
    ResetPasswordRequest,
    VerifyEmailRequest,
)
from warden.domain.value_objects.email import Email, mask_token
from warden.utils.i18n import get_translated_message

logger = structlog.get_logger(__name__)


def _tokens_match(stored: Optional[str], supplied: str) -> bool:
    if not stored:
        return False
    return secrets.compare_digest(stored.encode("utf-8"), supplied.encode("utf-8"))


class AccountSecurityService:
    """Domain service implementing the six account security operations.

    Every operation either completes or raises a ``WardenError`` subclass, and
    no operation writes to the repository before its checks have passed.
    Emails are handed to the dispatcher, so a delivery failure is logged and
    never reaches the caller.
    """

    def __init__(
        self,
        account_repository: IAccountRepository,
        notifier: INotifier,
        token_issuer: ITokenIssuer,
        password_hasher: IPasswordHasher,
        token_generator: ISecureTokenGenerator,
        config: Optional[AccountSecurityConfig] = None,
        dispatcher: Optional[NotificationDispatcher] = None,
    ):
        self._account_repository = account_repository
        self._notifier = notifier
        self._token_issuer = token_issuer
        self._password_hasher = password_hasher
        self._token_generator = token_generator
        self._config = config or AccountSecurityConfig()
        self._dispatcher = dispatcher or NotificationDispatcher()
        self._dummy_password_hash: Optional[str] = None

    @property
    def dispatcher(self) -> NotificationDispatcher:
        return self._dispatcher

    # ------------------------------------------------------------------
    # Registration and login
    # ------------------------------------------------------------------

    async def register(self, request: RegisterRequest, language: str = "en") -> AuthResponse:
        """Create an unverified account and return a session for it.

        Raises:
            AccountAlreadyExistsError: If the email is already registered.
        """
        email = Email(request.email)
        if await self._account_repository.get_by_email(email.value) is not None:
            logger.warning("Registration rejected: email taken", email=email.mask_for_logging())
            raise AccountAlreadyExistsError(get_translated_message("email_already_registered", language))

        verification_token = self._token_generator.generate()
        account = await self._account_repository.create(
            Account(
                name=request.name,
                email=email.value,
                password_hash=self._password_hasher.hash(request.password),
                cpf=request.cpf,
                phone=request.phone,
                birth_date=request.birth_date,
                email_verified=False,
                email_verification_token=verification_token,
                failed_login_attempts=0,
            )
        )

        access_token = self._issue_session(account, remember_me=False)
        self._dispatcher.dispatch(
            partial(self._notifier.send_verification_email, account.email, verification_token, language),
            operation="send_verification_email",
            account_id=str(account.id),
            email=email.mask_for_logging(),
        )

        logger.info("Account registered", account_id=str(account.id), email=email.mask_for_logging())
        return AuthResponse(access_token=access_token, account=AccountOut.from_entity(account))

    async def login(self, request: LoginRequest, language: str = "en") -> AuthResponse:
        """Authenticate with email and password.

        Checks run in order: account exists, account active, lockout, password.
        Every password mismatch increments the failed-attempt counter.

        Raises:
            InvalidCredentialsError: Unknown email or wrong password.
            AccountInactiveError: The account is disabled.
            LoginRateLimitedError: Too many consecutive failed attempts.
        """
        invalid = InvalidCredentialsError(get_translated_message("invalid_credentials", language))
        try:
            email = Email(request.email)
        except ValueError:
            self._verify_against_dummy_hash(request.password)
            raise invalid

        account = await self._account_repository.get_by_email(email.value)
        if account is None:
            self._verify_against_dummy_hash(request.password)
            logger.info("Login failed: unknown email", email=email.mask_for_logging())
            raise invalid

        if not account.is_active:
            logger.warning("Login rejected: inactive account", account_id=str(account.id))
            raise AccountInactiveError(get_translated_message("account_inactive", language))

        if is_locked_out(account.failed_login_attempts, self._config.max_login_attempts):
            logger.warning(
                "Login rejected: account locked out",
                account_id=str(account.id),
                failed_attempts=account.failed_login_attempts,
            )
            raise LoginRateLimitedError(get_translated_message("too_many_login_attempts", language))

        if not self._password_hasher.verify(request.password, account.password_hash):
            attempts = account.failed_login_attempts + 1
            await self._account_repository.update(
                account.id,
                failed_login_attempts=attempts,
                last_failed_login=datetime.now(timezone.utc),
            )
            logger.info("Login failed: wrong password", account_id=str(account.id), failed_attempts=attempts)
            raise invalid

        account = await self._account_repository.update(
            account.id,
            failed_login_attempts=0,
            last_failed_login=None,
        )
        access_token = self._issue_session(account, remember_me=request.remember_me)

        logger.info("Login succeeded", account_id=str(account.id), remember_me=request.remember_me)
        return AuthResponse(access_token=access_token, account=AccountOut.from_entity(account))

    # ------------------------------------------------------------------
    # Email verification
    # ------------------------------------------------------------------

    async def verify_email(self, request: VerifyEmailRequest, language: str = "en") -> MessageResponse:
        """Mark the account holding ``request.token`` as verified.

        The token is single use; replaying it raises ``InvalidTokenError``.
        """
        account = await self._account_repository.get_by_verification_token(request.token)
        if account is None or not _tokens_match(account.email_verification_token, request.token):
            logger.warning("Email verification rejected", token=mask_token(request.token))
            raise InvalidTokenError(get_translated_message("invalid_verification_token", language))

        await self._account_repository.update(
            account.id,
            email_verified=True,
            email_verification_token=None,
        )

        logger.info("Email verified", account_id=str(account.id))
        return MessageResponse(message=get_translated_message("email_verified_successfully", language))

    async def resend_verification(
        self, request: ResendVerificationRequest, language: str = "en"
    ) -> MessageResponse:
        """Issue a fresh verification token and email it.

        Unknown emails get the same response as unverified accounts.

        Raises:
            AlreadyVerifiedError: The account has already been verified.
        """
        generic = MessageResponse(message=get_translated_message("verification_email_generic", language))
        try:
            email = Email(request.email)
        except ValueError:
            return generic

        account = await self._account_repository.get_by_email(email.value)
        if account is None:
            logger.info("Verification resend for unknown email", email=email.mask_for_logging())
            return generic

        if account.email_verified:
            raise AlreadyVerifiedError(get_translated_message("email_already_verified", language))

        verification_token = self._token_generator.generate()
        await self._account_repository.update(account.id, email_verification_token=verification_token)
        self._dispatcher.dispatch(
            partial(self._notifier.send_verification_email, account.email, verification_token, language),
            operation="send_verification_email",
            account_id=str(account.id),
            email=email.mask_for_logging(),
        )

        logger.info("Verification token reissued", account_id=str(account.id))
        return generic

    # ------------------------------------------------------------------
    # Password reset
    # ------------------------------------------------------------------

    async def forgot_password(self, request: ForgotPasswordRequest, language: str = "en") -> MessageResponse:
        """Issue a password reset token valid for the configured TTL and email it.

        Always returns the same message; unknown emails cause no side effects.
        """
        generic = MessageResponse(message=get_translated_message("password_reset_generic", language))
        try:
            email = Email(request.email)
        except ValueError:
            return generic

        account = await self._account_repository.get_by_email(email.value)
        if account is None:
            logger.info("Password reset requested for unknown email", email=email.mask_for_logging())
            return generic

        reset_token = self._token_generator.generate()
        await self._account_repository.update(
            account.id,
            password_reset_token=reset_token,
            password_reset_expires=reset_token_expiry(ttl=self._config.reset_token_ttl),
        )
        self._dispatcher.dispatch(
            partial(self._notifier.send_password_reset_email, account.email, reset_token, language),
            operation="send_password_reset_email",
            account_id=str(account.id),
            email=email.mask_for_logging(),
        )

        logger.info("Password reset token issued", account_id=str(account.id))
        return generic

    async def reset_password(self, request: ResetPasswordRequest, language: str = "en") -> MessageResponse:
        """Replace the password of the account holding ``request.token``.

        Consumes the token, clears it with its expiry and unlocks the account.

        Raises:
            InvalidOrExpiredTokenError: No account holds the token.
            ResetTokenExpiredError: The token exists but has expired.
        """
        account = await self._account_repository.get_by_reset_token(request.token)
        if account is None or not _tokens_match(account.password_reset_token, request.token):
            logger.warning("Password reset rejected: unknown token", token=mask_token(request.token))
            raise InvalidOrExpiredTokenError(get_translated_message("invalid_or_expired_reset_token", language))

        if is_reset_token_expired(account.password_reset_expires):
            logger.warning("Password reset rejected: token expired", account_id=str(account.id))
            raise ResetTokenExpiredError(get_translated_message("reset_token_expired", language))

        await self._account_repository.update(
            account.id,
            password_hash=self._password_hasher.hash(request.new_password),
            password_reset_token=None,
            password_reset_expires=None,
            failed_login_attempts=0,
        )

        logger.info("Password reset completed", account_id=str(account.id))
        return MessageResponse(message=get_translated_message("password_reset_success", language))

    def _verify_against_dummy_hash(self, password: str) -> None:
        # Unknown emails pay the same bcrypt cost as a wrong password.
        if self._dummy_password_hash is None:
            self._dummy_password_hash = self._password_hasher.hash(secrets.token_hex(16))
        self._password_hasher.verify(password, self._dummy_password_hash)

    def _issue_session(self, account: Account, remember_me: bool) -> str:
        expires_in = self._config.remember_me_expiry if remember_me else self._config.session_expiry
        return self._token_issuer.sign({"sub": str(account.id), "email": account.email}, expires_in)

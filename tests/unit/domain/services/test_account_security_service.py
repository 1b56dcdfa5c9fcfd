"""Tests for AccountSecurityService.

Behavioural tests run against the in-memory repository and recording
notifier; tests that assert the absence of writes use AsyncMock ports.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, Mock

import pytest

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
from warden.domain.services.account_security import AccountSecurityConfig, AccountSecurityService
from warden.domain.services.account_security.schemas import (
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResendVerificationRequest,
    ResetPasswordRequest,
    VerifyEmailRequest,
)
from tests.factories.account import create_fake_account
from tests.fakes import RecordingNotifier

PASSWORD = "Secret123"


@pytest.fixture
def register_request():
    return RegisterRequest(
        name="Ana Souza",
        email="Ana@Example.com",
        password=PASSWORD,
        cpf="123.456.789-09",
        phone="+55 11 91234-5678",
    )


@pytest.fixture
def stored_account(account_repository, password_hasher):
    """An active, unverified account whose password is PASSWORD."""
    return account_repository.add(
        create_fake_account(email="member@example.com", password_hash=password_hasher.hash(PASSWORD))
    )


@pytest.fixture
def mock_repository():
    return AsyncMock()


@pytest.fixture
def mock_notifier():
    return AsyncMock()


@pytest.fixture
def mocked_service(mock_repository, mock_notifier, token_issuer, password_hasher, token_generator):
    """Service whose repository and notifier are mocks."""
    return make_service(mock_repository, mock_notifier, token_issuer, password_hasher, token_generator)


def make_service(repository, notifier, token_issuer, password_hasher, token_generator):
    return AccountSecurityService(
        account_repository=repository,
        notifier=notifier,
        token_issuer=token_issuer,
        password_hasher=password_hasher,
        token_generator=token_generator,
        config=AccountSecurityConfig(),
        dispatcher=NotificationDispatcher(),
    )


class TestRegister:
    @pytest.mark.asyncio
    async def test_creates_unverified_account_and_returns_session(
        self, account_security_service, account_repository, token_issuer, password_hasher, register_request
    ):
        response = await account_security_service.register(register_request)

        account = await account_repository.get_by_email("ana@example.com")
        assert account is not None
        assert account.email == "ana@example.com"
        assert account.email_verified is False
        assert account.failed_login_attempts == 0
        assert account.cpf == "123.456.789-09"
        assert account.phone == "+55 11 91234-5678"
        assert account.password_hash != PASSWORD
        assert password_hasher.verify(PASSWORD, account.password_hash)
        assert len(account.email_verification_token) == 64

        claims = token_issuer.verify(response.access_token)
        assert claims["sub"] == str(account.id)
        assert claims["email"] == "ana@example.com"
        assert timedelta(hours=23) < datetime.fromtimestamp(claims["exp"], timezone.utc) - datetime.now(
            timezone.utc
        ) <= timedelta(days=1)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("email", ["o'brien@example.com", "josé@example.com", "a@example.xn--p1ai"])
    async def test_any_address_accepted_by_the_request_model_can_register_and_login(
        self, account_security_service, email
    ):
        registered = await account_security_service.register(
            RegisterRequest(name="X", email=email, password=PASSWORD)
        )

        session = await account_security_service.login(LoginRequest(email=email, password=PASSWORD))

        assert session.account.id == registered.account.id
        assert session.account.email == registered.account.email

    @pytest.mark.asyncio
    async def test_response_never_exposes_secrets(self, account_security_service, register_request):
        response = await account_security_service.register(register_request)

        dumped = response.model_dump()["account"]
        assert "password_hash" not in dumped
        assert "email_verification_token" not in dumped
        assert "password_reset_token" not in dumped
        assert dumped["email"] == "ana@example.com"

    @pytest.mark.asyncio
    async def test_sends_verification_email_with_stored_token(
        self, account_security_service, account_repository, notifier, dispatcher, register_request
    ):
        await account_security_service.register(register_request, language="pt_BR")
        await dispatcher.drain()

        account = await account_repository.get_by_email("ana@example.com")
        assert notifier.sent == [("verification", "ana@example.com", account.email_verification_token, "pt_BR")]

    @pytest.mark.asyncio
    async def test_notifier_failure_does_not_fail_registration(
        self, account_repository, token_issuer, password_hasher, token_generator, register_request
    ):
        dispatcher = NotificationDispatcher()
        service = AccountSecurityService(
            account_repository=account_repository,
            notifier=RecordingNotifier(fail=True),
            token_issuer=token_issuer,
            password_hasher=password_hasher,
            token_generator=token_generator,
            dispatcher=dispatcher,
        )

        response = await service.register(register_request)
        await dispatcher.drain()

        assert response.access_token
        assert await account_repository.get_by_email("ana@example.com") is not None

    @pytest.mark.asyncio
    async def test_duplicate_email_is_rejected_case_insensitively(
        self, account_security_service, account_repository, stored_account
    ):
        writes_before = list(account_repository.writes)

        with pytest.raises(AccountAlreadyExistsError) as exc_info:
            await account_security_service.register(
                RegisterRequest(name="Other", email="MEMBER@example.com", password=PASSWORD)
            )

        assert exc_info.value.code == "account_already_exists"
        assert account_repository.writes == writes_before

    @pytest.mark.asyncio
    async def test_duplicate_email_never_calls_create_or_update(self, mocked_service, mock_repository):
        mock_repository.get_by_email.return_value = create_fake_account(email="member@example.com")

        with pytest.raises(AccountAlreadyExistsError):
            await mocked_service.register(
                RegisterRequest(name="Other", email="member@example.com", password=PASSWORD)
            )

        mock_repository.create.assert_not_awaited()
        mock_repository.update.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_duplicate_email_message_is_translated(self, account_security_service, stored_account):
        with pytest.raises(AccountAlreadyExistsError) as exc_info:
            await account_security_service.register(
                RegisterRequest(name="Other", email="member@example.com", password=PASSWORD),
                language="pt_BR",
            )

        assert exc_info.value.message == "Email já registrado"


class TestLogin:
    @pytest.mark.asyncio
    async def test_register_then_login_succeeds(self, account_security_service, register_request):
        registered = await account_security_service.register(register_request)

        response = await account_security_service.login(
            LoginRequest(email="ana@example.com", password=PASSWORD)
        )

        assert response.account.id == registered.account.id
        assert response.access_token

    @pytest.mark.asyncio
    async def test_unknown_email_and_wrong_password_share_one_error(
        self, account_security_service, stored_account
    ):
        with pytest.raises(InvalidCredentialsError) as unknown:
            await account_security_service.login(LoginRequest(email="ghost@example.com", password=PASSWORD))
        with pytest.raises(InvalidCredentialsError) as wrong:
            await account_security_service.login(LoginRequest(email="member@example.com", password="nope"))

        assert unknown.value.message == wrong.value.message
        assert unknown.value.code == wrong.value.code == "invalid_credentials"

    @pytest.mark.asyncio
    async def test_unknown_email_still_runs_a_password_check(
        self, account_security_service, password_hasher, mocker
    ):
        verify = mocker.spy(password_hasher, "verify")

        with pytest.raises(InvalidCredentialsError):
            await account_security_service.login(LoginRequest(email="ghost@example.com", password=PASSWORD))
        with pytest.raises(InvalidCredentialsError):
            await account_security_service.login(LoginRequest(email="ghost@example.com", password="other"))

        assert verify.call_count == 2
        assert verify.call_args_list[0].args[0] == PASSWORD
        # The throwaway hash is computed once and reused.
        assert verify.call_args_list[0].args[1] == verify.call_args_list[1].args[1]

    @pytest.mark.asyncio
    async def test_unknown_email_writes_nothing(self, mocked_service, mock_repository):
        mock_repository.get_by_email.return_value = None

        with pytest.raises(InvalidCredentialsError):
            await mocked_service.login(LoginRequest(email="ghost@example.com", password=PASSWORD))

        mock_repository.update.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_wrong_password_increments_counter(self, account_security_service, stored_account):
        with pytest.raises(InvalidCredentialsError):
            await account_security_service.login(LoginRequest(email="member@example.com", password="wrong-pass"))

        assert stored_account.failed_login_attempts == 1
        assert stored_account.last_failed_login is not None

    @pytest.mark.asyncio
    async def test_inactive_account_is_rejected_before_password_check(
        self, account_security_service, account_repository, password_hasher
    ):
        account = account_repository.add(
            create_fake_account(
                email="off@example.com", password_hash=password_hasher.hash(PASSWORD), is_active=False
            )
        )

        with pytest.raises(AccountInactiveError):
            await account_security_service.login(LoginRequest(email="off@example.com", password="wrong-pass"))

        assert account.failed_login_attempts == 0
        assert account_repository.writes == []

    @pytest.mark.asyncio
    async def test_lockout_applies_even_with_correct_password(self, account_security_service, stored_account):
        for _ in range(5):
            with pytest.raises(InvalidCredentialsError):
                await account_security_service.login(
                    LoginRequest(email="member@example.com", password="wrong-pass")
                )

        with pytest.raises(LoginRateLimitedError) as exc_info:
            await account_security_service.login(LoginRequest(email="member@example.com", password=PASSWORD))

        assert exc_info.value.code == "too_many_login_attempts"
        assert stored_account.failed_login_attempts == 5

    @pytest.mark.asyncio
    async def test_locked_out_login_does_not_compare_password(
        self, mock_repository, token_issuer, token_generator
    ):
        hasher = Mock()
        service = make_service(mock_repository, AsyncMock(), token_issuer, hasher, token_generator)
        mock_repository.get_by_email.return_value = create_fake_account(failed_login_attempts=5)

        with pytest.raises(LoginRateLimitedError):
            await service.login(LoginRequest(email="member@example.com", password=PASSWORD))

        hasher.verify.assert_not_called()
        mock_repository.update.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_success_resets_counter_and_clears_last_failure(self, account_security_service, stored_account):
        stored_account.failed_login_attempts = 3
        stored_account.last_failed_login = datetime.now(timezone.utc)

        response = await account_security_service.login(
            LoginRequest(email="member@example.com", password=PASSWORD)
        )

        assert stored_account.failed_login_attempts == 0
        assert stored_account.last_failed_login is None
        assert "password_hash" not in response.account.model_dump()

    @pytest.mark.asyncio
    async def test_remember_me_issues_long_session(self, account_security_service, token_issuer, stored_account):
        short = await account_security_service.login(LoginRequest(email="member@example.com", password=PASSWORD))
        long = await account_security_service.login(
            LoginRequest(email="member@example.com", password=PASSWORD, remember_me=True)
        )

        short_exp = token_issuer.verify(short.access_token)["exp"]
        long_exp = token_issuer.verify(long.access_token)["exp"]
        assert timedelta(days=28) < timedelta(seconds=long_exp - short_exp) < timedelta(days=30)


class TestVerifyEmail:
    @pytest.mark.asyncio
    async def test_marks_verified_and_clears_token(self, account_security_service, account_repository):
        account = account_repository.add(create_fake_account(email_verification_token="a" * 64))

        response = await account_security_service.verify_email(VerifyEmailRequest(token="a" * 64))

        assert response.message == "Email verified successfully"
        assert account.email_verified is True
        assert account.email_verification_token is None

    @pytest.mark.asyncio
    async def test_replay_fails(self, account_security_service, account_repository):
        account_repository.add(create_fake_account(email_verification_token="b" * 64))
        await account_security_service.verify_email(VerifyEmailRequest(token="b" * 64))

        with pytest.raises(InvalidTokenError) as exc_info:
            await account_security_service.verify_email(VerifyEmailRequest(token="b" * 64))

        assert exc_info.value.code == "invalid_verification_token"

    @pytest.mark.asyncio
    async def test_unknown_token_writes_nothing(self, mocked_service, mock_repository):
        mock_repository.get_by_verification_token.return_value = None

        with pytest.raises(InvalidTokenError):
            await mocked_service.verify_email(VerifyEmailRequest(token="unknown"))

        mock_repository.update.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_repository_match_is_rechecked(self, mocked_service, mock_repository):
        mock_repository.get_by_verification_token.return_value = create_fake_account(
            email_verification_token="c" * 64
        )

        with pytest.raises(InvalidTokenError):
            await mocked_service.verify_email(VerifyEmailRequest(token="d" * 64))

        mock_repository.update.assert_not_awaited()


class TestResendVerification:
    @pytest.mark.asyncio
    async def test_unknown_and_unverified_get_identical_message(
        self, account_security_service, notifier, dispatcher, stored_account
    ):
        unknown = await account_security_service.resend_verification(
            ResendVerificationRequest(email="ghost@example.com")
        )
        known = await account_security_service.resend_verification(
            ResendVerificationRequest(email="member@example.com")
        )
        await dispatcher.drain()

        assert unknown.message == known.message
        assert [entry[1] for entry in notifier.sent] == ["member@example.com"]

    @pytest.mark.asyncio
    async def test_replaces_token(self, account_security_service, notifier, dispatcher, stored_account):
        stored_account.email_verification_token = "old" + "0" * 61

        await account_security_service.resend_verification(ResendVerificationRequest(email="member@example.com"))
        await dispatcher.drain()

        assert stored_account.email_verification_token != "old" + "0" * 61
        assert notifier.sent[0][2] == stored_account.email_verification_token

    @pytest.mark.asyncio
    async def test_already_verified_raises(self, account_security_service, account_repository, notifier):
        account_repository.add(create_fake_account(email="done@example.com", email_verified=True))

        with pytest.raises(AlreadyVerifiedError):
            await account_security_service.resend_verification(ResendVerificationRequest(email="done@example.com"))

        assert notifier.sent == []
        assert account_repository.writes == []

    @pytest.mark.asyncio
    async def test_notifier_failure_is_not_surfaced(
        self, account_repository, token_issuer, password_hasher, token_generator, stored_account
    ):
        dispatcher = NotificationDispatcher()
        service = AccountSecurityService(
            account_repository=account_repository,
            notifier=RecordingNotifier(fail=True),
            token_issuer=token_issuer,
            password_hasher=password_hasher,
            token_generator=token_generator,
            dispatcher=dispatcher,
        )

        response = await service.resend_verification(ResendVerificationRequest(email="member@example.com"))
        await dispatcher.drain()

        assert response.message


class TestForgotPassword:
    @pytest.mark.asyncio
    async def test_identical_message_for_known_and_unknown(
        self, account_security_service, notifier, dispatcher, stored_account
    ):
        unknown = await account_security_service.forgot_password(ForgotPasswordRequest(email="ghost@example.com"))
        known = await account_security_service.forgot_password(ForgotPasswordRequest(email="member@example.com"))
        await dispatcher.drain()

        assert unknown.message == known.message
        assert notifier.of_kind("password_reset") == [
            ("password_reset", "member@example.com", stored_account.password_reset_token, "en")
        ]

    @pytest.mark.asyncio
    async def test_sets_token_and_one_hour_expiry_together(
        self, account_security_service, account_repository, stored_account
    ):
        before = datetime.now(timezone.utc)

        await account_security_service.forgot_password(ForgotPasswordRequest(email="member@example.com"))

        assert len(stored_account.password_reset_token) == 64
        assert before + timedelta(hours=1) <= stored_account.password_reset_expires
        assert stored_account.password_reset_expires <= datetime.now(timezone.utc) + timedelta(hours=1)
        op, fields = account_repository.writes[-1]
        assert op == "update"
        assert set(fields) == {"password_reset_token", "password_reset_expires"}

    @pytest.mark.asyncio
    async def test_unknown_email_has_no_side_effects(self, mocked_service, mock_repository, mock_notifier):
        mock_repository.get_by_email.return_value = None

        await mocked_service.forgot_password(ForgotPasswordRequest(email="ghost@example.com"))
        await mocked_service.dispatcher.drain()

        mock_repository.update.assert_not_awaited()
        mock_notifier.send_password_reset_email.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_new_request_supersedes_previous_token(self, account_security_service, stored_account):
        await account_security_service.forgot_password(ForgotPasswordRequest(email="member@example.com"))
        first = stored_account.password_reset_token
        await account_security_service.forgot_password(ForgotPasswordRequest(email="member@example.com"))

        with pytest.raises(InvalidOrExpiredTokenError):
            await account_security_service.reset_password(
                ResetPasswordRequest(token=first, new_password="Another123")
            )


class TestResetPassword:
    @pytest.mark.asyncio
    async def test_valid_token_swaps_hash_and_unlocks(
        self, account_security_service, account_repository, password_hasher, stored_account
    ):
        stored_account.failed_login_attempts = 5
        stored_account.password_reset_token = "e" * 64
        stored_account.password_reset_expires = datetime.now(timezone.utc) + timedelta(minutes=30)

        response = await account_security_service.reset_password(
            ResetPasswordRequest(token="e" * 64, new_password="NewSecret456")
        )

        assert response.message == "Password reset successfully"
        assert stored_account.password_reset_token is None
        assert stored_account.password_reset_expires is None
        assert stored_account.failed_login_attempts == 0
        assert password_hasher.verify("NewSecret456", stored_account.password_hash)
        assert not password_hasher.verify(PASSWORD, stored_account.password_hash)

        with pytest.raises(InvalidCredentialsError):
            await account_security_service.login(LoginRequest(email="member@example.com", password=PASSWORD))
        assert await account_security_service.login(
            LoginRequest(email="member@example.com", password="NewSecret456")
        )

    @pytest.mark.asyncio
    async def test_expired_token_keeps_hash(self, account_security_service, account_repository, stored_account):
        original_hash = stored_account.password_hash
        stored_account.password_reset_token = "f" * 64
        stored_account.password_reset_expires = datetime.now(timezone.utc) - timedelta(seconds=1)

        with pytest.raises(ResetTokenExpiredError) as exc_info:
            await account_security_service.reset_password(
                ResetPasswordRequest(token="f" * 64, new_password="NewSecret456")
            )

        assert exc_info.value.code == "reset_token_expired"
        assert stored_account.password_hash == original_hash
        assert account_repository.writes == []

    @pytest.mark.asyncio
    async def test_token_without_expiry_counts_as_expired(self, account_security_service, stored_account):
        stored_account.password_reset_token = "9" * 64
        stored_account.password_reset_expires = None

        with pytest.raises(ResetTokenExpiredError):
            await account_security_service.reset_password(
                ResetPasswordRequest(token="9" * 64, new_password="NewSecret456")
            )

    @pytest.mark.asyncio
    async def test_unknown_token(self, mocked_service, mock_repository):
        mock_repository.get_by_reset_token.return_value = None

        with pytest.raises(InvalidOrExpiredTokenError) as exc_info:
            await mocked_service.reset_password(ResetPasswordRequest(token="nope", new_password="NewSecret456"))

        assert exc_info.value.code == "invalid_or_expired_reset_token"
        mock_repository.update.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_token_is_single_use(self, account_security_service, stored_account):
        stored_account.password_reset_token = "1" * 64
        stored_account.password_reset_expires = datetime.now(timezone.utc) + timedelta(minutes=5)
        await account_security_service.reset_password(ResetPasswordRequest(token="1" * 64, new_password="First123"))

        with pytest.raises(InvalidOrExpiredTokenError):
            await account_security_service.reset_password(
                ResetPasswordRequest(token="1" * 64, new_password="Second123")
            )

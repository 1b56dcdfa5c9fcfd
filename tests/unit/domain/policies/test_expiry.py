from datetime import datetime, timedelta, timezone

from warden.domain.policies.expiry import RESET_TOKEN_TTL, is_reset_token_expired, reset_token_expiry

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


class TestIsResetTokenExpired:
    def test_future_expiry_is_valid(self):
        assert is_reset_token_expired(NOW + timedelta(seconds=1), now=NOW) is False

    def test_past_expiry_is_expired(self):
        assert is_reset_token_expired(NOW - timedelta(seconds=1), now=NOW) is True

    def test_expiry_equal_to_now_is_still_valid(self):
        assert is_reset_token_expired(NOW, now=NOW) is False

    def test_missing_expiry_is_expired(self):
        assert is_reset_token_expired(None, now=NOW) is True

    def test_naive_expiry_is_read_as_utc(self):
        naive = datetime(2024, 3, 1, 12, 30)
        assert is_reset_token_expired(naive, now=NOW) is False
        assert is_reset_token_expired(naive, now=NOW + timedelta(hours=1)) is True

    def test_other_timezones_are_normalized(self):
        brt = timezone(timedelta(hours=-3))
        assert is_reset_token_expired(datetime(2024, 3, 1, 9, 30, tzinfo=brt), now=NOW) is False


class TestResetTokenExpiry:
    def test_one_hour_after_now(self):
        assert RESET_TOKEN_TTL == timedelta(hours=1)
        assert reset_token_expiry(now=NOW) == NOW + timedelta(hours=1)

    def test_defaults_to_current_time(self):
        before = datetime.now(timezone.utc)
        expiry = reset_token_expiry()
        assert before + timedelta(hours=1) <= expiry <= datetime.now(timezone.utc) + timedelta(hours=1)

    def test_custom_ttl(self):
        assert reset_token_expiry(now=NOW, ttl=timedelta(minutes=15)) == NOW + timedelta(minutes=15)

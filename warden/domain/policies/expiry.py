"""Expiry policy for password reset tokens."""

from datetime import datetime, timedelta, timezone
from typing import Optional

RESET_TOKEN_TTL = timedelta(hours=1)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; every stored timestamp is UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def reset_token_expiry(now: Optional[datetime] = None, ttl: timedelta = RESET_TOKEN_TTL) -> datetime:
    """Expiry timestamp for a reset token issued at ``now``."""
    issued_at = _as_utc(now) if now is not None else datetime.now(timezone.utc)
    return issued_at + ttl


def is_reset_token_expired(expires_at: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """Return True when a reset token can no longer be used.

    A token without an expiry is treated as expired. A token whose expiry is
    exactly ``now`` is still valid.
    """
    if expires_at is None:
        return True
    current = _as_utc(now) if now is not None else datetime.now(timezone.utc)
    return _as_utc(expires_at) < current

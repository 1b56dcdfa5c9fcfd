from .expiry import RESET_TOKEN_TTL, is_reset_token_expired, reset_token_expiry
from .lockout import is_locked_out

__all__ = ["RESET_TOKEN_TTL", "is_locked_out", "is_reset_token_expired", "reset_token_expiry"]

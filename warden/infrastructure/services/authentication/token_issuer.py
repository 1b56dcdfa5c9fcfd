"""HS256 session tokens issued with PyJWT."""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Union

import jwt
import structlog

from warden.core.config.settings import settings
from warden.core.exceptions import InvalidSessionTokenError
from warden.domain.interfaces.services import ITokenIssuer
from warden.utils.durations import parse_expiry
from warden.utils.i18n import get_translated_message

logger = structlog.get_logger(__name__)


class JwtTokenIssuer(ITokenIssuer):
    """Signs session tokens with a shared secret.

    The payload is copied and stamped with ``iat`` and ``exp``; callers supply
    ``sub`` and any other claims.
    """

    def __init__(self, secret: str | None = None, algorithm: str | None = None):
        self._secret = secret if secret is not None else settings.JWT_SECRET.get_secret_value()
        self._algorithm = algorithm or settings.JWT_ALGORITHM
        if not self._secret:
            raise ValueError("JWT secret must not be empty")

    def sign(self, payload: Dict[str, Any], expires_in: Union[str, int, timedelta]) -> str:
        now = datetime.now(timezone.utc)
        claims = dict(payload)
        claims["iat"] = now
        claims["exp"] = now + parse_expiry(expires_in)
        token = jwt.encode(claims, self._secret, algorithm=self._algorithm)
        logger.debug("Session token issued", subject=claims.get("sub"), expires_at=claims["exp"].isoformat())
        return token

    def verify(self, token: str, language: str = "en") -> Dict[str, Any]:
        try:
            return jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["exp", "iat", "sub"]},
            )
        except jwt.PyJWTError as e:
            logger.warning("Session token rejected", error_type=type(e).__name__)
            raise InvalidSessionTokenError(get_translated_message("invalid_session_token", language)) from e

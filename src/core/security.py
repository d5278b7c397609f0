"""Password hashing and signed admin tokens."""

import re
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt
from passlib.context import CryptContext

from src.core.config import settings

ADMIN_ACCESS_TOKEN_TYPE = "admin_access"
ADMIN_REFRESH_TOKEN_TYPE = "admin_refresh"

_DURATION_PATTERN = re.compile(r"^\s*(\d+)\s*([smhdw]?)\s*$")
_DURATION_UNITS = {
    "": 1,
    "s": 1,
    "m": 60,
    "h": 3600,
    "d": 86400,
    "w": 604800,
}


def parse_duration(value: str | int) -> int:
    """
    Convert a duration such as ``"2h"`` or ``"15m"`` into seconds.

    Bare integers are treated as seconds.

    Raises:
        ValueError: If the value is not a recognised duration
    """
    if isinstance(value, int):
        return value

    match = _DURATION_PATTERN.match(value)
    if match is None:
        raise ValueError(f"Invalid duration: {value!r}")

    amount, unit = match.groups()
    return int(amount) * _DURATION_UNITS[unit]


class PasswordHasher:
    """bcrypt password hashing with a configurable work factor."""

    def __init__(self, rounds: int = 10):
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, password: str, password_hash: str | None) -> bool:
        if not password_hash:
            return False
        try:
            return self._context.verify(password, password_hash)
        except ValueError:
            # Malformed or foreign hash in the store
            return False


class TokenSigner:
    """
    Signs and verifies JWTs for admin sessions.

    Access tokens are short-lived and carry the admin's identity and role.
    Refresh tokens are long-lived, stored on the session row, and only
    accepted by the refresh flow.
    """

    def __init__(
        self,
        secret: str | None = None,
        algorithm: str | None = None,
    ):
        self._secret = secret or settings.jwt_secret
        self._algorithm = algorithm or settings.jwt_algorithm

    def sign(self, claims: Dict[str, Any], token_type: str, ttl_seconds: int) -> str:
        """Sign ``claims`` as a token of ``token_type`` valid for ``ttl_seconds``."""
        now = datetime.now(timezone.utc)
        payload = {
            **claims,
            "type": token_type,
            "jti": uuid.uuid4().hex,
            "iat": now,
            "exp": now + timedelta(seconds=ttl_seconds),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> Dict[str, Any]:
        """
        Decode a token and check its signature and expiry.

        Raises:
            jwt.InvalidTokenError: If the token is malformed, tampered or expired
        """
        return jwt.decode(
            token,
            self._secret,
            algorithms=[self._algorithm],
            options={"require": ["exp", "iat", "type"]},
        )

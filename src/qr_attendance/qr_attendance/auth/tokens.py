from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt

from ..core.constants import DEFAULT_ACCESS_TOKEN_HOURS
from ..core.enums import Role
from ..core.exceptions import AuthenticationError
from .principal import Principal

JWT_ALGO = "HS256"


class AccessTokenCodec:
    """Signs and verifies the bearer tokens handed out at login."""

    def __init__(self, secret: str, *, ttl_hours: float = DEFAULT_ACCESS_TOKEN_HOURS):
        if not secret:
            raise ValueError("JWT secret must not be empty")
        self._secret = secret
        self._ttl = timedelta(hours=float(ttl_hours))

    def issue(self, principal: Principal, *, now: datetime | None = None) -> str:
        now = now or datetime.now(timezone.utc)
        payload = {
            "sub": principal.username,
            "role": principal.role.value,
            "name": principal.name,
            "iat": int(now.timestamp()),
            "exp": int((now + self._ttl).timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=JWT_ALGO)

    def verify(self, token: str) -> Principal:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[JWT_ALGO])
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Session expired, please log in again")
        except jwt.InvalidTokenError:
            raise AuthenticationError("Invalid access token")

        try:
            return Principal(username=str(payload["sub"]), role=Role(payload["role"]), name=str(payload.get("name") or payload["sub"]))
        except (KeyError, ValueError):
            raise AuthenticationError("Invalid access token")

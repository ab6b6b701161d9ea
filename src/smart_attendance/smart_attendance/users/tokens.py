from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from ..core.constants import TOKEN_EXPIRY_HOURS
from ..core.enums import Role
from ..core.exceptions import AuthenticationError

ALGORITHM = "HS256"


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    role: Role


class TokenService:
    """Issues and verifies HS256 bearer tokens ``{sub, role, iat, exp}``."""

    def __init__(self, secret: str, *, expiry_hours: int = TOKEN_EXPIRY_HOURS):
        if not secret:
            raise ValueError("JWT secret is not configured")
        self._secret = secret
        self._expiry = timedelta(hours=int(expiry_hours))

    def issue(self, user_id: int, role: Role, *, now: Optional[datetime] = None) -> str:
        now = now or datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "role": role.value,
            "iat": now,
            "exp": now + self._expiry,
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def verify(self, token: str, *, expected_role: Optional[Role] = None) -> TokenClaims:
        if not token:
            raise AuthenticationError("No token provided")
        try:
            claims = jwt.decode(token, self._secret, algorithms=[ALGORITHM])
        except jwt.ExpiredSignatureError as e:
            raise AuthenticationError("Token has expired") from e
        except jwt.InvalidTokenError as e:
            raise AuthenticationError("Invalid token") from e

        try:
            result = TokenClaims(user_id=int(claims["sub"]), role=Role(claims["role"]))
        except (KeyError, ValueError) as e:
            raise AuthenticationError("Invalid token") from e

        if expected_role is not None and result.role != expected_role:
            raise AuthenticationError("Invalid token")
        return result


def bearer_token(authorization_header: Optional[str]) -> str:
    """Token part of ``Authorization: Bearer <token>``; empty string when absent."""
    parts = (authorization_header or "").split(" ")
    return parts[1].strip() if len(parts) > 1 else ""

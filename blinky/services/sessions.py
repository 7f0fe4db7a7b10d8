from __future__ import annotations

import uuid
from datetime import datetime, timedelta

import jwt

from blinky.utils.constants import SESSION_TOKEN_TTL_DAYS
from .errors import InternalError, Unauthorized
from .tokens import utcnow


class SessionSigner:
    """Mints and checks the bearer JWTs handed out after a successful login.

    Built once at startup with the process-wide secret and passed to whoever
    needs it; the secret is never rotated while the process runs.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        ttl: timedelta = timedelta(days=SESSION_TOKEN_TTL_DAYS),
    ):
        if not secret:
            raise ValueError("a signing secret is required")
        self._secret = secret
        self.algorithm = algorithm
        self.ttl = ttl

    def issue(self, user_id: uuid.UUID | str, *, now: datetime | None = None) -> str:
        now = now or utcnow()
        claims = {
            "sub": str(user_id),
            "iat": int(now.timestamp()),
            "exp": int((now + self.ttl).timestamp()),
        }
        try:
            return jwt.encode(claims, self._secret, algorithm=self.algorithm)
        except (jwt.PyJWTError, NotImplementedError, TypeError, ValueError) as e:
            raise InternalError("Failed to create token") from e

    def decode(self, token: str) -> uuid.UUID:
        """Return the user id carried by ``token``."""
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError:
            raise Unauthorized("Unauthorized - Token expired")
        except jwt.PyJWTError:
            raise Unauthorized("Unauthorized - Invalid token")

        try:
            return uuid.UUID(str(claims["sub"]))
        except ValueError:
            raise Unauthorized("Unauthorized - Invalid token claims")

"""
Access Token Module

Issues and verifies the HS256 JWT bearer tokens used by the API.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import jwt

from .errors import UnauthorizedError
from .users import User


@dataclass(frozen=True)
class TokenClaims:
    user_id: str
    email: str
    issued_at: datetime
    expires_at: datetime


class TokenService:
    """Signs and checks access tokens carrying the customer-facing user id"""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expiry_minutes: int = 60,
        clock: Optional[Callable[[], datetime]] = None
    ):
        if not secret:
            raise ValueError("A JWT secret is required")
        self.secret = secret
        self.algorithm = algorithm
        self.expiry = timedelta(minutes=expiry_minutes)
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def issue(self, user: User) -> str:
        """Generate JWT token for user"""
        now = self.clock()
        payload = {
            "userId": user.user_id,
            "email": user.email,
            "iat": now,
            "exp": now + self.expiry,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        """
        Decode and validate a token

        Raises:
            UnauthorizedError: If the token is expired, malformed or badly signed
        """
        try:
            payload = jwt.decode(
                token, self.secret, algorithms=[self.algorithm],
                options={"require": ["exp", "iat"]}
            )
        except jwt.ExpiredSignatureError:
            raise UnauthorizedError("Access token has expired")
        except jwt.InvalidTokenError:
            raise UnauthorizedError("Invalid access token")

        user_id = payload.get("userId")
        if not user_id:
            raise UnauthorizedError("Invalid access token")

        return TokenClaims(
            user_id=user_id,
            email=payload.get("email", ""),
            issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )

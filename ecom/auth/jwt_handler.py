"""
JWT token handler.

Issues and validates the bearer tokens handed out on login.
"""

import os
import time
import logging
from typing import Optional
from dataclasses import dataclass, asdict

from jose import jwt, JWTError

logger = logging.getLogger(__name__)

# Token configuration
DEFAULT_SECRET_KEY = "ecom-auth-secret-key-change-in-production"
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_SECONDS = 3600  # 1 hour


@dataclass
class TokenPayload:
    """JWT token payload."""
    user_id: str
    username: str
    exp: int  # Expiration timestamp
    iat: int  # Issued at timestamp
    token_type: str = "access"

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "TokenPayload":
        return cls(
            user_id=data["user_id"],
            username=data["username"],
            exp=data["exp"],
            iat=data["iat"],
            token_type=data.get("token_type", "access")
        )


class JWTHandler:
    """
    Handles bearer token generation and validation.

    Tokens are signed with HS256 and carry the user id they were issued to.
    """

    def __init__(
        self,
        secret_key: Optional[str] = None,
        expires_in: int = ACCESS_TOKEN_EXPIRE_SECONDS
    ):
        """
        Initialize JWT handler.

        Args:
            secret_key: Secret key for signing tokens.
                       Falls back to JWT_SECRET_KEY env var or default.
            expires_in: Default access token lifetime in seconds
        """
        self.secret_key = (
            secret_key
            or os.getenv("JWT_SECRET_KEY")
            or DEFAULT_SECRET_KEY
        )
        self.expires_in = expires_in

        if self.secret_key == DEFAULT_SECRET_KEY:
            logger.warning(
                "Using default JWT secret key. "
                "Set JWT_SECRET_KEY environment variable in production!"
            )

    def create_access_token(
        self,
        user_id: str,
        username: str,
        expires_in: Optional[int] = None
    ) -> str:
        """
        Create an access token.

        Args:
            user_id: Unique user identifier
            username: User's login name
            expires_in: Custom expiration in seconds

        Returns:
            Encoded JWT token string
        """
        now = int(time.time())
        exp = now + (self.expires_in if expires_in is None else expires_in)

        payload = TokenPayload(
            user_id=user_id,
            username=username,
            exp=exp,
            iat=now
        )

        token = jwt.encode(payload.to_dict(), self.secret_key, algorithm=ALGORITHM)
        logger.debug(f"Created access token for user {user_id}, expires in {exp - now}s")
        return token

    def verify_token(self, token: str) -> Optional[TokenPayload]:
        """
        Verify and decode a token.

        Returns:
            TokenPayload if valid, None if invalid or expired
        """
        try:
            data = jwt.decode(token, self.secret_key, algorithms=[ALGORITHM])
            payload = TokenPayload.from_dict(data)
        except (JWTError, KeyError) as e:
            logger.debug(f"Token verification failed: {e}")
            return None

        if payload.exp < int(time.time()):
            logger.debug("Token expired")
            return None

        return payload

"""
Password and identifier handling utilities.

Uses bcrypt for password hashing.
"""

import logging
from typing import Optional

import bcrypt

logger = logging.getLogger(__name__)

# bcrypt work factor
BCRYPT_ROUNDS = 12

# bcrypt only looks at the first 72 bytes of input
BCRYPT_MAX_BYTES = 72


class PasswordHandler:
    """
    Handles password hashing and verification using bcrypt.

    Usage:
        handler = PasswordHandler()
        hashed = handler.hash("my_password")
        is_valid = handler.verify("my_password", hashed)
    """

    def __init__(self, rounds: int = BCRYPT_ROUNDS):
        self.rounds = rounds

    def hash(self, password: str) -> str:
        """
        Hash a password using bcrypt.

        Args:
            password: Plain text password

        Returns:
            Hashed password string (includes salt)

        Raises:
            ValueError: If the password is empty or longer than 72 bytes
        """
        if not password:
            raise ValueError("Password cannot be empty")

        encoded = password.encode("utf-8")
        if len(encoded) > BCRYPT_MAX_BYTES:
            raise ValueError(f"Password cannot be longer than {BCRYPT_MAX_BYTES} bytes")

        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(encoded, salt).decode("utf-8")

    def verify(self, password: str, hashed: str) -> bool:
        """
        Verify a password against a hash.

        Returns:
            True if password matches, False otherwise
        """
        if not password or not hashed:
            return False

        try:
            return bcrypt.checkpw(
                password.encode("utf-8"),
                hashed.encode("utf-8")
            )
        except ValueError as e:
            logger.warning(f"Password verification error: {e}")
            return False


def normalize_email(email: Optional[str]) -> Optional[str]:
    """
    Normalize an email address for storage and lookup.

    Examples:
        normalize_email(" Johan.Gerlach17@Hotmail.com ") -> "johan.gerlach17@hotmail.com"
        normalize_email("not-an-email") -> None
    """
    if not email:
        return None

    cleaned = email.strip().lower()
    local, _, domain = cleaned.partition("@")
    if not local or not domain or "@" in domain or " " in cleaned:
        return None

    return cleaned


def normalize_username(username: Optional[str]) -> Optional[str]:
    """Trim a username; usernames are otherwise compared exactly."""
    if not username:
        return None

    cleaned = username.strip()
    return cleaned or None

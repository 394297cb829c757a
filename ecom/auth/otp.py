"""
One-time password codes for the forgot-password flow.

A code is stored on the user record as a ResetPasswordLink until it is
consumed by a password reset or found expired.
"""

import secrets
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from dataclasses import dataclass, asdict

logger = logging.getLogger(__name__)

DEFAULT_OTP_LENGTH = 6
DEFAULT_OTP_EXPIRE_MINUTES = 20


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ResetPasswordLink:
    """Active reset code and its expiry."""
    code: str
    expires_at: str  # ISO 8601, UTC

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional["ResetPasswordLink"]:
        # Older records store an empty object for "no active code"
        if not data or not data.get("code"):
            return None
        return cls(code=str(data["code"]), expires_at=data["expires_at"])

    def expiry(self) -> datetime:
        return datetime.fromisoformat(self.expires_at)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or utcnow()) >= self.expiry()

    def matches(self, code: str, now: Optional[datetime] = None) -> bool:
        """True if the code is the stored one and still valid."""
        code = str(code)
        if not code.isascii():
            return False
        return secrets.compare_digest(self.code, code) and not self.is_expired(now)


class OTPGenerator:
    """
    Generates numeric one-time codes.

    Usage:
        generator = OTPGenerator(length=6, expire_minutes=20)
        link = generator.issue()
        link.code        # "048213"
        link.expires_at  # "2026-10-19T10:20:00+00:00"
    """

    def __init__(
        self,
        length: int = DEFAULT_OTP_LENGTH,
        expire_minutes: int = DEFAULT_OTP_EXPIRE_MINUTES
    ):
        if length < 4:
            raise ValueError("OTP length must be at least 4 digits")
        self.length = length
        self.expire_minutes = expire_minutes

    def generate_code(self) -> str:
        """Random numeric code, zero-padded to the configured length."""
        return str(secrets.randbelow(10 ** self.length)).zfill(self.length)

    def issue(self, now: Optional[datetime] = None) -> ResetPasswordLink:
        """Create a fresh code with its expiry."""
        issued_at = now or utcnow()
        expires_at = issued_at + timedelta(minutes=self.expire_minutes)
        return ResetPasswordLink(
            code=self.generate_code(),
            expires_at=expires_at.isoformat()
        )

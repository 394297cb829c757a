"""
Authentication module for the e-commerce backend.

Password hashing, bearer tokens, reset codes and the user document store.
"""

from .jwt_handler import JWTHandler, TokenPayload
from .otp import OTPGenerator, ResetPasswordLink
from .password import PasswordHandler, normalize_email, normalize_username
from .users import UserStore, User, DuplicateUserError, ResetCodeInUseError

__all__ = [
    "JWTHandler",
    "TokenPayload",
    "OTPGenerator",
    "ResetPasswordLink",
    "PasswordHandler",
    "normalize_email",
    "normalize_username",
    "UserStore",
    "User",
    "DuplicateUserError",
    "ResetCodeInUseError",
]

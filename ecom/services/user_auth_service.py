"""
User authentication service.

Runs the account workflow: register, login, forgot-password,
validate-otp and reset-password. Every operation returns an AuthResult;
business failures are reported through its status rather than raised.
"""

import logging
import math
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Optional, List
from dataclasses import dataclass

from ..auth import (
    JWTHandler,
    OTPGenerator,
    UserStore,
    User,
    DuplicateUserError,
    ResetCodeInUseError,
    normalize_email,
)
from ..auth.otp import utcnow
from ..auth.users import USER_TYPE_USER
from ..config import Config, load_config
from .notification_service import NotificationService

logger = logging.getLogger(__name__)

# Draws of a fresh reset code before giving up on collisions
MAX_CODE_ATTEMPTS = 10


class AuthStatus(str, Enum):
    """Outcome of a workflow step, as reported to clients."""
    SUCCESS = "SUCCESS"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    BAD_REQUEST = "BAD_REQUEST"
    CONFLICT = "CONFLICT"
    RECORD_NOT_FOUND = "RECORD_NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


@dataclass
class AuthResult:
    """Result of a workflow step."""
    status: AuthStatus
    message: str = ""
    data: Optional[Any] = None

    @property
    def success(self) -> bool:
        return self.status == AuthStatus.SUCCESS

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "message": self.message,
            "data": self.data
        }


def _missing(*values: Optional[str]) -> bool:
    return any(value is None or not str(value).strip() for value in values)


class UserAuthService:
    """
    Service for user authentication.

    Handles:
    - User registration
    - Login with username + password, with lockout after repeated failures
    - Forgot password (issues a one-time code)
    - OTP validation
    - Password reset with the issued code
    """

    def __init__(
        self,
        jwt_handler: Optional[JWTHandler] = None,
        user_store: Optional[UserStore] = None,
        otp_generator: Optional[OTPGenerator] = None,
        notifications: Optional[NotificationService] = None,
        config: Optional[Config] = None
    ):
        """
        Initialize auth service.

        Any collaborator not provided is built from config.
        """
        self.config = config or load_config()
        self.jwt = jwt_handler or JWTHandler(
            secret_key=self.config.token.secret_key or None,
            expires_in=self.config.token.access_token_expire_seconds
        )
        self.users = user_store or UserStore(self.config.users_file)
        self.otp = otp_generator or OTPGenerator(
            length=self.config.password_reset.otp_length,
            expire_minutes=self.config.password_reset.otp_expire_minutes
        )
        self.notifications = notifications or NotificationService(self.config.notifications)

    def register(
        self,
        username: Optional[str],
        password: Optional[str],
        email: Optional[str],
        name: Optional[str] = None,
        mobile_no: Optional[str] = None,
        user_type: int = USER_TYPE_USER,
        shipping_address: Optional[List[dict]] = None,
        wishlist: Optional[List[dict]] = None
    ) -> AuthResult:
        """
        Register a new user.

        Returns:
            AuthResult with {"id": user_id} on success
        """
        if _missing(username, password, email):
            return AuthResult(AuthStatus.VALIDATION_ERROR, "Username, password and email are required")

        if not normalize_email(email):
            return AuthResult(AuthStatus.VALIDATION_ERROR, "Invalid email address")

        if self.users.user_exists(username=username):
            return AuthResult(AuthStatus.CONFLICT, "Username already exists")

        if self.users.user_exists(email=email):
            return AuthResult(AuthStatus.CONFLICT, "Email already exists")

        try:
            user = self.users.create_user(
                username=username,
                email=email,
                password=password,
                name=name,
                mobile_no=mobile_no,
                user_type=user_type,
                shipping_address=shipping_address,
                wishlist=wishlist
            )
        except DuplicateUserError as e:
            # Lost a race with a concurrent registration
            return AuthResult(AuthStatus.CONFLICT, str(e))
        except ValueError as e:
            return AuthResult(AuthStatus.VALIDATION_ERROR, str(e))

        logger.info(f"User registered: {user.username}")
        return AuthResult(AuthStatus.SUCCESS, "Your account is registered", {"id": user.user_id})

    def login(self, username: Optional[str], password: Optional[str]) -> AuthResult:
        """
        Login with username and password.

        Returns:
            AuthResult with {"id", "token", ...profile} on success
        """
        if _missing(username, password):
            return AuthResult(AuthStatus.BAD_REQUEST, "Insufficient parameters")

        user = self.users.get_by_username(username)
        if not user:
            return AuthResult(AuthStatus.BAD_REQUEST, "User not exists")

        if not user.is_active:
            return AuthResult(AuthStatus.BAD_REQUEST, "Account is deactivated")

        locked_minutes = self._locked_minutes(user)
        if locked_minutes:
            return AuthResult(
                AuthStatus.BAD_REQUEST,
                f"You have exceeded the number of login attempts, try again in {locked_minutes} minutes"
            )

        if not self.users.password_handler.verify(password, user.password_hash):
            return self._record_failed_login(user)

        user = self.users.record_login(user.user_id)
        token = self.jwt.create_access_token(user_id=user.user_id, username=user.username)

        logger.info(f"User logged in: {user.username}")
        data = user.to_public_dict()
        data.update({"id": user.user_id, "token": token})
        return AuthResult(AuthStatus.SUCCESS, "Login successful", data)

    def _locked_minutes(self, user: User) -> int:
        """Whole minutes left on a login lockout, 0 if not locked."""
        if not user.login_reactive_time:
            return 0

        remaining = datetime.fromisoformat(user.login_reactive_time) - utcnow()
        seconds = remaining.total_seconds()
        if seconds <= 0:
            return 0
        return math.ceil(seconds / 60)

    def _record_failed_login(self, user: User) -> AuthResult:
        retries = user.login_retry_limit + 1
        limit = self.config.login.max_retry_limit

        if retries >= limit:
            reactive_time = utcnow() + timedelta(minutes=self.config.login.reactive_minutes)
            self.users.update_fields(
                user.user_id,
                login_retry_limit=0,
                login_reactive_time=reactive_time.isoformat()
            )
            logger.warning(f"Login locked for {user.username} after {retries} failed attempts")
            return AuthResult(
                AuthStatus.BAD_REQUEST,
                f"Incorrect password. Account locked for {self.config.login.reactive_minutes} minutes"
            )

        self.users.update_fields(user.user_id, login_retry_limit=retries)
        return AuthResult(AuthStatus.BAD_REQUEST, "Incorrect password")

    def forgot_password(self, email: Optional[str]) -> AuthResult:
        """
        Issue a reset code for the account with this email.

        An unknown email yields RECORD_NOT_FOUND rather than a failure.
        """
        if _missing(email):
            return AuthResult(AuthStatus.VALIDATION_ERROR, "Email is required")

        if not normalize_email(email):
            return AuthResult(AuthStatus.VALIDATION_ERROR, "Invalid email address")

        user = self.users.get_by_email(email)
        if not user or not user.is_active:
            return AuthResult(AuthStatus.RECORD_NOT_FOUND, "Record not found with specified criteria")

        for _ in range(MAX_CODE_ATTEMPTS):
            link = self.otp.issue()
            try:
                self.users.set_reset_link(user.user_id, link)
                break
            except ResetCodeInUseError:
                logger.debug("Reset code already active on another user, drawing again")
        else:
            logger.error(f"Could not issue a unique reset code for {user.username}")
            return AuthResult(AuthStatus.INTERNAL_SERVER_ERROR, "Could not issue a reset code, try again")

        reset_config = self.config.password_reset
        try:
            self.notifications.send_reset_code(
                email=user.email,
                mobile_no=user.mobile_no,
                code=link.code,
                expire_minutes=self.otp.expire_minutes,
                via_email=reset_config.via_email,
                via_sms=reset_config.via_sms
            )
        except Exception as e:
            logger.error(f"Reset code delivery failed for {user.username}: {e}")

        logger.info(f"Reset code issued for: {user.username}")
        return AuthResult(AuthStatus.SUCCESS, "Reset code sent successfully")

    def validate_otp(self, otp: Optional[str]) -> AuthResult:
        """
        Check a reset code without consuming it.

        The code stays stored so the reset step can use it.
        """
        if _missing(otp):
            return AuthResult(AuthStatus.BAD_REQUEST, "Insufficient parameters")

        user = self._user_for_code(otp)
        if not user:
            return AuthResult(AuthStatus.BAD_REQUEST, "Invalid OTP or OTP has expired")

        return AuthResult(AuthStatus.SUCCESS, "OTP verified")

    def reset_password(self, code: Optional[str], new_password: Optional[str]) -> AuthResult:
        """Set a new password using a valid reset code, then clear the code."""
        if _missing(code, new_password):
            return AuthResult(AuthStatus.BAD_REQUEST, "Insufficient parameters")

        user = self._user_for_code(code)
        if not user:
            return AuthResult(AuthStatus.BAD_REQUEST, "Invalid code or code has expired")

        try:
            password_hash = self.users.password_handler.hash(new_password)
        except ValueError as e:
            return AuthResult(AuthStatus.BAD_REQUEST, str(e))

        self.users.update_fields(
            user.user_id,
            password_hash=password_hash,
            reset_password_link=None,
            login_retry_limit=0,
            login_reactive_time=None
        )

        try:
            self.notifications.send_password_changed(email=user.email, name=user.name)
        except Exception as e:
            logger.error(f"Password change notice failed for {user.username}: {e}")

        logger.info(f"Password reset for: {user.username}")
        return AuthResult(AuthStatus.SUCCESS, "Password reset successfully")

    def _user_for_code(self, code: str) -> Optional[User]:
        """
        Find the user holding this code unexpired.

        Expired copies of the code are cleared and treated as unknown.
        """
        code = str(code).strip()
        user = self.users.get_by_reset_code(code)
        if user:
            return user

        cleared = self.users.clear_expired_reset_links(code)
        if cleared:
            logger.info(f"Cleared {cleared} expired reset code(s)")
        return None

    def get_current_user(self, access_token: str) -> Optional[User]:
        """
        Get the active user associated with an access token.

        Returns:
            User if token is valid and the account active, None otherwise
        """
        payload = self.jwt.verify_token(access_token)
        if not payload or payload.token_type != "access":
            return None

        user = self.users.get_by_id(payload.user_id)
        if not user or not user.is_active:
            return None
        return user

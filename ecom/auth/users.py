"""
User storage and management.

Users are kept as documents in a JSON file keyed by user id.
The store offers lookup by top-level field, lookup by active reset code
and atomic field updates.
"""

import json
import logging
import threading
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, List
from dataclasses import dataclass, asdict, field

from .otp import ResetPasswordLink, utcnow
from .password import PasswordHandler, normalize_email, normalize_username

logger = logging.getLogger(__name__)

# Default storage path
DEFAULT_USERS_FILE = Path(__file__).parent.parent.parent / "data" / "users.json"

# userType values
USER_TYPE_USER = 1
USER_TYPE_ADMIN = 2


class DuplicateUserError(ValueError):
    """Username or email already belongs to another user."""


class ResetCodeInUseError(ValueError):
    """Reset code is already active on another user."""


def _now_iso() -> str:
    return utcnow().isoformat()


def _reset_link(data: dict) -> Optional[ResetPasswordLink]:
    return ResetPasswordLink.from_dict(data.get("reset_password_link"))


@dataclass
class User:
    """User data model."""
    user_id: str
    username: str
    email: str  # Normalized (lower-case)
    password_hash: Optional[str] = None
    name: Optional[str] = None
    mobile_no: Optional[str] = None
    user_type: int = USER_TYPE_USER
    shipping_address: List[dict] = field(default_factory=list)
    wishlist: List[dict] = field(default_factory=list)
    reset_password_link: Optional[ResetPasswordLink] = None
    login_retry_limit: int = 0  # Consecutive failed logins
    login_reactive_time: Optional[str] = None  # Locked until this time
    created_at: str = field(default_factory=_now_iso)
    updated_at: str = field(default_factory=_now_iso)
    last_login: Optional[str] = None
    is_active: bool = True

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "User":
        # Handle missing fields gracefully
        return cls(
            user_id=data.get("user_id", str(uuid.uuid4())),
            username=data["username"],
            email=data["email"],
            password_hash=data.get("password_hash"),
            name=data.get("name"),
            mobile_no=data.get("mobile_no"),
            user_type=data.get("user_type", USER_TYPE_USER),
            shipping_address=data.get("shipping_address", []),
            wishlist=data.get("wishlist", []),
            reset_password_link=_reset_link(data),
            login_retry_limit=data.get("login_retry_limit", 0),
            login_reactive_time=data.get("login_reactive_time"),
            created_at=data.get("created_at", _now_iso()),
            updated_at=data.get("updated_at", _now_iso()),
            last_login=data.get("last_login"),
            is_active=data.get("is_active", True)
        )

    def to_public_dict(self) -> dict:
        """Profile fields safe to return to clients."""
        data = self.to_dict()
        for secret in ("password_hash", "reset_password_link", "login_retry_limit", "login_reactive_time"):
            data.pop(secret, None)
        return data


class UserStore:
    """
    JSON-based document store for users.

    Each read-modify-write of the file runs under a process-local lock,
    so a single field update is atomic within the process.
    """

    def __init__(
        self,
        file_path: Optional[Path] = None,
        password_handler: Optional[PasswordHandler] = None
    ):
        """
        Initialize user store.

        Args:
            file_path: Path to users JSON file (default: data/users.json)
            password_handler: Hasher used for new and changed passwords
        """
        self.file_path = Path(file_path) if file_path else DEFAULT_USERS_FILE
        self.password_handler = password_handler or PasswordHandler()
        self._lock = threading.RLock()
        self._ensure_file()

    def _ensure_file(self):
        """Ensure the storage file and directory exist."""
        self.file_path.parent.mkdir(parents=True, exist_ok=True)
        if not self.file_path.exists():
            self._save_all({})

    def _load_all(self) -> dict[str, dict]:
        """Load all users from file."""
        try:
            with open(self.file_path, "r") as f:
                return json.load(f)
        except (json.JSONDecodeError, FileNotFoundError):
            return {}

    def _save_all(self, users: dict[str, dict]):
        """Save all users to file."""
        with open(self.file_path, "w") as f:
            json.dump(users, f, indent=2, ensure_ascii=False)

    def create_user(
        self,
        username: str,
        email: str,
        password: Optional[str] = None,
        name: Optional[str] = None,
        mobile_no: Optional[str] = None,
        user_type: int = USER_TYPE_USER,
        shipping_address: Optional[List[dict]] = None,
        wishlist: Optional[List[dict]] = None
    ) -> User:
        """
        Create a new user.

        Raises:
            DuplicateUserError: If the username or email is already taken
            ValueError: If username, email or password is unusable
        """
        normalized_username = normalize_username(username)
        if not normalized_username:
            raise ValueError("Username is required")

        normalized_email = normalize_email(email)
        if not normalized_email:
            raise ValueError(f"Invalid email address: {email}")

        password_hash = None
        if password:
            password_hash = self.password_handler.hash(password)

        with self._lock:
            users = self._load_all()

            for data in users.values():
                if data.get("username") == normalized_username:
                    raise DuplicateUserError(f"User with username {normalized_username} already exists")
                if data.get("email") == normalized_email:
                    raise DuplicateUserError(f"User with email {normalized_email} already exists")

            user = User(
                user_id=str(uuid.uuid4()),
                username=normalized_username,
                email=normalized_email,
                password_hash=password_hash,
                name=name,
                mobile_no=mobile_no,
                user_type=user_type,
                shipping_address=shipping_address or [],
                wishlist=wishlist or []
            )

            users[user.user_id] = user.to_dict()
            self._save_all(users)

        logger.info(f"Created user: {normalized_username}")
        return user

    def find_one(self, field_name: str, value: Any) -> Optional[User]:
        """Get the first user whose top-level field equals value."""
        for data in self._load_all().values():
            if data.get(field_name) == value:
                return User.from_dict(data)
        return None

    def get_by_id(self, user_id: str) -> Optional[User]:
        data = self._load_all().get(user_id)
        return User.from_dict(data) if data else None

    def get_by_username(self, username: str) -> Optional[User]:
        normalized = normalize_username(username)
        if not normalized:
            return None
        return self.find_one("username", normalized)

    def get_by_email(self, email: str) -> Optional[User]:
        normalized = normalize_email(email)
        if not normalized:
            return None
        return self.find_one("email", normalized)

    def get_by_reset_code(self, code: str, now: Optional[datetime] = None) -> Optional[User]:
        """Get the user holding this reset code, if it has not expired."""
        if not code:
            return None

        now = now or utcnow()
        for data in self._load_all().values():
            link = _reset_link(data)
            if link and link.matches(str(code), now):
                return User.from_dict(data)
        return None

    def update_fields(self, user_id: str, /, **fields) -> User:
        """
        Atomically set top-level fields on a user document.

        Raises:
            ValueError: If the user doesn't exist or a field is unknown
        """
        if "user_id" in fields:
            raise ValueError("user_id cannot be changed")
        unknown = set(fields) - set(User.__dataclass_fields__)
        if unknown:
            raise ValueError(f"Unknown user fields: {sorted(unknown)}")

        with self._lock:
            users = self._load_all()
            data = users.get(user_id)
            if data is None:
                raise ValueError(f"User {user_id} not found")

            for key, value in fields.items():
                if isinstance(value, ResetPasswordLink):
                    value = value.to_dict()
                data[key] = value
            data["updated_at"] = _now_iso()

            users[user_id] = data
            self._save_all(users)

        logger.debug(f"Updated user {user_id}: {sorted(fields)}")
        return User.from_dict(data)

    def set_reset_link(self, user_id: str, link: ResetPasswordLink) -> User:
        """
        Store a reset code, replacing any previous one.

        Raises:
            ResetCodeInUseError: If another user holds the same code unexpired
        """
        with self._lock:
            for other_id, data in self._load_all().items():
                other_link = _reset_link(data)
                if other_id != user_id and other_link and other_link.matches(link.code):
                    raise ResetCodeInUseError("Reset code is already in use")
            return self.update_fields(user_id, reset_password_link=link)

    def clear_expired_reset_links(self, code: Optional[str] = None, now: Optional[datetime] = None) -> int:
        """
        Remove expired reset codes, only those equal to code when given.

        Returns:
            Number of users whose code was cleared
        """
        now = now or utcnow()
        cleared = 0
        with self._lock:
            users = self._load_all()
            for data in users.values():
                link = _reset_link(data)
                if not link or not link.is_expired(now):
                    continue
                if code is not None and link.code != code:
                    continue
                data["reset_password_link"] = None
                data["updated_at"] = _now_iso()
                cleared += 1

            if cleared:
                self._save_all(users)

        return cleared

    def record_login(self, user_id: str) -> User:
        """Record a successful login and reset the lockout counters."""
        return self.update_fields(
            user_id,
            last_login=_now_iso(),
            login_retry_limit=0,
            login_reactive_time=None
        )

    def delete_user(self, user_id: str) -> bool:
        """
        Deactivate a user. The record is kept.

        Returns:
            True if deactivated, False if not found
        """
        with self._lock:
            users = self._load_all()

            if user_id not in users:
                return False

            users[user_id]["is_active"] = False
            users[user_id]["updated_at"] = _now_iso()
            self._save_all(users)

        logger.info(f"Deactivated user: {user_id}")
        return True

    def user_exists(self, username: Optional[str] = None, email: Optional[str] = None) -> bool:
        """True if a user with this username or email exists."""
        if username and self.get_by_username(username):
            return True
        if email and self.get_by_email(email):
            return True
        return False

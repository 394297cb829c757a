"""Configuration module for the e-commerce auth backend."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


def _env_path(name: str) -> Optional[Path]:
    value = os.getenv(name)
    return Path(value) if value else None


@dataclass
class TokenConfig:
    """Bearer token settings."""
    secret_key: str = field(default_factory=lambda: os.getenv("JWT_SECRET_KEY", ""))
    access_token_expire_seconds: int = field(default_factory=lambda: int(os.getenv("ACCESS_TOKEN_EXPIRE_SECONDS", "3600")))


@dataclass
class PasswordResetConfig:
    """Forgot-password / OTP settings."""
    otp_length: int = field(default_factory=lambda: int(os.getenv("OTP_LENGTH", "6")))
    otp_expire_minutes: int = field(default_factory=lambda: int(os.getenv("OTP_EXPIRE_MINUTES", "20")))

    # Delivery channels for the code
    via_email: bool = field(default_factory=lambda: _env_bool("RESET_VIA_EMAIL", "true"))
    via_sms: bool = field(default_factory=lambda: _env_bool("RESET_VIA_SMS", "false"))


@dataclass
class LoginConfig:
    """Failed login lockout settings."""
    max_retry_limit: int = field(default_factory=lambda: int(os.getenv("MAX_LOGIN_RETRY_LIMIT", "3")))
    reactive_minutes: int = field(default_factory=lambda: int(os.getenv("LOGIN_REACTIVE_MINUTES", "20")))


@dataclass
class NotificationConfig:
    """SendGrid (email) and Twilio (SMS) credentials."""
    sendgrid_api_key: str = field(default_factory=lambda: os.getenv("SENDGRID_API_KEY", ""))
    mail_from: str = field(default_factory=lambda: os.getenv("MAIL_FROM_EMAIL", ""))
    twilio_account_sid: str = field(default_factory=lambda: os.getenv("TWILIO_ACCOUNT_SID", ""))
    twilio_auth_token: str = field(default_factory=lambda: os.getenv("TWILIO_AUTH_TOKEN", ""))
    twilio_phone_number: str = field(default_factory=lambda: os.getenv("TWILIO_PHONE_NUMBER", ""))

    # Prepended to mobile numbers stored without a +country prefix
    sms_default_country_code: str = field(default_factory=lambda: os.getenv("SMS_DEFAULT_COUNTRY_CODE", "1"))


@dataclass
class Config:
    """Main configuration container."""
    token: TokenConfig = field(default_factory=TokenConfig)
    password_reset: PasswordResetConfig = field(default_factory=PasswordResetConfig)
    login: LoginConfig = field(default_factory=LoginConfig)
    notifications: NotificationConfig = field(default_factory=NotificationConfig)

    # None means the store's default data/users.json
    users_file: Optional[Path] = field(default_factory=lambda: _env_path("USERS_FILE"))


def load_config() -> Config:
    """Load configuration from environment variables."""
    return Config()

"""
Pytest configuration and shared fixtures.

This module provides common fixtures for testing:
- JWT authentication
- User store (a fresh JSON file per test)
- Auth workflow service with a fake notifier
- API client wired to the real service stack
"""

import os
import sys
from pathlib import Path
from typing import Generator
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Set test environment variables before imports
os.environ["JWT_SECRET_KEY"] = "test_jwt_secret_key_for_testing_only_32bytes!"
os.environ["ENVIRONMENT"] = "test"
os.environ["SENDGRID_API_KEY"] = ""
os.environ["TWILIO_ACCOUNT_SID"] = ""

from ecom.auth import JWTHandler, OTPGenerator, UserStore, User, PasswordHandler
from ecom.config import Config
from ecom.services import UserAuthService, NotificationService


# =============================================================================
# Configuration
# =============================================================================

@pytest.fixture(scope="session")
def test_config():
    """Test configuration values."""
    return {
        "jwt_secret": "test_jwt_secret_key_for_testing_only_32bytes!",
        "test_username": "John.Windler84",
        "test_password": "UlafGeugEirasOj",
        "test_email": "Johan.Gerlach17@hotmail.com",
        "test_user_name": "Estelle Windler PhD",
        "test_mobile": "(506) 756-8493",
    }


@pytest.fixture
def app_config(temp_user_file) -> Config:
    """Service configuration with predictable limits."""
    config = Config()
    config.users_file = temp_user_file
    config.password_reset.otp_length = 6
    config.password_reset.otp_expire_minutes = 20
    config.password_reset.via_email = True
    config.password_reset.via_sms = False
    config.login.max_retry_limit = 3
    config.login.reactive_minutes = 20
    return config


# =============================================================================
# JWT Fixtures
# =============================================================================

@pytest.fixture
def jwt_handler(test_config) -> JWTHandler:
    """Create a JWTHandler with test secret."""
    return JWTHandler(secret_key=test_config["jwt_secret"])


@pytest.fixture
def valid_access_token(jwt_handler, test_config) -> str:
    """Create a valid access token."""
    return jwt_handler.create_access_token(
        user_id="test-user-id-123",
        username=test_config["test_username"]
    )


@pytest.fixture
def expired_token(jwt_handler, test_config) -> str:
    """Create an expired access token."""
    return jwt_handler.create_access_token(
        user_id="test-user-id-123",
        username=test_config["test_username"],
        expires_in=-1  # Already expired
    )


# =============================================================================
# User Store Fixtures
# =============================================================================

@pytest.fixture
def temp_user_file(tmp_path) -> Path:
    """Path of a users file private to the test."""
    return tmp_path / "users.json"


@pytest.fixture
def password_handler() -> PasswordHandler:
    """Create a PasswordHandler."""
    return PasswordHandler()


@pytest.fixture
def fast_password_handler() -> PasswordHandler:
    """Lowest bcrypt work factor, to keep store tests quick."""
    return PasswordHandler(rounds=4)


@pytest.fixture
def user_store(temp_user_file, fast_password_handler) -> UserStore:
    """Create a UserStore with temporary file."""
    return UserStore(file_path=temp_user_file, password_handler=fast_password_handler)


@pytest.fixture
def sample_user(user_store, test_config) -> User:
    """Create a sample user in the store."""
    return user_store.create_user(
        username=test_config["test_username"],
        email=test_config["test_email"],
        password=test_config["test_password"],
        name=test_config["test_user_name"],
        mobile_no=test_config["test_mobile"]
    )


# =============================================================================
# Service Fixtures
# =============================================================================

@pytest.fixture
def fake_notifications() -> MagicMock:
    """Notifier that records calls instead of sending."""
    notifications = MagicMock(spec=NotificationService)
    notifications.send_reset_code.return_value = {"email": {"success": True}}
    notifications.send_password_changed.return_value = {"success": True}
    return notifications


@pytest.fixture
def otp_generator() -> OTPGenerator:
    return OTPGenerator(length=6, expire_minutes=20)


@pytest.fixture
def auth_service(jwt_handler, user_store, otp_generator, fake_notifications, app_config) -> UserAuthService:
    """UserAuthService over the per-test store."""
    return UserAuthService(
        jwt_handler=jwt_handler,
        user_store=user_store,
        otp_generator=otp_generator,
        notifications=fake_notifications,
        config=app_config
    )


# =============================================================================
# API Client Fixtures
# =============================================================================

@pytest.fixture
def api_app():
    """Create FastAPI app for testing."""
    from api.main import app
    return app


@pytest.fixture
def api_services(auth_service, app_config):
    """Services container backed by the per-test store."""
    from api.deps import Services

    return Services(config=app_config, user_auth=auth_service)


@pytest.fixture
def api_client(api_app, api_services) -> Generator[TestClient, None, None]:
    """Synchronous test client whose requests use api_services."""
    with patch("api.deps.get_services", return_value=api_services):
        yield TestClient(api_app)


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as unit test"
    )
    config.addinivalue_line(
        "markers", "api: mark test as API endpoint test"
    )

"""
Unit tests for JWT Handler.

Tests token creation, validation and expiration.
"""

import pytest

from ecom.auth import JWTHandler
from ecom.auth.jwt_handler import TokenPayload, DEFAULT_SECRET_KEY


class TestJWTHandler:
    """Tests for JWTHandler class."""

    @pytest.mark.unit
    def test_create_access_token(self, jwt_handler, test_config):
        """Test creating an access token."""
        token = jwt_handler.create_access_token(
            user_id="user-123",
            username=test_config["test_username"]
        )

        assert token is not None
        assert isinstance(token, str)
        assert len(token) > 50  # JWT tokens are long

    @pytest.mark.unit
    def test_verify_valid_access_token(self, jwt_handler, valid_access_token, test_config):
        """Test verifying a valid access token."""
        payload = jwt_handler.verify_token(valid_access_token)

        assert isinstance(payload, TokenPayload)
        assert payload.user_id == "test-user-id-123"
        assert payload.username == test_config["test_username"]
        assert payload.token_type == "access"

    @pytest.mark.unit
    def test_token_lifetime(self, jwt_handler, valid_access_token):
        """Default lifetime is one hour."""
        payload = jwt_handler.verify_token(valid_access_token)
        assert payload.exp - payload.iat == 3600

    @pytest.mark.unit
    def test_custom_default_lifetime(self, test_config):
        handler = JWTHandler(secret_key=test_config["jwt_secret"], expires_in=60)
        token = handler.create_access_token(user_id="user-123", username="someone")

        payload = handler.verify_token(token)
        assert payload.exp - payload.iat == 60

    @pytest.mark.unit
    def test_verify_expired_token(self, jwt_handler, expired_token):
        """Test verifying an expired token."""
        assert jwt_handler.verify_token(expired_token) is None

    @pytest.mark.unit
    def test_verify_invalid_token(self, jwt_handler):
        assert jwt_handler.verify_token("invalid.token.here") is None

    @pytest.mark.unit
    def test_verify_tampered_token(self, jwt_handler, valid_access_token):
        """Test that a modified token fails verification."""
        header, payload, signature = valid_access_token.split(".")
        tampered = f"{header}.{payload}.{signature[:-4]}AAAA"

        assert jwt_handler.verify_token(tampered) is None

    @pytest.mark.unit
    def test_verify_token_wrong_secret(self, valid_access_token):
        """Tokens signed with another secret are rejected."""
        other = JWTHandler(secret_key="a_completely_different_secret_key_value")
        assert other.verify_token(valid_access_token) is None

    @pytest.mark.unit
    def test_secret_from_environment(self, monkeypatch):
        monkeypatch.setenv("JWT_SECRET_KEY", "secret_from_environment_for_tests")
        handler = JWTHandler()
        assert handler.secret_key == "secret_from_environment_for_tests"

    @pytest.mark.unit
    def test_default_secret_fallback(self, monkeypatch):
        monkeypatch.delenv("JWT_SECRET_KEY", raising=False)
        handler = JWTHandler()
        assert handler.secret_key == DEFAULT_SECRET_KEY


class TestTokenPayload:
    """Tests for TokenPayload dataclass."""

    @pytest.mark.unit
    def test_from_dict_defaults_token_type(self):
        payload = TokenPayload.from_dict({
            "user_id": "user-123",
            "username": "someone",
            "exp": 2,
            "iat": 1
        })

        assert payload.token_type == "access"
        assert payload.to_dict()["user_id"] == "user-123"

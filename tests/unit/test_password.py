"""
Unit tests for Password Handler and identifier normalization.

Tests password hashing, verification, and email/username normalization.
"""

import pytest

from ecom.auth import PasswordHandler, normalize_email, normalize_username


class TestPasswordHandler:
    """Tests for PasswordHandler class."""

    @pytest.mark.unit
    def test_hash_password(self, password_handler):
        """Test password hashing."""
        password = "UlafGeugEirasOj"
        hashed = password_handler.hash(password)

        assert hashed is not None
        assert hashed != password
        assert hashed.startswith("$2b$")  # bcrypt prefix

    @pytest.mark.unit
    def test_verify_correct_password(self, password_handler):
        """Test verifying correct password."""
        password = "UlafGeugEirasOj"
        hashed = password_handler.hash(password)

        assert password_handler.verify(password, hashed) is True

    @pytest.mark.unit
    def test_verify_incorrect_password(self, password_handler):
        """Test verifying incorrect password."""
        hashed = password_handler.hash("UlafGeugEirasOj")

        assert password_handler.verify("wrong@password", hashed) is False

    @pytest.mark.unit
    def test_same_password_has_different_hash_each_time(self, fast_password_handler):
        """Test that same password produces different hashes (due to salt)."""
        password = "SamePassword"
        hash1 = fast_password_handler.hash(password)
        hash2 = fast_password_handler.hash(password)

        assert hash1 != hash2
        assert fast_password_handler.verify(password, hash1) is True
        assert fast_password_handler.verify(password, hash2) is True

    @pytest.mark.unit
    def test_empty_password(self, password_handler):
        """Test that empty password raises error."""
        with pytest.raises(ValueError, match="cannot be empty"):
            password_handler.hash("")

    @pytest.mark.unit
    def test_unicode_password(self, fast_password_handler):
        """Test hashing unicode password."""
        password = "Contraseña123!àéïõü"
        hashed = fast_password_handler.hash(password)

        assert fast_password_handler.verify(password, hashed) is True

    @pytest.mark.unit
    def test_long_password(self, password_handler):
        """Passwords over bcrypt's 72 byte limit are rejected."""
        with pytest.raises(ValueError, match="cannot be longer than 72"):
            password_handler.hash("A" * 100)

    @pytest.mark.unit
    def test_verify_against_missing_hash(self, password_handler):
        assert password_handler.verify("UlafGeugEirasOj", None) is False
        assert password_handler.verify("", "$2b$12$abc") is False

    @pytest.mark.unit
    def test_verify_against_garbage_hash(self, password_handler):
        """A malformed stored hash never verifies."""
        assert password_handler.verify("UlafGeugEirasOj", "not-a-bcrypt-hash") is False


class TestEmailNormalization:
    """Tests for email normalization."""

    @pytest.mark.unit
    def test_lowercases_and_trims(self):
        result = normalize_email("  Johan.Gerlach17@Hotmail.com ")
        assert result == "johan.gerlach17@hotmail.com"

    @pytest.mark.unit
    @pytest.mark.parametrize("email", [
        "",
        None,
        "not-an-email",
        "@hotmail.com",
        "johan@",
        "jo han@hotmail.com",
        "a@b@c.com",
    ])
    def test_invalid_emails(self, email):
        assert normalize_email(email) is None


class TestUsernameNormalization:
    """Tests for username normalization."""

    @pytest.mark.unit
    def test_trims_but_keeps_case(self):
        assert normalize_username("  John.Windler84 ") == "John.Windler84"

    @pytest.mark.unit
    def test_blank_username(self):
        assert normalize_username("   ") is None
        assert normalize_username(None) is None

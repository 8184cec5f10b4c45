"""Tests for the shared validators module."""

import pytest

from src.shared.validators.password import MIN_PASSWORD_LENGTH, validate_password_strength


class TestPasswordValidation:
    """Test password strength validation."""

    def test_valid_password(self):
        """Letters plus digits at the minimum length pass validation."""
        assert validate_password_strength("secret123") == "secret123"

    def test_valid_password_with_special_characters(self):
        assert validate_password_strength("Secure@Pass123!") == "Secure@Pass123!"

    def test_valid_password_minimum_length(self):
        password = "a" * (MIN_PASSWORD_LENGTH - 1) + "1"
        assert validate_password_strength(password) == password

    def test_password_too_short_fails(self):
        with pytest.raises(ValueError, match=f"at least {MIN_PASSWORD_LENGTH} characters"):
            validate_password_strength("abc123")

    def test_password_without_digit_fails(self):
        with pytest.raises(ValueError, match="Password must contain at least one digit"):
            validate_password_strength("SecurePassword")

    def test_password_without_letter_fails(self):
        with pytest.raises(ValueError, match="Password must contain at least one letter"):
            validate_password_strength("1234567890")

    @pytest.mark.parametrize("password", [" secret123", "secret123 ", "\tsecret123"])
    def test_surrounding_whitespace_fails(self, password):
        with pytest.raises(ValueError, match="whitespace"):
            validate_password_strength(password)

    def test_inner_spaces_are_allowed(self):
        assert validate_password_strength("Secure Pass 123") == "Secure Pass 123"

    def test_password_with_unicode_characters(self):
        """Non-ASCII letters count as letters."""
        assert validate_password_strength("Sécurité1") == "Sécurité1"

    def test_password_very_long(self):
        long_password = "SecurePassword123" * 10
        assert validate_password_strength(long_password) == long_password

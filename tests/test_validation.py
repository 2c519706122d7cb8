"""Tests for the input validation predicates and ContactValidator."""

import pytest

from rolodex.core.errors import ValidationError
from rolodex.utils.validation import (
    DEFAULT_MIN_PHONE_LENGTH,
    ContactValidator,
    valid_email,
    valid_name,
    valid_phone,
)


class TestValidName:
    """Tests for valid_name."""

    @pytest.mark.parametrize("name", ["Alice", "Mary Jane", "Zoë", "  Bob "])
    def test_accepts_letters_and_spaces(self, name):
        assert valid_name(name)

    @pytest.mark.parametrize("name", ["", "   ", "R2D2", "O'Brien", "Anne-Marie"])
    def test_rejects_other_characters(self, name):
        assert not valid_name(name)


class TestValidEmail:
    """Tests for valid_email."""

    @pytest.mark.parametrize(
        "email", ["alice@work.com", "a.b@mail.example.org", "x@y.co"]
    )
    def test_accepts_well_formed(self, email):
        assert valid_email(email)

    @pytest.mark.parametrize(
        "email",
        [
            "alice.work.com",
            "a@b@c.com",
            "@work.com",
            "alice@",
            "alice@localhost",
            "alice@.work.com",
            "alice@work.com.",
            "ali ce@work.com",
        ],
    )
    def test_rejects_malformed(self, email):
        assert not valid_email(email)


class TestValidPhone:
    """Tests for valid_phone."""

    def test_default_minimum_length(self):
        """Test the default of 11 digits."""
        assert DEFAULT_MIN_PHONE_LENGTH == 11
        assert valid_phone("08123456789")
        assert not valid_phone("0812345678")

    def test_leading_plus_allowed(self):
        """Test that the plus sign is not counted as a digit."""
        assert valid_phone("+628123456789")
        assert not valid_phone("+0812345678")

    @pytest.mark.parametrize("phone", ["0812-345-6789", "0812 3456789", "abc", "", "+"])
    def test_rejects_non_digits(self, phone):
        assert not valid_phone(phone)

    def test_custom_minimum(self):
        """Test a configurable minimum."""
        assert valid_phone("123", min_length=3)
        assert not valid_phone("12", min_length=3)


class TestContactValidator:
    """Tests for ContactValidator."""

    def test_valid_fields_pass(self):
        """Test that good input raises nothing."""
        validator = ContactValidator()
        validator.check_name("Alice")
        validator.check_email("alice@work.com")
        validator.check_phone("08123456789")

    def test_messages_use_label(self):
        """Test that the label appears in the error."""
        validator = ContactValidator()
        with pytest.raises(ValidationError, match="New email"):
            validator.check_email("nope", label="New email")

    def test_phone_message_mentions_minimum(self):
        """Test the phone error explains the length rule."""
        with pytest.raises(ValidationError, match="at least 5 digits"):
            ContactValidator(min_phone_length=5).check_phone("123")

    def test_invalid_name_raises(self):
        with pytest.raises(ValidationError):
            ContactValidator().check_name("Al1ce")

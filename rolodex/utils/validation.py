"""
Input validation predicates for contact fields.

The predicates are pure functions; ContactValidator bundles them with the
configurable phone length and raises ValidationError with a readable
message for the first field that fails.
"""

from __future__ import annotations

import re

from rolodex.core.errors import ValidationError

# Numbers shorter than this are rejected (the legacy rule was "longer than 10")
DEFAULT_MIN_PHONE_LENGTH = 11

_PHONE_PATTERN = re.compile(r"^\+?\d+$")


def valid_name(name: str) -> bool:
    """A name is non-blank and made only of letters and whitespace."""
    return bool(name.strip()) and all(c.isalpha() or c.isspace() for c in name)


def valid_email(email: str) -> bool:
    """
    Check an email address.

    Requires exactly one "@", non-empty local and domain parts, a domain
    with at least one dot that neither starts nor ends with a dot, and no
    spaces anywhere.
    """
    if " " in email:
        return False

    parts = email.split("@")
    if len(parts) != 2:
        return False

    local_part, domain_part = parts
    if not local_part or not domain_part:
        return False

    if "." not in domain_part:
        return False
    return not (domain_part.startswith(".") or domain_part.endswith("."))


def valid_phone(phone: str, min_length: int = DEFAULT_MIN_PHONE_LENGTH) -> bool:
    """Digits with an optional leading "+", at least ``min_length`` digits long."""
    if not _PHONE_PATTERN.match(phone):
        return False
    return len(phone.lstrip("+")) >= min_length


class ContactValidator:
    """
    Validation collaborator consulted before the address book is mutated.

    Usage:
        validator = ContactValidator(min_phone_length=11)
        validator.check_name("Alice")          # passes silently
        validator.check_email("not-an-email")  # raises ValidationError

        contacts = Contacts(items, validator=validator)
    """

    def __init__(self, min_phone_length: int = DEFAULT_MIN_PHONE_LENGTH):
        self.min_phone_length = min_phone_length

    def check_name(self, name: str, label: str = "Name") -> None:
        if not valid_name(name):
            raise ValidationError(
                f"{label} {name!r} is invalid: use letters and spaces only"
            )

    def check_email(self, email: str, label: str = "Email") -> None:
        if not valid_email(email):
            raise ValidationError(
                f"{label} {email!r} is invalid: expected something like "
                "user@example.com"
            )

    def check_phone(self, phone: str, label: str = "Phone number") -> None:
        if not valid_phone(phone, self.min_phone_length):
            raise ValidationError(
                f"{label} {phone!r} is invalid: use digits only (optional "
                f"leading '+'), at least {self.min_phone_length} digits"
            )

    def __repr__(self) -> str:
        return f"ContactValidator(min_phone_length={self.min_phone_length})"

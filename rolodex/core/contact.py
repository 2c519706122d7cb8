"""
Contact data model for the rolodex address book.

Provides a Contact representation with methods for:
- Converting to/from the JSON record shape used by every store
- Parsing the legacy ``name,phone,email`` text format
- Deciding whether two records denote the same person
"""

import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from rolodex.core.errors import ParseError, ValidationError

# Timestamp used for records that carry no created_at/updated_at
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Fractional seconds; fromisoformat on 3.10 takes only 3 or 6 digits
_FRACTION = re.compile(r"\.(\d+)")


def utc_now() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any) -> datetime:
    """
    Parse a stored timestamp.

    Args:
        value: ISO 8601 string, datetime, or None

    Returns:
        Timezone-aware datetime (naive values are assumed to be UTC).
        None and empty strings map to the epoch. Fractions finer than
        microseconds are truncated.

    Raises:
        ParseError: If the value is not a valid timestamp
    """
    if value is None or value == "":
        return EPOCH

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            text = _FRACTION.sub(
                lambda m: "." + m.group(1)[:6].ljust(6, "0"), value, count=1
            )
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError as e:
            raise ParseError(f"Invalid timestamp {value!r}: {e}") from e
    else:
        raise ParseError(f"Invalid timestamp type: {type(value).__name__}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _unique(values: list[str]) -> list[str]:
    """Drop duplicates, keeping the first occurrence of each value."""
    seen: set[str] = set()
    result = []
    for value in values:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result


@dataclass
class Contact:
    """
    A single address book record.

    Attributes:
        name: Display name
        phone: Distinct phone numbers, at least one
        email: Email address with exactly one "@"
        tags: Category labels
        created_at: Creation time (UTC)
        updated_at: Last modification time (UTC)
        id: Stable identifier, survives reordering and deletion of others

    Usage:
        contact = Contact("Alice", ["08123456789"], "alice@work.com", tags=["work"])

        # Identity check used by add and merge
        if contact.same_identity(other):
            ...

        # Serialize for storage
        record = contact.to_dict()
        restored = Contact.from_dict(record)
    """

    name: str
    phone: list[str]
    email: str
    tags: list[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __post_init__(self) -> None:
        if isinstance(self.phone, str):
            self.phone = [self.phone]
        self.phone = _unique([p for p in self.phone if p])
        if not self.phone:
            raise ValidationError(f"Contact '{self.name}' needs at least one phone")

        if self.email.count("@") != 1:
            raise ValidationError(
                f"Email {self.email!r} must contain exactly one '@'"
            )

        self.tags = _unique(list(self.tags))

    @property
    def domain(self) -> str:
        """Email domain: the substring after the first "@"."""
        return self.email.split("@", 1)[1]

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags

    def has_domain(self, domain: str) -> bool:
        return self.domain.lower() == domain.lower()

    def shares_phone(self, other: "Contact") -> bool:
        """Check whether the two contacts have at least one number in common."""
        return not set(self.phone).isdisjoint(other.phone)

    def same_identity(self, other: "Contact") -> bool:
        """
        Check whether two records denote the same person.

        Identity is the (name, phone-set) pair: names must be equal and the
        phone sets must overlap.
        """
        return self.name == other.name and self.shares_phone(other)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to the JSON record shape.

        Returns:
            Dictionary with ISO 8601 timestamps
        """
        return {
            "id": self.id,
            "name": self.name,
            "phone": list(self.phone),
            "email": self.email,
            "tags": list(self.tags),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Contact":
        """
        Create a Contact from a stored or received record.

        Args:
            data: Dictionary in the JSON record shape

        Returns:
            Contact instance

        Raises:
            ParseError: If required fields are missing or have the wrong type

        Absent optional fields default to empty tags and epoch timestamps.
        A bare string in ``phone`` is read as a single number.
        """
        if not isinstance(data, dict):
            raise ParseError(
                f"Contact record must be an object, got {type(data).__name__}"
            )

        for key in ("name", "email"):
            if not isinstance(data.get(key), str):
                raise ParseError(f"Contact record is missing a string '{key}'")

        phone = data.get("phone")
        if isinstance(phone, str):
            phone = [phone]
        if not isinstance(phone, list) or not all(isinstance(p, str) for p in phone):
            raise ParseError(
                f"Contact '{data['name']}' needs 'phone' as a list of strings"
            )

        tags = data.get("tags") or []
        if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
            raise ParseError(f"Contact '{data['name']}' has invalid 'tags'")

        kwargs: dict[str, Any] = {}
        if data.get("id"):
            kwargs["id"] = str(data["id"])

        try:
            return cls(
                name=data["name"],
                phone=phone,
                email=data["email"],
                tags=tags,
                created_at=parse_timestamp(data.get("created_at")),
                updated_at=parse_timestamp(data.get("updated_at")),
                **kwargs,
            )
        except ValidationError as e:
            raise ParseError(str(e)) from e

    @classmethod
    def from_line(cls, line: str) -> "Contact":
        """
        Parse a legacy ``name,phone,email`` text line.

        Raises:
            ParseError: If the line does not hold exactly three fields
        """
        parts = line.split(",")
        if len(parts) != 3:
            raise ParseError(f"Invalid line: {line}")
        name, phone, email = (p.strip() for p in parts)
        try:
            return cls(name=name, phone=[phone], email=email)
        except ValidationError as e:
            raise ParseError(f"Invalid line: {line} ({e})") from e

    def copy(self, **changes: Any) -> "Contact":
        """Return a copy with independent lists, optionally overriding fields."""
        values: dict[str, Optional[Any]] = {
            "name": self.name,
            "phone": list(self.phone),
            "email": self.email,
            "tags": list(self.tags),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "id": self.id,
        }
        values.update(changes)
        return Contact(**values)

    def __repr__(self) -> str:
        """Return a readable string representation."""
        return (
            f"Contact(name={self.name!r}, phone={self.phone!r}, "
            f"email={self.email!r})"
        )

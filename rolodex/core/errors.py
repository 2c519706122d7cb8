"""
Exception hierarchy for rolodex.

Every expected failure raised by the core collection, the stores and the
remote client derives from RolodexError so callers can catch one type.
"""


class RolodexError(Exception):
    """Base class for all rolodex errors."""

    pass


class ValidationError(RolodexError):
    """Raised when input is rejected or a contact identity already exists."""

    pass


class DuplicateContactError(ValidationError):
    """Raised when a contact with the same name and a shared phone exists."""

    pass


class ParseError(RolodexError):
    """Raised when a record, payload or merge source cannot be interpreted."""

    pass


class AmbiguousContactError(ParseError):
    """Raised when a name resolves to several contacts and no phone narrows it."""

    pass


class ContactNotFoundError(ParseError):
    """Raised when an update target does not exist."""

    pass


class NetworkError(RolodexError):
    """Raised on a failed or non-success remote request."""

    pass


class StorageError(RolodexError):
    """Raised when the underlying storage cannot be read or written."""

    pass


class ConfigError(RolodexError):
    """Raised when the configuration file cannot be read or is invalid."""

    pass


__all__ = [
    "RolodexError",
    "ValidationError",
    "DuplicateContactError",
    "ParseError",
    "AmbiguousContactError",
    "ContactNotFoundError",
    "NetworkError",
    "StorageError",
    "ConfigError",
]

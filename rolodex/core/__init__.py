"""
rolodex.core - Contact model, lookup index and the indexed collection
"""

from rolodex.core.collection import Contacts, parse_contact_list
from rolodex.core.contact import Contact
from rolodex.core.errors import (
    AmbiguousContactError,
    ConfigError,
    ContactNotFoundError,
    DuplicateContactError,
    NetworkError,
    ParseError,
    RolodexError,
    StorageError,
    ValidationError,
)
from rolodex.core.index import ContactsIndex
from rolodex.core.merge import MergePolicy, MergeSummary

__all__ = [
    "AmbiguousContactError",
    "ConfigError",
    "Contact",
    "ContactNotFoundError",
    "Contacts",
    "ContactsIndex",
    "DuplicateContactError",
    "MergePolicy",
    "MergeSummary",
    "NetworkError",
    "ParseError",
    "RolodexError",
    "StorageError",
    "ValidationError",
    "parse_contact_list",
]

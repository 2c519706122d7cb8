"""
The indexed contact collection.

Contacts owns the ordered sequence of records and a live ContactsIndex.
Every mutation (add, delete, update, merge) updates the sequence and both
index maps together, so that for every position p:

    p in name_map[contacts[p].name.lower()]
    p in domain_map[contacts[p].domain.lower()]

and no bucket holds a stale or out-of-range position. A failed mutation
leaves both untouched.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Iterator, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any

from rolodex.core.contact import Contact, utc_now
from rolodex.core.errors import (
    AmbiguousContactError,
    ContactNotFoundError,
    DuplicateContactError,
    ParseError,
    StorageError,
    ValidationError,
)
from rolodex.core.index import DEFAULT_MAX_EDITS, ContactsIndex
from rolodex.core.merge import MergePolicy, MergeSummary

if TYPE_CHECKING:
    from rolodex.api.remote import RemoteClient
    from rolodex.utils.validation import ContactValidator

logger = logging.getLogger(__name__)

# Sort keys accepted by Contacts.filtered
SORT_KEYS = ("name", "email", "created_at", "updated_at")


class Contacts:
    """
    Ordered address book with name and domain indices kept in lockstep.

    Attributes:
        validator: Optional validation collaborator consulted by add/update

    Usage:
        contacts = Contacts(store.load())

        contacts.add(Contact("Alice", ["123"], "alice@work.com"))
        contacts.index.lookup_name("alice")        # {0}

        contacts.update("Alice", "123", ["friends"], new_email="alice@home.com")
        contacts.delete("Alice")

        summary = contacts.merge_from_file("other.json", MergePolicy.KEEP)
        store.save(contacts.to_list())
    """

    def __init__(
        self,
        items: Iterable[Contact] | None = None,
        validator: ContactValidator | None = None,
    ):
        self._items: list[Contact] = list(items or [])
        self._index = ContactsIndex.build(self._items)
        self.validator = validator

    # =========================================================================
    # Read access
    # =========================================================================

    @property
    def items(self) -> tuple[Contact, ...]:
        """Read-only view of the records in position order."""
        return tuple(self._items)

    @property
    def index(self) -> ContactsIndex:
        """The live index; treat it as read-only."""
        return self._index

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Contact]:
        return iter(self._items)

    def __getitem__(self, position: int) -> Contact:
        return self._items[position]

    def to_list(self) -> list[Contact]:
        """Shallow copy of the sequence, for handing to a store."""
        return list(self._items)

    def get_by_id(self, contact_id: str) -> Contact | None:
        for contact in self._items:
            if contact.id == contact_id:
                return contact
        return None

    def search(
        self,
        name: str | None = None,
        domain: str | None = None,
        fuzzy: str | None = None,
        max_edits: int = DEFAULT_MAX_EDITS,
        workers: int | None = None,
    ) -> list[int]:
        """
        Combined lookup: union of exact name, exact domain and fuzzy matches.

        Args:
            name: Exact name to look up (case-insensitive)
            domain: Exact email domain to look up (case-insensitive)
            fuzzy: Approximate query over names and emails
            max_edits: Edit distance bound for the fuzzy query
            workers: If set, run the fuzzy query on that many threads
                     (inclusive bound) instead of sequentially (exclusive)

        Returns:
            Sorted, de-duplicated positions
        """
        matches: set[int] = set()
        if name:
            matches |= self._index.lookup_name(name)
        if domain:
            matches |= self._index.lookup_domain(domain)
        if fuzzy:
            if workers:
                matches.update(
                    self._index.fuzzy_search_concurrency(
                        fuzzy, self._items, workers, max_edits
                    )
                )
            else:
                matches.update(
                    self._index.fuzzy_search(fuzzy, self._items, max_edits)
                )
        return sorted(matches)

    def filtered(
        self,
        tag: str | None = None,
        domain: str | None = None,
        sort: str | None = None,
    ) -> list[Contact]:
        """
        Records carrying ``tag`` and/or in ``domain``, optionally sorted.

        Raises:
            ValidationError: If ``sort`` is not one of SORT_KEYS
        """
        if sort is not None and sort not in SORT_KEYS:
            raise ValidationError(
                f"Unsupported sort key '{sort}'. Must be one of: {', '.join(SORT_KEYS)}"
            )

        if domain:
            positions = sorted(self._index.lookup_domain(domain))
            selected = [self._items[p] for p in positions]
        else:
            selected = list(self._items)
        if tag:
            selected = [c for c in selected if c.has_tag(tag)]
        if sort:
            selected.sort(key=lambda c: getattr(c, sort))
        return selected

    # =========================================================================
    # Mutation
    # =========================================================================

    def add(self, contact: Contact) -> int:
        """
        Append a new contact.

        Args:
            contact: Record to add

        Returns:
            Position of the new record

        Raises:
            ValidationError: If a field is rejected by the validator
            DuplicateContactError: If a contact with the same name and an
                                   overlapping phone number already exists
        """
        if self.validator is not None:
            self.validator.check_name(contact.name)
            self.validator.check_email(contact.email)
            for phone in contact.phone:
                self.validator.check_phone(phone)

        if self._find_identity(contact):
            raise DuplicateContactError(
                f"Contact '{contact.name}' with phone "
                f"{', '.join(contact.phone)} already exists"
            )

        position = self._append(contact)
        logger.debug(f"Added contact {contact.name!r} at position {position}")
        return position

    def add_all(self, incoming: Iterable[Contact], source: str = "input") -> int:
        """
        add() each record, skipping the ones it rejects.

        Duplicates and records failing validation are logged and skipped.

        Returns:
            Number of contacts added
        """
        added = 0
        total = 0
        for contact in incoming:
            total += 1
            try:
                self.add(contact)
            except ValidationError as e:
                logger.warning(f"Skipping {contact.name!r} from {source}: {e}")
                continue
            added += 1

        logger.info(f"Imported {added} of {total} contact(s) from {source}")
        return added

    def delete(self, name: str, phone: str | None = None) -> Contact | None:
        """
        Remove a contact by name, disambiguated by phone when needed.

        Candidates come from the name index, so the name match ignores
        case. When several contacts share the name, ``phone`` is required
        and selects the candidate whose phone list contains it.

        Args:
            name: Name of the contact to remove
            phone: Phone number to pick among several same-named contacts

        Returns:
            The removed contact, or None if nothing matched

        Raises:
            AmbiguousContactError: If several contacts share the name and no
                                   phone was supplied
        """
        candidates = sorted(self._index.lookup_name(name))

        if not candidates:
            logger.warning(f"No contact found with name '{name}'")
            return None

        if phone:
            candidates = [p for p in candidates if phone in self._items[p].phone]
            if not candidates:
                logger.warning(
                    f"No contact found with name '{name}' and phone '{phone}'"
                )
                return None
        elif len(candidates) > 1:
            raise AmbiguousContactError(
                f"There are {len(candidates)} contacts named '{name}'. "
                "Please provide the phone number to continue."
            )

        return self._remove(candidates[0])

    def update(
        self,
        name: str,
        phone: str,
        tags: Sequence[str],
        new_name: str | None = None,
        new_phone: str | None = None,
        new_email: str | None = None,
    ) -> Contact:
        """
        Overwrite selected fields of one contact.

        The target is the contact named exactly ``name`` whose phone list
        contains ``phone``. Unlike delete(), the name match is case-sensitive.
        Tags are always replaced and updated_at is refreshed; the other
        fields change only when a new value is given.
        ``new_phone`` replaces ``phone`` in the list, keeping other numbers.

        Args:
            name: Current name of the contact
            phone: One of the contact's current phone numbers
            tags: Replacement tag list
            new_name: Replacement name
            new_phone: Replacement for ``phone``
            new_email: Replacement email

        Returns:
            The updated contact

        Raises:
            ContactNotFoundError: If no contact matches name and phone
            AmbiguousContactError: If several contacts match
            ValidationError: If a supplied value is rejected
        """
        matches = [
            p for p, c in enumerate(self._items) if c.name == name and phone in c.phone
        ]
        if not matches:
            raise ContactNotFoundError(
                f"Contact with name '{name}' and phone '{phone}' not found"
            )
        if len(matches) > 1:
            raise AmbiguousContactError(
                f"{len(matches)} contacts named '{name}' share phone '{phone}'"
            )

        if self.validator is not None:
            if new_name:
                self.validator.check_name(new_name, label="New name")
            if new_phone:
                self.validator.check_phone(new_phone, label="New phone number")
            if new_email:
                self.validator.check_email(new_email, label="New email")

        position = matches[0]
        current = self._items[position]

        phones = list(current.phone)
        if new_phone:
            phones = [new_phone if p == phone else p for p in phones]

        # Build the replacement first: Contact enforces its own invariants
        updated = current.copy(
            name=new_name or current.name,
            phone=phones,
            email=new_email or current.email,
            tags=list(tags),
            updated_at=utc_now(),
        )

        self._replace(position, updated)
        logger.debug(f"Updated contact at position {position}: {updated!r}")
        return updated

    # =========================================================================
    # Reconciliation
    # =========================================================================

    def merge_from_file(
        self, path: str | Path, policy: MergePolicy = MergePolicy.KEEP
    ) -> MergeSummary:
        """
        Reconcile with a JSON snapshot on disk.

        The whole file is read and parsed before anything is changed.
        Only this collection is modified; saving it is the caller's job.

        Args:
            path: JSON file holding an array of contact records
            policy: How to treat incoming records that share an identity

        Returns:
            MergeSummary for the run

        Raises:
            StorageError: If the file cannot be read
            ParseError: If the file is not a valid contact array
        """
        path = Path(path)
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to read merge source {path}: {e}") from e

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ParseError(f"Invalid JSON in merge source {path}: {e}") from e

        incoming = parse_contact_list(data, source=str(path))
        logger.info(f"Merging {len(incoming)} contact(s) from {path} ({policy.value})")
        return self.merge(incoming, policy)

    def merge(self, incoming: Iterable[Contact], policy: MergePolicy) -> MergeSummary:
        """
        Reconcile with an in-memory sequence of contacts.

        Identity is the same name with at least one overlapping phone.

        - KEEP: skip incoming records whose identity exists, append the rest
        - OVERWRITE: replace the identity match in place, else append; an
          incoming record matching several contacts is skipped, since the
          replacement would share its identity with the others
        - DUPLICATE: add the incoming numbers to every identity match; an
          incoming record without a match is dropped
        """
        summary = MergeSummary(policy=policy)

        for contact in incoming:
            matches = self._find_identity(contact)

            if policy == MergePolicy.KEEP:
                if matches:
                    summary.skipped += 1
                else:
                    self._append(contact)
                    summary.added += 1

            elif policy == MergePolicy.OVERWRITE:
                if len(matches) > 1:
                    logger.warning(
                        f"Not overwriting {contact.name!r}: it matches "
                        f"{len(matches)} contacts at positions {matches}"
                    )
                    summary.skipped += 1
                elif matches:
                    self._replace(matches[0], contact)
                    summary.overwritten += 1
                else:
                    self._append(contact)
                    summary.added += 1

            elif policy == MergePolicy.DUPLICATE:
                if not matches:
                    logger.debug(
                        f"Dropping {contact.name!r}: no existing contact shares "
                        "its name and phone"
                    )
                    summary.dropped += 1
                    continue
                for position in matches:
                    if self._extend_phones(position, contact.phone):
                        summary.extended += 1
                    else:
                        summary.skipped += 1

        logger.info(str(summary))
        return summary

    # =========================================================================
    # Remote transfer
    # =========================================================================

    def import_from_remote(
        self, url: str, client: RemoteClient | None = None
    ) -> int:
        """
        Fetch contacts from a remote endpoint and add each one.

        Records go through add(), so validation and identity checks apply;
        records rejected there are logged and skipped.

        Returns:
            Number of contacts added

        Raises:
            NetworkError: If the request fails or returns a non-success status
            ParseError: If the payload is not a contact array
        """
        if client is None:
            from rolodex.api.remote import RemoteClient

            client = RemoteClient()

        payload = client.get(url)
        return self.add_all(parse_contact_list(payload, source=url), source=url)

    def export_to_remote(self, url: str, client: RemoteClient | None = None) -> int:
        """
        Post the whole collection to a remote endpoint.

        Returns:
            HTTP status code of the response

        Raises:
            NetworkError: If the request fails or returns a non-success status
        """
        if client is None:
            from rolodex.api.remote import RemoteClient

            client = RemoteClient()

        body = [contact.to_dict() for contact in self._items]
        status = client.post(url, body)
        logger.info(f"Exported {len(body)} contact(s) to {url} (HTTP {status})")
        return status

    # =========================================================================
    # Internal helpers: every sequence change goes through these
    # =========================================================================

    def _find_identity(self, contact: Contact) -> list[int]:
        """Positions holding the same name with an overlapping phone."""
        return [
            p
            for p in sorted(self._index.lookup_name(contact.name))
            if self._items[p].same_identity(contact)
        ]

    def _append(self, contact: Contact) -> int:
        position = len(self._items)
        self._items.append(contact)
        self._index._insert(position, contact)
        return position

    def _remove(self, position: int) -> Contact:
        removed = self._items.pop(position)
        self._index._discard(position, removed)
        self._index._shift_after(position)
        logger.debug(f"Removed contact {removed.name!r} from position {position}")
        return removed

    def _replace(self, position: int, contact: Contact) -> None:
        old = self._items[position]
        self._items[position] = contact
        self._index._move(position, old, contact)

    def _extend_phones(self, position: int, phones: Sequence[str]) -> bool:
        """Append the numbers the contact lacks. Returns True if any were added."""
        current = self._items[position]
        missing = [p for p in phones if p not in current.phone]
        if not missing:
            return False
        current.phone.extend(missing)
        current.updated_at = utc_now()
        return True

    def __repr__(self) -> str:
        return f"Contacts({len(self._items)} contacts, {self._index!r})"


def parse_contact_list(data: Any, source: str = "payload") -> list[Contact]:
    """
    Turn decoded JSON into contacts.

    Raises:
        ParseError: If ``data`` is not a list of valid contact records
    """
    if not isinstance(data, list):
        raise ParseError(
            f"Expected a JSON array of contacts in {source}, got {type(data).__name__}"
        )
    contacts = []
    for i, record in enumerate(data):
        try:
            contacts.append(Contact.from_dict(record))
        except ParseError as e:
            raise ParseError(f"{source}: record {i}: {e}") from e
    return contacts

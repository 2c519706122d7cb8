"""
Lookup index over a sequence of contacts.

Maps lowercased names and lowercased email domains to the positions that
hold them, and answers approximate queries by Levenshtein edit distance,
either with a sequential scan or with a pool of worker threads over
contiguous slices of the snapshot.
"""

import logging
import math
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Optional

from rapidfuzz.distance import Levenshtein

from rolodex.core.contact import Contact

logger = logging.getLogger(__name__)

# Default number of worker threads for the concurrent fuzzy search
DEFAULT_WORKER_COUNT = 4

# Default edit distance bound used by search commands
DEFAULT_MAX_EDITS = 2


def chunk_size_for(total: int, worker_count: int) -> int:
    """
    Size of the contiguous slices handed to fuzzy search workers.

    The slice is ceil(ceil(total / workers) / workers), so a snapshot is
    usually cut into more slices than there are workers; the pool queues
    the surplus.
    """
    if worker_count < 1:
        raise ValueError(f"worker_count must be >= 1, got {worker_count}")
    per_worker = math.ceil(total / worker_count)
    return max(1, math.ceil(per_worker / worker_count))


def _edit_distances(query: str, contact: Contact) -> tuple[int, int]:
    """Distances from an already lowercased query to the name and the email."""
    return (
        Levenshtein.distance(query, contact.name.lower()),
        Levenshtein.distance(query, contact.email.lower()),
    )


def _scan_chunk(
    query: str,
    snapshot: Sequence[Contact],
    start: int,
    end: int,
    max_edits: int,
) -> list[int]:
    """Worker body: positions in snapshot[start:end] within max_edits."""
    matches = []
    for position in range(start, end):
        name_distance, email_distance = _edit_distances(query, snapshot[position])
        if name_distance <= max_edits or email_distance <= max_edits:
            matches.append(position)
    return matches


class ContactsIndex:
    """
    Name and domain lookup structure built from a contact snapshot.

    A standalone index is read-only: build it once from a snapshot and
    query it. The owning Contacts collection uses the underscore-prefixed
    helpers to keep its live index in step with every mutation.

    Usage:
        index = ContactsIndex.build(contacts)

        index.lookup_name("alice")         # {0}
        index.lookup_domain("WORK.com")    # {0, 2}

        index.fuzzy_search("alcie", contacts, max_edits=3)
        index.fuzzy_search_concurrency("alcie", contacts, worker_count=4, max_edits=2)
    """

    def __init__(
        self,
        name_map: Optional[dict[str, set[int]]] = None,
        domain_map: Optional[dict[str, set[int]]] = None,
    ):
        self.name_map: dict[str, set[int]] = name_map or {}
        self.domain_map: dict[str, set[int]] = domain_map or {}

    @classmethod
    def build(cls, contacts: Sequence[Contact]) -> "ContactsIndex":
        """
        Build both maps in one pass over the snapshot.

        Args:
            contacts: Contacts in position order

        Returns:
            New ContactsIndex
        """
        index = cls()
        for position, contact in enumerate(contacts):
            index._insert(position, contact)
        return index

    def lookup_name(self, name: str) -> set[int]:
        """Positions whose name equals ``name``, ignoring case."""
        return set(self.name_map.get(name.lower(), ()))

    def lookup_domain(self, domain: str) -> set[int]:
        """Positions whose email domain equals ``domain``, ignoring case."""
        return set(self.domain_map.get(domain.lower(), ()))

    def fuzzy_search(
        self, query: str, contacts: Sequence[Contact], max_edits: int
    ) -> list[int]:
        """
        Sequential approximate search over names and emails.

        A position matches when the edit distance from the lowercased query
        to the lowercased name, or to the lowercased email, is strictly
        less than ``max_edits``.

        Args:
            query: Search text
            contacts: Snapshot the index was built from
            max_edits: Exclusive edit distance bound

        Returns:
            Matching positions in ascending order
        """
        logger.debug(f"Running fuzzy search for {query!r} (max_edits={max_edits})")
        q = query.lower()
        results = []
        for position, contact in enumerate(contacts):
            name_distance, email_distance = _edit_distances(q, contact)
            if name_distance < max_edits or email_distance < max_edits:
                results.append(position)
        return results

    def fuzzy_search_concurrency(
        self,
        query: str,
        contacts: Sequence[Contact],
        worker_count: int = DEFAULT_WORKER_COUNT,
        max_edits: int = DEFAULT_MAX_EDITS,
    ) -> list[int]:
        """
        Approximate search split across a pool of worker threads.

        Same comparison as fuzzy_search except the bound is inclusive
        (distance <= max_edits). The snapshot is cut into contiguous slices
        (see chunk_size_for) and each slice is scanned by one task; tasks
        hand their partial matches back to this call as they complete.

        The call blocks until every task has finished. There is no
        cancellation or timeout, and the first task failure is re-raised,
        discarding any partial matches.

        Args:
            query: Search text
            contacts: Snapshot the index was built from
            worker_count: Number of pool threads (>= 1)
            max_edits: Inclusive edit distance bound

        Returns:
            Matching positions in ascending order

        Raises:
            ValueError: If worker_count is less than 1
        """
        chunk = chunk_size_for(len(contacts), worker_count)
        snapshot = tuple(contacts)
        q = query.lower()

        logger.debug(
            f"Running fuzzy search with concurrency for {q!r}: "
            f"{len(snapshot)} contacts, chunk size {chunk}, {worker_count} workers"
        )

        results: list[int] = []
        with ThreadPoolExecutor(
            max_workers=worker_count, thread_name_prefix="fuzzy-search"
        ) as pool:
            futures = [
                pool.submit(
                    _scan_chunk,
                    q,
                    snapshot,
                    start,
                    min(start + chunk, len(snapshot)),
                    max_edits,
                )
                for start in range(0, len(snapshot), chunk)
            ]
            for future in as_completed(futures):
                results.extend(future.result())

        results.sort()
        return results

    # -------------------------------------------------------------------------
    # Maintenance helpers for the owning Contacts collection
    # -------------------------------------------------------------------------

    def _insert(self, position: int, contact: Contact) -> None:
        self.name_map.setdefault(contact.name.lower(), set()).add(position)
        self.domain_map.setdefault(contact.domain.lower(), set()).add(position)

    def _discard(self, position: int, contact: Contact) -> None:
        """Drop a position from the buckets of ``contact``, pruning empty ones."""
        _discard_from(self.name_map, contact.name.lower(), position)
        _discard_from(self.domain_map, contact.domain.lower(), position)

    def _shift_after(self, removed: int) -> None:
        """Decrement every position greater than ``removed`` by one."""
        for mapping in (self.name_map, self.domain_map):
            for key, positions in mapping.items():
                if any(p > removed for p in positions):
                    mapping[key] = {p - 1 if p > removed else p for p in positions}

    def _move(self, position: int, old: Contact, new: Contact) -> None:
        """Re-bucket a position whose name or domain may have changed."""
        if old.name.lower() != new.name.lower():
            _discard_from(self.name_map, old.name.lower(), position)
            self.name_map.setdefault(new.name.lower(), set()).add(position)
        if old.domain.lower() != new.domain.lower():
            _discard_from(self.domain_map, old.domain.lower(), position)
            self.domain_map.setdefault(new.domain.lower(), set()).add(position)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ContactsIndex):
            return NotImplemented
        return self.name_map == other.name_map and self.domain_map == other.domain_map

    def __repr__(self) -> str:
        return (
            f"ContactsIndex(names={len(self.name_map)}, "
            f"domains={len(self.domain_map)})"
        )


def _discard_from(mapping: dict[str, set[int]], key: str, position: int) -> None:
    bucket = mapping.get(key)
    if bucket is None:
        return
    bucket.discard(position)
    if not bucket:
        del mapping[key]

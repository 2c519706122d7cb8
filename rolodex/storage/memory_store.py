"""In-memory contact store, for tests and throwaway sessions."""

from __future__ import annotations

from rolodex.core.contact import Contact


class MemoryContactStore:
    """
    Persistence collaborator that keeps the address book in a list.

    load() returns copies so callers cannot change the stored state
    without calling save().
    """

    def __init__(self, contacts: list[Contact] | None = None):
        self._contacts: list[Contact] = [c.copy() for c in contacts or []]

    def load(self) -> list[Contact]:
        return [c.copy() for c in self._contacts]

    def save(self, contacts: list[Contact]) -> None:
        self._contacts = [c.copy() for c in contacts]

    def __repr__(self) -> str:
        return f"MemoryContactStore({len(self._contacts)} contacts)"

"""
rolodex.storage - Persistence collaborators

A store loads and saves the whole address book at once. Two stores are
provided: JsonContactStore (file) and MemoryContactStore.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Protocol

from rolodex.core.contact import Contact
from rolodex.storage.csv_io import export_csv, import_csv
from rolodex.storage.json_store import JSON_FILE_NAME, JsonContactStore
from rolodex.storage.memory_store import MemoryContactStore

# Environment variable selecting the store type ("file" or "mem")
STORE_TYPE_ENV_VAR = "STORE_TYPE"

VALID_STORE_TYPES = ("file", "mem")


class ContactStore(Protocol):
    """Whole-collection persistence interface."""

    def load(self) -> list[Contact]: ...

    def save(self, contacts: list[Contact]) -> None: ...


def get_store(
    data_dir: Path | str | None = None, store_type: str | None = None
) -> ContactStore:
    """
    Create the configured store.

    Args:
        data_dir: Directory holding contacts.json (default: current directory)
        store_type: "file" or "mem"; falls back to $STORE_TYPE, then "file"

    Returns:
        A ContactStore implementation
    """
    store_type = store_type or os.environ.get(STORE_TYPE_ENV_VAR, "file")
    if store_type == "mem":
        return MemoryContactStore()
    return JsonContactStore(Path(data_dir or Path.cwd()) / JSON_FILE_NAME)


__all__ = [
    "ContactStore",
    "JsonContactStore",
    "MemoryContactStore",
    "VALID_STORE_TYPES",
    "export_csv",
    "get_store",
    "import_csv",
]

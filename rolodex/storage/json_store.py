"""
File-backed contact store.

Persists the whole address book as a pretty-printed JSON array. Saves are
atomic: the array is written to a temporary file in the same directory
which then replaces the target.

When the JSON file does not exist yet, older data is picked up instead:
- ``contacts.txt`` (legacy ``name,phone,email`` lines) is migrated to JSON
  and removed
- ``contacts.csv`` is read as-is
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from rolodex.core.collection import parse_contact_list
from rolodex.core.contact import Contact
from rolodex.core.errors import ParseError, StorageError
from rolodex.storage.csv_io import import_csv

# Default file names inside the data directory
JSON_FILE_NAME = "contacts.json"
TXT_FILE_NAME = "contacts.txt"
CSV_FILE_NAME = "contacts.csv"

logger = logging.getLogger(__name__)


class JsonContactStore:
    """
    Persistence collaborator backed by a JSON file.

    Attributes:
        path: JSON file holding the address book

    Usage:
        store = JsonContactStore(Path("~/contacts.json"))
        contacts = store.load()
        store.save(contacts)
    """

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()

    @property
    def txt_path(self) -> Path:
        return self.path.parent / TXT_FILE_NAME

    @property
    def csv_path(self) -> Path:
        return self.path.parent / CSV_FILE_NAME

    def load(self) -> list[Contact]:
        """
        Load every contact.

        Returns:
            Contacts in stored order; empty when no data file exists

        Raises:
            StorageError: If a data file exists but cannot be read
            ParseError: If the data is malformed
        """
        if self.path.exists():
            return self._load_json()
        if self.txt_path.exists():
            return self._migrate_txt()
        if self.csv_path.exists():
            logger.info(f"Reading contacts from {self.csv_path}")
            return import_csv(self.csv_path)

        logger.debug(f"No contact data found at {self.path}")
        return []

    def save(self, contacts: list[Contact]) -> None:
        """
        Atomically replace the stored address book.

        Raises:
            StorageError: If the file cannot be written
        """
        data = [contact.to_dict() for contact in contacts]
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2, ensure_ascii=False)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"Failed to write {self.path}: {e}") from e

        logger.debug(f"Saved {len(data)} contact(s) to {self.path}")

    def _load_json(self) -> list[Contact]:
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ParseError(f"Invalid JSON in {self.path}: {e}") from e
        except OSError as e:
            raise StorageError(f"Failed to read {self.path}: {e}") from e

        return parse_contact_list(data, source=str(self.path))

    def _migrate_txt(self) -> list[Contact]:
        """Convert legacy text lines to JSON; unparseable lines are skipped."""
        try:
            lines = self.txt_path.read_text(encoding="utf-8").splitlines()
        except OSError as e:
            raise StorageError(f"Failed to read {self.txt_path}: {e}") from e

        contacts = []
        for line in lines:
            if not line.strip():
                continue
            try:
                contacts.append(Contact.from_line(line))
            except ParseError as e:
                logger.warning(f"Skipping bad line: {e}")

        self.save(contacts)
        try:
            self.txt_path.unlink()
        except OSError as e:
            raise StorageError(f"Failed to remove {self.txt_path}: {e}") from e

        logger.info(
            f"Migrated {len(contacts)} contact(s) from {self.txt_path} to {self.path}"
        )
        return contacts

    def __repr__(self) -> str:
        return f"JsonContactStore(path={str(self.path)!r})"

"""
CSV import and export for contacts.

Columns: id, name, phone, email, tags, created_at, updated_at. Multi-valued
fields (phone, tags) are joined with ";".
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path

from rolodex.core.contact import Contact
from rolodex.core.errors import ParseError, StorageError

CSV_FIELDS = ["id", "name", "phone", "email", "tags", "created_at", "updated_at"]

# Separator for multi-valued cells
LIST_SEPARATOR = ";"

logger = logging.getLogger(__name__)


def _split(cell: str | None) -> list[str]:
    if not cell:
        return []
    return [part.strip() for part in cell.split(LIST_SEPARATOR) if part.strip()]


def export_csv(path: Path | str, contacts: list[Contact]) -> int:
    """
    Write contacts to a CSV file.

    Returns:
        Number of rows written

    Raises:
        StorageError: If the file cannot be written
    """
    path = Path(path)
    try:
        with open(path, "w", encoding="utf-8", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
            writer.writeheader()
            for contact in contacts:
                row = contact.to_dict()
                row["phone"] = LIST_SEPARATOR.join(contact.phone)
                row["tags"] = LIST_SEPARATOR.join(contact.tags)
                writer.writerow(row)
    except OSError as e:
        raise StorageError(f"Failed to write CSV file {path}: {e}") from e

    logger.debug(f"Exported {len(contacts)} contact(s) to {path}")
    return len(contacts)


def import_csv(path: Path | str) -> list[Contact]:
    """
    Read contacts from a CSV file with a header row.

    Missing id/tags/timestamp columns are allowed.

    Raises:
        StorageError: If the file cannot be read
        ParseError: If a row is not a valid contact
    """
    path = Path(path)
    contacts = []
    try:
        with open(path, encoding="utf-8", newline="") as f:
            reader = csv.DictReader(f)
            # Row 1 is the header
            for line_number, row in enumerate(reader, start=2):
                record = {
                    "id": row.get("id") or None,
                    "name": row.get("name"),
                    "phone": _split(row.get("phone")),
                    "email": row.get("email"),
                    "tags": _split(row.get("tags")),
                    "created_at": row.get("created_at") or None,
                    "updated_at": row.get("updated_at") or None,
                }
                try:
                    contacts.append(Contact.from_dict(record))
                except ParseError as e:
                    raise ParseError(f"{path}: line {line_number}: {e}") from e
    except OSError as e:
        raise StorageError(f"Failed to read CSV file {path}: {e}") from e
    except csv.Error as e:
        raise ParseError(f"Malformed CSV file {path}: {e}") from e

    logger.debug(f"Imported {len(contacts)} contact(s) from {path}")
    return contacts

"""
Merge policies for reconciling the address book with an external snapshot.

Defines how an incoming record is reconciled with an existing record that
shares its identity (same name, overlapping phone number).
"""

from dataclasses import dataclass
from enum import Enum


class MergePolicy(Enum):
    """Available merge policies."""

    KEEP = "keep"  # Existing record wins, incoming is skipped
    OVERWRITE = "overwrite"  # Incoming record replaces the existing one
    DUPLICATE = "duplicate"  # Incoming phone numbers are added to the existing one

    @classmethod
    def from_str(cls, value: str) -> "MergePolicy":
        """
        Parse a policy name.

        Args:
            value: Policy name, case-insensitive

        Returns:
            Matching MergePolicy. "duplication" is accepted as an alias for
            DUPLICATE; unknown names fall back to KEEP.
        """
        normalized = (value or "").strip().lower()
        if normalized == "overwrite":
            return cls.OVERWRITE
        if normalized in ("duplicate", "duplication"):
            return cls.DUPLICATE
        return cls.KEEP


# Names accepted by from_str without falling back, for CLI choices and config
VALID_MERGE_POLICIES = [policy.value for policy in MergePolicy] + ["duplication"]


@dataclass
class MergeSummary:
    """
    Tally of one merge run.

    Attributes:
        policy: Policy that was applied
        added: Incoming records appended as new contacts
        overwritten: Existing records replaced by incoming ones
        extended: Existing records that received new phone numbers
        skipped: Incoming records ignored because their identity exists
        dropped: Incoming records with no identity match under DUPLICATE
    """

    policy: MergePolicy
    added: int = 0
    overwritten: int = 0
    extended: int = 0
    skipped: int = 0
    dropped: int = 0

    @property
    def changed(self) -> bool:
        """True if the merge modified the collection."""
        return bool(self.added or self.overwritten or self.extended)

    def __str__(self) -> str:
        return (
            f"merge ({self.policy.value}): {self.added} added, "
            f"{self.overwritten} overwritten, {self.extended} extended, "
            f"{self.skipped} skipped, {self.dropped} dropped"
        )

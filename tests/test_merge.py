"""
Tests for merging contacts into an existing collection.

Covers the three merge policies, policy parsing, summaries and the
all-or-nothing handling of malformed merge sources.
"""

import json

import pytest

from rolodex.core.collection import Contacts, parse_contact_list
from rolodex.core.contact import Contact
from rolodex.core.errors import ParseError, StorageError
from rolodex.core.index import ContactsIndex
from rolodex.core.merge import VALID_MERGE_POLICIES, MergePolicy, MergeSummary


def write_source(path, records):
    path.write_text(json.dumps(records), encoding="utf-8")
    return path


@pytest.fixture
def existing():
    """Alice (123) at work and Bob (456) at home."""
    return Contacts(
        [
            Contact("Alice", ["123"], "alice@work.com"),
            Contact("Bob", ["456"], "bob@home.com"),
        ]
    )


class TestMergePolicyParsing:
    """Tests for MergePolicy.from_str."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("keep", MergePolicy.KEEP),
            ("Overwrite", MergePolicy.OVERWRITE),
            ("duplicate", MergePolicy.DUPLICATE),
            ("duplication", MergePolicy.DUPLICATE),
            ("DUPLICATION", MergePolicy.DUPLICATE),
            ("something-else", MergePolicy.KEEP),
            ("", MergePolicy.KEEP),
        ],
    )
    def test_from_str(self, value, expected):
        """Test policy names, the alias and the KEEP fallback."""
        assert MergePolicy.from_str(value) is expected

    def test_valid_policies(self):
        """Test the accepted names, alias included."""
        assert VALID_MERGE_POLICIES == ["keep", "overwrite", "duplicate", "duplication"]

    @pytest.mark.parametrize("name", VALID_MERGE_POLICIES)
    def test_every_valid_name_parses_without_fallback(self, name):
        """Test that no accepted name silently becomes KEEP."""
        expected = "duplicate" if name == "duplication" else name
        assert MergePolicy.from_str(name).value == expected


class TestKeepPolicy:
    """Tests for MergePolicy.KEEP."""

    def test_existing_identity_is_kept(self, existing):
        """Test that a matching incoming record is skipped."""
        summary = existing.merge(
            [Contact("Alice", ["123"], "alice@home.com")], MergePolicy.KEEP
        )
        assert len(existing) == 2
        assert existing[0].email == "alice@work.com"
        assert summary.skipped == 1
        assert summary.added == 0
        assert not summary.changed

    def test_new_identity_is_appended(self, existing):
        """Test that a new record is added and indexed."""
        summary = existing.merge(
            [Contact("Carol", ["789"], "carol@work.com")], MergePolicy.KEEP
        )
        assert summary.added == 1
        assert existing.index.lookup_name("carol") == {2}
        assert existing.index.lookup_domain("work.com") == {0, 2}

    def test_same_name_different_phone_is_new(self, existing):
        """Test that identity needs a shared phone."""
        existing.merge([Contact("Alice", ["999"], "a@b.com")], MergePolicy.KEEP)
        assert existing.index.lookup_name("alice") == {0, 2}


class TestOverwritePolicy:
    """Tests for MergePolicy.OVERWRITE."""

    def test_matching_record_replaced_in_place(self, existing):
        """Test that the incoming record replaces the existing one."""
        incoming = Contact("Alice", ["123", "555"], "alice@home.com", tags=["new"])
        summary = existing.merge([incoming], MergePolicy.OVERWRITE)
        assert summary.overwritten == 1
        assert existing[0] is incoming
        assert existing.index.lookup_domain("home.com") == {0, 1}
        assert existing.index.lookup_domain("work.com") == set()
        assert existing.index == ContactsIndex.build(existing.items)

    def test_unmatched_record_appended(self, existing):
        """Test that a new identity is appended."""
        summary = existing.merge(
            [Contact("Dan", ["000"], "dan@work.com")], MergePolicy.OVERWRITE
        )
        assert summary.added == 1
        assert len(existing) == 3

    def test_record_matching_several_contacts_is_skipped(self):
        """Test an overwrite that would leave two contacts sharing identity."""
        existing = Contacts(
            [
                Contact("Alice", ["1"], "alice@work.com"),
                Contact("Alice", ["2"], "alice@home.com"),
            ]
        )
        summary = existing.merge(
            [Contact("Alice", ["1", "2"], "alice@new.com")], MergePolicy.OVERWRITE
        )
        assert summary.skipped == 1
        assert summary.overwritten == 0
        assert [(c.name, c.phone) for c in existing] == [
            ("Alice", ["1"]),
            ("Alice", ["2"]),
        ]
        assert existing.update("Alice", "2", []).email == "alice@home.com"


class TestDuplicatePolicy:
    """Tests for MergePolicy.DUPLICATE."""

    def test_phones_extended_on_match(self, existing):
        """Test that missing numbers are appended to the match."""
        summary = existing.merge(
            [Contact("Alice", ["123", "777"], "other@x.com")], MergePolicy.DUPLICATE
        )
        assert existing[0].phone == ["123", "777"]
        assert existing[0].email == "alice@work.com"
        assert summary.extended == 1

    def test_no_new_numbers_counts_skipped(self, existing):
        """Test that a match without new numbers changes nothing."""
        summary = existing.merge(
            [Contact("Alice", ["123"], "alice@work.com")], MergePolicy.DUPLICATE
        )
        assert existing[0].phone == ["123"]
        assert summary.skipped == 1
        assert not summary.changed

    def test_unmatched_record_dropped(self, existing):
        """Test that incoming records without a match are not added."""
        summary = existing.merge(
            [Contact("Eve", ["321"], "eve@work.com")], MergePolicy.DUPLICATE
        )
        assert len(existing) == 2
        assert summary.dropped == 1
        assert existing.index.lookup_name("eve") == set()

    def test_every_match_extended(self):
        """Test that all identity matches receive the numbers."""
        book = Contacts(
            [
                Contact("Alice", ["123"], "a@work.com"),
                Contact("Alice", ["123", "456"], "a@home.com"),
            ]
        )
        summary = book.merge(
            [Contact("Alice", ["123", "999"], "a@x.com")], MergePolicy.DUPLICATE
        )
        assert book[0].phone == ["123", "999"]
        assert book[1].phone == ["123", "456", "999"]
        assert summary.extended == 2


class TestMergeFromFile:
    """Tests for Contacts.merge_from_file."""

    def test_merge_from_file(self, existing, tmp_path):
        """Test reading a JSON array of records."""
        source = write_source(
            tmp_path / "other.json",
            [
                {"name": "Alice", "phone": ["123"], "email": "x@y.com"},
                {"name": "Carol", "phone": ["789"], "email": "carol@work.com"},
            ],
        )
        summary = existing.merge_from_file(source, MergePolicy.KEEP)
        assert summary.added == 1
        assert summary.skipped == 1
        assert [c.name for c in existing] == ["Alice", "Bob", "Carol"]

    def test_default_policy_is_keep(self, existing, tmp_path):
        """Test the default policy."""
        source = write_source(
            tmp_path / "other.json",
            [{"name": "Alice", "phone": ["123"], "email": "x@y.com"}],
        )
        assert existing.merge_from_file(source).policy is MergePolicy.KEEP

    def test_nanosecond_timestamps_load(self, existing, tmp_path):
        """Test records stamped with nine fractional digits."""
        stamp = "2025-09-17T10:20:30.123456789Z"
        source = write_source(
            tmp_path / "other.json",
            [
                {
                    "name": "Carol",
                    "phone": ["789"],
                    "email": "carol@work.com",
                    "created_at": stamp,
                    "updated_at": stamp,
                }
            ],
        )
        summary = existing.merge_from_file(source, MergePolicy.KEEP)
        assert summary.added == 1
        assert existing[2].created_at.microsecond == 123456

    def test_missing_file_raises_storage_error(self, existing, tmp_path):
        """Test an unreadable source."""
        with pytest.raises(StorageError):
            existing.merge_from_file(tmp_path / "missing.json")

    def test_invalid_json_raises_parse_error(self, existing, tmp_path):
        """Test a source that is not JSON."""
        source = tmp_path / "bad.json"
        source.write_text("{not json", encoding="utf-8")
        with pytest.raises(ParseError):
            existing.merge_from_file(source)

    def test_bad_record_leaves_collection_untouched(self, existing, tmp_path):
        """Test that nothing is merged when one record is malformed."""
        source = write_source(
            tmp_path / "other.json",
            [
                {"name": "Carol", "phone": ["789"], "email": "carol@work.com"},
                {"name": "Broken", "phone": ["1"]},
            ],
        )
        before = existing.to_list()
        with pytest.raises(ParseError, match="record 1"):
            existing.merge_from_file(source, MergePolicy.OVERWRITE)
        assert existing.to_list() == before
        assert existing.index == ContactsIndex.build(before)


class TestParseContactList:
    """Tests for parse_contact_list."""

    def test_non_list_raises(self):
        """Test that the payload must be an array."""
        with pytest.raises(ParseError, match="JSON array"):
            parse_contact_list({"name": "Alice"})

    def test_empty_list(self):
        """Test an empty array."""
        assert parse_contact_list([]) == []


class TestMergeSummary:
    """Tests for MergeSummary."""

    def test_str(self):
        """Test the one-line rendering."""
        summary = MergeSummary(MergePolicy.KEEP, added=2, skipped=1)
        assert str(summary) == (
            "merge (keep): 2 added, 0 overwritten, 0 extended, 1 skipped, 0 dropped"
        )

    def test_changed(self):
        """Test the changed flag."""
        assert not MergeSummary(MergePolicy.DUPLICATE, dropped=3).changed
        assert MergeSummary(MergePolicy.DUPLICATE, extended=1).changed

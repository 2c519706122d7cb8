"""
Unit tests for the storage module.

Tests the JSON file store (including legacy fallbacks), the in-memory
store, CSV import/export and store selection.
"""

import json

import pytest

from rolodex.core.contact import Contact
from rolodex.core.errors import ParseError, StorageError
from rolodex.storage import (
    JsonContactStore,
    MemoryContactStore,
    export_csv,
    get_store,
    import_csv,
)


@pytest.fixture
def sample():
    return [
        Contact("Alice", ["123", "+62811"], "alice@work.com", tags=["work", "vip"]),
        Contact("Bob", ["456"], "bob@home.com"),
    ]


class TestJsonContactStore:
    """Tests for JsonContactStore."""

    def test_load_without_any_file_returns_empty(self, tmp_path):
        """Test that a fresh directory yields no contacts."""
        store = JsonContactStore(tmp_path / "contacts.json")
        assert store.load() == []

    def test_save_then_load(self, tmp_path, sample):
        """Test persisting and reloading the address book."""
        store = JsonContactStore(tmp_path / "contacts.json")
        store.save(sample)
        assert store.load() == sample

    def test_save_writes_json_array(self, tmp_path, sample):
        """Test the on-disk format."""
        path = tmp_path / "contacts.json"
        JsonContactStore(path).save(sample)
        data = json.loads(path.read_text(encoding="utf-8"))
        assert isinstance(data, list)
        assert data[0]["name"] == "Alice"
        assert data[0]["phone"] == ["123", "+62811"]

    def test_save_leaves_no_temp_files(self, tmp_path, sample):
        """Test that the atomic write cleans up after itself."""
        JsonContactStore(tmp_path / "contacts.json").save(sample)
        assert [p.name for p in tmp_path.iterdir()] == ["contacts.json"]

    def test_save_creates_parent_directory(self, tmp_path, sample):
        """Test saving into a directory that does not exist yet."""
        store = JsonContactStore(tmp_path / "nested" / "contacts.json")
        store.save(sample)
        assert store.path.exists()

    def test_invalid_json_raises_parse_error(self, tmp_path):
        """Test a corrupt JSON file."""
        path = tmp_path / "contacts.json"
        path.write_text("[{", encoding="utf-8")
        with pytest.raises(ParseError):
            JsonContactStore(path).load()

    def test_non_array_raises_parse_error(self, tmp_path):
        """Test a JSON file that is not an array."""
        path = tmp_path / "contacts.json"
        path.write_text('{"name": "Alice"}', encoding="utf-8")
        with pytest.raises(ParseError):
            JsonContactStore(path).load()

    def test_unreadable_path_raises_storage_error(self, tmp_path):
        """Test that a directory in place of the file is a storage error."""
        path = tmp_path / "contacts.json"
        path.mkdir()
        with pytest.raises(StorageError):
            JsonContactStore(path).load()

    def test_migrates_legacy_text_file(self, tmp_path):
        """Test contacts.txt is converted to JSON and removed."""
        txt = tmp_path / "contacts.txt"
        txt.write_text(
            "Alice,123,alice@work.com\nbroken line\n\nBob,456,bob@home.com\n",
            encoding="utf-8",
        )
        store = JsonContactStore(tmp_path / "contacts.json")

        contacts = store.load()

        assert [c.name for c in contacts] == ["Alice", "Bob"]
        assert not txt.exists()
        assert store.path.exists()
        assert [c.name for c in store.load()] == ["Alice", "Bob"]

    def test_falls_back_to_csv(self, tmp_path, sample):
        """Test contacts.csv is read when no JSON exists."""
        export_csv(tmp_path / "contacts.csv", sample)
        store = JsonContactStore(tmp_path / "contacts.json")
        assert store.load() == sample

    def test_json_wins_over_legacy_files(self, tmp_path, sample):
        """Test that an existing JSON file is preferred."""
        store = JsonContactStore(tmp_path / "contacts.json")
        store.save(sample[:1])
        (tmp_path / "contacts.txt").write_text("Bob,456,bob@home.com\n")
        assert [c.name for c in store.load()] == ["Alice"]


class TestMemoryContactStore:
    """Tests for MemoryContactStore."""

    def test_starts_empty(self):
        """Test the default state."""
        assert MemoryContactStore().load() == []

    def test_save_then_load(self, sample):
        """Test round trip through memory."""
        store = MemoryContactStore()
        store.save(sample)
        assert store.load() == sample

    def test_load_returns_copies(self, sample):
        """Test that mutating loaded contacts does not change the store."""
        store = MemoryContactStore(sample)
        loaded = store.load()
        loaded[0].phone.append("999")
        assert store.load()[0].phone == ["123", "+62811"]


class TestCsv:
    """Tests for CSV import/export."""

    def test_export_returns_count(self, tmp_path, sample):
        """Test the row count."""
        assert export_csv(tmp_path / "out.csv", sample) == 2

    def test_export_joins_lists(self, tmp_path, sample):
        """Test multi-valued cells."""
        path = tmp_path / "out.csv"
        export_csv(path, sample)
        text = path.read_text(encoding="utf-8")
        assert text.splitlines()[0] == "id,name,phone,email,tags,created_at,updated_at"
        assert "123;+62811" in text
        assert "work;vip" in text

    def test_import_restores_contacts(self, tmp_path, sample):
        """Test reading back an exported file."""
        path = tmp_path / "out.csv"
        export_csv(path, sample)
        assert import_csv(path) == sample

    def test_import_minimal_columns(self, tmp_path):
        """Test a hand-written CSV with only the required columns."""
        path = tmp_path / "in.csv"
        path.write_text("name,phone,email\nCarol,789,carol@x.org\n", encoding="utf-8")
        [contact] = import_csv(path)
        assert contact.name == "Carol"
        assert contact.phone == ["789"]
        assert contact.tags == []

    def test_import_bad_row_reports_line(self, tmp_path):
        """Test that an invalid row raises ParseError with its line."""
        path = tmp_path / "in.csv"
        path.write_text(
            "name,phone,email\nCarol,789,carol@x.org\nDan,,dan@x.org\n",
            encoding="utf-8",
        )
        with pytest.raises(ParseError, match="line 3"):
            import_csv(path)

    def test_import_missing_file_raises_storage_error(self, tmp_path):
        """Test an absent CSV file."""
        with pytest.raises(StorageError):
            import_csv(tmp_path / "missing.csv")


class TestGetStore:
    """Tests for store selection."""

    def test_default_is_json_in_data_dir(self, tmp_path, monkeypatch):
        """Test the file store is the default."""
        monkeypatch.delenv("STORE_TYPE", raising=False)
        store = get_store(tmp_path)
        assert isinstance(store, JsonContactStore)
        assert store.path == tmp_path / "contacts.json"

    def test_mem_from_argument(self, tmp_path):
        """Test explicit memory store selection."""
        assert isinstance(get_store(tmp_path, "mem"), MemoryContactStore)

    def test_mem_from_environment(self, tmp_path, monkeypatch):
        """Test STORE_TYPE=mem."""
        monkeypatch.setenv("STORE_TYPE", "mem")
        assert isinstance(get_store(tmp_path), MemoryContactStore)

    def test_unknown_type_falls_back_to_file(self, tmp_path):
        """Test that anything but mem gives the file store."""
        assert isinstance(get_store(tmp_path, "sqlite"), JsonContactStore)

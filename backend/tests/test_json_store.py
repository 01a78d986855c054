"""
SiteAdmin Backend - JSON Store Unit Tests
=========================================

What:  Tests for JsonStore reads, writes and error mapping.
How:   Real files in pytest's tmp_path; no mocking of the filesystem.

Test Strategy:
    ✅ Stored values come back unchanged
    ✅ Missing / malformed files map to the right StoreError kind
    ✅ Writes are indented UTF-8 and leave no temp files behind
    ✅ Failed writes leave the previous document untouched
    ✅ Concurrent writes end with one complete document
"""

import asyncio
import json

import pytest

from siteadmin.exceptions import DocumentNotFoundError, StoreError
from siteadmin.services.json_store import JsonStore, dump_document


class TestJsonStoreRead:
    """Tests for JsonStore.read()."""

    @pytest.mark.asyncio
    async def test_read_returns_stored_value(self, data_dir, write_document):
        """A document is returned exactly as stored."""
        value = [{"id": 1, "title": "Kök"}, {"id": 2, "title": "Badrum"}]
        write_document("projekt.json", value)

        store = JsonStore(str(data_dir))
        assert await store.read("projekt") == value

    @pytest.mark.asyncio
    async def test_read_missing_file_raises_not_found(self, data_dir):
        """A resource with no file yet raises DocumentNotFoundError."""
        store = JsonStore(str(data_dir))
        with pytest.raises(DocumentNotFoundError, match="Fel vid hämtning av personal"):
            await store.read("personal")

    @pytest.mark.asyncio
    async def test_read_malformed_json_raises_store_error(self, data_dir):
        """Malformed JSON is a StoreError but not a missing document."""
        (data_dir / "kontakt.json").write_text("{not json", encoding="utf-8")
        store = JsonStore(str(data_dir))

        with pytest.raises(StoreError) as exc_info:
            await store.read("kontakt")
        assert not isinstance(exc_info.value, DocumentNotFoundError)
        assert exc_info.value.message == "Fel vid hämtning av kontakt"
        assert "json_error" in exc_info.value.context

    @pytest.mark.asyncio
    async def test_read_unknown_key_rejected(self, data_dir):
        """Only keys from the resource table map to files."""
        store = JsonStore(str(data_dir))
        with pytest.raises(StoreError, match="Okänd resurs"):
            await store.read("../etc/passwd")

    def test_message_has_no_path(self, data_dir):
        """File paths go into context, never into the message."""
        store = JsonStore(str(data_dir))
        with pytest.raises(StoreError) as exc_info:
            store.path_for("nope")
        assert str(data_dir) not in exc_info.value.message


class TestJsonStoreWrite:
    """Tests for JsonStore.write()."""

    @pytest.mark.asyncio
    async def test_write_is_indented_utf8(self, data_dir):
        """Documents are written with 2-space indentation and raw UTF-8."""
        store = JsonStore(str(data_dir))
        value = {"adress": "Storgatan 1, Göteborg", "telefon": "031-123456"}

        await store.write("kontakt", value)

        text = (data_dir / "kontakt.json").read_text(encoding="utf-8")
        assert text == json.dumps(value, indent=2, ensure_ascii=False)
        assert "Göteborg" in text

    @pytest.mark.asyncio
    async def test_write_then_read_roundtrip(self, data_dir):
        """What is written is what is read back."""
        store = JsonStore(str(data_dir))
        value = [{"namn": "Åsa", "roll": "VD", "bild": "/uploads/1-2.jpg"}]

        await store.write("personal", value)
        assert await store.read("personal") == value

    @pytest.mark.asyncio
    async def test_write_leaves_no_temp_files(self, data_dir):
        """The temp file is renamed over the target."""
        store = JsonStore(str(data_dir))
        await store.write("services", [{"id": 1}])
        await store.write("services", [{"id": 2}])

        assert sorted(p.name for p in data_dir.iterdir()) == ["services.json"]

    @pytest.mark.asyncio
    async def test_unserializable_value_keeps_previous_document(self, data_dir, write_document):
        """A value that cannot be serialized never reaches the disk."""
        path = write_document("projekt.json", [{"id": 1}])
        before = path.read_text(encoding="utf-8")
        store = JsonStore(str(data_dir))

        with pytest.raises(StoreError, match="Fel vid sparande av projekt"):
            await store.write("projekt", [{"id": object()}])

        assert path.read_text(encoding="utf-8") == before

    @pytest.mark.asyncio
    async def test_write_to_missing_directory_raises_store_error(self, tmp_path):
        """OS errors during the write become StoreError."""
        store = JsonStore(str(tmp_path / "does-not-exist"))
        with pytest.raises(StoreError) as exc_info:
            await store.write("projekt", [])
        assert exc_info.value.message == "Fel vid sparande av projekt"
        assert "os_error" in exc_info.value.context

    @pytest.mark.asyncio
    async def test_concurrent_writes_last_one_wins(self, data_dir):
        """Concurrent saves never interleave: the file holds one complete value."""
        store = JsonStore(str(data_dir))
        values = [[{"id": i, "text": "x" * 2000}] for i in range(10)]

        await asyncio.gather(*(store.write("projekt", v) for v in values))

        stored = await store.read("projekt")
        assert stored in values


class TestDumpDocument:
    def test_dump_document_keeps_non_ascii(self):
        assert dump_document({"ort": "Malmö"}) == '{\n  "ort": "Malmö"\n}'


class TestResourceKeys:
    def test_keys_cover_resource_table(self, data_dir):
        """Every content resource plus the admin credential has a file."""
        store = JsonStore(str(data_dir))
        assert sorted(store.keys()) == ["admin", "homeServices", "kontakt", "personal", "projekt", "services"]
        assert store.path_for("homeServices").name == "homeservices.json"
        assert store.path_for("admin").name == "adminpassword.json"


class TestTempFiles:
    def test_temp_names_unique_per_write(self, data_dir):
        """Two writers of one document never share a temp file."""
        target = data_dir / "projekt.json"
        first = JsonStore._temp_path(target)
        second = JsonStore._temp_path(target)

        assert first != second
        assert first.parent == second.parent == data_dir
        assert first.name.startswith(".projekt.json.")
        assert first.name.endswith(".tmp")

    @pytest.mark.asyncio
    async def test_separate_stores_on_one_directory(self, data_dir):
        """Two stores (two app instances) writing the same file concurrently both succeed."""
        stores = [JsonStore(str(data_dir)), JsonStore(str(data_dir))]
        values = [[{"id": i, "text": "y" * 5000}] for i in range(2)]

        await asyncio.gather(*(store.write("projekt", v) for store, v in zip(stores, values)))

        assert await stores[0].read("projekt") in values
        assert sorted(p.name for p in data_dir.iterdir()) == ["projekt.json"]

# SPDX-License-Identifier: LGPL-3.0-or-later
from __future__ import annotations

import pytest

from fakes.fake_hivex import FakeHivex
from fixtures.settings_models import Person
from regsettings import RegistrySettings
from regsettings.attributes import ValueKind
from regsettings.core.exceptions import StoreError, StoreUnavailableError
from regsettings.stores import hive_store
from regsettings.stores.hive_store import HiveStore, decode_value, encode_value


@pytest.mark.unit
class TestEncoding:
    def test_reg_sz_is_utf16le_with_nul(self):
        assert encode_value(ValueKind.STRING, '"é"') == '"é"\0'.encode("utf-16le")

    def test_reg_sz_decode_stops_at_nul(self):
        raw = "abc\0garbage".encode("utf-16le")
        assert decode_value(ValueKind.STRING, raw) == "abc"
        assert decode_value(ValueKind.STRING, "ab".encode("utf-16le") + b"\x00") == "ab"

    def test_other_kinds_read_raw(self):
        assert decode_value(ValueKind.DWORD, b"\x01\x00\x00\x00") == b"\x01\x00\x00\x00"
        assert decode_value(11, b"\x00" * 8) == b"\x00" * 8

    def test_binary_verbatim(self):
        assert encode_value(ValueKind.BINARY, b"\x00\xff") == b"\x00\xff"
        assert decode_value(ValueKind.BINARY, b"\x00\xff") == b"\x00\xff"


@pytest.mark.unit
class TestHiveStore:
    def test_creates_missing_keys(self):
        h = FakeHivex()
        store = HiveStore(h, "Vendor\\App")

        assert h.find("Vendor", "App") != 0
        assert store.dirty

    def test_existing_key_is_clean(self):
        h = FakeHivex()
        HiveStore(h, "Vendor/App")
        store = HiveStore(h, "Vendor\\App", create=False)

        assert not store.dirty

    def test_missing_key_without_create(self):
        with pytest.raises(StoreError) as ei:
            HiveStore(FakeHivex(), "Vendor\\App", create=False)
        assert ei.value.context["missing"] == "Vendor"

    @pytest.mark.parametrize("raise_on_missing", [False, True])
    def test_missing_value(self, raise_on_missing):
        store = HiveStore(FakeHivex(raise_on_missing_value=raise_on_missing), "App")
        assert store.get_value("Name") is None

    def test_values_use_on_disk_encoding(self):
        h = FakeHivex()
        store = HiveStore(h, "App")
        store.set_value("Name", '"O\'Brien"', ValueKind.STRING)
        store.set_value("Blob", b"\x01", ValueKind.BINARY)

        node = h.find("App")
        assert h.raw(node, "Name") == (1, "\"O'Brien\"\0".encode("utf-16le"))
        assert h.raw(node, "Blob") == (3, b"\x01")
        assert store.get_value("Name") == ("\"O'Brien\"", ValueKind.STRING)
        assert store.get_value("Blob") == (b"\x01", ValueKind.BINARY)

    def test_payload_checked(self):
        store = HiveStore(FakeHivex(), "App")
        with pytest.raises(TypeError):
            store.set_value("Name", b"x", ValueKind.STRING)

    def test_commit_only_when_dirty(self):
        h = FakeHivex()
        HiveStore(h, "App")
        store = HiveStore(h, "App", create=False)

        store.commit()
        assert h.commits == 0
        store.set_value("Name", '""', ValueKind.STRING)
        store.commit()
        store.commit()
        assert h.commits == 1

    def test_context_manager_commits_and_closes(self):
        h = FakeHivex()
        with HiveStore(h, "App", owns_hive=True) as store:
            RegistrySettings(Person, store).save(Person())

        assert h.commits == 1
        assert h.closed

    def test_context_manager_skips_commit_on_error(self):
        h = FakeHivex()
        with pytest.raises(RuntimeError):
            with HiveStore(h, "App", owns_hive=True):
                raise RuntimeError("boom")

        assert h.commits == 0
        assert h.closed

    def test_settings_round_trip(self):
        h = FakeHivex()
        store = HiveStore(h, "Software\\App")
        rs = RegistrySettings(Person, store)
        p = Person()
        p.Name = "Ada"
        rs.save(p)

        back = Person()
        assert rs.load(back) == ["Name"]
        assert back.Name == "Ada"


@pytest.mark.unit
class TestOpen:
    def test_requires_hivex(self, monkeypatch, tmp_path):
        monkeypatch.setattr(hive_store, "HIVEX_AVAILABLE", False)
        with pytest.raises(StoreUnavailableError):
            HiveStore.open(tmp_path / "SOFTWARE", "App")

    def test_missing_file(self, monkeypatch, tmp_path):
        monkeypatch.setattr(hive_store, "HIVEX_AVAILABLE", True)
        with pytest.raises(StoreError) as ei:
            HiveStore.open(tmp_path / "SOFTWARE", "App")
        assert "missing" in str(ei.value)

    def test_too_small(self, monkeypatch, tmp_path):
        monkeypatch.setattr(hive_store, "HIVEX_AVAILABLE", True)
        p = tmp_path / "SOFTWARE"
        p.write_bytes(b"regf" + b"\0" * 100)
        with pytest.raises(StoreError) as ei:
            HiveStore.open(p, "App")
        assert "too small" in str(ei.value)

    def test_bad_signature(self, monkeypatch, tmp_path):
        monkeypatch.setattr(hive_store, "HIVEX_AVAILABLE", True)
        p = tmp_path / "SOFTWARE"
        p.write_bytes(b"\0" * 8192)
        with pytest.raises(StoreError) as ei:
            HiveStore.open(p, "App")
        assert "regf" in str(ei.value)

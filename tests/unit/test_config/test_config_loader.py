# SPDX-License-Identifier: LGPL-3.0-or-later
"""Tests for option table files."""
from __future__ import annotations

import json

import pytest

from fixtures.settings_models import AppSettings
from regsettings import RegistrySettings
from regsettings.attributes import RegistrySetting, ValueKind
from regsettings.config import load_options, parse_options
from regsettings.core.exceptions import ConfigError


@pytest.mark.unit
class TestParseOptions:
    def test_properties_table(self):
        opts = parse_options(
            {
                "properties": {
                    "Password": {"value_kind": "binary", "obfuscate": True},
                    "Name": "string",
                    "Counter": 3,
                }
            }
        )

        assert opts == {
            "Password": RegistrySetting(ValueKind.BINARY, obfuscate=True),
            "Name": RegistrySetting(ValueKind.STRING),
            "Counter": RegistrySetting(ValueKind.BINARY),
        }

    def test_bare_table(self):
        assert parse_options({"Name": "REG_SZ"}) == {"Name": RegistrySetting()}

    def test_empty(self):
        assert parse_options({}) == {}
        assert parse_options({"properties": None}) == {}

    def test_table_must_be_mapping(self):
        with pytest.raises(ConfigError):
            parse_options({"properties": ["Name"]})

    def test_bad_entry_names_property(self):
        with pytest.raises(ConfigError) as ei:
            parse_options({"properties": {"Password": {"value_kind": "binary", "encrypt": True}}})

        assert "Password" in str(ei.value)
        assert ei.value.context["property"] == "Password"
        assert isinstance(ei.value.cause, ValueError)

    def test_bad_property_name(self):
        with pytest.raises(ConfigError):
            parse_options({"": "string"})


@pytest.mark.unit
class TestLoadOptions:
    def test_yaml(self, tmp_path):
        p = tmp_path / "options.yaml"
        p.write_text(
            "properties:\n"
            "  token: {value_kind: binary, obfuscate: true}\n"
            "  port: REG_BINARY\n",
            encoding="utf-8",
        )

        opts = load_options(p)
        assert opts["token"] == RegistrySetting(ValueKind.BINARY, obfuscate=True)
        assert opts["port"] == RegistrySetting(ValueKind.BINARY)

    def test_json(self, tmp_path):
        p = tmp_path / "options.json"
        p.write_text(json.dumps({"properties": {"port": {"value_kind": 3}}}), encoding="utf-8")

        assert load_options(str(p)) == {"port": RegistrySetting(ValueKind.BINARY)}

    def test_no_suffix_falls_back_to_yaml(self, tmp_path):
        p = tmp_path / "options"
        p.write_text("port: binary\n", encoding="utf-8")

        assert load_options(p) == {"port": RegistrySetting(ValueKind.BINARY)}

    def test_empty_file(self, tmp_path):
        p = tmp_path / "options.yml"
        p.write_text("", encoding="utf-8")

        assert load_options(p) == {}

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError) as ei:
            load_options(tmp_path / "absent.yaml")
        assert isinstance(ei.value.cause, FileNotFoundError)

    def test_invalid_json(self, tmp_path):
        p = tmp_path / "options.json"
        p.write_text("{not json", encoding="utf-8")

        with pytest.raises(ConfigError):
            load_options(p)

    def test_invalid_yaml(self, tmp_path):
        p = tmp_path / "options.yaml"
        p.write_text("properties: [unclosed\n", encoding="utf-8")

        with pytest.raises(ConfigError):
            load_options(p)

    def test_top_level_must_be_mapping(self, tmp_path):
        p = tmp_path / "options.yaml"
        p.write_text("- port\n- name\n", encoding="utf-8")

        with pytest.raises(ConfigError):
            load_options(p)

    def test_feeds_registry_settings(self, tmp_path, memory_store):
        p = tmp_path / "options.yaml"
        p.write_text("properties:\n  port: binary\n", encoding="utf-8")

        rs = RegistrySettings(AppSettings, memory_store, options=load_options(p))
        assert rs.descriptor("port").value_kind is ValueKind.BINARY

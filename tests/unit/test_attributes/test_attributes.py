# SPDX-License-Identifier: LGPL-3.0-or-later
"""Tests for value kinds, per-property options and marker tagging."""
from __future__ import annotations

import unittest

from regsettings.attributes import (
    ATTRIBUTES_ATTR,
    Ignore,
    RegistrySetting,
    ValueKind,
    attached_attributes,
    find_setting,
    tag,
)


class TestValueKind(unittest.TestCase):
    """ValueKind.coerce accepts the spellings found in option files."""

    def test_codes_match_registry_types(self):
        self.assertEqual(int(ValueKind.STRING), 1)
        self.assertEqual(int(ValueKind.BINARY), 3)
        self.assertEqual(int(ValueKind.DWORD), 4)
        self.assertEqual(int(ValueKind.QWORD), 11)

    def test_coerce_names(self):
        for text, expected in [
            ("string", ValueKind.STRING),
            ("Binary", ValueKind.BINARY),
            ("REG_SZ", ValueKind.STRING),
            ("REG_BINARY", ValueKind.BINARY),
            ("reg_multi_sz", ValueKind.MULTI_STRING),
            ("expand-string", ValueKind.EXPAND_STRING),
        ]:
            with self.subTest(text=text):
                self.assertIs(ValueKind.coerce(text), expected)

    def test_coerce_codes(self):
        self.assertIs(ValueKind.coerce(3), ValueKind.BINARY)
        self.assertIs(ValueKind.coerce(ValueKind.DWORD), ValueKind.DWORD)
        # Unknown codes survive so the descriptor can reject them precisely.
        self.assertEqual(ValueKind.coerce(99), 99)

    def test_coerce_rejects_garbage(self):
        for bad in ("blob", True, 1.5, None):
            with self.subTest(bad=bad):
                with self.assertRaises(ValueError):
                    ValueKind.coerce(bad)


class TestRegistrySetting(unittest.TestCase):
    def test_defaults(self):
        s = RegistrySetting()
        self.assertIs(s.value_kind, ValueKind.STRING)
        self.assertFalse(s.obfuscate)

    def test_from_mapping(self):
        s = RegistrySetting.from_mapping({"value_kind": "binary", "obfuscate": True})
        self.assertEqual(s, RegistrySetting(ValueKind.BINARY, obfuscate=True))

    def test_from_bare_kind(self):
        self.assertEqual(RegistrySetting.from_mapping("binary"), RegistrySetting(ValueKind.BINARY))
        self.assertEqual(RegistrySetting.from_mapping(1), RegistrySetting(ValueKind.STRING))

    def test_from_instance_is_identity(self):
        s = RegistrySetting(ValueKind.BINARY)
        self.assertIs(RegistrySetting.from_mapping(s), s)

    def test_from_mapping_rejects_unknown_keys(self):
        with self.assertRaises(ValueError):
            RegistrySetting.from_mapping({"value_kind": "binary", "encrypt": True})

    def test_from_mapping_rejects_non_bool_obfuscate(self):
        with self.assertRaises(TypeError):
            RegistrySetting.from_mapping({"obfuscate": "yes"})

    def test_from_mapping_rejects_lists(self):
        with self.assertRaises(TypeError):
            RegistrySetting.from_mapping(["binary"])  # type: ignore[arg-type]


class Marker:
    pass


class TestTag(unittest.TestCase):
    def test_tag_property_keeps_markers_across_setter(self):
        class Holder:
            @tag(Marker, RegistrySetting(ValueKind.BINARY))
            @property
            def value(self) -> int:
                return 1

            @value.setter
            def value(self, v: int) -> None:
                pass

        prop = Holder.__dict__["value"]
        attrs = attached_attributes(prop.fget)
        self.assertEqual(len(attrs), 2)
        self.assertIsInstance(attrs[0], Marker)
        self.assertEqual(find_setting(attrs), RegistrySetting(ValueKind.BINARY))

    def test_tag_below_property(self):
        class Holder:
            @property
            @tag(Ignore())
            def value(self) -> int:
                return 1

        fget = Holder.__dict__["value"].fget
        self.assertIsInstance(getattr(fget, ATTRIBUTES_ATTR)[0], Ignore)

    def test_tags_accumulate(self):
        def getter(self) -> int:
            return 0

        tag(Marker)(getter)
        tag(Ignore)(getter)
        self.assertEqual([type(a) for a in attached_attributes(getter)], [Marker, Ignore])

    def test_tag_rejects_non_callables(self):
        with self.assertRaises(TypeError):
            tag(Marker)(42)

    def test_no_attributes(self):
        self.assertEqual(attached_attributes(None), ())
        self.assertIsNone(find_setting([Marker()]))


if __name__ == "__main__":
    unittest.main()

# SPDX-License-Identifier: LGPL-3.0-or-later
# regsettings/descriptor.py
"""
Per-property metadata and the encode/decode strategy used by load/save.

The strategy is picked once, when the descriptor is built, from the property's
category:

  ENUM       enum members; by name (STRING) or as int64 LE (BINARY)
  PRIMITIVE  str/bool/int/float/Decimal/date/time/datetime via invariant text
  RAW        bytes/bytearray stored verbatim (BINARY only)
  PARSEABLE  any other type exposing a static parse function
"""
from __future__ import annotations

import enum
import inspect
import logging
import struct
import types
import typing
from enum import Enum
from functools import reduce
from typing import Any, Callable, Optional, Tuple, Union

from .attributes import SUPPORTED_VALUE_KINDS, RegistrySetting, ValueKind, find_setting
from .core.convert import from_invariant, is_primitive, to_invariant
from .core.exceptions import (
    ConversionError,
    ObfuscationError,
    UnsupportedPropertyTypeError,
    UnsupportedValueKindError,
)
from .obfuscation import deobfuscate, obfuscate
from .reflection import PropertyInfo
from .stores.base import StoreHandle

logger = logging.getLogger(__name__)

_INT64 = struct.Struct("<q")

# Decoding failures that make a single property "not loaded" instead of
# aborting the whole load.
SOFT_DECODE_ERRORS = (ValueError, TypeError, KeyError, OverflowError, struct.error)

_PARSE_CANDIDATES = {
    ValueKind.STRING: ("parse", "from_string"),
    ValueKind.BINARY: ("from_bytes", "parse"),
}
_PARSE_ARG = {ValueKind.STRING: "str", ValueKind.BINARY: "bytes"}
_ACCEPTED_ARGS = {
    ValueKind.STRING: (str,),
    ValueKind.BINARY: (bytes, bytearray, memoryview),
}


class PropertyCategory(Enum):
    ENUM = "enum"
    PRIMITIVE = "primitive"
    RAW = "raw"
    PARSEABLE = "parseable"


# ---------------------------------------------------------------------------
# Type helpers
# ---------------------------------------------------------------------------


def unwrap_type(ann: Any) -> Any:
    """Strip ``Annotated`` and ``Optional`` layers; other unions are returned as-is."""
    if typing.get_origin(ann) is typing.Annotated:
        ann = typing.get_args(ann)[0]
    origin = typing.get_origin(ann)
    if origin is Union or origin is types.UnionType:
        args = [a for a in typing.get_args(ann) if a is not type(None)]
        if len(args) == 1:
            return unwrap_type(args[0])
    return ann


def _accepts(fn: Callable[..., Any], kind: ValueKind) -> bool:
    """True when `fn` takes one positional argument compatible with `kind`."""
    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError):
        # Builtins without signature metadata; trust the name.
        return True
    params = [
        p
        for p in sig.parameters.values()
        if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD, p.VAR_POSITIONAL)
    ]
    if not params:
        return False
    required = [
        p
        for p in sig.parameters.values()
        if p.default is p.empty and p.kind not in (p.VAR_POSITIONAL, p.VAR_KEYWORD)
    ]
    if len(required) > 1:
        return False

    first = params[0]
    ann = first.annotation
    if ann is first.empty or ann is Any or ann is object:
        return True
    if isinstance(ann, str):
        try:
            ann = typing.get_type_hints(fn).get(first.name, ann)
        except Exception:
            return _PARSE_ARG[kind] in ann
        if isinstance(ann, str):
            return _PARSE_ARG[kind] in ann
    candidates = typing.get_args(ann) if typing.get_origin(ann) in (Union, types.UnionType) else (ann,)
    return any(isinstance(c, type) and issubclass(c, _ACCEPTED_ARGS[kind]) for c in candidates)


def find_parse_function(tp: type, kind: ValueKind) -> Optional[Callable[[Any], Any]]:
    """Static/class method that builds a `tp` from text (STRING) or bytes (BINARY)."""
    for name in _PARSE_CANDIDATES[kind]:
        raw = inspect.getattr_static(tp, name, None)
        if not isinstance(raw, (staticmethod, classmethod)):
            continue
        fn = getattr(tp, name)
        if _accepts(fn, kind):
            return fn
    return None


def _parse_enum(tp: type, text: str) -> Any:
    members = tp.__members__
    if text in members:
        return members[text]
    stripped = text.strip()
    if stripped.lstrip("+-").isdigit():
        return tp(int(stripped))
    if issubclass(tp, enum.Flag) and "|" in stripped:
        return reduce(lambda a, b: a | b, (members[p.strip()] for p in stripped.split("|")))
    raise KeyError(f"{text!r} is not a member of {tp.__name__}")


def _enum_name(value: Enum) -> str:
    name = value.name
    if name is None:
        # Composite flags on older interpreters have no name.
        return str(value.value)
    return name


# ---------------------------------------------------------------------------
# Descriptor
# ---------------------------------------------------------------------------


class PropertyDescriptor:
    """
    Immutable mapping of one property to one registry value of the same name.
    """

    __slots__ = (
        "name",
        "value_kind",
        "obfuscate",
        "category",
        "property_type",
        "attributes",
        "parse_function",
        "_info",
        "_encode",
        "_decode",
    )

    def __init__(self, info: PropertyInfo, options: Optional[RegistrySetting] = None):
        setting = options or find_setting(info.attributes) or RegistrySetting()

        self._info = info
        self.name: str = info.name
        self.attributes: Tuple[Any, ...] = info.attributes
        self.obfuscate: bool = bool(setting.obfuscate)
        self.value_kind: ValueKind = self._check_value_kind(setting.value_kind)
        self.property_type: type = self._resolve_type(info.annotation)
        self.parse_function: Optional[Callable[[Any], Any]] = None
        self.category: PropertyCategory = self._classify()

        if self.value_kind == ValueKind.BINARY:
            self._encode: Callable[[Any], Any] = self._binary_encoder()
            self._decode: Callable[[Any], Any] = self._binary_decoder()
        else:
            self._encode = self._string_encoder()
            self._decode = self._string_decoder()

        if self.obfuscate and self.value_kind != ValueKind.BINARY:
            logger.debug("%s: obfuscate ignored for %s values", self, self.value_kind.name)

    # -- construction --------------------------------------------------------

    def _check_value_kind(self, kind: Any) -> ValueKind:
        if kind not in SUPPORTED_VALUE_KINDS:
            raise UnsupportedValueKindError(
                msg=f"ValueKind {getattr(kind, 'name', kind)} not implemented!",
                context={"property": str(self._info)},
            )
        return ValueKind(kind)

    def _resolve_type(self, ann: Any) -> type:
        if ann is None:
            raise UnsupportedPropertyTypeError(
                msg=f"Property {self._info} has no type annotation!",
                context={"property": self.name},
            )
        if isinstance(ann, str):
            raise UnsupportedPropertyTypeError(
                msg=f"Cannot resolve type annotation {ann!r} of property {self._info.owner.__name__}.{self.name}!",
                context={"property": self.name},
            )
        tp = unwrap_type(ann)
        if not isinstance(tp, type):
            raise UnsupportedPropertyTypeError(
                msg=f"Property {self._info} has unsupported type {ann!r}!",
                context={"property": self.name},
            )
        return tp

    def _classify(self) -> PropertyCategory:
        tp = self.property_type
        kind = self.value_kind

        if issubclass(tp, Enum):
            if kind == ValueKind.BINARY and not all(
                isinstance(m.value, int) and not isinstance(m.value, bool) for m in tp
            ):
                raise UnsupportedPropertyTypeError(
                    msg=f"Enum {tp.__name__} needs integer values to be stored as BINARY!",
                    context={"property": self.name},
                )
            return PropertyCategory.ENUM

        if is_primitive(tp):
            return PropertyCategory.PRIMITIVE

        if kind == ValueKind.BINARY and issubclass(tp, (bytes, bytearray)):
            return PropertyCategory.RAW

        fn = find_parse_function(tp, kind)
        if fn is None:
            raise UnsupportedPropertyTypeError(
                msg=(
                    f"Type {tp.__name__} is neither primitive-convertible nor provides "
                    f"a static {_PARSE_CANDIDATES[kind][0]}({_PARSE_ARG[kind]}) method!"
                ),
                context={"property": self.name, "value_kind": kind.name},
            )
        self.parse_function = fn
        return PropertyCategory.PARSEABLE

    # -- strategies ----------------------------------------------------------

    def _binary_encoder(self) -> Callable[[Any], bytes]:
        cat = self.category
        if cat is PropertyCategory.ENUM:
            return lambda v: _INT64.pack(0 if v is None else int(v.value))
        if cat is PropertyCategory.PRIMITIVE:
            return lambda v: b"" if v is None else to_invariant(v).encode("utf-8")

        def fallback(v: Any) -> bytes:
            if isinstance(v, (bytes, bytearray, memoryview)):
                return bytes(v)
            # Best effort for parseable types: their text form.
            return b"" if v is None else str(v).encode("utf-8")

        return fallback

    def _require_parse_function(self) -> Callable[[Any], Any]:
        fn = self.parse_function
        if fn is None:
            raise UnsupportedPropertyTypeError(
                msg=f"Property {self._info} has no parse function for category {self.category.name}!",
                context={"property": self.name},
            )
        return fn

    def _binary_decoder(self) -> Callable[[bytes], Any]:
        """
        BINARY has no null marker: None is written as an empty payload and an
        empty payload reads back as None, except for ``str`` properties, which
        read back as "". Enums write None as int64 0.
        """
        tp = self.property_type
        cat = self.category
        if cat is PropertyCategory.ENUM:

            def decode_enum(data: bytes) -> Any:
                if len(data) < _INT64.size:
                    raise ConversionError(msg=f"enum value needs {_INT64.size} bytes, got {len(data)}")
                return tp(_INT64.unpack_from(data)[0])

            return decode_enum
        if cat is PropertyCategory.RAW:
            return lambda data: bytearray(data) if issubclass(tp, bytearray) else bytes(data)
        if cat is PropertyCategory.PRIMITIVE:

            def decode_primitive(data: bytes) -> Any:
                text = data.decode("utf-8")
                if not text and tp is not str:
                    return None
                return from_invariant(text, tp)

            return decode_primitive
        return self._require_parse_function()

    def _string_encoder(self) -> Callable[[Any], Optional[str]]:
        cat = self.category
        if cat is PropertyCategory.PRIMITIVE:
            return to_invariant
        if cat is PropertyCategory.ENUM:
            return lambda v: None if v is None else _enum_name(v)
        return lambda v: None if v is None else str(v)

    def _string_decoder(self) -> Callable[[str], Any]:
        tp = self.property_type
        cat = self.category
        if cat is PropertyCategory.ENUM:
            return lambda text: _parse_enum(tp, text)
        if cat is PropertyCategory.PRIMITIVE:
            return lambda text: from_invariant(text, tp)
        return self._require_parse_function()

    # -- public --------------------------------------------------------------

    @property
    def is_enum(self) -> bool:
        return self.category is PropertyCategory.ENUM

    @property
    def is_primitive(self) -> bool:
        return self.category is PropertyCategory.PRIMITIVE

    @property
    def info(self) -> PropertyInfo:
        return self._info

    def __repr__(self) -> str:
        return (
            f"PropertyDescriptor({self.name!r}, {self.property_type.__name__}, "
            f"{self.value_kind.name}, {self.category.name}, obfuscate={self.obfuscate})"
        )

    def __str__(self) -> str:
        return str(self._info)

    def encode(self, value: Any) -> Union[str, bytes]:
        """Value as written to the store."""
        if self.value_kind == ValueKind.BINARY:
            data = self._encode(value)
            return obfuscate(data) if self.obfuscate else data
        text = self._encode(value)
        return "" if text is None else f'"{text}"'

    def decode(self, raw: Any) -> Any:
        """
        Inverse of encode. Raises ObfuscationError or one of
        SOFT_DECODE_ERRORS when `raw` cannot be converted.
        """
        if self.value_kind == ValueKind.BINARY:
            data = bytes(raw)
            if self.obfuscate:
                data = deobfuscate(data)
            return self._decode(data)

        if raw == "":
            return None
        if len(raw) >= 2 and raw[0] == '"' and raw[-1] == '"':
            raw = raw[1:-1]
        return self._decode(raw)

    def save(self, store: StoreHandle, instance: Any) -> None:
        store.set_value(self.name, self.encode(self._info.get(instance)), self.value_kind)

    def load(self, store: StoreHandle, instance: Any) -> bool:
        """
        Read the value and assign it. Returns False ("not loaded") when the value
        is absent, has the wrong type, or cannot be decoded.
        """
        stored = store.get_value(self.name)
        if stored is None:
            logger.debug("%s: no stored value", self.name)
            return False

        raw = stored[0]
        expected = (bytes, bytearray, memoryview) if self.value_kind == ValueKind.BINARY else str
        if not isinstance(raw, expected):
            logger.debug("%s: stored %s is not a %s value", self.name, type(raw).__name__, self.value_kind.name)
            return False

        try:
            value = self.decode(raw)
        except ObfuscationError as e:
            logger.warning("%s: cannot deobfuscate stored value: %s", self.name, e)
            return False
        except SOFT_DECODE_ERRORS as e:
            logger.warning("%s: cannot convert stored value to %s: %s", self.name, self.property_type.__name__, e)
            return False

        self._info.set(instance, value)
        return True

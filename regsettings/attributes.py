# SPDX-License-Identifier: LGPL-3.0-or-later
# regsettings/attributes.py
"""
Per-property options and marker objects.

Properties carry "attributes": arbitrary marker objects attached either with the
``tag()`` decorator or through ``typing.Annotated`` metadata::

    class AppSettings:
        name: Annotated[str, Roamed()] = ""
        token: Annotated[bytes, RegistrySetting(ValueKind.BINARY, obfuscate=True)] = b""

        @tag(Ignore)
        @property
        def cache_dir(self) -> str: ...

The first ``RegistrySetting`` found among a property's attributes selects how it
is stored. Any other attribute only matters to the marker filter of
``RegistrySettings``.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Callable, Iterable, Mapping, Optional, Tuple, Union

ATTRIBUTES_ATTR = "__registry_attributes__"


class ValueKind(IntEnum):
    """Registry value types (same codes as ``winreg.REG_*``)."""

    NONE = 0
    STRING = 1
    EXPAND_STRING = 2
    BINARY = 3
    DWORD = 4
    MULTI_STRING = 7
    QWORD = 11

    @classmethod
    def coerce(cls, value: Any) -> Union["ValueKind", int]:
        """
        Accept a ValueKind, a registry type code or a (case-insensitive) name.

        Unknown integer codes are returned unchanged so the descriptor can reject
        them with a precise error.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise ValueError(f"invalid value kind: {value!r}")
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                return int(value)
        if isinstance(value, str):
            key = value.strip().upper().replace("-", "_")
            if key.startswith("REG_"):
                key = {"REG_SZ": "STRING", "REG_EXPAND_SZ": "EXPAND_STRING", "REG_MULTI_SZ": "MULTI_STRING"}.get(key, key[4:])
            if key in cls.__members__:
                return cls[key]
        raise ValueError(f"invalid value kind: {value!r}")


SUPPORTED_VALUE_KINDS = (ValueKind.STRING, ValueKind.BINARY)


@dataclass(frozen=True)
class RegistrySetting:
    """
    How one property is persisted.

    obfuscate only has an effect together with ``ValueKind.BINARY``.
    """

    value_kind: Union[ValueKind, int] = ValueKind.STRING
    obfuscate: bool = False

    @classmethod
    def from_mapping(cls, data: Union[Mapping[str, Any], str, int, "RegistrySetting"]) -> "RegistrySetting":
        """Build from a config-table entry: a mapping, a bare value kind, or an instance."""
        if isinstance(data, RegistrySetting):
            return data
        if isinstance(data, (str, int)):
            return cls(value_kind=ValueKind.coerce(data))
        if not isinstance(data, Mapping):
            raise TypeError(f"expected mapping or value kind, got {type(data).__name__}")

        unknown = set(data) - {"value_kind", "obfuscate"}
        if unknown:
            raise ValueError(f"unknown option(s): {', '.join(sorted(unknown))}")
        kind = ValueKind.coerce(data.get("value_kind", ValueKind.STRING))
        obfuscate = data.get("obfuscate", False)
        if not isinstance(obfuscate, bool):
            raise TypeError(f"obfuscate must be a boolean, got {obfuscate!r}")
        return cls(value_kind=kind, obfuscate=obfuscate)


class Ignore:
    """Ready-made marker, usually combined with ``inverse=True``."""

    def __repr__(self) -> str:
        return "Ignore()"


def _instantiate(marker: Any) -> Any:
    return marker() if isinstance(marker, type) else marker


def tag(*markers: Any) -> Callable[[Any], Any]:
    """
    Attach marker objects (or marker classes, instantiated without arguments)
    to a property or to the function that becomes its getter.

    Works above or below ``@property``; setters created later with
    ``@x.setter`` keep the markers because they live on the getter.
    """
    objs = tuple(_instantiate(m) for m in markers)

    def decorator(target: Any) -> Any:
        fn = target.fget if isinstance(target, property) else target
        if fn is None or not callable(fn):
            raise TypeError(f"tag() needs a property or getter function, got {target!r}")
        existing: Tuple[Any, ...] = getattr(fn, ATTRIBUTES_ATTR, ())
        setattr(fn, ATTRIBUTES_ATTR, existing + objs)
        return target

    return decorator


def attached_attributes(fn: Optional[Callable[..., Any]]) -> Tuple[Any, ...]:
    if fn is None:
        return ()
    return tuple(getattr(fn, ATTRIBUTES_ATTR, ()))


def find_setting(attributes: Iterable[Any]) -> Optional[RegistrySetting]:
    for a in attributes:
        if isinstance(a, RegistrySetting):
            return a
    return None

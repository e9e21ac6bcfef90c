# SPDX-License-Identifier: LGPL-3.0-or-later
# regsettings/stores/base.py
from __future__ import annotations

from typing import Any, Optional, Protocol, Tuple, Union, runtime_checkable

from ..attributes import ValueKind

# (raw value, kind). Kind is an int when the store holds a type code that
# ValueKind does not know.
StoredValue = Tuple[Any, Union[ValueKind, int]]


@runtime_checkable
class StoreHandle(Protocol):
    """
    A single key of a hierarchical key/value store.

    get_value returns None when the value does not exist. STRING values come
    back as ``str``, BINARY values as ``bytes``.
    """

    def get_value(self, name: str) -> Optional[StoredValue]: ...

    def set_value(self, name: str, value: Any, kind: ValueKind) -> None: ...


def check_payload(name: str, value: Any, kind: ValueKind) -> Any:
    """Validate a payload against its kind before it reaches a backend."""
    if kind in (ValueKind.STRING, ValueKind.EXPAND_STRING):
        if not isinstance(value, str):
            raise TypeError(f"value {name!r}: {kind.name} needs str, got {type(value).__name__}")
        return value
    if kind == ValueKind.BINARY:
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise TypeError(f"value {name!r}: BINARY needs bytes, got {type(value).__name__}")
        return bytes(value)
    raise TypeError(f"value {name!r}: writing {getattr(kind, 'name', kind)} values is not supported")

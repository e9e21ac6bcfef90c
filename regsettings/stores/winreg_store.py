# SPDX-License-Identifier: LGPL-3.0-or-later
# regsettings/stores/winreg_store.py
"""
Live Windows Registry key via the standard ``winreg`` module.
"""
from __future__ import annotations

import logging
from typing import Any, Optional, Tuple

from ..attributes import ValueKind
from ..core.exceptions import StoreUnavailableError, wrap_store
from .base import StoredValue, check_payload

try:
    import winreg  # type: ignore
except Exception:  # pragma: no cover - non-Windows
    winreg = None  # type: ignore

logger = logging.getLogger(__name__)

_HIVE_ALIASES = {
    "HKCU": "HKEY_CURRENT_USER",
    "HKLM": "HKEY_LOCAL_MACHINE",
    "HKCR": "HKEY_CLASSES_ROOT",
    "HKU": "HKEY_USERS",
    "HKCC": "HKEY_CURRENT_CONFIG",
}


def _require_winreg() -> Any:
    if winreg is None:
        raise StoreUnavailableError(msg="winreg is not available on this platform (Windows only)")
    return winreg


def split_hive(path: str) -> Tuple[Optional[str], str]:
    """
    Split ``HKCU\\Software\\App`` into (``HKEY_CURRENT_USER``, ``Software\\App``).

    Returns (None, path) when the path has no hive prefix.
    """
    p = path.replace("/", "\\").strip("\\")
    head, sep, rest = p.partition("\\")
    name = _HIVE_ALIASES.get(head.upper(), head.upper())
    if name.startswith("HKEY_"):
        return name, rest
    return None, p


class WinRegStore:
    """Store handle bound to one open registry key."""

    def __init__(self, key: Any, *, path: str = "", owns_key: bool = False):
        self._key = key
        self.path = path
        self._owns_key = owns_key

    @classmethod
    def open(cls, path: str, *, hive: Any = None, create: bool = True) -> "WinRegStore":
        """
        Open (or create) `path`.

        The hive comes from a ``HKCU\\``-style prefix in `path`, else from `hive`,
        else HKEY_CURRENT_USER.
        """
        wr = _require_winreg()
        hive_name, sub_key = split_hive(path)
        if hive_name is not None:
            hive = getattr(wr, hive_name)
        elif hive is None:
            hive = wr.HKEY_CURRENT_USER

        access = wr.KEY_READ | wr.KEY_WRITE
        try:
            if create:
                key = wr.CreateKeyEx(hive, sub_key, 0, access)
            else:
                key = wr.OpenKey(hive, sub_key, 0, access)
        except OSError as e:
            raise wrap_store(f"cannot open registry key {path}", e, path=path, create=create) from e

        logger.debug("Opened registry key %s (create=%s)", path, create)
        return cls(key, path=path, owns_key=True)

    def __repr__(self) -> str:
        return f"WinRegStore(path={self.path!r})"

    def __str__(self) -> str:
        return self.path or repr(self)

    def get_value(self, name: str) -> Optional[StoredValue]:
        wr = _require_winreg()
        try:
            value, typ = wr.QueryValueEx(self._key, name)
        except FileNotFoundError:
            return None
        except OSError as e:
            raise wrap_store(f"cannot read {self.path}\\{name}", e, path=self.path, name=name) from e
        try:
            kind = ValueKind(typ)
        except ValueError:
            kind = int(typ)
        return value, kind

    def set_value(self, name: str, value: Any, kind: ValueKind) -> None:
        wr = _require_winreg()
        kind = ValueKind(kind)
        payload = check_payload(name, value, kind)
        try:
            wr.SetValueEx(self._key, name, 0, int(kind), payload)
        except OSError as e:
            raise wrap_store(f"cannot write {self.path}\\{name}", e, path=self.path, name=name) from e

    def close(self) -> None:
        if self._key is None:
            return
        if self._owns_key and winreg is not None:
            winreg.CloseKey(self._key)
        self._key = None

    def __enter__(self) -> "WinRegStore":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

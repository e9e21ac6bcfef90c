# SPDX-License-Identifier: LGPL-3.0-or-later
# regsettings/stores/hive_store.py
"""
Offline registry hive (regf file) as a store, via python-hivex.

Lets settings be read from / written into a hive that is not loaded by a
running Windows, e.g. a SOFTWARE or NTUSER.DAT copied out of a disk image.

Value encodings follow the on-disk format:
  - REG_SZ / REG_EXPAND_SZ: UTF-16LE with NUL terminator
  - REG_BINARY: raw bytes

Other value types are read back as their raw bytes.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..attributes import ValueKind
from ..core.exceptions import StoreError, StoreUnavailableError
from .base import StoredValue, check_payload

try:
    import hivex  # type: ignore

    HIVEX_AVAILABLE = True
except Exception:
    hivex = None  # type: ignore
    HIVEX_AVAILABLE = False

logger = logging.getLogger(__name__)

NodeLike = Union[int, None]

REGF_MIN_SIZE = 4096

# ---------------------------------------------------------------------------
# Node normalization (bindings return 0 or None for "no node")
# ---------------------------------------------------------------------------


def _node_id(n: NodeLike) -> int:
    if n is None:
        return 0
    try:
        return int(n)
    except (TypeError, ValueError):
        return 0


def _node_ok(n: NodeLike) -> bool:
    return _node_id(n) != 0


# ---------------------------------------------------------------------------
# Encoding helpers
# ---------------------------------------------------------------------------


def _reg_sz(s: str) -> bytes:
    """Encode string as REG_SZ (UTF-16LE with NUL terminator)."""
    return (s + "\0").encode("utf-16le")


def _decode_reg_sz(raw: bytes) -> str:
    """Decode REG_SZ; tolerate a missing terminator or an odd trailing byte."""
    if len(raw) % 2:
        raw = raw[:-1]
    s = raw.decode("utf-16le", errors="replace")
    nul = s.find("\0")
    return s if nul < 0 else s[:nul]


def encode_value(kind: ValueKind, value: Any) -> bytes:
    if kind in (ValueKind.STRING, ValueKind.EXPAND_STRING):
        return _reg_sz(value)
    return bytes(value)


def decode_value(kind: Union[ValueKind, int], raw: bytes) -> Any:
    if kind in (ValueKind.STRING, ValueKind.EXPAND_STRING):
        return _decode_reg_sz(raw)
    return raw


def _is_probably_regf(path: Path) -> bool:
    """Windows registry hives start with the ASCII 'regf' signature."""
    try:
        with path.open("rb") as f:
            return f.read(4) == b"regf"
    except OSError:
        return False


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class HiveStore:
    """
    Store handle for one key inside an open hivex handle.

    `key_path` is relative to the hive root (``Vendor\\App`` inside SOFTWARE).
    """

    def __init__(
        self,
        hive: Any,
        key_path: str,
        *,
        create: bool = True,
        owns_hive: bool = False,
        label: Optional[str] = None,
    ):
        self._h = hive
        self.key_path = key_path.replace("/", "\\").strip("\\")
        self._owns_hive = owns_hive
        self._dirty = False
        self.label = label or self.key_path
        self._node = self._resolve(create)

    @classmethod
    def open(cls, path: Union[str, Path], key_path: str, *, write: bool = True, create: bool = True) -> "HiveStore":
        """Open a local hive file after basic sanity checks."""
        if not HIVEX_AVAILABLE:
            raise StoreUnavailableError(msg="python-hivex is not installed (pip install regsettings[hive])")
        p = Path(path)
        if not p.exists():
            raise StoreError(msg=f"hive file missing: {p}", context={"path": str(p)})
        size = p.stat().st_size
        if size < REGF_MIN_SIZE:
            raise StoreError(msg=f"hive file too small ({size} bytes): {p}", context={"path": str(p)})
        if not _is_probably_regf(p):
            raise StoreError(msg=f"file does not look like a regf hive: {p}", context={"path": str(p)})

        h = hivex.Hivex(str(p), write=(1 if write else 0))
        logger.debug("Opened hive %s (write=%s)", p, write)
        return cls(h, key_path, create=create and write, owns_hive=True, label=f"{p}:{key_path}")

    def __repr__(self) -> str:
        return f"HiveStore({self.label!r})"

    def __str__(self) -> str:
        return self.label

    def _resolve(self, create: bool) -> int:
        node = _node_id(self._h.root())
        if node == 0:
            raise StoreError(msg="hive has no root node")
        if not self.key_path:
            return node
        for comp in self.key_path.split("\\"):
            child = _node_id(self._h.node_get_child(node, comp))
            if child == 0:
                if not create:
                    raise StoreError(msg=f"registry key not found: {self.key_path}", context={"missing": comp})
                child = _node_id(self._h.node_add_child(node, comp))
                if child == 0:
                    raise StoreError(msg=f"failed to create key {comp!r} under {self.key_path}")
                self._dirty = True
                logger.debug("Created hive key %r", comp)
            node = child
        return node

    def _value_handle(self, name: str) -> int:
        try:
            return _node_id(self._h.node_get_value(self._node, name))
        except RuntimeError:
            # Some binding versions raise instead of returning 0 for ENOENT.
            return 0

    def get_value(self, name: str) -> Optional[StoredValue]:
        val = self._value_handle(name)
        if val == 0:
            return None
        t, raw = self._h.value_value(val)
        try:
            kind: Union[ValueKind, int] = ValueKind(t)
        except ValueError:
            kind = int(t)
        return decode_value(kind, bytes(raw)), kind

    def set_value(self, name: str, value: Any, kind: ValueKind) -> None:
        kind = ValueKind(kind)
        payload = check_payload(name, value, kind)
        entry: Dict[str, Any] = {"key": name, "t": int(kind), "value": encode_value(kind, payload)}
        try:
            self._h.node_set_value(self._node, entry)
        except RuntimeError as e:
            raise StoreError(msg=f"cannot write {self.label}\\{name}", cause=e) from e
        self._dirty = True

    @property
    def dirty(self) -> bool:
        return self._dirty

    def commit(self) -> None:
        """Flush pending changes to the hive file."""
        if not self._dirty:
            return
        if hasattr(self._h, "commit"):
            try:
                self._h.commit(None)
            except TypeError:
                self._h.commit()
        elif hasattr(self._h, "hivex_commit"):
            self._h.hivex_commit(None)
        else:
            raise StoreError(msg="python-hivex: no commit method found")
        self._dirty = False
        logger.info("Committed hive changes: %s", self.label)

    def close(self) -> None:
        if self._h is None:
            return
        if self._owns_hive:
            closer = getattr(self._h, "close", None) or getattr(self._h, "hivex_close", None)
            if callable(closer):
                closer()
        self._h = None

    def __enter__(self) -> "HiveStore":
        return self

    def __exit__(self, exc_type: Any, *exc: Any) -> None:
        try:
            if exc_type is None:
                self.commit()
        finally:
            self.close()

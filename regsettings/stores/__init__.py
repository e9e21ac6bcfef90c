# SPDX-License-Identifier: LGPL-3.0-or-later
# regsettings/stores/__init__.py
"""
Store handles: where mapped properties are read from and written to.

- base: the StoreHandle protocol
- memory: in-process dict store
- winreg_store: live registry key (Windows)
- hive_store: offline hive file (python-hivex)
"""

from .base import StoreHandle, StoredValue
from .hive_store import HiveStore
from .memory import MemoryStore
from .winreg_store import WinRegStore

__all__ = ["StoreHandle", "StoredValue", "MemoryStore", "WinRegStore", "HiveStore"]

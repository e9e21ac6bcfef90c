# SPDX-License-Identifier: LGPL-3.0-or-later
# regsettings/stores/memory.py
from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, Optional

from ..attributes import ValueKind
from ..core.logger import TRACE
from .base import StoredValue, check_payload

logger = logging.getLogger(__name__)


class MemoryStore:
    """
    Dict-backed store handle.

    Handy for tests, dry runs and for staging values before copying them into a
    real registry key.
    """

    def __init__(self, path: str = "memory", values: Optional[Dict[str, StoredValue]] = None):
        self.path = path
        self._values: Dict[str, StoredValue] = {}
        for name, (value, kind) in (values or {}).items():
            self.set_value(name, value, ValueKind(kind))

    def __repr__(self) -> str:
        return f"MemoryStore(path={self.path!r}, values={len(self._values)})"

    def __str__(self) -> str:
        return self.path

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._values))

    def __len__(self) -> int:
        return len(self._values)

    def get_value(self, name: str) -> Optional[StoredValue]:
        return self._values.get(name)

    def set_value(self, name: str, value: Any, kind: ValueKind) -> None:
        kind = ValueKind(kind)
        self._values[name] = (check_payload(name, value, kind), kind)
        logger.log(TRACE, "set %s\\%s (%s)", self.path, name, kind.name)

    def delete_value(self, name: str) -> bool:
        return self._values.pop(name, None) is not None

    def snapshot(self) -> Dict[str, StoredValue]:
        return dict(self._values)

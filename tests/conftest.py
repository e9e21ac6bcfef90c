# SPDX-License-Identifier: GPL-2.0-or-later
import os
import sys
from pathlib import Path

import pytest

_THIS_DIR = Path(__file__).resolve().parent
_REPO_ROOT = _THIS_DIR.parent

for _p in (_REPO_ROOT, _THIS_DIR):
    if str(_p) not in sys.path:
        sys.path.insert(0, str(_p))

os.environ.setdefault("PYTHONPATH", str(_REPO_ROOT))


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without registry access")
    config.addinivalue_line("markers", "security: redaction and obfuscation behaviour")


@pytest.fixture
def memory_store():
    from regsettings.stores.memory import MemoryStore

    return MemoryStore("HKCU\\Software\\regsettings-tests")

# SPDX-License-Identifier: LGPL-3.0-or-later
# regsettings/core/__init__.py
from .convert import PRIMITIVE_TYPES, from_invariant, is_primitive, to_invariant
from .logger import Log

__all__ = ["PRIMITIVE_TYPES", "from_invariant", "is_primitive", "to_invariant", "Log"]

# SPDX-License-Identifier: LGPL-3.0-or-later
# regsettings/core/convert.py
"""
Culture-invariant conversion between primitive values and their text form.

The text form never depends on locale: ``1.5`` is always ``"1.5"``, booleans are
``"True"``/``"False"``, and dates/times use ISO 8601.
"""
from __future__ import annotations

import datetime as _dt
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, Optional, Type

from .exceptions import ConversionError

_TRUE = ("true", "1", "yes", "on")
_FALSE = ("false", "0", "no", "off")


def _parse_bool(text: str) -> bool:
    t = text.strip().lower()
    if t in _TRUE:
        return True
    if t in _FALSE:
        return False
    raise ValueError(f"not a boolean: {text!r}")


def _parse_decimal(text: str) -> Decimal:
    try:
        return Decimal(text.strip())
    except InvalidOperation as e:
        raise ValueError(f"not a decimal: {text!r}") from e


# Order matters: bool before int, datetime before date.
_PARSERS: Dict[type, Callable[[str], Any]] = {
    str: lambda s: s,
    bool: _parse_bool,
    int: lambda s: int(s.strip()),
    float: lambda s: float(s.strip()),
    Decimal: _parse_decimal,
    _dt.datetime: lambda s: _dt.datetime.fromisoformat(s.strip()),
    _dt.date: lambda s: _dt.date.fromisoformat(s.strip()),
    _dt.time: lambda s: _dt.time.fromisoformat(s.strip()),
}

PRIMITIVE_TYPES = tuple(_PARSERS)


def is_primitive(tp: Any) -> bool:
    """True for types with a generic, locale-independent text round trip."""
    return isinstance(tp, type) and tp in _PARSERS


def to_invariant(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, int):
        return str(int(value))
    if isinstance(value, float):
        return repr(float(value))
    if isinstance(value, (_dt.date, _dt.time)):
        # datetime is a date subclass; isoformat covers both.
        return value.isoformat()
    return str(value)


def from_invariant(text: Optional[str], tp: Type[Any]) -> Any:
    """Convert invariant text back to `tp`; ``None`` stays ``None``."""
    if text is None:
        return None
    parser = _PARSERS.get(tp)
    if parser is None:
        raise ConversionError(msg=f"{tp!r} is not a primitive-convertible type")
    try:
        return parser(text)
    except (ValueError, TypeError) as e:
        raise ConversionError(
            msg=f"cannot convert {text!r} to {tp.__name__}",
            cause=e,
            context={"type": tp.__name__},
        ) from e

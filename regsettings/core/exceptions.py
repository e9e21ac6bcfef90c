# SPDX-License-Identifier: LGPL-3.0-or-later
# regsettings/core/exceptions.py
"""
Error hierarchy.

Every error is a ``RegSettingsError`` carrying a category ``code``, a one-line
``msg``, an optional ``cause`` and a ``context`` dict (property name, store
path, ...). Context keys that look like secrets are redacted whenever the
error is rendered.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

REDACTED = "<redacted>"

_SECRET_KEY_PARTS = ("pass", "secret", "token", "apikey", "api_key", "auth", "credential", "private")


def _one_line(s: str) -> str:
    return " ".join((s or "").split())


def _is_secret_key(k: Any) -> bool:
    ks = str(k).lower()
    return any(p in ks for p in _SECRET_KEY_PARTS)


def _redact(ctx: Dict[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for k, v in ctx.items():
        if _is_secret_key(k):
            out[k] = REDACTED
        elif isinstance(v, dict):
            out[k] = _redact(v)
        else:
            out[k] = v
    return out


@dataclass(eq=False)
class RegSettingsError(Exception):
    """
    Base error. ``code`` identifies the category (2 construction, 3 type
    mismatch, 4 unknown property, 5/6 decode, 10 store, 20 config).
    """
    code: int = 1
    msg: str = "error"
    cause: Optional[BaseException] = None
    context: Optional[Dict[str, Any]] = None

    def __post_init__(self) -> None:
        self.msg = _one_line(self.msg) or type(self).__name__
        if self.context is None:
            self.context = {}
        super().__init__(self.msg)
        if self.cause is not None and self.__cause__ is None:
            self.__cause__ = self.cause

    def with_context(self, **ctx: Any) -> "RegSettingsError":
        self.context.update(ctx)
        return self

    def user_message(self, *, include_context: bool = False, include_cause: bool = False) -> str:
        parts = [self.msg]
        if include_context and self.context:
            red = _redact(self.context)
            parts.append("[" + ", ".join(f"{k}={red[k]!r}" for k in sorted(red, key=str)) + "]")
        if include_cause and self.cause is not None:
            parts.append(f"(cause: {type(self.cause).__name__}: {_one_line(str(self.cause))})")
        return " ".join(parts)

    def __str__(self) -> str:
        return self.user_message()

    def to_dict(self, *, include_cause: bool = False) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "type": type(self).__name__,
            "code": self.code,
            "message": self.msg,
            "context": _redact(self.context),
        }
        if include_cause and self.cause is not None:
            d["cause"] = {"type": type(self.cause).__name__, "message": _one_line(str(self.cause))}
        return d


# ---------------------------------------------------------------------------
# Construction-time errors (raised while building a mapper)
# ---------------------------------------------------------------------------


@dataclass(eq=False)
class ConstructionError(RegSettingsError):
    """A settings mapper could not be built for the given type."""
    code: int = 2


class InvalidArgumentError(ConstructionError, ValueError):
    """Missing target type or store handle."""


class UnsupportedTypeError(ConstructionError, TypeError):
    """Target type is a value type (instances cannot take attribute assignment)."""


class UnsupportedValueKindError(ConstructionError):
    """Only STRING and BINARY value kinds are mapped."""


class UnsupportedPropertyTypeError(ConstructionError, TypeError):
    """Property type is neither enum, primitive-convertible, raw bytes nor parseable."""


class DuplicatePropertyError(ConstructionError):
    pass


# ---------------------------------------------------------------------------
# Call-time errors
# ---------------------------------------------------------------------------


@dataclass(eq=False)
class TypeMismatchError(RegSettingsError, TypeError):
    """Instance passed to load/save is not exactly the mapped type."""
    code: int = 3


@dataclass(eq=False)
class UnknownPropertyError(RegSettingsError, KeyError):
    """Requested property name is not registered with the mapper."""
    code: int = 4

    def __str__(self) -> str:
        # KeyError would repr() the message otherwise.
        return self.user_message()


# ---------------------------------------------------------------------------
# Recoverable decode failures (consumed as "not loaded")
# ---------------------------------------------------------------------------


@dataclass(eq=False)
class ObfuscationError(RegSettingsError, ValueError):
    """Obfuscated payload is malformed (bad header, truncated, checksum mismatch)."""
    code: int = 5


@dataclass(eq=False)
class ConversionError(RegSettingsError, ValueError):
    """A stored value could not be converted to the property type."""
    code: int = 6


# ---------------------------------------------------------------------------
# Store / configuration errors
# ---------------------------------------------------------------------------


@dataclass(eq=False)
class StoreError(RegSettingsError):
    """Backing store failed (open, read, write, commit)."""
    code: int = 10


class StoreUnavailableError(StoreError):
    """Store backend is not available on this platform / interpreter."""


@dataclass(eq=False)
class ConfigError(RegSettingsError):
    """Option table could not be read or validated."""
    code: int = 20


def wrap_store(msg: str, exc: Optional[BaseException] = None, code: int = 10, **context: Any) -> StoreError:
    return StoreError(code=code, msg=msg, cause=exc, context=context or None)


def wrap_config(msg: str, exc: Optional[BaseException] = None, **context: Any) -> ConfigError:
    return ConfigError(msg=msg, cause=exc, context=context or None)

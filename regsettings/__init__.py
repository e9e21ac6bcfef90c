# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# regsettings/__init__.py
"""
regsettings - map object properties to Windows Registry values

Declare a settings class, point it at a registry key, load and save:

    from regsettings import RegistrySettings, RegistrySetting, ValueKind, WinRegStore

    class AppSettings:
        name: str = ""
        window: WindowMode = WindowMode.NORMAL
        token: Annotated[bytes, RegistrySetting(ValueKind.BINARY, obfuscate=True)] = b""

    with WinRegStore.open(r"HKCU\\Software\\Vendor\\App") as key:
        settings = RegistrySettings(AppSettings, key)
        app = AppSettings()
        settings.load(app)

Offline hives (python-hivex) and an in-memory store are available as
HiveStore and MemoryStore.
"""

__version__ = "0.1.0"

from .attributes import Ignore, RegistrySetting, ValueKind, tag
from .config import load_options
from .core.exceptions import (
    ConfigError,
    ConstructionError,
    ConversionError,
    DuplicatePropertyError,
    InvalidArgumentError,
    ObfuscationError,
    RegSettingsError,
    StoreError,
    StoreUnavailableError,
    TypeMismatchError,
    UnknownPropertyError,
    UnsupportedPropertyTypeError,
    UnsupportedTypeError,
    UnsupportedValueKindError,
)
from .descriptor import PropertyCategory, PropertyDescriptor
from .obfuscation import deobfuscate, obfuscate
from .settings import RegistrySettings
from .stores import HiveStore, MemoryStore, StoreHandle, WinRegStore

__all__ = [
    # Version
    "__version__",

    # Mapping
    "RegistrySettings",
    "PropertyDescriptor",
    "PropertyCategory",

    # Per-property options and markers
    "RegistrySetting",
    "ValueKind",
    "Ignore",
    "tag",
    "load_options",

    # Stores
    "StoreHandle",
    "MemoryStore",
    "WinRegStore",
    "HiveStore",

    # Obfuscation
    "obfuscate",
    "deobfuscate",

    # Errors
    "RegSettingsError",
    "ConstructionError",
    "InvalidArgumentError",
    "UnsupportedTypeError",
    "UnsupportedValueKindError",
    "UnsupportedPropertyTypeError",
    "DuplicatePropertyError",
    "TypeMismatchError",
    "UnknownPropertyError",
    "ObfuscationError",
    "ConversionError",
    "StoreError",
    "StoreUnavailableError",
    "ConfigError",
]

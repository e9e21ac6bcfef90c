# SPDX-License-Identifier: LGPL-3.0-or-later
# regsettings/settings.py
"""
RegistrySettings: loads and saves the public properties of an object from/to
one registry key.

Example::

    class AppSettings:
        name: str = "default"
        port: int = 8080
        password: Annotated[str, RegistrySetting(ValueKind.BINARY, obfuscate=True)] = ""

    with WinRegStore.open(r"HKCU\\Software\\Vendor\\App") as key:
        settings = RegistrySettings(AppSettings, key)
        app = AppSettings()
        settings.load(app)
        app.port = 9090
        settings.save(app, "port")
"""
from __future__ import annotations

import dataclasses
import logging
import numbers
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Generic, Iterable, Iterator, List, Mapping, Optional, Sequence, Type, TypeVar, Union

from .attributes import RegistrySetting
from .core.exceptions import (
    DuplicatePropertyError,
    InvalidArgumentError,
    TypeMismatchError,
    UnknownPropertyError,
    UnsupportedTypeError,
)
from .core.logger import Log
from .descriptor import PropertyDescriptor
from .reflection import public_properties
from .stores.base import StoreHandle

logger = logging.getLogger(__name__)

T = TypeVar("T")

OptionTable = Mapping[str, Union[RegistrySetting, Mapping[str, Any], str, int]]

# Instances of these cannot take attribute assignment; nothing to load into.
_VALUE_TYPES = (numbers.Number, str, bytes, bytearray, tuple, frozenset, Enum, type(None))


def is_value_type(cls: type) -> bool:
    if issubclass(cls, _VALUE_TYPES):
        return True
    params = getattr(cls, "__dataclass_params__", None)
    return bool(dataclasses.is_dataclass(cls) and params is not None and params.frozen)


def _selected(attributes: Sequence[Any], markers: Sequence[type], inverse: bool) -> bool:
    tagged = any(type(a) in markers for a in attributes)
    return inverse != tagged


class RegistrySettings(Generic[T]):
    """
    Maps the public read/write properties of `target_type` to values of `store`.

    markers / inverse select properties by their attached marker objects: with
    markers given, a property takes part when it carries one of them, or, with
    inverse=True, when it carries none of them.

    options overrides per-property settings by name (see ``config.load_options``).
    """

    def __init__(
        self,
        target_type: Type[T],
        store: StoreHandle,
        *markers: type,
        inverse: bool = False,
        options: Optional[OptionTable] = None,
    ):
        if target_type is None or not isinstance(target_type, type):
            raise InvalidArgumentError(msg=f"target type must be a class, got {target_type!r}")
        if is_value_type(target_type):
            raise UnsupportedTypeError(
                msg=f"Value types are not supported. Type {target_type.__name__} is a value type!",
                context={"type": target_type.__qualname__},
            )
        if store is None:
            raise InvalidArgumentError(msg="store handle must not be None")

        self._type: Type[T] = target_type
        self._store = store
        self._markers = tuple(markers)
        self._inverse = bool(inverse)

        overrides: Dict[str, RegistrySetting] = {}
        for name, opt in (options or {}).items():
            try:
                overrides[name] = RegistrySetting.from_mapping(opt)
            except (TypeError, ValueError) as e:
                raise InvalidArgumentError(msg=f"invalid options for {name!r}: {e}", cause=e) from e

        infos = public_properties(target_type)
        if self._markers:
            infos = [i for i in infos if _selected(i.attributes, self._markers, self._inverse)]

        log = Log.bind(logger, settings=target_type.__name__)
        descriptors: Dict[str, PropertyDescriptor] = {}
        for info in infos:
            if not (info.can_read and info.can_write):
                log.debug("Skipping %s (not readable and writable)", info.name)
                continue
            if info.name in descriptors:
                raise DuplicatePropertyError(
                    msg=f"duplicate property name {info.name!r} on {target_type.__name__}",
                    context={"property": info.name},
                )
            descriptor = PropertyDescriptor(info, overrides.get(info.name))
            descriptors[info.name] = descriptor
            Log.trace(logger, "Mapped %r", descriptor)

        unknown = [n for n in overrides if n not in descriptors]
        if unknown:
            raise UnknownPropertyError(
                msg=f"options given for unknown properties: {', '.join(sorted(unknown))}",
                context={"type": target_type.__name__},
            )

        self._descriptors: Mapping[str, PropertyDescriptor] = MappingProxyType(descriptors)
        log.debug("Mapped %d properties to %s", len(descriptors), store)

    # -- introspection ---------------------------------------------------------

    @property
    def target_type(self) -> Type[T]:
        return self._type

    @property
    def store(self) -> StoreHandle:
        return self._store

    @property
    def descriptors(self) -> Mapping[str, PropertyDescriptor]:
        return self._descriptors

    @property
    def names(self) -> List[str]:
        return list(self._descriptors)

    def descriptor(self, name: str) -> PropertyDescriptor:
        try:
            return self._descriptors[name]
        except KeyError:
            raise UnknownPropertyError(
                msg=f"property {name!r} is not mapped for {self._type.__name__}",
                context={"property": name},
            ) from None

    def contains(self, name: str) -> bool:
        """True when `name` is one of the mapped properties."""
        return name in self._descriptors

    def __contains__(self, name: object) -> bool:
        return name in self._descriptors

    def __len__(self) -> int:
        return len(self._descriptors)

    def __iter__(self) -> Iterator[PropertyDescriptor]:
        return iter(self._descriptors.values())

    def __repr__(self) -> str:
        return f"RegistrySettings({self._type.__name__}, {self._store!r}, properties={len(self)})"

    # -- load / save -----------------------------------------------------------

    def _check_instance(self, instance: Any) -> None:
        if type(instance) is not self._type:
            raise TypeMismatchError(
                msg=(
                    f"Instance with type {type(instance).__name__} does not match "
                    f"expected type {self._type.__name__}!"
                ),
                context={"expected": self._type.__qualname__, "actual": type(instance).__qualname__},
            )

    def _select(self, names: Iterable[str]) -> List[PropertyDescriptor]:
        # Resolve every name before the store is touched.
        return [self.descriptor(n) for n in names]

    def load(self, instance: T, *names: str) -> List[str]:
        """
        Load all mapped properties, or only `names`, into `instance`.

        Values that are missing, of the wrong kind, or undecodable are skipped
        and leave the property untouched. Returns the names that were loaded.
        """
        self._check_instance(instance)
        selected = self._select(names) if names else list(self._descriptors.values())

        loaded = [d.name for d in selected if d.load(self._store, instance)]
        skipped = len(selected) - len(loaded)
        if skipped:
            logger.debug("Loaded %d/%d properties of %s (%d skipped)", len(loaded), len(selected), self._type.__name__, skipped)
        else:
            logger.debug("Loaded %d properties of %s", len(loaded), self._type.__name__)
        return loaded

    def save(self, instance: T, *names: str) -> None:
        """
        Save all mapped properties, or only `names`, of `instance`.

        Each property is one store write; a store error stops the save and
        leaves earlier writes in place.
        """
        self._check_instance(instance)
        selected = self._select(names) if names else list(self._descriptors.values())

        for d in selected:
            d.save(self._store, instance)
        logger.debug("Saved %d properties of %s to %s", len(selected), self._type.__name__, self._store)

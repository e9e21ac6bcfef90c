# SPDX-License-Identifier: LGPL-3.0-or-later
# regsettings/reflection.py
"""
Discovery of the public instance properties of a settings class.

Two kinds of members count as properties:
  - ``property`` objects (readable if they have a getter, writable if they
    have a setter)
  - annotated class-level fields, including dataclass fields (always
    readable and writable)

Names starting with an underscore are private and never discovered.
"""
from __future__ import annotations

import dataclasses
import inspect
import logging
import sys
import typing
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from .attributes import attached_attributes
from .core.logger import TRACE

logger = logging.getLogger(__name__)

_MISSING = object()


def _annotations_of(obj: Any) -> Dict[str, Any]:
    """
    Annotations of a class or function with string forms evaluated one by one.

    A name that cannot be resolved keeps its string form; the descriptor
    reports it only if that property is actually mapped.
    """
    raw = inspect.get_annotations(obj)
    if isinstance(obj, type):
        module = sys.modules.get(obj.__module__)
        globalns = dict(vars(module)) if module is not None else {}
        localns: Optional[Dict[str, Any]] = dict(vars(obj))
    else:
        globalns = dict(getattr(obj, "__globals__", {}))
        localns = None

    out: Dict[str, Any] = {}
    for name, ann in raw.items():
        if isinstance(ann, str):
            try:
                ann = eval(ann, globalns, localns)  # noqa: S307
            except Exception as e:
                logger.debug("Cannot resolve annotation %r of %s.%s: %s", ann, getattr(obj, "__qualname__", obj), name, e)
        out[name] = ann
    return out


def _is_classvar(ann: Any) -> bool:
    if isinstance(ann, str):
        return ann.startswith(("ClassVar", "typing.ClassVar"))
    return ann is typing.ClassVar or typing.get_origin(ann) is typing.ClassVar


def _is_initvar(ann: Any) -> bool:
    if isinstance(ann, str):
        return ann.startswith(("InitVar", "dataclasses.InitVar"))
    return isinstance(ann, dataclasses.InitVar) or ann is dataclasses.InitVar


def annotated_metadata(ann: Any) -> Tuple[Any, ...]:
    """Metadata of ``Annotated[T, ...]`` (looking through ``Optional``)."""
    if typing.get_origin(ann) is typing.Annotated:
        return tuple(ann.__metadata__)
    for arg in typing.get_args(ann):
        if typing.get_origin(arg) is typing.Annotated:
            return tuple(arg.__metadata__)
    return ()


@dataclass(frozen=True)
class PropertyInfo:
    name: str
    owner: type
    annotation: Any
    attributes: Tuple[Any, ...]
    fget: Optional[Callable[[Any], Any]] = None
    fset: Optional[Callable[[Any, Any], None]] = None
    is_field: bool = False

    @property
    def can_read(self) -> bool:
        return self.is_field or self.fget is not None

    @property
    def can_write(self) -> bool:
        return self.is_field or self.fset is not None

    def get(self, instance: Any) -> Any:
        if self.is_field:
            return getattr(instance, self.name, None)
        if self.fget is None:
            raise AttributeError(f"property {self} is not readable")
        return self.fget(instance)

    def set(self, instance: Any, value: Any) -> None:
        if self.is_field:
            setattr(instance, self.name, value)
            return
        if self.fset is None:
            raise AttributeError(f"property {self} is not writable")
        self.fset(instance, value)

    def __str__(self) -> str:
        ann = self.annotation
        tn = ann if isinstance(ann, str) else getattr(ann, "__name__", repr(ann))
        return f"{self.owner.__name__}.{self.name}: {tn}"


def _from_property(owner: type, name: str, prop: property) -> PropertyInfo:
    ann: Any = _MISSING
    if prop.fget is not None:
        ann = _annotations_of(prop.fget).get("return", _MISSING)
    attrs = attached_attributes(prop.fget) + (annotated_metadata(ann) if ann is not _MISSING else ())
    return PropertyInfo(
        name=name,
        owner=owner,
        annotation=None if ann is _MISSING else ann,
        attributes=attrs,
        fget=prop.fget,
        fset=prop.fset,
    )


def public_properties(cls: type) -> List[PropertyInfo]:
    """
    All public instance properties of `cls`, base classes first.

    A subclass redefining a name replaces the inherited entry in place.
    """
    found: Dict[str, PropertyInfo] = {}
    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        members = vars(klass)
        for name, ann in _annotations_of(klass).items():
            if name.startswith("_") or _is_classvar(ann) or _is_initvar(ann):
                continue
            if isinstance(members.get(name), property):
                continue
            found[name] = PropertyInfo(
                name=name,
                owner=klass,
                annotation=ann,
                attributes=annotated_metadata(ann),
                is_field=True,
            )
        for name, member in members.items():
            if name.startswith("_") or not isinstance(member, property):
                continue
            found[name] = _from_property(klass, name, member)

    infos = list(found.values())
    logger.log(TRACE, "Discovered %d public properties on %s", len(infos), cls.__name__)
    return infos

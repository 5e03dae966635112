# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Structural member discovery for mapping source and destination types.

A type's members are collected from, in order:

1. Dataclass fields (``dataclasses.fields``)
2. Pydantic model fields (``model_fields``)
3. Class-level annotations of plain classes
4. ``__slots__`` entries
5. Properties (readable when they have a getter, writable with a setter)

Names starting with an underscore are never members. Markers declared with
``typing.Annotated`` are attached to the member they annotate.
"""

from __future__ import annotations

import dataclasses
import functools
import inspect
import typing
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, ClassVar, get_origin, get_type_hints

from pydantic import BaseModel

from flymap.mapping.markers import Ignore, MapFrom, MapTo, Marker
from flymap.mapping.typeinfo import is_scalar, origin_class, strip_annotated, unwrap_optional

_MARKER_TYPES = (Ignore, MapFrom, MapTo)


@dataclass(frozen=True, slots=True)
class MemberInfo:
    """One member of a type, as seen by the mapper.

    Attributes:
        name: Attribute name.
        annotation: Declared type with ``Annotated`` metadata removed
            (``Any`` when undeclared).
        readable: The value can be read from an instance.
        writable: The value can be assigned on an existing instance.
        init: The value can be passed to the constructor by keyword.
        markers: Declarative markers found on the annotation.
    """

    name: str
    annotation: Any = Any
    readable: bool = True
    writable: bool = True
    init: bool = False
    markers: tuple[Marker, ...] = ()

    @property
    def ignored(self) -> bool:
        return any(isinstance(m, Ignore) for m in self.markers)

    @property
    def map_from(self) -> str | None:
        return next((m.member for m in self.markers if isinstance(m, MapFrom)), None)

    @property
    def map_to(self) -> str | None:
        return next((m.member for m in self.markers if isinstance(m, MapTo)), None)


@dataclass(frozen=True, slots=True)
class TypeDescriptor:
    """Ordered member table for one class."""

    type: type
    members: Mapping[str, MemberInfo]

    def readable(self, name: str) -> MemberInfo | None:
        member = self.members.get(name)
        return member if member is not None and member.readable else None

    def destination_members(self) -> list[MemberInfo]:
        """Members that can receive a value, on construction or afterwards."""
        return [m for m in self.members.values() if m.writable or m.init]

    def readable_members(self) -> list[MemberInfo]:
        return [m for m in self.members.values() if m.readable]


@functools.cache
def describe(cls: type) -> TypeDescriptor:
    """Build (and memoise) the member table for *cls*."""
    hints = _type_hints(cls)
    init_params = _init_parameters(cls)
    found: dict[str, MemberInfo] = {}

    def add(name: str, annotation: Any, *, readable: bool = True, writable: bool, init: bool) -> None:
        if name.startswith("_") or name in found:
            return
        tp, metadata = strip_annotated(annotation)
        markers = tuple(m for m in metadata if isinstance(m, _MARKER_TYPES))
        found[name] = MemberInfo(name, tp, readable, writable, init, markers)

    if dataclasses.is_dataclass(cls):
        frozen = cls.__dataclass_params__.frozen  # type: ignore[attr-defined]
        for field in dataclasses.fields(cls):
            add(field.name, hints.get(field.name, Any), writable=not frozen, init=field.init)
    elif issubclass(cls, BaseModel):
        frozen = bool(cls.model_config.get("frozen", False))
        for name, info in cls.model_fields.items():
            # Pydantic resolves the annotation and moves Annotated metadata onto FieldInfo.metadata.
            annotation = info.annotation if info.annotation is not None else Any
            extra = tuple(m for m in info.metadata if isinstance(m, _MARKER_TYPES))
            if extra:
                annotation = typing.Annotated[annotation, *extra]
            add(name, annotation, writable=not frozen, init=True)
    else:
        for name, annotation in hints.items():
            if get_origin(annotation) is ClassVar or annotation is ClassVar:
                continue
            add(name, annotation, writable=True, init=_accepts_keyword(init_params, name))

    for klass in reversed(cls.__mro__):
        for name in _slot_names(klass):
            add(name, hints.get(name, Any), writable=True, init=_accepts_keyword(init_params, name))

    for name, prop in _properties(cls):
        add(
            name,
            _property_annotation(prop),
            readable=prop.fget is not None,
            writable=prop.fset is not None,
            init=False,
        )

    return TypeDescriptor(cls, MappingProxyType(found))


def read_path(descriptor: TypeDescriptor, path: str) -> list[MemberInfo] | None:
    """Resolve a dotted member path against *descriptor*.

    Returns the chain of members walked, or None when any segment is not a
    readable member. Segments after an untyped member cannot be checked and
    are accepted as-is.
    """
    chain: list[MemberInfo] = []
    current: TypeDescriptor | None = descriptor
    for segment in path.split("."):
        if current is None:
            chain.append(MemberInfo(segment))
            continue
        member = current.readable(segment)
        if member is None:
            return None
        chain.append(member)
        current = _descriptor_for(member.annotation)
    return chain


def _descriptor_for(annotation: Any) -> TypeDescriptor | None:
    cls = origin_class(unwrap_optional(annotation))
    if cls is None or is_scalar(cls) or cls is object:
        return None
    return describe(cls)


def _type_hints(cls: type) -> dict[str, Any]:
    try:
        return get_type_hints(cls, include_extras=True)
    except (NameError, TypeError):
        # Unresolvable forward references: fall back to the raw annotations
        # and treat string annotations as untyped.
        raw: dict[str, Any] = {}
        for klass in reversed(cls.__mro__):
            for name, annotation in inspect.get_annotations(klass).items():
                raw[name] = Any if isinstance(annotation, str) else annotation
        return raw


def _properties(cls: type) -> list[tuple[str, property]]:
    """Properties declared by *cls* and its bases, excluding pydantic internals."""
    seen: dict[str, property] = {}
    for klass in reversed(cls.__mro__):
        if not _is_user_class(klass):
            continue
        for name, attr in vars(klass).items():
            if isinstance(attr, property):
                seen[name] = attr
    return list(seen.items())


def _is_user_class(klass: type) -> bool:
    return not (issubclass(BaseModel, klass) or klass.__module__.startswith("pydantic."))


def _property_annotation(prop: property) -> Any:
    if prop.fget is None:
        return Any
    try:
        return get_type_hints(prop.fget, include_extras=True).get("return", Any)
    except (NameError, TypeError):
        return Any


def _init_parameters(cls: type) -> Mapping[str, inspect.Parameter] | None:
    """Keyword parameters of ``cls.__init__``; None when it accepts **kwargs."""
    try:
        params = inspect.signature(cls).parameters
    except (TypeError, ValueError):
        return {}
    if any(p.kind is inspect.Parameter.VAR_KEYWORD for p in params.values()):
        return None
    return params


def _accepts_keyword(params: Mapping[str, inspect.Parameter] | None, name: str) -> bool:
    if params is None:
        return True
    param = params.get(name)
    return param is not None and param.kind in (
        inspect.Parameter.POSITIONAL_OR_KEYWORD,
        inspect.Parameter.KEYWORD_ONLY,
    )


def _slot_names(klass: type) -> tuple[str, ...]:
    slots = klass.__dict__.get("__slots__", ())
    if isinstance(slots, str):
        return (slots,)
    return tuple(s for s in slots if s not in ("__dict__", "__weakref__"))

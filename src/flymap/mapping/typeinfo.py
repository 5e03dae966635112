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
"""Helpers for inspecting type annotations during mapping compilation."""

from __future__ import annotations

import collections.abc
import datetime
import decimal
import enum
import types
import uuid
from typing import Annotated, Any, Union, get_args, get_origin

NONE_TYPE = type(None)

# Values of these types are copied or converted, never mapped member by member.
SCALAR_TYPES: tuple[type, ...] = (
    bool,
    int,
    float,
    complex,
    str,
    bytes,
    bytearray,
    decimal.Decimal,
    datetime.date,
    datetime.time,
    datetime.timedelta,
    uuid.UUID,
    enum.Enum,
    NONE_TYPE,
)

TEXT_TYPES: tuple[type, ...] = (str, bytes, bytearray)

# Abstract sequence annotations whose concrete shape is a growable list.
_GROWABLE_ORIGINS: frozenset[Any] = frozenset(
    {
        list,
        collections.abc.Sequence,
        collections.abc.MutableSequence,
        collections.abc.Collection,
        collections.abc.Iterable,
    }
)

_SEQUENCE_ORIGINS: frozenset[Any] = _GROWABLE_ORIGINS | {
    tuple,
    set,
    frozenset,
    collections.abc.Set,
    collections.abc.MutableSet,
}

_MAPPING_ORIGINS: frozenset[Any] = frozenset({dict, collections.abc.Mapping, collections.abc.MutableMapping})


def strip_annotated(tp: Any) -> tuple[Any, tuple[Any, ...]]:
    """Split ``Annotated[T, *meta]`` into ``(T, meta)``."""
    if get_origin(tp) is Annotated:
        return tp.__origin__, tuple(tp.__metadata__)
    return tp, ()


def is_union(tp: Any) -> bool:
    origin = get_origin(tp)
    return origin is Union or origin is types.UnionType


def is_optional(tp: Any) -> bool:
    return is_union(tp) and NONE_TYPE in get_args(tp)


def unwrap_optional(tp: Any) -> Any:
    """``T | None`` -> ``T``; a multi-member union keeps its other members."""
    if not is_optional(tp):
        return tp
    rest = tuple(arg for arg in get_args(tp) if arg is not NONE_TYPE)
    if len(rest) == 1:
        return rest[0]
    return Union[rest]  # noqa: UP007


def origin_class(tp: Any) -> type | None:
    """The runtime class behind an annotation, or None when there is none."""
    if is_union(tp):
        return None
    origin = get_origin(tp)
    if origin is not None:
        return origin if isinstance(origin, type) else None
    return tp if isinstance(tp, type) else None


def is_scalar(tp: Any) -> bool:
    cls = origin_class(tp)
    return cls is not None and issubclass(cls, SCALAR_TYPES)


def is_text(tp: Any) -> bool:
    cls = origin_class(tp)
    return cls is not None and issubclass(cls, TEXT_TYPES)


def is_sequence_like(tp: Any) -> bool:
    """Homogeneous container annotation or class, excluding text and mappings."""
    if tp is Any or is_text(tp):
        return False
    origin = get_origin(tp) or tp
    if origin in _SEQUENCE_ORIGINS:
        return True
    return isinstance(origin, type) and issubclass(origin, (list, tuple, set, frozenset))


def is_mapping_like(tp: Any) -> bool:
    origin = get_origin(tp) or tp
    if origin in _MAPPING_ORIGINS:
        return True
    return isinstance(origin, type) and issubclass(origin, dict)


def sequence_shape(tp: Any) -> type | None:
    """Concrete container class to build for a target sequence annotation.

    ``tuple`` for fixed-size indexable targets, ``list`` for growable ones,
    None for shapes the collection mapping does not produce.
    """
    origin = get_origin(tp) or tp
    if origin is tuple or (isinstance(origin, type) and issubclass(origin, tuple)):
        return tuple
    if origin in _GROWABLE_ORIGINS:
        return list
    return None


def element_type(tp: Any) -> Any:
    """Element annotation of a homogeneous container (``Any`` when unknown)."""
    args = get_args(tp)
    if not args:
        return Any
    origin = get_origin(tp)
    if origin is tuple:
        # tuple[T, ...] is homogeneous; tuple[A, B] is only when all agree.
        if len(args) == 2 and args[1] is Ellipsis:
            return args[0]
        return args[0] if all(arg == args[0] for arg in args) else Any
    return args[0]


def mapping_types(tp: Any) -> tuple[Any, Any]:
    args = get_args(tp)
    if len(args) == 2:
        return args[0], args[1]
    return Any, Any


def accepts(target: Any, value: Any) -> bool:
    """Runtime identity check: can *value* be stored as-is under *target*?"""
    if target is Any:
        return True
    if is_union(target):
        return any(accepts(arg, value) for arg in get_args(target))
    if target is NONE_TYPE or target is None:
        return value is None
    cls = origin_class(target)
    if cls is None:
        return False
    if not isinstance(value, cls):
        return False
    # Parametrised containers must be rebuilt when elements may need mapping.
    if get_args(target) and (is_sequence_like(target) or is_mapping_like(target)):
        return _container_accepts(target, value)
    # bool is an int subclass; keep booleans out of int/float slots.
    return not (isinstance(value, bool) and cls in (int, float))


def _container_accepts(target: Any, value: Any) -> bool:
    if is_mapping_like(target):
        key_tp, val_tp = mapping_types(target)
        return all(accepts(key_tp, k) and accepts(val_tp, v) for k, v in value.items())
    elem = element_type(target)
    return all(accepts(elem, item) for item in value)


def is_assignable(source: Any, target: Any) -> bool:
    """Static identity check between two annotations."""
    if target is Any:
        return True
    if source is Any:
        return False
    if source == target:
        return True
    if is_union(target):
        if is_union(source):
            return all(is_assignable(arg, target) for arg in get_args(source))
        return any(is_assignable(source, arg) for arg in get_args(target))
    if is_union(source):
        return False
    if get_args(target) or get_args(source):
        return False
    if isinstance(source, type) and isinstance(target, type):
        if issubclass(source, bool) and target in (int, float):
            return False
        return issubclass(source, target)
    return False


def zero_value(tp: Any) -> Any:
    """The empty/default value for a target annotation.

    ``None`` for optionals, objects and anything without a natural empty
    value; ``0``/``""``/``False``/empty containers for builtins.
    """
    if tp is Any or is_optional(tp):
        return None
    shape = sequence_shape(tp)
    if shape is not None:
        return shape()
    cls = origin_class(tp)
    if cls is None:
        return None
    if is_mapping_like(cls):
        return {}
    if cls in (set, frozenset):
        return cls()
    if cls in (bool, int, float, complex, str, bytes, bytearray, decimal.Decimal):
        return cls()
    if cls is datetime.timedelta:
        return datetime.timedelta()
    return None

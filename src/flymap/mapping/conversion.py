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
"""Type conversion engine.

Given the declared type of a source value and the declared type of the
destination member, :meth:`ConversionEngine.converter` builds, once per
member, a function that adapts values at mapping time. Rules are tried in
order and the first that applies wins:

1. Identity: the target accepts the source type as-is.
2. Optional: ``T | None`` on either side is unwrapped, converted and
   re-wrapped. ``None`` into a non-optional target is an absent value.
3. Collection: sequence-like to ``list``/``tuple`` (and ``dict`` to
   ``dict``), converting every element through this same chain.
4. Nested object: neither side is a scalar, so the value is mapped by the
   :class:`~flymap.mapping.mapper.Mapper`, guarded against cycles.
5. Fallback: direct conversion (``int`` -> ``float``, enum <-> value, ...).
   A value that cannot be represented becomes the target's zero value.

When the source type is unknown (``Any`` or ``object``) the choice is made per value at
mapping time, keyed by the value's runtime class.
"""

from __future__ import annotations

import datetime
import decimal
import enum
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, cast

import structlog

from flymap.mapping.context import IssueKind, MappingContext, describe_value
from flymap.mapping.type_pair import TypePair
from flymap.mapping.typeinfo import (
    SCALAR_TYPES,
    accepts,
    element_type,
    is_assignable,
    is_mapping_like,
    is_optional,
    is_scalar,
    is_sequence_like,
    mapping_types,
    origin_class,
    sequence_shape,
    unwrap_optional,
    zero_value,
)

logger = structlog.get_logger("flymap.mapping.conversion")

Converter = Callable[[Any, MappingContext], Any]

_CONVERSION_ERRORS = (TypeError, ValueError, ArithmeticError, KeyError)

_TRUE_STRINGS = frozenset({"true", "1", "yes", "on"})
_FALSE_STRINGS = frozenset({"false", "0", "no", "off", ""})


@dataclass(frozen=True, slots=True)
class ConversionSite:
    """Where a converter is used: reported with every recorded issue."""

    type_pair: TypePair
    member: str


def _identity(value: Any, ctx: MappingContext) -> Any:
    return value


class ConversionEngine:
    """Builds value converters between declared member types."""

    def converter(self, source: Any, target: Any, site: ConversionSite) -> Converter:
        if is_assignable(source, target):
            return _identity
        if source is Any or source is object:
            return self._runtime(target, site)
        if is_optional(source) or is_optional(target):
            return self._optional(source, target, site)
        if is_sequence_like(source) and is_sequence_like(target):
            shape = sequence_shape(target)
            if shape is not None:
                return self._sequence(source, target, shape, site)
        elif is_mapping_like(source) and is_mapping_like(target):
            return self._mapping(source, target, site)
        if _is_complex(source) and _is_complex(target):
            return self._nested(source, target, site)
        return self._fallback(target, site)

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    def _runtime(self, target: Any, site: ConversionSite) -> Converter:
        by_class: dict[type, Converter] = {}

        def convert(value: Any, ctx: MappingContext) -> Any:
            if accepts(target, value):
                return value
            if value is None:
                return _absent(target, site, ctx)
            runtime_type = type(value)
            inner = by_class.get(runtime_type)
            if inner is None:
                inner = by_class.setdefault(runtime_type, self.converter(runtime_type, target, site))
            return inner(value, ctx)

        return convert

    def _optional(self, source: Any, target: Any, site: ConversionSite) -> Converter:
        inner = self.converter(unwrap_optional(source), unwrap_optional(target), site)

        if is_optional(target):

            def convert_optional(value: Any, ctx: MappingContext) -> Any:
                return None if value is None else inner(value, ctx)

            return convert_optional

        def convert_required(value: Any, ctx: MappingContext) -> Any:
            if value is None:
                return _absent(target, site, ctx)
            return inner(value, ctx)

        return convert_required

    def _sequence(self, source: Any, target: Any, shape: type, site: ConversionSite) -> Converter:
        convert_element = self.converter(element_type(source), element_type(target), site)

        def convert(value: Any, ctx: MappingContext) -> Any:
            return shape(convert_element(item, ctx) for item in value)

        return convert

    def _mapping(self, source: Any, target: Any, site: ConversionSite) -> Converter:
        source_key, source_value = mapping_types(source)
        target_key, target_value = mapping_types(target)
        convert_key = self.converter(source_key, target_key, site)
        convert_value = self.converter(source_value, target_value, site)

        def convert(value: Any, ctx: MappingContext) -> Any:
            return {convert_key(k, ctx): convert_value(v, ctx) for k, v in value.items()}

        return convert

    def _nested(self, source: Any, target: Any, site: ConversionSite) -> Converter:
        source_cls = origin_class(source)
        target_cls = cast(type, origin_class(target))

        def convert(value: Any, ctx: MappingContext) -> Any:
            if value is None:
                return _absent(target, site, ctx)
            if ctx.guard.is_on_path(value):
                logger.debug(
                    "cycle_detected",
                    type_pair=str(site.type_pair),
                    member=site.member,
                    value_type=type(value).__qualname__,
                )
                ctx.record(IssueKind.CYCLE, site.type_pair, site.member, type(value).__qualname__)
                return zero_value(target)
            declared = source_cls if source_cls is not None and isinstance(value, source_cls) else type(value)
            return ctx.mapper._map_guarded(value, declared, target_cls, ctx)

        return convert

    def _fallback(self, target: Any, site: ConversionSite) -> Converter:
        target_cls = origin_class(target)

        def convert(value: Any, ctx: MappingContext) -> Any:
            if accepts(target, value):
                return value
            if target_cls is None:
                return _miss(value, target, site, ctx, "no conversion to this annotation")
            try:
                return coerce(value, target_cls)
            except _CONVERSION_ERRORS as exc:
                return _miss(value, target, site, ctx, str(exc) or type(exc).__name__)

        return convert


def coerce(value: Any, target_cls: type) -> Any:
    """Direct conversion of *value* to *target_cls*.

    Raises TypeError/ValueError (or ArithmeticError) when the value is not
    representable as the target.
    """
    if isinstance(value, target_cls) and not (isinstance(value, bool) and target_cls in (int, float)):
        return value

    if issubclass(target_cls, enum.Enum):
        return _to_enum(value, target_cls)

    if isinstance(value, enum.Enum):
        value = value.value
        if isinstance(value, target_cls):
            return value

    if not isinstance(value, SCALAR_TYPES):
        raise TypeError(f"cannot convert {type(value).__qualname__} to {target_cls.__qualname__}")

    if target_cls is bool:
        return _to_bool(value)
    if target_cls is decimal.Decimal:
        return decimal.Decimal(str(value)) if isinstance(value, float) else decimal.Decimal(value)
    if target_cls is str:
        if isinstance(value, (bytes, bytearray)):
            return value.decode()
        return value.isoformat() if isinstance(value, (datetime.date, datetime.time)) else str(value)
    if isinstance(value, str):
        if target_cls in (datetime.datetime, datetime.date, datetime.time):
            return target_cls.fromisoformat(value)
        if target_cls is uuid.UUID:
            return uuid.UUID(value)
    if target_cls in (int, float, complex) and isinstance(value, (datetime.date, datetime.time, uuid.UUID)):
        raise TypeError(f"cannot convert {type(value).__qualname__} to {target_cls.__qualname__}")
    return target_cls(value)


def _to_enum(value: Any, enum_cls: type[enum.Enum]) -> enum.Enum:
    if isinstance(value, enum.Enum):
        value = value.value
    try:
        return enum_cls(value)
    except ValueError:
        if isinstance(value, str) and value in enum_cls.__members__:
            return enum_cls[value]
        raise


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
        raise ValueError(f"not a boolean: {value!r}")
    if isinstance(value, (int, float, decimal.Decimal)):
        return bool(value)
    raise TypeError(f"cannot convert {type(value).__qualname__} to bool")


def _is_complex(tp: Any) -> bool:
    """A type whose values are mapped member by member."""
    if tp is Any or is_scalar(tp) or is_sequence_like(tp) or is_mapping_like(tp):
        return False
    cls = origin_class(tp)
    return cls is not None and cls is not object


def _absent(target: Any, site: ConversionSite, ctx: MappingContext) -> Any:
    logger.debug("absent_value", type_pair=str(site.type_pair), member=site.member)
    ctx.record(IssueKind.ABSENT_VALUE, site.type_pair, site.member, "None for a non-optional member")
    return zero_value(target)


def _miss(value: Any, target: Any, site: ConversionSite, ctx: MappingContext, reason: str) -> Any:
    logger.debug(
        "conversion_miss",
        type_pair=str(site.type_pair),
        member=site.member,
        value=describe_value(value),
        reason=reason,
    )
    ctx.record(IssueKind.CONVERSION_MISS, site.type_pair, site.member, reason)
    return zero_value(target)

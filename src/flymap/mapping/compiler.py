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
"""Synthesis of per type-pair mapping functions.

:class:`TransformationCompiler` derives, from a destination type's members,
the optional :class:`MappingConfiguration` and the member conventions, an
ordered tuple of :class:`AssignmentStep` objects. The result is frozen in a
:class:`CompiledMapping`, which performs no rule resolution when it runs.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from operator import attrgetter
from typing import Any, cast, get_type_hints

import structlog

from flymap.kernel.exceptions import ConfigurationException, MappingException
from flymap.mapping.configuration import MappingConfiguration, MemberRule
from flymap.mapping.context import MappingContext
from flymap.mapping.conventions import ConventionResolver
from flymap.mapping.conversion import ConversionEngine, ConversionSite, Converter
from flymap.mapping.members import MemberInfo, TypeDescriptor, describe, read_path
from flymap.mapping.type_pair import TypePair
from flymap.mapping.typeinfo import is_optional

logger = structlog.get_logger("flymap.mapping.compiler")

Reader = Callable[[Any], Any]


@dataclass(frozen=True, slots=True)
class AssignmentStep:
    """Read, convert and store one destination member.

    Attributes:
        member: Destination member name.
        read: Pulls the raw value from the source object.
        convert: Adapts the raw value to the member's declared type.
        writable: The member can be set on an existing instance.
        init: The member is passed to the constructor by keyword.
        origin: How the source was found (``source_path``, ``resolver``,
            ``same_name``, ``map_from``, ``map_to``).
    """

    member: str
    read: Reader
    convert: Converter
    writable: bool
    init: bool
    origin: str


class CompiledMapping:
    """The cached mapping function for one type pair.

    Holds only immutable state, so one instance serves concurrent calls.
    """

    __slots__ = ("type_pair", "steps")

    def __init__(self, type_pair: TypePair, steps: tuple[AssignmentStep, ...]) -> None:
        self.type_pair = type_pair
        self.steps = steps

    @property
    def members(self) -> tuple[str, ...]:
        return tuple(step.member for step in self.steps)

    def __call__(self, source: Any, destination: Any, ctx: MappingContext) -> None:
        """Assign every writable member of *destination* in place."""
        for step in self.steps:
            if step.writable:
                setattr(destination, step.member, step.convert(step.read(source), ctx))

    def create(self, source: Any, ctx: MappingContext) -> Any:
        """Build a new destination instance from *source*."""
        values = {step.member: step.convert(step.read(source), ctx) for step in self.steps}
        init_steps = {step.member for step in self.steps if step.init}
        kwargs = {name: value for name, value in values.items() if name in init_steps}

        destination_type = self.type_pair.destination_type
        try:
            destination = destination_type(**kwargs)
        except (TypeError, ValueError) as exc:
            raise MappingException(
                f"Cannot construct {destination_type.__qualname__}: {exc}",
                code="MAPPING_010",
                context={"type_pair": str(self.type_pair), "arguments": sorted(kwargs)},
            ) from exc

        for name, value in values.items():
            if name not in init_steps:
                setattr(destination, name, value)
        return destination

    def __repr__(self) -> str:
        return f"CompiledMapping({self.type_pair}, members={list(self.members)})"


class TransformationCompiler:
    """Derives :class:`CompiledMapping` objects; holds no per-pair state."""

    def __init__(
        self,
        conventions: ConventionResolver | None = None,
        engine: ConversionEngine | None = None,
    ) -> None:
        self._conventions = conventions or ConventionResolver()
        self._engine = engine or ConversionEngine()

    def compile(self, type_pair: TypePair, configuration: MappingConfiguration | None) -> CompiledMapping:
        """Synthesize the mapping for *type_pair*.

        Raises:
            ConfigurationException: A configured member does not exist on the
                destination, or a configured source path does not resolve
                against the source type.
        """
        source = describe(type_pair.source_type)
        destination = describe(type_pair.destination_type)
        if configuration is not None:
            self._check_destination_names(type_pair, configuration, destination)

        steps: list[AssignmentStep] = []
        unresolved: list[str] = []
        for member in destination.destination_members():
            if member.ignored or (configuration is not None and configuration.is_ignored(member.name)):
                continue

            rule = configuration.rule_for(member.name) if configuration is not None else None
            if rule is not None:
                read, annotation, origin = self._explicit(type_pair, member, rule, source)
            else:
                match = self._conventions.resolve(member, source)
                if match is None:
                    unresolved.append(member.name)
                    continue
                source_member, kind = match
                read, annotation, origin = attrgetter(source_member.name), source_member.annotation, kind.value

            convert = self._engine.converter(annotation, member.annotation, ConversionSite(type_pair, member.name))
            steps.append(AssignmentStep(member.name, read, convert, member.writable, member.init, origin))

        if unresolved:
            logger.debug("member_unresolved", type_pair=str(type_pair), members=unresolved)
        logger.debug(
            "mapping_compiled",
            type_pair=str(type_pair),
            members=[step.member for step in steps],
            configured=configuration is not None,
        )
        return CompiledMapping(type_pair, tuple(steps))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _explicit(
        self,
        type_pair: TypePair,
        member: MemberInfo,
        rule: MemberRule,
        source: TypeDescriptor,
    ) -> tuple[Reader, Any, str]:
        if rule.resolver is not None:
            return rule.resolver, _return_annotation(rule.resolver), "resolver"

        source_path = cast(str, rule.source_path)
        chain = read_path(source, source_path)
        if chain is None:
            raise ConfigurationException(
                f"Source path '{source_path}' for member '{member.name}' does not resolve on "
                f"{type_pair.source_type.__qualname__}",
                code="MAPPING_001",
                context={"type_pair": str(type_pair), "member": member.name, "source_path": source_path},
            )
        annotation = chain[-1].annotation
        if len(chain) > 1 and any(_may_be_none(link.annotation) for link in chain[:-1]):
            annotation = annotation | None if annotation is not Any else Any
        return _path_reader(source_path), annotation, "source_path"

    @staticmethod
    def _check_destination_names(
        type_pair: TypePair,
        configuration: MappingConfiguration,
        destination: TypeDescriptor,
    ) -> None:
        known = {m.name for m in destination.destination_members()}
        unknown = sorted((set(configuration.member_rules) | configuration.ignored_members) - known)
        if unknown:
            raise ConfigurationException(
                f"Unknown destination member(s) {unknown} on {type_pair.destination_type.__qualname__}",
                code="MAPPING_002",
                context={"type_pair": str(type_pair), "members": unknown},
            )


def _path_reader(path: str) -> Reader:
    """Attribute reader for a dotted path; ``None`` part-way yields ``None``."""
    parts = tuple(path.split("."))
    if len(parts) == 1:
        return attrgetter(parts[0])

    def read(obj: Any) -> Any:
        for part in parts:
            if obj is None:
                return None
            obj = getattr(obj, part)
        return obj

    return read


def _may_be_none(annotation: Any) -> bool:
    return annotation is Any or is_optional(annotation)


def _return_annotation(func: Callable[..., Any]) -> Any:
    try:
        return get_type_hints(func).get("return", Any)
    except (NameError, TypeError):
        return Any

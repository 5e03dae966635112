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
"""Per type-pair mapping configuration and the fluent builder that produces it.

Example::

    class UserProfile(MappingProfile):
        def configure(self) -> None:
            (
                self.create_map(User, UserDTO)
                .for_member("full_name", map_from=lambda u: f"{u.first_name} {u.last_name}")
                .for_member("city", map_from="address.city")
                .ignore("password_hash")
            )
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Generic, Self, TypeVar

from flymap.kernel.exceptions import ConfigurationException
from flymap.mapping.type_pair import TypePair

S = TypeVar("S")
D = TypeVar("D")

Resolver = Callable[[Any], Any]


@dataclass(frozen=True, slots=True)
class MemberRule:
    """How one destination member gets its value.

    Exactly one of ``source_path`` (a dotted attribute path on the source,
    e.g. ``"address.city"``) or ``resolver`` (a callable receiving the
    source object) is set. ``conflicting`` records that the configuring
    call set both and the later one won.
    """

    source_path: str | None = None
    resolver: Resolver | None = None
    conflicting: bool = False

    def __post_init__(self) -> None:
        if (self.source_path is None) == (self.resolver is None):
            raise ValueError("MemberRule needs exactly one of source_path or resolver")


@dataclass(frozen=True)
class MappingConfiguration:
    """Immutable mapping rules for one (source, destination) type pair.

    Attributes:
        source_type: Type mapped from.
        destination_type: Type mapped to.
        member_rules: Destination member name -> rule.
        ignored_members: Destination members never written. Wins over a rule
            for the same member.
        custom_converter: Whole-object converter replacing member mapping.
    """

    source_type: type
    destination_type: type
    member_rules: Mapping[str, MemberRule] = dataclasses.field(default_factory=lambda: MappingProxyType({}))
    ignored_members: frozenset[str] = frozenset()
    custom_converter: Callable[[Any], Any] | None = None

    @property
    def type_pair(self) -> TypePair:
        return TypePair(self.source_type, self.destination_type)

    def is_ignored(self, member: str) -> bool:
        return member in self.ignored_members

    def rule_for(self, member: str) -> MemberRule | None:
        if self.is_ignored(member):
            return None
        return self.member_rules.get(member)


class MemberConfigurationExpression:
    """Options for a single destination member, passed to ``for_member``."""

    def __init__(self) -> None:
        self._rule: MemberRule | None = None
        self._set_count = 0

    def map_from(self, source: str | Resolver) -> None:
        """Read from a dotted source path, or compute with a callable."""
        if isinstance(source, str):
            self._set(MemberRule(source_path=source))
        elif callable(source):
            self._set(MemberRule(resolver=source))
        else:
            raise ConfigurationException(
                "map_from expects a source path string or a callable",
                code="MAPPING_003",
                context={"value": repr(source)},
            )

    def resolve_using(self, resolver: Resolver) -> None:
        """Compute the member from the whole source object."""
        if resolver is None:
            raise ConfigurationException("resolver must not be None", code="MAPPING_003")
        self._set(MemberRule(resolver=resolver))

    def _set(self, rule: MemberRule) -> None:
        self._set_count += 1
        self._rule = rule

    def build(self) -> MemberRule | None:
        if self._rule is None or self._set_count < 2:
            return self._rule
        return dataclasses.replace(self._rule, conflicting=True)


class MappingExpression(Generic[S, D]):
    """Fluent builder for one type pair's :class:`MappingConfiguration`."""

    def __init__(self, source_type: type[S], destination_type: type[D]) -> None:
        self.source_type = source_type
        self.destination_type = destination_type
        self._member_rules: dict[str, MemberRule] = {}
        self._ignored: set[str] = set()
        self._converter: Callable[[S], D] | None = None

    @property
    def type_pair(self) -> TypePair:
        return TypePair(self.source_type, self.destination_type)

    def for_member(
        self,
        destination_member: str,
        options: Callable[[MemberConfigurationExpression], None] | None = None,
        *,
        map_from: str | Resolver | None = None,
    ) -> Self:
        """Configure where *destination_member* takes its value from.

        Either pass ``map_from`` directly, or an ``options`` callback that
        calls ``map_from``/``resolve_using`` on the member expression.
        Configuring the same member twice replaces the earlier rule.
        """
        member_options = MemberConfigurationExpression()
        if map_from is not None:
            member_options.map_from(map_from)
        if options is not None:
            options(member_options)

        rule = member_options.build()
        if rule is None:
            self._member_rules.pop(destination_member, None)
        else:
            self._member_rules[destination_member] = rule
        return self

    def ignore(self, *destination_members: str) -> Self:
        self._ignored.update(destination_members)
        return self

    def convert_using(self, converter: Callable[[S], D]) -> Self:
        """Replace member-wise mapping with a whole-object converter."""
        if converter is None:
            raise ConfigurationException(
                "converter must not be None",
                code="MAPPING_003",
                context={"type_pair": str(self.type_pair)},
            )
        self._converter = converter
        return self

    def build(self) -> MappingConfiguration:
        return MappingConfiguration(
            source_type=self.source_type,
            destination_type=self.destination_type,
            member_rules=MappingProxyType(dict(self._member_rules)),
            ignored_members=frozenset(self._ignored),
            custom_converter=self._converter,
        )


class MappingProfile:
    """Groups related type-pair configurations.

    Subclass and declare maps in :meth:`configure`::

        class OrderProfile(MappingProfile):
            def configure(self) -> None:
                self.create_map(Order, OrderDTO).ignore("internal_notes")
    """

    def __init__(self) -> None:
        self._expressions: list[MappingExpression[Any, Any]] = []
        self.configure()

    def configure(self) -> None:
        """Declare this profile's maps. Default declares none."""

    def create_map(self, source_type: type[S], destination_type: type[D]) -> MappingExpression[S, D]:
        expression: MappingExpression[S, D] = MappingExpression(source_type, destination_type)
        self._expressions.append(expression)
        return expression

    @property
    def name(self) -> str:
        return type(self).__qualname__

    def mappings(self) -> list[MappingConfiguration]:
        """Built configurations, in declaration order."""
        return [expression.build() for expression in self._expressions]

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
"""Configuration registry and the process-wide mapper configuration.

Usage::

    config = MapperConfiguration()
    config.add_profile(UserProfile)
    mapper = config.create_mapper()
    dto = mapper.map(user, UserDTO)
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING, Self

import structlog

from flymap.core.config import Config
from flymap.kernel.exceptions import ConfigurationException
from flymap.mapping.compiler import TransformationCompiler
from flymap.mapping.configuration import MappingConfiguration, MappingProfile
from flymap.mapping.properties import MapperProperties
from flymap.mapping.type_pair import TypePair

if TYPE_CHECKING:
    from flymap.mapping.mapper import Mapper

logger = structlog.get_logger("flymap.mapping.registry")


class ConfigurationRegistry:
    """All :class:`MappingConfiguration` objects, keyed by :class:`TypePair`.

    Mutable while profiles are registered; :meth:`freeze` makes it read-only
    so any number of threads can look configurations up without locking.
    """

    def __init__(self, *, strict_member_rules: bool = False) -> None:
        self._strict_member_rules = strict_member_rules
        self._mappings: dict[TypePair, MappingConfiguration] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def register(self, profile: MappingProfile) -> None:
        """Merge every map declared by *profile*; later registrations win per pair."""
        if profile is None:
            raise ConfigurationException("profile must not be None", code="MAPPING_003")
        configurations = profile.mappings()
        for configuration in configurations:
            self.add(configuration, profile=profile.name)
        logger.info("profile_registered", profile=profile.name, mappings=len(configurations))

    def add(self, configuration: MappingConfiguration, *, profile: str | None = None) -> None:
        if self._frozen:
            raise ConfigurationException(
                "Registry is frozen: register profiles before creating a mapper",
                code="MAPPING_004",
                context={"type_pair": str(configuration.type_pair)},
            )
        self._check_rule_conflicts(configuration, profile)

        key = configuration.type_pair
        if key in self._mappings:
            logger.info("mapping_replaced", type_pair=str(key), profile=profile)
        self._mappings[key] = configuration

    def lookup(self, source_type: type, destination_type: type) -> MappingConfiguration | None:
        return self._mappings.get(TypePair(source_type, destination_type))

    def freeze(self) -> None:
        self._frozen = True

    def type_pairs(self) -> list[TypePair]:
        return list(self._mappings)

    def __iter__(self) -> Iterator[MappingConfiguration]:
        return iter(list(self._mappings.values()))

    def __len__(self) -> int:
        return len(self._mappings)

    def __contains__(self, key: object) -> bool:
        return key in self._mappings

    def _check_rule_conflicts(self, configuration: MappingConfiguration, profile: str | None) -> None:
        conflicting = sorted(name for name, rule in configuration.member_rules.items() if rule.conflicting)
        if not conflicting:
            return
        if self._strict_member_rules:
            raise ConfigurationException(
                f"Members {conflicting} of {configuration.type_pair} set both a source path and a resolver",
                code="MAPPING_005",
                context={"type_pair": str(configuration.type_pair), "members": conflicting},
            )
        logger.warning(
            "member_rule_conflict",
            type_pair=str(configuration.type_pair),
            members=conflicting,
            profile=profile,
            resolution="last_set_wins",
        )


class MapperConfiguration:
    """Process-wide mapper setup: properties plus the configuration registry.

    Profiles are added during application setup. :meth:`create_mapper`
    freezes the registry and hands it to a new :class:`Mapper`.
    """

    def __init__(self, properties: MapperProperties | None = None) -> None:
        self.properties = properties or MapperProperties()
        self.registry = ConfigurationRegistry(strict_member_rules=self.properties.strict_member_rules)
        self._profiles: list[MappingProfile] = []

    @classmethod
    def from_config(cls, config: Config) -> MapperConfiguration:
        """Create a configuration whose properties are bound from ``flymap.mapper``."""
        return cls(config.bind(MapperProperties))

    @property
    def profiles(self) -> list[MappingProfile]:
        return list(self._profiles)

    def add_profile(self, profile: MappingProfile | type[MappingProfile]) -> Self:
        """Register a profile instance, or instantiate and register a profile class."""
        if profile is None:
            raise ConfigurationException("profile must not be None", code="MAPPING_003")
        if isinstance(profile, type):
            profile = profile()
        self.registry.register(profile)
        self._profiles.append(profile)
        return self

    def create_mapper(self) -> Mapper:
        from flymap.mapping.mapper import Mapper

        self.registry.freeze()
        mapper = Mapper(self.registry)
        if self.properties.validate_on_create:
            for configuration in self.registry:
                if configuration.custom_converter is None:
                    mapper.compile(configuration.source_type, configuration.destination_type)
        return mapper

    def assert_configuration_is_valid(self) -> None:
        """Compile every registered type pair, raising the first configuration error.

        Pairs using a custom converter are not compiled; their converter
        replaces member mapping entirely.
        """
        compiler = TransformationCompiler()
        for configuration in self.registry:
            if configuration.custom_converter is None:
                compiler.compile(configuration.type_pair, configuration)

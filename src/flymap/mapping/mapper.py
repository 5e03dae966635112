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
"""Generic type-to-type mapper.

Maps between any two types (dataclasses, Pydantic models, plain annotated
classes) by matching member names, honouring profile rules and markers,
and recursing into nested objects and collections.

Example::

    mapper = Mapper()
    dto = mapper.map(user_entity, UserDTO)

    # With profile rules
    config = MapperConfiguration().add_profile(UserProfile)
    mapper = config.create_mapper()
    dto = mapper.map(user, UserDTO)

    # Into an existing instance
    mapper.map_into(user, existing_dto)
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, TypeVar

import structlog

from flymap.kernel.exceptions import MappingException
from flymap.mapping.cache import CompiledMappingCache
from flymap.mapping.compiler import CompiledMapping, TransformationCompiler
from flymap.mapping.context import MappingContext, MappingReport
from flymap.mapping.members import describe
from flymap.mapping.registry import ConfigurationRegistry
from flymap.mapping.type_pair import TypePair

S = TypeVar("S")
D = TypeVar("D")

logger = structlog.get_logger("flymap.mapping.mapper")


class Mapper:
    """Maps objects between types using compiled, cached per-pair mappings.

    A mapper owns one read-only :class:`ConfigurationRegistry` and one
    :class:`CompiledMappingCache`. Both outlive individual calls; every
    top-level call gets its own :class:`MappingContext`, so a mapper can be
    shared between threads.

    Usage::

        mapper = MapperConfiguration().add_profile(UserProfile).create_mapper()

        dto = mapper.map(user, UserDTO)
        dtos = mapper.map_each(users, UserDTO)
        report = mapper.map_report(user, UserDTO)
    """

    def __init__(
        self,
        registry: ConfigurationRegistry | None = None,
        *,
        compiler: TransformationCompiler | None = None,
    ) -> None:
        if registry is None:
            registry = ConfigurationRegistry()
        registry.freeze()
        self._registry = registry
        self._compiler = compiler or TransformationCompiler()
        self._cache = CompiledMappingCache()

    @property
    def registry(self) -> ConfigurationRegistry:
        return self._registry

    @property
    def cache(self) -> CompiledMappingCache:
        return self._cache

    def map(self, source: S | None, destination_type: type[D], *, source_type: type | None = None) -> D | None:
        """Map *source* to a new instance of *destination_type*.

        ``None`` maps to ``None``. ``source_type`` selects the configuration
        of a base class when *source* is an instance of a subclass.
        """
        if source is None:
            return None
        ctx = MappingContext(self)
        return self._map_guarded(source, source_type or type(source), destination_type, ctx)

    def map_into(self, source: S | None, destination: D, *, source_type: type | None = None) -> D:
        """Map *source* onto an existing *destination* and return it.

        Members the mapping does not resolve keep their current values. A
        ``None`` source leaves *destination* unchanged.
        """
        if source is None:
            return destination
        if destination is None:
            raise MappingException("destination must not be None", code="MAPPING_011")

        ctx = MappingContext(self)
        with ctx.guard.enter(source):
            self._populate(source, source_type or type(source), destination, ctx)
        return destination

    def map_each(
        self,
        sources: Iterable[S],
        destination_type: type[D],
        *,
        source_type: type | None = None,
    ) -> list[D | None]:
        """Map every element of *sources*, preserving order.

        An exception from any element aborts the whole batch.
        """
        return [self.map(source, destination_type, source_type=source_type) for source in sources]

    def map_report(
        self,
        source: S | None,
        destination_type: type[D],
        *,
        source_type: type | None = None,
    ) -> MappingReport[D]:
        """Like :meth:`map`, also returning the members that fell back to defaults."""
        if source is None:
            return MappingReport(None)
        ctx = MappingContext(self)
        destination = self._map_guarded(source, source_type or type(source), destination_type, ctx)
        return MappingReport(destination, tuple(ctx.issues))

    def compile(self, source_type: type, destination_type: type) -> CompiledMapping:
        """Get the compiled mapping for a type pair, building it on first use.

        Raises:
            ConfigurationException: The pair's configuration is invalid.
        """
        key = TypePair(source_type, destination_type)
        return self._cache.get_or_create(
            key,
            lambda: self._compiler.compile(key, self._registry.lookup(source_type, destination_type)),
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _map_guarded(self, source: Any, source_type: type, destination_type: type[D], ctx: MappingContext) -> D:
        """Map *source* with it on the active path; used by top-level calls and nested converters."""
        with ctx.guard.enter(source):
            return self._map_new(source, source_type, destination_type, ctx)

    def _map_new(self, source: Any, source_type: type, destination_type: type[D], ctx: MappingContext) -> D:
        configuration = self._registry.lookup(source_type, destination_type)
        if configuration is not None and configuration.custom_converter is not None:
            return configuration.custom_converter(source)
        return self.compile(source_type, destination_type).create(source, ctx)

    def _populate(self, source: Any, source_type: type, destination: Any, ctx: MappingContext) -> None:
        destination_type = type(destination)
        configuration = self._registry.lookup(source_type, destination_type)
        if configuration is not None and configuration.custom_converter is not None:
            _copy_members(configuration.custom_converter(source), destination)
            return
        self.compile(source_type, destination_type)(source, destination, ctx)


def _copy_members(result: Any, destination: Any) -> None:
    """Copy readable-and-writable members of *result* onto *destination*."""
    if result is None:
        return
    for member in describe(type(destination)).members.values():
        if member.readable and member.writable:
            setattr(destination, member.name, getattr(result, member.name))

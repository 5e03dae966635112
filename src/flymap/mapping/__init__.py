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
"""flymap mapping — compiled, convention-based object-to-object mapping.

Profiles declare per type-pair rules, the registry collects them, and the
Mapper compiles one mapping function per pair on first use.
"""

from flymap.mapping.cache import CompiledMappingCache
from flymap.mapping.compiler import AssignmentStep, CompiledMapping, TransformationCompiler
from flymap.mapping.configuration import (
    MappingConfiguration,
    MappingExpression,
    MappingProfile,
    MemberConfigurationExpression,
    MemberRule,
)
from flymap.mapping.context import IssueKind, MappingContext, MappingIssue, MappingReport
from flymap.mapping.conventions import ConventionResolver, MatchKind
from flymap.mapping.conversion import ConversionEngine, ConversionSite
from flymap.mapping.guard import CircularReferenceGuard
from flymap.mapping.mapper import Mapper
from flymap.mapping.markers import Ignore, MapFrom, MapTo
from flymap.mapping.members import MemberInfo, TypeDescriptor, describe
from flymap.mapping.properties import MapperProperties
from flymap.mapping.registry import ConfigurationRegistry, MapperConfiguration
from flymap.mapping.type_pair import TypePair

__all__ = [
    # Facade
    "Mapper",
    "MapperConfiguration",
    "MapperProperties",
    # Configuration
    "ConfigurationRegistry",
    "MappingConfiguration",
    "MappingExpression",
    "MappingProfile",
    "MemberConfigurationExpression",
    "MemberRule",
    "TypePair",
    # Markers
    "Ignore",
    "MapFrom",
    "MapTo",
    # Engine
    "AssignmentStep",
    "CircularReferenceGuard",
    "CompiledMapping",
    "CompiledMappingCache",
    "ConventionResolver",
    "ConversionEngine",
    "ConversionSite",
    "MatchKind",
    "MemberInfo",
    "TransformationCompiler",
    "TypeDescriptor",
    "describe",
    # Results
    "IssueKind",
    "MappingContext",
    "MappingIssue",
    "MappingReport",
]

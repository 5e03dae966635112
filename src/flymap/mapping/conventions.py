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
"""Convention-based source member resolution."""

from __future__ import annotations

from enum import Enum

from flymap.mapping.members import MemberInfo, TypeDescriptor


class MatchKind(Enum):
    """Which convention produced a match."""

    MAP_FROM = "map_from"
    SAME_NAME = "same_name"
    MAP_TO = "map_to"


class ConventionResolver:
    """Finds the source member for a destination member without explicit rules.

    Precedence, first match wins:

    1. ``MapFrom("x")`` on the destination member, when ``x`` is readable
       on the source.
    2. A readable source member with the same name.
    3. A readable source member marked ``MapTo("<destination name>")``.

    No match means the destination member is left untouched.
    """

    def resolve(self, destination: MemberInfo, source: TypeDescriptor) -> tuple[MemberInfo, MatchKind] | None:
        renamed = destination.map_from
        if renamed is not None:
            member = source.readable(renamed)
            if member is not None:
                return member, MatchKind.MAP_FROM

        member = source.readable(destination.name)
        if member is not None:
            return member, MatchKind.SAME_NAME

        for candidate in source.readable_members():
            if candidate.map_to == destination.name:
                return candidate, MatchKind.MAP_TO

        return None

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
"""Per-call mapping state and the issues recorded while mapping."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from flymap.mapping.guard import CircularReferenceGuard
from flymap.mapping.type_pair import TypePair

if TYPE_CHECKING:
    from flymap.mapping.mapper import Mapper

D = TypeVar("D")


class IssueKind(Enum):
    """Non-fatal conditions absorbed while mapping."""

    CONVERSION_MISS = "CONVERSION_MISS"
    ABSENT_VALUE = "ABSENT_VALUE"
    CYCLE = "CYCLE"


@dataclass(frozen=True)
class MappingIssue:
    """One member that received a default instead of a mapped value."""

    kind: IssueKind
    type_pair: TypePair
    member: str
    detail: str = ""


@dataclass
class MappingContext:
    """State threaded through one top-level ``map`` call and its recursion.

    A new context is created for every top-level call, so concurrent calls
    on the same mapper never share a circular reference path.
    """

    mapper: Mapper
    guard: CircularReferenceGuard = field(default_factory=CircularReferenceGuard)
    issues: list[MappingIssue] = field(default_factory=list)

    def record(self, kind: IssueKind, type_pair: TypePair, member: str, detail: str = "") -> None:
        self.issues.append(MappingIssue(kind, type_pair, member, detail))


@dataclass(frozen=True)
class MappingReport(Generic[D]):
    """Result of :meth:`Mapper.map_report`."""

    destination: D | None
    issues: tuple[MappingIssue, ...] = ()

    @property
    def complete(self) -> bool:
        return not self.issues

    def of_kind(self, kind: IssueKind) -> list[MappingIssue]:
        return [issue for issue in self.issues if issue.kind is kind]


def describe_value(value: Any) -> str:
    text = repr(value)
    return text if len(text) <= 80 else text[:77] + "..."

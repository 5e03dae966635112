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
"""TypePair: the (source type, destination type) lookup key."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class TypePair:
    """Immutable, hashable identifier for a source/destination type pair.

    Used as the key of the configuration registry and the compiled-mapping
    cache. Two keys are equal iff both component types are identical.
    """

    source_type: type
    destination_type: type

    def __str__(self) -> str:
        return f"{_type_name(self.source_type)} -> {_type_name(self.destination_type)}"


def _type_name(tp: type) -> str:
    return getattr(tp, "__qualname__", None) or repr(tp)

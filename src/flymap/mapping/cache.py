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
"""Thread-safe get-or-create cache of compiled mappings."""

from __future__ import annotations

import threading
from collections.abc import Callable

import structlog

from flymap.mapping.compiler import CompiledMapping
from flymap.mapping.type_pair import TypePair

logger = structlog.get_logger("flymap.mapping.cache")


class CompiledMappingCache:
    """Memoises one :class:`CompiledMapping` per :class:`TypePair`.

    Reads take no lock. Builds run outside the lock, so threads racing on
    a new pair may each build, but only the first result is published and
    every caller receives that same instance.
    """

    def __init__(self) -> None:
        self._entries: dict[TypePair, CompiledMapping] = {}
        self._lock = threading.Lock()

    def get(self, key: TypePair) -> CompiledMapping | None:
        return self._entries.get(key)

    def get_or_create(self, key: TypePair, factory: Callable[[], CompiledMapping]) -> CompiledMapping:
        compiled = self._entries.get(key)
        if compiled is not None:
            return compiled

        built = factory()
        with self._lock:
            published = self._entries.setdefault(key, built)
        if published is built:
            logger.debug("mapping_published", type_pair=str(key), members=len(built.steps))
        return published

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def type_pairs(self) -> list[TypePair]:
        with self._lock:
            return list(self._entries)

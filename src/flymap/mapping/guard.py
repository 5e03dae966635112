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
"""Circular reference tracking for one top-level mapping call."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager


class CircularReferenceGuard:
    """Identities of the source objects on the active mapping path.

    Objects are tracked by ``id()``; an object on the path is referenced by
    the call stack, so its id cannot be reused while it is tracked.
    """

    def __init__(self) -> None:
        self._path: set[int] = set()

    def is_on_path(self, obj: object) -> bool:
        return obj is not None and id(obj) in self._path

    @contextmanager
    def enter(self, obj: object) -> Iterator[None]:
        """Keep *obj* on the path for the duration of the block."""
        key = id(obj)
        self._path.add(key)
        try:
            yield
        finally:
            self._path.discard(key)

    def __len__(self) -> int:
        return len(self._path)

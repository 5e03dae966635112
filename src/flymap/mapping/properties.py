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
"""Mapper settings bound from ``flymap.mapper``."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from flymap.core.config import config_properties


@config_properties(prefix="flymap.mapper")
class MapperProperties(BaseModel):
    """Behaviour switches for :class:`~flymap.mapping.registry.MapperConfiguration`.

    Attributes:
        strict_member_rules: Reject a ``for_member`` call that sets both a
            source path and a resolver instead of keeping the last one.
        validate_on_create: Compile every registered type pair when a
            mapper is created, so configuration errors surface immediately.
            Disable it to defer each pair's compilation to its first use.
    """

    model_config = ConfigDict(frozen=True)

    strict_member_rules: bool = False
    validate_on_create: bool = True

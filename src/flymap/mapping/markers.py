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
"""Declarative member markers, attached through ``typing.Annotated``.

Example::

    @dataclass
    class Product:
        id: int
        name: Annotated[str, MapTo("product_name")]
        internal_code: Annotated[str, Ignore()] = ""

    @dataclass
    class ProductDTO:
        id: int = 0
        product_name: str = ""
        label: Annotated[str, MapFrom("name")] = ""

Markers are read once, when a type pair is compiled.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Ignore:
    """Never write this member when it is a mapping destination."""


@dataclass(frozen=True, slots=True)
class MapFrom:
    """Destination-side rename: read the value from the named source member."""

    member: str

    def __post_init__(self) -> None:
        if not self.member:
            raise ValueError("MapFrom requires a source member name")


@dataclass(frozen=True, slots=True)
class MapTo:
    """Source-side rename: write this member's value to the named destination member."""

    member: str

    def __post_init__(self) -> None:
        if not self.member:
            raise ValueError("MapTo requires a destination member name")


Marker = Ignore | MapFrom | MapTo

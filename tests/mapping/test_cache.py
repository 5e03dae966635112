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
"""Tests for compiled mapping caching and concurrent use."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from flymap.mapping.cache import CompiledMappingCache
from flymap.mapping.compiler import CompiledMapping, TransformationCompiler
from flymap.mapping.configuration import MappingConfiguration
from flymap.mapping.mapper import Mapper
from flymap.mapping.type_pair import TypePair


@dataclass
class Source:
    id: int
    name: str


@dataclass
class Target:
    id: int = 0
    name: str = ""


class CountingCompiler(TransformationCompiler):
    def __init__(self) -> None:
        super().__init__()
        self.calls = 0
        self._lock = threading.Lock()

    def compile(self, type_pair: TypePair, configuration: MappingConfiguration | None) -> CompiledMapping:
        with self._lock:
            self.calls += 1
        return super().compile(type_pair, configuration)


class TestCompiledMappingCache:
    def test_get_or_create_builds_once(self) -> None:
        cache = CompiledMappingCache()
        key = TypePair(Source, Target)
        built: list[CompiledMapping] = []

        def factory() -> CompiledMapping:
            compiled = CompiledMapping(key, ())
            built.append(compiled)
            return compiled

        first = cache.get_or_create(key, factory)
        second = cache.get_or_create(key, factory)

        assert first is second
        assert len(built) == 1
        assert key in cache
        assert cache.get(key) is first
        assert cache.type_pairs() == [key]

    def test_missing_entry(self) -> None:
        cache = CompiledMappingCache()

        assert cache.get(TypePair(Source, Target)) is None
        assert len(cache) == 0


class TestMapperCaching:
    def test_pair_is_compiled_once(self) -> None:
        compiler = CountingCompiler()
        mapper = Mapper(compiler=compiler)

        for i in range(5):
            mapper.map(Source(id=i, name="n"), Target)

        assert compiler.calls == 1
        assert TypePair(Source, Target) in mapper.cache

    def test_compiled_mapping_describes_steps(self) -> None:
        compiled = Mapper().compile(Source, Target)

        assert compiled.type_pair == TypePair(Source, Target)
        assert compiled.members == ("id", "name")
        assert all(step.origin == "same_name" for step in compiled.steps)

    def test_mappers_do_not_share_caches(self) -> None:
        first, second = Mapper(), Mapper()
        first.compile(Source, Target)

        assert len(first.cache) == 1
        assert len(second.cache) == 0


class TestConcurrency:
    def test_racing_threads_receive_one_published_mapping(self) -> None:
        mapper = Mapper()
        barrier = threading.Barrier(8, timeout=5)

        def compile_after_barrier(_: int) -> CompiledMapping:
            barrier.wait()
            return mapper.compile(Source, Target)

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(compile_after_barrier, range(8)))

        assert len({id(r) for r in results}) == 1
        assert len(mapper.cache) == 1

    def test_concurrent_maps_are_independent(self) -> None:
        mapper = Mapper()
        sources = [Source(id=i, name=f"n{i}") for i in range(200)]

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda s: mapper.map(s, Target), sources))

        assert results == [Target(id=s.id, name=s.name) for s in sources]

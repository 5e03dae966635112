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
"""Tests for the Mapper facade: map, map_into, map_each and map_report."""

from __future__ import annotations

from dataclasses import dataclass

import pytest
from pydantic import BaseModel

from flymap.kernel.exceptions import MappingException
from flymap.mapping.configuration import MappingProfile
from flymap.mapping.mapper import Mapper
from flymap.mapping.registry import MapperConfiguration

# ---------------------------------------------------------------------------
# Test types
# ---------------------------------------------------------------------------


@dataclass
class UserEntity:
    id: int
    username: str
    email: str
    active: bool = True


@dataclass
class AdminEntity(UserEntity):
    permissions: str = "all"


@dataclass
class UserDTO:
    username: str
    email: str


@dataclass
class UserResponse:
    name: str
    email: str
    is_active: bool = True


@dataclass
class ProfileDTO:
    username: str
    email: str
    bio: str = ""


@dataclass
class Person:
    id: int
    first_name: str
    last_name: str


@dataclass
class PersonView:
    id: int = 0
    full_name: str = ""


class UserModel(BaseModel):
    username: str
    email: str


class PlainTarget:
    username: str
    email: str

    def __init__(self) -> None:
        self.username = ""
        self.email = ""


class Customer:
    first: str
    last: str

    def __init__(self, first: str, last: str) -> None:
        self.first = first
        self.last = last

    @property
    def display_name(self) -> str:
        return f"{self.first} {self.last}"


@dataclass
class CustomerDTO:
    first: str = ""
    display_name: str = ""


class UserResponseProfile(MappingProfile):
    def configure(self) -> None:
        (
            self.create_map(UserEntity, UserResponse)
            .for_member("name", map_from="username")
            .for_member("is_active", map_from="active")
        )


class PersonProfile(MappingProfile):
    def configure(self) -> None:
        self.create_map(Person, PersonView).for_member(
            "full_name", map_from=lambda p: f"{p.first_name} {p.last_name}"
        )


def _mapper(*profiles: type[MappingProfile] | MappingProfile) -> Mapper:
    config = MapperConfiguration()
    for profile in profiles:
        config.add_profile(profile)
    return config.create_mapper()


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestBasicAutoMapping:
    """Auto-mapping between types with matching member names."""

    def test_matching_fields_are_mapped(self) -> None:
        entity = UserEntity(id=1, username="alice", email="alice@example.com")
        mapper = Mapper()

        dto = mapper.map(entity, UserDTO)

        assert isinstance(dto, UserDTO)
        assert dto.username == "alice"
        assert dto.email == "alice@example.com"

    def test_same_shape_copy_is_member_wise_equal(self) -> None:
        entity = UserEntity(id=7, username="dora", email="d@x.io", active=False)
        mapper = Mapper()

        copy = mapper.map(entity, UserEntity)

        assert copy == entity
        assert copy is not entity

    def test_extra_source_fields_are_ignored(self) -> None:
        entity = UserEntity(id=42, username="bob", email="bob@test.com", active=False)
        mapper = Mapper()

        dto = mapper.map(entity, UserDTO)

        assert dto == UserDTO(username="bob", email="bob@test.com")

    def test_destination_default_kept_for_unmatched_member(self) -> None:
        source = UserDTO(username="carol", email="carol@test.com")
        mapper = Mapper()

        profile = mapper.map(source, ProfileDTO)

        assert profile.username == "carol"
        assert profile.bio == ""

    def test_required_member_without_source_raises(self) -> None:
        """``UserResponse.name`` has no default and nothing maps to it."""
        entity = UserEntity(id=1, username="alice", email="a@b.com")
        mapper = Mapper()

        with pytest.raises(MappingException) as exc_info:
            mapper.map(entity, UserResponse)

        assert exc_info.value.code == "MAPPING_010"


class TestDestinationKinds:
    def test_pydantic_destination(self) -> None:
        entity = UserEntity(id=1, username="alice", email="a@b.com")

        model = Mapper().map(entity, UserModel)

        assert model == UserModel(username="alice", email="a@b.com")

    def test_pydantic_source(self) -> None:
        model = UserModel(username="eve", email="eve@x.io")

        dto = Mapper().map(model, UserDTO)

        assert dto == UserDTO(username="eve", email="eve@x.io")

    def test_plain_class_destination_is_populated_after_construction(self) -> None:
        entity = UserEntity(id=1, username="alice", email="a@b.com")

        target = Mapper().map(entity, PlainTarget)

        assert isinstance(target, PlainTarget)
        assert target.username == "alice"
        assert target.email == "a@b.com"

    def test_property_is_a_readable_source_member(self) -> None:
        dto = Mapper().map(Customer("Ada", "Lovelace"), CustomerDTO)

        assert dto.first == "Ada"
        assert dto.display_name == "Ada Lovelace"


class TestProfileRules:
    def test_source_path_renames_member(self) -> None:
        entity = UserEntity(id=1, username="alice", email="a@b.com", active=False)
        mapper = _mapper(UserResponseProfile)

        resp = mapper.map(entity, UserResponse)

        assert resp == UserResponse(name="alice", email="a@b.com", is_active=False)

    def test_resolver_computes_member(self) -> None:
        mapper = _mapper(PersonProfile)

        view = mapper.map(Person(id=1, first_name="Jo", last_name="Li"), PersonView)

        assert view == PersonView(id=1, full_name="Jo Li")

    def test_resolver_replaces_same_name_value(self) -> None:
        profile = MappingProfile()
        profile.create_map(UserEntity, UserDTO).for_member("username", map_from=lambda u: u.username.upper())
        mapper = _mapper(profile)

        dto = mapper.map(UserEntity(id=1, username="alice", email="a@b.com"), UserDTO)

        assert dto.username == "ALICE"
        assert dto.email == "a@b.com"

    def test_options_callback_configures_member(self) -> None:
        profile = MappingProfile()
        profile.create_map(UserEntity, UserResponse).for_member(
            "name", lambda opt: opt.resolve_using(lambda u: f"#{u.id}")
        )
        mapper = _mapper(profile)

        resp = mapper.map(UserEntity(id=9, username="x", email="x@y"), UserResponse)

        assert resp.name == "#9"

    def test_source_type_override_selects_base_configuration(self) -> None:
        admin = AdminEntity(id=2, username="root", email="r@x.io")
        mapper = _mapper(UserResponseProfile)

        resp = mapper.map(admin, UserResponse, source_type=UserEntity)

        assert resp.name == "root"


class TestCustomConverter:
    def _converter_mapper(self) -> Mapper:
        profile = MappingProfile()
        profile.create_map(UserEntity, UserDTO).convert_using(
            lambda u: UserDTO(username=u.username.title(), email="hidden")
        )
        return _mapper(profile)

    def test_converter_replaces_member_mapping(self) -> None:
        dto = self._converter_mapper().map(UserEntity(id=1, username="alice", email="a@b.com"), UserDTO)

        assert dto == UserDTO(username="Alice", email="hidden")

    def test_converter_result_is_copied_onto_existing_instance(self) -> None:
        existing = UserDTO(username="", email="")

        result = self._converter_mapper().map_into(UserEntity(id=1, username="bob", email="b@c"), existing)

        assert result is existing
        assert existing == UserDTO(username="Bob", email="hidden")


class TestMapInto:
    def test_updates_existing_instance(self) -> None:
        view = PersonView(id=0, full_name="stale")
        mapper = _mapper(PersonProfile)

        result = mapper.map_into(Person(id=3, first_name="Jo", last_name="Li"), view)

        assert result is view
        assert view == PersonView(id=3, full_name="Jo Li")

    def test_mapping_twice_is_idempotent(self) -> None:
        person = Person(id=3, first_name="Jo", last_name="Li")
        view = PersonView()
        mapper = _mapper(PersonProfile)

        mapper.map_into(person, view)
        first = PersonView(id=view.id, full_name=view.full_name)
        mapper.map_into(person, view)

        assert view == first

    def test_unresolved_member_keeps_existing_value(self) -> None:
        profile = ProfileDTO(username="old", email="old@x", bio="keep me")

        Mapper().map_into(UserEntity(id=1, username="new", email="new@x"), profile)

        assert profile == ProfileDTO(username="new", email="new@x", bio="keep me")

    def test_none_source_returns_destination_unchanged(self) -> None:
        view = PersonView(id=5, full_name="unchanged")

        assert Mapper().map_into(None, view) is view
        assert view == PersonView(id=5, full_name="unchanged")

    def test_none_destination_raises(self) -> None:
        with pytest.raises(MappingException):
            Mapper().map_into(UserDTO(username="a", email="b"), None)


class TestNoneSource:
    def test_map_none_returns_none(self) -> None:
        assert Mapper().map(None, UserDTO) is None

    def test_map_report_of_none(self) -> None:
        report = Mapper().map_report(None, UserDTO)

        assert report.destination is None
        assert report.complete


class TestMapEach:
    def test_maps_every_element_in_order(self) -> None:
        entities = [
            UserEntity(id=1, username="alice", email="a@b.com"),
            UserEntity(id=2, username="bob", email="b@c.com"),
            UserEntity(id=3, username="carol", email="c@d.com"),
        ]
        mapper = Mapper()

        dtos = mapper.map_each(entities, UserDTO)

        assert [d.username for d in dtos] == ["alice", "bob", "carol"]
        assert all(isinstance(d, UserDTO) for d in dtos)

    def test_empty_input(self) -> None:
        assert Mapper().map_each([], UserDTO) == []

    def test_accepts_any_iterable(self) -> None:
        entities = (UserEntity(id=i, username=f"u{i}", email="e") for i in range(3))

        dtos = Mapper().map_each(entities, UserDTO)

        assert len(dtos) == 3

    def test_failure_aborts_batch(self) -> None:
        profile = MappingProfile()
        profile.create_map(UserEntity, UserDTO).for_member("username", map_from=lambda u: 1 / u.id)
        mapper = _mapper(profile)
        entities = [UserEntity(id=1, username="a", email="e"), UserEntity(id=0, username="b", email="e")]

        with pytest.raises(ZeroDivisionError):
            mapper.map_each(entities, UserDTO)

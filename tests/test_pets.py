"""
Tests for pet CRUD, ownership checks and optimistic concurrency.
"""

import re
import uuid

import pytest
from pydantic import ValidationError

from adopt_core.exceptions import (
    AuthorizationException,
    ConflictException,
    NotFoundException,
    ValidationException,
)
from adopt_core.models import PetSize, PetSpecies, generate_reference_number
from adopt_core.schemas.pet import PetCreate, PetResponse, PetStaffResponse, PetUpdate
from adopt_core.services.access import present_pet
from adopt_core.services.pets import PetService


def _pet_data(**overrides) -> PetCreate:
    data = {
        "name": "Cinnamon",
        "species": "rock_cavy",
        "age": 3,
        "size": "small",
        "description": "Independent and <b>active</b>",
        "internal_notes": "Bites when startled",
    }
    data.update(overrides)
    return PetCreate(**data)


class TestPetSchemas:
    """Test pet input validation."""

    def test_description_markup_stripped(self):
        assert _pet_data().description == "Independent and active"

    @pytest.mark.parametrize("age", [-1, 31])
    def test_age_bounds(self, age):
        with pytest.raises(ValidationError):
            _pet_data(age=age)

    def test_gallery_limits(self):
        with pytest.raises(ValidationError):
            _pet_data(gallery=[f"/images/{n}.jpg" for n in range(11)])
        with pytest.raises(ValidationError):
            _pet_data(gallery=["ftp://example.com/a.jpg"])

    def test_update_needs_a_field(self):
        with pytest.raises(ValidationError):
            PetUpdate(version=1)

    def test_reference_number_format(self):
        assert re.fullmatch(r"SPEC-\d{4}-[A-Z0-9]{4}", generate_reference_number())


class TestCreatePet:
    """Test listing new pets."""

    async def test_rescue_user_lists_for_own_rescue(self, session, user_factory):
        owner = await user_factory.create_rescue_user(session)

        pet = await PetService.create_pet(session, owner, _pet_data())

        assert pet.rescue_id == owner.rescue_id
        assert pet.species == PetSpecies.ROCK_CAVY
        assert pet.size == PetSize.SMALL
        assert pet.version == 1
        assert not pet.is_adopted
        assert not pet.is_promoted
        assert pet.reference_number.startswith("SPEC-")

    async def test_rescue_user_cannot_target_other_rescue(self, session, user_factory, rescue_factory):
        owner = await user_factory.create_rescue_user(session)
        other = await rescue_factory.create(session)

        with pytest.raises(AuthorizationException):
            await PetService.create_pet(session, owner, _pet_data(rescue_id=other.id))

    async def test_admin_must_name_rescue(self, session, user_factory, rescue_factory):
        admin = await user_factory.create_admin(session)
        rescue = await rescue_factory.create(session)

        with pytest.raises(ValidationException):
            await PetService.create_pet(session, admin, _pet_data())
        with pytest.raises(NotFoundException):
            await PetService.create_pet(session, admin, _pet_data(rescue_id=uuid.uuid4()))

        pet = await PetService.create_pet(session, admin, _pet_data(rescue_id=rescue.id))
        assert pet.rescue_id == rescue.id

    async def test_regular_user_cannot_list(self, session, user_factory):
        user = await user_factory.create(session)
        with pytest.raises(AuthorizationException):
            await PetService.create_pet(session, user, _pet_data())


class TestUpdatePet:
    """Test pet updates."""

    async def test_update_bumps_version(self, session, user_factory, pet_factory):
        owner = await user_factory.create_rescue_user(session)
        pet = await pet_factory.create(session, owner.rescue_id)

        updated = await PetService.update_pet(
            session, owner, pet.id, PetUpdate(name="Biscuit", version=1)
        )

        assert updated.name == "Biscuit"
        assert updated.version == 2

    async def test_stale_version_conflicts(self, session, user_factory, pet_factory):
        owner = await user_factory.create_rescue_user(session)
        pet = await pet_factory.create(session, owner.rescue_id)
        await PetService.update_pet(session, owner, pet.id, PetUpdate(age=3))

        with pytest.raises(ConflictException):
            await PetService.update_pet(session, owner, pet.id, PetUpdate(age=4, version=1))
        with pytest.raises(ConflictException):
            await PetService.update_pet(
                session, owner, pet.id, PetUpdate(age=4), expected_version=1
            )

    async def test_only_admin_changes_promotion(self, session, user_factory, pet_factory):
        owner = await user_factory.create_rescue_user(session)
        admin = await user_factory.create_admin(session)
        pet = await pet_factory.create(session, owner.rescue_id)

        with pytest.raises(AuthorizationException):
            await PetService.update_pet(session, owner, pet.id, PetUpdate(is_promoted=True))

        updated = await PetService.update_pet(session, admin, pet.id, PetUpdate(is_promoted=True))
        assert updated.is_promoted

    async def test_other_rescue_cannot_update(self, session, user_factory, pet_factory):
        owner = await user_factory.create_rescue_user(session)
        stranger = await user_factory.create_rescue_user(session)
        pet = await pet_factory.create(session, owner.rescue_id)

        with pytest.raises(AuthorizationException):
            await PetService.update_pet(session, stranger, pet.id, PetUpdate(name="Mine"))

    async def test_required_field_cannot_be_nulled(self, session, user_factory, pet_factory):
        owner = await user_factory.create_rescue_user(session)
        pet = await pet_factory.create(session, owner.rescue_id)

        with pytest.raises(ValidationException):
            await PetService.update_pet(session, owner, pet.id, PetUpdate(name=None))


class TestDeletePet:
    """Test pet removal."""

    async def test_delete(self, session, user_factory, pet_factory):
        owner = await user_factory.create_rescue_user(session)
        pet = await pet_factory.create(session, owner.rescue_id)

        await PetService.delete_pet(session, owner, pet.id)

        with pytest.raises(NotFoundException):
            await PetService.get_pet(session, pet.id)

    async def test_missing_pet(self, session, user_factory):
        admin = await user_factory.create_admin(session)
        with pytest.raises(NotFoundException):
            await PetService.delete_pet(session, admin, uuid.uuid4())


class TestPresentPet:
    """Test internal notes visibility."""

    async def test_notes_for_staff_only(self, session, user_factory, pet_factory):
        owner = await user_factory.create_rescue_user(session)
        stranger = await user_factory.create_rescue_user(session)
        admin = await user_factory.create_admin(session)
        regular = await user_factory.create(session)
        pet = await pet_factory.create(session, owner.rescue_id, internal_notes="Shy")
        pet = await PetService.get_pet(session, pet.id)

        assert isinstance(present_pet(pet, owner), PetStaffResponse)
        assert present_pet(pet, admin).internal_notes == "Shy"
        for viewer in (None, regular, stranger):
            shown = present_pet(pet, viewer)
            assert type(shown) is PetResponse
            assert "internal_notes" not in shown.model_dump()

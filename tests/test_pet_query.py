"""
Tests for the pet listing filters, ordering, pagination and visibility.
"""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from adopt_core.models import PetSize, PetSpecies
from adopt_core.schemas.common import PaginationMeta
from adopt_core.schemas.pet import PetQuery, PetSortField
from adopt_core.services.pet_query import escape_like, search_pets

LISTED = datetime(2025, 1, 1, tzinfo=timezone.utc)


class TestPetQuerySchema:
    """Test the listing filter object."""

    def test_defaults(self):
        query = PetQuery()

        assert query.species == []
        assert query.page == 1
        assert query.limit == 10
        assert query.sort == PetSortField.DATE_LISTED
        assert query.promoted_first
        assert not query.applies_min_age
        assert not query.applies_max_age

    def test_comma_separated_and_repeated_values(self):
        query = PetQuery(species=["capybara,guinea_pig", "capybara"], size="small, large")

        assert query.species == [PetSpecies.CAPYBARA, PetSpecies.GUINEA_PIG]
        assert query.size == [PetSize.SMALL, PetSize.LARGE]

    def test_unknown_species_rejected(self):
        with pytest.raises(ValidationError):
            PetQuery(species="hamster")

    def test_limit_is_capped(self):
        assert PetQuery(limit=500).limit == 100

    def test_inverted_age_range_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            PetQuery(min_age=5, max_age=2)
        assert "min_age cannot be greater than max_age" in str(exc_info.value)

    def test_age_sentinels(self):
        assert PetQuery(min_age=1).applies_min_age
        assert PetQuery(max_age=19).applies_max_age
        assert not PetQuery(min_age=0, max_age=20).applies_max_age

    def test_blank_search_is_none(self):
        assert PetQuery(search="   ").search is None

    def test_escape_like(self):
        assert escape_like("50%_off\\") == "50\\%\\_off\\\\"


class TestPaginationMeta:
    """Test pagination metadata."""

    def test_middle_page(self):
        meta = PaginationMeta.build(total=25, page=2, limit=10)

        assert meta.total_pages == 3
        assert meta.has_next_page
        assert meta.has_previous_page

    def test_empty(self):
        meta = PaginationMeta.build(total=0, page=1, limit=10)

        assert meta.total_pages == 0
        assert not meta.has_next_page
        assert not meta.has_previous_page


class TestSearchPets:
    """Test the listing query against the database."""

    @pytest.fixture
    async def rescue(self, session, rescue_factory):
        return await rescue_factory.create(session)

    async def _names(self, session, viewer=None, **filters):
        page = await search_pets(session, PetQuery(**filters), viewer)
        return [pet.name for pet in page.items]

    async def test_filters_by_species_size_and_age(self, session, rescue, pet_factory):
        await pet_factory.create(
            session, rescue.id, name="Cappy", species=PetSpecies.CAPYBARA, size=PetSize.LARGE, age=5
        )
        await pet_factory.create(session, rescue.id, name="Pip", age=1)
        await pet_factory.create(
            session, rescue.id, name="Rocky", species=PetSpecies.ROCK_CAVY, age=3
        )

        assert await self._names(session, species="capybara") == ["Cappy"]
        assert sorted(await self._names(session, size="small")) == ["Pip", "Rocky"]
        assert sorted(await self._names(session, min_age=2, max_age=4)) == ["Rocky"]
        assert sorted(await self._names(session, species="guinea_pig,rock_cavy")) == [
            "Pip",
            "Rocky",
        ]

    async def test_search_is_case_insensitive_and_literal(self, session, rescue, pet_factory):
        await pet_factory.create(session, rescue.id, name="Biscuit", description="Loves hay")
        await pet_factory.create(session, rescue.id, name="Nibbles", description="100% cuddly")
        await pet_factory.create(session, rescue.id, name="Pepper", description="1000 cuddles")

        assert await self._names(session, search="HAY") == ["Biscuit"]
        assert await self._names(session, search="biscuit") == ["Biscuit"]
        assert await self._names(session, search="100%") == ["Nibbles"]

    async def test_sorting_and_promoted_first(self, session, rescue, pet_factory):
        await pet_factory.create(
            session, rescue.id, name="Old", date_listed=LISTED, age=4
        )
        await pet_factory.create(
            session, rescue.id, name="New", date_listed=LISTED + timedelta(days=2), age=1
        )
        await pet_factory.create(
            session,
            rescue.id,
            name="Promoted",
            date_listed=LISTED + timedelta(days=1),
            is_promoted=True,
            age=2,
        )

        assert await self._names(session) == ["Promoted", "New", "Old"]
        assert await self._names(session, promoted_first=False) == ["New", "Promoted", "Old"]
        assert await self._names(session, sort="age", order="asc", promoted_first=False) == [
            "New",
            "Promoted",
            "Old",
        ]
        assert await self._names(session, sort="name", order="asc", promoted_first=False) == [
            "New",
            "Old",
            "Promoted",
        ]

    async def test_pagination(self, session, rescue, pet_factory):
        for index in range(5):
            await pet_factory.create(
                session, rescue.id, name=f"Pet {index}", date_listed=LISTED + timedelta(days=index)
            )

        page = await search_pets(session, PetQuery(page=2, limit=2))
        assert [pet.name for pet in page.items] == ["Pet 2", "Pet 1"]
        assert page.total == 5
        assert page.meta.total_pages == 3

        beyond = await search_pets(session, PetQuery(page=9, limit=2))
        assert beyond.items == []
        assert beyond.total == 5

    async def test_adopted_visibility(self, session, rescue, pet_factory, user_factory, rescue_factory):
        await pet_factory.create(session, rescue.id, name="Home", is_adopted=True)
        await pet_factory.create(session, rescue.id, name="Waiting")
        member = await user_factory.create_rescue_user(session, rescue=rescue)
        outsider = await user_factory.create_rescue_user(session)
        admin = await user_factory.create_admin(session)
        regular = await user_factory.create(session)

        # public and regular users never see adopted pets
        assert await self._names(session, show_adopted=True) == ["Waiting"]
        assert await self._names(session, regular, show_adopted=True) == ["Waiting"]

        # admins see them whenever asked
        assert sorted(await self._names(session, admin, show_adopted=True)) == ["Home", "Waiting"]
        assert await self._names(session, admin) == ["Waiting"]

        # rescue users only within their own rescue
        assert await self._names(session, member, show_adopted=True) == ["Waiting"]
        assert sorted(
            await self._names(session, member, show_adopted=True, rescue_id=rescue.id)
        ) == ["Home", "Waiting"]
        assert await self._names(
            session, outsider, show_adopted=True, rescue_id=rescue.id
        ) == ["Waiting"]

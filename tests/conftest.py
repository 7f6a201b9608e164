"""
Pytest configuration and fixtures for adopt-core tests.

This module provides common fixtures for all tests in the adopt-core
package: an in-memory SQLite database per test, factory classes for the
core entities, and an HTTP client wired to the API application.
"""

import uuid
from decimal import Decimal
from typing import Any, AsyncGenerator, Dict, Optional

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from adopt_core.api import create_app
from adopt_core.database.connection import create_engine
from adopt_core.database.session import SessionManager
from adopt_core.models import (
    BaseModel,
    CouponAppliesTo,
    CouponCode,
    DiscountType,
    Pet,
    PetSize,
    PetSpecies,
    Rescue,
    User,
    UserRole,
)
from adopt_core.services.auth import create_access_token, hash_password
from adopt_core.services.payments import TestPaymentGateway
from adopt_core.utils.config import AppSettings

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_PASSWORD = "password123"
# Minimum cost keeps the suite fast
TEST_BCRYPT_ROUNDS = 4
VALID_CARD = {
    "card_number": "4242 4242 4242 4242",
    "expiry_date": "12/99",
    "cvv": "123",
    "cardholder_name": "Test Holder",
}
DECLINED_CARD = {**VALID_CARD, "card_number": "4000000000000002"}

_PASSWORD_HASH = hash_password(TEST_PASSWORD, rounds=TEST_BCRYPT_ROUNDS)


@pytest.fixture
def settings() -> AppSettings:
    """Settings for tests: fast hashing, reset tokens returned in responses."""
    return AppSettings(
        environment="test",
        jwt_secret="test-secret",
        bcrypt_rounds=TEST_BCRYPT_ROUNDS,
        expose_reset_tokens=True,
        promotion_fee=Decimal("5.00"),
        rescue_fee=Decimal("50.00"),
        upload_public_url="http://uploads.test",
    )


@pytest_asyncio.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """A fresh in-memory database with every table created."""
    engine = create_engine(TEST_DATABASE_URL)
    async with engine.begin() as conn:
        await conn.run_sync(BaseModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_manager(test_engine: AsyncEngine) -> SessionManager:
    return SessionManager(test_engine)


@pytest_asyncio.fixture
async def session(session_manager: SessionManager) -> AsyncGenerator[AsyncSession, None]:
    """
    Provide an async database session for testing.

    API tests commit their setup through this session before sending
    requests, because the in-memory database has a single connection.
    """
    async with session_manager.get_session() as session:
        yield session


@pytest_asyncio.fixture
async def api_client(
    settings: AppSettings, session_manager: SessionManager
) -> AsyncGenerator[httpx.AsyncClient, None]:
    """HTTP client talking to the API app in-process."""
    app = create_app(settings, session_manager, TestPaymentGateway())
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test/api/v1") as client:
        yield client


def auth_headers(user: User, settings: AppSettings) -> Dict[str, str]:
    """Bearer header for a user."""
    return {"Authorization": f"Bearer {create_access_token(user, settings)}"}


def application_form(**overrides: Any) -> Dict[str, Any]:
    """A complete, valid adoption application form."""
    form = {
        "applicant_name": "Jamie Applicant",
        "adoption_address": {"street": "1 High Street", "city": "Bristol", "postcode": "BS1 1AA"},
        "housing_status": "homeowner",
        "has_secure_outdoor_space": True,
        "number_of_adults": 2,
        "number_of_children": 0,
        "has_other_pets": False,
        "work_holiday_plans": "Neighbour looks after pets when we travel",
        "animal_experience": "Kept guinea pigs for ten years",
        "ideal_animal_personality": "Calm and friendly",
        "reference_name": "Sam Reference",
        "reference_phone": "+44 7700 900123",
        "reference_email": "sam@example.com",
        "consent": True,
    }
    form.update(overrides)
    return form


# Factory classes for creating test entities
class RescueFactory:
    """Factory for creating test Rescue instances."""

    @staticmethod
    def build(**kwargs) -> Rescue:
        """Build a Rescue instance without saving to database."""
        suffix = uuid.uuid4().hex[:8]
        defaults = {
            "name": f"Test Rescue {suffix}",
            "location": "Bristol, UK",
            "contact_email": f"rescue_{suffix}@example.com",
            "description": "Small animal rescue",
        }
        defaults.update(kwargs)
        return Rescue(**defaults)

    @staticmethod
    async def create(session: AsyncSession, **kwargs) -> Rescue:
        """Create and save a Rescue instance to the database."""
        rescue = RescueFactory.build(**kwargs)
        session.add(rescue)
        await session.flush()
        return rescue


class UserFactory:
    """Factory for creating test User instances."""

    @staticmethod
    def build(**kwargs) -> User:
        """Build a User instance without saving to database."""
        suffix = uuid.uuid4().hex[:8]
        defaults = {
            "username": f"user_{suffix}",
            "email": f"user_{suffix}@example.com",
            "password_hash": _PASSWORD_HASH,
            "role": UserRole.USER,
        }
        defaults.update(kwargs)
        return User(**defaults)

    @staticmethod
    async def create(session: AsyncSession, **kwargs) -> User:
        """Create and save a User instance to the database."""
        user = UserFactory.build(**kwargs)
        session.add(user)
        await session.flush()
        return user

    @staticmethod
    async def create_admin(session: AsyncSession, **kwargs) -> User:
        return await UserFactory.create(session, role=UserRole.ADMIN, **kwargs)

    @staticmethod
    async def create_rescue_user(
        session: AsyncSession, rescue: Optional[Rescue] = None, **kwargs
    ) -> User:
        """Create a rescue user, creating a rescue for them if none is given."""
        if rescue is None:
            rescue = await RescueFactory.create(session)
        return await UserFactory.create(
            session, role=UserRole.RESCUE, rescue_id=rescue.id, **kwargs
        )


class PetFactory:
    """Factory for creating test Pet instances."""

    @staticmethod
    def build(rescue_id: uuid.UUID, **kwargs) -> Pet:
        """Build a Pet instance without saving to database."""
        defaults = {
            "name": "Pip",
            "species": PetSpecies.GUINEA_PIG,
            "age": 2,
            "size": PetSize.SMALL,
            "description": "Friendly guinea pig",
            "rescue_id": rescue_id,
        }
        defaults.update(kwargs)
        return Pet(**defaults)

    @staticmethod
    async def create(session: AsyncSession, rescue_id: uuid.UUID, **kwargs) -> Pet:
        """Create and save a Pet instance to the database."""
        pet = PetFactory.build(rescue_id, **kwargs)
        session.add(pet)
        await session.flush()
        return pet


class CouponFactory:
    """Factory for creating test CouponCode instances."""

    @staticmethod
    def build(**kwargs) -> CouponCode:
        defaults = {
            "code": f"SAVE{uuid.uuid4().hex[:6].upper()}",
            "discount_type": DiscountType.PERCENTAGE,
            "value": Decimal("50"),
            "applies_to": CouponAppliesTo.PROMOTION,
        }
        defaults.update(kwargs)
        return CouponCode(**defaults)

    @staticmethod
    async def create(session: AsyncSession, **kwargs) -> CouponCode:
        coupon = CouponFactory.build(**kwargs)
        session.add(coupon)
        await session.flush()
        return coupon


@pytest.fixture
def user_factory():
    """Provide UserFactory for tests."""
    return UserFactory


@pytest.fixture
def rescue_factory():
    """Provide RescueFactory for tests."""
    return RescueFactory


@pytest.fixture
def pet_factory():
    """Provide PetFactory for tests."""
    return PetFactory


@pytest.fixture
def coupon_factory():
    """Provide CouponFactory for tests."""
    return CouponFactory

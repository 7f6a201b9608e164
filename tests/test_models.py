"""
Tests for the SQLAlchemy models and their helpers.
"""

import re
import uuid
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError

from adopt_core.models import (
    Application,
    ApplicationStatus,
    AuditLog,
    CouponCode,
    Pet,
    PetSpecies,
    RescueRequest,
    RescueRequestStatus,
    Transaction,
    User,
    UserRole,
)
from adopt_core.models.pet import generate_reference_number
from adopt_core.schemas.pet import PetCreate, PetUpdate
from adopt_core.schemas.user import UserRegister, UserUpdate


class TestApplicationStatus:
    """Test status parsing."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("pending", ApplicationStatus.PENDING),
            ("Accepted", ApplicationStatus.ACCEPTED),
            ("approved", ApplicationStatus.ACCEPTED),
            (" rejected ", ApplicationStatus.UNSUCCESSFUL),
            (ApplicationStatus.UNSUCCESSFUL, ApplicationStatus.UNSUCCESSFUL),
        ],
    )
    def test_parse(self, raw, expected):
        assert ApplicationStatus.parse(raw) is expected

    def test_unknown_status(self):
        with pytest.raises(ValueError):
            ApplicationStatus.parse("maybe")


class TestDefaults:
    """Test constructor defaults."""

    def test_user(self):
        user = User(username="pat", email="pat@example.com", password_hash="x")

        assert user.role == UserRole.USER
        assert user.profile_info == {}

    def test_pet(self):
        pet = Pet(name="Pip", species=PetSpecies.GUINEA_PIG, age=1, rescue_id=uuid.uuid4())

        assert pet.is_adopted is False
        assert pet.is_promoted is False
        assert pet.gallery == []
        assert pet.description == ""
        assert re.fullmatch(r"SPEC-\d{4}-[A-Z0-9]{4}", pet.reference_number)

    def test_reference_number_year(self):
        number = generate_reference_number(datetime(2024, 3, 1, tzinfo=timezone.utc))

        assert number.startswith("SPEC-2024-")

    def test_application(self):
        application = Application(pet_id=uuid.uuid4(), user_id=uuid.uuid4())

        assert application.status == ApplicationStatus.PENDING
        assert application.form_data == {}

    def test_coupon_code_is_normalized(self):
        coupon = CouponCode(code="  spring-25 ", value=Decimal("25"))

        assert coupon.code == "SPRING-25"
        assert coupon.is_active is True
        assert coupon.times_used == 0

    def test_uses_remaining(self):
        assert CouponCode(code="A", value=Decimal("1")).uses_remaining is None
        assert CouponCode(code="B", value=Decimal("1"), max_uses=3, times_used=5).uses_remaining == 0

    def test_transaction(self):
        transaction = Transaction(amount=Decimal("5.00"))

        assert transaction.currency == "USD"
        assert transaction.payment_details == {}

    def test_rescue_request_pending(self):
        request = RescueRequest(status=RescueRequestStatus.PENDING)

        assert request.is_pending
        request.status = RescueRequestStatus.REJECTED
        assert not request.is_pending

    def test_audit_log(self):
        assert AuditLog(action="pet_created").details == {}


class TestUserRoles:
    """Test role helpers."""

    def test_promote_and_demote(self):
        user = User(username="pat", email="pat@example.com", password_hash="x")
        rescue_id = uuid.uuid4()

        user.promote_to_rescue(rescue_id)

        assert user.is_rescue()
        assert user.belongs_to_rescue(rescue_id)
        assert not user.belongs_to_rescue(uuid.uuid4())
        assert not user.belongs_to_rescue(None)

        user.demote_to_user()

        assert user.role == UserRole.USER
        assert user.rescue_id is None
        assert not user.is_rescue()

    def test_rescue_role_without_rescue(self):
        user = User(username="pat", email="pat@example.com", password_hash="x", role=UserRole.RESCUE)

        assert not user.is_rescue()
        assert not user.is_admin()

    def test_clear_reset_token(self):
        user = User(username="pat", email="pat@example.com", password_hash="x")
        user.reset_token_hash = "hash"
        user.reset_token_expires = datetime(2025, 1, 1, tzinfo=timezone.utc)

        user.clear_reset_token()

        assert user.reset_token_hash is None
        assert user.reset_token_expires is None


class TestBaseModel:
    """Test the shared model behaviour against the database."""

    async def test_to_dict(self, session, rescue_factory, pet_factory):
        rescue = await rescue_factory.create(session)
        pet = await pet_factory.create(session, rescue.id, internal_notes="Needs vet check")

        data = pet.to_dict(exclude={"internal_notes"})

        assert data["id"] == str(pet.id)
        assert data["species"] == "guinea_pig"
        assert data["rescue_id"] == str(rescue.id)
        assert "internal_notes" not in data
        assert isinstance(data["created_at"], str)

    async def test_update_fields(self, session, rescue_factory, pet_factory):
        rescue = await rescue_factory.create(session)
        pet = await pet_factory.create(session, rescue.id)

        changed = pet.update_fields(name="Pip", age=3)

        assert changed == {"age": 3}
        with pytest.raises(AttributeError):
            pet.update_fields(wings=2)

    async def test_unique_email(self, session, user_factory):
        await user_factory.create(session, email="same@example.com")

        with pytest.raises(IntegrityError):
            await user_factory.create(session, email="same@example.com")

    def test_table_names(self):
        assert Pet.get_table_name() == "pets"
        assert CouponCode.get_table_name() == "coupon_codes"


class TestSchemas:
    """Test input schemas that guard the models."""

    def test_pet_create_strips_markup(self):
        pet = PetCreate(
            name=" <b>Pip</b> ",
            species="guinea_pig",
            age=2,
            size="small",
            description="<script>x()</script>Loves hay",
        )

        assert pet.name == "Pip"
        assert pet.description == "Loves hay"
        assert pet.species == "guinea_pig"

    def test_pet_create_rejects_bad_gallery(self):
        with pytest.raises(ValidationError):
            PetCreate(name="Pip", species="guinea_pig", age=2, size="small", gallery=["ftp://x/a.png"])

    def test_pet_update_needs_a_field(self):
        with pytest.raises(ValidationError):
            PetUpdate(version=2)

        assert PetUpdate(age=3, version=2).changes() == {"age": 3}

    def test_register_normalizes_email(self):
        user = UserRegister(username="cavy_fan", email="Cavy@Example.COM", password="secret1")

        assert user.email == "cavy@example.com"

    def test_password_change_needs_current_password(self):
        with pytest.raises(ValidationError):
            UserUpdate(password="newsecret")

        assert UserUpdate(password="newsecret", current_password="old").password == "newsecret"

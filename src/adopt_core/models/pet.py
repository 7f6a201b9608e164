"""
Pet model for the adopt-core package.

This module contains the Pet SQLAlchemy model listed by rescues, with
adoption and promotion flags, an image gallery and staff-only notes.
"""

import enum
import random
import string
import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Any, List, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    false,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..database.types import JSONType, enum_type
from ..utils.datetime_utils import get_current_utc
from .base import BaseModel

if TYPE_CHECKING:
    from .rescue import Rescue

REFERENCE_PREFIX = "SPEC"


class PetSpecies(enum.Enum):
    """Enumeration of species listed on the platform."""

    CAPYBARA = "capybara"
    GUINEA_PIG = "guinea_pig"
    ROCK_CAVY = "rock_cavy"
    CHINCHILLA = "chinchilla"


class PetSize(enum.Enum):
    """Enumeration of pet sizes for classification."""

    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    EXTRA_LARGE = "extra_large"


def generate_reference_number(now: Optional[datetime] = None) -> str:
    """
    Generate a human-readable pet reference number.

    Format is ``SPEC-{year}-{4 uppercase alphanumerics}``.
    """
    year = (now or get_current_utc()).year
    suffix = "".join(random.choices(string.ascii_uppercase + string.digits, k=4))
    return f"{REFERENCE_PREFIX}-{year}-{suffix}"


class Pet(BaseModel):
    """
    Pet listed for adoption by a rescue.

    Internal notes are staff-only. Serialization goes through
    ``adopt_core.services.access.present_pet`` which decides whether
    they are included for a given viewer.
    """

    __tablename__ = "pets"

    def __init__(self, **kwargs: Any) -> None:
        """Initialize Pet with default values."""
        if "reference_number" not in kwargs:
            kwargs["reference_number"] = generate_reference_number()
        if "is_adopted" not in kwargs:
            kwargs["is_adopted"] = False
        if "is_promoted" not in kwargs:
            kwargs["is_promoted"] = False
        if "gallery" not in kwargs or kwargs["gallery"] is None:
            kwargs["gallery"] = []
        if "description" not in kwargs or kwargs["description"] is None:
            kwargs["description"] = ""

        super().__init__(**kwargs)

    reference_number: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        unique=True,
        comment="Human-readable reference, SPEC-{year}-{code}",
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False, comment="Pet's name")

    species: Mapped[PetSpecies] = mapped_column(
        enum_type(PetSpecies, "pet_species"),
        nullable=False,
        index=True,
        comment="Pet's species",
    )

    age: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, comment="Age in whole years"
    )

    size: Mapped[PetSize] = mapped_column(
        enum_type(PetSize, "pet_size"),
        nullable=False,
        index=True,
        comment="Pet's size category",
    )

    description: Mapped[str] = mapped_column(
        Text, nullable=False, default="", comment="Public free-text description"
    )

    image_url: Mapped[Optional[str]] = mapped_column(
        String(500), nullable=True, comment="Main photo URL"
    )

    gallery: Mapped[List[str]] = mapped_column(
        JSONType, nullable=False, default=list, comment="Ordered list of photo URLs"
    )

    rescue_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("rescues.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="UUID of the owning rescue",
    )

    is_adopted: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
        comment="Whether the pet has been adopted",
    )

    is_promoted: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
        comment="Whether the pet is featured in listings",
    )

    date_listed: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=get_current_utc,
        comment="When the pet was listed",
    )

    internal_notes: Mapped[Optional[str]] = mapped_column(
        Text, nullable=True, comment="Staff-only notes, never public"
    )

    version: Mapped[int] = mapped_column(
        Integer, nullable=False, comment="Optimistic concurrency counter"
    )

    rescue: Mapped["Rescue"] = relationship("Rescue", back_populates="pets")

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        CheckConstraint("age >= 0 AND age <= 30", name="ck_pets_age_range"),
        Index("idx_pets_rescue_adopted", "rescue_id", "is_adopted"),
        Index("idx_pets_species_size", "species", "size"),
        Index("idx_pets_promoted_listed", "is_promoted", "date_listed"),
    )

    def __repr__(self) -> str:
        return f"<Pet(id={self.id}, name='{self.name}', species={self.species})>"


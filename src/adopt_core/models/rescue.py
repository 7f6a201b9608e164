"""
Rescue model for the adopt-core package.

A rescue is an organization that lists pets for adoption. Rescue-role
users belong to exactly one rescue and manage its pets and applications.
"""

from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import BaseModel

if TYPE_CHECKING:
    from .pet import Pet
    from .user import User


class Rescue(BaseModel):
    """Rescue organization owning users and pets."""

    __tablename__ = "rescues"

    name: Mapped[str] = mapped_column(
        String(150), nullable=False, comment="Rescue display name"
    )

    location: Mapped[str] = mapped_column(
        String(255), nullable=False, comment="City/region of the rescue"
    )

    contact_email: Mapped[str] = mapped_column(
        String(255), nullable=False, comment="Public contact email"
    )

    description: Mapped[str] = mapped_column(
        Text, nullable=False, default="", comment="Public description"
    )

    website_url: Mapped[Optional[str]] = mapped_column(
        String(500), nullable=True, comment="Rescue website"
    )

    logo_url: Mapped[Optional[str]] = mapped_column(
        String(500), nullable=True, comment="URL to rescue logo"
    )

    registration_number: Mapped[Optional[str]] = mapped_column(
        String(100), nullable=True, comment="Charity or business registration"
    )

    users: Mapped[List["User"]] = relationship("User", back_populates="rescue")

    pets: Mapped[List["Pet"]] = relationship(
        "Pet",
        back_populates="rescue",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (Index("idx_rescues_name", "name"),)

    def __repr__(self) -> str:
        return f"<Rescue(id={self.id}, name='{self.name}')>"

"""
Rescue Pydantic schemas for API validation and serialization.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from ..utils.validation import sanitize_text


def _check_url(v: Optional[str]) -> Optional[str]:
    if v and not v.startswith(("http://", "https://")):
        raise ValueError("URL must start with http:// or https://")
    return v or None


class RescueBase(BaseModel):
    """Base Rescue schema with common fields."""

    model_config = ConfigDict(from_attributes=True, str_strip_whitespace=True)

    name: str = Field(..., description="Rescue name", min_length=1, max_length=150)
    location: str = Field(..., description="City/region", min_length=1, max_length=255)
    contact_email: EmailStr = Field(..., description="Public contact email")
    description: str = Field("", description="About the rescue", max_length=5000)
    website_url: Optional[str] = Field(None, description="Website", max_length=500)
    logo_url: Optional[str] = Field(None, description="Logo image URL", max_length=500)
    registration_number: Optional[str] = Field(
        None, description="Charity/registration number", max_length=100
    )

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str) -> str:
        """Strip markup from the description."""
        return sanitize_text(v) or ""

    @field_validator("website_url", "logo_url")
    @classmethod
    def validate_url(cls, v: Optional[str]) -> Optional[str]:
        """Validate URLs."""
        return _check_url(v)


class RescueCreate(RescueBase):
    """Schema for creating a rescue (admin)."""

    user_id: Optional[UUID] = Field(
        None, description="Regular user to link and promote to the rescue role"
    )


class RescueUpdate(BaseModel):
    """Schema for updating a rescue profile."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(None, min_length=1, max_length=150)
    location: Optional[str] = Field(None, min_length=1, max_length=255)
    contact_email: Optional[EmailStr] = None
    description: Optional[str] = Field(None, max_length=5000)
    website_url: Optional[str] = Field(None, max_length=500)
    logo_url: Optional[str] = Field(None, max_length=500)
    registration_number: Optional[str] = Field(None, max_length=100)

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            return sanitize_text(v) or ""
        return v

    @field_validator("website_url", "logo_url")
    @classmethod
    def validate_url(cls, v: Optional[str]) -> Optional[str]:
        return _check_url(v)


class RescueResponse(BaseModel):
    """Schema for rescue response data."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    location: str
    contact_email: str
    description: str
    website_url: Optional[str] = None
    logo_url: Optional[str] = None
    registration_number: Optional[str] = None
    created_at: datetime
    updated_at: datetime

"""
Adoption application Pydantic schemas.

The application form is stored as JSON on the Application row, so the
form schema here is the only place its shape is enforced.
"""

import enum
from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    field_validator,
    model_validator,
)

from ..models.application import ApplicationStatus
from ..utils.validation import digits_only, sanitize_text
from .pet import PetResponse
from .user import UserResponse


class HousingStatus(str, enum.Enum):
    """Applicant housing situation."""

    HOMEOWNER = "homeowner"
    RENTER_WITH_PERMISSION = "renter_with_permission"
    RENTER_WITHOUT_PERMISSION = "renter_without_permission"


class AdoptionAddress(BaseModel):
    """Where the pet would live."""

    model_config = ConfigDict(str_strip_whitespace=True)

    street: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    postcode: str = Field(..., min_length=1, max_length=20)


class ApplicationFormData(BaseModel):
    """The adoption questionnaire."""

    model_config = ConfigDict(use_enum_values=True, str_strip_whitespace=True)

    applicant_name: str = Field(..., min_length=1, max_length=150)
    adoption_address: AdoptionAddress
    housing_status: HousingStatus
    has_secure_outdoor_space: bool
    number_of_adults: int = Field(..., ge=1, le=20)
    number_of_children: int = Field(0, ge=0, le=20)
    children_ages: Optional[str] = Field(None, max_length=255)
    has_other_pets: bool = False
    other_pets_details: Optional[str] = Field(None, max_length=1000)
    work_holiday_plans: str = Field(..., min_length=1, max_length=2000)
    animal_experience: str = Field(..., min_length=1, max_length=2000)
    ideal_animal_personality: str = Field(..., min_length=1, max_length=2000)
    reference_name: str = Field(..., min_length=1, max_length=150)
    reference_phone: str = Field(..., min_length=7, max_length=20)
    reference_email: EmailStr
    consent: bool
    additional_details: Optional[str] = Field(None, max_length=2000)

    @field_validator(
        "work_holiday_plans",
        "animal_experience",
        "ideal_animal_personality",
        "other_pets_details",
        "additional_details",
    )
    @classmethod
    def strip_markup(cls, v: Optional[str]) -> Optional[str]:
        """Free-text answers are stored without markup."""
        return sanitize_text(v)

    @field_validator("reference_phone")
    @classmethod
    def validate_reference_phone(cls, v: str) -> str:
        """Validate the referee's phone number."""
        if not 7 <= len(digits_only(v)) <= 15:
            raise ValueError("Phone number must be between 7 and 15 digits")
        return v

    @field_validator("consent")
    @classmethod
    def require_consent(cls, v: bool) -> bool:
        """The applicant must agree to the terms."""
        if not v:
            raise ValueError("Consent is required to submit an application")
        return v

    @model_validator(mode="after")
    def validate_household(self) -> "ApplicationFormData":
        """Cross-field checks on children and other pets."""
        if self.number_of_children > 0 and not self.children_ages:
            raise ValueError("children_ages is required when there are children")
        if self.has_other_pets and not self.other_pets_details:
            raise ValueError("other_pets_details is required when there are other pets")
        return self


class ApplicationCreate(BaseModel):
    """Schema for submitting an application."""

    pet_id: UUID = Field(..., description="Pet being applied for")
    form_data: ApplicationFormData


class ApplicationStatusUpdate(BaseModel):
    """Schema for a rescue or admin deciding an application."""

    status: ApplicationStatus = Field(..., description="New status")

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v: Any) -> ApplicationStatus:
        """Accept approved/rejected as aliases."""
        return ApplicationStatus.parse(v)


class ApplicationDetailsUpdate(BaseModel):
    """Schema for an applicant adding details after submission."""

    model_config = ConfigDict(str_strip_whitespace=True)

    additional_details: str = Field(..., max_length=2000)

    @field_validator("additional_details")
    @classmethod
    def strip_markup(cls, v: str) -> str:
        return sanitize_text(v) or ""


class ApplicationResponse(BaseModel):
    """Schema for application response data."""

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    id: UUID
    user_id: UUID
    pet_id: UUID
    status: ApplicationStatus
    form_data: Dict[str, Any]
    created_at: datetime
    updated_at: datetime
    pet: Optional[PetResponse] = None
    user: Optional[UserResponse] = None

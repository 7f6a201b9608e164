"""
Pydantic schemas for Pet model validation and serialization.

This module contains the listing filter object, request schemas for
creating and updating pets, and the two response shapes: the public one
and the staff one that adds internal notes.
"""

import enum
from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from ..models.pet import PetSize, PetSpecies
from ..utils.validation import sanitize_text
from .common import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

AGE_FILTER_MIN = 0
AGE_FILTER_MAX = 20
MAX_GALLERY_IMAGES = 10


class PetSortField(str, enum.Enum):
    """Fields the pet listing can be sorted by."""

    DATE_LISTED = "dateListed"
    AGE = "age"
    NAME = "name"


class SortOrder(str, enum.Enum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"


def _split_csv(value: Any) -> Any:
    """Accept ``"a,b"`` as well as ``["a", "b"]`` for list filters."""
    if value is None:
        return []
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    if isinstance(value, (list, tuple)):
        items: List[Any] = []
        for item in value:
            items.extend(_split_csv(item) if isinstance(item, str) else [item])
        return items
    return value


class PetQuery(BaseModel):
    """
    Filter object for the pet listing.

    Empty species/size lists mean "no filter". Ages 0 and 20 are the
    no-filter sentinels for the lower and upper bound respectively.
    Query strings may use the camelCase names (``minAge``, ``rescueId``...).
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    species: List[PetSpecies] = Field(default_factory=list, description="Species filter")
    size: List[PetSize] = Field(default_factory=list, description="Size filter")
    min_age: int = Field(
        AGE_FILTER_MIN,
        description="Minimum age, inclusive",
        ge=0,
        validation_alias=AliasChoices("min_age", "minAge"),
    )
    max_age: int = Field(
        AGE_FILTER_MAX,
        description="Maximum age, inclusive",
        ge=0,
        validation_alias=AliasChoices("max_age", "maxAge"),
    )
    search: Optional[str] = Field(
        None, description="Case-insensitive name/description match", max_length=100
    )
    rescue_id: Optional[UUID] = Field(
        None,
        description="Restrict to one rescue",
        validation_alias=AliasChoices("rescue_id", "rescueId"),
    )
    show_adopted: bool = Field(
        False,
        description="Include adopted pets",
        validation_alias=AliasChoices("show_adopted", "showAdopted"),
    )
    sort: PetSortField = Field(PetSortField.DATE_LISTED, description="Sort field")
    order: SortOrder = Field(SortOrder.DESC, description="Sort direction")
    page: int = Field(1, description="1-based page number", ge=1)
    limit: int = Field(DEFAULT_PAGE_SIZE, description="Page size, capped at 100", ge=1)
    promoted_first: bool = Field(
        True,
        description="List promoted pets first",
        validation_alias=AliasChoices("promoted_first", "promotedFirst"),
    )

    @field_validator("species", "size", mode="before")
    @classmethod
    def split_comma_separated(cls, v: Any) -> Any:
        """Split comma-separated filter values."""
        return _split_csv(v)

    @field_validator("species", "size")
    @classmethod
    def deduplicate(cls, v: List[Any]) -> List[Any]:
        """Drop repeated filter values, keeping order."""
        return list(dict.fromkeys(v))

    @field_validator("limit")
    @classmethod
    def cap_limit(cls, v: int) -> int:
        """Cap oversized pages instead of rejecting them."""
        return min(v, MAX_PAGE_SIZE)

    @field_validator("search")
    @classmethod
    def blank_search_is_none(cls, v: Optional[str]) -> Optional[str]:
        """Treat an empty search term as no search."""
        return v or None

    @model_validator(mode="after")
    def validate_age_range(self) -> "PetQuery":
        """Ensure the age range is not inverted."""
        if self.min_age > self.max_age:
            raise ValueError("min_age cannot be greater than max_age")
        return self

    @property
    def applies_min_age(self) -> bool:
        """Whether the lower age bound is an active filter."""
        return self.min_age > AGE_FILTER_MIN

    @property
    def applies_max_age(self) -> bool:
        """Whether the upper age bound is an active filter."""
        return self.max_age < AGE_FILTER_MAX


class PetBase(BaseModel):
    """Base pet schema with common fields."""

    model_config = ConfigDict(
        from_attributes=True,
        use_enum_values=True,
        str_strip_whitespace=True,
    )

    name: str = Field(..., description="Pet's name", min_length=1, max_length=100)
    species: PetSpecies = Field(..., description="Pet's species")
    age: int = Field(..., description="Age in whole years", ge=0, le=30)
    size: PetSize = Field(..., description="Pet's size category")
    description: str = Field("", description="Public description", max_length=5000)
    image_url: Optional[str] = Field(None, description="Main photo URL", max_length=500)
    gallery: List[str] = Field(default_factory=list, description="Photo URLs in order")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate pet name."""
        cleaned = sanitize_text(v, max_length=100)
        if not cleaned:
            raise ValueError("Pet name cannot be empty")
        return cleaned

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str) -> str:
        """Strip markup from the description."""
        return sanitize_text(v) or ""

    @field_validator("gallery")
    @classmethod
    def validate_gallery(cls, v: List[str]) -> List[str]:
        """Validate gallery URLs."""
        if len(v) > MAX_GALLERY_IMAGES:
            raise ValueError(f"Maximum {MAX_GALLERY_IMAGES} gallery images allowed")
        for url in v:
            if not url.startswith(("http://", "https://", "/")):
                raise ValueError(f"Invalid image URL: {url}")
        return v


class PetCreate(PetBase):
    """Schema for listing a new pet."""

    rescue_id: Optional[UUID] = Field(
        None, description="Owning rescue; defaults to the caller's rescue"
    )
    internal_notes: Optional[str] = Field(
        None, description="Staff-only notes", max_length=5000
    )


class PetUpdate(BaseModel):
    """Schema for updating an existing pet."""

    model_config = ConfigDict(
        use_enum_values=True,
        str_strip_whitespace=True,
    )

    name: Optional[str] = Field(None, description="Pet's name", min_length=1, max_length=100)
    species: Optional[PetSpecies] = Field(None, description="Pet's species")
    age: Optional[int] = Field(None, description="Age in whole years", ge=0, le=30)
    size: Optional[PetSize] = Field(None, description="Pet's size category")
    description: Optional[str] = Field(None, description="Public description", max_length=5000)
    image_url: Optional[str] = Field(None, description="Main photo URL", max_length=500)
    gallery: Optional[List[str]] = Field(None, description="Photo URLs in order")
    is_adopted: Optional[bool] = Field(None, description="Adoption flag")
    is_promoted: Optional[bool] = Field(None, description="Promotion flag (admin only)")
    internal_notes: Optional[str] = Field(None, description="Staff-only notes", max_length=5000)
    version: Optional[int] = Field(
        None, description="Version the client last read; mismatches are rejected", ge=1
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        """Validate pet name."""
        if v is not None:
            return PetBase.validate_name(v)
        return v

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: Optional[str]) -> Optional[str]:
        """Strip markup from the description."""
        if v is not None:
            return PetBase.validate_description(v)
        return v

    @field_validator("gallery")
    @classmethod
    def validate_gallery(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        """Validate gallery URLs."""
        if v is not None:
            return PetBase.validate_gallery(v)
        return v

    @model_validator(mode="after")
    def validate_at_least_one_field(self) -> "PetUpdate":
        """Ensure at least one field besides the version is provided."""
        changes = self.model_dump(exclude_unset=True, exclude={"version"})
        if not changes:
            raise ValueError("At least one field must be provided for update")
        return self

    def changes(self) -> dict:
        """Fields explicitly sent by the client, minus the version token."""
        return self.model_dump(exclude_unset=True, exclude={"version"})


class RescueSummary(BaseModel):
    """Minimal rescue data embedded in pet responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    location: str


class PetResponse(BaseModel):
    """Schema for public pet response data."""

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    id: UUID = Field(..., description="Pet's unique identifier")
    reference_number: str = Field(..., description="Human-readable reference")
    name: str = Field(..., description="Pet's name")
    species: PetSpecies = Field(..., description="Pet's species")
    age: int = Field(..., description="Age in whole years")
    size: PetSize = Field(..., description="Pet's size category")
    description: str = Field(..., description="Public description")
    image_url: Optional[str] = Field(None, description="Main photo URL")
    gallery: List[str] = Field(default_factory=list, description="Photo URLs")
    rescue_id: UUID = Field(..., description="Owning rescue")
    rescue: Optional[RescueSummary] = Field(None, description="Owning rescue summary")
    is_adopted: bool = Field(..., description="Adoption flag")
    is_promoted: bool = Field(..., description="Promotion flag")
    date_listed: datetime = Field(..., description="When the pet was listed")
    version: int = Field(..., description="Concurrency token for updates")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")


class PetStaffResponse(PetResponse):
    """Pet response for admins and the owning rescue, with internal notes."""

    internal_notes: Optional[str] = Field(None, description="Staff-only notes")

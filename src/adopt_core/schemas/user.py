"""
User Pydantic schemas for API validation and serialization.

This module contains schemas for registration, login, profile updates,
password resets, admin-side user management and the token response.
"""

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

from ..models.user import UserRole
from ..utils.validation import is_valid_username

MIN_PASSWORD_LENGTH = 6


def _check_username(v: str) -> str:
    if not is_valid_username(v):
        raise ValueError(
            "Username must be 3-50 characters of letters, digits, dots, "
            "hyphens or underscores"
        )
    return v


def _check_email(v: str) -> str:
    # EmailStr accepts some shapes the database should not store
    if ".." in v:
        raise ValueError("Email cannot contain consecutive dots")
    return v.lower()


class UserBase(BaseModel):
    """Base User schema with common fields."""

    model_config = ConfigDict(
        from_attributes=True,  # Can create from SQLAlchemy models
        use_enum_values=True,  # Serialize enums as values
        str_strip_whitespace=True,
    )

    username: str = Field(..., description="Unique username", min_length=3, max_length=50)
    email: EmailStr = Field(..., description="User's email address", max_length=255)

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        """Validate username characters."""
        return _check_username(v)

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, v: str) -> str:
        """Normalize the email address."""
        return _check_email(v)


class UserRegister(UserBase):
    """Schema for public registration. Always creates a regular user."""

    password: str = Field(
        ..., description="Plain text password", min_length=MIN_PASSWORD_LENGTH, max_length=128
    )
    profile_info: Dict[str, Any] = Field(
        default_factory=dict, description="Free-form profile data"
    )


class UserLogin(BaseModel):
    """Schema for logging in with email and password."""

    model_config = ConfigDict(str_strip_whitespace=True)

    email: EmailStr = Field(..., description="Account email")
    password: str = Field(..., description="Account password", min_length=1)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        """Emails are stored lower-cased."""
        return v.lower()


class UserUpdate(BaseModel):
    """Schema for a user updating their own profile."""

    model_config = ConfigDict(str_strip_whitespace=True)

    username: Optional[str] = Field(None, description="New username", min_length=3, max_length=50)
    email: Optional[EmailStr] = Field(None, description="New email", max_length=255)
    profile_info: Optional[Dict[str, Any]] = Field(None, description="Profile data")
    password: Optional[str] = Field(
        None, description="New password", min_length=MIN_PASSWORD_LENGTH, max_length=128
    )
    current_password: Optional[str] = Field(
        None, description="Required when changing the password"
    )

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: Optional[str]) -> Optional[str]:
        """Validate username characters."""
        if v is not None:
            return _check_username(v)
        return v

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, v: Optional[str]) -> Optional[str]:
        """Normalize the email address."""
        if v is not None:
            return _check_email(v)
        return v

    @model_validator(mode="after")
    def validate_password_change(self) -> "UserUpdate":
        """A password change must be confirmed with the current password."""
        if self.password is not None and not self.current_password:
            raise ValueError("current_password is required to change the password")
        return self


class AdminUserUpdate(BaseModel):
    """Schema for admin-side user updates."""

    model_config = ConfigDict(use_enum_values=True, str_strip_whitespace=True)

    username: Optional[str] = Field(None, description="New username", min_length=3, max_length=50)
    email: Optional[EmailStr] = Field(None, description="New email", max_length=255)
    role: Optional[UserRole] = Field(None, description="New role")
    rescue_id: Optional[UUID] = Field(None, description="Rescue to link")

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: Optional[str]) -> Optional[str]:
        """Validate username characters."""
        if v is not None:
            return _check_username(v)
        return v

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, v: Optional[str]) -> Optional[str]:
        """Normalize the email address."""
        if v is not None:
            return _check_email(v)
        return v


class PasswordResetRequest(BaseModel):
    """Schema for requesting a password reset token."""

    email: EmailStr = Field(..., description="Account email")


class PasswordResetConfirm(BaseModel):
    """Schema for completing a password reset."""

    email: EmailStr = Field(..., description="Account email")
    token: str = Field(..., description="Reset token", min_length=1)
    new_password: str = Field(
        ..., description="New password", min_length=MIN_PASSWORD_LENGTH, max_length=128
    )


class UserResponse(BaseModel):
    """Schema for user response data. Never carries secrets."""

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    id: UUID = Field(..., description="User's unique identifier")
    username: str = Field(..., description="Username")
    email: str = Field(..., description="Email address")
    role: UserRole = Field(..., description="Role")
    rescue_id: Optional[UUID] = Field(None, description="Linked rescue")
    profile_info: Dict[str, Any] = Field(default_factory=dict, description="Profile data")
    last_login: Optional[datetime] = Field(None, description="Last successful login")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")


class AuthResponse(BaseModel):
    """Schema returned by login and registration."""

    token: str = Field(..., description="Bearer token")
    token_type: str = Field("bearer", description="Token scheme")
    user: UserResponse


class PasswordResetResponse(BaseModel):
    """Acknowledgement for a reset request."""

    success: bool = True
    message: str
    reset_token: Optional[str] = Field(
        None, description="Only present when reset tokens are exposed"
    )

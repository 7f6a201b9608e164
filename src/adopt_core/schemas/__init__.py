"""
Pydantic schemas for API validation and serialization.

This module contains Pydantic schemas for all adoption models,
providing validation, serialization, and API contract definitions.
"""

from .application import (
    AdoptionAddress,
    ApplicationCreate,
    ApplicationDetailsUpdate,
    ApplicationFormData,
    ApplicationResponse,
    ApplicationStatusUpdate,
    HousingStatus,
)
from .audit_log import AuditLogResponse
from .common import (
    ADMIN_PAGE_SIZE,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    MessageResponse,
    PaginatedResponse,
    PaginationMeta,
)
from .coupon import (
    CouponCreate,
    CouponResponse,
    CouponUpdate,
    CouponValidationResponse,
    DiscountBreakdown,
)
from .pet import (
    PetCreate,
    PetQuery,
    PetResponse,
    PetSortField,
    PetStaffResponse,
    PetUpdate,
    RescueSummary,
    SortOrder,
)
from .promotion import CardDetails, PromotionRequest, PromotionResponse, TransactionResponse
from .rescue import RescueCreate, RescueResponse, RescueUpdate
from .rescue_request import RescueRequestCreate, RescueRequestResponse, RescueRequestReview
from .user import (
    AdminUserUpdate,
    AuthResponse,
    PasswordResetConfirm,
    PasswordResetRequest,
    PasswordResetResponse,
    UserLogin,
    UserRegister,
    UserResponse,
    UserUpdate,
)

__all__ = [
    # Common
    "PaginationMeta",
    "PaginatedResponse",
    "MessageResponse",
    "DEFAULT_PAGE_SIZE",
    "ADMIN_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    # Pet
    "PetQuery",
    "PetSortField",
    "SortOrder",
    "PetCreate",
    "PetUpdate",
    "PetResponse",
    "PetStaffResponse",
    "RescueSummary",
    # User
    "UserRegister",
    "UserLogin",
    "UserUpdate",
    "AdminUserUpdate",
    "UserResponse",
    "AuthResponse",
    "PasswordResetRequest",
    "PasswordResetConfirm",
    "PasswordResetResponse",
    # Rescue
    "RescueCreate",
    "RescueUpdate",
    "RescueResponse",
    # Application
    "HousingStatus",
    "AdoptionAddress",
    "ApplicationFormData",
    "ApplicationCreate",
    "ApplicationStatusUpdate",
    "ApplicationDetailsUpdate",
    "ApplicationResponse",
    # Coupon
    "CouponCreate",
    "CouponUpdate",
    "CouponResponse",
    "CouponValidationResponse",
    "DiscountBreakdown",
    # Promotion
    "CardDetails",
    "PromotionRequest",
    "PromotionResponse",
    "TransactionResponse",
    # Rescue request
    "RescueRequestCreate",
    "RescueRequestReview",
    "RescueRequestResponse",
    # Audit
    "AuditLogResponse",
]

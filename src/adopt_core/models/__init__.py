"""
Database models for the adopt-core package.

This module contains SQLAlchemy models for all core entities in the
adoption platform.
"""

from .application import Application, ApplicationStatus
from .audit_log import AuditLog

# Base model will be imported by all other models
from .base import Base, BaseModel
from .coupon import CouponAppliesTo, CouponCode, DiscountType
from .pet import Pet, PetSize, PetSpecies, generate_reference_number
from .rescue import Rescue
from .rescue_request import RescueRequest, RescueRequestStatus
from .transaction import Transaction, TransactionKind, TransactionStatus
from .user import User, UserRole

__all__ = [
    "Base",
    "BaseModel",
    "User",
    "UserRole",
    "Rescue",
    "Pet",
    "PetSpecies",
    "PetSize",
    "generate_reference_number",
    "Application",
    "ApplicationStatus",
    "CouponCode",
    "DiscountType",
    "CouponAppliesTo",
    "Transaction",
    "TransactionStatus",
    "TransactionKind",
    "RescueRequest",
    "RescueRequestStatus",
    "AuditLog",
]

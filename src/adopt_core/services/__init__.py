"""
Service layer for the adopt-core package.

Services take an ``AsyncSession`` and flush their work; committing is
left to the caller.
"""

from .applications import ApplicationService
from .audit import AuditAction, AuditService, RequestContext
from .coupons import CouponEvaluation, CouponService, evaluate_coupon
from .pagination import Page, paginate
from .payments import ChargeResult, PaymentGateway, TestPaymentGateway
from .pet_query import build_pet_query, search_pets
from .pets import PetService
from .promotions import PromotionOutcome, PromotionService
from .rescue_requests import RescueRequestService
from .rescues import RescueService
from .transactions import TransactionService
from .users import UserService

__all__ = [
    "ApplicationService",
    "AuditAction",
    "AuditService",
    "ChargeResult",
    "CouponEvaluation",
    "CouponService",
    "Page",
    "PaymentGateway",
    "PetService",
    "PromotionOutcome",
    "PromotionService",
    "RequestContext",
    "RescueRequestService",
    "RescueService",
    "TestPaymentGateway",
    "TransactionService",
    "UserService",
    "build_pet_query",
    "evaluate_coupon",
    "paginate",
    "search_pets",
]

"""
Promotion purchase and transaction Pydantic schemas.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.transaction import TransactionKind, TransactionStatus
from ..utils.validation import card_expiry_valid, cvv_valid, digits_only, luhn_checksum_valid
from .pet import PetResponse


class CardDetails(BaseModel):
    """Card details for a paid promotion. Never persisted as-is."""

    model_config = ConfigDict(str_strip_whitespace=True)

    card_number: str = Field(..., description="Card number, spaces allowed")
    expiry_date: str = Field(..., description="MM/YY")
    cvv: str = Field(..., description="3-4 digit security code")
    cardholder_name: str = Field(..., min_length=1, max_length=150)

    @field_validator("card_number")
    @classmethod
    def validate_card_number(cls, v: str) -> str:
        """Validate the card number with the Luhn checksum."""
        number = digits_only(v)
        if not luhn_checksum_valid(number):
            raise ValueError("Invalid card number")
        return number

    @field_validator("expiry_date")
    @classmethod
    def validate_expiry(cls, v: str) -> str:
        """Reject malformed or expired cards."""
        if not card_expiry_valid(v, today=date.today()):
            raise ValueError("Card is expired or expiry date is invalid")
        return v

    @field_validator("cvv")
    @classmethod
    def validate_cvv(cls, v: str) -> str:
        if not cvv_valid(v):
            raise ValueError("Invalid CVV")
        return v

    @property
    def last4(self) -> str:
        return self.card_number[-4:]


class PromotionRequest(BaseModel):
    """Schema for purchasing a pet promotion."""

    model_config = ConfigDict(str_strip_whitespace=True)

    coupon_code: Optional[str] = Field(None, description="Optional promotion coupon", max_length=50)
    card_number: Optional[str] = None
    expiry_date: Optional[str] = None
    cvv: Optional[str] = None
    cardholder_name: Optional[str] = None

    @field_validator("coupon_code")
    @classmethod
    def blank_coupon_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v.upper() if v else None

    def has_card_details(self) -> bool:
        """Whether every card field was supplied."""
        return all([self.card_number, self.expiry_date, self.cvv, self.cardholder_name])

    def card_details(self) -> CardDetails:
        """
        Validate the supplied card fields.

        Raises:
            pydantic.ValidationError: If any card field is invalid
        """
        return CardDetails(
            card_number=self.card_number,
            expiry_date=self.expiry_date,
            cvv=self.cvv,
            cardholder_name=self.cardholder_name,
        )


class TransactionResponse(BaseModel):
    """Schema for transaction response data."""

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    id: UUID
    amount: Decimal
    currency: str
    status: TransactionStatus
    kind: TransactionKind
    gateway: str
    gateway_transaction_id: str
    payment_details: Dict[str, Any] = Field(default_factory=dict)
    user_id: Optional[UUID] = None
    rescue_id: Optional[UUID] = None
    created_at: datetime


class PromotionResponse(BaseModel):
    """Result of a successful promotion purchase."""

    success: bool = True
    message: str
    pet: PetResponse
    transaction: TransactionResponse
    is_free: bool

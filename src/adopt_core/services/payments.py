"""
Payment gateway abstraction.

Only a test gateway ships; it approves any card that passed validation
unless the card number is on its decline list.
"""

import abc
import logging
import secrets
import time
from dataclasses import dataclass
from decimal import Decimal
from typing import FrozenSet, Optional

from ..exceptions import PaymentException
from ..models.transaction import TransactionStatus
from ..schemas.promotion import CardDetails

logger = logging.getLogger(__name__)

FREE_PROMOTION_GATEWAY = "free_promotion"


def new_gateway_reference(prefix: str) -> str:
    """Unique gateway transaction id such as ``promo_1700000000000_k3j9x2abq``."""
    return f"{prefix}_{int(time.time() * 1000)}_{secrets.token_hex(5)[:9]}"


@dataclass(frozen=True)
class ChargeResult:
    """Outcome of a gateway charge."""

    gateway: str
    gateway_transaction_id: str
    status: TransactionStatus
    message: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == TransactionStatus.SUCCESS


class PaymentGateway(abc.ABC):
    """Interface every gateway implements."""

    name: str = "gateway"

    @abc.abstractmethod
    async def charge(
        self, amount: Decimal, currency: str, card: CardDetails, description: str
    ) -> ChargeResult:
        """
        Charge a card.

        Raises:
            PaymentException: If the gateway cannot be reached
        """


class TestPaymentGateway(PaymentGateway):
    """Gateway for development and tests."""

    # pytest would otherwise try to collect this class
    __test__ = False

    name = "test_gateway"

    def __init__(self, declined_cards: FrozenSet[str] = frozenset({"4000000000000002"})):
        self.declined_cards = declined_cards

    async def charge(
        self, amount: Decimal, currency: str, card: CardDetails, description: str
    ) -> ChargeResult:
        if amount <= 0:
            raise PaymentException("Charge amount must be positive", gateway=self.name)

        reference = new_gateway_reference("promo")
        if card.card_number in self.declined_cards:
            logger.info(f"Test gateway declined charge {reference} for card ending {card.last4}")
            return ChargeResult(
                gateway=self.name,
                gateway_transaction_id=reference,
                status=TransactionStatus.FAILURE,
                message="Card was declined",
            )

        logger.info(f"Test gateway charged {amount} {currency} ({description})")
        return ChargeResult(
            gateway=self.name,
            gateway_transaction_id=reference,
            status=TransactionStatus.SUCCESS,
        )

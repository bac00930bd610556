"""
Payment Provider Interface
==========================

Abstract base class defining the contract for charging buyers and paying
sellers out. The marketplace charges at checkout through ``authorize_payment``
and settles with sellers through ``create_transfer`` once an order has been
delivered.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional


class PaymentStatus(str, Enum):
    """Payment status enumeration."""

    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class PaymentIntent:
    """
    Represents a payment authorization.

    Attributes:
        intent_id: Unique payment identifier issued by the provider
        amount: Amount in major currency units
        currency: ISO currency code
        status: Outcome of the authorization
        failure_reason: Provider message when status is FAILED
        metadata: Additional custom data
    """

    intent_id: str
    amount: Decimal
    currency: str
    status: PaymentStatus
    failure_reason: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.status == PaymentStatus.SUCCEEDED


class PaymentProviderInterface(ABC):
    """
    Abstract interface for payment provider operations.

    Concrete implementations:
        - SimulatedPaymentProvider: randomized gateway for the marketplace
    """

    @abstractmethod
    def authorize_payment(
        self,
        amount: Decimal,
        currency: str,
        payment_method: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> PaymentIntent:
        """
        Charge (or reserve) ``amount`` from the buyer.

        A declined payment is reported through ``PaymentIntent.status``;
        exceptions are reserved for the provider being unreachable.

        Raises:
            PaymentException: If the provider cannot be reached
        """
        pass

    @abstractmethod
    def create_transfer(
        self,
        amount: Decimal,
        currency: str,
        destination_account: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Create a transfer to a seller (payout).

        Args:
            amount: Amount to transfer
            currency: Currency code
            destination_account: Seller account reference
            metadata: Optional metadata

        Returns:
            Dictionary with transfer details (at least 'id' and 'status')

        Raises:
            PaymentException: If transfer fails
        """
        pass


class PaymentException(Exception):
    """Base exception for payment operations."""

    pass

"""
Payment Provider - Abstract base for the processor behind the gateway.

Implementations: Mpay24Provider.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass
class ClientToken:
    """Tokenizer handed to the client-side card form."""
    location: str
    token: str


@dataclass
class PaymentStatus:
    """Processor-side status of a merchant transaction."""
    external_id: str
    status: str  # pending, confirmed, failed
    raw_status: Optional[str] = None


class PaymentProvider(ABC):
    """Abstract payment provider."""

    @abstractmethod
    def get_name(self) -> str:
        """Provider name."""
        pass

    @abstractmethod
    def create_client_token(self, payment_type: str = "CC") -> ClientToken:
        """Obtain a one-time tokenizer for the client."""
        pass

    @abstractmethod
    def verify_payment(self, external_id: str) -> PaymentStatus:
        """Verify payment status by merchant transaction id."""
        pass

"""
Payment providers - abstraction over the processor behind the gateway.

Usage:
    from mpay24_gateway.payments import get_payment_provider

    provider = get_payment_provider(client_id="93975", secret="...", environment="sandbox")
    token = provider.create_client_token("CC")
"""

from typing import Optional

from mpay24_gateway.payments.base import (
    ClientToken,
    PaymentProvider,
    PaymentStatus,
)
from mpay24_gateway.payments.mpay24_provider import Mpay24Provider, is_test_mode


def get_payment_provider(client_id: str, secret: str, environment: Optional[str]) -> PaymentProvider:
    """Return a provider bound to one gateway account's credentials."""
    return Mpay24Provider.from_credentials(client_id, secret, environment)


__all__ = [
    "get_payment_provider",
    "is_test_mode",
    "PaymentProvider",
    "Mpay24Provider",
    "ClientToken",
    "PaymentStatus",
]

"""
mpay24 Payment Provider - credit-card tokenizer and transaction status.
"""

import logging
from typing import Optional
from urllib.parse import quote_plus

from mpay24_gateway.payments.base import ClientToken, PaymentProvider, PaymentStatus
from mpay24_gateway.payments.mpay24_client import Mpay24Client
from mpay24_gateway.utils.enums import Environment, Mpay24TransactionStatus

logger = logging.getLogger(__name__)

CONFIRMED_STATUSES = {Mpay24TransactionStatus.BILLED, Mpay24TransactionStatus.RESERVED}
FAILED_STATUSES = {
    Mpay24TransactionStatus.ERROR,
    Mpay24TransactionStatus.REVERSED,
    Mpay24TransactionStatus.CREDITED,
}


def is_test_mode(environment: Optional[str]) -> bool:
    """Only the ``sandbox`` environment talks to the mpay24 test system."""
    return environment == Environment.SANDBOX


class Mpay24Provider(PaymentProvider):
    """Provider backed by the mpay24 SOAP API."""

    def __init__(self, client: Mpay24Client):
        self.client = client

    @classmethod
    def from_credentials(cls, client_id: str, secret: str, environment: Optional[str]) -> "Mpay24Provider":
        return cls(Mpay24Client(client_id, secret, test=is_test_mode(environment)))

    def get_name(self) -> str:
        return "mpay24"

    def create_client_token(self, payment_type: str = "CC") -> ClientToken:
        tokenizer = self.client.token(payment_type)
        return ClientToken(
            location=tokenizer.get_location(),
            token=quote_plus(tokenizer.get_token()),
        )

    def verify_payment(self, external_id: str) -> PaymentStatus:
        response = self.client.transaction_status(external_id)
        raw = response.transaction_status
        if raw in CONFIRMED_STATUSES:
            status = "confirmed"
        elif raw in FAILED_STATUSES:
            status = "failed"
        else:
            status = "pending"
        logger.info(f"mpay24 transaction {external_id}: {raw} -> {status}")
        return PaymentStatus(external_id=external_id, status=status, raw_status=raw)

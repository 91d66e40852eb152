"""
Gateway Service - configuration form for the mpay24 gateway.

Describes the fields an administrator fills in per payment account, validates
them and stores them with the secret encrypted.
"""
import logging
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from mpay24_gateway.core.services.config_service import save_account_gateway_config
from mpay24_gateway.utils.encryption import encrypt_value
from mpay24_gateway.utils.enums import Environment

logger = logging.getLogger(__name__)

SUPPORTED_CURRENCIES = [
    "AUD", "BRL", "CAD", "CHF", "CZK", "DKK", "EUR", "GBP", "HKD", "HUF", "ILS", "INR", "JPY",
    "MXN", "MYR", "NOK", "NZD", "PHP", "PLN", "RUB", "SEK", "SGD", "THB", "TRY", "TWD", "USD",
]

REQUIRED_WHEN_ENABLED = ("brandname", "clientid", "secret")

GATEWAY_CANNOT_BE_ENABLED = "gatewaycannotbeenabled"


def get_supported_currencies() -> List[str]:
    return list(SUPPORTED_CURRENCIES)


def get_configuration_fields() -> List[Dict[str, Any]]:
    """Fields of the gateway configuration form, in display order."""
    return [
        {
            "name": "brandname",
            "type": "text",
            "label": "Brand name",
            "help": "Name shown to the customer on the payment form.",
        },
        {
            "name": "clientid",
            "type": "text",
            "label": "Merchant ID",
            "help": "mpay24 merchant ID of the account.",
        },
        {
            "name": "secret",
            "type": "text",
            "label": "SOAP password",
            "help": "Password of the mpay24 SOAP interface.",
        },
        {
            "name": "environment",
            "type": "select",
            "label": "Environment",
            "help": "Use sandbox with an mpay24 test account.",
            "options": {
                Environment.LIVE: "Live",
                Environment.SANDBOX: "Sandbox",
            },
        },
    ]


def validate_gateway_form(data: Dict[str, Any]) -> Dict[str, str]:
    """An enabled gateway needs a brand name, a client id and a secret."""
    errors: Dict[str, str] = {}
    if data.get("enabled") and any(not data.get(name) for name in REQUIRED_WHEN_ENABLED):
        errors["enabled"] = GATEWAY_CANNOT_BE_ENABLED
    return errors


def save_gateway_configuration(
    db: Session,
    account_id: int,
    data: Dict[str, Any],
    updated_by: str = "system",
) -> Dict[str, str]:
    """
    Validate and store an account's configuration.

    Returns:
        Validation errors; nothing is stored when not empty
    """
    errors = validate_gateway_form(data)
    if errors:
        return errors

    save_account_gateway_config(
        db,
        account_id,
        {
            "brandname": data.get("brandname", ""),
            "clientid": data.get("clientid", ""),
            "secret": encrypt_value(data.get("secret", "")),
            "environment": data.get("environment", Environment.LIVE),
            "enabled": bool(data.get("enabled")),
        },
        updated_by=updated_by,
    )
    logger.info(f"Gateway configuration saved for account {account_id} by {updated_by}")
    return errors

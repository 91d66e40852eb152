"""
Payment Helper - what the gateway needs to know about the thing being paid.

Components that sell something (courses, shopping cart, ...) register a
``ServiceProvider`` that resolves a (payment area, item id) pair to a
``Payable``. The helper combines that with the stored gateway configuration of
the payable's account and the gateway surcharge.

Usage:
    from mpay24_gateway.payments.helper import PaymentHelper, get_service_provider_registry

    get_service_provider_registry().register("local_shopping_cart", CartServiceProvider())
    helper = PaymentHelper(db)
    payable = helper.get_payable("local_shopping_cart", "main", 42)
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from mpay24_gateway.core.exceptions import GatewayConfigurationError, PayableNotFoundError
from mpay24_gateway.core.services.config_service import get_account_gateway_config, get_config
from mpay24_gateway.utils.encryption import decrypt_value

logger = logging.getLogger(__name__)

GATEWAY_NAME = "mpay24"

# ISO 4217 minor units that differ from 2
ZERO_DECIMAL_CURRENCIES = {"JPY"}


@dataclass
class Payable:
    """Amount owed for one item, and the payment account that receives it."""
    amount: Decimal
    currency: str
    account_id: int

    def get_amount(self) -> Decimal:
        return self.amount

    def get_currency(self) -> str:
        return self.currency

    def get_account_id(self) -> int:
        return self.account_id


class ServiceProvider(ABC):
    """Callback interface implemented by each selling component."""

    @abstractmethod
    def get_payable(self, payment_area: str, item_id: int) -> Optional[Payable]:
        """Payable for an item, or None when the item does not exist."""
        pass


class ServiceProviderRegistry:
    """Component name -> ServiceProvider."""

    def __init__(self):
        self._registry: Dict[str, ServiceProvider] = {}

    def register(self, component: str, provider: ServiceProvider) -> None:
        if component in self._registry:
            logger.warning(f"Service provider for {component} already registered, overwriting")
        self._registry[component] = provider
        logger.info(f"Registered payment service provider for {component}")

    def unregister(self, component: str) -> None:
        self._registry.pop(component, None)

    def get(self, component: str) -> Optional[ServiceProvider]:
        return self._registry.get(component)


_registry = ServiceProviderRegistry()


def get_service_provider_registry() -> ServiceProviderRegistry:
    return _registry


def get_rounded_cost(amount: Decimal, currency: str, surcharge: Decimal = Decimal("0")) -> Decimal:
    """Amount plus surcharge percent, rounded half-up to the currency's minor units."""
    cost = Decimal(amount) * (Decimal("1") + Decimal(surcharge) / Decimal("100"))
    exponent = Decimal("1") if currency.upper() in ZERO_DECIMAL_CURRENCIES else Decimal("0.01")
    return cost.quantize(exponent, rounding=ROUND_HALF_UP)


class PaymentHelper:
    """Read-only view of payables, gateway configuration and surcharge."""

    def __init__(self, db: Session, registry: Optional[ServiceProviderRegistry] = None):
        self.db = db
        self.registry = registry or get_service_provider_registry()

    def get_payable(self, component: str, payment_area: str, item_id: int) -> Payable:
        provider = self.registry.get(component)
        if provider is None:
            raise PayableNotFoundError(f"No payment service provider for component '{component}'")
        payable = provider.get_payable(payment_area, item_id)
        if payable is None:
            raise PayableNotFoundError(
                f"Item {item_id} not found in {component}/{payment_area}"
            )
        return payable

    def get_gateway_configuration(
        self,
        component: str,
        payment_area: str,
        item_id: int,
        gateway: str = GATEWAY_NAME,
    ) -> Dict[str, Any]:
        """
        Gateway configuration of the account that receives the payment.

        Returns:
            Dict with brandname, clientid, secret (decrypted) and environment

        Raises:
            GatewayConfigurationError: account has no enabled configuration
        """
        payable = self.get_payable(component, payment_area, item_id)
        return self.get_account_gateway_configuration(payable.get_account_id(), gateway)

    def get_account_gateway_configuration(self, account_id: int, gateway: str = GATEWAY_NAME) -> Dict[str, Any]:
        """Enabled gateway configuration of a payment account, secret decrypted."""
        config = get_account_gateway_config(self.db, account_id)
        if not config:
            raise GatewayConfigurationError(f"Gateway {gateway} is not configured for account {account_id}")
        if not config.get("enabled"):
            raise GatewayConfigurationError(f"Gateway {gateway} is disabled for account {account_id}")
        return {
            "brandname": config.get("brandname", ""),
            "clientid": config.get("clientid", ""),
            "secret": decrypt_value(config.get("secret", "")),
            "environment": config.get("environment", "live"),
        }

    def get_gateway_surcharge(self, gateway: str = GATEWAY_NAME) -> Decimal:
        """Surcharge percentage configured for the gateway (0 when unset)."""
        return Decimal(str(get_config(self.db, f"paygw_{gateway}", "surcharge", 0)))

    @staticmethod
    def get_rounded_cost(amount: Decimal, currency: str, surcharge: Decimal) -> Decimal:
        return get_rounded_cost(amount, currency, surcharge)

"""
Deferred status check for a pending mpay24 order (called by APScheduler).

Asks mpay24 for the transaction status and records terminal outcomes on the
pending order. Orders that are still open at mpay24 stay pending.
"""
import logging
from typing import Any, Callable, Dict, Optional

from mpay24_gateway.core.events import EventBus, get_event_bus
from mpay24_gateway.database.repositories.open_order_repository import OpenOrderRepository
from mpay24_gateway.database.session import get_session
from mpay24_gateway.payments import PaymentProvider, get_payment_provider
from mpay24_gateway.payments.helper import PaymentHelper
from mpay24_gateway.utils.enums import OpenOrderStatus, PaymentEvent

logger = logging.getLogger(__name__)

ProviderFactory = Callable[[str, str, Optional[str]], PaymentProvider]


def run(
    custom_data: Dict[str, Any],
    provider_factory: ProviderFactory = get_payment_provider,
    bus: Optional[EventBus] = None,
) -> Optional[str]:
    """
    Check one transaction.

    Returns:
        The provider status ("confirmed", "failed", "pending"), or None when
        the order is gone or already settled
    """
    tid = custom_data["tid"]
    logger.info(f"[check_status] Checking transaction {tid}")

    with get_session() as db:
        repo = OpenOrderRepository(db)
        order = repo.get_by_tid(tid)
        if order is None:
            logger.warning(f"[check_status] No open order for transaction {tid}")
            return None
        if order.status != OpenOrderStatus.PENDING:
            logger.info(f"[check_status] Order {tid} already settled (status {order.status})")
            return None

        config = PaymentHelper(db).get_gateway_configuration(
            custom_data["component"],
            custom_data["paymentarea"],
            int(custom_data["itemid"]),
        )
        provider = provider_factory(config["clientid"], config["secret"], config["environment"])
        result = provider.verify_payment(tid)

        if result.status == "confirmed":
            repo.set_status(order, OpenOrderStatus.SUCCESS)
            event = PaymentEvent.SUCCESSFUL
        elif result.status == "failed":
            repo.set_status(order, OpenOrderStatus.FAILED)
            event = PaymentEvent.FAILED
        else:
            logger.info(f"[check_status] Transaction {tid} still open at mpay24 ({result.raw_status})")
            return result.status

        (bus or get_event_bus()).publish(
            event,
            {
                "order_id": order.id,
                "transaction_id": tid,
                "user_id": order.user_id,
                "item_id": order.item_id,
                "component": custom_data["component"],
                "paymentarea": custom_data["paymentarea"],
                "status": result.raw_status,
            },
        )
        return result.status

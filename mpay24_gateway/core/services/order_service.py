"""
Order Service - create or reuse the pending order behind a checkout.

A cart line (item, user) has at most one pending order. Repeated checkouts for
the same line reuse its transaction id, so mpay24 never sees two orders for one
purchase; only the price follows the latest checkout.
"""
import logging
import secrets
import time
from decimal import ROUND_HALF_UP, Decimal
from typing import NamedTuple, Optional, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from mpay24_gateway.core.events import EventBus, get_event_bus
from mpay24_gateway.database.repositories.open_order_repository import OpenOrderRepository
from mpay24_gateway.utils.enums import PaymentEvent

logger = logging.getLogger(__name__)


class ReconcileResult(NamedTuple):
    transaction_id: str
    is_new: bool


def generate_transaction_id(now: Optional[float] = None) -> str:
    """16 random hex chars followed by the unix timestamp."""
    timestamp = int(time.time() if now is None else now)
    return f"{secrets.token_hex(8)}{timestamp}"


def format_amount(amount: Union[Decimal, float, int, str]) -> Decimal:
    """Round an amount to 2 fractional digits."""
    return Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def reconcile_order(
    db: Session,
    item_id: int,
    user_id: int,
    amount: Union[Decimal, float, int, str],
    bus: Optional[EventBus] = None,
) -> ReconcileResult:
    """
    Find the pending order for (item_id, user_id) or create one.

    The insert or price update is committed before returning, so the pending
    order survives a later failure in the same request (e.g. mpay24 down).
    ``payment.order_added`` is published only after that commit.

    Args:
        db: Session to write with; its transaction is committed here
        item_id: Purchasable item within the calling component/area
        user_id: Acting user
        amount: Current price of the item
        bus: Event bus for ``payment.order_added`` (process bus by default)

    Returns:
        ReconcileResult(transaction_id, is_new)

    Raises:
        sqlalchemy.exc.SQLAlchemyError: storage failures are not retried
    """
    if item_id <= 0 or user_id <= 0:
        raise ValueError("item_id and user_id must be positive")
    price = format_amount(amount)
    if price < 0:
        raise ValueError("amount must not be negative")

    repo = OpenOrderRepository(db)
    candidate_tid = generate_transaction_id()

    existing = repo.find_pending(item_id, user_id, lock=True)
    if existing is None:
        try:
            with db.begin_nested():
                order = repo.create_pending(candidate_tid, item_id, user_id, price)
        except IntegrityError:
            # A concurrent checkout inserted the pending order first.
            existing = repo.find_pending(item_id, user_id, lock=True)
            if existing is None:
                raise
            logger.info(
                f"Pending order for item {item_id}/user {user_id} created concurrently, "
                f"reusing {existing.tid}"
            )
        else:
            db.commit()
            logger.info(f"Created pending order {order.tid} for item {item_id}/user {user_id}")
            (bus or get_event_bus()).publish(
                PaymentEvent.ORDER_ADDED,
                {
                    "order_id": order.id,
                    "transaction_id": order.tid,
                    "user_id": user_id,
                },
            )
            return ReconcileResult(order.tid, True)

    if Decimal(existing.price) != price:
        logger.info(f"Pending order {existing.tid}: price {existing.price} -> {price}")
        repo.update_price(existing, price)
    db.commit()

    return ReconcileResult(existing.tid, False)

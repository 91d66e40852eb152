"""
Repository for OpenOrder database operations.
"""
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from mpay24_gateway.database.models.open_order import OpenOrder
from mpay24_gateway.database.repositories.repository import BaseRepository
from mpay24_gateway.utils.enums import OpenOrderStatus


class OpenOrderRepository(BaseRepository[OpenOrder]):
    """Handles database operations for pending mpay24 orders."""

    def __init__(self, session: Session):
        super().__init__(session, OpenOrder)

    def find_pending(self, item_id: int, user_id: int, lock: bool = False) -> Optional[OpenOrder]:
        """Pending order for a cart line, optionally locking the row."""
        query = self.session.query(OpenOrder).filter(
            OpenOrder.item_id == item_id,
            OpenOrder.user_id == user_id,
            OpenOrder.status == OpenOrderStatus.PENDING,
        )
        if lock:
            query = query.with_for_update()
        return query.order_by(OpenOrder.id).first()

    def get_by_tid(self, tid: str) -> Optional[OpenOrder]:
        return self.session.query(OpenOrder).filter(OpenOrder.tid == tid).first()

    def create_pending(self, tid: str, item_id: int, user_id: int, price: Decimal) -> OpenOrder:
        return self.create(
            tid=tid,
            item_id=item_id,
            user_id=user_id,
            price=price,
            status=OpenOrderStatus.PENDING,
        )

    def update_price(self, order: OpenOrder, price: Decimal) -> OpenOrder:
        """Update price and modification time; the tid is left alone."""
        order.price = price
        order.updated_at = datetime.now(timezone.utc)
        self.session.flush()
        return order

    def set_status(self, order: OpenOrder, status: int) -> OpenOrder:
        order.status = status
        order.updated_at = datetime.now(timezone.utc)
        self.session.flush()
        return order

    def count_for(self, item_id: int, user_id: int) -> int:
        return (
            self.session.query(OpenOrder)
            .filter(OpenOrder.item_id == item_id, OpenOrder.user_id == user_id)
            .count()
        )

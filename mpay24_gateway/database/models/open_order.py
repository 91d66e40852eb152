"""OpenOrder model - pending checkout bridging a cart line to an mpay24 transaction."""

from decimal import Decimal

from sqlalchemy import Index, Integer, Numeric, String, text
from sqlalchemy.orm import Mapped, mapped_column

from mpay24_gateway.database.models.model_base import SqlAlchemyModel
from mpay24_gateway.utils.enums import OpenOrderStatus


class OpenOrder(SqlAlchemyModel):
    __tablename__ = "paygw_mpay24_openorders"
    __table_args__ = (
        # One pending order per cart line and user.
        Index(
            "uq_paygw_mpay24_openorders_pending",
            "item_id",
            "user_id",
            unique=True,
            postgresql_where=text(f"status = {OpenOrderStatus.PENDING}"),
            sqlite_where=text(f"status = {OpenOrderStatus.PENDING}"),
        ),
    )

    tid: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        index=True,
    )

    item_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        index=True,
    )

    user_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        index=True,
    )

    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    status: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=OpenOrderStatus.PENDING,
    )  # 0 pending, 1 success, 2 failed

    def __repr__(self) -> str:
        return f"<OpenOrder id={self.id} tid={self.tid} status={self.status}>"

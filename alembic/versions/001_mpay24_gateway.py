"""mpay24 gateway schema

Revision ID: 001_mpay24_gateway
Revises:
Create Date: 2022-06-01

Tables:
- system_configuration (plugin settings and gateway accounts)
- paygw_mpay24_openorders (pending checkouts)
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB

revision = "001_mpay24_gateway"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # ── system_configuration ──
    op.create_table(
        "system_configuration",
        sa.Column("key", sa.String(100), primary_key=True),
        sa.Column("value", JSONB(), nullable=False),
        sa.Column("description", sa.Text(), server_default=""),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_by", sa.String(255), server_default="system"),
    )

    # ── paygw_mpay24_openorders ──
    op.create_table(
        "paygw_mpay24_openorders",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("tid", sa.String(64), nullable=False, index=True),
        sa.Column("item_id", sa.Integer(), nullable=False, index=True),
        sa.Column("user_id", sa.Integer(), nullable=False, index=True),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("status", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
    )
    op.create_index(
        "uq_paygw_mpay24_openorders_pending",
        "paygw_mpay24_openorders",
        ["item_id", "user_id"],
        unique=True,
        postgresql_where=sa.text("status = 0"),
    )


def downgrade() -> None:
    op.drop_index("uq_paygw_mpay24_openorders_pending", table_name="paygw_mpay24_openorders")
    op.drop_table("paygw_mpay24_openorders")
    op.drop_table("system_configuration")

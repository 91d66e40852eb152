"""Database models package - import all models so Alembic can discover them."""

from mpay24_gateway.database.models.model_base import SqlAlchemyModel
from mpay24_gateway.database.models.open_order import OpenOrder
from mpay24_gateway.database.models.system_configuration import SystemConfiguration

__all__ = [
    "SqlAlchemyModel",
    "OpenOrder",
    "SystemConfiguration",
]

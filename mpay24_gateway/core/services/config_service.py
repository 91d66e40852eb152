"""
Config Service - plugin settings backed by the system_configuration table.

Each plugin owns one JSON document keyed by its name; ``get_config`` reads a
single setting out of it.
"""
import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from mpay24_gateway.database.repositories.system_configuration_repository import (
    SystemConfigurationRepository,
)

logger = logging.getLogger(__name__)

GATEWAY_PLUGIN = "paygw_mpay24"
SHOPPING_CART_PLUGIN = "local_shopping_cart"


def get_config(db: Session, plugin: str, name: str, default: Any = None) -> Any:
    """Return one setting of a plugin, or ``default`` when unset."""
    value = SystemConfigurationRepository(db).get_value(plugin).get(name)
    return default if value is None else value


def set_config(db: Session, plugin: str, name: str, value: Any, updated_by: str = "system") -> None:
    """Set one setting of a plugin, keeping the others."""
    repo = SystemConfigurationRepository(db)
    document = repo.get_value(plugin)
    document[name] = value
    repo.set_value(plugin, document, updated_by=updated_by)
    logger.info(f"Config {plugin}.{name} updated by {updated_by}")


def account_key(account_id: int) -> str:
    return f"{GATEWAY_PLUGIN}:account:{account_id}"


def get_account_gateway_config(db: Session, account_id: int) -> Optional[Dict[str, Any]]:
    """Stored gateway configuration of a payment account, or None."""
    value = SystemConfigurationRepository(db).get_value(account_key(account_id))
    return value or None


def save_account_gateway_config(
    db: Session,
    account_id: int,
    config: Dict[str, Any],
    updated_by: str = "system",
) -> None:
    SystemConfigurationRepository(db).set_value(
        account_key(account_id),
        config,
        description=f"mpay24 gateway configuration for account {account_id}",
        updated_by=updated_by,
    )

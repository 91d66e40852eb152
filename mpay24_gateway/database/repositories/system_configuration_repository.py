"""
Repository for plugin configuration stored in ``system_configuration``.
"""
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from mpay24_gateway.database.models.system_configuration import SystemConfiguration


class SystemConfigurationRepository:
    """Reads and writes plugin-scoped JSON settings."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, key: str) -> Optional[SystemConfiguration]:
        return self.db.get(SystemConfiguration, key)

    def get_value(self, key: str) -> Dict[str, Any]:
        """Settings document for a key, or an empty dict."""
        row = self.get(key)
        if row is None or not isinstance(row.value, dict):
            return {}
        return dict(row.value)

    def set_value(
        self,
        key: str,
        value: Dict[str, Any],
        description: str = "",
        updated_by: str = "system",
    ) -> SystemConfiguration:
        """Insert or replace the settings document for a key."""
        row = self.get(key)
        if row is None:
            row = SystemConfiguration(
                key=key,
                value=value,
                description=description,
                updated_by=updated_by,
            )
            self.db.add(row)
        else:
            row.value = value
            row.updated_by = updated_by
            if description:
                row.description = description
        self.db.flush()
        return row

"""Database module."""

from deploystack.storage.database.base import Base, Database, TimestampMixin, get_database, get_db
from deploystack.storage.database.models import GlobalSettingGroupModel, GlobalSettingModel

__all__ = [
    "Base",
    "Database",
    "GlobalSettingGroupModel",
    "GlobalSettingModel",
    "TimestampMixin",
    "get_database",
    "get_db",
]

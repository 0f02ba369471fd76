"""Persistence infrastructure."""

from slackollama.infrastructure.persistence.database import DatabaseManager
from slackollama.infrastructure.persistence.exceptions import (
    KeyValueStoreError,
    PersistenceError,
)
from slackollama.infrastructure.persistence.key_value_store import (
    SQLiteKeyValueStore,
)
from slackollama.infrastructure.persistence.models import KeyValueModel

__all__ = [
    "DatabaseManager",
    "KeyValueModel",
    "KeyValueStoreError",
    "PersistenceError",
    "SQLiteKeyValueStore",
]

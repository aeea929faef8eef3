"""
SQLAlchemy key-value store

Concrete implementation of KeyValueStore over the kv_entries table. Each
key is one JSON blob written in a single transaction.
"""

import logging
from typing import Any, Iterable, Optional

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError

from goagri_client.domain.repositories.key_value_store import KeyValueStore
from goagri_client.infrastructure.persistence.database import StoreDatabaseManager
from goagri_client.infrastructure.persistence.models import KeyValueEntry
from goagri_client.infrastructure.utilities.exceptions import StorageError


class SQLAlchemyKeyValueStore(KeyValueStore):
    """SQLAlchemy implementation of the local store"""

    def __init__(self, db_manager: StoreDatabaseManager):
        self._db = db_manager
        self._logger = logging.getLogger(self.__class__.__name__)

    async def get(self, key: str) -> Optional[Any]:
        try:
            with self._db.managed_session() as session:
                entry = session.get(KeyValueEntry, key)
                return entry.value if entry is not None else None
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to read {key}: {e}", "get") from e

    async def set(self, key: str, value: Any) -> None:
        try:
            with self._db.managed_session() as session:
                entry = session.get(KeyValueEntry, key)
                if entry is None:
                    session.add(KeyValueEntry(key=key, value=value))
                else:
                    entry.value = value
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to write {key}: {e}", "set") from e
        self._logger.debug("💾 STORED %s", key)

    async def remove(self, key: str) -> None:
        await self.remove_many([key])

    async def remove_many(self, keys: Iterable[str]) -> None:
        keys = list(keys)
        if not keys:
            return
        try:
            with self._db.managed_session() as session:
                session.execute(delete(KeyValueEntry).where(KeyValueEntry.key.in_(keys)))
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to remove {keys}: {e}", "remove") from e
        self._logger.debug("🗑️ REMOVED %s", ", ".join(keys))

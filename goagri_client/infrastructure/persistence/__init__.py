"""
Persistence

SQLAlchemy-backed implementation of the device-local key-value store.
"""

from .database import StoreDatabaseManager
from .sqlalchemy_key_value_store import SQLAlchemyKeyValueStore

__all__ = ["SQLAlchemyKeyValueStore", "StoreDatabaseManager"]

"""
Local store database management

Engine and session factory for the key-value store, plus the managed
session context used by every store operation.
"""

import logging
from contextlib import contextmanager
from typing import Any, Generator, Optional

from sqlalchemy import Engine, create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from goagri_client.infrastructure.configuration.config import get_config
from goagri_client.infrastructure.logging.logging_config import PerformanceLogger
from goagri_client.infrastructure.persistence.models import Base
from goagri_client.infrastructure.utilities.exceptions import StorageError


class StoreDatabaseManager:
    """Owns the engine and session factory for one store URL"""

    def __init__(self, store_url: Optional[str] = None, config: Optional[Any] = None):
        self.config = config or get_config()
        self.store_url = store_url or self.config.store_url
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None
        self.logger = logging.getLogger(__name__)

    def get_engine(self) -> Engine:
        if self._engine is None:
            self._engine = self._create_engine()
        return self._engine

    def _create_engine(self) -> Engine:
        engine_kwargs: dict = {"pool_pre_ping": True}

        # SQLite is the on-device default; one shared connection keeps
        # in-memory databases alive across sessions
        if self.store_url.startswith("sqlite"):
            engine_kwargs.update(
                {
                    "poolclass": StaticPool,
                    "connect_args": {"check_same_thread": False},
                }
            )

        return create_engine(self.store_url, **engine_kwargs)

    def get_session_factory(self) -> sessionmaker:
        if self._session_factory is None:
            self._session_factory = sessionmaker(
                bind=self.get_engine(), expire_on_commit=False
            )
        return self._session_factory

    def get_session(self) -> Session:
        return self.get_session_factory()()

    def create_tables(self) -> None:
        """Create the store schema if it is missing"""
        try:
            with PerformanceLogger("create_store_tables", self.logger):
                Base.metadata.create_all(self.get_engine())
        except SQLAlchemyError as e:
            self.logger.error("Failed to create store tables: %s", e, exc_info=True)
            raise StorageError(
                f"Failed to create store tables: {e}", "create_tables"
            ) from e

    @contextmanager
    def managed_session(self) -> Generator[Session, None, None]:
        """
        Session scope with commit on success and rollback on failure.

        Yields:
            Session: The SQLAlchemy session object.

        Raises:
            SQLAlchemyError: If a database-related error occurs.
        """
        session = self.get_session()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            self.logger.error("💥 STORE DATABASE ERROR: %s", e)
            session.rollback()
            raise
        finally:
            session.close()

    def close(self) -> None:
        if self._engine:
            self._engine.dispose()
            self._engine = None
        self._session_factory = None
        self.logger.info("Store database connections closed")

# pylint: disable=too-few-public-methods
"""
SQLAlchemy models for the local store
"""

from datetime import datetime
from typing import Any, Type

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import DeclarativeMeta, Mapped, declarative_base, mapped_column
from sqlalchemy.sql import func

_Base = declarative_base()

# Type alias for mypy
Base: Type[DeclarativeMeta] = _Base


class KeyValueEntry(Base):
    """One stored blob"""

    __tablename__ = "kv_entries"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[Any] = mapped_column(JSON, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<KeyValueEntry(key='{self.key}')>"

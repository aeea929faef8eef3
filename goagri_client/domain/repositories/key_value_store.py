"""
Key-value store interface

Defines the contract for the device-local persistent store. Each key holds
one JSON-compatible blob; writes are whole-value and last-write-wins.
"""

from abc import ABC, abstractmethod
from typing import Any, Iterable, Optional


class KeyValueStore(ABC):
    """Repository interface for device-local storage"""

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Get the value stored under key, or None"""

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Store value under key, replacing any previous value"""

    @abstractmethod
    async def remove(self, key: str) -> None:
        """Remove key if present"""

    @abstractmethod
    async def remove_many(self, keys: Iterable[str]) -> None:
        """Remove several keys in one write"""

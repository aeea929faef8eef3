"""
Realtime channel interface

The socket transport itself lives outside the engine; this is the surface
the engine consumes.
"""

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict

EventHandler = Callable[[Dict[str, Any]], Awaitable[None]]


class RealtimeChannel(ABC):
    """Event channel for live inventory and chat traffic"""

    @abstractmethod
    async def connect(self, token: str) -> None:
        """Open the channel for an authenticated user"""

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the channel"""

    @abstractmethod
    def on(self, event: str, handler: EventHandler) -> None:
        """Register handler for event"""

    @abstractmethod
    def off(self, event: str) -> None:
        """Drop handlers for event"""

    @abstractmethod
    async def join_room(self, room: str) -> None:
        """Join a chat room"""

    @abstractmethod
    async def leave_room(self, room: str) -> None:
        """Leave a chat room"""

    @abstractmethod
    async def send_message(self, room: str, message: Dict[str, Any]) -> None:
        """Deliver a chat message to a room"""

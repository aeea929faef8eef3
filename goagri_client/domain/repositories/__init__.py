"""
Domain repository interfaces

Ports for the device-local store, the remote commerce gateway and the
realtime channel.
"""

from .commerce_gateway import AuthResult, CommerceGateway, OrderPayload
from .key_value_store import KeyValueStore
from .realtime_channel import RealtimeChannel

__all__ = [
    "AuthResult",
    "CommerceGateway",
    "KeyValueStore",
    "OrderPayload",
    "RealtimeChannel",
]

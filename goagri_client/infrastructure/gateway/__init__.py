"""
Commerce gateway

httpx client for the remote backend with one pydantic schema per endpoint.
"""

from .http_commerce_gateway import HttpCommerceGateway

__all__ = ["HttpCommerceGateway"]

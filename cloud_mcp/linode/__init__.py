"""Linode API v4 client and resource models."""

from cloud_mcp.linode.client import (
    DEFAULT_API_URL,
    LinodeAPIError,
    LinodeClient,
    LinodeError,
    LinodeTransportError,
)

__all__ = [
    "DEFAULT_API_URL",
    "LinodeAPIError",
    "LinodeClient",
    "LinodeError",
    "LinodeTransportError",
]

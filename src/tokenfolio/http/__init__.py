"""Outbound request resilience: identity rotation, retry and direct fallback."""

from tokenfolio.http.resource_pool import ResourcePool
from tokenfolio.http.identities import ClientIdentity, build_identities
from tokenfolio.http.rotating_client import RotatingHttpClient, is_transient_error

__all__ = [
    "ResourcePool",
    "ClientIdentity",
    "build_identities",
    "RotatingHttpClient",
    "is_transient_error",
]

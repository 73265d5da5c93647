"""
Platform identity integration.
"""

from .client import (
    AuthEndpointIdentityClient,
    HeaderIdentityClient,
    IdentityClientError,
    IdentityConfig,
    create_identity_client,
    principal_from_payload,
)

__all__ = [
    "AuthEndpointIdentityClient",
    "HeaderIdentityClient",
    "IdentityClientError",
    "IdentityConfig",
    "create_identity_client",
    "principal_from_payload",
]

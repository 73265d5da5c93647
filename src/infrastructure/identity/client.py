"""
Platform identity clients.

The hosting platform (e.g. App Service authentication) authenticates the
caller before the request reaches us. It exposes the result two ways:
- an identity endpoint (/.auth/me) returning the principal as JSON
- principal headers injected into every authenticated request

Both are wrapped here behind the IdentityProvider protocol from core.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import aiohttp

from src.core.catalog.models import Principal

logger = logging.getLogger(__name__)

# Request headers that carry the caller's platform session
FORWARDED_HEADERS = ("cookie", "authorization", "x-zumo-auth")

PRINCIPAL_ID_HEADER = "x-ms-client-principal-id"
PRINCIPAL_NAME_HEADER = "x-ms-client-principal-name"

EMAIL_CLAIM_SUFFIXES = ("/emailaddress", "email", "emails")


class IdentityClientError(Exception):
    """Raised when the identity endpoint can't be reached or answers badly."""
    pass


@dataclass
class IdentityConfig:
    """Configuration for the identity endpoint client."""
    endpoint_url: str
    timeout_seconds: float = 10.0


def principal_from_payload(payload: Any) -> Optional[Principal]:
    """
    Extract the principal from an identity endpoint response.

    The endpoint answers with a JSON array; the first entry is the
    principal. Anything else means the caller isn't signed in.
    """
    if not isinstance(payload, list) or not payload:
        return None

    entry = payload[0]
    if not isinstance(entry, dict):
        return None

    user_details = entry.get("userDetails") or entry.get("user_id") or ""
    user_id = entry.get("user_id") or entry.get("userDetails")
    if not user_id:
        return None

    return Principal(
        user_id=str(user_id),
        user_details=str(user_details),
        email=entry.get("email") or _email_from_claims(entry.get("user_claims")),
    )


def _email_from_claims(claims: Any) -> str:
    if not isinstance(claims, list):
        return ""
    for claim in claims:
        if not isinstance(claim, dict):
            continue
        claim_type = str(claim.get("typ", ""))
        if claim_type.endswith(EMAIL_CLAIM_SUFFIXES):
            return str(claim.get("val", ""))
    return ""


class AuthEndpointIdentityClient:
    """
    Resolves the caller by asking the platform's identity endpoint.

    The caller's session cookie/token is forwarded so the endpoint answers
    for them, not for us.
    """

    def __init__(self, config: IdentityConfig) -> None:
        self._config = config
        self._timeout = aiohttp.ClientTimeout(total=config.timeout_seconds)
        self._session: Optional[aiohttp.ClientSession] = None

        logger.info(
            "Initialized identity endpoint client",
            extra={"endpoint": config.endpoint_url}
        )

    async def fetch_principal(self, headers: Mapping[str, str]) -> Optional[Principal]:
        forwarded = {
            name: value for name, value in headers.items()
            if name.lower() in FORWARDED_HEADERS
        }

        session = self._get_session()
        try:
            async with session.get(self._config.endpoint_url, headers=forwarded) as response:
                if response.status != 200:
                    logger.warning(
                        "Identity endpoint returned non-200",
                        extra={"status": response.status}
                    )
                    return None
                payload = await response.json(content_type=None)

        except asyncio.TimeoutError:
            logger.error(
                "Identity endpoint timed out",
                extra={"timeout_seconds": self._config.timeout_seconds}
            )
            raise IdentityClientError("Identity request timed out")
        except aiohttp.ClientError as e:
            logger.error("Identity endpoint request failed", extra={"error": str(e)})
            raise IdentityClientError(f"Identity request failed: {e}") from e
        except ValueError as e:
            raise IdentityClientError(f"Identity endpoint returned invalid JSON: {e}") from e

        return principal_from_payload(payload)

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    def _get_session(self) -> aiohttp.ClientSession:
        # Created on first use so it binds to the serving event loop
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session


class HeaderIdentityClient:
    """
    Resolves the caller from principal headers the platform injects.

    Used when no identity endpoint is configured, and in local development
    where the headers can be set by hand.
    """

    async def fetch_principal(self, headers: Mapping[str, str]) -> Optional[Principal]:
        lowered = {name.lower(): value for name, value in headers.items()}
        user_id = lowered.get(PRINCIPAL_ID_HEADER) or lowered.get(PRINCIPAL_NAME_HEADER)
        if not user_id:
            return None

        return Principal(
            user_id=user_id,
            user_details=lowered.get(PRINCIPAL_NAME_HEADER) or user_id,
        )

    async def close(self) -> None:
        pass


def create_identity_client(config: Optional[IdentityConfig] = None):
    """
    Create the identity client.

    With an endpoint configured, the endpoint is asked; otherwise the
    injected principal headers are read.
    """
    if config is None or not config.endpoint_url:
        return HeaderIdentityClient()
    return AuthEndpointIdentityClient(config)

"""Shared HTTP plumbing for the platform integrations."""
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

import httpx

from credably.utils.errors import ProviderAPIError
from credably.utils.metrics import track_duration


@asynccontextmanager
async def provider_client(client: Optional[httpx.AsyncClient] = None):
    """Yield the caller's client, or a short-lived one with httpx default timeouts."""
    if client is not None:
        yield client
        return
    async with httpx.AsyncClient() as owned:
        yield owned


async def get_json(
    client: httpx.AsyncClient,
    platform: str,
    url: str,
    operation: str,
    params: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> Any:
    async with track_duration(platform, operation):
        response = await client.get(url, params=params, headers=headers)
        if response.status_code >= 400:
            raise ProviderAPIError(platform, response.status_code, response.text[:200])
    return response.json()


def bearer(access_token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {access_token}"}


async def get_provider_http_client() -> Optional[httpx.AsyncClient]:
    """Route dependency; None means each sync opens its own client."""
    return None

"""
HTTP Client Module

Provides the shared httpx.AsyncClient used by the REST backend gateway:
- Connection pooling for efficient reuse
- Configurable timeouts
- Retry with exponential backoff for idempotent reads only

Writes are never retried automatically; a failed write is reported to the
caller and the user decides whether to re-trigger it.
"""

import asyncio
import logging
from typing import Optional, Any

import httpx

from academy.core.config import settings

logger = logging.getLogger(__name__)


# ============== Configuration ==============

# Connection pool limits
MAX_CONNECTIONS = 100
MAX_KEEPALIVE_CONNECTIONS = 20
KEEPALIVE_EXPIRY = 30  # seconds

# Retry configuration (GET only)
MAX_RETRIES = 2
RETRY_BACKOFF_BASE = 0.5  # seconds


# ============== Global Client Instance ==============

_http_client: Optional[httpx.AsyncClient] = None


def get_http_client() -> httpx.AsyncClient:
    """
    Get or create the global async HTTP client.

    Returns:
        httpx.AsyncClient: Shared client instance.
    """
    global _http_client
    if _http_client is None:
        limits = httpx.Limits(
            max_connections=MAX_CONNECTIONS,
            max_keepalive_connections=MAX_KEEPALIVE_CONNECTIONS,
            keepalive_expiry=KEEPALIVE_EXPIRY,
        )
        timeout = httpx.Timeout(settings.HTTP_TIMEOUT_SECONDS)

        _http_client = httpx.AsyncClient(
            limits=limits,
            timeout=timeout,
        )
    return _http_client


async def close_http_client() -> None:
    """
    Close the global HTTP client.

    Should be called during application shutdown.
    """
    global _http_client
    if _http_client is not None:
        await _http_client.aclose()
        _http_client = None


# ============== Request Helpers ==============

async def get_with_retry(
    client: httpx.AsyncClient,
    url: str,
    max_retries: int = MAX_RETRIES,
    **kwargs: Any,
) -> httpx.Response:
    """
    Make a GET request, retrying on 5xx responses and connection errors.

    Args:
        client: Client to send the request with.
        url: Request URL.
        max_retries: Maximum number of retry attempts.
        **kwargs: Additional arguments passed to httpx.

    Returns:
        httpx.Response: The last response received.

    Raises:
        httpx.HTTPError: If the final attempt fails to connect.
    """
    for attempt in range(max_retries + 1):
        try:
            response = await client.get(url, **kwargs)

            if response.status_code >= 500 and attempt < max_retries:
                wait_time = RETRY_BACKOFF_BASE * (2 ** attempt)
                logger.warning(
                    "Server error %s from %s, retrying in %ss",
                    response.status_code, url, wait_time,
                )
                await asyncio.sleep(wait_time)
                continue

            return response

        except (httpx.ConnectError, httpx.ReadTimeout) as e:
            if attempt >= max_retries:
                raise
            wait_time = RETRY_BACKOFF_BASE * (2 ** attempt)
            logger.warning("Connection error on %s, retrying in %ss: %s", url, wait_time, e)
            await asyncio.sleep(wait_time)

    raise httpx.HTTPError(f"Request to {url} failed after {max_retries} retries")

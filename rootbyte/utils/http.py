"""
HTTP utilities for RootByte.
"""
import asyncio
import json
import logging
from typing import Any, Dict, Optional
import aiohttp
import async_timeout

# Configure logging
logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 10  # seconds
USER_AGENT = 'RootByte/1.0 (+https://rootbyte.com)'


class HttpError(Exception):
    """A request failed in transport or returned a body that is not JSON."""


async def get_json(session: aiohttp.ClientSession, url: str,
                   params: Optional[Dict[str, Any]] = None,
                   timeout: float = REQUEST_TIMEOUT) -> Any:
    """
    Issue a single GET and decode the body as JSON.

    The status code is not checked: APIs such as NewsAPI report errors in the
    JSON body, which the caller inspects.

    Args:
        session: Open aiohttp session
        url: Endpoint URL
        params: Query string parameters
        timeout: Seconds before the request is abandoned

    Returns:
        Decoded JSON payload

    Raises:
        HttpError: On transport failure, timeout or a non-JSON body
    """
    try:
        async with async_timeout.timeout(timeout):
            async with session.get(url, params=params) as response:
                text = await response.text()
                status = response.status
    except asyncio.TimeoutError as e:
        raise HttpError(f"Request to {url} timed out after {timeout}s") from e
    except aiohttp.ClientError as e:
        raise HttpError(f"Request to {url} failed: {e}") from e

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise HttpError(f"JSON parse error (HTTP {status}): {e}") from e


def create_session() -> aiohttp.ClientSession:
    return aiohttp.ClientSession(headers={'User-Agent': USER_AGENT})

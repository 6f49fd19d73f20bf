"""
Page retrieval over HTTP with aiohttp.
"""

import asyncio
from typing import Optional

import aiohttp
import structlog

from .config import get_config
from .errors import FetchError

logger = structlog.get_logger()


async def fetch_html(
        url: str,
        timeout: Optional[float] = None,
        session: Optional[aiohttp.ClientSession] = None
) -> str:
    """
    Download a page.

    Args:
        url: Page URL
        timeout: Total timeout in seconds (defaults to config.request_timeout)
        session: Shared session; a short-lived one is opened when omitted

    Returns:
        Page markup

    Raises:
        FetchError: Timeout, connection failure or non-2xx status
    """
    config = get_config()
    client_timeout = aiohttp.ClientTimeout(total=timeout or config.request_timeout)

    async def _fetch(client: aiohttp.ClientSession) -> str:
        async with client.get(
                url,
                headers={"User-Agent": config.user_agent},
                timeout=client_timeout
        ) as response:
            response.raise_for_status()
            return await response.text()

    try:
        if session is not None:
            return await _fetch(session)
        async with aiohttp.ClientSession() as own_session:
            return await _fetch(own_session)
    except asyncio.TimeoutError as e:
        logger.warning("fetch_timeout", url=url)
        raise FetchError(f"Timed out fetching {url}") from e
    except aiohttp.ClientError as e:
        logger.warning("fetch_failed", url=url, error=str(e))
        raise FetchError(f"Failed to fetch {url}: {e}") from e

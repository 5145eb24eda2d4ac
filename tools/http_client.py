"""Async HTTP helpers shared by source adapters and the media enricher.

All helpers swallow transport errors and return None so callers can treat
"unreachable", "bad status" and "empty payload" the same way.

Error Handling Strategy:
    - SSL errors trigger a retry without verification
    - Timeouts and connection errors are logged at WARNING and return None
    - Non-200 responses are returned from fetch() with their status so the
      caller can decide (e.g. GitHub 401 vs 403); get_text()/get_json()
      log them and return None
    - Malformed JSON returns None
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any

import aiohttp

from tools.utils import USER_AGENT, create_ssl_context

logger = logging.getLogger(__name__)


@dataclass
class HttpResult:
    """Status and body of a completed HTTP request."""

    url: str
    status: int
    text: str

    @property
    def ok(self) -> bool:
        return self.status == 200

    def json(self) -> Any:
        """Parse body as JSON (raises ValueError on malformed content)."""
        return json.loads(self.text)


async def fetch(
    session: aiohttp.ClientSession,
    url: str,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    timeout: int = 20,
    verify_ssl: bool = True,
) -> HttpResult | None:
    """GET a URL with SSL fallback.

    On SSL certificate errors, automatically retries without verification.

    Args:
        session: aiohttp client session
        url: URL to fetch
        params: Query string parameters
        headers: Extra request headers (User-Agent is set by default)
        timeout: Request timeout in seconds
        verify_ssl: Whether to verify SSL certificates

    Returns:
        HttpResult for any completed response, or None on transport errors
    """
    request_headers = {"User-Agent": USER_AGENT}
    if headers:
        request_headers.update(headers)

    try:
        async with session.get(
            url,
            params=params,
            timeout=aiohttp.ClientTimeout(total=timeout),
            headers=request_headers,
            ssl=create_ssl_context(verify_ssl),
        ) as resp:
            return HttpResult(url=url, status=resp.status, text=await resp.text())
    except aiohttp.ClientSSLError as e:
        if verify_ssl:
            logger.debug("HTTP %s: SSL error, retrying without verification", url)
            return await fetch(session, url, params, headers, timeout, verify_ssl=False)
        logger.warning("HTTP %s: SSL verification failed after retry: %s", url, e)
        return None
    except asyncio.TimeoutError:
        logger.warning("HTTP %s: request timed out after %ds", url, timeout)
        return None
    except Exception as e:
        logger.warning("HTTP %s: %s: %s", url, type(e).__name__, e)
        return None


def _check_status(result: HttpResult | None) -> bool:
    if result is None:
        return False
    if result.ok:
        return True
    if result.status >= 500:
        logger.warning("HTTP %s: server error %d", result.url, result.status)
    elif result.status in (403, 429):
        logger.warning("HTTP %s: rate limited or forbidden (%d)", result.url, result.status)
    else:
        logger.debug("HTTP %s: status %d", result.url, result.status)
    return False


async def get_text(
    session: aiohttp.ClientSession,
    url: str,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    timeout: int = 20,
) -> str | None:
    """GET a URL and return the body, or None on any error or non-200 status."""
    result = await fetch(session, url, params=params, headers=headers, timeout=timeout)
    if not _check_status(result):
        return None
    return result.text


async def get_json(
    session: aiohttp.ClientSession,
    url: str,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    timeout: int = 20,
) -> Any | None:
    """GET a URL and parse JSON, or None on any error, non-200 or bad payload."""
    result = await fetch(session, url, params=params, headers=headers, timeout=timeout)
    if not _check_status(result):
        return None
    try:
        return result.json()
    except ValueError as e:
        logger.warning("HTTP %s: invalid JSON: %s", url, e)
        return None

"""Base class for trending-topic source adapters.

Every adapter fetches one external source and maps it into TrendingTopic
objects. Adapters are independent and side-effect free beyond network I/O.

Error Handling Strategy:
    - HTTP errors, rate limits, timeouts, malformed or empty payloads:
      logged, converted to an empty list, never raised
    - SourceConfigError (fatal client misconfiguration, e.g. a rejected
      token): the only exception allowed to propagate
"""

import logging
import math
from abc import ABC, abstractmethod

import aiohttp

from models.topic import TrendingTopic

logger = logging.getLogger(__name__)

# Maximum topics returned by a single adapter
SOURCE_LIMIT = 10


class SourceConfigError(ValueError):
    """Raised when a source is misconfigured in a way retries cannot fix.

    Examples:
    - API token rejected (HTTP 401)
    - Unknown source name or mode in configuration
    """
    pass


def parse_traffic(value: str | None) -> int:
    """Convert an approximate traffic string to an integer.

    Examples:
        >>> parse_traffic("200K+")
        200000
        >>> parse_traffic("2M+")
        2000000
        >>> parse_traffic("1,000+")
        1000
    """
    if not value:
        return 0
    text = value.replace(",", "").replace("+", "").strip().lower()
    multiplier = 1
    if text.endswith("k"):
        multiplier, text = 1_000, text[:-1]
    elif text.endswith("m"):
        multiplier, text = 1_000_000, text[:-1]
    try:
        return int(float(text) * multiplier)
    except ValueError:
        return 0


def traffic_score(traffic: int, base: int = 70) -> int:
    """Score search traffic on a log scale: 1K -> 85, 100K -> 95, 1M+ -> 100."""
    if traffic <= 1:
        return base
    return min(100, base + math.floor(math.log10(traffic) * 5))


class SourceAdapter(ABC):
    """Abstract trending-topic source.

    Subclasses implement `_fetch(session)` and may raise freely inside it;
    `fetch()` applies the error policy and the item cap.

    Attributes:
        name: Source label stored in TrendingTopic.source
        limit: Maximum topics returned per fetch
        timeout: Per-request timeout in seconds
    """

    name: str = "source"

    def __init__(self, timeout: int = 20, limit: int = SOURCE_LIMIT):
        self.timeout = timeout
        self.limit = limit

    @abstractmethod
    async def _fetch(self, session: aiohttp.ClientSession) -> list[TrendingTopic]:
        """Fetch and map raw source data."""

    async def fetch(self, session: aiohttp.ClientSession | None = None) -> list[TrendingTopic]:
        """Fetch up to `limit` topics from this source.

        Args:
            session: Shared client session; a private one is created if None

        Returns:
            Topics from the source, or an empty list on any ordinary failure

        Raises:
            SourceConfigError: If the source is fatally misconfigured
        """
        if session is None:
            async with aiohttp.ClientSession() as own_session:
                return await self.fetch(own_session)

        try:
            topics = await self._fetch(session)
        except SourceConfigError:
            raise
        except Exception as e:
            logger.warning("Source failed | source=%s type=%s error=%s", self.name, type(e).__name__, e)
            return []

        topics = topics[:self.limit]
        if topics:
            logger.debug("Source fetched | source=%s topics=%d", self.name, len(topics))
        else:
            logger.info("Source empty | source=%s", self.name)
        return topics

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"

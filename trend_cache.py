"""In-process trend cache and the read path in front of the aggregator.

TrendCache:
    Holds the last successful batch with its monotonic timestamp.
    States: EMPTY (nothing stored), FRESH (age < ttl), STALE (age >= ttl).

TrendGateway:
    Serves trending topics: fresh cache -> live aggregation -> last
    persisted snapshot -> built-in fallback topics. Live batches are cached
    and persisted as the new snapshot; fallbacks are never cached.

Concurrency:
    Cache writes swap the stored tuple in a single assignment, so readers
    never observe a partially written batch. Refreshes run under an
    asyncio.Lock, so concurrent stale readers trigger one aggregation and
    the rest read the batch it produced.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from models.topic import TrendingTopic
from observability.tracing import trace_operation

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 3600
SNAPSHOT_LIMIT = 15

# Served when live sources and the persisted snapshot are both unavailable
FALLBACK_TOPICS: tuple[TrendingTopic, ...] = (
    TrendingTopic(
        id="fallback-1",
        title="React 19 Release Features",
        source="Google Trends",
        trend_score=95,
        category="Web Development",
        description="Latest React 19 features including Server Components improvements",
        keywords=["React", "JavaScript", "Frontend", "Components"],
        image="https://images.unsplash.com/photo-1633356122544-f134324a6cee?w=800&q=80",
        videos=["https://www.youtube.com/embed/w7ejDZ8SWv8"],
        tweets=["https://twitter.com/reactjs/status/1735023456789012345"],
    ),
    TrendingTopic(
        id="fallback-2",
        title="Python Type Hints in Practice",
        source="Dev.to",
        trend_score=88,
        category="Development",
        description="How teams adopt gradual typing in large Python codebases",
        keywords=["Python", "Typing", "Tooling"],
        image="https://source.unsplash.com/800x400/?computer-programming",
        videos=["https://www.youtube.com/embed/rfscVS0vtbw"],
        tweets=["https://twitter.com/techcrunch/status/1735023456789012345"],
    ),
    TrendingTopic(
        id="fallback-3",
        title="Open Source AI Models",
        source="GitHub Trending",
        trend_score=84,
        category="Technology",
        description="Open-weight language models climbing the GitHub charts",
        keywords=["AI", "Open Source", "GitHub"],
        image="https://source.unsplash.com/800x400/?artificial-intelligence",
        videos=["https://www.youtube.com/embed/aircAruvnKk"],
        tweets=["https://twitter.com/github/status/1735023456789012345"],
    ),
)


class CacheState(str, Enum):
    EMPTY = "empty"
    FRESH = "fresh"
    STALE = "stale"


class TrendCache:
    """Single-batch TTL cache.

    Args:
        ttl: Seconds a stored batch stays fresh
        clock: Monotonic clock returning seconds (injectable for tests)
    """

    def __init__(self, ttl: float = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entry: tuple[tuple[TrendingTopic, ...], float] | None = None

    def state(self) -> CacheState:
        entry = self._entry
        if entry is None:
            return CacheState.EMPTY
        if self._clock() - entry[1] < self.ttl:
            return CacheState.FRESH
        return CacheState.STALE

    def age(self) -> float | None:
        """Seconds since the batch was stored, or None if empty."""
        entry = self._entry
        return None if entry is None else self._clock() - entry[1]

    def get(self) -> list[TrendingTopic] | None:
        """Return the batch if fresh, else None."""
        entry = self._entry
        if entry is None or self._clock() - entry[1] >= self.ttl:
            return None
        return list(entry[0])

    def put(self, topics: list[TrendingTopic]) -> None:
        self._entry = (tuple(topics), self._clock())

    def invalidate(self) -> None:
        self._entry = None


@dataclass
class RefreshResult:
    """Outcome of a forced refresh.

    Attributes:
        success: True if live aggregation produced topics
        message: Human-readable summary
        topics: Topics served after the refresh (live or fallback)
    """
    success: bool
    message: str
    topics: list[TrendingTopic] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "message": self.message,
            "topics": [t.model_dump(by_alias=True) for t in self.topics],
        }


class TrendGateway:
    """Cached, persisted access to trending topics.

    Example:
        >>> gateway = TrendGateway(aggregator, db, TrendCache(ttl=3600))
        >>> topics = await gateway.get_trending()
    """

    def __init__(self, aggregator, db, cache: TrendCache | None = None):
        self.aggregator = aggregator
        self.db = db
        self.cache = cache or TrendCache()
        self._lock = asyncio.Lock()

    async def get_trending(self) -> list[TrendingTopic]:
        """Return the current trending topics. Never raises."""
        cached = self.cache.get()
        if cached is not None:
            return cached

        async with self._lock:
            # Another reader may have refreshed while we waited
            cached = self.cache.get()
            if cached is not None:
                return cached
            topics, _ = await self._load()
            return topics

    async def refresh(self) -> RefreshResult:
        """Drop the cache and reload from the sources."""
        with trace_operation("trends_refresh") as span:
            async with self._lock:
                self.cache.invalidate()
                topics, live = await self._load()
            span["live"] = live

        if live:
            message = f"Successfully refreshed {len(topics)} trending topics"
        else:
            message = "Failed to fetch trending topics"
        logger.info("Trends refreshed | live=%s topics=%d", live, len(topics))
        return RefreshResult(success=live, message=message, topics=topics)

    async def _load(self) -> tuple[list[TrendingTopic], bool]:
        """Aggregate, falling back to the snapshot and built-in topics.

        Must be called with the lock held.

        Returns:
            (topics, live) where live is True if aggregation produced them
        """
        try:
            topics = await self.aggregator.aggregate()
        except Exception as e:
            logger.error("Aggregation failed | type=%s error=%s", type(e).__name__, e)
            topics = []

        if topics:
            self.cache.put(topics)
            self._persist(topics)
            return list(topics), True

        snapshot = self._read_snapshot()
        if snapshot:
            logger.info("Serving persisted trends | topics=%d", len(snapshot))
            return snapshot, False

        logger.warning("Serving fallback trends | topics=%d", len(FALLBACK_TOPICS))
        return list(FALLBACK_TOPICS), False

    def _persist(self, topics: list[TrendingTopic]) -> None:
        try:
            self.db.replace_trending_topics(topics)
        except Exception as e:
            logger.error("Trend snapshot save failed | error=%s", e)

    def _read_snapshot(self) -> list[TrendingTopic]:
        try:
            return self.db.latest_trending_topics(limit=SNAPSHOT_LIMIT)
        except Exception as e:
            logger.error("Trend snapshot read failed | error=%s", e)
            return []

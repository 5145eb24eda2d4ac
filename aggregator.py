"""Trending-topic aggregation across all configured sources.

Runs every source adapter concurrently over one shared HTTP session,
merges their topics, ranks them by trend_score and keeps the top N.
The kept topics are then optionally enriched with media.

Ordering:
    Topics are concatenated in adapter order and stable-sorted by score
    descending, so equal scores keep arrival order. Ids are reassigned as
    trend-1, trend-2, ... after truncation.

Error Handling:
    An adapter that raises (including SourceConfigError) is logged and
    contributes nothing; the other adapters are unaffected. The summary
    log line counts raised adapters as failed and adapters that returned
    no topics (including ones that swallowed their own errors) as empty. Enrichment
    failures leave topics without media. aggregate() never raises.
"""

import asyncio
import logging

import aiohttp

from media import MediaEnricher
from models.topic import TrendingTopic
from observability.tracing import trace_operation
from sources.base import SourceAdapter

logger = logging.getLogger(__name__)

# Topics kept per aggregation run
AGGREGATE_LIMIT = 15


class Aggregator:
    """Fan-out fetch, merge and rank.

    Attributes:
        sources: Adapters to query, in a stable order
        enricher: Optional media enricher run over the kept topics
        limit: Maximum topics returned
        max_concurrent: TCP connection pool size for the shared session
    """

    def __init__(
        self,
        sources: list[SourceAdapter],
        enricher: MediaEnricher | None = None,
        limit: int = AGGREGATE_LIMIT,
        max_concurrent: int = 8,
    ):
        self.sources = sources
        self.enricher = enricher
        self.limit = limit
        self.max_concurrent = max_concurrent

    @staticmethod
    def rank(topics: list[TrendingTopic], limit: int = AGGREGATE_LIMIT) -> list[TrendingTopic]:
        """Sort by score descending, truncate and assign batch ids.

        Example:
            >>> ranked = Aggregator.rank(topics, limit=3)
            >>> [t.id for t in ranked]
            ['trend-1', 'trend-2', 'trend-3']
        """
        ranked = sorted(topics, key=lambda t: t.trend_score, reverse=True)[:limit]
        return [t.model_copy(update={"id": f"trend-{i}"}) for i, t in enumerate(ranked, start=1)]

    async def _gather(self, session: aiohttp.ClientSession) -> tuple[list[TrendingTopic], int, int]:
        results = await asyncio.gather(
            *(source.fetch(session) for source in self.sources),
            return_exceptions=True,
        )

        topics: list[TrendingTopic] = []
        failed = empty = 0
        for source, result in zip(self.sources, results):
            if isinstance(result, BaseException):
                failed += 1
                logger.warning(
                    "Source error | source=%s type=%s error=%s",
                    source.name, type(result).__name__, result,
                )
                continue
            if not result:
                empty += 1
                continue
            topics.extend(result)
        return topics, failed, empty

    async def aggregate(self) -> list[TrendingTopic]:
        """Fetch, rank and enrich trending topics from all sources.

        Returns:
            Up to `limit` topics sorted by trend_score descending,
            or an empty list if every source failed
        """
        with trace_operation("aggregate", {"sources": len(self.sources)}) as span:
            connector = aiohttp.TCPConnector(limit=self.max_concurrent)
            async with aiohttp.ClientSession(connector=connector) as session:
                topics, failed, empty = await self._gather(session)
                ranked = self.rank(topics, self.limit)

                if ranked and self.enricher is not None:
                    try:
                        ranked = await self.enricher.enrich(ranked, session)
                    except Exception as e:
                        logger.warning("Media enrichment failed | error=%s", e)

            span["topics"] = len(ranked)
            span["failed_sources"] = failed
            span["empty_sources"] = empty

        logger.info(
            "Trends aggregated | sources=%d topics=%d failed=%d empty=%d",
            len(self.sources), len(ranked), failed, empty,
        )
        return ranked

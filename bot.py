"""Automated article generation from trending topics.

The GenerationBot periodically pulls fresh trending topics, picks the
highest-scoring ones that have no article yet and generates an article for
each, one at a time.

Cycle:
    1. Aggregate trending topics directly (the trend cache is bypassed)
    2. Abort if there are none
    3. Keep topics with trend_score >= min_trend_score, first N only
    4. Drop topics that already have an article (slug, title prefix or
       generated_from_topic match)
    5. Generate sequentially with a fixed delay between calls
    6. Record run statistics and prune old ones

State Machine:
    IDLE --(timer fired | manual trigger | start)--> RUNNING --(cycle completed)--> IDLE

    The IDLE check and the switch to RUNNING happen synchronously before
    the first await, so a trigger arriving mid-cycle is a logged no-op.
    Triggers are never queued.
"""

import asyncio
import logging
import time
import uuid
from contextlib import suppress
from dataclasses import asdict
from datetime import datetime
from typing import Any, Awaitable, Callable

from models.article import GenerateFn
from models.bot import AutoGenerationConfig, BotRunStatistics, BotState
from models.topic import TrendingTopic
from observability.logging import run_context
from observability.tracing import trace_operation
from tools.utils import slugify

logger = logging.getLogger(__name__)

# Dedup keys derived from a topic title
DEDUP_SLUG_LENGTH = 60
DEDUP_TITLE_PREFIX = 20

CONTROL_ACTIONS = ("start", "trigger", "stop", "stats")


class GenerationBot:
    """Scheduler that turns trending topics into articles.

    Args:
        aggregator: Object with `async aggregate() -> list[TrendingTopic]`
        db: Database used for dedup lookups and statistics
        generate: `async generate(topic, description, keywords, media) -> GenerationResult`
        settings: Bot settings (cap, threshold, cooldown, enabled)
        generation_delay: Seconds to wait between generation calls
        stats_retention: Statistics rows kept after each cycle
        sleep: Awaitable sleep, injectable for tests
    """

    def __init__(
        self,
        aggregator,
        db,
        generate: GenerateFn,
        settings: AutoGenerationConfig | None = None,
        generation_delay: float = 2.0,
        stats_retention: int = 100,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.aggregator = aggregator
        self.db = db
        self.generate = generate
        self.settings = settings or AutoGenerationConfig()
        self.generation_delay = generation_delay
        self.stats_retention = stats_retention
        self._sleep = sleep

        self.state = BotState.IDLE
        self.last_run: datetime | None = None
        self.last_stats: BotRunStatistics | None = None
        self._configured_enabled = self.settings.enabled
        self._stopped = False
        self._timer_task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self.state is BotState.RUNNING

    def _try_begin_cycle(self, trigger: str) -> bool:
        """IDLE -> RUNNING, or False if a cycle is already in progress."""
        if self.state is BotState.RUNNING:
            logger.info("Cycle skipped, already running | trigger=%s", trigger)
            return False
        self.state = BotState.RUNNING
        return True

    async def run_cycle(self, trigger: str = "manual") -> BotRunStatistics | None:
        """Run one generation cycle.

        Args:
            trigger: What started the cycle ('start', 'timer' or 'manual'), for logs

        Returns:
            Statistics for the cycle, or None if another cycle was running
        """
        if not self._try_begin_cycle(trigger):
            return None

        try:
            with run_context(uuid.uuid4().hex[:8]):
                logger.info("Cycle started | trigger=%s", trigger)
                with trace_operation("bot_cycle", {"trigger": trigger}) as span:
                    stats = await self._cycle()
                    span.update(
                        topics_processed=stats.topics_processed,
                        high_score_topics=stats.high_score_topics,
                        articles_generated=stats.articles_generated,
                    )
                return stats
        finally:
            self.state = BotState.IDLE

    async def _cycle(self) -> BotRunStatistics:
        started = time.monotonic()

        try:
            topics = await self.aggregator.aggregate()
        except Exception as e:
            logger.error("Aggregation failed | type=%s error=%s", type(e).__name__, e)
            topics = []

        if not topics:
            logger.warning("No trending topics found, skipping generation")
            return BotRunStatistics(duration=time.monotonic() - started)

        candidates = [
            t for t in topics if t.trend_score >= self.settings.min_trend_score
        ][:self.settings.max_articles_per_run]
        new_topics = self._filter_existing(candidates)
        logger.info(
            "Topics selected | fetched=%d high_score=%d new=%d",
            len(topics), len(candidates), len(new_topics),
        )

        generated = 0
        for i, topic in enumerate(new_topics):
            if i > 0:
                await self._sleep(self.generation_delay)
            if await self._generate_one(topic):
                generated += 1

        stats = BotRunStatistics(
            topics_processed=len(topics),
            high_score_topics=len(candidates),
            articles_generated=generated,
            duration=time.monotonic() - started,
        )
        self._record(stats)
        self.last_run = stats.timestamp
        self.last_stats = stats

        logger.info(
            "Cycle completed | generated=%d candidates=%d duration=%.1fs",
            generated, len(new_topics), stats.duration,
        )
        return stats

    def _filter_existing(self, topics: list[TrendingTopic]) -> list[TrendingTopic]:
        """Drop topics that already have an article. Lookup errors keep the topic."""
        fresh = []
        for topic in topics:
            try:
                existing = self.db.find_article(
                    slug=slugify(topic.title, max_length=DEDUP_SLUG_LENGTH),
                    title_prefix=topic.title[:DEDUP_TITLE_PREFIX],
                    generated_from=topic.title,
                )
            except Exception as e:
                logger.warning("Dedup lookup failed | topic=%s error=%s", topic.title[:50], e)
                existing = None

            if existing is not None:
                logger.debug("Topic already covered | topic=%s slug=%s", topic.title[:50], existing.slug)
                continue
            fresh.append(topic)
        return fresh

    async def _generate_one(self, topic: TrendingTopic) -> bool:
        logger.info("Generating article | topic=%s score=%d", topic.title[:50], topic.trend_score)
        try:
            result = await self.generate(
                topic.title,
                description=topic.description,
                keywords=topic.keywords,
                media=topic.media(),
            )
        except Exception as e:
            logger.error("Generation failed | topic=%s error=%s", topic.title[:50], e)
            return False

        if not result.success:
            logger.error("Generation failed | topic=%s error=%s", topic.title[:50], result.error)
            return False
        return True

    def _record(self, stats: BotRunStatistics) -> None:
        try:
            self.db.insert_bot_statistics(stats)
            self.db.prune_bot_statistics(keep=self.stats_retention)
        except Exception as e:
            logger.error("Bot statistics save failed | error=%s", e)

    # === Public operations ===

    async def start(self) -> bool:
        """Run one cycle now, then every cooldown_hours.

        A bot configured with enabled=False does not start. A bot disabled
        by stop() is re-enabled. Only one timer loop is ever scheduled.

        Returns:
            True if the bot started, False if it is disabled by configuration
        """
        if not self._configured_enabled:
            logger.info("Bot is disabled, not starting")
            return False
        if self._stopped:
            self.settings.enabled = True
            self._stopped = False

        logger.info("Bot starting | cooldown_hours=%s", self.settings.cooldown_hours)
        await self.run_cycle("start")

        if self._timer_task is None or self._timer_task.done():
            self._timer_task = asyncio.create_task(self._schedule_loop())
        return True

    async def _schedule_loop(self) -> None:
        while True:
            await self._sleep(self.settings.cooldown_seconds)
            if not self.settings.enabled:
                logger.info("Bot timer stopped")
                return
            try:
                await self.run_cycle("timer")
            except Exception as e:
                logger.error("Scheduled cycle failed | error=%s", e, exc_info=True)

    async def manual_trigger(self) -> BotRunStatistics | None:
        """Run one cycle now, subject to the running guard."""
        logger.info("Manual trigger requested")
        return await self.run_cycle("manual")

    def stop(self) -> None:
        """Prevent future scheduled cycles. An in-flight cycle finishes."""
        self.settings.enabled = False
        self._stopped = True
        logger.info("Bot stopped")

    async def shutdown(self) -> None:
        """Stop and cancel the timer task (process exit)."""
        self.stop()
        task, self._timer_task = self._timer_task, None
        if task is not None and not task.done():
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task

    def get_statistics(self) -> dict[str, Any]:
        """Read-only snapshot of bot state and history."""
        config = asdict(self.settings)
        try:
            latest = self.db.latest_bot_statistics()
            total = self.db.count_generated_articles()
        except Exception as e:
            logger.error("Bot statistics read failed | error=%s", e)
            return {
                "last_run": None,
                "is_running": False,
                "state": BotState.IDLE.value,
                "total_generated_articles": 0,
                "last_cycle_stats": None,
                "config": config,
            }

        last_run = self.last_run or (latest.timestamp if latest else None)
        return {
            "last_run": last_run.isoformat() if last_run else None,
            "is_running": self.is_running,
            "state": self.state.value,
            "total_generated_articles": total,
            "last_cycle_stats": latest.to_dict() if latest else None,
            "config": config,
        }


async def control(bot: GenerationBot, action: str) -> dict[str, Any]:
    """Dispatch an admin action to the bot.

    Actions:
        start: Run a cycle now and schedule recurring cycles
        trigger: Run one cycle now
        stop: Prevent future scheduled cycles
        stats: Return get_statistics() under 'data'

    Returns:
        {"success": True, "message": ...}, {"success": True, "data": ...}
        or {"success": False, "error": ...}
    """
    try:
        if action == "start":
            if not await bot.start():
                return {"success": False, "error": "Bot is disabled (BOT_ENABLED=false)"}
            return {"success": True, "message": "Backend bot started successfully"}
        if action == "trigger":
            await bot.manual_trigger()
            return {"success": True, "message": "Manual generation cycle triggered"}
        if action == "stop":
            bot.stop()
            return {"success": True, "message": "Backend bot stopped"}
        if action == "stats":
            return {"success": True, "data": bot.get_statistics()}
    except Exception as e:
        logger.error("Bot control failed | action=%s error=%s", action, e, exc_info=True)
        return {"success": False, "error": "Bot management failed", "details": str(e)}

    return {
        "success": False,
        "error": f"Invalid action. Supported actions: {', '.join(CONTROL_ACTIONS)}",
    }

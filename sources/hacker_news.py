"""Hacker News front page via the official Firebase API.

The top-stories endpoint returns ids only, so the first `limit` items are
fetched concurrently. A failed or deleted item is skipped; it does not
fail the whole source.
"""

import asyncio
import logging

import aiohttp

from models.topic import TrendingTopic
from sources.base import SourceAdapter
from tools import http_client
from tools.utils import extract_keywords

logger = logging.getLogger(__name__)

API_BASE = "https://hacker-news.firebaseio.com/v0"
ITEM_URL = "https://news.ycombinator.com/item?id={id}"


def points_score(points: int) -> int:
    """Score a story: one point per 10 upvotes, capped at 100."""
    return min(100, max(0, points) // 10)


class HackerNewsSource(SourceAdapter):
    """Top stories from the Hacker News front page."""

    name = "Hacker News"

    def _to_topic(self, item: dict) -> TrendingTopic:
        title = item["title"]
        points = item.get("score") or 0
        comments = item.get("descendants") or 0
        return TrendingTopic(
            title=title,
            source=self.name,
            trend_score=points_score(points),
            category="Technology",
            description=f"{points} points and {comments} comments on Hacker News: {title}",
            keywords=extract_keywords(title),
            related_links=[item.get("url") or "", ITEM_URL.format(id=item.get("id"))],
        )

    async def _fetch(self, session: aiohttp.ClientSession) -> list[TrendingTopic]:
        story_ids = await http_client.get_json(
            session, f"{API_BASE}/topstories.json", timeout=self.timeout,
        )
        if not story_ids:
            return []

        items = await asyncio.gather(
            *(
                http_client.get_json(session, f"{API_BASE}/item/{story_id}.json", timeout=self.timeout)
                for story_id in story_ids[:self.limit]
            ),
            return_exceptions=True,
        )

        topics = []
        for story_id, item in zip(story_ids, items):
            if isinstance(item, BaseException) or not item:
                logger.debug("Hacker News item skipped | id=%s", story_id)
                continue
            if item.get("title") and not item.get("deleted") and not item.get("dead"):
                topics.append(self._to_topic(item))
        return topics

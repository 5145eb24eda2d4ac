"""Dev.to front page via the public articles API.

`top=1` returns the most popular articles of the last day, which matches
what the front page features.
"""

import logging

import aiohttp

from models.topic import TrendingTopic
from sources.base import SourceAdapter
from tools import http_client

logger = logging.getLogger(__name__)

ARTICLES_URL = "https://dev.to/api/articles"


def reactions_score(reactions: int) -> int:
    """Score an article: 50 base plus one point per 10 reactions, capped at 100."""
    return min(100, 50 + max(0, reactions) // 10)


class DevToSource(SourceAdapter):
    """Most popular Dev.to articles of the day."""

    name = "Dev.to"

    def _to_topic(self, article: dict) -> TrendingTopic:
        tags = article.get("tag_list") or []
        if isinstance(tags, str):
            tags = [t.strip() for t in tags.split(",")]
        title = article["title"]
        return TrendingTopic(
            title=title,
            source=self.name,
            trend_score=reactions_score(article.get("public_reactions_count") or 0),
            category="Development",
            description=article.get("description") or f"Popular article: {title}",
            keywords=tags,
            image=article.get("cover_image") or None,
            related_links=[article.get("url") or ""],
        )

    async def _fetch(self, session: aiohttp.ClientSession) -> list[TrendingTopic]:
        articles = await http_client.get_json(
            session,
            ARTICLES_URL,
            params={"top": "1", "per_page": str(self.limit)},
            timeout=self.timeout,
        )
        if not articles:
            return []
        return [self._to_topic(a) for a in articles[:self.limit] if a.get("title")]

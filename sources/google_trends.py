"""Google Trends source adapters.

Two interchangeable implementations, selected by GOOGLE_TRENDS_MODE:

GoogleTrendsRssSource (mode 'rss', default):
    Parses the public daily trending-searches RSS feed with feedparser.
    Each entry carries approximate traffic ("200K+"), a picture and news items.

GoogleTrendsApiSource (mode 'api'):
    Reads the dailytrends JSON endpoint used by the Trends web UI. The body
    is prefixed with an anti-XSSI guard ")]}'," that must be stripped.

Both score topics on a log scale of approximate search traffic.
"""

import json
import logging

import aiohttp
import feedparser

from models.topic import TrendingTopic
from sources.base import SourceAdapter, parse_traffic, traffic_score
from tools import http_client
from tools.utils import extract_keywords

logger = logging.getLogger(__name__)

RSS_URL = "https://trends.google.com/trending/rss"
API_URL = "https://trends.google.com/trends/api/dailytrends"

_XSSI_PREFIX = ")]}',"


def _strip_xssi(body: str) -> str:
    """Remove the anti-XSSI guard Google prepends to JSON responses."""
    body = body.lstrip()
    if body.startswith(_XSSI_PREFIX):
        return body[len(_XSSI_PREFIX):]
    return body


class GoogleTrendsRssSource(SourceAdapter):
    """Google Trends daily searches via the RSS feed."""

    name = "Google Trends"

    def __init__(self, geo: str = "US", timeout: int = 20, **kwargs):
        super().__init__(timeout=timeout, **kwargs)
        self.geo = geo

    def _parse_feed(self, content: str) -> list[TrendingTopic]:
        """Map RSS entries to topics.

        feedparser flattens the ht: namespace, so ht:approx_traffic becomes
        entry["ht_approx_traffic"]. Repeated news items collapse to the
        last one, which is enough for one related link.
        """
        feed = feedparser.parse(content)
        topics = []
        for entry in feed.entries[:self.limit]:
            title = entry.get("title", "").strip()
            if not title:
                continue
            traffic_text = entry.get("ht_approx_traffic", "")
            traffic = parse_traffic(traffic_text)
            news_title = entry.get("ht_news_item_title", "")
            news_url = entry.get("ht_news_item_url", "")

            topics.append(TrendingTopic(
                title=title,
                source=self.name,
                trend_score=traffic_score(traffic),
                category="Technology",
                description=f"{traffic_text} searches" if traffic_text else "Trending topic from Google",
                keywords=[title, *extract_keywords(news_title)],
                image=entry.get("ht_picture") or None,
                related_links=[news_url] if news_url else [],
            ))
        return topics

    async def _fetch(self, session: aiohttp.ClientSession) -> list[TrendingTopic]:
        content = await http_client.get_text(
            session, RSS_URL, params={"geo": self.geo}, timeout=self.timeout,
        )
        if not content:
            return []
        return self._parse_feed(content)


class GoogleTrendsApiSource(SourceAdapter):
    """Google Trends daily searches via the dailytrends JSON endpoint."""

    name = "Google Trends"

    def __init__(self, geo: str = "US", timeout: int = 20, **kwargs):
        super().__init__(timeout=timeout, **kwargs)
        self.geo = geo

    def _parse_payload(self, body: str) -> list[TrendingTopic]:
        data = json.loads(_strip_xssi(body))
        days = data.get("default", {}).get("trendingSearchesDays") or []
        if not days:
            return []

        topics = []
        for trend in (days[0].get("trendingSearches") or [])[:self.limit]:
            query = (trend.get("title") or {}).get("query", "").strip()
            if not query:
                continue
            formatted = trend.get("formattedTraffic", "")
            related = [q.get("query", "") for q in trend.get("relatedQueries") or []]
            articles = trend.get("articles") or []

            topics.append(TrendingTopic(
                title=query,
                source=self.name,
                trend_score=traffic_score(parse_traffic(formatted)),
                category="Technology",
                description=f"{formatted} searches" if formatted else "Trending topic from Google",
                keywords=[query, *related],
                image=(trend.get("image") or {}).get("imageUrl") or None,
                related_links=[a.get("url", "") for a in articles],
            ))
        return topics

    async def _fetch(self, session: aiohttp.ClientSession) -> list[TrendingTopic]:
        body = await http_client.get_text(
            session,
            API_URL,
            params={"hl": "en-US", "tz": "0", "geo": self.geo, "ns": "15"},
            timeout=self.timeout,
        )
        if not body:
            return []
        return self._parse_payload(body)

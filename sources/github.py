"""GitHub trending repositories via the repository search API.

"Trending" is approximated as the most-starred repositories created after
a cutoff date. Unauthenticated search is limited to 10 requests/minute,
so an optional token is supported.
"""

import logging

import aiohttp

from models.topic import TrendingTopic
from sources.base import SourceAdapter, SourceConfigError
from tools import http_client
from tools.utils import BOT_USER_AGENT

logger = logging.getLogger(__name__)

SEARCH_URL = "https://api.github.com/search/repositories"


def star_score(stars: int) -> int:
    """Score a repository: 60 base plus one point per 1000 stars, capped at 100."""
    return min(100, stars // 1000 + 60)


class GitHubTrendingSource(SourceAdapter):
    """Most-starred recently created GitHub repositories."""

    name = "GitHub Trending"

    def __init__(self, created_after: str, token: str = "", timeout: int = 20, **kwargs):
        super().__init__(timeout=timeout, **kwargs)
        self.created_after = created_after
        self.token = token

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": BOT_USER_AGENT,
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _to_topic(self, repo: dict) -> TrendingTopic:
        name = repo.get("name", "")
        description = repo.get("description") or ""
        language = repo.get("language") or ""
        return TrendingTopic(
            title=f"{name}: {description or 'Trending Repository'}",
            source=self.name,
            trend_score=star_score(repo.get("stargazers_count") or 0),
            category=language or "Programming",
            description=description or "Trending GitHub repository",
            keywords=[name, language, "GitHub", "Open Source"],
            image=(repo.get("owner") or {}).get("avatar_url") or None,
            related_links=[repo.get("html_url") or "", repo.get("homepage") or ""],
        )

    async def _fetch(self, session: aiohttp.ClientSession) -> list[TrendingTopic]:
        result = await http_client.fetch(
            session,
            SEARCH_URL,
            params={
                "q": f"created:>{self.created_after}",
                "sort": "stars",
                "order": "desc",
                "per_page": str(self.limit),
            },
            headers=self._headers(),
            timeout=self.timeout,
        )
        if result is None:
            return []
        if result.status == 401 and self.token:
            raise SourceConfigError("GitHub rejected GITHUB_TOKEN (HTTP 401)")
        if result.status in (403, 429):
            logger.warning("GitHub search rate limited | status=%d", result.status)
            return []
        if not result.ok:
            logger.warning("GitHub search failed | status=%d", result.status)
            return []

        repos = result.json().get("items") or []
        return [self._to_topic(repo) for repo in repos[:self.limit]]

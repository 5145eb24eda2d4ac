"""Trending-topic source adapters.

Each adapter fetches one external source and returns at most 10
TrendingTopic objects, or an empty list on failure:

GoogleTrendsRssSource / GoogleTrendsApiSource:
    Daily search trends (RSS feed or JSON endpoint, chosen by config).

GitHubTrendingSource:
    Most-starred recently created repositories.

HackerNewsSource:
    Hacker News front page.

DevToSource:
    Dev.to most popular articles.

Example:
    >>> from sources import build_sources
    >>> adapters = build_sources(Config.load())
    >>> topics = await adapters[0].fetch()
"""

from sources.base import SourceAdapter, SourceConfigError
from sources.devto import DevToSource
from sources.github import GitHubTrendingSource
from sources.google_trends import GoogleTrendsApiSource, GoogleTrendsRssSource
from sources.hacker_news import HackerNewsSource


def build_sources(config) -> list[SourceAdapter]:
    """Create the configured adapters in a stable order.

    Args:
        config: Application configuration

    Returns:
        Adapters in the order listed by config.enabled_sources

    Raises:
        SourceConfigError: On an unknown source name or Google Trends mode
    """
    timeout = config.source_timeout
    adapters: list[SourceAdapter] = []
    for name in config.enabled_sources:
        if name == "google":
            if config.google_trends_mode == "rss":
                adapters.append(GoogleTrendsRssSource(geo=config.google_trends_geo, timeout=timeout))
            elif config.google_trends_mode == "api":
                adapters.append(GoogleTrendsApiSource(geo=config.google_trends_geo, timeout=timeout))
            else:
                raise SourceConfigError(f"Unknown GOOGLE_TRENDS_MODE: {config.google_trends_mode}")
        elif name == "github":
            adapters.append(GitHubTrendingSource(
                created_after=config.github_created_after,
                token=config.github_token,
                timeout=timeout,
            ))
        elif name == "hackernews":
            adapters.append(HackerNewsSource(timeout=timeout))
        elif name == "devto":
            adapters.append(DevToSource(timeout=timeout))
        else:
            raise SourceConfigError(f"Unknown trend source: {name}")
    return adapters


__all__ = [
    "SourceAdapter",
    "SourceConfigError",
    "GoogleTrendsRssSource",
    "GoogleTrendsApiSource",
    "GitHubTrendingSource",
    "HackerNewsSource",
    "DevToSource",
    "build_sources",
]

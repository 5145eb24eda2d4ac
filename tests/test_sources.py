"""Tests for the trending-topic source adapters.

Network access is replaced by monkeypatching tools.http_client, which
every adapter calls through the module attribute.
"""

import json
from types import SimpleNamespace

import pytest

from conftest import FakeSource, make_topic
from sources import (
    DevToSource,
    GitHubTrendingSource,
    GoogleTrendsApiSource,
    GoogleTrendsRssSource,
    HackerNewsSource,
    SourceConfigError,
    build_sources,
)
from sources.base import SOURCE_LIMIT, parse_traffic, traffic_score
from sources.devto import reactions_score
from sources.github import star_score
from sources.hacker_news import points_score
from tools import http_client
from tools.http_client import HttpResult

SESSION = object()

RSS_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:ht="https://trends.google.com/trending/rss">
  <channel>
    <title>Daily Search Trends</title>
    <item>
      <title>Solar eclipse</title>
      <ht:approx_traffic>200K+</ht:approx_traffic>
      <ht:picture>https://img.example/eclipse.jpg</ht:picture>
      <ht:news_item>
        <ht:news_item_title>Eclipse path crosses North America</ht:news_item_title>
        <ht:news_item_url>https://news.example/eclipse</ht:news_item_url>
      </ht:news_item>
    </item>
    <item>
      <title>Quiet topic</title>
    </item>
  </channel>
</rss>
"""


def _api_body(searches: list[dict]) -> str:
    payload = {"default": {"trendingSearchesDays": [{"trendingSearches": searches}]}}
    return ")]}',\n" + json.dumps(payload)


def _stub_text(monkeypatch, body):
    calls = []

    async def fake_get_text(session, url, params=None, headers=None, timeout=20):
        calls.append({"url": url, "params": params})
        return body

    monkeypatch.setattr(http_client, "get_text", fake_get_text)
    return calls


def _stub_json(monkeypatch, responses: dict):
    """Serve get_json by URL; unknown URLs return None."""
    calls = []

    async def fake_get_json(session, url, params=None, headers=None, timeout=20):
        calls.append({"url": url, "params": params})
        return responses.get(url)

    monkeypatch.setattr(http_client, "get_json", fake_get_json)
    return calls


def _stub_fetch(monkeypatch, result):
    calls = []

    async def fake_fetch(session, url, params=None, headers=None, timeout=20, verify_ssl=True):
        calls.append({"url": url, "params": params, "headers": headers})
        return result

    monkeypatch.setattr(http_client, "fetch", fake_fetch)
    return calls


class TestScoring:
    """Traffic parsing and per-source score heuristics."""

    @pytest.mark.parametrize("value, expected", [
        ("200K+", 200_000),
        ("2M+", 2_000_000),
        ("1,000+", 1000),
        ("500+", 500),
        ("", 0),
        (None, 0),
        ("lots", 0),
    ])
    def test_parse_traffic(self, value, expected):
        assert parse_traffic(value) == expected

    def test_traffic_score_log_scale(self):
        assert traffic_score(0) == 70
        assert traffic_score(1000) == 85
        assert traffic_score(200_000) == 96
        assert traffic_score(10_000_000) == 100

    def test_star_score(self):
        assert star_score(0) == 60
        assert star_score(25_500) == 85
        assert star_score(90_000) == 100

    def test_points_score(self):
        assert points_score(0) == 0
        assert points_score(455) == 45
        assert points_score(5000) == 100

    def test_reactions_score(self):
        assert reactions_score(0) == 50
        assert reactions_score(123) == 62
        assert reactions_score(10_000) == 100


class TestAdapterPolicy:
    """SourceAdapter.fetch error handling and item cap."""

    @pytest.mark.asyncio
    async def test_ordinary_errors_become_empty_list(self):
        source = FakeSource(error=RuntimeError("parse failure"))
        assert await source.fetch(SESSION) == []
        assert source.calls == 1

    @pytest.mark.asyncio
    async def test_config_errors_propagate(self):
        source = FakeSource(error=SourceConfigError("bad token"))
        with pytest.raises(SourceConfigError):
            await source.fetch(SESSION)

    @pytest.mark.asyncio
    async def test_results_capped_at_limit(self):
        source = FakeSource(topics=[make_topic(f"t{i}") for i in range(25)])
        topics = await source.fetch(SESSION)
        assert len(topics) == SOURCE_LIMIT


class TestGoogleTrends:
    """RSS and JSON Google Trends adapters."""

    @pytest.mark.asyncio
    async def test_rss_maps_entries(self, monkeypatch):
        calls = _stub_text(monkeypatch, RSS_FEED)
        topics = await GoogleTrendsRssSource(geo="GB").fetch(SESSION)

        assert calls[0]["params"] == {"geo": "GB"}
        assert [t.title for t in topics] == ["Solar eclipse", "Quiet topic"]

        eclipse, quiet = topics
        assert eclipse.source == "Google Trends"
        assert eclipse.trend_score == 96
        assert eclipse.description == "200K+ searches"
        assert eclipse.image == "https://img.example/eclipse.jpg"
        assert eclipse.related_links == ["https://news.example/eclipse"]
        assert eclipse.keywords[0] == "Solar eclipse"

        assert quiet.trend_score == 70
        assert quiet.image is None
        assert quiet.related_links == []

    @pytest.mark.asyncio
    async def test_rss_unreachable_returns_empty(self, monkeypatch):
        _stub_text(monkeypatch, None)
        assert await GoogleTrendsRssSource().fetch(SESSION) == []

    @pytest.mark.asyncio
    async def test_api_strips_xssi_prefix(self, monkeypatch):
        body = _api_body([
            {
                "title": {"query": "World Cup"},
                "formattedTraffic": "2M+",
                "relatedQueries": [{"query": "world cup final"}],
                "articles": [{"url": "https://news.example/wc"}],
                "image": {"imageUrl": "https://img.example/wc.jpg"},
            },
            {"title": {"query": ""}},
        ])
        _stub_text(monkeypatch, body)

        topics = await GoogleTrendsApiSource().fetch(SESSION)

        assert len(topics) == 1
        topic = topics[0]
        assert topic.title == "World Cup"
        assert topic.trend_score == traffic_score(2_000_000)
        assert topic.keywords == ["World Cup", "world cup final"]
        assert topic.related_links == ["https://news.example/wc"]
        assert topic.image == "https://img.example/wc.jpg"

    @pytest.mark.asyncio
    async def test_api_malformed_body_returns_empty(self, monkeypatch):
        _stub_text(monkeypatch, ")]}',\n{not json")
        assert await GoogleTrendsApiSource().fetch(SESSION) == []


class TestGitHub:
    """GitHub repository search adapter."""

    REPO = {
        "name": "fastlib",
        "description": "A fast library",
        "language": "Rust",
        "stargazers_count": 12_000,
        "html_url": "https://github.com/acme/fastlib",
        "homepage": "",
        "owner": {"avatar_url": "https://avatars.example/acme.png"},
    }

    @pytest.mark.asyncio
    async def test_maps_repositories(self, monkeypatch):
        body = json.dumps({"items": [self.REPO, {**self.REPO, "name": "bare", "description": None}]})
        calls = _stub_fetch(monkeypatch, HttpResult(url="u", status=200, text=body))

        topics = await GitHubTrendingSource(created_after="2025-01-01").fetch(SESSION)

        assert calls[0]["params"]["q"] == "created:>2025-01-01"
        assert calls[0]["params"]["sort"] == "stars"
        assert "Authorization" not in calls[0]["headers"]

        first, second = topics
        assert first.title == "fastlib: A fast library"
        assert first.trend_score == 72
        assert first.category == "Rust"
        assert first.related_links == ["https://github.com/acme/fastlib"]
        assert first.image == "https://avatars.example/acme.png"
        assert second.title == "bare: Trending Repository"

    @pytest.mark.asyncio
    async def test_token_sent_as_bearer(self, monkeypatch):
        calls = _stub_fetch(monkeypatch, HttpResult(url="u", status=200, text='{"items": []}'))
        await GitHubTrendingSource(created_after="2025-01-01", token="ghp_x").fetch(SESSION)
        assert calls[0]["headers"]["Authorization"] == "Bearer ghp_x"

    @pytest.mark.asyncio
    async def test_rejected_token_raises(self, monkeypatch):
        _stub_fetch(monkeypatch, HttpResult(url="u", status=401, text=""))
        source = GitHubTrendingSource(created_after="2025-01-01", token="expired")
        with pytest.raises(SourceConfigError):
            await source.fetch(SESSION)

    @pytest.mark.asyncio
    async def test_unauthenticated_401_is_ordinary_failure(self, monkeypatch):
        _stub_fetch(monkeypatch, HttpResult(url="u", status=401, text=""))
        assert await GitHubTrendingSource(created_after="2025-01-01").fetch(SESSION) == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [403, 429, 500])
    async def test_rate_limit_and_server_errors_return_empty(self, monkeypatch, status):
        _stub_fetch(monkeypatch, HttpResult(url="u", status=status, text=""))
        assert await GitHubTrendingSource(created_after="2025-01-01").fetch(SESSION) == []

    @pytest.mark.asyncio
    async def test_transport_error_returns_empty(self, monkeypatch):
        _stub_fetch(monkeypatch, None)
        assert await GitHubTrendingSource(created_after="2025-01-01").fetch(SESSION) == []


class TestHackerNews:
    """Hacker News top stories adapter."""

    @pytest.mark.asyncio
    async def test_fetches_items_and_skips_bad_ones(self, monkeypatch):
        base = "https://hacker-news.firebaseio.com/v0"
        _stub_json(monkeypatch, {
            f"{base}/topstories.json": [1, 2, 3, 4],
            f"{base}/item/1.json": {"id": 1, "title": "Show HN: Tiny compiler", "score": 420,
                                    "descendants": 37, "url": "https://tiny.example"},
            f"{base}/item/2.json": {"id": 2, "title": "Gone", "deleted": True},
            f"{base}/item/3.json": None,
            f"{base}/item/4.json": {"id": 4, "title": "Ask HN: Favorite editor?", "score": 90},
        })

        topics = await HackerNewsSource().fetch(SESSION)

        assert [t.title for t in topics] == ["Show HN: Tiny compiler", "Ask HN: Favorite editor?"]
        story = topics[0]
        assert story.source == "Hacker News"
        assert story.trend_score == 42
        assert story.description.startswith("420 points and 37 comments")
        assert story.related_links == [
            "https://tiny.example",
            "https://news.ycombinator.com/item?id=1",
        ]
        assert topics[1].related_links == ["https://news.ycombinator.com/item?id=4"]

    @pytest.mark.asyncio
    async def test_only_first_limit_ids_fetched(self, monkeypatch):
        base = "https://hacker-news.firebaseio.com/v0"
        calls = _stub_json(monkeypatch, {f"{base}/topstories.json": list(range(1, 50))})
        assert await HackerNewsSource().fetch(SESSION) == []
        assert len(calls) == 1 + SOURCE_LIMIT

    @pytest.mark.asyncio
    async def test_unreachable_index_returns_empty(self, monkeypatch):
        _stub_json(monkeypatch, {})
        assert await HackerNewsSource().fetch(SESSION) == []


class TestDevTo:
    """Dev.to articles adapter."""

    @pytest.mark.asyncio
    async def test_maps_articles(self, monkeypatch):
        calls = _stub_json(monkeypatch, {"https://dev.to/api/articles": [
            {"title": "Hooks in depth", "public_reactions_count": 310,
             "tag_list": ["react", "javascript"], "url": "https://dev.to/a/hooks",
             "cover_image": "https://img.example/hooks.png", "description": "Deep dive"},
            {"title": "CSS tricks", "public_reactions_count": 5, "tag_list": "css, webdev"},
            {"title": ""},
        ]})

        topics = await DevToSource().fetch(SESSION)

        assert calls[0]["params"] == {"top": "1", "per_page": str(SOURCE_LIMIT)}
        assert len(topics) == 2
        hooks, css = topics
        assert hooks.trend_score == 81
        assert hooks.keywords == ["react", "javascript"]
        assert hooks.image == "https://img.example/hooks.png"
        assert hooks.category == "Development"
        assert css.keywords == ["css", "webdev"]
        assert css.description == "Popular article: CSS tricks"


class TestBuildSources:
    """Adapter construction from configuration."""

    def _config(self, **overrides):
        values = dict(
            enabled_sources=["google", "github", "hackernews", "devto"],
            google_trends_mode="rss",
            google_trends_geo="US",
            github_created_after="2025-01-01",
            github_token="",
            source_timeout=5,
        )
        values.update(overrides)
        return SimpleNamespace(**values)

    def test_builds_in_configured_order(self):
        adapters = build_sources(self._config(enabled_sources=["devto", "google"]))
        assert [type(a) for a in adapters] == [DevToSource, GoogleTrendsRssSource]
        assert all(a.timeout == 5 for a in adapters)

    def test_api_mode(self):
        adapters = build_sources(self._config(enabled_sources=["google"], google_trends_mode="api"))
        assert isinstance(adapters[0], GoogleTrendsApiSource)

    def test_unknown_source_raises(self):
        with pytest.raises(SourceConfigError):
            build_sources(self._config(enabled_sources=["reddit"]))

    def test_unknown_mode_raises(self):
        with pytest.raises(SourceConfigError):
            build_sources(self._config(google_trends_mode="browser"))

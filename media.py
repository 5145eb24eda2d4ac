"""Media enrichment for trending topics.

Resolves one image, videos and tweets for a topic title through a tiered
chain per media kind:

    image:  Unsplash search API (keyed) -> category-mapped Unsplash source URL
    videos: YouTube Data API (keyed)    -> curated video by keyword -> generic video
    tweets: Twitter recent search (keyed) -> curated tweet by keyword -> generic tweet

Keyed tiers are skipped when the key is missing or set to the 'demo-key'
placeholder. A provider error, non-200 status or empty result falls
through to the next tier. Each provider is called at most once per
resolve; there are no retries. The fallback tiers are pure functions of
the title, so the same title always yields the same media.

Example:
    >>> enricher = MediaEnricher.from_config(config)
    >>> media = await enricher.resolve("React 19 Server Actions")
    >>> media.image
    'https://source.unsplash.com/800x400/?web-development'
"""

import asyncio
import functools
import inspect
import logging
from typing import Any, Callable

import aiohttp

from config import has_key
from models.topic import MediaContent, TrendingTopic
from tools import http_client
from tools.utils import relevant_tokens, tokenize

logger = logging.getLogger(__name__)

UNSPLASH_SEARCH_URL = "https://api.unsplash.com/search/photos"
UNSPLASH_SOURCE_URL = "https://source.unsplash.com/800x400/?{category}"
YOUTUBE_SEARCH_URL = "https://www.googleapis.com/youtube/v3/search"
YOUTUBE_EMBED_URL = "https://www.youtube.com/embed/{video_id}"
TWITTER_SEARCH_URL = "https://api.twitter.com/2/tweets/search/recent"
TWEET_URL = "https://twitter.com/i/status/{tweet_id}"

# Search-term filter for media queries
MEDIA_STOPWORDS = frozenset({"the", "and", "for", "with", "how", "what"})

# First matching keyword set wins
IMAGE_CATEGORIES: list[tuple[frozenset[str], str]] = [
    (frozenset({"react", "angular", "vue", "frontend", "web"}), "web-development"),
    (frozenset({"ai", "machine", "learning", "artificial"}), "artificial-intelligence"),
    (frozenset({"data", "analytics", "science"}), "data-science"),
    (frozenset({"programming", "coding", "code"}), "computer-programming"),
    (frozenset({"software", "development", "dev"}), "software-development"),
]
DEFAULT_IMAGE_CATEGORY = "technology"

CURATED_VIDEOS: list[tuple[frozenset[str], str]] = [
    (frozenset({"react", "angular", "vue"}), "w7ejDZ8SWv8"),
    (frozenset({"javascript", "js"}), "PkZNo7MFNFg"),
    (frozenset({"python"}), "rfscVS0vtbw"),
    (frozenset({"ai", "artificial", "intelligence"}), "aircAruvnKk"),
    (frozenset({"web", "development", "html", "css"}), "G3e-cpL7ofc"),
]
GENERIC_VIDEO = "ScMzIvxBSi4"

CURATED_TWEETS: list[tuple[frozenset[str], str]] = [
    (frozenset({"react", "javascript", "frontend"}), "reactjs"),
    (frozenset({"typescript", "ts"}), "typescript"),
    (frozenset({"nextjs", "next", "vercel"}), "vercel"),
    (frozenset({"github", "git", "open", "source"}), "github"),
    (frozenset({"ai", "openai", "chatgpt"}), "openai"),
    (frozenset({"google", "chrome", "dev"}), "googlechrome"),
]
GENERIC_TWEET_ACCOUNT = "techcrunch"
CURATED_TWEET_ID = "1735023456789012345"


class _NotAvailable:
    """Sentinel returned by a tier that has nothing to offer."""

    def __repr__(self) -> str:
        return "NOT_AVAILABLE"


NOT_AVAILABLE = _NotAvailable()

Tier = Callable[[], Any]


async def resolve_chain(tiers: list[Tier], kind: str = "media") -> Any:
    """Return the first available value from a list of tiers.

    Each tier is a zero-argument callable returning a value, NOT_AVAILABLE,
    or an awaitable of either. An exception in a tier is logged and treated
    as NOT_AVAILABLE.

    Returns:
        The first available value, or NOT_AVAILABLE if every tier declined
    """
    for tier in tiers:
        name = getattr(getattr(tier, "func", tier), "__name__", repr(tier))
        try:
            value = tier()
            if inspect.isawaitable(value):
                value = await value
        except Exception as e:
            logger.warning("Media tier failed | kind=%s tier=%s error=%s", kind, name, e)
            continue
        if value is not NOT_AVAILABLE:
            logger.debug("Media resolved | kind=%s tier=%s", kind, name)
            return value
    return NOT_AVAILABLE


def _first_match(tokens: set[str], table: list[tuple[frozenset[str], str]], default: str) -> str:
    for keywords, value in table:
        if tokens & keywords:
            return value
    return default


def image_category(title: str) -> str:
    """Map a title to an Unsplash category slug."""
    return _first_match(set(tokenize(title)), IMAGE_CATEGORIES, DEFAULT_IMAGE_CATEGORY)


def fallback_image(title: str) -> str:
    return UNSPLASH_SOURCE_URL.format(category=image_category(title))


def curated_videos(title: str) -> list[str]:
    video_id = _first_match(set(tokenize(title)), CURATED_VIDEOS, GENERIC_VIDEO)
    return [YOUTUBE_EMBED_URL.format(video_id=video_id)]


def curated_tweets(title: str) -> list[str]:
    account = _first_match(set(tokenize(title)), CURATED_TWEETS, GENERIC_TWEET_ACCOUNT)
    return [f"https://twitter.com/{account}/status/{CURATED_TWEET_ID}"]


def image_search_terms(title: str) -> str:
    """Unsplash query: two relevant words plus 'technology'.

    Example:
        >>> image_search_terms("How Rust Macros Work")
        'rust macros technology'
    """
    words = relevant_tokens(title, MEDIA_STOPWORDS)
    if not words:
        return "technology programming"
    return f"{' '.join(words[:2])} technology"


def video_search_terms(title: str) -> str:
    return f"{' '.join(relevant_tokens(title, MEDIA_STOPWORDS)[:3])} tutorial explanation".strip()


def tweet_search_terms(title: str) -> str:
    return f"{' '.join(relevant_tokens(title, MEDIA_STOPWORDS)[:2])} -is:retweet lang:en".strip()


class MediaEnricher:
    """Resolves representative media for topic titles.

    Attributes:
        unsplash_key: Unsplash access key ('' or 'demo-key' disables the tier)
        youtube_key: YouTube Data API key
        twitter_token: Twitter API v2 bearer token
        timeout: Per-request timeout in seconds
    """

    def __init__(
        self,
        unsplash_key: str = "",
        youtube_key: str = "",
        twitter_token: str = "",
        timeout: int = 10,
    ):
        self.unsplash_key = unsplash_key
        self.youtube_key = youtube_key
        self.twitter_token = twitter_token
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: Any) -> "MediaEnricher":
        return cls(
            unsplash_key=config.unsplash_access_key,
            youtube_key=config.youtube_api_key,
            twitter_token=config.twitter_bearer_token,
            timeout=config.source_timeout,
        )

    # --- keyed provider tiers ---

    async def _unsplash_image(self, session: aiohttp.ClientSession, title: str) -> Any:
        if not has_key(self.unsplash_key):
            return NOT_AVAILABLE
        data = await http_client.get_json(
            session,
            UNSPLASH_SEARCH_URL,
            params={"query": image_search_terms(title), "per_page": "1", "orientation": "landscape"},
            headers={"Authorization": f"Client-ID {self.unsplash_key}"},
            timeout=self.timeout,
        )
        results = (data or {}).get("results") or []
        if not results:
            return NOT_AVAILABLE
        return results[0]["urls"]["regular"]

    async def _youtube_videos(self, session: aiohttp.ClientSession, title: str) -> Any:
        if not has_key(self.youtube_key):
            return NOT_AVAILABLE
        data = await http_client.get_json(
            session,
            YOUTUBE_SEARCH_URL,
            params={
                "part": "snippet",
                "q": video_search_terms(title),
                "type": "video",
                "maxResults": "1",
                "key": self.youtube_key,
                "videoDuration": "medium",
                "relevanceLanguage": "en",
            },
            timeout=self.timeout,
        )
        items = (data or {}).get("items") or []
        if not items:
            return NOT_AVAILABLE
        return [YOUTUBE_EMBED_URL.format(video_id=items[0]["id"]["videoId"])]

    async def _twitter_tweets(self, session: aiohttp.ClientSession, title: str) -> Any:
        if not has_key(self.twitter_token):
            return NOT_AVAILABLE
        data = await http_client.get_json(
            session,
            TWITTER_SEARCH_URL,
            params={"query": tweet_search_terms(title), "max_results": "10"},
            headers={"Authorization": f"Bearer {self.twitter_token}"},
            timeout=self.timeout,
        )
        tweets = (data or {}).get("data") or []
        if not tweets:
            return NOT_AVAILABLE
        return [TWEET_URL.format(tweet_id=tweets[0]["id"])]

    # --- public API ---

    async def resolve(self, title: str, session: aiohttp.ClientSession | None = None) -> MediaContent:
        """Resolve media for a topic title. Never raises.

        Args:
            title: Topic title
            session: Shared client session; a private one is created if None

        Returns:
            MediaContent with an image, at least one video and one tweet
        """
        if session is None:
            async with aiohttp.ClientSession() as own_session:
                return await self.resolve(title, own_session)

        # The fallback tiers cannot fail, so each chain always yields a value
        image, videos, tweets = await asyncio.gather(
            resolve_chain([
                functools.partial(self._unsplash_image, session, title),
                functools.partial(fallback_image, title),
            ], kind="image"),
            resolve_chain([
                functools.partial(self._youtube_videos, session, title),
                functools.partial(curated_videos, title),
            ], kind="videos"),
            resolve_chain([
                functools.partial(self._twitter_tweets, session, title),
                functools.partial(curated_tweets, title),
            ], kind="tweets"),
        )
        return MediaContent(image=image, videos=videos, tweets=tweets)

    async def enrich(
        self,
        topics: list[TrendingTopic],
        session: aiohttp.ClientSession | None = None,
    ) -> list[TrendingTopic]:
        """Fill missing media on a batch of topics concurrently.

        Topics that already have an image, videos and tweets are returned
        untouched. Order and ids are preserved.
        """
        if session is None:
            async with aiohttp.ClientSession() as own_session:
                return await self.enrich(topics, own_session)

        async def enrich_one(topic: TrendingTopic) -> TrendingTopic:
            if topic.has_media:
                return topic
            return topic.with_media(await self.resolve(topic.title, session))

        enriched = await asyncio.gather(*(enrich_one(t) for t in topics))
        logger.debug("Media enriched | topics=%d", len(enriched))
        return list(enriched)

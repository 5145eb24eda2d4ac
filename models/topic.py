"""Trending topic data model.

This module defines the canonical TrendingTopic that flows through the
pipeline: source adapters create them, the aggregator ranks them, the
gateway caches and persists them and the generation bot consumes them.

Scoring:
    trend_score is an integer 0-100 computed by each adapter with its own
    heuristic (stars, traffic, points...). Scores are only comparable for
    ranking inside one aggregation batch, never across runs.

Serialization:
    Field names are snake_case in Python. JSON output uses the camelCase
    aliases (trendScore, relatedLinks) via model_dump(by_alias=True).

Immutability:
    Topics are frozen. Cached batches and the built-in fallbacks are shared
    between readers, so updates go through model_copy(update=...).
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Display caps
MAX_TITLE_LENGTH = 80
MAX_KEYWORDS = 5


class MediaContent(BaseModel):
    """Representative media for a topic.

    Attributes:
        image: Image URL (None if unresolved)
        videos: Video embed URLs
        tweets: Social post URLs
    """

    image: str | None = Field(default=None, description="Representative image URL")
    videos: list[str] = Field(default_factory=list, description="Video embed URLs")
    tweets: list[str] = Field(default_factory=list, description="Social post URLs")


class TrendingTopic(BaseModel):
    """A single trending topic from one source.

    Example:
        >>> topic = TrendingTopic(
        ...     title="React 19 Server Actions",
        ...     source="Google Trends",
        ...     trend_score=95,
        ...     keywords=["React", "JavaScript"],
        ... )
        >>> topic.model_dump(by_alias=True)["trendScore"]
        95
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(default="", description="Batch-local id, reassigned by the aggregator")
    title: str = Field(description="Headline, capped for display")
    source: str = Field(description="Origin adapter name")
    trend_score: int = Field(default=0, alias="trendScore", description="0-100 ranking score")
    category: str = Field(default="Technology", description="Adapter's best-guess category")
    description: str = Field(default="", description="Short summary")
    keywords: list[str] = Field(default_factory=list, description="Search/dedup hints")
    image: str | None = Field(default=None, description="Representative image URL")
    videos: list[str] = Field(default_factory=list, description="Video embed URLs")
    tweets: list[str] = Field(default_factory=list, description="Social post URLs")
    related_links: list[str] = Field(default_factory=list, alias="relatedLinks")

    @field_validator("title")
    @classmethod
    def _cap_title(cls, v: str) -> str:
        return v.strip()[:MAX_TITLE_LENGTH]

    @field_validator("trend_score", mode="before")
    @classmethod
    def _clamp_score(cls, v) -> int:
        try:
            score = int(v)
        except (TypeError, ValueError):
            return 0
        return max(0, min(100, score))

    @field_validator("keywords")
    @classmethod
    def _normalize_keywords(cls, v: list[str]) -> list[str]:
        # Drop blanks and case-insensitive duplicates, preserving order
        seen: set[str] = set()
        keywords = []
        for keyword in v:
            keyword = keyword.strip()
            if keyword and keyword.lower() not in seen:
                seen.add(keyword.lower())
                keywords.append(keyword)
        return keywords[:MAX_KEYWORDS]

    @field_validator("videos", "tweets", "related_links")
    @classmethod
    def _drop_empty_links(cls, v: list[str]) -> list[str]:
        return [link for link in v if link]

    @property
    def has_media(self) -> bool:
        """True if image, videos and tweets are all populated."""
        return bool(self.image and self.videos and self.tweets)

    def media(self) -> MediaContent:
        """Return the topic's media as a MediaContent."""
        return MediaContent(image=self.image, videos=list(self.videos), tweets=list(self.tweets))

    def with_media(self, media: MediaContent) -> "TrendingTopic":
        """Return a copy with missing media filled from `media`.

        Values the source adapter already supplied are kept.
        """
        return self.model_copy(update={
            "image": self.image or media.image,
            "videos": self.videos or list(media.videos),
            "tweets": self.tweets or list(media.tweets),
        })

    def __str__(self) -> str:
        """Human-readable representation for logging."""
        return f"TrendingTopic({self.source}, {self.trend_score}, '{self.title[:50]}')"

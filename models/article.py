"""Article models for generated blog content.

GeneratedArticle:
    Structured output of the writer agent (the fields the model fills in).

Article:
    The stored blog article, built from a GeneratedArticle plus derived
    fields (slug, read time, timestamps) and the topic back-reference.

GenerationResult:
    Outcome of one call to the generation function used by the bot.
"""

from datetime import datetime, timezone
from typing import Awaitable, Callable

from pydantic import BaseModel, Field

from models.topic import MediaContent


class GeneratedArticle(BaseModel):
    """Article fields produced by the writer agent."""

    title: str = Field(description="Article title (60-80 characters)")
    excerpt: str = Field(description="Summary (150-200 characters)")
    content: str = Field(description="Full article body as raw semantic HTML")
    tags: list[str] = Field(default_factory=list, description="3-5 lowercase tags")
    category: str = Field(default="Technology", description="Article category")
    meta_title: str = Field(default="", description="SEO meta title")
    meta_description: str = Field(default="", description="SEO meta description (150-160 characters)")


class Article(BaseModel):
    """A persisted blog article.

    Attributes:
        id: Database row id (None before insert)
        slug: URL slug, unique across articles
        generated_from_topic: Title of the trending topic this was generated
            from; used by the bot to avoid generating the same topic twice
    """

    id: int | None = None
    title: str
    slug: str
    excerpt: str = ""
    content: str = ""
    author: str = "AI Assistant"
    tags: list[str] = Field(default_factory=list)
    category: str = "Technology"
    published_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    read_time: int = 1
    views: int = 0
    featured: bool = False
    meta_title: str = ""
    meta_description: str = ""
    meta_keywords: list[str] = Field(default_factory=list)
    media: MediaContent = Field(default_factory=MediaContent)
    generated_from_topic: str | None = None


class GenerationResult(BaseModel):
    """Result of one article generation call."""

    success: bool
    article: Article | None = None
    error: str | None = None


# Signature of the generation function the bot calls:
# generate(topic, description=None, keywords=None, media=None) -> GenerationResult
GenerateFn = Callable[..., Awaitable[GenerationResult]]

"""Pydantic models and dataclasses for the TrendWise pipeline.

TrendingTopic / MediaContent:
    A ranked trending topic and its representative media.

Article / GeneratedArticle / GenerationResult:
    Stored blog article, the writer agent's structured output, and the
    outcome of one generation call.

BotState / AutoGenerationConfig / BotRunStatistics:
    Generation bot lifecycle, settings and per-cycle statistics.

Example:
    >>> from models import TrendingTopic
    >>> topic = TrendingTopic(title="Rust 2.0", source="Hacker News", trend_score=91)
"""

from models.article import Article, GeneratedArticle, GenerationResult
from models.bot import AutoGenerationConfig, BotRunStatistics, BotState
from models.topic import MediaContent, TrendingTopic

__all__ = [
    "TrendingTopic",
    "MediaContent",
    "Article",
    "GeneratedArticle",
    "GenerationResult",
    "BotState",
    "AutoGenerationConfig",
    "BotRunStatistics",
]

"""PydanticAI agents for TrendWise.

ArticleWriterAgent:
    Writes an SEO-ready HTML blog article for a trending topic.

make_generator:
    Binds a writer and the database into the generate() coroutine used by
    the generation bot.

Example:
    >>> from agents import ArticleWriterAgent, make_generator
    >>> generate = make_generator(ArticleWriterAgent(config), db)
    >>> result = await generate("Rust 2.0", keywords=["rust"])
"""

from agents.writer import ArticleWriterAgent, GenerationError, build_article, make_generator

__all__ = [
    "ArticleWriterAgent",
    "GenerationError",
    "make_generator",
    "build_article",
]

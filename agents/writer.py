"""Article writer agent and the generation function used by the bot.

ArticleWriterAgent wraps a PydanticAI agent that turns a trending topic
into a structured GeneratedArticle (title, excerpt, HTML content, tags,
SEO fields). make_generator() binds a writer to the database and returns
the `generate(topic, ...)` coroutine the bot calls; it builds the stored
Article (slug, read time, back-reference, media) and never raises.

Model Configuration:
    WRITER_MODEL takes any PydanticAI model string. Local OpenAI-compatible
    servers use 'openai:<model>@<base_url>' and prompted (non-tool) output.
"""

import html
import logging
import math
import re

from openai import AsyncOpenAI
from pydantic_ai import Agent, PromptedOutput
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.profiles.openai import OpenAIModelProfile
from pydantic_ai.providers.openai import OpenAIProvider

from config import Config
from models.article import Article, GeneratedArticle, GenerateFn, GenerationResult
from models.topic import MediaContent
from tools.utils import slugify

logger = logging.getLogger(__name__)

WORDS_PER_MINUTE = 200

WRITER_PROMPT = """You are a technical blog writer covering programming and technology.

Write a complete article about the trending topic you are given.

Requirements:
- title: 60-80 characters
- excerpt: 150-200 characters
- content: raw semantic HTML (h1, h2, h3, p, ul, li, strong); never escaped, never markdown
- tags: 3-5 lowercase tags
- category: a short category name
- meta_title and meta_description (150-160 characters) for search engines

Do not invent quotes, statistics or sources."""

_TAG_PATTERN = re.compile(r"<[^>]*>")
_FENCE_PATTERN = re.compile(r"^```(?:html)?\s*|\s*```$")


class GenerationError(Exception):
    """Raised when the model output cannot be used as an article."""
    pass


def read_time(content: str) -> int:
    """Minutes to read HTML content at 200 words per minute (at least 1)."""
    words = len(_TAG_PATTERN.sub(" ", content).split())
    return max(1, math.ceil(words / WORDS_PER_MINUTE))


def clean_content(content: str) -> str:
    """Undo entity escaping and code fences some models wrap HTML in.

    Raises:
        GenerationError: If the result contains no HTML markup
    """
    content = _FENCE_PATTERN.sub("", content.strip())
    content = html.unescape(content)
    if "<" not in content:
        raise GenerationError("Generated content is not HTML")
    return content


def _parse_local_model(model_str: str) -> tuple[str, str] | None:
    """Parse 'openai:<model>@<base_url>' into (model, base_url), else None."""
    if model_str.startswith("openai:") and "@" in model_str:
        model_name, base_url = model_str[len("openai:"):].split("@", 1)
        return model_name, base_url
    return None


def _create_model(model_str: str):
    """Create a PydanticAI model for local servers, or pass the string through."""
    parsed = _parse_local_model(model_str)
    if parsed:
        model_name, base_url = parsed
        logger.info("Using local model | model=%s base_url=%s", model_name, base_url)
        client = AsyncOpenAI(base_url=base_url, api_key="local-model")
        return OpenAIChatModel(
            model_name,
            provider=OpenAIProvider(openai_client=client),
            profile=OpenAIModelProfile(supports_json_object_output=False),
        )
    return model_str


def _build_message(topic: str, description: str | None, keywords: list[str] | None) -> str:
    lines = [f"Topic: {topic}"]
    if description:
        lines.append(f"Context: {description}")
    if keywords:
        lines.append(f"Keywords: {', '.join(keywords)}")
    return "\n".join(lines)


class ArticleWriterAgent:
    """Writes blog articles for trending topics.

    Example:
        >>> writer = ArticleWriterAgent(config)
        >>> draft = await writer.write("Bun 2.0", keywords=["javascript", "runtime"])
    """

    def __init__(self, config: Config):
        self.config = config
        is_local = _parse_local_model(config.writer_model) is not None
        self._agent = Agent(
            _create_model(config.writer_model),
            output_type=PromptedOutput(GeneratedArticle) if is_local else GeneratedArticle,
            system_prompt=WRITER_PROMPT,
            retries=2,
        )

    async def write(
        self,
        topic: str,
        description: str | None = None,
        keywords: list[str] | None = None,
    ) -> GeneratedArticle:
        """Generate an article draft.

        Raises:
            GenerationError: If the draft content is unusable
        """
        result = await self._agent.run(_build_message(topic, description, keywords))
        usage = result.usage()
        logger.info(
            "Article drafted | topic=%s requests=%d input_tokens=%d output_tokens=%d",
            topic[:50],
            usage.requests,
            usage.input_tokens or 0,
            usage.output_tokens or 0,
        )
        draft = result.output
        return draft.model_copy(update={"content": clean_content(draft.content)})


def build_article(
    draft: GeneratedArticle,
    topic: str,
    author: str,
    media: MediaContent | None = None,
) -> Article:
    """Turn a writer draft into a storable Article linked to its topic."""
    return Article(
        title=draft.title,
        slug=slugify(draft.title) or slugify(topic) or "article",
        excerpt=draft.excerpt,
        content=draft.content,
        author=author,
        tags=draft.tags,
        category=draft.category,
        read_time=read_time(draft.content),
        meta_title=draft.meta_title or draft.title,
        meta_description=draft.meta_description or draft.excerpt,
        meta_keywords=draft.tags,
        media=media or MediaContent(),
        generated_from_topic=topic,
    )


def make_generator(writer: ArticleWriterAgent, db, author: str = "AI Assistant") -> GenerateFn:
    """Bind a writer and database into the bot's generation function.

    The returned coroutine never raises; failures come back as
    GenerationResult(success=False, error=...).
    """
    async def generate(
        topic: str,
        description: str | None = None,
        keywords: list[str] | None = None,
        media: MediaContent | None = None,
    ) -> GenerationResult:
        try:
            draft = await writer.write(topic, description, keywords)
            article = db.insert_article(build_article(draft, topic, author, media))
        except Exception as e:
            logger.error("Article generation failed | topic=%s error=%s", topic[:50], e)
            return GenerationResult(success=False, error=str(e))

        logger.info("Article generated | slug=%s read_time=%d", article.slug, article.read_time)
        return GenerationResult(success=True, article=article)

    return generate

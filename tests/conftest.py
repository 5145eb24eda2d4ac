"""Shared pytest fixtures and fakes for the TrendWise test suite.

Nothing here touches the network: sources, the aggregator and the
generation function are replaced by in-memory fakes, and HTTP-backed
code is tested by monkeypatching tools.http_client.
"""

import asyncio
import logging
from collections.abc import Iterator

import pytest

from database import Database
from models.article import Article, GenerationResult
from models.topic import MediaContent, TrendingTopic
from sources.base import SourceAdapter
from tools.utils import slugify


def make_topic(title: str = "Topic", score: int = 50, source: str = "Test", **kwargs) -> TrendingTopic:
    """Build a TrendingTopic with sensible defaults."""
    return TrendingTopic(title=title, source=source, trend_score=score, **kwargs)


class FakeSource(SourceAdapter):
    """Source adapter returning fixed topics, or raising inside _fetch."""

    def __init__(self, topics=None, error: Exception | None = None, name: str = "fake"):
        super().__init__()
        self.name = name
        self.topics = list(topics or [])
        self.error = error
        self.calls = 0

    async def _fetch(self, session):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.topics)


class RaisingSource(FakeSource):
    """Source whose public fetch() raises, bypassing the adapter error policy."""

    async def fetch(self, session=None):
        self.calls += 1
        raise self.error or RuntimeError("boom")


class FakeAggregator:
    """Aggregator double with a call counter.

    Args:
        batch: Topics returned by every aggregate() call
        error: Raised from aggregate() if set
        yields: Event-loop yields before returning, to widen race windows
    """

    def __init__(self, batch=None, error: Exception | None = None, yields: int = 0):
        self.batch = list(batch or [])
        self.error = error
        self.yields = yields
        self.calls = 0

    async def aggregate(self) -> list[TrendingTopic]:
        self.calls += 1
        for _ in range(self.yields):
            await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        return list(self.batch)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Sleep double that records durations.

    Durations >= block_at never return (until cancelled), which parks the
    bot's timer loop; anything shorter just yields to the event loop.
    """

    def __init__(self, block_at: float | None = None):
        self.calls: list[float] = []
        self.block_at = block_at

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        if self.block_at is not None and seconds >= self.block_at:
            await asyncio.Event().wait()
        await asyncio.sleep(0)


class FakeGenerator:
    """Generation function double.

    Args:
        db: If set, successful calls insert an article linked to the topic
        fail: Topic titles that return success=False
        raise_for: Topic titles that raise
        gate: If set, every call waits on this event before returning
    """

    def __init__(self, db: Database | None = None, fail=(), raise_for=(), gate: asyncio.Event | None = None):
        self.db = db
        self.fail = set(fail)
        self.raise_for = set(raise_for)
        self.gate = gate
        self.calls: list[dict] = []

    async def __call__(self, topic, description=None, keywords=None, media=None) -> GenerationResult:
        self.calls.append({"topic": topic, "description": description, "keywords": keywords, "media": media})
        if self.gate is not None:
            await self.gate.wait()
        if topic in self.raise_for:
            raise RuntimeError(f"generation exploded for {topic}")
        if topic in self.fail:
            return GenerationResult(success=False, error="model refused")

        article = Article(
            title=f"All About {topic}",
            slug=slugify(f"all about {topic}"),
            generated_from_topic=topic,
            media=media or MediaContent(),
        )
        if self.db is not None:
            article = self.db.insert_article(article)
        return GenerationResult(success=True, article=article)

    @property
    def topics(self) -> list[str]:
        return [c["topic"] for c in self.calls]


@pytest.fixture
def db(tmp_path) -> Iterator[Database]:
    """Fresh SQLite database in a temp directory."""
    database = Database(tmp_path / "test.db")
    yield database
    database.close()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def restore_root_logger():
    """Undo handler changes made by setup_logging()."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)

"""Tests for SQLite storage."""

from datetime import datetime, timedelta, timezone

from conftest import make_topic
from models.article import Article
from models.bot import BotRunStatistics
from models.topic import MediaContent


def _article(title: str = "Hello World", slug: str = "hello-world", **kwargs) -> Article:
    return Article(title=title, slug=slug, **kwargs)


class TestArticles:
    """Article insert and lookup."""

    def test_insert_assigns_id_and_round_trips_fields(self, db):
        stored = db.insert_article(_article(
            tags=["python", "asyncio"],
            meta_keywords=["python"],
            media=MediaContent(image="https://img", videos=["https://v"]),
            generated_from_topic="Python 3.14",
            featured=True,
        ))
        assert stored.id is not None

        found = db.find_article(slug="hello-world")
        assert found.id == stored.id
        assert found.tags == ["python", "asyncio"]
        assert found.meta_keywords == ["python"]
        assert found.media.videos == ["https://v"]
        assert found.generated_from_topic == "Python 3.14"
        assert found.featured is True

    def test_duplicate_slug_gets_suffix(self, db):
        first = db.insert_article(_article())
        second = db.insert_article(_article())
        third = db.insert_article(_article())
        assert [first.slug, second.slug, third.slug] == ["hello-world", "hello-world-2", "hello-world-3"]

    def test_find_requires_a_criterion(self, db):
        db.insert_article(_article())
        assert db.find_article() is None

    def test_find_by_title_fragment_is_case_insensitive(self, db):
        db.insert_article(_article(title="Understanding React Server Components", slug="rsc"))
        assert db.find_article(title_prefix="react server").slug == "rsc"
        assert db.find_article(title_prefix="vue") is None

    def test_find_escapes_like_wildcards(self, db):
        db.insert_article(_article(title="Growth of 50 percent", slug="growth"))
        assert db.find_article(title_prefix="50%") is None
        assert db.find_article(title_prefix="of_50") is None

        db.insert_article(_article(title="Up 50% this year", slug="up"))
        assert db.find_article(title_prefix="50%").slug == "up"

    def test_find_matches_any_criterion(self, db):
        db.insert_article(_article(title="Unrelated", slug="x", generated_from_topic="Rust 2.0"))
        found = db.find_article(slug="missing", title_prefix="nothing", generated_from="Rust 2.0")
        assert found.slug == "x"

    def test_list_newest_first(self, db):
        now = datetime.now(timezone.utc)
        db.insert_article(_article(title="Old", slug="old", published_at=now - timedelta(days=1)))
        db.insert_article(_article(title="New", slug="new", published_at=now))
        assert [a.slug for a in db.list_articles()] == ["new", "old"]
        assert [a.slug for a in db.list_articles(limit=1, offset=1)] == ["old"]

    def test_count_generated(self, db):
        db.insert_article(_article(slug="manual"))
        db.insert_article(_article(slug="bot", generated_from_topic="Topic"))
        assert db.count_generated_articles() == 1


class TestTrendingSnapshot:
    """Trending-topic snapshot replacement."""

    def test_replace_and_read_in_rank_order(self, db):
        topics = [
            make_topic("First", 99, id="trend-1", keywords=["a"], related_links=["https://x"]),
            make_topic("Second", 90, id="trend-2", videos=["https://v"]),
        ]
        db.replace_trending_topics(topics)
        assert db.latest_trending_topics() == topics

    def test_replace_drops_previous_snapshot(self, db):
        db.replace_trending_topics([make_topic("Old", 50, id="trend-1")])
        db.replace_trending_topics([make_topic("New", 60, id="trend-1")])
        assert [t.title for t in db.latest_trending_topics()] == ["New"]

    def test_limit(self, db):
        db.replace_trending_topics([make_topic(str(i), 50, id=f"trend-{i}") for i in range(20)])
        assert len(db.latest_trending_topics(limit=15)) == 15


class TestBotStatistics:
    """Cycle statistics persistence."""

    def _stats(self, minutes: int, generated: int = 0) -> BotRunStatistics:
        return BotRunStatistics(
            timestamp=datetime(2025, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=minutes),
            topics_processed=10,
            high_score_topics=3,
            articles_generated=generated,
            duration=1.5,
        )

    def test_latest(self, db):
        assert db.latest_bot_statistics() is None
        db.insert_bot_statistics(self._stats(0, generated=1))
        db.insert_bot_statistics(self._stats(5, generated=2))
        assert db.latest_bot_statistics() == self._stats(5, generated=2)

    def test_prune_keeps_newest(self, db):
        for minute in range(7):
            db.insert_bot_statistics(self._stats(minute, generated=minute % 3))
        assert db.prune_bot_statistics(keep=3) == 4
        assert db.count_bot_statistics() == 3
        assert db.latest_bot_statistics().timestamp == self._stats(6).timestamp
        assert db.prune_bot_statistics(keep=3) == 0

    def test_stats_counts(self, db):
        db.insert_article(_article(generated_from_topic="T"))
        db.replace_trending_topics([make_topic("T", 90, id="trend-1")])
        db.insert_bot_statistics(self._stats(0))
        assert db.stats() == {
            "articles": 1,
            "generated_articles": 1,
            "trending_topics": 1,
            "bot_runs": 1,
        }

"""SQLite storage for articles, trending-topic snapshots and bot statistics.

Database Schema:
    articles table:
        - id (INTEGER, PK)
        - slug (TEXT, UNIQUE): URL slug
        - title, excerpt, content, author, category (TEXT)
        - tags (TEXT): JSON list
        - published_at, updated_at (TEXT): ISO-8601 UTC timestamps
        - read_time, views (INTEGER), featured (INTEGER 0/1)
        - meta (TEXT): JSON object {title, description, keywords}
        - media (TEXT): JSON MediaContent
        - generated_from_topic (TEXT): Trending topic title, NULL for
          hand-written articles

    trending_topics table:
        - One row per topic of the last persisted aggregation batch
        - List fields (keywords, videos, tweets, related_links) as JSON
        - fetched_at (REAL): Unix time the batch was stored
        - created_at (TEXT): ISO-8601 insert time

    bot_statistics table:
        - One row per completed generation cycle, pruned to the newest N

Features:
    - WAL mode for concurrent read/write access
    - Snapshot replacement in a single transaction
    - Context manager support for auto-cleanup
"""

import json
import logging
import sqlite3
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from models.article import Article
from models.bot import BotRunStatistics
from models.topic import MediaContent, TrendingTopic

logger = logging.getLogger(__name__)


def _escape_like(text: str) -> str:
    """Escape LIKE wildcards so the text matches literally (ESCAPE '\\')."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class Database:
    """SQLite database for the TrendWise pipeline.

    Example:
        >>> with Database("trendwise.db") as db:
        ...     db.replace_trending_topics(topics)
        ...     latest = db.latest_trending_topics(limit=15)
    """

    SCHEMA = """
    CREATE TABLE IF NOT EXISTS articles (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        slug TEXT NOT NULL UNIQUE,
        title TEXT NOT NULL,
        excerpt TEXT NOT NULL DEFAULT '',
        content TEXT NOT NULL DEFAULT '',
        author TEXT NOT NULL DEFAULT '',
        tags TEXT NOT NULL DEFAULT '[]',         -- JSON list
        category TEXT NOT NULL DEFAULT '',
        published_at TEXT NOT NULL,              -- ISO-8601 UTC
        updated_at TEXT NOT NULL,
        read_time INTEGER NOT NULL DEFAULT 1,    -- minutes
        views INTEGER NOT NULL DEFAULT 0,
        featured INTEGER NOT NULL DEFAULT 0,
        meta TEXT NOT NULL DEFAULT '{}',         -- JSON {title, description, keywords}
        media TEXT NOT NULL DEFAULT '{}',        -- JSON MediaContent
        generated_from_topic TEXT                -- NULL unless bot-generated
    );

    CREATE INDEX IF NOT EXISTS idx_articles_published ON articles(published_at);
    CREATE INDEX IF NOT EXISTS idx_articles_topic ON articles(generated_from_topic);

    CREATE TABLE IF NOT EXISTS trending_topics (
        id TEXT NOT NULL,
        title TEXT NOT NULL,
        source TEXT NOT NULL,
        trend_score INTEGER NOT NULL,
        category TEXT NOT NULL DEFAULT '',
        description TEXT NOT NULL DEFAULT '',
        keywords TEXT NOT NULL DEFAULT '[]',
        image TEXT,
        videos TEXT NOT NULL DEFAULT '[]',
        tweets TEXT NOT NULL DEFAULT '[]',
        related_links TEXT NOT NULL DEFAULT '[]',
        fetched_at REAL NOT NULL,                -- Unix time of the batch
        created_at TEXT NOT NULL
    );

    CREATE INDEX IF NOT EXISTS idx_topics_fetched ON trending_topics(fetched_at);

    CREATE TABLE IF NOT EXISTS bot_statistics (
        timestamp TEXT NOT NULL,                 -- ISO-8601 UTC
        topics_processed INTEGER NOT NULL,
        high_score_topics INTEGER NOT NULL,
        articles_generated INTEGER NOT NULL,
        duration REAL NOT NULL                   -- seconds
    );
    """

    path: Path
    conn: sqlite3.Connection

    def __init__(self, path: Path | str):
        """Open (and create if needed) the database at `path`."""
        self.path = Path(path)
        self.conn = sqlite3.connect(str(self.path))
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA journal_mode=WAL")
        self.conn.executescript(self.SCHEMA)
        self.conn.commit()
        logger.debug("Database initialized | path=%s", self.path)

    # === Articles ===

    def _article_params(self, article: Article, slug: str) -> tuple:
        meta = {
            "title": article.meta_title,
            "description": article.meta_description,
            "keywords": article.meta_keywords,
        }
        return (
            slug,
            article.title,
            article.excerpt,
            article.content,
            article.author,
            json.dumps(article.tags),
            article.category,
            article.published_at.isoformat(),
            article.updated_at.isoformat(),
            article.read_time,
            article.views,
            int(article.featured),
            json.dumps(meta),
            article.media.model_dump_json(),
            article.generated_from_topic,
        )

    def insert_article(self, article: Article) -> Article:
        """Insert an article, suffixing the slug (-2, -3, ...) if taken.

        Returns:
            The stored article with its id and final slug
        """
        slug = article.slug
        suffix = 1
        while True:
            try:
                with self.conn:
                    cursor = self.conn.execute(
                        """
                        INSERT INTO articles
                        (slug, title, excerpt, content, author, tags, category,
                         published_at, updated_at, read_time, views, featured,
                         meta, media, generated_from_topic)
                        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                        """,
                        self._article_params(article, slug),
                    )
                break
            except sqlite3.IntegrityError:
                suffix += 1
                slug = f"{article.slug}-{suffix}"

        logger.debug("Article saved | id=%d slug=%s", cursor.lastrowid, slug)
        return article.model_copy(update={"id": cursor.lastrowid, "slug": slug})

    def _row_to_article(self, row: sqlite3.Row) -> Article:
        meta = json.loads(row["meta"] or "{}")
        return Article(
            id=row["id"],
            slug=row["slug"],
            title=row["title"],
            excerpt=row["excerpt"],
            content=row["content"],
            author=row["author"],
            tags=json.loads(row["tags"] or "[]"),
            category=row["category"],
            published_at=datetime.fromisoformat(row["published_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
            read_time=row["read_time"],
            views=row["views"],
            featured=bool(row["featured"]),
            meta_title=meta.get("title", ""),
            meta_description=meta.get("description", ""),
            meta_keywords=meta.get("keywords", []),
            media=MediaContent.model_validate_json(row["media"] or "{}"),
            generated_from_topic=row["generated_from_topic"],
        )

    def find_article(
        self,
        slug: str | None = None,
        title_prefix: str | None = None,
        generated_from: str | None = None,
    ) -> Article | None:
        """Find one article matching ANY of the given criteria.

        Args:
            slug: Exact slug
            title_prefix: Literal text that must appear in the title
                (case-insensitive, wildcards escaped)
            generated_from: Exact generated_from_topic value

        Returns:
            The first matching article, or None
        """
        clauses: list[str] = []
        params: list[Any] = []
        if slug:
            clauses.append("slug = ?")
            params.append(slug)
        if title_prefix:
            clauses.append("title LIKE ? ESCAPE '\\'")
            params.append(f"%{_escape_like(title_prefix)}%")
        if generated_from:
            clauses.append("generated_from_topic = ?")
            params.append(generated_from)
        if not clauses:
            return None

        row = self.conn.execute(
            f"SELECT * FROM articles WHERE {' OR '.join(clauses)} LIMIT 1",
            params,
        ).fetchone()
        return self._row_to_article(row) if row else None

    def list_articles(self, limit: int = 20, offset: int = 0) -> list[Article]:
        """Articles, newest first."""
        cursor = self.conn.execute(
            "SELECT * FROM articles ORDER BY published_at DESC, id DESC LIMIT ? OFFSET ?",
            (limit, offset),
        )
        return [self._row_to_article(row) for row in cursor.fetchall()]

    def count_generated_articles(self) -> int:
        """Number of articles with a trending-topic back-reference."""
        row = self.conn.execute(
            "SELECT COUNT(*) FROM articles WHERE generated_from_topic IS NOT NULL"
        ).fetchone()
        return row[0]

    # === Trending topic snapshot ===

    def replace_trending_topics(self, topics: list[TrendingTopic]) -> None:
        """Replace the stored snapshot with `topics` in one transaction.

        A reader sees either the old snapshot or the new one, never a mix.
        """
        fetched_at = time.time()
        created_at = _now_iso()
        with self.conn:
            self.conn.execute("DELETE FROM trending_topics")
            self.conn.executemany(
                """
                INSERT INTO trending_topics
                (id, title, source, trend_score, category, description, keywords,
                 image, videos, tweets, related_links, fetched_at, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        t.id,
                        t.title,
                        t.source,
                        t.trend_score,
                        t.category,
                        t.description,
                        json.dumps(t.keywords),
                        t.image,
                        json.dumps(t.videos),
                        json.dumps(t.tweets),
                        json.dumps(t.related_links),
                        fetched_at,
                        created_at,
                    )
                    for t in topics
                ],
            )
        logger.info("Trend snapshot saved | topics=%d", len(topics))

    def latest_trending_topics(self, limit: int = 15) -> list[TrendingTopic]:
        """Most recently persisted topics, in stored rank order."""
        cursor = self.conn.execute(
            "SELECT * FROM trending_topics ORDER BY fetched_at DESC, rowid ASC LIMIT ?",
            (limit,),
        )
        return [
            TrendingTopic(
                id=row["id"],
                title=row["title"],
                source=row["source"],
                trend_score=row["trend_score"],
                category=row["category"],
                description=row["description"],
                keywords=json.loads(row["keywords"]),
                image=row["image"],
                videos=json.loads(row["videos"]),
                tweets=json.loads(row["tweets"]),
                related_links=json.loads(row["related_links"]),
            )
            for row in cursor.fetchall()
        ]

    # === Bot statistics ===

    def insert_bot_statistics(self, stats: BotRunStatistics) -> None:
        with self.conn:
            self.conn.execute(
                """
                INSERT INTO bot_statistics
                (timestamp, topics_processed, high_score_topics, articles_generated, duration)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    stats.timestamp.isoformat(),
                    stats.topics_processed,
                    stats.high_score_topics,
                    stats.articles_generated,
                    stats.duration,
                ),
            )

    def prune_bot_statistics(self, keep: int = 100) -> int:
        """Delete all but the newest `keep` statistics rows.

        Returns:
            Number of rows deleted
        """
        with self.conn:
            cursor = self.conn.execute(
                """
                DELETE FROM bot_statistics WHERE rowid NOT IN (
                    SELECT rowid FROM bot_statistics ORDER BY timestamp DESC, rowid DESC LIMIT ?
                )
                """,
                (keep,),
            )
        if cursor.rowcount > 0:
            logger.debug("Bot statistics pruned | deleted=%d keep=%d", cursor.rowcount, keep)
        return cursor.rowcount

    def latest_bot_statistics(self) -> BotRunStatistics | None:
        row = self.conn.execute(
            "SELECT * FROM bot_statistics ORDER BY timestamp DESC, rowid DESC LIMIT 1"
        ).fetchone()
        if row is None:
            return None
        return BotRunStatistics(
            timestamp=datetime.fromisoformat(row["timestamp"]),
            topics_processed=row["topics_processed"],
            high_score_topics=row["high_score_topics"],
            articles_generated=row["articles_generated"],
            duration=row["duration"],
        )

    def count_bot_statistics(self) -> int:
        return self.conn.execute("SELECT COUNT(*) FROM bot_statistics").fetchone()[0]

    def stats(self) -> dict[str, int]:
        """Get database statistics.

        Returns:
            Dictionary with 'articles', 'generated_articles',
            'trending_topics' and 'bot_runs' counts
        """
        def count(query: str) -> int:
            return self.conn.execute(query).fetchone()[0]

        return {
            "articles": count("SELECT COUNT(*) FROM articles"),
            "generated_articles": self.count_generated_articles(),
            "trending_topics": count("SELECT COUNT(*) FROM trending_topics"),
            "bot_runs": self.count_bot_statistics(),
        }

    def close(self) -> None:
        """Close the database connection."""
        self.conn.close()

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

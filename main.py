#!/usr/bin/env python3
"""TrendWise: trending-topic aggregation and automated article generation.

This CLI aggregates trending technology topics from Google Trends, GitHub,
Hacker News and Dev.to, and runs a bot that writes blog articles for the
highest-scoring topics using a PydanticAI writer agent.

Commands:
    trends      Show current trending topics (cached, persisted, fallback)
    bot         Control the generation bot (start, trigger, stats)
    status      Show configuration and database statistics
    articles    List stored articles

Examples:
    python main.py trends                 # Ranked topics
    python main.py trends --json          # As JSON (camelCase fields)
    python main.py trends --refresh       # Force a live refresh
    python main.py bot start              # Run now, then every BOT_COOLDOWN_HOURS
    python main.py bot trigger            # One generation cycle
    python main.py bot stats
    python main.py articles --limit 5

Environment:
    GEMINI_API_KEY: Required for article generation
    See config.py for all configuration options
"""

import argparse
import asyncio
import json
import logging
import sys

from aggregator import Aggregator
from bot import GenerationBot, control
from config import Config
from database import Database
from media import MediaEnricher
from models.bot import AutoGenerationConfig
from models.article import GenerationResult
from observability.logging import setup_logging
from observability.tracing import setup_tracing
from sources import build_sources
from trend_cache import TrendCache, TrendGateway

logger = logging.getLogger(__name__)


def build_aggregator(config: Config) -> Aggregator:
    """Wire the configured sources and media enricher into an Aggregator."""
    return Aggregator(
        build_sources(config),
        enricher=MediaEnricher.from_config(config),
        limit=config.aggregate_limit,
        max_concurrent=config.max_concurrent,
    )


async def _generation_unavailable(topic: str, **kwargs) -> GenerationResult:
    return GenerationResult(success=False, error="Article generation is not configured")


def build_bot(config: Config, db: Database, with_writer: bool = True) -> GenerationBot:
    """Create the generation bot.

    Args:
        with_writer: Create the writer agent; False for read-only use (stats)
    """
    if with_writer:
        from agents.writer import ArticleWriterAgent, make_generator
        generate = make_generator(ArticleWriterAgent(config), db, author=config.article_author)
    else:
        generate = _generation_unavailable

    return GenerationBot(
        build_aggregator(config),
        db,
        generate,
        settings=AutoGenerationConfig.from_config(config),
        generation_delay=config.bot_generation_delay,
        stats_retention=config.bot_stats_retention,
    )


def _print_topics(topics) -> None:
    print(f"\n=== Trending Topics ({len(topics)}) ===\n")
    for topic in topics:
        print(f"{topic.trend_score:>3}  {topic.title}")
        print(f"     {topic.source} | {topic.category}")
        if topic.keywords:
            print(f"     Keywords: {', '.join(topic.keywords)}")
        if topic.related_links:
            print(f"     {topic.related_links[0]}")
        print()


def cmd_trends(args: argparse.Namespace, config: Config) -> int:
    """Show trending topics through the cache gateway.

    Returns:
        Exit code (0 for success, 1 if a forced refresh got no live data)
    """
    with Database(config.db_path) as db:
        gateway = TrendGateway(
            build_aggregator(config),
            db,
            TrendCache(ttl=config.trend_cache_ttl_seconds),
        )

        if args.refresh:
            result = asyncio.run(gateway.refresh())
            topics = result.topics
            if not args.json:
                print(result.message)
        else:
            result = None
            topics = asyncio.run(gateway.get_trending())

    if args.json:
        payload = result.to_dict() if result else [t.model_dump(by_alias=True) for t in topics]
        print(json.dumps(payload, indent=2))
    else:
        _print_topics(topics)

    return 1 if result is not None and not result.success else 0


def cmd_bot(args: argparse.Namespace, config: Config) -> int:
    """Control the generation bot.

    'start' keeps the process alive for scheduled cycles until Ctrl+C.
    """
    needs_writer = args.action in ("start", "trigger")
    if needs_writer:
        error = config.require_writer()
        if error:
            print(f"Configuration error: {error}", file=sys.stderr)
            return 1

    with Database(config.db_path) as db:
        bot = build_bot(config, db, with_writer=needs_writer)

        async def run_action() -> dict:
            response = await control(bot, args.action)
            if args.action == "start" and response["success"]:
                logger.info("Bot running | press Ctrl+C to stop")
                try:
                    await asyncio.Event().wait()
                finally:
                    await bot.shutdown()
            return response

        try:
            response = asyncio.run(run_action())
        except KeyboardInterrupt:
            logger.info("Stopped by user (Ctrl+C)")
            return 130

    if args.action == "trigger" and response["success"]:
        response["data"] = bot.last_stats.to_dict() if bot.last_stats else None
    print(json.dumps(response, indent=2, default=str))
    return 0 if response["success"] else 1


def cmd_status(args: argparse.Namespace, config: Config) -> int:
    """Display configuration and database statistics."""
    with Database(config.db_path) as db:
        db_stats = db.stats()

    status = {
        "config": {
            "sources": config.enabled_sources,
            "google_trends_mode": config.google_trends_mode,
            "trend_cache_ttl": config.trend_cache_ttl_seconds,
            "writer_model": config.writer_model,
            "bot_enabled": config.bot_enabled,
            "bot_max_articles": config.bot_max_articles_per_run,
            "bot_min_score": config.bot_min_trend_score,
            "bot_cooldown_hours": config.bot_cooldown_hours,
            "enable_logfire": config.enable_logfire,
        },
        "database": {
            "path": str(config.db_path),
            **db_stats,
        },
    }

    print(json.dumps(status, indent=2))
    return 0


def cmd_articles(args: argparse.Namespace, config: Config) -> int:
    """List stored articles, newest first."""
    with Database(config.db_path) as db:
        articles = db.list_articles(limit=args.limit)

    if not articles:
        print("No articles yet.")
        return 0

    print(f"\n=== Articles ({len(articles)}) ===\n")
    for article in articles:
        print(f"📝 {article.title}")
        print(f"   /{article.slug} | {article.read_time} min | {article.published_at:%Y-%m-%d %H:%M}")
        if article.generated_from_topic:
            print(f"   From trend: {article.generated_from_topic}")
        print()
    return 0


def main() -> int:
    """Main entry point.

    Returns:
        Exit code
    """
    parser = argparse.ArgumentParser(
        description="TrendWise: trending topics and automated articles",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    trends_parser = subparsers.add_parser("trends", help="Show trending topics")
    trends_parser.add_argument("--json", action="store_true", help="Output JSON")
    trends_parser.add_argument(
        "--refresh",
        action="store_true",
        help="Bypass the cache and fetch from all sources",
    )

    bot_parser = subparsers.add_parser("bot", help="Control the generation bot")
    bot_parser.add_argument(
        "action",
        choices=["start", "trigger", "stats"],
        help="start: run now and on schedule; trigger: one cycle; stats: show statistics",
    )

    subparsers.add_parser("status", help="Show configuration and statistics")

    articles_parser = subparsers.add_parser("articles", help="List stored articles")
    articles_parser.add_argument(
        "--limit",
        type=int,
        default=20,
        help="Maximum articles to show (default: 20)",
    )

    args = parser.parse_args()

    config = Config.load()
    setup_logging(config, verbose=args.verbose)

    error = config.validate()
    if error:
        print(f"Configuration error: {error}", file=sys.stderr)
        return 1

    setup_tracing(enabled=config.enable_logfire, token=config.logfire_token)

    commands = {
        "trends": cmd_trends,
        "bot": cmd_bot,
        "status": cmd_status,
        "articles": cmd_articles,
    }

    if args.command in commands:
        try:
            return commands[args.command](args, config)
        except Exception as e:
            logger.error("Command failed | cmd=%s error=%s", args.command, e, exc_info=True)
            print(f"Error: {e}", file=sys.stderr)
            return 1
    else:
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())

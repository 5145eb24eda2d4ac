"""Configuration management for the TrendWise trending-topic pipeline.

This module provides centralized configuration for all pipeline components.
All settings are loaded from environment variables with sensible defaults.

Environment Variables:
    Storage:
        DB_PATH: SQLite database file path

    Trend Sources:
        TREND_SOURCES: Comma-separated adapters (google, github, hackernews, devto)
        GOOGLE_TRENDS_MODE: 'rss' (daily trends feed) or 'api' (dailytrends JSON)
        GOOGLE_TRENDS_GEO: Country code for Google Trends (default: US)
        GITHUB_CREATED_AFTER: Only rank repositories created after this ISO date
        GITHUB_TOKEN: Optional GitHub token (raises the search rate limit)
        SOURCE_TIMEOUT: Per-request timeout in seconds
        MAX_CONCURRENT: Maximum concurrent TCP connections

    Cache:
        TREND_CACHE_TTL: Seconds a fetched batch stays fresh (default: 3600)

    Media (all optional, missing keys degrade to curated fallbacks):
        UNSPLASH_ACCESS_KEY: Unsplash image search
        YOUTUBE_API_KEY: YouTube Data API video search
        TWITTER_BEARER_TOKEN: Twitter recent-search API

    Generation Bot:
        BOT_MAX_ARTICLES: Maximum articles generated per cycle
        BOT_MIN_SCORE: Minimum trend score for a topic to be considered
        BOT_COOLDOWN_HOURS: Hours between scheduled cycles
        BOT_ENABLED: Allow the bot to start
        BOT_GENERATION_DELAY: Seconds between consecutive generation calls

    Article Writer:
        GEMINI_API_KEY: Google Gemini API key (required for generation)
        WRITER_MODEL: PydanticAI model string (provider:model)

    Optional Features:
        ENABLE_LOGFIRE: Enable Logfire/OpenTelemetry tracing

    Logging:
        LOG_LEVEL: Logging verbosity (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        LOG_BACKUP_COUNT: Number of rotated log files to keep
        LOG_MAX_BYTES: Max log file size in bytes (0 = time-based rotation)
        LOG_FORMAT: Log format ('text' or 'json' for structured logging)
"""

import os
from dataclasses import dataclass, field
from datetime import date, timedelta
from pathlib import Path


def _env(key: str, default: str = "") -> str:
    """Get string environment variable with optional default."""
    return os.environ.get(key, default)


def _env_int(key: str, default: int) -> int:
    """Get integer environment variable with default.

    Raises:
        ValueError: If value is set but cannot be parsed as integer
    """
    val = os.environ.get(key)
    if not val:
        return default
    try:
        return int(val)
    except ValueError:
        raise ValueError(f"Invalid integer value for {key}: '{val}'")


def _env_float(key: str, default: float) -> float:
    """Get float environment variable with default.

    Raises:
        ValueError: If value is set but cannot be parsed as float
    """
    val = os.environ.get(key)
    if not val:
        return default
    try:
        return float(val)
    except ValueError:
        raise ValueError(f"Invalid float value for {key}: '{val}'")


def _env_bool(key: str, default: bool = False) -> bool:
    """Get boolean environment variable with default.

    Recognizes truthy values: '1', 'true', 'yes', 'on'
    Recognizes falsy values: '0', 'false', 'no', 'off'
    """
    val = os.environ.get(key, "").lower()
    if val in ("1", "true", "yes", "on"):
        return True
    if val in ("0", "false", "no", "off"):
        return False
    return default


def _env_list(key: str, default: list[str]) -> list[str]:
    """Get comma-separated list environment variable (lowercased, blanks dropped)."""
    val = os.environ.get(key)
    if not val:
        return list(default)
    return [item.strip().lower() for item in val.split(",") if item.strip()]


def _default_created_after() -> str:
    """Repositories created in the last 30 days count as 'trending'."""
    return (date.today() - timedelta(days=30)).isoformat()


# Adapter names understood by sources.build_sources
KNOWN_SOURCES = ("google", "github", "hackernews", "devto")
DEFAULT_SOURCES = list(KNOWN_SOURCES)

GOOGLE_TRENDS_MODES = ("rss", "api")

# Placeholder value some deployments ship instead of a real key
PLACEHOLDER_KEY = "demo-key"


def has_key(value: str | None) -> bool:
    """Return True if an API key is actually configured (not empty or placeholder)."""
    return bool(value) and value != PLACEHOLDER_KEY


@dataclass
class Config:
    """Application configuration loaded from environment variables.

    All settings can be overridden via environment variables. Use Config.load()
    to create an instance with values from the environment.

    Example:
        >>> config = Config.load()
        >>> if error := config.validate():
        ...     print(f"Config error: {error}")
    """

    # === Database ===
    db_path: Path = field(default_factory=lambda: Path("trendwise.db"))  # DB_PATH

    # === Trend Sources ===
    enabled_sources: list[str] = field(default_factory=lambda: DEFAULT_SOURCES.copy())
    google_trends_mode: str = "rss"  # GOOGLE_TRENDS_MODE - 'rss' or 'api'
    google_trends_geo: str = "US"  # GOOGLE_TRENDS_GEO
    github_created_after: str = field(default_factory=_default_created_after)
    github_token: str = ""  # GITHUB_TOKEN - optional, raises rate limit
    source_timeout: int = 20  # SOURCE_TIMEOUT - seconds per request
    max_concurrent: int = 8  # MAX_CONCURRENT - TCP connection pool size

    # === Trend Cache ===
    trend_cache_ttl_seconds: int = 3600  # TREND_CACHE_TTL - 1 hour
    aggregate_limit: int = 15  # Topics kept per aggregation run

    # === Media Providers (optional) ===
    unsplash_access_key: str = ""  # UNSPLASH_ACCESS_KEY
    youtube_api_key: str = ""  # YOUTUBE_API_KEY
    twitter_bearer_token: str = ""  # TWITTER_BEARER_TOKEN

    # === Generation Bot ===
    bot_max_articles_per_run: int = 3  # BOT_MAX_ARTICLES
    bot_min_trend_score: int = 80  # BOT_MIN_SCORE
    bot_cooldown_hours: float = 6  # BOT_COOLDOWN_HOURS
    bot_enabled: bool = True  # BOT_ENABLED
    bot_generation_delay: float = 2.0  # BOT_GENERATION_DELAY - seconds between calls
    bot_stats_retention: int = 100  # Statistics records kept

    # === Article Writer ===
    gemini_api_key: str = ""  # GEMINI_API_KEY
    writer_model: str = "google-gla:gemini-2.5-flash"  # WRITER_MODEL
    article_author: str = "AI Assistant"

    # === Output Directories ===
    log_dir: Path = field(default_factory=lambda: Path("log"))  # LOG_DIR

    # === Logging Configuration ===
    log_level: str = "INFO"  # LOG_LEVEL
    log_backup_count: int = 30  # LOG_BACKUP_COUNT
    log_max_bytes: int = 0  # LOG_MAX_BYTES - 0 = time-based rotation
    log_format: str = "text"  # LOG_FORMAT - 'text' or 'json'

    # === Optional: Observability ===
    # Requires: pip install logfire
    enable_logfire: bool = False  # ENABLE_LOGFIRE
    logfire_token: str = ""  # LOGFIRE_TOKEN

    @classmethod
    def load(cls) -> "Config":
        """Load configuration from environment variables."""
        return cls(
            db_path=Path(_env("DB_PATH", "trendwise.db")),
            enabled_sources=_env_list("TREND_SOURCES", DEFAULT_SOURCES),
            google_trends_mode=_env("GOOGLE_TRENDS_MODE", "rss").lower(),
            google_trends_geo=_env("GOOGLE_TRENDS_GEO", "US").upper(),
            github_created_after=_env("GITHUB_CREATED_AFTER") or _default_created_after(),
            github_token=_env("GITHUB_TOKEN"),
            source_timeout=_env_int("SOURCE_TIMEOUT", 20),
            max_concurrent=_env_int("MAX_CONCURRENT", 8),
            trend_cache_ttl_seconds=_env_int("TREND_CACHE_TTL", 3600),
            unsplash_access_key=_env("UNSPLASH_ACCESS_KEY"),
            youtube_api_key=_env("YOUTUBE_API_KEY"),
            twitter_bearer_token=_env("TWITTER_BEARER_TOKEN"),
            bot_max_articles_per_run=_env_int("BOT_MAX_ARTICLES", 3),
            bot_min_trend_score=_env_int("BOT_MIN_SCORE", 80),
            bot_cooldown_hours=_env_float("BOT_COOLDOWN_HOURS", 6),
            bot_enabled=_env_bool("BOT_ENABLED", True),
            bot_generation_delay=_env_float("BOT_GENERATION_DELAY", 2.0),
            gemini_api_key=_env("GEMINI_API_KEY"),
            writer_model=_env("WRITER_MODEL", "google-gla:gemini-2.5-flash"),
            log_dir=Path(_env("LOG_DIR", "log")),
            log_level=_env("LOG_LEVEL", "INFO").upper(),
            log_backup_count=_env_int("LOG_BACKUP_COUNT", 30),
            log_max_bytes=_env_int("LOG_MAX_BYTES", 0),
            log_format=_env("LOG_FORMAT", "text").lower(),
            enable_logfire=_env_bool("ENABLE_LOGFIRE", False),
            logfire_token=_env("LOGFIRE_TOKEN"),
        )

    def validate(self) -> str | None:
        """Validate configuration values.

        Missing media or GitHub keys are never errors: those integrations
        degrade to their fallbacks. GEMINI_API_KEY is checked separately by
        the commands that generate articles (see require_writer).

        Returns:
            Error message string if invalid, None if valid.
        """
        unknown = [s for s in self.enabled_sources if s not in KNOWN_SOURCES]
        if unknown:
            return f"Unknown TREND_SOURCES {unknown} - must be from {', '.join(KNOWN_SOURCES)}"
        if not self.enabled_sources:
            return "No trend sources configured"
        if self.google_trends_mode not in GOOGLE_TRENDS_MODES:
            return f"Invalid GOOGLE_TRENDS_MODE '{self.google_trends_mode}' - must be 'rss' or 'api'"
        if self.source_timeout <= 0:
            return "SOURCE_TIMEOUT must be positive"
        if self.max_concurrent <= 0:
            return "MAX_CONCURRENT must be positive"
        if self.trend_cache_ttl_seconds <= 0:
            return "TREND_CACHE_TTL must be positive"
        if self.bot_max_articles_per_run <= 0:
            return "BOT_MAX_ARTICLES must be positive"
        if not 0 <= self.bot_min_trend_score <= 100:
            return "BOT_MIN_SCORE must be between 0 and 100"
        if self.bot_cooldown_hours <= 0:
            return "BOT_COOLDOWN_HOURS must be positive"
        if self.bot_generation_delay < 0:
            return "BOT_GENERATION_DELAY must be non-negative"
        if self.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            return f"Invalid LOG_LEVEL '{self.log_level}' - must be DEBUG, INFO, WARNING, ERROR, or CRITICAL"
        if self.log_format not in ("text", "json"):
            return f"Invalid LOG_FORMAT '{self.log_format}' - must be 'text' or 'json'"
        if self.log_backup_count < 0:
            return "LOG_BACKUP_COUNT must be non-negative"
        if self.log_max_bytes < 0:
            return "LOG_MAX_BYTES must be non-negative"
        return None

    def require_writer(self) -> str | None:
        """Check settings needed by the article writer.

        Local OpenAI-compatible models ('openai:name@http://...') need no key.
        """
        if self.writer_model.startswith("openai:") and "@" in self.writer_model:
            return None
        if not self.gemini_api_key:
            return "GEMINI_API_KEY environment variable is required for article generation"
        return None

"""Generation bot state, settings and run statistics."""

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class BotState(str, Enum):
    """Lifecycle state of the generation bot.

    IDLE: No cycle in progress; a timer or manual trigger may start one.
    RUNNING: A cycle is in progress; further triggers are no-ops.
    """

    IDLE = "idle"
    RUNNING = "running"


@dataclass
class AutoGenerationConfig:
    """Tunable bot settings, fixed at construction except for `enabled`.

    Attributes:
        max_articles_per_run: Cap on topics sent to generation per cycle
        min_trend_score: Topics below this score are ignored
        cooldown_hours: Interval between scheduled cycles
        enabled: False once stop() is called; blocks future scheduled cycles
    """

    max_articles_per_run: int = 3
    min_trend_score: int = 80
    cooldown_hours: float = 6
    enabled: bool = True

    @classmethod
    def from_config(cls, config: Any) -> "AutoGenerationConfig":
        """Build settings from the application Config."""
        return cls(
            max_articles_per_run=config.bot_max_articles_per_run,
            min_trend_score=config.bot_min_trend_score,
            cooldown_hours=config.bot_cooldown_hours,
            enabled=config.bot_enabled,
        )

    @property
    def cooldown_seconds(self) -> float:
        return self.cooldown_hours * 3600


@dataclass
class BotRunStatistics:
    """Statistics from a single generation cycle.

    Invariant: articles_generated <= high_score_topics <= topics_processed.

    Attributes:
        timestamp: When the cycle finished (UTC)
        topics_processed: Topics returned by the aggregator
        high_score_topics: Topics passing the score filter and per-run cap
        articles_generated: Articles successfully produced
        duration: Cycle run time in seconds
    """

    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    topics_processed: int = 0
    high_score_topics: int = 0
    articles_generated: int = 0
    duration: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        d = asdict(self)
        d["timestamp"] = self.timestamp.isoformat()
        d["duration"] = round(d["duration"], 2)
        return d

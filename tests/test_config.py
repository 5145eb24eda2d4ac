"""Tests for environment-driven configuration."""

import pytest

from config import Config, has_key


class TestConfigLoad:
    """Loading from environment variables."""

    def test_defaults(self, monkeypatch):
        for key in ("TREND_SOURCES", "GOOGLE_TRENDS_MODE", "TREND_CACHE_TTL", "BOT_MIN_SCORE"):
            monkeypatch.delenv(key, raising=False)
        config = Config.load()
        assert config.enabled_sources == ["google", "github", "hackernews", "devto"]
        assert config.google_trends_mode == "rss"
        assert config.trend_cache_ttl_seconds == 3600
        assert config.bot_min_trend_score == 80
        assert config.validate() is None

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("TREND_SOURCES", "GitHub, devto")
        monkeypatch.setenv("GOOGLE_TRENDS_MODE", "API")
        monkeypatch.setenv("BOT_MAX_ARTICLES", "5")
        monkeypatch.setenv("BOT_ENABLED", "no")
        monkeypatch.setenv("BOT_COOLDOWN_HOURS", "0.5")
        config = Config.load()
        assert config.enabled_sources == ["github", "devto"]
        assert config.google_trends_mode == "api"
        assert config.bot_max_articles_per_run == 5
        assert config.bot_enabled is False
        assert config.bot_cooldown_hours == 0.5

    def test_invalid_integer_raises(self, monkeypatch):
        monkeypatch.setenv("TREND_CACHE_TTL", "hourly")
        with pytest.raises(ValueError, match="TREND_CACHE_TTL"):
            Config.load()


class TestConfigValidate:
    """validate() and require_writer()."""

    @pytest.mark.parametrize("overrides, fragment", [
        ({"enabled_sources": ["google", "reddit"]}, "Unknown TREND_SOURCES"),
        ({"enabled_sources": []}, "No trend sources"),
        ({"google_trends_mode": "browser"}, "GOOGLE_TRENDS_MODE"),
        ({"trend_cache_ttl_seconds": 0}, "TREND_CACHE_TTL"),
        ({"bot_min_trend_score": 101}, "BOT_MIN_SCORE"),
        ({"bot_cooldown_hours": 0}, "BOT_COOLDOWN_HOURS"),
        ({"log_format": "xml"}, "LOG_FORMAT"),
    ])
    def test_rejects_invalid_values(self, overrides, fragment):
        config = Config(**overrides)
        error = config.validate()
        assert error is not None
        assert fragment in error

    def test_missing_media_keys_are_not_errors(self):
        config = Config(unsplash_access_key="", youtube_api_key="", twitter_bearer_token="")
        assert config.validate() is None

    def test_require_writer_needs_gemini_key(self):
        assert "GEMINI_API_KEY" in Config(gemini_api_key="").require_writer()
        assert Config(gemini_api_key="secret").require_writer() is None

    def test_local_writer_needs_no_key(self):
        config = Config(writer_model="openai:qwen@http://127.0.0.1:8080/v1")
        assert config.require_writer() is None

    def test_has_key_treats_placeholder_as_missing(self):
        assert has_key("real-key")
        assert not has_key("")
        assert not has_key(None)
        assert not has_key("demo-key")

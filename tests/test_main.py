"""Tests for the command-line entry point."""

import json
import sys

import pytest

import main
from aggregator import Aggregator
from trend_cache import FALLBACK_TOPICS


@pytest.fixture
def cli_env(tmp_path, monkeypatch, restore_root_logger):
    """Isolated database and log directory, sources stubbed to return nothing."""
    monkeypatch.setenv("DB_PATH", str(tmp_path / "cli.db"))
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "log"))
    monkeypatch.setenv("LOG_FORMAT", "text")
    monkeypatch.setenv("LOG_LEVEL", "INFO")
    monkeypatch.setenv("ENABLE_LOGFIRE", "false")
    monkeypatch.delenv("TREND_SOURCES", raising=False)
    monkeypatch.delenv("GOOGLE_TRENDS_MODE", raising=False)

    async def no_topics(self):
        return []

    monkeypatch.setattr(Aggregator, "aggregate", no_topics)


def _run(monkeypatch, *argv: str) -> int:
    monkeypatch.setattr(sys, "argv", ["trendwise", *argv])
    return main.main()


class TestTrendsCommand:
    """`trends` output."""

    def test_json_output_is_parseable(self, cli_env, monkeypatch, capsys):
        assert _run(monkeypatch, "trends", "--json") == 0

        captured = capsys.readouterr()
        payload = json.loads(captured.out)
        assert [t["id"] for t in payload] == [t.id for t in FALLBACK_TOPICS]
        assert payload[0]["trendScore"] == 95
        assert "Serving fallback trends" in captured.err

    def test_refresh_json_reports_failure(self, cli_env, monkeypatch, capsys):
        assert _run(monkeypatch, "trends", "--refresh", "--json") == 1

        payload = json.loads(capsys.readouterr().out)
        assert payload["success"] is False
        assert payload["message"] == "Failed to fetch trending topics"
        assert len(payload["topics"]) == len(FALLBACK_TOPICS)


class TestBotCommand:
    """`bot` output."""

    def test_stats_json_is_parseable(self, cli_env, monkeypatch, capsys):
        assert _run(monkeypatch, "bot", "stats") == 0

        payload = json.loads(capsys.readouterr().out)
        assert payload["success"] is True
        assert payload["data"]["state"] == "idle"
        assert payload["data"]["total_generated_articles"] == 0

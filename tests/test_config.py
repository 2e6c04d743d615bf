"""Tests for configuration loading."""

from pathlib import Path
from tempfile import TemporaryDirectory

import pytest

from article_monitor.config import get_settings, load_config


def write_config(tmpdir: str, text: str) -> Path:
    path = Path(tmpdir) / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_missing_config_uses_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test defaults when no config file exists."""
    for name in ("ANTHROPIC_API_KEY", "GITHUB_TOKEN", "SLACK_BOT_TOKEN", "SLACK_CHANNEL_ID"):
        monkeypatch.delenv(name, raising=False)
    
    settings = get_settings(Path("does-not-exist.yaml"))
    
    assert settings.source_identity.key == "SAllen0400/swift-news"
    assert settings.state_file == Path("data/fetcher-state.json")
    assert settings.max_concurrency == 3
    assert settings.slack_enabled is False
    assert settings.anthropic_api_key == ""


def test_empty_config_file() -> None:
    with TemporaryDirectory() as tmpdir:
        assert load_config(write_config(tmpdir, "")) == {}


def test_yaml_overrides_and_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test YAML sections and environment secrets are both applied."""
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")
    monkeypatch.setenv("SLACK_BOT_TOKEN", "xoxb-test")
    monkeypatch.setenv("SLACK_CHANNEL_ID", "C123")
    
    with TemporaryDirectory() as tmpdir:
        path = write_config(tmpdir, """
source:
  owner: someone
  repo: kotlin-news
  branch: develop
paths:
  state_file: /tmp/state.json
pipeline:
  max_concurrency: 5
summary:
  topic: Kotlin
""")
        settings = get_settings(path)
    
    assert settings.source_identity.key == "someone/kotlin-news"
    assert settings.source_identity.branch == "develop"
    assert settings.state_file == Path("/tmp/state.json")
    assert settings.max_concurrency == 5
    assert settings.summary.topic == "Kotlin"
    assert settings.summary.language == "English"
    assert settings.anthropic_api_key == "sk-test"
    assert settings.slack_enabled is True


def test_first_run_window_is_at_least_two() -> None:
    with TemporaryDirectory() as tmpdir:
        settings = get_settings(write_config(tmpdir, "source:\n  first_run_window: 1\n"))
    
    assert settings.source.first_run_window == 2

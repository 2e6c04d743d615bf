"""Configuration management."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from article_monitor.core import SourceIdentity


@dataclass
class SourceConfig:
    """Tracked repository settings."""
    owner: str = "SAllen0400"
    repo: str = "swift-news"
    branch: str = "main"
    first_run_window: int = 2
    video_hosts: list[str] = field(default_factory=lambda: ["youtube.com", "youtu.be"])


@dataclass
class ClaudeConfig:
    """Claude API settings."""
    model: str = "claude-sonnet-4-20250514"
    max_tokens: int = 2048
    temperature: float = 0.3
    max_retries: int = 5
    initial_retry_delay: float = 2.0
    request_delay: float = 1.5


@dataclass
class SlackConfig:
    """Slack delivery settings."""
    api_base: str = "https://slack.com/api"
    header_emoji: str = "📰"
    section_max_length: int = 3000


@dataclass
class PathsConfig:
    """Path settings."""
    state_file: Path = Path("data/fetcher-state.json")


@dataclass
class PipelineConfig:
    """Pipeline settings."""
    max_concurrency: int = 3
    schedule_interval: float = 3600.0


@dataclass
class SummaryConfig:
    """Summarization prompt settings."""
    topic: str = "Swift and iOS development"
    language: str = "English"


@dataclass
class Settings:
    """Application settings."""

    # API keys and destination (from environment only)
    anthropic_api_key: str = ""
    github_token: Optional[str] = None
    slack_bot_token: Optional[str] = None
    slack_channel_id: Optional[str] = None

    # Config sections
    source: SourceConfig = field(default_factory=SourceConfig)
    claude: ClaudeConfig = field(default_factory=ClaudeConfig)
    slack: SlackConfig = field(default_factory=SlackConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    summary: SummaryConfig = field(default_factory=SummaryConfig)

    @property
    def source_identity(self) -> SourceIdentity:
        return SourceIdentity(
            owner=self.source.owner,
            name=self.source.repo,
            branch=self.source.branch,
        )

    @property
    def state_file(self) -> Path:
        return self.paths.state_file

    @property
    def max_concurrency(self) -> int:
        return self.pipeline.max_concurrency

    @property
    def slack_enabled(self) -> bool:
        return bool(self.slack_bot_token and self.slack_channel_id)


def load_config(config_path: Path = Path("config.yaml")) -> dict:
    """Load configuration from YAML file."""
    if not config_path.exists():
        return {}

    with open(config_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def get_settings(config_path: Path = Path("config.yaml")) -> Settings:
    """Get application settings from YAML config and environment."""
    config = load_config(config_path)

    settings = Settings(
        anthropic_api_key=os.getenv("ANTHROPIC_API_KEY", ""),
        github_token=os.getenv("GITHUB_TOKEN"),
        slack_bot_token=os.getenv("SLACK_BOT_TOKEN"),
        slack_channel_id=os.getenv("SLACK_CHANNEL_ID"),
    )

    # Apply YAML config
    for section in ("source", "claude", "slack", "pipeline", "summary"):
        for key, value in (config.get(section) or {}).items():
            setattr(getattr(settings, section), key, value)

    for key, value in (config.get("paths") or {}).items():
        setattr(settings.paths, key, Path(value))

    settings.source.first_run_window = max(2, int(settings.source.first_run_window))

    return settings

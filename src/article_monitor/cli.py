"""CLI entry point for article monitor."""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

import typer

from article_monitor.adapters.llm import ClaudeClient
from article_monitor.adapters.notifications import SlackFormatter, SlackNotifier
from article_monitor.adapters.sources import GitHubSource
from article_monitor.config import Settings, get_settings
from article_monitor.core import ChangeDetector, CursorStore, EventBus, Semaphore
from article_monitor.use_cases import (
    CommandService,
    FetchCycleService,
    NotificationSubscriber,
    SummaryService,
    SummarySubscriber,
)

app = typer.Typer(help="Watch a news repository, summarize new articles and post them to Slack.")

ConfigOption = typer.Option(Path("config.yaml"), "--config", help="Path to YAML config")
DebugOption = typer.Option(False, "--debug", help="Verbose logging")
NoSlackOption = typer.Option(False, "--no-slack", help="Disable Slack notifications")


@dataclass
class Pipeline:
    bus: EventBus
    cycle_service: FetchCycleService
    commands: CommandService


def build_pipeline(settings: Settings, no_slack: bool = False) -> Pipeline:
    """Wire every component around one event bus."""
    bus = EventBus()

    summary_service = SummaryService(
        llm_client=ClaudeClient(settings),
        topic=settings.summary.topic,
        language=settings.summary.language,
    )
    SummarySubscriber(bus, summary_service, Semaphore(settings.max_concurrency)).register()

    notifier = None
    if not no_slack:
        notifier = SlackNotifier(
            settings.slack_bot_token,
            settings.slack_channel_id,
            api_base=settings.slack.api_base,
        )
    formatter = SlackFormatter(
        header_emoji=settings.slack.header_emoji,
        max_section_length=settings.slack.section_max_length,
    )
    NotificationSubscriber(bus, formatter, notifier).register()

    detector = ChangeDetector(
        GitHubSource(token=settings.github_token),
        first_run_window=settings.source.first_run_window,
        video_hosts=settings.source.video_hosts,
    )
    cursor_store = CursorStore(settings.state_file, default_branch=settings.source.branch)
    cycle_service = FetchCycleService(settings.source_identity, detector, cursor_store, bus)

    return Pipeline(bus=bus, cycle_service=cycle_service, commands=CommandService(cycle_service, bus))


def _setup(config: Path, debug: bool, no_slack: bool) -> Settings:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings = get_settings(config)

    print("\n" + "=" * 70)
    print("📰  ARTICLE MONITOR")
    print("=" * 70)

    print("\n🔑 Credentials:")
    if settings.anthropic_api_key:
        print("  ✓ ANTHROPIC_API_KEY - summaries via Claude")
    else:
        print("  ✗ ANTHROPIC_API_KEY - not set (summaries will fail)")

    if settings.github_token:
        print("  ✓ GITHUB_TOKEN - authenticated GitHub API")
    else:
        print("  ⚠️  GITHUB_TOKEN - not set (low rate limit)")

    if no_slack:
        print("  ⚠️  Slack - disabled with --no-slack")
    elif settings.slack_enabled:
        print("  ✓ SLACK_BOT_TOKEN / SLACK_CHANNEL_ID - notifications enabled")
    else:
        print("  ⚠️  SLACK_BOT_TOKEN / SLACK_CHANNEL_ID - not set (notifications skipped)")

    print("\n⚙️  Settings:")
    print(f"  • Source: {settings.source_identity}@{settings.source.branch}")
    print(f"  • State file: {settings.state_file}")
    print(f"  • Max concurrent summaries: {settings.max_concurrency}")
    print()

    return settings


@app.command()
def check(
    config: Path = ConfigOption,
    debug: bool = DebugOption,
    no_slack: bool = NoSlackOption,
) -> None:
    """Run one fetch cycle and wait for every summary to be delivered."""
    settings = _setup(config, debug, no_slack)
    asyncio.run(async_check(settings, no_slack))


async def async_check(settings: Settings, no_slack: bool) -> None:
    pipeline = build_pipeline(settings, no_slack)
    result = await pipeline.cycle_service.run_cycle()
    await pipeline.commands.wait_idle()

    print("\n" + "=" * 70)
    if result.ok:
        print(f"✅ DONE: {result.item_count} new article(s), head {result.new_revision[:7]}")
    else:
        print(f"❌ CYCLE FAILED: {result.reason}")
    print("=" * 70 + "\n")

    if not result.ok:
        raise typer.Exit(code=1)


@app.command()
def summarize(
    url: str = typer.Argument(..., help="Article URL"),
    config: Path = ConfigOption,
    debug: bool = DebugOption,
    no_slack: bool = NoSlackOption,
) -> None:
    """Summarize one article and deliver it."""
    settings = _setup(config, debug, no_slack)
    asyncio.run(async_summarize(settings, url, no_slack))


async def async_summarize(settings: Settings, url: str, no_slack: bool) -> None:
    pipeline = build_pipeline(settings, no_slack)
    print(pipeline.commands.request_summary(url, requested_by="cli"))
    await pipeline.commands.wait_idle()


@app.command()
def watch(
    config: Path = ConfigOption,
    debug: bool = DebugOption,
    no_slack: bool = NoSlackOption,
) -> None:
    """Run a fetch cycle every ``pipeline.schedule_interval`` seconds."""
    settings = _setup(config, debug, no_slack)
    try:
        asyncio.run(async_watch(settings, no_slack))
    except KeyboardInterrupt:
        print("\n👋 Stopped")


async def async_watch(settings: Settings, no_slack: bool) -> None:
    pipeline = build_pipeline(settings, no_slack)
    interval = settings.pipeline.schedule_interval
    print(f"⏰ Checking every {interval:.0f}s (Ctrl+C to stop)")

    while True:
        print(pipeline.commands.request_check(requested_by="scheduler"))
        await pipeline.commands.wait_idle()
        await asyncio.sleep(interval)


if __name__ == "__main__":
    app()

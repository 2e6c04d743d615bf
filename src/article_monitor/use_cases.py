"""Business logic use cases."""

import asyncio
import logging
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Coroutine, Optional
from urllib.parse import urlparse

import httpx

from article_monitor.adapters.notifications import MessageBlock, SlackFormatter, blocks_to_payload
from article_monitor.core import (
    ArticleSummary,
    ChangeDetector,
    CursorDocument,
    CursorStore,
    CycleCompleted,
    CycleFailed,
    CycleResult,
    DeliveryFailed,
    EventBus,
    GenerationClient,
    ItemDiscovered,
    MonitorError,
    NotificationService,
    Semaphore,
    SourceIdentity,
    SourceState,
    SourceUnreachable,
    StateCorrupt,
    SummaryCompleted,
    SummaryError,
    SummaryErrorKind,
    SummaryFailed,
)
from article_monitor.core.summary_parser import build_prompt, parse_summary

logger = logging.getLogger(__name__)


class SummaryService:
    """Turn an article URL into an ArticleSummary with one generation call."""

    def __init__(
        self,
        llm_client: GenerationClient,
        topic: str = "Swift and iOS development",
        language: str = "English",
    ) -> None:
        self.llm_client = llm_client
        self.topic = topic
        self.language = language

    async def summarize(self, url: str) -> ArticleSummary:
        """Summarize one article.

        Raises:
            SummaryError: tagged with the failure kind
        """
        prompt = build_prompt(url, topic=self.topic, language=self.language)
        logger.info("Summarizing %s", url)

        try:
            response = await self.llm_client.generate(prompt)
        except (httpx.HTTPError, RuntimeError) as e:
            raise SummaryError(SummaryErrorKind.SUMMARY_FAILED, url, str(e)) from e

        return parse_summary(url, response)


class SummarySubscriber:
    """Summarize discovered items, at most ``semaphore.capacity`` at a time."""

    def __init__(self, bus: EventBus, summary_service: SummaryService, semaphore: Semaphore) -> None:
        self.bus = bus
        self.summary_service = summary_service
        self.semaphore = semaphore

    def register(self) -> None:
        self.bus.subscribe(ItemDiscovered, self.on_item_discovered)

    async def on_item_discovered(self, event: ItemDiscovered) -> None:
        async with self.semaphore:
            try:
                summary = await self.summary_service.summarize(event.url)
            except SummaryError as e:
                logger.warning("Summary failed for %s: %s", event.url, e)
                self.bus.publish(SummaryFailed(url=event.url, reason=e.reason))
                return
            except Exception as e:
                logger.exception("Unexpected error while summarizing %s", event.url)
                reason = SummaryErrorKind.SUMMARY_FAILED.user_message()
                self.bus.publish(SummaryFailed(url=event.url, reason=f"{reason} {e}"))
                return

        logger.info("Summary completed for %s", event.url)
        self.bus.publish(SummaryCompleted(summary=summary))


class NotificationSubscriber:
    """Format pipeline outcomes and deliver them to the chat channel."""

    def __init__(
        self,
        bus: EventBus,
        formatter: SlackFormatter,
        notification_service: Optional[NotificationService] = None,
    ) -> None:
        self.bus = bus
        self.formatter = formatter
        self.notification_service = notification_service

    def register(self) -> None:
        self.bus.subscribe(SummaryCompleted, self.on_summary_completed)
        self.bus.subscribe(SummaryFailed, self.on_summary_failed)
        self.bus.subscribe(CycleCompleted, self.on_cycle_completed)
        self.bus.subscribe(CycleFailed, self.on_cycle_failed)

    async def on_summary_completed(self, event: SummaryCompleted) -> None:
        await self.deliver(self.formatter.format_summary(event.summary))

    async def on_summary_failed(self, event: SummaryFailed) -> None:
        await self.deliver(self.formatter.format_failure(event.url, event.reason))

    async def on_cycle_completed(self, event: CycleCompleted) -> None:
        await self.deliver(self.formatter.format_cycle_report(event.message))

    async def on_cycle_failed(self, event: CycleFailed) -> None:
        await self.deliver(self.formatter.format_cycle_failure(event.reason))

    async def deliver(self, blocks: list[MessageBlock]) -> None:
        """Send one message. Delivery failures are logged, never retried."""
        if not self.notification_service:
            return

        text = self.formatter.fallback_text(blocks)
        try:
            await self.notification_service.post_message(blocks_to_payload(blocks), text)
        except DeliveryFailed as e:
            logger.error("Failed to deliver notification %r: %s", text, e)


class FetchCycleService:
    """Run fetch cycles: detect changes, persist the cursor, publish items."""

    def __init__(
        self,
        source: SourceIdentity,
        detector: ChangeDetector,
        cursor_store: CursorStore,
        bus: EventBus,
    ) -> None:
        self.source = source
        self.detector = detector
        self.cursor_store = cursor_store
        self.bus = bus
        self._locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    async def run_cycle(self) -> CycleResult:
        """Run one cycle. Never raises for cycle-level failures.

        Returns:
            CycleResult with ``ok=False`` and a reason when the cursor state
            is corrupt or the source cannot be reached
        """
        async with self._locks[self.source.key]:
            try:
                result = await self._run_locked()
            except (StateCorrupt, SourceUnreachable) as e:
                logger.error("Cycle for %s failed: %s", self.source, e)
                self.bus.publish(CycleFailed(reason=str(e)))
                return CycleResult(source=self.source, ok=False, reason=str(e))

        self.bus.publish(CycleCompleted(item_count=result.item_count, message=self._cycle_message(result)))
        return result

    async def _run_locked(self) -> CycleResult:
        doc = self.cursor_store.load() or CursorDocument()
        detection = await self.detector.detect(self.source, doc)

        previous = doc.get(self.source)
        doc.put(SourceState(
            source=self.source,
            last_processed_revision=detection.new_revision,
            last_checked_at=datetime.now(timezone.utc),
            total_items_processed=(previous.total_items_processed if previous else 0) + len(detection.items),
        ))
        try:
            self.cursor_store.save(doc)
        except OSError as e:
            raise StateCorrupt(f"Cannot write cursor state: {e}") from e

        for item in detection.items:
            self.bus.publish(ItemDiscovered(title=item.title, url=item.url))

        logger.info("Cycle for %s found %d new item(s)", self.source, len(detection.items))
        return CycleResult(
            source=self.source,
            ok=True,
            item_count=len(detection.items),
            new_revision=detection.new_revision,
        )

    def _cycle_message(self, result: CycleResult) -> str:
        if result.item_count == 0:
            return f"✅ No new articles in {self.source}."
        return f"🔍 Found {result.item_count} new article(s) in {self.source}. Summaries are on the way."

    def summarize_one(self, url: str) -> None:
        """Queue a single URL for summarization and delivery."""
        self.bus.publish(ItemDiscovered(title=url, url=url))


def is_valid_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


class CommandService:
    """Trigger surface: acknowledge at once, run the work in the background."""

    def __init__(self, cycle_service: FetchCycleService, bus: EventBus) -> None:
        self.cycle_service = cycle_service
        self.bus = bus
        self._tasks: set[asyncio.Task[Any]] = set()

    def request_check(self, requested_by: str) -> str:
        logger.info("Article check requested by %s", requested_by)
        self._spawn(self.cycle_service.run_cycle(), "article check")
        return "🔍 Checking for new articles..."

    def request_summary(self, url: str, requested_by: str) -> str:
        url = (url or "").strip()
        if not url:
            return "❌ Please provide a URL.\nUsage: `/summarize-article https://example.com/article`"
        if not is_valid_url(url):
            return f"❌ Invalid URL: {url}"

        logger.info("Summary of %s requested by %s", url, requested_by)
        self.cycle_service.summarize_one(url)
        return "🔍 Analyzing the article..."

    def _spawn(self, coro: Coroutine[Any, Any, Any], description: str) -> None:
        task = asyncio.get_running_loop().create_task(self._guard(coro, description))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _guard(self, coro: Coroutine[Any, Any, Any], description: str) -> None:
        try:
            await coro
        except MonitorError as e:
            logger.error("Background %s failed: %s", description, e)
        except Exception:
            logger.exception("Unexpected error in background %s", description)

    async def wait_idle(self) -> None:
        """Wait for spawned work and every event it caused."""
        while self._tasks or self.bus.pending_count:
            if self._tasks:
                await asyncio.gather(*list(self._tasks))
            await self.bus.join()

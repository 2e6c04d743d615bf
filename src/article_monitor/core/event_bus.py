"""In-process asynchronous event bus.

Usage::

    bus = EventBus()
    bus.subscribe(ItemDiscovered, summarizer.on_item_discovered)
    bus.publish(ItemDiscovered(title="Foo", url="https://foo.dev/a"))
    await bus.join()

``publish()`` returns immediately. Each event is dispatched on its own
task, which calls the handlers for that event's class one at a time in
subscription order. Dispatch tasks start in publish order, so handlers
of one kind see events in the order they were published. Exceptions in
a handler are logged and do not stop the remaining handlers or other
events.
"""

import asyncio
import inspect
import logging
from collections import defaultdict
from typing import Any, Awaitable, Callable, TypeVar, Union

from article_monitor.core.events import PipelineEvent

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=PipelineEvent)

EventHandler = Callable[[Any], Union[None, Awaitable[None]]]


class EventBus:
    """Map of event class to an ordered list of handlers."""
    
    def __init__(self) -> None:
        self._handlers: dict[type, list[EventHandler]] = defaultdict(list)
        self._pending: set[asyncio.Task[None]] = set()
    
    def subscribe(self, event_type: type[E], handler: Callable[[E], Any]) -> None:
        """Register a handler for one event class for the bus lifetime."""
        self._handlers[event_type].append(handler)
    
    def publish(self, event: PipelineEvent) -> None:
        """Schedule dispatch of ``event`` and return without waiting.
        
        Must be called from a running event loop.
        """
        handlers = list(self._handlers.get(type(event), ()))
        if not handlers:
            logger.debug("No handlers for %s", type(event).__name__)
            return
        
        task = asyncio.get_running_loop().create_task(self._dispatch(event, handlers))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
    
    async def _dispatch(self, event: PipelineEvent, handlers: list[EventHandler]) -> None:
        for handler in handlers:
            try:
                result = handler(event)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception(
                    "Event handler %s failed for %s",
                    getattr(handler, "__qualname__", repr(handler)),
                    type(event).__name__,
                )
    
    async def join(self) -> None:
        """Wait until every dispatched event, including ones published meanwhile, is handled."""
        while self._pending:
            await asyncio.gather(*list(self._pending))
    
    @property
    def pending_count(self) -> int:
        """Events currently being dispatched."""
        return len(self._pending)
    
    @property
    def handler_count(self) -> int:
        """Total number of registered handlers across all event types."""
        return sum(len(h) for h in self._handlers.values())

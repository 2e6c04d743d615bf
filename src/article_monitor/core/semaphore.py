"""FIFO counting semaphore with direct permit hand-off."""

import asyncio
from collections import deque


class Semaphore:
    """Bound how many coroutines run a section at once.
    
    Waiters are served first-come-first-served. ``release()`` hands the
    permit straight to the oldest waiter instead of returning it to the
    free pool, so a newcomer can never overtake a queued caller.
    """
    
    def __init__(self, permits: int) -> None:
        if permits < 1:
            raise ValueError("Semaphore needs at least one permit")
        self.capacity = permits
        self._permits = permits
        self._waiters: deque[asyncio.Future[None]] = deque()
    
    async def acquire(self) -> None:
        """Take a permit, waiting in line if none is free."""
        if self._permits > 0 and not self._waiters:
            self._permits -= 1
            return
        
        waiter: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        try:
            await waiter
        except asyncio.CancelledError:
            if waiter.done() and not waiter.cancelled():
                # Permit was already handed over; pass it on.
                self.release()
            else:
                self._waiters.remove(waiter)
            raise
    
    def release(self) -> None:
        """Return a permit, handing it to the oldest waiter if any."""
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                waiter.set_result(None)
                return
        if self._permits >= self.capacity:
            raise ValueError("Semaphore released more times than acquired")
        self._permits += 1
    
    def available_permits(self) -> int:
        """Free permits right now. Informational only."""
        return self._permits
    
    async def __aenter__(self) -> "Semaphore":
        await self.acquire()
        return self
    
    async def __aexit__(self, *exc_info: object) -> None:
        self.release()

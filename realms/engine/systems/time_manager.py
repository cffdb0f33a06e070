# realms/engine/systems/time_manager.py
"""
TimeEventManager - Real-time driver for scheduled events.

Provides:
- A priority queue of timed events ordered by execution time
- One-shot and recurring events, cancellable by id
- A background asyncio task that sleeps until the next event is due

Game rules never live here. Combat rounds and world ticks are pure
operations on their systems; this manager only decides when to call them.
"""

from __future__ import annotations

import asyncio
import heapq
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Awaitable, Callable, Dict, List

if TYPE_CHECKING:
    from .context import GameContext

logger = logging.getLogger(__name__)


@dataclass
class TimeEvent:
    """
    Represents a scheduled event in the time system.

    Events are ordered by execute_at time and can be:
    - One-shot (execute once then remove)
    - Recurring (reschedule after execution)
    """
    execute_at: float  # Clock reading when the event should execute
    callback: Callable[[], Awaitable[None]] = field(compare=False)
    event_id: str = field(compare=False, default="")
    recurring: bool = field(compare=False, default=False)
    interval: float = field(compare=False, default=0.0)

    def __lt__(self, other: "TimeEvent") -> bool:
        """Compare events by execution time for priority queue."""
        return self.execute_at < other.execute_at


class TimeEventManager:
    """
    Runs scheduled callbacks on the asyncio event loop.

    Usage:
        manager = TimeEventManager(ctx)
        await manager.start()
        manager.schedule(2.5, run_round, event_id="combat-round", recurring=True)
        manager.cancel("combat-round")
        await manager.stop()
    """

    def __init__(
        self,
        ctx: "GameContext | None" = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ctx = ctx
        self.clock = clock
        self._queue: List[TimeEvent] = []
        self._event_ids: Dict[str, TimeEvent] = {}
        self._task: asyncio.Task | None = None
        self._wakeup: asyncio.Event | None = None

    # ---------- Lifecycle ----------

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self.is_running:
            return
        self._wakeup = asyncio.Event()
        self._task = asyncio.create_task(self._loop())
        logger.debug("Time event manager started")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.debug("Time event manager stopped")

    # ---------- Scheduling ----------

    def schedule(
        self,
        delay: float,
        callback: Callable[[], Awaitable[None]],
        event_id: str | None = None,
        recurring: bool = False,
    ) -> str:
        """
        Schedule `callback` to run after `delay` seconds.

        Re-using an event id replaces the pending event with that id.
        Returns the event id.
        """
        event_id = event_id or str(uuid.uuid4())
        if event_id in self._event_ids:
            self.cancel(event_id)

        event = TimeEvent(
            execute_at=self.clock() + delay,
            callback=callback,
            event_id=event_id,
            recurring=recurring,
            interval=delay,
        )
        heapq.heappush(self._queue, event)
        self._event_ids[event_id] = event
        self._notify()
        return event_id

    def cancel(self, event_id: str) -> bool:
        """Cancel a pending event. Returns False if no such event is pending."""
        event = self._event_ids.pop(event_id, None)
        if event is None:
            return False
        # Lazy deletion: the heap entry is skipped when it surfaces
        event.event_id = ""
        self._notify()
        return True

    def is_scheduled(self, event_id: str) -> bool:
        return event_id in self._event_ids

    def clear(self) -> None:
        self._queue.clear()
        self._event_ids.clear()
        self._notify()

    # ---------- Loop ----------

    def _notify(self) -> None:
        if self._wakeup is not None:
            self._wakeup.set()

    def _next_delay(self) -> float | None:
        while self._queue and not self._queue[0].event_id:
            heapq.heappop(self._queue)
        if not self._queue:
            return None
        return max(0.0, self._queue[0].execute_at - self.clock())

    async def _loop(self) -> None:
        assert self._wakeup is not None
        while True:
            self._wakeup.clear()
            delay = self._next_delay()
            if delay is None or delay > 0:
                try:
                    await asyncio.wait_for(self._wakeup.wait(), timeout=delay)
                except asyncio.TimeoutError:
                    pass
                continue

            event = heapq.heappop(self._queue)
            self._event_ids.pop(event.event_id, None)

            if event.recurring:
                # Re-arm before running so the callback can cancel it
                event.execute_at = self.clock() + event.interval
                heapq.heappush(self._queue, event)
                self._event_ids[event.event_id] = event

            try:
                await event.callback()
            except Exception:
                logger.exception("Scheduled event %s failed", event.event_id)

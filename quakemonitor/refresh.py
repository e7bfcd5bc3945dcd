"""Refresh Controller - Wires Functional Core and Imperative Shell.

This module owns the dashboard's AppState. It decides when the feed is
fetched, keeps at most one fetch in flight, and folds each outcome into
the canonical state that every view reads.

Triggers:
- one startup refresh that may be served from the cache
- a recurring timer that forces a network check
- manual refreshes that force a network check

Everything runs on one asyncio loop. The blocking feed call runs in a
worker thread; state is only replaced on the loop, after the await.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable

from quakemonitor.core.config import REFRESH_INTERVAL_MS
from quakemonitor.core.state import (
    AppState,
    apply_refresh_fallback,
    apply_refresh_failure,
    apply_refresh_success,
    begin_refresh,
)
from quakemonitor.shell.feed_client import FeedClient


logger = logging.getLogger(__name__)


StateListener = Callable[[AppState], None]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RefreshController:
    """Single-flight refresh of the dashboard state.

    A refresh requested while another is in flight is dropped: not queued,
    not retried, and it does not supersede the running one.
    """

    def __init__(
        self,
        feed_client: FeedClient,
        interval_seconds: float = REFRESH_INTERVAL_MS / 1000,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Initialize refresh controller.

        Args:
            feed_client: Source of events
            interval_seconds: Timer period
            clock: Returns the current time
        """
        self.feed_client = feed_client
        self.interval_seconds = interval_seconds
        self.clock = clock
        self._state = AppState()
        self._fetching = False
        self._listeners: list[StateListener] = []
        self._timer_task: asyncio.Task | None = None
        self._pending: set[asyncio.Task] = set()

    @property
    def state(self) -> AppState:
        """Read-only snapshot of the current state."""
        return self._state

    @property
    def is_fetching(self) -> bool:
        return self._fetching

    def subscribe(self, listener: StateListener) -> None:
        """Call listener with the new state after every refresh that delivered events."""
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in self._listeners:
            try:
                listener(self._state)
            except Exception:
                logger.exception("State listener %r failed", listener)

    async def refresh(self, force_refresh: bool = False) -> bool:
        """Fetch the feed and fold the outcome into the state.

        Args:
            force_refresh: Bypass the cache fast path

        Returns:
            True if the refresh ran, False if it was dropped because
            another refresh was in flight
        """
        if self._fetching:
            logger.debug("Refresh already in flight, dropping trigger (force=%s)", force_refresh)
            return False

        self._fetching = True
        self._state = begin_refresh(self._state)

        try:
            result = await asyncio.to_thread(self.feed_client.fetch, force_refresh)
        except Exception as e:
            logger.error("Refresh failed: %s", e)
            self._state = apply_refresh_failure(self._state)
        else:
            if result.fallback:
                logger.warning(
                    "Refresh fell back to %d cached earthquakes (stale=%s)",
                    len(result.events),
                    result.stale,
                )
                self._state = apply_refresh_fallback(
                    self._state,
                    result.events,
                    result.sources,
                )
            else:
                self._state = apply_refresh_success(
                    self._state,
                    result.events,
                    result.sources,
                    now=self.clock(),
                )
                logger.info(
                    "Refreshed %d earthquakes (cache=%s)",
                    len(result.events),
                    result.from_cache,
                )
            self._notify()
        finally:
            self._fetching = False

        return True

    def _spawn(self, force_refresh: bool) -> asyncio.Task:
        task = asyncio.create_task(self.refresh(force_refresh))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _run_timer(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            logger.debug("Refresh timer fired")
            self._spawn(force_refresh=True)

    def start(self) -> None:
        """Run the startup refresh and start the recurring timer.

        Must be called from a running event loop.
        """
        if self._timer_task is not None:
            return

        logger.info(
            "Starting refresh controller (every %.0f seconds)",
            self.interval_seconds,
        )
        self._spawn(force_refresh=False)
        self._timer_task = asyncio.create_task(self._run_timer())

    async def stop(self) -> None:
        """Cancel the timer and any refresh it started."""
        tasks = list(self._pending)
        if self._timer_task is not None:
            tasks.append(self._timer_task)
            self._timer_task = None

        for task in tasks:
            task.cancel()

        await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("Refresh controller stopped")

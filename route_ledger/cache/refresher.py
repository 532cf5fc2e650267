"""Stale-while-revalidate coordinator for the dashboard screen"""

import asyncio
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from route_ledger.cache.dashboard import CacheEntry, DashboardCache
from route_ledger.config import settings
from route_ledger.domain.exceptions import DataSourceError
from route_ledger.domain.models import DashboardSnapshot
from route_ledger.infrastructure.observability.logging import log_refresh
from route_ledger.infrastructure.observability.metrics import refresh_counter, refresh_duration_histogram

FetchSnapshot = Callable[[str], Awaitable[DashboardSnapshot]]


@dataclass(frozen=True)
class DashboardView:
    """What the screen shows right after entry"""

    snapshot: DashboardSnapshot
    source: str  # "cache" | "fresh"
    captured_at_ms: Optional[int] = None
    revalidating: bool = False


class DashboardRefresher:
    """
    Serves the cached snapshot immediately and refreshes it in the background.

    One instance per screen. At most one refresh is in flight per instance;
    a trigger while one is outstanding is dropped, not queued. Switching or
    signing out the user supersedes the outstanding refresh: its result is
    not written to the cache when it completes.
    """

    def __init__(self, cache: DashboardCache, fetch_snapshot: FetchSnapshot):
        self.cache = cache
        self.fetch_snapshot = fetch_snapshot
        # Failure of the active user's latest refresh; reset on user change
        self.last_error: Optional[DataSourceError] = None
        self._active_user_id: Optional[str] = None
        self._generation = 0
        self._task: Optional[asyncio.Task] = None
        self._task_generation: Optional[int] = None

    @property
    def active_user_id(self) -> Optional[str]:
        return self._active_user_id

    @property
    def in_flight(self) -> bool:
        return (
            self._task is not None
            and not self._task.done()
            and self._task_generation == self._generation
        )

    def activate(self, user_id: str) -> None:
        """Bind the screen to a user; a different user supersedes pending work"""
        if user_id != self._active_user_id:
            self._active_user_id = user_id
            self._generation += 1
            self.last_error = None

    def sign_out(self) -> None:
        self._active_user_id = None
        self._generation += 1
        self.last_error = None

    async def open(self, user_id: str, spawn_revalidation: bool = True) -> DashboardView:
        """
        Screen entry.

        Cache hit: return the cached snapshot and revalidate in the background
        (spawned here unless the caller schedules it itself).
        Cache miss: block on a fresh fetch. The fetched snapshot is returned
        even if the screen switched users meanwhile; it is only kept out of
        the cache.

        Raises:
            DataSourceError: nothing cached and the fresh fetch failed
        """
        self.activate(user_id)

        entry = await self.cache.lookup(user_id)
        if entry is not None:
            if spawn_revalidation:
                self.schedule_revalidation(user_id)
            return DashboardView(
                snapshot=entry.snapshot,
                source="cache",
                captured_at_ms=entry.captured_at_ms,
                revalidating=True,
            )

        # Join a refresh already running for this user instead of fetching twice
        task = self._task if self.in_flight else self._start(user_id)
        fetched = await asyncio.shield(task)
        return DashboardView(snapshot=fetched.snapshot, source="fresh", captured_at_ms=fetched.captured_at_ms)

    def schedule_revalidation(self, user_id: str) -> Optional[asyncio.Task]:
        """Start a background refresh unless one is already in flight"""
        if self.in_flight:
            refresh_counter.labels(outcome="suppressed").inc()
            return None
        return self._start(user_id)

    async def refresh(self, user_id: str) -> Optional[DashboardSnapshot]:
        """
        Fetch a fresh snapshot and store it, waiting for the result.

        Returns None when suppressed because another refresh is in flight.
        A result that arrives after the user changed is returned but not stored.

        Raises:
            DataSourceError: the fetch failed; the cached entry is left untouched
        """
        if self._active_user_id is None:
            self.activate(user_id)
        if self.in_flight:
            refresh_counter.labels(outcome="suppressed").inc()
            return None
        fetched = await self._start(user_id)
        return fetched.snapshot

    async def revalidate(self, user_id: str) -> None:
        """Background-safe refresh: failures are recorded, not raised"""
        try:
            await self.refresh(user_id)
        except DataSourceError:
            # Already logged and counted by _run; cached data stays visible
            pass

    async def wait(self) -> None:
        """Wait for the outstanding refresh, if any, without raising its failure"""
        task = self._task
        if task is not None:
            await asyncio.wait([task])

    def _start(self, user_id: str) -> asyncio.Task:
        task = asyncio.ensure_future(self._run(user_id, self._generation))
        self._task = task
        self._task_generation = self._generation
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        if self._task is task:
            self._task = None
            self._task_generation = None
        if task.cancelled():
            return
        # Retrieving the exception keeps fire-and-forget tasks from warning at GC
        exc = task.exception()
        if exc is not None and not isinstance(exc, DataSourceError):
            logging.error("Unexpected error in dashboard refresh", exc_info=exc)

    def _is_current(self, user_id: str, generation: int) -> bool:
        return generation == self._generation and self._active_user_id == user_id

    async def _run(self, user_id: str, generation: int) -> CacheEntry:
        start_time = time.time()
        try:
            with refresh_duration_histogram.time():
                snapshot = await self.fetch_snapshot(user_id)
        except DataSourceError as e:
            if self._is_current(user_id, generation):
                self.last_error = e
            refresh_counter.labels(outcome="failed").inc()
            log_refresh(user_id, "failed", (time.time() - start_time) * 1000)
            logging.error(f"Dashboard refresh failed: {e}", extra={"user_id": user_id})
            raise

        fetched = CacheEntry(snapshot=snapshot, captured_at_ms=self.cache.clock(), owner_user_id=user_id)

        if not self._is_current(user_id, generation):
            refresh_counter.labels(outcome="discarded").inc()
            log_refresh(user_id, "discarded", (time.time() - start_time) * 1000)
            return fetched

        await self.cache.put(snapshot, user_id, captured_at_ms=fetched.captured_at_ms)
        self.last_error = None
        refresh_counter.labels(outcome="applied").inc()
        log_refresh(user_id, "applied", (time.time() - start_time) * 1000)
        return fetched


class RefresherPool:
    """
    One refresher per user, all sharing the same cache slot.

    Used by the HTTP surface, where concurrent requests for different users
    must not supersede each other. Idle refreshers beyond `max_users` are
    dropped oldest first.
    """

    def __init__(self, cache: DashboardCache, fetch_snapshot: FetchSnapshot, max_users: Optional[int] = None):
        self.cache = cache
        self.fetch_snapshot = fetch_snapshot
        self.max_users = max_users if max_users is not None else settings.dashboard_refresher_pool_size
        self._refreshers: OrderedDict = OrderedDict()

    def __len__(self) -> int:
        return len(self._refreshers)

    def for_user(self, user_id: str) -> DashboardRefresher:
        refresher = self._refreshers.get(user_id)
        if refresher is None:
            refresher = DashboardRefresher(self.cache, self.fetch_snapshot)
            refresher.activate(user_id)
            self._refreshers[user_id] = refresher
            self._evict_idle(keep=user_id)
        else:
            self._refreshers.move_to_end(user_id)
        return refresher

    def _evict_idle(self, keep: str) -> None:
        for user_id in list(self._refreshers):
            if len(self._refreshers) <= self.max_users:
                return
            if user_id != keep and not self._refreshers[user_id].in_flight:
                del self._refreshers[user_id]

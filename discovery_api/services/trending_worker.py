"""
Trending worker: the one long-lived background task.

Recomputes every trending window from the content store on a fixed interval
and swaps the snapshot into the trending cache. A run that is triggered while
another is in flight is skipped, not queued. A failed run is logged and leaves
the previous snapshot in place; the next tick retries.

Run in at most one replica (TRENDING_WORKER_ENABLED), or disable it everywhere
and call scripts/recalculate_trending.py from an external scheduler.
"""

import asyncio
import logging
from datetime import datetime
from typing import Optional

from discovery.models.config import DEFAULT_CONFIG, DiscoveryConfig
from discovery.stages.trending import compute_trending_snapshot
from discovery.utils.time import utc_now

from .content_store import ContentStore
from .trending_cache import TrendingCache

logger = logging.getLogger(__name__)


class TrendingWorker:
    """Periodic trending recalculation with a skip-if-running guard."""

    def __init__(
        self,
        content_store: ContentStore,
        trending_cache: TrendingCache,
        config: DiscoveryConfig = DEFAULT_CONFIG,
        interval_seconds: Optional[float] = None,
    ):
        self._content_store = content_store
        self._cache = trending_cache
        self._config = config
        self.interval_seconds = interval_seconds or config.trending_interval_seconds
        self._lock = asyncio.Lock()
        self._task: Optional[asyncio.Task] = None
        self.runs_completed = 0
        self.runs_failed = 0
        self.runs_skipped = 0
        self.last_success_at: Optional[datetime] = None
        self.last_error: Optional[str] = None

    @property
    def is_running(self) -> bool:
        """True while a calculation is in flight."""
        return self._lock.locked()

    @property
    def is_scheduled(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> bool:
        """
        One calculation cycle. Returns True when a new snapshot was written,
        False when skipped (already running) or failed.
        """
        if self._lock.locked():
            self.runs_skipped += 1
            logger.info("[trending] SKIPPED_ALREADY_RUNNING")
            return False
        async with self._lock:
            started = utc_now()
            try:
                contents = await self._content_store.list_active()
                # CPU-bound over the whole corpus, so it runs in a worker thread
                snapshot = await asyncio.to_thread(
                    compute_trending_snapshot, contents, started, self._config
                )
                await self._cache.replace_snapshot(snapshot, started)
            except Exception as e:
                self.runs_failed += 1
                self.last_error = str(e)
                logger.error("[trending] RUN_FAILED error=%s", e, exc_info=True)
                return False
            self.runs_completed += 1
            self.last_success_at = started
            self.last_error = None
            elapsed = (utc_now() - started).total_seconds()
            logger.info(
                "[trending] RUN_COMPLETE corpus=%s %s elapsed=%.2fs",
                len(contents),
                " ".join(f"{w.value}={len(entries)}" for w, entries in snapshot.items()),
                elapsed,
            )
            return True

    async def _loop(self) -> None:
        logger.info("[trending] Started, interval=%ss", self.interval_seconds)
        try:
            while True:
                await self.run_once()
                await asyncio.sleep(self.interval_seconds)
        except asyncio.CancelledError:
            logger.info("[trending] Received cancellation signal")
            raise
        finally:
            logger.info(
                "[trending] Shutting down. Completed: %s, Failed: %s, Skipped: %s",
                self.runs_completed, self.runs_failed, self.runs_skipped,
            )

    def start(self) -> None:
        """Run immediately, then every interval, as a background task on the running loop."""
        if self.is_scheduled:
            return
        self._task = asyncio.create_task(self._loop(), name="trending-worker")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

"""
Trending Calculator Tests

Velocity x decay x view normalization per window, zero-view handling, top-N
truncation, and the background worker's skip-if-running and failure behavior.

Run:
----
    pytest tests/test_trending.py -v
"""

import asyncio
import time
from datetime import timedelta

import pytest

from discovery.models import ContentMetrics, DiscoveryConfig, TimeWindow, TrendingEntry
from discovery.stages.trending import compute_trending_snapshot, compute_window, trending_score
from discovery_api.services import InMemoryTrendingCache, JsonContentStore, TrendingWorker
from discovery_api.services import discovery_service as discovery_service_module
from discovery_api.services import trending_worker as trending_worker_module

from .helpers import NOW, make_content, make_service, run


class TestTrendingScore:
    """Pure score function."""

    @pytest.fixture(autouse=True)
    def setup(self):
        self.config = DiscoveryConfig()

    def test_zero_views_is_zero(self):
        metrics = ContentMetrics(views=0, likes=50)
        for window in TimeWindow:
            assert trending_score(metrics, 0.0, window, self.config) == 0.0

    def test_formula(self):
        metrics = ContentMetrics(views=50, likes=10, saves=5, shares=5)
        # velocity 0.4, one half-life old, normalization 0.5
        assert trending_score(metrics, 24.0, TimeWindow.DAY, self.config) == pytest.approx(0.1)
        assert trending_score(metrics, 2.0, TimeWindow.HOUR, self.config) == pytest.approx(0.1)

    def test_shorter_window_decays_faster(self):
        metrics = ContentMetrics(views=200, likes=40)
        scores = [trending_score(metrics, 12.0, w, self.config) for w in TimeWindow]
        assert scores == sorted(scores)

    def test_view_saturation(self):
        a = trending_score(ContentMetrics(views=100, likes=20), 0.0, TimeWindow.DAY, self.config)
        b = trending_score(ContentMetrics(views=1000, likes=200), 0.0, TimeWindow.DAY, self.config)
        assert a == pytest.approx(b) == pytest.approx(0.2)


class TestComputeWindow:
    """Ranking, filtering, and truncation of a window."""

    @pytest.fixture(autouse=True)
    def setup(self):
        self.config = DiscoveryConfig()

    def test_zero_view_items_omitted(self):
        items = [
            make_content("seen", created_at=NOW - timedelta(hours=1), metrics={"views": 100, "likes": 30}),
            make_content("unseen", created_at=NOW, metrics={"views": 0, "likes": 0}),
        ]
        entries = compute_window(items, TimeWindow.DAY, NOW, self.config)
        assert [e.content_id for e in entries] == ["seen"]
        assert entries[0].rank == 1
        assert entries[0].view_count == 100

    def test_old_and_inactive_skipped(self):
        items = [
            make_content("old", created_at=NOW - timedelta(days=30), metrics={"views": 100, "likes": 90}),
            make_content("off", created_at=NOW, is_active=False, metrics={"views": 100, "likes": 90}),
        ]
        assert compute_window(items, TimeWindow.WEEK, NOW, self.config) == []

    def test_undated_items_never_trend(self):
        items = [
            make_content("dated", created_at=NOW - timedelta(hours=1), metrics={"views": 100, "likes": 30}),
            make_content("undated", created_at=None, published_at=None, metrics={"views": 100, "likes": 90}),
        ]
        for window in TimeWindow:
            entries = compute_window(items, window, NOW, self.config)
            assert [e.content_id for e in entries] == ["dated"]

    def test_top_n(self):
        items = [
            make_content(f"c{i:03d}", created_at=NOW - timedelta(minutes=i), metrics={"views": 100, "likes": 50})
            for i in range(150)
        ]
        entries = compute_window(items, TimeWindow.DAY, NOW, self.config)
        assert len(entries) == 100
        assert [e.rank for e in entries] == list(range(1, 101))
        assert entries[0].content_id == "c000"
        scores = [e.trending_score for e in entries]
        assert scores == sorted(scores, reverse=True)

    def test_snapshot_has_every_window(self):
        items = [make_content("a", created_at=NOW, metrics={"views": 100, "likes": 30})]
        snapshot = compute_trending_snapshot(items, NOW, self.config)
        assert set(snapshot) == set(TimeWindow)
        assert all(len(v) == 1 for v in snapshot.values())


class _BlockingStore(JsonContentStore):
    """list_active waits until released, so a run can be held in flight."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.release = asyncio.Event()
        self.entered = asyncio.Event()

    async def list_active(self, limit=None):
        self.entered.set()
        await self.release.wait()
        return await super().list_active(limit)


class _FailingStore(JsonContentStore):
    async def list_active(self, limit=None):
        raise RuntimeError("content store offline")


class TestTrendingWorker:
    """Background recalculation."""

    @pytest.fixture(autouse=True)
    def setup(self):
        self.config = DiscoveryConfig()
        self.items = [make_content("a", created_at=NOW, metrics={"views": 100, "likes": 30})]

    def test_run_once_writes_snapshot(self):
        cache = InMemoryTrendingCache()
        worker = TrendingWorker(JsonContentStore(contents=self.items), cache, self.config)

        async def scenario():
            assert await worker.run_once()
            return await cache.get_snapshot(), await cache.last_computed_at()

        snapshot, computed_at = run(scenario())
        assert computed_at is not None
        assert worker.runs_completed == 1
        assert set(snapshot) == set(TimeWindow)

    def test_overlapping_run_is_skipped(self):
        async def scenario():
            store = _BlockingStore(contents=self.items)
            worker = TrendingWorker(store, InMemoryTrendingCache(), self.config)
            first = asyncio.create_task(worker.run_once())
            await store.entered.wait()
            assert worker.is_running
            second = await worker.run_once()
            store.release.set()
            return await first, second, worker

        first, second, worker = run(scenario())
        assert first is True
        assert second is False
        assert worker.runs_skipped == 1
        assert worker.runs_completed == 1

    def test_failure_keeps_previous_snapshot(self):
        cache = InMemoryTrendingCache()
        previous = {
            TimeWindow.DAY: [TrendingEntry(content_id="old", window=TimeWindow.DAY, trending_score=0.5, rank=1)]
        }

        async def scenario():
            await cache.replace_snapshot(previous, NOW)
            worker = TrendingWorker(_FailingStore(), cache, self.config)
            ok = await worker.run_once()
            return ok, worker, await cache.get_snapshot()

        ok, worker, snapshot = run(scenario())
        assert ok is False
        assert worker.runs_failed == 1
        assert "offline" in worker.last_error
        assert [e.content_id for e in snapshot[TimeWindow.DAY]] == ["old"]

    def test_calculation_does_not_stall_the_loop(self, monkeypatch):
        def slow_snapshot(contents, now, config):
            time.sleep(0.3)
            return {}

        monkeypatch.setattr(trending_worker_module, "compute_trending_snapshot", slow_snapshot)

        async def scenario():
            worker = TrendingWorker(JsonContentStore(contents=self.items), InMemoryTrendingCache(), self.config)
            run_task = asyncio.create_task(worker.run_once())
            ticks = 0
            while not run_task.done():
                await asyncio.sleep(0.01)
                ticks += 1
            return await run_task, ticks

        ok, ticks = run(scenario())
        assert ok is True
        assert ticks >= 10

    def test_on_demand_window_does_not_stall_the_loop(self, monkeypatch):
        def slow_window(contents, window, now, config):
            time.sleep(0.3)
            return []

        monkeypatch.setattr(discovery_service_module, "compute_window", slow_window)
        service = make_service(self.items)

        async def scenario():
            read = asyncio.create_task(service.get_trending(TimeWindow.DAY, 5))
            ticks = 0
            while not read.done():
                await asyncio.sleep(0.01)
                ticks += 1
            return await read, ticks

        (items, from_cache), ticks = run(scenario())
        assert items == []
        assert from_cache is False
        assert ticks >= 10

    def test_start_and_stop(self):
        async def scenario():
            worker = TrendingWorker(
                JsonContentStore(contents=self.items), InMemoryTrendingCache(), self.config,
                interval_seconds=3600,
            )
            worker.start()
            assert worker.is_scheduled
            for _ in range(20):
                if worker.runs_completed:
                    break
                await asyncio.sleep(0.01)
            await worker.stop()
            return worker

        worker = run(scenario())
        assert worker.runs_completed == 1
        assert not worker.is_scheduled

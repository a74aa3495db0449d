"""
Trending calculation (pure part).

trending_score = (interactions / views) * 2^(-age_hours / half_life[window]) * min(1, views / saturation)

Zero views is a defined zero score. Items with no created or published
timestamp have no age to decay, so they never trend. A snapshot is computed for every window
in full before anything is written; the worker then swaps each window atomically.
"""

import math
from datetime import datetime, timedelta
from typing import Dict, Iterable, List

from discovery.models.config import DEFAULT_CONFIG, DiscoveryConfig
from discovery.models.content import Content, ContentMetrics
from discovery.models.signals import TimeWindow, TrendingEntry
from discovery.utils.scores import finite_or
from discovery.utils.time import age_hours


def trending_score(
    metrics: ContentMetrics,
    age: float,
    window: TimeWindow,
    config: DiscoveryConfig = DEFAULT_CONFIG,
) -> float:
    """Velocity x time decay x view normalization. 0.0 for zero views."""
    views = metrics.views
    if views <= 0:
        return 0.0
    velocity = metrics.interaction_count / views
    half_life = config.trending_half_life_hours.get(window.value, 24.0)
    decay = math.exp(-math.log(2) * max(0.0, finite_or(age, 0.0)) / max(1e-9, half_life))
    normalization = min(1.0, views / max(1e-9, config.trending_view_saturation))
    return max(0.0, finite_or(velocity * decay * normalization, 0.0))


def compute_window(
    contents: Iterable[Content],
    window: TimeWindow,
    now: datetime,
    config: DiscoveryConfig = DEFAULT_CONFIG,
) -> List[TrendingEntry]:
    """Top-N entries for one window with score above trending_min_score."""
    cutoff = now - timedelta(days=config.trending_lookback_days)
    scored = []
    for c in contents:
        if not c.is_active:
            continue
        ts = c.freshness_timestamp
        # undated items are skipped
        if ts is None or ts < cutoff:
            continue
        score = trending_score(c.metrics, age_hours(ts, now), window, config)
        if score <= config.trending_min_score:
            continue
        scored.append((score, c))

    scored.sort(key=lambda x: (-x[0], x[1].id))
    return [
        TrendingEntry(
            content_id=c.id,
            window=window,
            trending_score=score,
            interaction_count=c.interaction_count,
            view_count=c.metrics.views,
            rank=i + 1,
            computed_at=now,
        )
        for i, (score, c) in enumerate(scored[: config.trending_top_n])
    ]


def compute_trending_snapshot(
    contents: Iterable[Content],
    now: datetime,
    config: DiscoveryConfig = DEFAULT_CONFIG,
) -> Dict[TimeWindow, List[TrendingEntry]]:
    """All windows, computed completely before the caller persists anything."""
    items = list(contents)
    return {window: compute_window(items, window, now, config) for window in TimeWindow}

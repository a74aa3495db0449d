"""
Selection Tests

Wildness to band, slice, and epsilon mapping, and the statistical shape of
the pick: greedy at 0, broad at 100.

Run:
----
    pytest tests/test_selection.py -v
"""

from collections import Counter

import numpy as np
import pytest

from discovery.errors import EmptyPoolError
from discovery.models import DiscoveryConfig, ScoredCandidate, UserAffinity
from discovery.models.preferences import DEFAULT_WILDNESS, clamp_wildness
from discovery.stages.selection import (
    epsilon_for,
    resolve_band,
    select_candidate,
    sharpness_for,
    slice_size_for,
)

from .helpers import make_content


def _scored(cid, score, topics=("science",), domain=None):
    return ScoredCandidate(
        content=make_content(cid, topics=list(topics), domain=domain or f"{cid}.com"),
        base_score=0.5,
        quality_score=0.5,
        freshness_score=1.0,
        popularity_score=0.5,
        similarity_score=0.5,
        similarity_factor=0.75,
        reputation_boost=1.0,
        engagement_boost=1.0,
        final_score=score,
    )


def _ranked(n=100):
    return [_scored(f"c{i:03d}", 1.0 - i * 0.005) for i in range(n)]


class TestWildnessMapping:
    """Band boundaries and interpolation."""

    @pytest.fixture(autouse=True)
    def setup(self):
        self.config = DiscoveryConfig()

    def test_band_boundaries(self):
        assert resolve_band(0, self.config).name == "low"
        assert resolve_band(20, self.config).name == "low"
        assert resolve_band(21, self.config).name == "medium"
        assert resolve_band(60, self.config).name == "medium"
        assert resolve_band(61, self.config).name == "high"
        assert resolve_band(100, self.config).name == "high"

    def test_slice_and_epsilon_endpoints(self):
        assert slice_size_for(0, self.config) == 1
        assert epsilon_for(0, self.config) == 0.0
        assert slice_size_for(20, self.config) == 3
        assert epsilon_for(20, self.config) == pytest.approx(0.02)
        assert slice_size_for(100, self.config) == 50
        assert epsilon_for(100, self.config) == pytest.approx(0.20)

    def test_sharpness_decreases_with_wildness(self):
        assert sharpness_for(0, self.config) == pytest.approx(4.0)
        assert sharpness_for(100, self.config) == pytest.approx(1.0)

    def test_clamping(self):
        assert clamp_wildness(-5) == 0
        assert clamp_wildness(150) == 100
        assert clamp_wildness(None) == DEFAULT_WILDNESS
        assert clamp_wildness(float("nan")) == DEFAULT_WILDNESS
        assert slice_size_for(500, self.config) == slice_size_for(100, self.config)


class TestSelectCandidate:
    """Distribution of picks."""

    @pytest.fixture(autouse=True)
    def setup(self):
        self.config = DiscoveryConfig()
        self.ranked = _ranked()

    def _picks(self, wildness, n=1000, seed=11, affinity=None, ranked=None):
        rng = np.random.default_rng(seed)
        ranked = ranked or self.ranked
        return [
            select_candidate(ranked, wildness, affinity, self.config, rng).rank
            for _ in range(n)
        ]

    def test_wildness_zero_is_greedy(self):
        assert set(self._picks(0, n=200)) == {0}

    def test_low_band_stays_in_top_three(self):
        picks = self._picks(20)
        in_slice = sum(1 for r in picks if r < 3)
        assert in_slice / len(picks) >= 0.95

    def test_high_wildness_spreads_picks(self):
        low = Counter(self._picks(10))
        high = Counter(self._picks(100))
        assert len(high) > len(low)
        assert max(high.values()) < max(low.values())

    def test_exploration_reported(self):
        rng = np.random.default_rng(3)
        results = [select_candidate(self.ranked, 100, None, self.config, rng) for _ in range(1000)]
        explored = [r for r in results if r.explored]
        assert explored
        assert all(r.rank >= r.slice_size for r in explored)
        assert 0.1 < len(explored) / len(results) < 0.3

    def test_single_candidate(self):
        result = select_candidate(self.ranked[:1], 100, None, self.config, np.random.default_rng(0))
        assert result.rank == 0
        assert not result.explored

    def test_empty_raises(self):
        with pytest.raises(EmptyPoolError):
            select_candidate([], 50, None, self.config)

    def test_novelty_favors_unseen_topics(self):
        ranked = [_scored(f"s{i}", 0.5, topics=["science"]) for i in range(5)]
        ranked += [_scored(f"m{i}", 0.5, topics=["music"]) for i in range(5)]
        affinity = UserAffinity(seen_topics={"science": 10}, interaction_count=10)
        picks = self._picks(100, n=2000, affinity=affinity, ranked=ranked)
        music = sum(1 for r in picks if ranked[r].content.topics == ["music"])
        assert music / len(picks) > 0.52

"""
Similar Content Tests

Jaccard topic similarity blended with quality, freshness, popularity, and
the same-domain bonus.

Run:
----
    pytest tests/test_similar.py -v
"""

import pytest

from discovery.errors import ContentNotFoundError
from discovery.models import DiscoveryConfig, TimeWindow, TrendingEntry
from discovery.stages.similar import find_similar, jaccard

from .helpers import NOW, make_content, make_service, run


class TestFindSimilar:
    """Pure ranking of similar items."""

    @pytest.fixture(autouse=True)
    def setup(self):
        self.config = DiscoveryConfig()
        self.reference = make_content("ref", topics=["science", "space"], domain="nasa.gov")

    def test_jaccard(self):
        assert jaccard(["a", "b"], ["b", "c"]) == pytest.approx(1 / 3)
        assert jaccard([], ["a"]) == 0.0
        assert jaccard(["a"], ["a"]) == 1.0

    def test_requires_shared_topic_and_skips_reference(self):
        candidates = [
            self.reference,
            make_content("same", topics=["science", "space"]),
            make_content("none", topics=["cooking"]),
        ]
        out = find_similar(self.reference, candidates, 10, NOW, config=self.config)
        assert [s.content.id for s in out] == ["same"]
        assert out[0].similarity == 1.0
        assert out[0].shared_topics == ["science", "space"]

    def test_higher_overlap_ranks_first(self):
        candidates = [
            make_content("half", topics=["science", "art"]),
            make_content("full", topics=["science", "space"]),
        ]
        out = find_similar(self.reference, candidates, 10, NOW, config=self.config)
        assert [s.content.id for s in out] == ["full", "half"]

    def test_same_domain_bonus(self):
        candidates = [
            make_content("other", topics=["science"], domain="example.org"),
            make_content("sibling", topics=["science"], domain="nasa.gov"),
        ]
        out = find_similar(self.reference, candidates, 10, NOW, config=self.config)
        assert out[0].content.id == "sibling"
        assert out[0].overall_score - out[1].overall_score == pytest.approx(0.05)

    def test_min_similarity_and_limit(self):
        candidates = [make_content(f"c{i}", topics=["science", f"t{i}"]) for i in range(20)]
        candidates.append(make_content("full", topics=["science", "space"]))
        assert [s.content.id for s in find_similar(
            self.reference, candidates, 10, NOW, min_similarity=0.5, config=self.config
        )] == ["full"]
        assert len(find_similar(self.reference, candidates, 5, NOW, config=self.config)) == 5

    def test_trending_window_attached(self):
        trending = {
            TimeWindow.DAY: [TrendingEntry(content_id="t", window=TimeWindow.DAY, trending_score=0.4, rank=1)]
        }
        out = find_similar(
            self.reference, [make_content("t", topics=["space"])], 10, NOW,
            trending=trending, config=self.config,
        )
        assert out[0].trending_window == TimeWindow.DAY


class TestRequestSimilar:
    """Service entry point."""

    @pytest.fixture(autouse=True)
    def setup(self):
        self.service = make_service([
            make_content("ref", topics=["science", "space"]),
            make_content("a", topics=["space"]),
            make_content("b", topics=["cooking"]),
        ])

    def test_returns_topic_neighbours(self):
        out = run(self.service.request_similar("ref", limit=5))
        assert [s.content.id for s in out] == ["a"]

    def test_unknown_reference(self):
        with pytest.raises(ContentNotFoundError):
            run(self.service.request_similar("missing"))

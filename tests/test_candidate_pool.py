"""
Candidate Pool Tests

Pool sizing, sort rotation, exclusion bounding, and the in-memory filter that
guarantees nothing already seen reaches ranking.

Run:
----
    pytest tests/test_candidate_pool.py -v
"""

from datetime import datetime, timedelta, timezone

import pytest

from discovery.models import DiscoveryConfig, SortStrategy
from discovery.stages.candidate_pool import (
    apply_domain_diversity,
    assess_exhaustion,
    bounded_exclusions,
    compute_pool_size,
    filter_candidates,
    finalize_pool,
    merge_exclusions,
    needs_widening,
    next_widened_size,
    order_by_topic_match,
    select_sort_strategy,
    sort_for_strategy,
)

from .helpers import NOW, make_content, make_corpus


class TestPoolSize:
    """compute_pool_size grows with exclusions and is capped."""

    @pytest.fixture(autouse=True)
    def setup(self):
        self.config = DiscoveryConfig()

    def test_base_size_for_new_user(self):
        assert compute_pool_size(0, self.config) == 500
        assert compute_pool_size(250, self.config) == 500

    def test_non_decreasing(self):
        sizes = [compute_pool_size(e, self.config) for e in range(0, 6000, 37)]
        assert sizes == sorted(sizes)

    def test_growth_and_cap(self):
        assert compute_pool_size(1000, self.config) == 875
        assert compute_pool_size(5000, self.config) == 1500
        assert compute_pool_size(10 ** 7, self.config) == 1500

    def test_negative_exclusions_treated_as_zero(self):
        assert compute_pool_size(-10, self.config) == 500


class TestSortRotation:
    """The store ordering rotates every 15 minutes across four strategies."""

    def test_rotates_every_period(self):
        start = datetime(2026, 1, 1, tzinfo=timezone.utc)
        seen = [select_sort_strategy(start + timedelta(seconds=900 * k)) for k in range(8)]
        assert set(seen) == set(SortStrategy)
        assert seen[:4] == seen[4:]

    def test_stable_within_period(self):
        slot_start = datetime.fromtimestamp(900 * 2_000_000, tz=timezone.utc)
        assert select_sort_strategy(slot_start) == select_sort_strategy(slot_start + timedelta(seconds=899))

    def test_sort_for_strategy_is_descending(self):
        corpus = make_corpus(20, now=NOW)
        for strategy in SortStrategy:
            ordered = sort_for_strategy(reversed(corpus), strategy)
            assert [c.id for c in ordered] == [c.id for c in corpus]


class TestExclusions:
    """Bounded store filter plus the complete in-memory filter."""

    def test_bounded_keeps_most_recent(self):
        ids = [f"c{i}" for i in range(5000)]
        bounded = bounded_exclusions(ids, 1000)
        assert bounded == ids[:1000]

    def test_bounded_dedupes(self):
        assert bounded_exclusions(["a", "a", "b", "", "c"], 2) == ["a", "b"]

    def test_merge_puts_session_first(self):
        merged = merge_exclusions(["s1", "s2"], ["h1", "s1", "h2"])
        assert merged == ["s2", "s1", "h1", "h2"]

    def test_filter_applies_full_set_regardless_of_size(self):
        corpus = make_corpus(3000, now=NOW)
        excluded = {c.id for c in corpus[:2500]}
        kept = filter_candidates(corpus, excluded)
        assert len(kept) == 500
        assert not excluded.intersection(c.id for c in kept)

    def test_filter_blocked_domains_and_subdomains(self):
        items = [
            make_content("a", domain="spam.com"),
            make_content("b", domain="news.spam.com"),
            make_content("c", domain="good.org"),
            make_content("d", domain="good.org", is_active=False),
        ]
        kept = filter_candidates(items, set(), ["SPAM.com"])
        assert [c.id for c in kept] == ["c"]


class TestPoolAssembly:
    """Topic ordering, domain cap, exhaustion warning, and widening decisions."""

    @pytest.fixture(autouse=True)
    def setup(self):
        self.config = DiscoveryConfig()

    def test_topic_match_is_ordering_not_gate(self):
        items = [
            make_content("a", topics=["music"]),
            make_content("b", topics=["science"]),
            make_content("c", topics=["design"]),
        ]
        ordered = order_by_topic_match(items, ["science"])
        assert [c.id for c in ordered] == ["b", "a", "c"]

    def test_domain_cap(self):
        items = [make_content(f"x{i}", domain="one.com") for i in range(30)]
        items += [make_content(f"y{i}", domain="two.com") for i in range(5)]
        capped = apply_domain_diversity(items, 20)
        assert sum(1 for c in capped if c.domain == "one.com") == 20
        assert sum(1 for c in capped if c.domain == "two.com") == 5
        assert apply_domain_diversity(items, 0) == items

    def test_exhaustion_warning_is_not_an_error(self):
        warning = assess_exhaustion(40, 300, "u1", self.config)
        assert warning is not None
        assert warning.code == "CONTENT_EXHAUSTION"
        assert warning.exclusion_count == 300
        assert assess_exhaustion(40, 100, "u1", self.config) is None
        assert assess_exhaustion(200, 5000, "u1", self.config) is None

    def test_finalize_truncates_and_reports(self):
        corpus = make_corpus(900, now=NOW)
        excluded = {corpus[0].id, corpus[1].id}
        pool = finalize_pool(
            corpus, excluded, [], [], requested_size=500,
            sort_strategy=SortStrategy.QUALITY, store_filter_count=2, config=self.config,
        )
        assert pool.size == 500
        assert pool.exclusion_count == 2
        assert not excluded.intersection(c.id for c in pool.candidates)
        assert pool.warnings == []

    def test_widening_only_when_thin_and_store_had_more(self):
        assert needs_widening(10, 500, 500, self.config)
        assert not needs_widening(10, 300, 500, self.config)
        assert not needs_widening(150, 500, 500, self.config)

    def test_widened_size_bounded_by_cap_attempts_and_scan_budget(self):
        assert next_widened_size(500, 1, 500, self.config) == 1000
        assert next_widened_size(2000, 2, 2500, self.config) == 3000
        assert next_widened_size(3000, 3, 9000, self.config) == 1000
        assert next_widened_size(3000, 4, 4000, self.config) is None
        assert next_widened_size(3000, 2, 10000, self.config) is None

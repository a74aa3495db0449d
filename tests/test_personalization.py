"""
Personalization Analyzer Tests

Interaction history reduced to topic/domain affinity. Cold-start users must
score exactly like stated-topic matching, never below it.

Run:
----
    pytest tests/test_personalization.py -v
"""

from datetime import timedelta

import pytest

from discovery.models import DiscoveryConfig, Interaction, UserAffinity
from discovery.stages.personalization import (
    analyze_interactions,
    domain_affinity,
    familiarity,
    personalized_similarity,
    topic_affinity,
    topic_overlap,
)

from .helpers import NOW, make_content


def _interaction(action, topics, domain="example.org", minutes_ago=0, content_id="x"):
    return Interaction(
        user_id="u1",
        content_id=content_id,
        action=action,
        topics=topics,
        domain=domain,
        timestamp=NOW - timedelta(minutes=minutes_ago),
    )


class TestAnalyzeInteractions:
    """Weight maps built from recent history."""

    @pytest.fixture(autouse=True)
    def setup(self):
        self.config = DiscoveryConfig()

    def test_empty_history_is_neutral(self):
        affinity = analyze_interactions([], self.config)
        assert affinity.is_cold_start
        assert affinity.interaction_count == 0

    def test_save_counts_double(self):
        affinity = analyze_interactions(
            [_interaction("like", ["science"]), _interaction("save", ["history"])],
            self.config,
        )
        assert affinity.liked_topics == {"science": 1.0, "history": 2.0}
        assert affinity.liked_domains == {"example.org": 2.0}

    def test_share_counts_as_like_and_skip_as_dislike(self):
        affinity = analyze_interactions(
            [_interaction("share", ["music"]), _interaction("skip", ["sports"])],
            self.config,
        )
        assert affinity.liked_topics == {"music": 1.0}
        assert affinity.disliked_topics == {"sports": 1.0}

    def test_view_only_counts_as_exposure(self):
        affinity = analyze_interactions([_interaction("view", ["art"], domain="a.com")], self.config)
        assert affinity.is_cold_start
        assert affinity.seen_topics == {"art": 1}
        assert affinity.seen_domains == {"a.com": 1}

    def test_only_most_recent_window_used(self):
        history = [_interaction("like", ["old"], minutes_ago=1000 + i) for i in range(50)]
        history += [_interaction("like", ["new"], minutes_ago=i) for i in range(100)]
        affinity = analyze_interactions(history, self.config)
        assert "old" not in affinity.liked_topics
        assert affinity.liked_topics["new"] == 100.0


class TestAffinityScores:
    """Lookups centered at 0.5."""

    @pytest.fixture(autouse=True)
    def setup(self):
        self.config = DiscoveryConfig()
        self.affinity = UserAffinity(
            liked_topics={"science": 4.0},
            disliked_topics={"sports": 2.0},
            liked_domains={"nature.com": 3.0},
        )

    def test_topic_overlap_edges(self):
        assert topic_overlap([], ["science"]) == 0.3
        assert topic_overlap(["science"], []) == 0.2
        assert topic_overlap(["science"], ["science", "art"]) == pytest.approx(0.65)
        assert topic_overlap(["science"], ["science"]) == pytest.approx(1.0)

    def test_topic_affinity(self):
        assert topic_affinity(self.affinity, ["science"], self.config) == 1.0
        assert topic_affinity(self.affinity, ["sports"], self.config) == pytest.approx(0.25)
        assert topic_affinity(self.affinity, ["cooking"], self.config) == 0.5

    def test_domain_affinity_log_scale(self):
        assert domain_affinity(self.affinity, "unknown.org") == 0.5
        assert 0.5 < domain_affinity(self.affinity, "nature.com") <= 1.0

    def test_cold_start_equals_overlap(self):
        content = make_content("a", topics=["science", "art"])
        sim = personalized_similarity(content, ["science"], UserAffinity.neutral(), self.config)
        assert sim == pytest.approx(topic_overlap(["science"], content.topics))

    def test_history_lifts_liked_topics(self):
        liked = make_content("a", topics=["science"], domain="nature.com")
        disliked = make_content("b", topics=["sports"], domain="nature.com")
        assert personalized_similarity(liked, [], self.affinity, self.config) > personalized_similarity(
            disliked, [], self.affinity, self.config
        )

    def test_familiarity(self):
        affinity = UserAffinity(seen_topics={"science": 4}, seen_domains={"a.com": 2}, interaction_count=4)
        assert familiarity(make_content("a", topics=["science"], domain="a.com"), affinity) == pytest.approx(0.75)
        assert familiarity(make_content("b", topics=["music"], domain="b.com"), affinity) == 0.0

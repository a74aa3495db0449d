"""
Personalization Analyzer

Reduces a user's recent interactions into liked/disliked topic maps, a
liked-domain map, and exposure counts, then scores candidate affinity from
them. Every affinity lookup is centered at 0.5 (neutral).

Weighting: save counts double a like on topics; share counts as a like;
skip feeds the disliked map, which is subtracted at half weight; view only
counts as exposure.
"""

import math
from typing import Iterable, List, Sequence

from discovery.models.affinity import UserAffinity
from discovery.models.config import DEFAULT_CONFIG, DiscoveryConfig
from discovery.models.content import Content
from discovery.models.interaction import Interaction, InteractionAction
from discovery.utils.scores import clamp, finite_or


def analyze_interactions(
    interactions: Sequence[Interaction],
    config: DiscoveryConfig = DEFAULT_CONFIG,
) -> UserAffinity:
    """
    Build UserAffinity from the most recent `history_limit` interactions.

    Zero interactions yields the neutral affinity, never an error.
    """
    recent = sorted(interactions, key=lambda i: i.timestamp, reverse=True)
    recent = recent[: config.history_limit]
    affinity = UserAffinity(interaction_count=len(recent))

    for it in recent:
        for topic in it.topics:
            affinity.seen_topics[topic] = affinity.seen_topics.get(topic, 0) + 1
        if it.domain:
            affinity.seen_domains[it.domain] = affinity.seen_domains.get(it.domain, 0) + 1

        if it.action in (InteractionAction.LIKE, InteractionAction.SHARE, InteractionAction.SAVE):
            weight = (
                config.save_topic_weight
                if it.action == InteractionAction.SAVE
                else config.like_topic_weight
            )
            for topic in it.topics:
                affinity.liked_topics[topic] = affinity.liked_topics.get(topic, 0.0) + weight
            if it.domain:
                affinity.liked_domains[it.domain] = affinity.liked_domains.get(it.domain, 0.0) + 1.0
        elif it.action == InteractionAction.SKIP:
            for topic in it.topics:
                affinity.disliked_topics[topic] = (
                    affinity.disliked_topics.get(topic, 0.0) + config.skip_topic_weight
                )
    return affinity


def topic_overlap(user_topics: Iterable[str], content_topics: Sequence[str]) -> float:
    """
    Raw overlap with stated preferences: 0.3 + 0.7 * matched fraction of content topics.
    0.3 when the user stated no topics; 0.2 when the content has none.
    """
    preferred = set(user_topics)
    if not preferred:
        return 0.3
    if not content_topics:
        return 0.2
    matched = sum(1 for t in content_topics if t in preferred)
    return 0.3 + 0.7 * (matched / len(content_topics))


def topic_affinity(
    affinity: UserAffinity,
    content_topics: Sequence[str],
    config: DiscoveryConfig = DEFAULT_CONFIG,
) -> float:
    """0.5 + 0.5 * net / total over the content's topics; 0.5 without history for them."""
    liked = sum(affinity.liked_topics.get(t, 0.0) for t in content_topics)
    disliked = sum(affinity.disliked_topics.get(t, 0.0) for t in content_topics)
    total = liked + disliked
    if total <= 0:
        return 0.5
    net = (liked - disliked * config.disliked_penalty) / total
    return clamp(finite_or(0.5 + net * 0.5, 0.5))


def domain_affinity(affinity: UserAffinity, domain: str) -> float:
    """Logarithmic in liked count: min(1, 0.5 + 0.2 * ln(n + 1)); 0.5 when unknown."""
    n = affinity.liked_domains.get(domain, 0.0)
    if n <= 0:
        return 0.5
    return min(1.0, 0.5 + math.log(n + 1) * 0.2)


def personalized_similarity(
    content: Content,
    user_topics: Iterable[str],
    affinity: UserAffinity,
    config: DiscoveryConfig = DEFAULT_CONFIG,
) -> float:
    """
    Blend stated-topic overlap with history affinity. Cold-start users get the
    overlap alone, so they are never penalized relative to topic matching.
    """
    overlap = topic_overlap(user_topics, content.topics)
    if affinity.is_cold_start:
        return clamp(overlap)
    history = 0.75 * topic_affinity(affinity, content.topics, config) + 0.25 * domain_affinity(
        affinity, content.domain
    )
    w = clamp(config.affinity_weight)
    return clamp(finite_or((1 - w) * overlap + w * history, overlap))


def matched_topics(user_topics: Iterable[str], content_topics: Sequence[str]) -> List[str]:
    preferred = set(user_topics)
    return [t for t in content_topics if t in preferred]


def familiarity(content: Content, affinity: UserAffinity) -> float:
    """
    How familiar the user already is with this content's topics and domain, in [0, 1].
    Used to up-weight rarely seen topics/domains at high wildness.
    """
    total = max(1, affinity.interaction_count)
    if content.topics:
        topic_part = max(affinity.seen_topics.get(t, 0) for t in content.topics) / total
    else:
        topic_part = 0.0
    domain_part = affinity.seen_domains.get(content.domain, 0) / total
    return clamp(0.5 * topic_part + 0.5 * domain_part)

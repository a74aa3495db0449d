"""
Ranking orchestration: score every pool candidate against one ScoringContext,
then sort by final score.

final = base * quality * freshness * popularity * similarity * reputation * engagement

Domain reputation and engagement stats arrive pre-fetched in the context
(batch-fetch-then-score); nothing here performs I/O.
"""

import logging
from typing import Iterable, List

from discovery.models.config import DEFAULT_CONFIG, DiscoveryConfig
from discovery.models.content import Content
from discovery.models.scoring import ScoredCandidate, ScoringContext
from discovery.stages.personalization import matched_topics, personalized_similarity
from discovery.utils.scores import finite_or

from .signals import (
    base_score,
    engagement_boost,
    freshness_score,
    popularity_score,
    quality_score,
    reputation_boost,
    similarity_factor,
)

logger = logging.getLogger(__name__)


def score_candidate(
    content: Content,
    context: ScoringContext,
    config: DiscoveryConfig = DEFAULT_CONFIG,
) -> ScoredCandidate:
    """Score one candidate. Pure; safe to call in any order."""
    base = base_score(content.metrics, config)
    quality = quality_score(content.quality, config)
    freshness = freshness_score(content, context.now, config)
    popularity = popularity_score(content.metrics, config)
    similarity = personalized_similarity(
        content, context.preferences.topics, context.affinity, config
    )
    sim_factor = similarity_factor(similarity)
    rep = reputation_boost(context.reputation.get(content.domain), config)
    eng = engagement_boost(context.engagement.get(content.id), config)

    final = base * quality * freshness * popularity * sim_factor * rep * eng
    final = max(0.0, finite_or(final, 0.0))

    return ScoredCandidate(
        content=content,
        base_score=base,
        quality_score=quality,
        freshness_score=freshness,
        popularity_score=popularity,
        similarity_score=similarity,
        similarity_factor=sim_factor,
        reputation_boost=rep,
        engagement_boost=eng,
        final_score=final,
        matched_topics=matched_topics(context.preferences.topics, content.topics),
    )


def _is_blacklisted(content: Content, context: ScoringContext) -> bool:
    rep = context.reputation.get(content.domain)
    return rep is not None and rep.blacklisted


def rank_candidates(
    candidates: Iterable[Content],
    context: ScoringContext,
    config: DiscoveryConfig = DEFAULT_CONFIG,
) -> List[ScoredCandidate]:
    """
    Score and sort candidates by final_score (descending; id breaks ties so
    ordering is deterministic). Blacklisted domains are dropped.
    """
    scored: List[ScoredCandidate] = []
    dropped = 0
    for content in candidates:
        if _is_blacklisted(content, context):
            dropped += 1
            continue
        scored.append(score_candidate(content, context, config))
    if dropped:
        logger.info("[ranking] BLACKLISTED_DOMAINS_DROPPED count=%s", dropped)

    scored.sort(key=lambda s: (-s.final_score, s.content.id))
    return scored

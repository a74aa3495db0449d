"""
Similar content ("more like this").

Jaccard similarity over topic sets, blended with quality, freshness, popularity,
and a small same-domain bonus. Reuses the scoring primitives.
"""

from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

from discovery.models.config import DEFAULT_CONFIG, DiscoveryConfig
from discovery.models.content import Content
from discovery.models.scoring import SimilarContent
from discovery.models.signals import TimeWindow, TrendingEntry
from discovery.stages.ranking.rationale import trending_window_for
from discovery.stages.ranking.signals import freshness_score, popularity_score, quality_score


def jaccard(a: Sequence[str], b: Sequence[str]) -> float:
    sa, sb = set(a), set(b)
    if not sa or not sb:
        return 0.0
    return len(sa & sb) / len(sa | sb)


def find_similar(
    reference: Content,
    candidates: Iterable[Content],
    limit: int,
    now: datetime,
    min_similarity: float = 0.0,
    trending: Optional[Dict[TimeWindow, List[TrendingEntry]]] = None,
    config: DiscoveryConfig = DEFAULT_CONFIG,
) -> List[SimilarContent]:
    """
    Candidates sharing at least one topic with reference, sorted by blended score.
    The reference itself and inactive content are skipped.
    """
    limit = max(1, min(limit, config.similar_max_limit))
    out: List[SimilarContent] = []
    for c in candidates:
        if c.id == reference.id or not c.is_active:
            continue
        sim = jaccard(reference.topics, c.topics)
        if sim <= 0 or sim < min_similarity:
            continue
        same_domain = 1.0 if c.domain and c.domain == reference.domain else 0.0
        overall = (
            sim * config.similar_weight_jaccard
            + quality_score(c.quality, config) * config.similar_weight_quality
            + freshness_score(c, now, config) * config.similar_weight_freshness
            + popularity_score(c.metrics, config) * config.similar_weight_popularity
            + same_domain * config.similar_weight_domain
        )
        out.append(
            SimilarContent(
                content=c,
                similarity=sim,
                overall_score=overall,
                shared_topics=sorted(set(reference.topics) & set(c.topics)),
                trending_window=trending_window_for(c.id, trending or {}),
            )
        )
    out.sort(key=lambda s: (-s.overall_score, s.content.id))
    return out[:limit]

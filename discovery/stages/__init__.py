"""Pipeline stages: candidate pool, personalization, ranking, selection, trending, similar."""

from .candidate_pool import (
    bounded_exclusions,
    compute_pool_size,
    filter_candidates,
    finalize_pool,
    merge_exclusions,
    select_sort_strategy,
)
from .orchestrator import create_discovery
from .personalization import analyze_interactions, personalized_similarity
from .ranking import build_rationale, rank_candidates, score_candidate
from .selection import select_candidate
from .similar import find_similar, jaccard
from .trending import compute_trending_snapshot, trending_score

__all__ = [
    "analyze_interactions",
    "bounded_exclusions",
    "build_rationale",
    "compute_pool_size",
    "compute_trending_snapshot",
    "create_discovery",
    "filter_candidates",
    "finalize_pool",
    "find_similar",
    "jaccard",
    "merge_exclusions",
    "personalized_similarity",
    "rank_candidates",
    "score_candidate",
    "select_candidate",
    "select_sort_strategy",
    "trending_score",
]

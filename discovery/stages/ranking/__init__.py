"""Scoring engine: per-candidate signals, ranking, and rationale."""

from .core import rank_candidates, score_candidate
from .rationale import build_rationale, trending_window_for
from .signals import (
    base_score,
    engagement_boost,
    freshness_score,
    popularity_score,
    quality_score,
    reputation_boost,
    similarity_factor,
    time_on_page_quality,
)

__all__ = [
    "base_score",
    "build_rationale",
    "engagement_boost",
    "freshness_score",
    "popularity_score",
    "quality_score",
    "rank_candidates",
    "reputation_boost",
    "score_candidate",
    "similarity_factor",
    "time_on_page_quality",
    "trending_window_for",
]

"""
Scoring models: per-request ScoringContext, ScoredCandidate, and the results of
selection and similar-content lookup.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from discovery.utils.time import utc_now

from .affinity import UserAffinity
from .content import Content
from .pool import PoolWarning
from .preferences import UserPreferences
from .signals import DomainReputation, EngagementStats, TimeWindow, TrendingEntry


class ScoringContext(BaseModel):
    """Everything request-time scoring needs, built once before the per-candidate loop."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    preferences: UserPreferences
    affinity: UserAffinity = Field(default_factory=UserAffinity)
    reputation: Dict[str, DomainReputation] = Field(default_factory=dict)
    engagement: Dict[str, EngagementStats] = Field(default_factory=dict)
    trending: Dict[TimeWindow, List[TrendingEntry]] = Field(default_factory=dict)
    now: datetime = Field(default_factory=utc_now)


class ScoredCandidate(BaseModel):
    """A content item with all its scoring components."""

    content: Content
    base_score: float
    quality_score: float
    freshness_score: float
    popularity_score: float
    similarity_score: float
    similarity_factor: float
    reputation_boost: float
    engagement_boost: float
    final_score: float
    matched_topics: List[str] = Field(default_factory=list)


class SelectionResult(BaseModel):
    candidate: ScoredCandidate
    # 0-based position in the ranked list.
    rank: int
    explored: bool
    band: str
    slice_size: int
    epsilon: float


class DiscoveryResult(BaseModel):
    """One discovery plus the explanation shown to the user."""

    content: Content
    rationale: str
    score: float
    rank: int
    explored: bool
    band: str
    wildness: int
    pool_size: int
    warnings: List[PoolWarning] = Field(default_factory=list)


class SimilarContent(BaseModel):
    content: Content
    similarity: float
    overall_score: float
    shared_topics: List[str] = Field(default_factory=list)
    trending_window: Optional[TimeWindow] = None

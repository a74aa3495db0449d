"""Data models for the discovery engine."""

from .affinity import UserAffinity
from .config import DEFAULT_CONFIG, DiscoveryConfig, SelectionBand, resolve_config
from .content import Content, ContentMetrics, ensure_contents
from .interaction import Interaction, InteractionAction, ensure_interactions
from .pool import CandidatePool, PoolWarning, SortStrategy
from .preferences import DEFAULT_WILDNESS, UserPreferences, clamp_wildness
from .scoring import (
    DiscoveryResult,
    ScoredCandidate,
    ScoringContext,
    SelectionResult,
    SimilarContent,
)
from .signals import DomainReputation, EngagementStats, TimeWindow, TrendingEntry

__all__ = [
    "CandidatePool",
    "Content",
    "ContentMetrics",
    "DEFAULT_CONFIG",
    "DEFAULT_WILDNESS",
    "DiscoveryConfig",
    "DiscoveryResult",
    "DomainReputation",
    "EngagementStats",
    "Interaction",
    "InteractionAction",
    "PoolWarning",
    "ScoredCandidate",
    "ScoringContext",
    "SelectionBand",
    "SelectionResult",
    "SimilarContent",
    "SortStrategy",
    "TimeWindow",
    "TrendingEntry",
    "UserAffinity",
    "UserPreferences",
    "clamp_wildness",
    "ensure_contents",
    "ensure_interactions",
    "resolve_config",
]

"""
Stumble Discovery Engine

Single entry point for the engine package:
- models/: DiscoveryConfig, Content, Interaction, UserPreferences, scoring results
- stages/: candidate_pool, personalization, ranking, selection, trending, similar, orchestrator
- errors: EmptyPoolError, ContentNotFoundError, UpstreamUnavailableError

Everything here is pure; stores and scheduling live in discovery_api.
"""

from discovery.errors import (
    ContentNotFoundError,
    DiscoveryError,
    EmptyPoolError,
    UpstreamUnavailableError,
)
from discovery.models import DEFAULT_CONFIG, DiscoveryConfig, resolve_config
from discovery.stages import (
    analyze_interactions,
    compute_pool_size,
    compute_trending_snapshot,
    create_discovery,
    find_similar,
    rank_candidates,
    select_candidate,
    select_sort_strategy,
)

__all__ = [
    "ContentNotFoundError",
    "DEFAULT_CONFIG",
    "DiscoveryConfig",
    "DiscoveryError",
    "EmptyPoolError",
    "UpstreamUnavailableError",
    "analyze_interactions",
    "compute_pool_size",
    "compute_trending_snapshot",
    "create_discovery",
    "find_similar",
    "rank_candidates",
    "resolve_config",
    "select_candidate",
    "select_sort_strategy",
]

"""
Discovery configuration: candidate pool, scoring, personalization, selection,
trending, and similar-content parameters.

DiscoveryConfig defaults are defined here. The server may pass a dict
(e.g. from discovery/config.json or DISCOVERY_CONFIG_PATH); from_dict() flattens
the nested groups and merges them with these defaults.
"""

import json
from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, model_validator


class SelectionBand(BaseModel):
    """One wildness band: slice size and ε interpolate linearly from min to max wildness."""

    name: str
    min_wildness: int
    max_wildness: int
    slice_start: int
    slice_end: int
    epsilon_start: float
    epsilon_end: float
    # Novelty up-weighting (seen topics/domains) applies only where enabled.
    novelty: bool = False


def _default_bands():
    return [
        SelectionBand(
            name="low", min_wildness=0, max_wildness=20,
            slice_start=1, slice_end=3, epsilon_start=0.0, epsilon_end=0.02,
        ),
        SelectionBand(
            name="medium", min_wildness=21, max_wildness=60,
            slice_start=3, slice_end=10, epsilon_start=0.06, epsilon_end=0.10,
        ),
        SelectionBand(
            name="high", min_wildness=61, max_wildness=100,
            slice_start=10, slice_end=50, epsilon_start=0.10, epsilon_end=0.20,
            novelty=True,
        ),
    ]


class DiscoveryConfig(BaseModel):
    """Configuration for the discovery engine."""

    # -------------------------------------------------------------------------
    # Candidate Pool
    # pool_size = base_pool_size while exclusions <= base_pool_size / 2,
    # then base_pool_size + pool_growth_factor * (E - base_pool_size / 2), capped.
    # -------------------------------------------------------------------------

    base_pool_size: int = 500
    pool_growth_factor: float = 0.5
    max_pool_size: int = 1500

    # Below this many eligible candidates the pool is considered thin.
    pool_floor: int = 100
    # Exhaustion warning fires when the pool is thin and the user has seen at least this many.
    exhaustion_exclusion_threshold: int = 250

    # Max ids pushed into the store-side exclusion filter (most recent first).
    # The engine always post-filters against the complete set.
    max_exclusion_filter: int = 1000

    # Widening: when the filtered pool is thin and the store returned a full page,
    # page further down the same ordering. Page size grows by widening_factor up to
    # widened_pool_cap; total rows scanned per request stop at max_scan_rows.
    widening_factor: float = 2.0
    max_widening_attempts: int = 3
    widened_pool_cap: int = 3000
    max_scan_rows: int = 10000

    # Sort strategy rotation period (seconds).
    rotation_seconds: int = 900

    # Max items per domain in the pool. 0 disables the cap.
    max_per_domain: int = 20

    # -------------------------------------------------------------------------
    # Scoring
    # final = base * quality * freshness * popularity * similarity * reputation * engagement
    # -------------------------------------------------------------------------

    # Bayesian smoothing of positive engagement rate.
    bayesian_prior: float = 0.5
    bayesian_weight: float = 10.0
    base_score_floor: float = 0.1
    save_weight: float = 1.2
    share_weight: float = 0.8

    # Quality used when content has none.
    default_quality: float = 0.5

    # freshness = floor + (1 - floor) * 2^(-age_days / half_life)
    freshness_half_life_days: float = 14.0
    freshness_floor: float = 0.6

    # popularity = floor + (1 - floor) * (1 - exp(-weighted / saturation))
    popularity_floor: float = 0.5
    popularity_saturation: float = 200.0
    popularity_like_weight: float = 3.0
    popularity_save_weight: float = 5.0
    popularity_share_weight: float = 4.0

    # Reputation boost = reputation_base + reputation_range * trust
    reputation_base: float = 0.8
    reputation_range: float = 0.4
    default_trust: float = 0.5

    # -------------------------------------------------------------------------
    # Personalization
    # similarity = (1 - w) * topic_overlap + w * (0.75 * topic_aff + 0.25 * domain_aff)
    # -------------------------------------------------------------------------

    history_limit: int = 100
    affinity_weight: float = 0.5
    like_topic_weight: float = 1.0
    save_topic_weight: float = 2.0
    skip_topic_weight: float = 1.0
    disliked_penalty: float = 0.5

    # -------------------------------------------------------------------------
    # Engagement (time on page)
    # -------------------------------------------------------------------------

    engagement_min_samples: int = 3
    engagement_full_confidence_samples: int = 20
    engagement_boost_base: float = 0.8
    engagement_boost_range: float = 0.4

    # -------------------------------------------------------------------------
    # Selection (wildness bands)
    # -------------------------------------------------------------------------

    # None resolves to the default low/medium/high bands.
    selection_bands: Optional[List[SelectionBand]] = None
    # Sharpness of in-slice weighting: score ** sharpness.
    sharpness_max: float = 4.0
    sharpness_min: float = 1.0
    novelty_weight: float = 1.0

    # -------------------------------------------------------------------------
    # Trending
    # -------------------------------------------------------------------------

    trending_half_life_hours: Dict[str, float] = {"hour": 2.0, "day": 24.0, "week": 72.0}
    trending_view_saturation: float = 100.0
    trending_min_score: float = 0.01
    trending_top_n: int = 100
    trending_interval_seconds: int = 900
    # Content older than this is ignored when computing trending.
    trending_lookback_days: int = 7

    # -------------------------------------------------------------------------
    # Similar content
    # overall = jaccard * w_j + quality * w_q + freshness * w_f + popularity * w_p + same_domain * w_d
    # -------------------------------------------------------------------------

    similar_weight_jaccard: float = 0.5
    similar_weight_quality: float = 0.2
    similar_weight_freshness: float = 0.15
    similar_weight_popularity: float = 0.1
    similar_weight_domain: float = 0.05
    similar_candidate_multiplier: int = 3
    similar_max_limit: int = 50

    # -------------------------------------------------------------------------
    # Service
    # -------------------------------------------------------------------------

    # Optional signal fetches degrade to neutral after this.
    fetch_timeout_seconds: float = 2.0
    # Exclusion history and content queries fail the request after this.
    required_fetch_timeout_seconds: float = 5.0
    # Max trending items per window returned by the read endpoint.
    trending_read_limit: int = 50

    @model_validator(mode="after")
    def validate_bands(self):
        if self.selection_bands is None:
            self.selection_bands = _default_bands()
        bands = sorted(self.selection_bands, key=lambda b: b.min_wildness)
        if bands[0].min_wildness != 0 or bands[-1].max_wildness != 100:
            raise ValueError("Selection bands must cover wildness 0..100")
        for prev, cur in zip(bands, bands[1:]):
            if cur.min_wildness != prev.max_wildness + 1:
                raise ValueError(
                    f"Selection bands must be contiguous: {prev.name} ends at "
                    f"{prev.max_wildness}, {cur.name} starts at {cur.min_wildness}"
                )
        for band in bands:
            if band.slice_start < 1 or band.slice_end < band.slice_start:
                raise ValueError(f"Invalid slice range for band {band.name}")
            if not (0.0 <= band.epsilon_start <= 1.0 and 0.0 <= band.epsilon_end <= 1.0):
                raise ValueError(f"Epsilon out of range for band {band.name}")
        self.selection_bands = bands
        if self.max_pool_size < self.base_pool_size:
            raise ValueError("max_pool_size must be >= base_pool_size")
        return self

    @model_validator(mode="after")
    def similar_weights_sum_to_one(self):
        total = (
            self.similar_weight_jaccard
            + self.similar_weight_quality
            + self.similar_weight_freshness
            + self.similar_weight_popularity
            + self.similar_weight_domain
        )
        if abs(total - 1.0) > 0.01:
            raise ValueError(f"Similar-content weights must sum to 1.0, got {total}")
        return self

    @classmethod
    def from_dict(cls, config_dict: Dict) -> "DiscoveryConfig":
        """Create config from dictionary (e.g., loaded from JSON). Groups are flattened."""
        flat = {}
        for group in (
            "candidate_pool",
            "scoring",
            "personalization",
            "engagement",
            "trending",
            "service",
        ):
            if group in config_dict:
                flat.update(config_dict[group])
        if "selection" in config_dict:
            sel = dict(config_dict["selection"])
            if "bands" in sel:
                flat["selection_bands"] = sel.pop("bands")
            flat.update(sel)
        if "similar" in config_dict:
            for k, v in config_dict["similar"].items():
                key = k if k.startswith("similar_") else f"similar_{k}"
                flat[key] = v
        for k, v in config_dict.items():
            if k in cls.model_fields:
                flat[k] = v
        return cls(**flat)

    @classmethod
    def from_file(cls, path: Union[Path, str]) -> "DiscoveryConfig":
        """Load config from a JSON file."""
        with open(path) as f:
            return cls.from_dict(json.load(f))


DEFAULT_CONFIG = DiscoveryConfig()


def resolve_config(config: Optional[Union[DiscoveryConfig, Dict]]) -> DiscoveryConfig:
    """Return a DiscoveryConfig from None, a dict, or an existing config."""
    if config is None:
        return DEFAULT_CONFIG
    if isinstance(config, dict):
        return DiscoveryConfig.from_dict(config)
    return config

"""
Selection: turn the ranked candidate list and a wildness value into exactly one pick.

Wildness maps to a band (low / medium / high). Inside a band the slice size and
exploration probability ε interpolate linearly, so wildness 0 is fully greedy
(top-1, ε = 0) and wildness 100 uses the widest slice with the highest ε.

With probability 1 - ε the pick is drawn from the top slice, weighted by
score ** sharpness (sharper at low wildness). With probability ε the pick is
uniform over candidates outside the slice. Bands with novelty enabled multiply
weights by 1 + novelty_weight * (1 - familiarity), favoring topics and domains
the user has seen least.
"""

from typing import List, Optional, Sequence

import numpy as np

from discovery.errors import EmptyPoolError
from discovery.models.affinity import UserAffinity
from discovery.models.config import DEFAULT_CONFIG, DiscoveryConfig, SelectionBand
from discovery.models.preferences import clamp_wildness
from discovery.models.scoring import ScoredCandidate, SelectionResult
from discovery.stages.personalization import familiarity


def resolve_band(wildness, config: DiscoveryConfig = DEFAULT_CONFIG) -> SelectionBand:
    w = clamp_wildness(wildness)
    for band in config.selection_bands:
        if band.min_wildness <= w <= band.max_wildness:
            return band
    return config.selection_bands[-1]


def _band_position(band: SelectionBand, wildness: int) -> float:
    span = band.max_wildness - band.min_wildness
    if span <= 0:
        return 1.0
    return (wildness - band.min_wildness) / span


def slice_size_for(wildness, config: DiscoveryConfig = DEFAULT_CONFIG) -> int:
    w = clamp_wildness(wildness)
    band = resolve_band(w, config)
    t = _band_position(band, w)
    return max(1, int(round(band.slice_start + t * (band.slice_end - band.slice_start))))


def epsilon_for(wildness, config: DiscoveryConfig = DEFAULT_CONFIG) -> float:
    w = clamp_wildness(wildness)
    band = resolve_band(w, config)
    t = _band_position(band, w)
    return band.epsilon_start + t * (band.epsilon_end - band.epsilon_start)


def sharpness_for(wildness, config: DiscoveryConfig = DEFAULT_CONFIG) -> float:
    w = clamp_wildness(wildness)
    return config.sharpness_min + (config.sharpness_max - config.sharpness_min) * (1 - w / 100)


def _novelty_factors(
    candidates: Sequence[ScoredCandidate],
    affinity: Optional[UserAffinity],
    config: DiscoveryConfig,
) -> np.ndarray:
    if affinity is None or affinity.interaction_count == 0:
        return np.ones(len(candidates))
    return np.array(
        [1.0 + config.novelty_weight * (1.0 - familiarity(c.content, affinity)) for c in candidates]
    )


def _normalize(weights: np.ndarray) -> np.ndarray:
    weights = np.nan_to_num(weights, nan=0.0, posinf=0.0, neginf=0.0)
    weights = np.clip(weights, 0.0, None)
    total = weights.sum()
    if total <= 0:
        return np.full(len(weights), 1.0 / len(weights))
    return weights / total


def select_candidate(
    ranked: List[ScoredCandidate],
    wildness,
    affinity: Optional[UserAffinity] = None,
    config: DiscoveryConfig = DEFAULT_CONFIG,
    rng: Optional[np.random.Generator] = None,
) -> SelectionResult:
    """Choose exactly one candidate from ranked (sorted by final_score, descending)."""
    if not ranked:
        raise EmptyPoolError(None, 0)
    rng = rng if rng is not None else np.random.default_rng()

    w = clamp_wildness(wildness)
    band = resolve_band(w, config)
    size = min(slice_size_for(w, config), len(ranked))
    eps = epsilon_for(w, config)

    explored = len(ranked) > size and eps > 0 and rng.random() < eps
    if explored:
        offset = size
        pool = ranked[size:]
        weights = np.ones(len(pool))
    else:
        offset = 0
        pool = ranked[:size]
        scores = np.array([max(c.final_score, 1e-12) for c in pool])
        weights = scores ** sharpness_for(w, config)

    if band.novelty:
        weights = weights * _novelty_factors(pool, affinity, config)

    if len(pool) == 1:
        idx = 0
    else:
        idx = int(rng.choice(len(pool), p=_normalize(weights)))

    return SelectionResult(
        candidate=pool[idx],
        rank=offset + idx,
        explored=explored,
        band=band.name,
        slice_size=size,
        epsilon=eps,
    )

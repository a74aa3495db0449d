"""
Per-candidate scoring signals.

Each function is pure, clamps its output to its documented range, and resolves
missing or NaN input to its neutral default, so the final product never
carries NaN or Infinity.
"""

import math
from datetime import datetime
from typing import Optional

from discovery.models.config import DEFAULT_CONFIG, DiscoveryConfig
from discovery.models.content import Content, ContentMetrics
from discovery.models.signals import DomainReputation, EngagementStats
from discovery.utils.scores import clamp, clamp_finite, finite_or
from discovery.utils.time import age_days

LN2 = math.log(2)


def base_score(metrics: ContentMetrics, config: DiscoveryConfig = DEFAULT_CONFIG) -> float:
    """
    Bayesian-smoothed positive rate in [floor, 1].

    positive = likes + saves * 1.2 + shares * 0.8 over likes + saves + shares + skips,
    smoothed toward the prior with `bayesian_weight` pseudo-observations.
    """
    positive = (
        metrics.likes
        + metrics.saves * config.save_weight
        + metrics.shares * config.share_weight
    )
    total = metrics.likes + metrics.saves + metrics.shares + metrics.skips
    if total == 0:
        return config.bayesian_prior
    smoothed = (positive + config.bayesian_prior * config.bayesian_weight) / (
        total + config.bayesian_weight
    )
    return clamp_finite(smoothed, config.base_score_floor, 1.0, config.bayesian_prior)


def quality_score(quality: Optional[float], config: DiscoveryConfig = DEFAULT_CONFIG) -> float:
    """Precomputed quality passed through; missing becomes default_quality."""
    return clamp_finite(quality, 0.0, 1.0, config.default_quality)


def freshness_decay(age: Optional[float], half_life: float) -> float:
    """2^(-age / half_life). Unknown age counts as one half-life old."""
    if half_life <= 0:
        return 1.0
    a = finite_or(age, half_life)
    return math.exp(-LN2 * max(0.0, a) / half_life)


def freshness_score(
    content: Content,
    now: datetime,
    config: DiscoveryConfig = DEFAULT_CONFIG,
) -> float:
    """floor + (1 - floor) * decay: fades toward floor, never to zero."""
    decay = freshness_decay(age_days(content.freshness_timestamp, now), config.freshness_half_life_days)
    floor = clamp(config.freshness_floor)
    return clamp_finite(floor + (1 - floor) * decay, floor, 1.0, floor)


def popularity_score(metrics: ContentMetrics, config: DiscoveryConfig = DEFAULT_CONFIG) -> float:
    """Saturating in weighted views/likes/saves/shares: floor + (1 - floor) * (1 - e^(-x/s))."""
    weighted = (
        metrics.views
        + metrics.likes * config.popularity_like_weight
        + metrics.saves * config.popularity_save_weight
        + metrics.shares * config.popularity_share_weight
    )
    saturation = max(1e-9, config.popularity_saturation)
    floor = clamp(config.popularity_floor)
    value = floor + (1 - floor) * (1 - math.exp(-weighted / saturation))
    return clamp_finite(value, floor, 1.0, floor)


def similarity_factor(similarity: float) -> float:
    """Map personalized similarity [0, 1] into the multiplicative range [0.5, 1]."""
    return 0.5 + 0.5 * clamp_finite(similarity, 0.0, 1.0, 0.5)


def reputation_boost(
    reputation: Optional[DomainReputation],
    config: DiscoveryConfig = DEFAULT_CONFIG,
) -> float:
    """Linear in trust: 0.8 + 0.4 * trust. Unknown domain is trust 0.5, i.e. x1.0."""
    trust = config.default_trust if reputation is None else reputation.trust_score
    trust = clamp_finite(trust, 0.0, 1.0, config.default_trust)
    low = config.reputation_base
    high = config.reputation_base + config.reputation_range
    return clamp_finite(low + config.reputation_range * trust, low, high, 1.0)


def time_on_page_quality(avg_seconds: float) -> float:
    """
    Piecewise quality of an average time on page:
    <10s up to 0.3, 10-30s 0.3-0.6, 30-180s 0.6-0.9, 180-600s 0.9-1.0, beyond 1.0.
    """
    s = max(0.0, avg_seconds)
    if s < 10:
        return (s / 10) * 0.3
    if s < 30:
        return 0.3 + ((s - 10) / 20) * 0.3
    if s < 180:
        return 0.6 + ((s - 30) / 150) * 0.3
    if s < 600:
        return 0.9 + ((s - 180) / 420) * 0.1
    return 1.0


def engagement_boost(
    stats: Optional[EngagementStats],
    config: DiscoveryConfig = DEFAULT_CONFIG,
) -> float:
    """
    Time-on-page multiplier in [0.8, 1.2] with a confidence ramp: neutral below
    engagement_min_samples, full weight at engagement_full_confidence_samples.
    """
    if stats is None or stats.sample_count < config.engagement_min_samples:
        return 1.0
    avg = finite_or(stats.avg_duration_seconds, float("nan"))
    if math.isnan(avg):
        return 1.0
    q = time_on_page_quality(avg)
    confidence = min(1.0, stats.sample_count / max(1, config.engagement_full_confidence_samples))
    raw = config.engagement_boost_base + config.engagement_boost_range * q
    boost = raw * confidence + (1 - confidence)
    low = config.engagement_boost_base
    high = config.engagement_boost_base + config.engagement_boost_range
    return clamp_finite(boost, low, high, 1.0)

"""
Human-readable explanation of why a discovery was chosen.

For UI transparency only; never fed back into scoring.
"""

from typing import Dict, List, Optional

from discovery.models.scoring import ScoredCandidate
from discovery.models.signals import TimeWindow, TrendingEntry


def trending_window_for(
    content_id: str,
    trending: Dict[TimeWindow, List[TrendingEntry]],
) -> Optional[TimeWindow]:
    """Shortest window in which the content is trending, or None."""
    for window in (TimeWindow.HOUR, TimeWindow.DAY, TimeWindow.WEEK):
        if any(e.content_id == content_id for e in trending.get(window, [])):
            return window
    return None


_TRENDING_TEXT = {
    TimeWindow.HOUR: "Trending right now",
    TimeWindow.DAY: "Trending today",
    TimeWindow.WEEK: "Trending this week",
}


def build_rationale(
    scored: ScoredCandidate,
    explored: bool = False,
    trending_window: Optional[TimeWindow] = None,
) -> str:
    """First matching reason wins: serendipity, topic match, trending, quality, freshness, popularity."""
    if explored:
        return "A wildcard pick to widen your horizons"
    if scored.matched_topics:
        topics = scored.matched_topics[:2]
        return f"Matches your interest in {' and '.join(topics)}"
    if trending_window is not None:
        return _TRENDING_TEXT[trending_window]
    if scored.quality_score >= 0.8:
        return "Highly rated by our quality checks"
    if scored.freshness_score >= 0.9:
        return "Fresh content"
    if scored.popularity_score >= 0.8:
        return "Popular with other explorers"
    if scored.reputation_boost > 1.1:
        return "From a trusted source"
    return "Something new to discover"

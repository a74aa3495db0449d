"""
Candidate Pool Manager

Decides how many candidates to fetch, which exclusions to push into the store
query, and how the store ordering rotates. The store query itself lives behind
the ContentStore protocol in the service layer; everything here is pure.

Exclusions are applied twice: the store receives the most recently seen ids
(bounded by max_exclusion_filter, the IN-clause cap), and filter_candidates()
always re-applies the complete set in memory. The exclusion set is never
dropped, whatever its size.

The public entry points are compute_pool_size, select_sort_strategy, sort_for_strategy,
bounded_exclusions, filter_candidates, and finalize_pool.
"""

import logging
import math
from collections import Counter
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Set

from discovery.models.config import DEFAULT_CONFIG, DiscoveryConfig
from discovery.models.content import Content
from discovery.models.pool import CandidatePool, PoolWarning, SortStrategy

logger = logging.getLogger(__name__)

SORT_STRATEGIES: List[SortStrategy] = list(SortStrategy)


def compute_pool_size(
    exclusion_count: int,
    config: DiscoveryConfig = DEFAULT_CONFIG,
) -> int:
    """
    Pool size for a user with exclusion_count seen items.

    Base size until exclusions exceed half of it, then linear growth with the
    excess, capped at max_pool_size. Non-decreasing in exclusion_count.
    """
    base = config.base_pool_size
    threshold = base / 2
    excess = max(0, exclusion_count) - threshold
    if excess <= 0:
        return base
    grown = base + math.floor(config.pool_growth_factor * excess)
    return min(config.max_pool_size, grown)


def select_sort_strategy(
    now: datetime,
    config: DiscoveryConfig = DEFAULT_CONFIG,
) -> SortStrategy:
    """Ordering for this rotation period: floor(epoch / period) mod strategy count."""
    period = max(1, config.rotation_seconds)
    slot = math.floor(now.timestamp() / period)
    return SORT_STRATEGIES[slot % len(SORT_STRATEGIES)]


def bounded_exclusions(
    excluded_ids_newest_first: Sequence[str],
    limit: int,
) -> List[str]:
    """
    Ids to push into a size-capped store filter: the most recently seen `limit`
    ids, de-duplicated. Returns at least one id whenever exclusions exist.
    """
    limit = max(1, limit)
    out: List[str] = []
    seen: Set[str] = set()
    for cid in excluded_ids_newest_first:
        if not cid or cid in seen:
            continue
        seen.add(cid)
        out.append(cid)
        if len(out) >= limit:
            break
    return out


def merge_exclusions(
    session_seen_ids: Iterable[str],
    history_ids_newest_first: Iterable[str],
) -> List[str]:
    """Session ids (newest) first, then lifetime history; duplicates removed, order kept."""
    merged: List[str] = []
    seen: Set[str] = set()
    for cid in list(session_seen_ids)[::-1] + list(history_ids_newest_first):
        if cid and cid not in seen:
            seen.add(cid)
            merged.append(cid)
    return merged


def _is_blocked(content: Content, blocked_domains: Set[str]) -> bool:
    """True if the content domain or any parent domain is blocked."""
    domain = content.domain
    if not domain or not blocked_domains:
        return False
    if domain in blocked_domains:
        return True
    parts = domain.split(".")
    return any(".".join(parts[i:]) in blocked_domains for i in range(1, len(parts) - 1))


def filter_candidates(
    contents: Iterable[Content],
    excluded_ids: Set[str],
    blocked_domains: Iterable[str] = (),
) -> List[Content]:
    """
    Drop excluded ids, blocked domains, inactive content, and duplicate ids.

    excluded_ids is the complete exclusion set; there is no size threshold.
    """
    blocked = {d.strip().lower() for d in blocked_domains if d}
    out: List[Content] = []
    seen: Set[str] = set()
    for c in contents:
        if c.id in excluded_ids or c.id in seen:
            continue
        if not c.is_active:
            continue
        if _is_blocked(c, blocked):
            continue
        seen.add(c.id)
        out.append(c)
    return out


def apply_domain_diversity(
    contents: List[Content],
    max_per_domain: int,
) -> List[Content]:
    """Keep at most max_per_domain items per domain, preserving order. 0 disables."""
    if max_per_domain <= 0:
        return contents
    counts: Counter = Counter()
    out = []
    for c in contents:
        if counts[c.domain] >= max_per_domain:
            continue
        counts[c.domain] += 1
        out.append(c)
    return out


def order_by_topic_match(
    contents: List[Content],
    preferred_topics: Iterable[str],
) -> List[Content]:
    """
    Stable sort: content sharing a preferred topic first. Soft ordering only;
    nothing is dropped for lack of topic overlap.
    """
    preferred = set(preferred_topics)
    if not preferred:
        return contents
    return sorted(contents, key=lambda c: 0 if preferred.intersection(c.topics) else 1)


def assess_exhaustion(
    pool_size: int,
    exclusion_count: int,
    user_id: Optional[str] = None,
    config: DiscoveryConfig = DEFAULT_CONFIG,
) -> Optional[PoolWarning]:
    """Content exhaustion: thin pool for a user who has already seen a lot."""
    if pool_size >= config.pool_floor:
        return None
    if exclusion_count < config.exhaustion_exclusion_threshold:
        return None
    warning = PoolWarning(
        user_id=user_id,
        pool_size=pool_size,
        pool_floor=config.pool_floor,
        exclusion_count=exclusion_count,
        message=(
            f"Candidate pool {pool_size} below floor {config.pool_floor} "
            f"with {exclusion_count} exclusions"
        ),
    )
    logger.warning(
        "[pool] CONTENT_EXHAUSTION user_id=%s pool_size=%s floor=%s exclusions=%s",
        user_id, pool_size, config.pool_floor, exclusion_count,
    )
    return warning


def next_widened_size(
    page_size: int,
    attempt: int,
    scanned_rows: int,
    config: DiscoveryConfig = DEFAULT_CONFIG,
) -> Optional[int]:
    """
    Page size for widening attempt `attempt` (1-based), or None when attempts or
    the scan budget are used up. The next page continues the same ordering.
    """
    if attempt > config.max_widening_attempts:
        return None
    remaining = config.max_scan_rows - scanned_rows
    if remaining <= 0:
        return None
    widened = min(config.widened_pool_cap, int(math.ceil(page_size * config.widening_factor)))
    return max(1, min(widened, remaining))


def needs_widening(
    eligible_count: int,
    page_rows: int,
    page_size: int,
    config: DiscoveryConfig = DEFAULT_CONFIG,
) -> bool:
    """Widen only when the pool is thin and the last page was full (the store has more)."""
    return eligible_count < config.pool_floor and page_rows >= page_size


def finalize_pool(
    fetched: List[Content],
    excluded_ids: Set[str],
    blocked_domains: Iterable[str],
    preferred_topics: Iterable[str],
    requested_size: int,
    sort_strategy: SortStrategy,
    store_filter_count: int,
    fetch_attempts: int = 1,
    user_id: Optional[str] = None,
    config: DiscoveryConfig = DEFAULT_CONFIG,
) -> CandidatePool:
    """
    Turn raw store rows into the candidate pool: full exclusion filter, domain
    blocks, topic-match ordering, per-domain cap, and exhaustion assessment.
    """
    candidates = filter_candidates(fetched, excluded_ids, blocked_domains)
    candidates = order_by_topic_match(candidates, preferred_topics)
    candidates = apply_domain_diversity(candidates, config.max_per_domain)
    candidates = candidates[:requested_size]

    warnings = []
    warning = assess_exhaustion(len(candidates), len(excluded_ids), user_id, config)
    if warning is not None:
        warnings.append(warning)

    logger.debug(
        "[pool] POOL_BUILT user_id=%s size=%s requested=%s strategy=%s exclusions=%s store_filter=%s attempts=%s",
        user_id, len(candidates), requested_size, sort_strategy.value,
        len(excluded_ids), store_filter_count, fetch_attempts,
    )
    return CandidatePool(
        candidates=candidates,
        requested_size=requested_size,
        sort_strategy=sort_strategy,
        exclusion_count=len(excluded_ids),
        store_filter_count=store_filter_count,
        fetch_attempts=fetch_attempts,
        warnings=warnings,
    )


def _epoch(ts: Optional[datetime]) -> float:
    return ts.timestamp() if ts is not None else 0.0


def _weighted_popularity(c: Content) -> float:
    m = c.metrics
    return m.views + 3 * m.likes + 5 * m.saves + 4 * m.shares


SORT_KEYS: Dict[SortStrategy, Callable[[Content], float]] = {
    SortStrategy.RECENCY: lambda c: _epoch(c.created_at),
    SortStrategy.QUALITY: lambda c: c.quality if c.quality is not None else 0.0,
    SortStrategy.POPULARITY: _weighted_popularity,
    SortStrategy.FRESHNESS: lambda c: _epoch(c.freshness_timestamp),
}


def sort_for_strategy(contents: Iterable[Content], strategy: SortStrategy) -> List[Content]:
    """Descending by the strategy's key; id breaks ties for a stable head-of-pool."""
    key = SORT_KEYS[strategy]
    return sorted(contents, key=lambda c: (-key(c), c.id))

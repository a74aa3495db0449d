"""
Discovery service: the request-time flow behind requestNext and requestSimilar.

request_next runs three phases:
  1. concurrently: preferences, complete exclusion history, recent interactions, trending snapshot
  2. candidate pool query (with widening when the pool comes back thin)
  3. concurrently: domain reputation and engagement stats for the pool, then rank and select

Optional fetches (recent history, trending, reputation, engagement) have a
deadline and degrade to neutral defaults with a warning. Preferences, the
exclusion history, and the content query are required: a failure there raises
UpstreamUnavailableError instead of serving with exclusions or domain blocks
dropped.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Dict, Iterable, List, Optional, Tuple

import numpy as np

from discovery.errors import ContentNotFoundError, EmptyPoolError, UpstreamUnavailableError
from discovery.models import (
    CandidatePool,
    Content,
    DiscoveryConfig,
    DiscoveryResult,
    Interaction,
    InteractionAction,
    ScoringContext,
    SimilarContent,
    TimeWindow,
    TrendingEntry,
    UserPreferences,
)
from discovery.stages.candidate_pool import (
    bounded_exclusions,
    compute_pool_size,
    filter_candidates,
    finalize_pool,
    merge_exclusions,
    needs_widening,
    next_widened_size,
    select_sort_strategy,
)
from discovery.stages.orchestrator import create_discovery
from discovery.stages.personalization import analyze_interactions
from discovery.stages.similar import find_similar
from discovery.stages.trending import compute_window
from discovery.utils.time import utc_now

from .content_store import ContentStore
from .interaction_store import InteractionStore
from .preference_store import PreferenceStore
from .trending_cache import TrendingCache

logger = logging.getLogger(__name__)


@dataclass
class TrendingItem:
    entry: TrendingEntry
    content: Content


class DiscoveryService:
    """Wires the stores to the pure discovery engine."""

    def __init__(
        self,
        content_store: ContentStore,
        interaction_store: InteractionStore,
        preference_store: PreferenceStore,
        trending_cache: TrendingCache,
        config: Optional[DiscoveryConfig] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        self.content_store = content_store
        self.interaction_store = interaction_store
        self.preference_store = preference_store
        self.trending_cache = trending_cache
        self.config = config or DiscoveryConfig()
        self._rng = rng if rng is not None else np.random.default_rng()

    # -------------------------------------------------------------------------
    # Fetch helpers
    # -------------------------------------------------------------------------

    async def _optional(
        self,
        awaitable: Awaitable[Any],
        signal: str,
        default: Any,
        user_id: Optional[str] = None,
    ) -> Any:
        """Await with a deadline; on timeout or error log and return the neutral default."""
        try:
            return await asyncio.wait_for(awaitable, timeout=self.config.fetch_timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning(
                "[signals] %s_TIMEOUT user_id=%s timeout=%ss, using neutral default",
                signal.upper(), user_id, self.config.fetch_timeout_seconds,
            )
        except Exception as e:
            logger.warning(
                "[signals] %s_UNAVAILABLE user_id=%s error=%s, using neutral default",
                signal.upper(), user_id, e,
            )
        return default

    async def _required(self, awaitable: Awaitable[Any], operation: str) -> Any:
        """Await with a deadline; any failure becomes UpstreamUnavailableError."""
        try:
            return await asyncio.wait_for(
                awaitable, timeout=self.config.required_fetch_timeout_seconds
            )
        except asyncio.TimeoutError as e:
            logger.error("[discovery] %s timed out", operation)
            raise UpstreamUnavailableError(operation, e) from e
        except Exception as e:
            logger.error("[discovery] %s failed: %s", operation, e, exc_info=True)
            raise UpstreamUnavailableError(operation, e) from e

    async def _get_preferences(self, user_id: str) -> UserPreferences:
        """
        Required read: blocked domains gate pool admission, so a failed read
        raises instead of serving with the blocks dropped. A user with no
        stored profile gets the default one.
        """
        prefs = await self._required(
            self.preference_store.get_preferences(user_id), "get_preferences"
        )
        return prefs if prefs is not None else UserPreferences.default_for(user_id)

    async def _get_trending(self, user_id: Optional[str] = None) -> Dict[TimeWindow, List[TrendingEntry]]:
        return await self._optional(self.trending_cache.get_snapshot(), "trending", {}, user_id)

    # -------------------------------------------------------------------------
    # Candidate pool
    # -------------------------------------------------------------------------

    async def build_pool(
        self,
        user_id: str,
        prefs: UserPreferences,
        exclusions: List[str],
    ) -> CandidatePool:
        """
        Query the store with the bounded exclusion list and post-filter against
        the complete set. While the pool is thin and the store had more, page
        further down the same ordering, up to the scan budget.
        """
        config = self.config
        excluded_set = set(exclusions)
        size = compute_pool_size(len(excluded_set), config)
        strategy = select_sort_strategy(utc_now(), config)
        store_filter = bounded_exclusions(exclusions, config.max_exclusion_filter) if exclusions else []

        page_size = size
        offset = 0
        attempts = 0
        fetched: List[Content] = []
        while True:
            attempts += 1
            rows = await self._required(
                self.content_store.query_candidates(
                    store_filter, prefs.topics, prefs.blocked_domains, page_size, strategy,
                    offset=offset,
                ),
                "query_candidates",
            )
            fetched.extend(rows)
            offset += len(rows)
            eligible = filter_candidates(fetched, excluded_set, prefs.blocked_domains)
            if not needs_widening(len(eligible), len(rows), page_size, config):
                break
            widened = next_widened_size(page_size, attempts, offset, config)
            if widened is None:
                break
            logger.info(
                "[pool] WIDENING user_id=%s eligible=%s scanned=%s page_size=%s->%s attempt=%s",
                user_id, len(eligible), offset, page_size, widened, attempts + 1,
            )
            page_size = widened

        return finalize_pool(
            fetched,
            excluded_set,
            prefs.blocked_domains,
            prefs.topics,
            requested_size=size,
            sort_strategy=strategy,
            store_filter_count=len(store_filter),
            fetch_attempts=attempts,
            user_id=user_id,
            config=config,
        )

    # -------------------------------------------------------------------------
    # requestNext
    # -------------------------------------------------------------------------

    async def request_next(
        self,
        user_id: str,
        session_seen_ids: Iterable[str] = (),
        wildness: Optional[float] = None,
    ) -> DiscoveryResult:
        """
        One next discovery for the user. Never returns anything in the user's
        complete interaction history or session_seen_ids.

        Raises EmptyPoolError when nothing is left, UpstreamUnavailableError when
        exclusions or content cannot be read.
        """
        config = self.config
        session_seen = list(session_seen_ids or [])

        # Phase 1: independent reads
        prefs, history_ids, recent, trending = await asyncio.gather(
            self._get_preferences(user_id),
            self._required(
                self.interaction_store.get_all_excluded_ids(user_id), "get_all_excluded_ids"
            ),
            self._optional(
                self.interaction_store.get_recent_interactions(user_id, config.history_limit),
                "recent_interactions", [], user_id,
            ),
            self._get_trending(user_id),
        )
        exclusions = merge_exclusions(session_seen, history_ids)

        # Phase 2: pool
        pool = await self.build_pool(user_id, prefs, exclusions)
        if pool.size == 0:
            logger.warning(
                "[pool] EMPTY_POOL user_id=%s exclusions=%s attempts=%s",
                user_id, pool.exclusion_count, pool.fetch_attempts,
            )
            raise EmptyPoolError(user_id, pool.exclusion_count, pool.fetch_attempts)

        # Phase 3: batched signals for the pool, joined in memory
        domains = {c.domain for c in pool.candidates if c.domain}
        content_ids = [c.id for c in pool.candidates]
        reputation, engagement = await asyncio.gather(
            self._optional(
                self.content_store.batch_get_domain_reputation(domains),
                "domain_reputation", {}, user_id,
            ),
            self._optional(
                self.content_store.batch_get_engagement_stats(content_ids),
                "engagement_stats", {}, user_id,
            ),
        )

        context = ScoringContext(
            preferences=prefs,
            affinity=analyze_interactions(recent, config),
            reputation=reputation,
            engagement=engagement,
            trending=trending,
            now=utc_now(),
        )
        return create_discovery(
            pool,
            context,
            wildness=wildness,
            excluded_ids=exclusions,
            config=config,
            rng=self._rng,
        )

    # -------------------------------------------------------------------------
    # requestSimilar
    # -------------------------------------------------------------------------

    async def request_similar(
        self,
        content_id: str,
        limit: int = 10,
        min_similarity: float = 0.0,
    ) -> List[SimilarContent]:
        """Content sharing topics with content_id, best blended score first."""
        config = self.config
        reference = await self._required(self.content_store.get_content(content_id), "get_content")
        if reference is None:
            raise ContentNotFoundError(content_id)
        if not reference.topics:
            return []

        limit = max(1, min(limit, config.similar_max_limit))
        candidates, trending = await asyncio.gather(
            self._required(
                self.content_store.query_by_topics(
                    reference.topics, limit * config.similar_candidate_multiplier, exclude_id=reference.id
                ),
                "query_by_topics",
            ),
            self._get_trending(),
        )
        return find_similar(
            reference,
            candidates,
            limit=limit,
            now=utc_now(),
            min_similarity=min_similarity,
            trending=trending,
            config=config,
        )

    # -------------------------------------------------------------------------
    # Trending read side
    # -------------------------------------------------------------------------

    async def get_trending(
        self,
        window: TimeWindow = TimeWindow.DAY,
        limit: int = 20,
    ) -> Tuple[List[TrendingItem], bool]:
        """
        Top trending content for a window and whether it came from the cache.
        With an empty cache the window is computed on demand and not persisted.
        """
        limit = max(1, min(limit, self.config.trending_read_limit))
        snapshot = await self._get_trending()
        entries = list(snapshot.get(window, []))[:limit]
        if entries:
            contents = await asyncio.gather(
                *(
                    self._optional(self.content_store.get_content(e.content_id), "trending_content", None)
                    for e in entries
                )
            )
            items = [TrendingItem(entry=e, content=c) for e, c in zip(entries, contents) if c is not None]
            return items, True

        logger.info("[trending] CACHE_EMPTY window=%s, computing on demand", window.value)
        corpus = await self._required(self.content_store.list_active(), "list_active")
        by_id = {c.id: c for c in corpus}
        computed = await asyncio.to_thread(compute_window, corpus, window, utc_now(), self.config)
        computed = computed[:limit]
        return [TrendingItem(entry=e, content=by_id[e.content_id]) for e in computed], False

    # -------------------------------------------------------------------------
    # Feedback loop
    # -------------------------------------------------------------------------

    async def record_interaction(
        self,
        user_id: str,
        content_id: str,
        action: InteractionAction,
        duration_seconds: Optional[float] = None,
    ) -> Interaction:
        """Append an interaction (joined with the content's topics/domain) and bump counters."""
        content = await self._required(self.content_store.get_content(content_id), "get_content")
        if content is None:
            raise ContentNotFoundError(content_id)
        interaction = Interaction(
            user_id=user_id,
            content_id=content_id,
            action=action,
            duration_seconds=duration_seconds,
            topics=content.topics,
            domain=content.domain,
        )
        await self.interaction_store.record_interaction(interaction)
        try:
            await self.content_store.record_metric(content_id, action, duration_seconds)
        except Exception as e:
            logger.warning(
                "[interactions] METRIC_UPDATE_FAILED content_id=%s action=%s error=%s",
                content_id, action.value, e,
            )
        return interaction

"""
Content Store abstraction.

Read-only (from the engine's perspective) corpus of crawled/submitted content
plus the batched per-request signals: domain reputation and engagement stats.
Implementations: JSON file (local/dev/tests), Firestore (production).
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence, Union

from discovery.models import (
    Content,
    DomainReputation,
    EngagementStats,
    InteractionAction,
    SortStrategy,
)
from discovery.stages.candidate_pool import order_by_topic_match, sort_for_strategy

logger = logging.getLogger(__name__)

# Largest exclusion list a single store query accepts (IN-clause cap).
MAX_FILTER_IDS = 1000


class ContentStore(Protocol):
    """Protocol for content reads. Implement for JSON file or Firestore."""

    async def query_candidates(
        self,
        exclude_ids: Sequence[str],
        preferred_topics: Sequence[str],
        blocked_domains: Sequence[str],
        pool_size: int,
        sort_strategy: SortStrategy,
        offset: int = 0,
    ) -> List[Content]:
        """
        Active content not in exclude_ids and not on a blocked domain, ordered
        topic-match first then by sort_strategy; rows [offset, offset + pool_size)
        of that ordering. exclude_ids is bounded by the caller to the filter cap.
        """
        ...

    async def get_content(self, content_id: str) -> Optional[Content]:
        ...

    async def query_by_topics(
        self,
        topics: Sequence[str],
        limit: int,
        exclude_id: Optional[str] = None,
    ) -> List[Content]:
        """Active content sharing at least one topic."""
        ...

    async def list_active(self, limit: Optional[int] = None) -> List[Content]:
        """Whole active corpus (trending calculation)."""
        ...

    async def batch_get_domain_reputation(
        self, domains: Iterable[str]
    ) -> Dict[str, DomainReputation]:
        """Only known domains are returned; callers treat the rest as neutral."""
        ...

    async def batch_get_engagement_stats(
        self, content_ids: Iterable[str]
    ) -> Dict[str, EngagementStats]:
        ...

    async def record_metric(
        self,
        content_id: str,
        action: InteractionAction,
        duration_seconds: Optional[float] = None,
    ) -> None:
        """Bump popularity counters (and duration stats) after an interaction."""
        ...


_METRIC_FIELD = {
    InteractionAction.VIEW: "views",
    InteractionAction.LIKE: "likes",
    InteractionAction.SAVE: "saves",
    InteractionAction.SHARE: "shares",
    InteractionAction.SKIP: "skips",
}


class JsonContentStore:
    """
    Content store backed by a JSON file: {"content": [...], "domains": [...], "engagement_stats": [...]}.
    A bare list is read as the content array. Held in memory; counters are not written back.
    """

    def __init__(
        self,
        path: Optional[Union[Path, str]] = None,
        contents: Optional[List[Union[Dict[str, Any], Content]]] = None,
        domains: Optional[List[Union[Dict[str, Any], DomainReputation]]] = None,
        engagement_stats: Optional[List[Union[Dict[str, Any], EngagementStats]]] = None,
        max_filter_ids: int = MAX_FILTER_IDS,
    ):
        self._path = Path(path) if path else None
        self._content: Dict[str, Content] = {}
        self._domains: Dict[str, DomainReputation] = {}
        # content_id -> [total_seconds, samples]
        self._durations: Dict[str, List[float]] = {}
        self.max_filter_ids = max_filter_ids
        if self._path is not None:
            self._load()
        for c in contents or []:
            self.add_content(c)
        for d in domains or []:
            self.set_domain_reputation(d)
        for s in engagement_stats or []:
            self._add_stats(s)

    def _load(self) -> None:
        if not self._path.exists():
            logger.warning("[content_store] JSON_NOT_FOUND path=%s", self._path)
            return
        with open(self._path) as f:
            data = json.load(f)
        if isinstance(data, list):
            data = {"content": data}
        for c in data.get("content", []):
            self.add_content(c)
        for d in data.get("domains", []):
            self.set_domain_reputation(d)
        for s in data.get("engagement_stats", []):
            self._add_stats(s)
        logger.info(
            "[content_store] LOADED path=%s content=%s domains=%s",
            self._path, len(self._content), len(self._domains),
        )

    def add_content(self, content: Union[Dict[str, Any], Content]) -> Content:
        c = Content.model_validate(content) if isinstance(content, dict) else content
        self._content[c.id] = c
        return c

    def set_domain_reputation(self, reputation: Union[Dict[str, Any], DomainReputation]) -> None:
        r = DomainReputation.model_validate(reputation) if isinstance(reputation, dict) else reputation
        self._domains[r.domain.lower()] = r

    def _add_stats(self, stats: Union[Dict[str, Any], EngagementStats]) -> None:
        s = EngagementStats.model_validate(stats) if isinstance(stats, dict) else stats
        if s.avg_duration_seconds is None or s.sample_count <= 0:
            return
        self._durations[s.content_id] = [s.avg_duration_seconds * s.sample_count, float(s.sample_count)]

    def __len__(self) -> int:
        return len(self._content)

    async def query_candidates(
        self,
        exclude_ids: Sequence[str],
        preferred_topics: Sequence[str],
        blocked_domains: Sequence[str],
        pool_size: int,
        sort_strategy: SortStrategy,
        offset: int = 0,
    ) -> List[Content]:
        if len(exclude_ids) > self.max_filter_ids:
            raise ValueError(
                f"Exclusion filter has {len(exclude_ids)} ids; store cap is {self.max_filter_ids}"
            )
        excluded = set(exclude_ids)
        blocked = {d.lower() for d in blocked_domains}
        rows = [
            c for c in self._content.values()
            if c.is_active and c.id not in excluded and c.domain not in blocked
        ]
        rows = order_by_topic_match(sort_for_strategy(rows, sort_strategy), preferred_topics)
        start = max(0, offset)
        return rows[start: start + max(0, pool_size)]

    async def get_content(self, content_id: str) -> Optional[Content]:
        return self._content.get(content_id)

    async def query_by_topics(
        self,
        topics: Sequence[str],
        limit: int,
        exclude_id: Optional[str] = None,
    ) -> List[Content]:
        wanted = set(topics)
        rows = [
            c for c in self._content.values()
            if c.is_active and c.id != exclude_id and wanted.intersection(c.topics)
        ]
        rows = sort_for_strategy(rows, SortStrategy.QUALITY)
        return rows[: max(0, limit)]

    async def list_active(self, limit: Optional[int] = None) -> List[Content]:
        rows = [c for c in self._content.values() if c.is_active]
        return rows if limit is None else rows[:limit]

    async def batch_get_domain_reputation(
        self, domains: Iterable[str]
    ) -> Dict[str, DomainReputation]:
        return {d: self._domains[d] for d in set(domains) if d in self._domains}

    async def batch_get_engagement_stats(
        self, content_ids: Iterable[str]
    ) -> Dict[str, EngagementStats]:
        out = {}
        for cid in set(content_ids):
            total, samples = self._durations.get(cid, (0.0, 0.0))
            if samples > 0:
                out[cid] = EngagementStats(
                    content_id=cid,
                    avg_duration_seconds=total / samples,
                    sample_count=int(samples),
                )
        return out

    async def record_metric(
        self,
        content_id: str,
        action: InteractionAction,
        duration_seconds: Optional[float] = None,
    ) -> None:
        c = self._content.get(content_id)
        if c is None:
            return
        field = _METRIC_FIELD[action]
        setattr(c.metrics, field, getattr(c.metrics, field) + 1)
        if duration_seconds is not None and duration_seconds > 0:
            entry = self._durations.setdefault(content_id, [0.0, 0.0])
            entry[0] += duration_seconds
            entry[1] += 1
        # yield so the in-memory store behaves like an async backend under gather
        await asyncio.sleep(0)

"""
Firestore-backed stores (DATA_SOURCE=firestore).

Collections:
  content/{content_id}                   content items (metrics.* counters)
  domain_reputation/{domain}             trust_score, approved/rejected counts, blacklisted
  engagement_stats/{content_id}          total_duration_seconds, sample_count
  users/{user_id}/interactions/{auto}    content_id, action, timestamp, duration_seconds, topics, domain
  user_preferences/{user_id}             topics, wildness, blocked_domains
  trending_cache/{window}                entries[], computed_at

Firestore cannot filter by a long "not in" list, so candidate queries over-fetch
by the exclusion count and filter client side. The engine still post-filters
against the complete exclusion set.
"""

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from google.cloud.firestore import Increment
from google.cloud.firestore_v1.base_query import FieldFilter
from google.cloud.firestore_v1.query import Query as FirestoreQuery

from discovery.models import (
    Content,
    DomainReputation,
    EngagementStats,
    Interaction,
    InteractionAction,
    SortStrategy,
    TimeWindow,
    TrendingEntry,
    UserPreferences,
)
from discovery.utils.time import parse_timestamp

from .firestore_client import create_async_client

logger = logging.getLogger(__name__)

# Store ordering per rotation strategy
SORT_FIELDS: Dict[SortStrategy, str] = {
    SortStrategy.RECENCY: "created_at",
    SortStrategy.QUALITY: "quality",
    SortStrategy.POPULARITY: "metrics.views",
    SortStrategy.FRESHNESS: "published_at",
}

# array_contains_any accepts a limited number of values
MAX_TOPIC_FILTER = 10
GET_ALL_CHUNK = 300

_METRIC_FIELD = {
    InteractionAction.VIEW: "views",
    InteractionAction.LIKE: "likes",
    InteractionAction.SAVE: "saves",
    InteractionAction.SHARE: "shares",
    InteractionAction.SKIP: "skips",
}


def _doc_to_content(doc: Any) -> Content:
    d = doc.to_dict() or {}
    d["id"] = doc.id
    return Content.model_validate(d)


def _chunks(items: List[str], size: int):
    for i in range(0, len(items), size):
        yield items[i: i + size]


class _FirestoreStore:
    def __init__(
        self,
        project_id: Optional[str] = None,
        credentials_path: Optional[Union[Path, str]] = None,
        client: Any = None,
    ):
        self._db = client if client is not None else create_async_client(credentials_path, project_id)


class FirestoreContentStore(_FirestoreStore):
    """Content, domain reputation, and engagement stats from Firestore."""

    async def _run(self, query) -> List[Content]:
        return [_doc_to_content(doc) async for doc in query.stream()]

    async def query_candidates(
        self,
        exclude_ids: Sequence[str],
        preferred_topics: Sequence[str],
        blocked_domains: Sequence[str],
        pool_size: int,
        sort_strategy: SortStrategy,
        offset: int = 0,
    ) -> List[Content]:
        field = SORT_FIELDS[sort_strategy]
        start = max(0, offset)
        fetch_limit = max(1, start + pool_size + len(exclude_ids))
        base = self._db.collection("content").where(filter=FieldFilter("is_active", "==", True))
        general_q = base.order_by(field, direction=FirestoreQuery.DESCENDING).limit(fetch_limit)

        topics = list(preferred_topics)[:MAX_TOPIC_FILTER]
        if topics:
            topical_q = (
                base.where(filter=FieldFilter("topics", "array_contains_any", topics))
                .order_by(field, direction=FirestoreQuery.DESCENDING)
                .limit(fetch_limit)
            )
            topical, general = await asyncio.gather(self._run(topical_q), self._run(general_q))
        else:
            topical, general = [], await self._run(general_q)

        excluded = set(exclude_ids)
        blocked = {d.lower() for d in blocked_domains}
        out: List[Content] = []
        seen = set()
        for c in topical + general:
            if c.id in seen or c.id in excluded or c.domain in blocked:
                continue
            seen.add(c.id)
            out.append(c)
            if len(out) >= start + pool_size:
                break
        return out[start:]

    async def get_content(self, content_id: str) -> Optional[Content]:
        doc = await self._db.collection("content").document(content_id).get()
        if not doc.exists:
            return None
        return _doc_to_content(doc)

    async def query_by_topics(
        self,
        topics: Sequence[str],
        limit: int,
        exclude_id: Optional[str] = None,
    ) -> List[Content]:
        wanted = list(topics)[:MAX_TOPIC_FILTER]
        if not wanted:
            return []
        query = (
            self._db.collection("content")
            .where(filter=FieldFilter("is_active", "==", True))
            .where(filter=FieldFilter("topics", "array_contains_any", wanted))
            .limit(limit + 1)
        )
        rows = await self._run(query)
        return [c for c in rows if c.id != exclude_id][:limit]

    async def list_active(self, limit: Optional[int] = None) -> List[Content]:
        query = self._db.collection("content").where(filter=FieldFilter("is_active", "==", True))
        if limit is not None:
            query = query.limit(limit)
        return await self._run(query)

    async def _get_all(self, collection: str, ids: Iterable[str]) -> List[Any]:
        coll = self._db.collection(collection)
        unique = sorted({i for i in ids if i})
        docs = []
        for chunk in _chunks(unique, GET_ALL_CHUNK):
            refs = [coll.document(i) for i in chunk]
            async for snap in self._db.get_all(refs):
                if snap.exists:
                    docs.append(snap)
        return docs

    async def batch_get_domain_reputation(
        self, domains: Iterable[str]
    ) -> Dict[str, DomainReputation]:
        out = {}
        for snap in await self._get_all("domain_reputation", domains):
            d = snap.to_dict() or {}
            d["domain"] = snap.id
            out[snap.id] = DomainReputation.model_validate(d)
        return out

    async def batch_get_engagement_stats(
        self, content_ids: Iterable[str]
    ) -> Dict[str, EngagementStats]:
        out = {}
        for snap in await self._get_all("engagement_stats", content_ids):
            d = snap.to_dict() or {}
            samples = int(d.get("sample_count") or 0)
            total = float(d.get("total_duration_seconds") or 0.0)
            if samples <= 0:
                continue
            out[snap.id] = EngagementStats(
                content_id=snap.id,
                avg_duration_seconds=total / samples,
                sample_count=samples,
            )
        return out

    async def record_metric(
        self,
        content_id: str,
        action: InteractionAction,
        duration_seconds: Optional[float] = None,
    ) -> None:
        ref = self._db.collection("content").document(content_id)
        await ref.update({f"metrics.{_METRIC_FIELD[action]}": Increment(1)})
        if duration_seconds is not None and duration_seconds > 0:
            stats_ref = self._db.collection("engagement_stats").document(content_id)
            await stats_ref.set(
                {"total_duration_seconds": Increment(duration_seconds), "sample_count": Increment(1)},
                merge=True,
            )


class FirestoreInteractionStore(_FirestoreStore):
    """Interaction history in users/{user_id}/interactions."""

    def _ref(self, user_id: str):
        return self._db.collection("users").document(user_id).collection("interactions")

    async def get_recent_interactions(self, user_id: str, limit: int) -> List[Interaction]:
        query = self._ref(user_id).order_by("timestamp", direction=FirestoreQuery.DESCENDING).limit(limit)
        out = []
        async for doc in query.stream():
            d = doc.to_dict() or {}
            d["user_id"] = user_id
            out.append(Interaction.model_validate(d))
        return out

    async def get_all_excluded_ids(self, user_id: str) -> List[str]:
        query = (
            self._ref(user_id)
            .select(["content_id", "timestamp"])
            .order_by("timestamp", direction=FirestoreQuery.DESCENDING)
        )
        out: List[str] = []
        seen = set()
        async for doc in query.stream():
            cid = (doc.to_dict() or {}).get("content_id")
            if cid and cid not in seen:
                seen.add(cid)
                out.append(cid)
        return out

    async def record_interaction(self, interaction: Interaction) -> Interaction:
        data = interaction.model_dump(exclude={"user_id"})
        data["action"] = interaction.action.value
        try:
            await self._ref(interaction.user_id).add(data)
        except Exception:
            logger.error(
                "[FirestoreInteractionStore] record_interaction failed user_id=%s content_id=%s",
                interaction.user_id, interaction.content_id, exc_info=True,
            )
            raise
        return interaction


class FirestorePreferenceStore(_FirestoreStore):
    async def get_preferences(self, user_id: str) -> Optional[UserPreferences]:
        doc = await self._db.collection("user_preferences").document(user_id).get()
        if not doc.exists:
            return None
        d = doc.to_dict() or {}
        d["user_id"] = user_id
        return UserPreferences.model_validate(d)


class FirestoreTrendingCache(_FirestoreStore):
    """One document per window; all windows replaced in a single batch commit."""

    COLLECTION = "trending_cache"

    async def get_snapshot(self) -> Dict[TimeWindow, List[TrendingEntry]]:
        coll = self._db.collection(self.COLLECTION)
        out: Dict[TimeWindow, List[TrendingEntry]] = {}
        async for snap in self._db.get_all([coll.document(w.value) for w in TimeWindow]):
            if not snap.exists:
                continue
            d = snap.to_dict() or {}
            window = TimeWindow(snap.id)
            out[window] = [TrendingEntry.model_validate(e) for e in d.get("entries", [])]
        return out

    async def replace_snapshot(
        self,
        snapshot: Dict[TimeWindow, List[TrendingEntry]],
        computed_at: datetime,
    ) -> None:
        coll = self._db.collection(self.COLLECTION)
        batch = self._db.batch()
        for window in TimeWindow:
            batch.set(
                coll.document(window.value),
                {
                    "window": window.value,
                    "computed_at": computed_at,
                    "entries": [e.model_dump(mode="json") for e in snapshot.get(window, [])],
                },
            )
        await batch.commit()

    async def last_computed_at(self) -> Optional[datetime]:
        doc = await self._db.collection(self.COLLECTION).document(TimeWindow.HOUR.value).get()
        if not doc.exists:
            return None
        return parse_timestamp((doc.to_dict() or {}).get("computed_at"))

"""Shared fixtures for the discovery tests: content factories and an in-memory service."""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import List, Optional

import numpy as np

from discovery.models import Content, DiscoveryConfig, Interaction, InteractionAction, UserPreferences
from discovery.utils.time import utc_now
from discovery_api.services import (
    DiscoveryService,
    InMemoryTrendingCache,
    JsonContentStore,
    JsonInteractionStore,
    JsonPreferenceStore,
)

# Fixed clock for the pure-function tests
NOW = datetime(2026, 10, 15, 12, 0, tzinfo=timezone.utc)


def run(coro):
    return asyncio.run(coro)


def make_content(cid: str, now: Optional[datetime] = None, **overrides) -> Content:
    now = now or NOW
    data = {
        "id": cid,
        "url": f"https://example.org/{cid}",
        "domain": "example.org",
        "title": f"Item {cid}",
        "topics": ["science"],
        "quality": 0.7,
        "created_at": now - timedelta(days=1),
        "metrics": {"views": 100, "likes": 10, "saves": 2, "shares": 1, "skips": 5},
    }
    data.update(overrides)
    return Content.model_validate(data)


def make_corpus(n: int, prefix: str = "c", now: Optional[datetime] = None) -> List[Content]:
    """
    n items spread over 100 domains. Index 0 is the head of every store ordering:
    newest, highest quality, and most viewed, decreasing with the index.
    """
    now = now or utc_now()
    return [
        Content(
            id=f"{prefix}{i:05d}",
            url=f"https://site{i % 100}.com/{prefix}{i}",
            domain=f"site{i % 100}.com",
            title=f"Article {i}",
            topics=[["science", "history", "design", "music"][i % 4]],
            quality=1.0 - i / (2.0 * n),
            created_at=now - timedelta(minutes=i),
            metrics={"views": n - i, "likes": 5, "saves": 1, "shares": 1, "skips": 2},
        )
        for i in range(n)
    ]


def make_service(
    contents: List[Content],
    config: Optional[DiscoveryConfig] = None,
    preferences: Optional[List[UserPreferences]] = None,
    seed: int = 7,
) -> DiscoveryService:
    prefs = JsonPreferenceStore()
    for p in preferences or []:
        prefs.set_preferences(p)
    return DiscoveryService(
        content_store=JsonContentStore(contents=contents),
        interaction_store=JsonInteractionStore(),
        preference_store=prefs,
        trending_cache=InMemoryTrendingCache(),
        config=config or DiscoveryConfig(),
        rng=np.random.default_rng(seed),
    )


async def seed_history(
    service: DiscoveryService,
    user_id: str,
    content_ids: List[str],
    action: InteractionAction = InteractionAction.SKIP,
) -> None:
    """
    Record one interaction per id. The first id gets the oldest timestamp, so
    the head of content_ids is the part a bounded store filter leaves out.
    """
    start = utc_now() - timedelta(days=30)
    for i, cid in enumerate(content_ids):
        await service.interaction_store.record_interaction(
            Interaction(
                user_id=user_id,
                content_id=cid,
                action=action,
                timestamp=start + timedelta(seconds=i),
            )
        )

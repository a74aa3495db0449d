"""Backing logic: stores, discovery service, trending worker."""

from .content_store import ContentStore, JsonContentStore
from .discovery_service import DiscoveryService, TrendingItem
from .firestore_stores import (
    FirestoreContentStore,
    FirestoreInteractionStore,
    FirestorePreferenceStore,
    FirestoreTrendingCache,
)
from .interaction_store import InteractionStore, JsonInteractionStore
from .preference_store import JsonPreferenceStore, PreferenceStore
from .trending_cache import InMemoryTrendingCache, TrendingCache
from .trending_worker import TrendingWorker

__all__ = [
    "ContentStore",
    "DiscoveryService",
    "FirestoreContentStore",
    "FirestoreInteractionStore",
    "FirestorePreferenceStore",
    "FirestoreTrendingCache",
    "InMemoryTrendingCache",
    "InteractionStore",
    "JsonContentStore",
    "JsonInteractionStore",
    "JsonPreferenceStore",
    "PreferenceStore",
    "TrendingCache",
    "TrendingItem",
    "TrendingWorker",
]

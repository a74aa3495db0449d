"""Application state: stores, discovery service, and the trending worker."""

import logging
from pathlib import Path
from typing import Optional

from discovery.models.config import DiscoveryConfig

from .config import ServerConfig, get_config
from .services import (
    ContentStore,
    DiscoveryService,
    FirestoreContentStore,
    FirestoreInteractionStore,
    FirestorePreferenceStore,
    FirestoreTrendingCache,
    InMemoryTrendingCache,
    InteractionStore,
    JsonContentStore,
    JsonInteractionStore,
    JsonPreferenceStore,
    PreferenceStore,
    TrendingCache,
    TrendingWorker,
)
from .services.firestore_client import create_async_client

logger = logging.getLogger(__name__)


class AppState:
    """Global application state. Stores may be injected (tests, scripts)."""

    def __init__(
        self,
        config: ServerConfig,
        discovery_config: Optional[DiscoveryConfig] = None,
        content_store: Optional[ContentStore] = None,
        interaction_store: Optional[InteractionStore] = None,
        preference_store: Optional[PreferenceStore] = None,
        trending_cache: Optional[TrendingCache] = None,
    ):
        self.config = config
        self.discovery_config = discovery_config or config.load_discovery_config()

        if config.data_source == "firestore" and None in (
            content_store, interaction_store, preference_store, trending_cache
        ):
            self._create_firestore_stores(config)
        else:
            self._firestore_client = None

        self.content_store = content_store or self._create_content_store(config)
        self.interaction_store = interaction_store or self._create_interaction_store(config)
        self.preference_store = preference_store or self._create_preference_store(config)
        self.trending_cache = trending_cache or self._create_trending_cache(config)
        logger.info(
            "[startup] Stores: content=%s interactions=%s preferences=%s trending=%s",
            type(self.content_store).__name__,
            type(self.interaction_store).__name__,
            type(self.preference_store).__name__,
            type(self.trending_cache).__name__,
        )

        self.discovery = DiscoveryService(
            self.content_store,
            self.interaction_store,
            self.preference_store,
            self.trending_cache,
            self.discovery_config,
        )
        self.trending_worker = TrendingWorker(
            self.content_store,
            self.trending_cache,
            self.discovery_config,
            interval_seconds=config.trending_interval_seconds,
        )

    def _create_firestore_stores(self, config: ServerConfig) -> None:
        """One AsyncClient shared by every Firestore store."""
        cred_path = config.firebase_credentials_path
        if not cred_path or not Path(cred_path).is_file():
            raise ValueError(
                f"DATA_SOURCE=firestore but credentials file not found: {cred_path}. "
                "Set FIREBASE_CREDENTIALS_PATH in .env to your service account JSON path."
            )
        self._firestore_client = create_async_client(cred_path, config.firebase_project_id)

    def _create_content_store(self, config: ServerConfig) -> ContentStore:
        if self._firestore_client is not None:
            return FirestoreContentStore(client=self._firestore_client)
        return JsonContentStore(config.content_json_path)

    def _create_interaction_store(self, config: ServerConfig) -> InteractionStore:
        if self._firestore_client is not None:
            return FirestoreInteractionStore(client=self._firestore_client)
        return JsonInteractionStore(config.interactions_json_path)

    def _create_preference_store(self, config: ServerConfig) -> PreferenceStore:
        if self._firestore_client is not None:
            return FirestorePreferenceStore(client=self._firestore_client)
        return JsonPreferenceStore(config.preferences_json_path)

    def _create_trending_cache(self, config: ServerConfig) -> TrendingCache:
        if self._firestore_client is not None:
            return FirestoreTrendingCache(client=self._firestore_client)
        return InMemoryTrendingCache()


_state: Optional[AppState] = None


def get_state() -> AppState:
    global _state
    if _state is None:
        config = get_config()
        _state = AppState(config)
    return _state


def set_state(state: Optional[AppState]) -> None:
    """Replace the global state (tests and scripts)."""
    global _state
    _state = state

"""
Interaction History store abstraction.

Append-only log of (user, content, action, timestamp, duration). The complete
history is the source of truth for exclusion; a bounded recent window feeds
personalization. Implementations: JSON file / in-memory, Firestore.
"""

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Union

from discovery.models import Interaction

logger = logging.getLogger(__name__)


class InteractionStore(Protocol):
    """Protocol for interaction history read/write."""

    async def get_recent_interactions(self, user_id: str, limit: int) -> List[Interaction]:
        """Newest first, topics/domain of the content joined in."""
        ...

    async def get_all_excluded_ids(self, user_id: str) -> List[str]:
        """
        Every content id the user has interacted with, newest first.
        Must return the complete history, never a session-only subset.
        """
        ...

    async def record_interaction(self, interaction: Interaction) -> Interaction:
        ...


class JsonInteractionStore:
    """
    Interaction store held in memory, optionally persisted to a JSON file
    ({"interactions": [...]}). Writes replace the file atomically.
    """

    def __init__(self, path: Optional[Union[Path, str]] = None):
        self._path = Path(path) if path else None
        self._by_user: Dict[str, List[Interaction]] = {}
        self._save_lock = asyncio.Lock()
        if self._path is not None:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._load()

    def _load(self) -> None:
        if not self._path.exists():
            return
        try:
            with open(self._path) as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.error("[interaction_store] LOAD_FAILED path=%s error=%s", self._path, e)
            raise
        rows = data.get("interactions", []) if isinstance(data, dict) else data
        for row in rows:
            self._append(Interaction.model_validate(row))
        logger.info("[interaction_store] LOADED path=%s users=%s", self._path, len(self._by_user))

    def _rows(self) -> List[dict]:
        return [
            i.model_dump(mode="json")
            for items in self._by_user.values()
            for i in items
        ]

    def _write(self, rows: List[dict]) -> None:
        fd, tmp = tempfile.mkstemp(dir=self._path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as f:
                json.dump({"interactions": rows}, f, indent=2)
            os.replace(tmp, self._path)
        except Exception:
            logger.error("[interaction_store] SAVE_FAILED path=%s", self._path, exc_info=True)
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    async def _save(self) -> None:
        """Snapshot on the loop, write in a worker thread; writes are serialized."""
        if self._path is None:
            return
        async with self._save_lock:
            await asyncio.to_thread(self._write, self._rows())

    def _append(self, interaction: Interaction) -> None:
        self._by_user.setdefault(interaction.user_id, []).append(interaction)

    def _newest_first(self, user_id: str) -> List[Interaction]:
        return sorted(self._by_user.get(user_id, []), key=lambda i: i.timestamp, reverse=True)

    async def get_recent_interactions(self, user_id: str, limit: int) -> List[Interaction]:
        return self._newest_first(user_id)[: max(0, limit)]

    async def get_all_excluded_ids(self, user_id: str) -> List[str]:
        out: List[str] = []
        seen = set()
        for i in self._newest_first(user_id):
            if i.content_id not in seen:
                seen.add(i.content_id)
                out.append(i.content_id)
        return out

    async def record_interaction(self, interaction: Interaction) -> Interaction:
        self._append(interaction)
        await self._save()
        return interaction

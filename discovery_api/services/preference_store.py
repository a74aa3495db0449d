"""
User Preference store: stated topics, wildness, blocked domains.
Written by profile settings elsewhere; read-only to discovery.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Optional, Protocol, Union

from discovery.models import UserPreferences

logger = logging.getLogger(__name__)


class PreferenceStore(Protocol):
    async def get_preferences(self, user_id: str) -> Optional[UserPreferences]:
        """Stored profile, or None when the user has none."""
        ...


class JsonPreferenceStore:
    """Preference store backed by a JSON file ({"users": [...]} or {user_id: {...}})."""

    def __init__(self, path: Optional[Union[Path, str]] = None):
        self._path = Path(path) if path else None
        self._prefs: Dict[str, UserPreferences] = {}
        if self._path is not None and self._path.exists():
            self._load()

    def _load(self) -> None:
        with open(self._path) as f:
            data = json.load(f)
        users = data.get("users", data) if isinstance(data, dict) else data
        if isinstance(users, list):
            for u in users:
                self.set_preferences(UserPreferences.model_validate(u))
        elif isinstance(users, dict):
            for uid, u in users.items():
                self.set_preferences(UserPreferences.model_validate({**u, "user_id": uid}))
        logger.info("[preference_store] LOADED path=%s users=%s", self._path, len(self._prefs))

    def set_preferences(self, prefs: UserPreferences) -> None:
        self._prefs[prefs.user_id] = prefs

    async def get_preferences(self, user_id: str) -> Optional[UserPreferences]:
        return self._prefs.get(user_id)

"""
Server Configuration

Loads configuration from environment variables and provides defaults.
Supports loading from .env file using python-dotenv.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from discovery.models.config import DiscoveryConfig

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent.parent

# Single .env at the project root
root_env = BASE_DIR / ".env"
if root_env.exists():
    load_dotenv(root_env)


def _bool_env(key: str, default: bool) -> bool:
    v = os.getenv(key)
    if v is None or not v.strip():
        return default
    return v.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class ServerConfig:
    """Server configuration."""

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    # Data source: "json" | "firestore"
    data_source: str = "json"
    # When data_source=json: content corpus, interaction log, and preference profiles
    content_json_path: Optional[Path] = BASE_DIR / "data" / "content.json"
    interactions_json_path: Optional[Path] = None
    preferences_json_path: Optional[Path] = None
    # When data_source=firestore: path to service account JSON and optional project id
    firebase_credentials_path: Optional[Path] = None
    firebase_project_id: Optional[str] = None

    # Trending background job. Disable on all but one replica, or schedule
    # scripts/recalculate_trending.py externally instead.
    trending_worker_enabled: bool = True
    trending_interval_seconds: int = 900

    # Optional JSON file overriding DiscoveryConfig defaults
    discovery_config_path: Optional[Path] = None

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Load configuration from environment variables."""
        data_source = os.getenv("DATA_SOURCE", "").strip().lower() or "json"
        if data_source not in ("json", "firestore"):
            logger.warning("[config] UNKNOWN_DATA_SOURCE value=%r, using json", data_source)
            data_source = "json"

        def _path_env(key: str, default: Optional[Path] = None) -> Optional[Path]:
            v = os.getenv(key)
            if not v:
                return default
            p = Path(v)
            return p if p.is_absolute() else (BASE_DIR / p).resolve()

        return cls(
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            data_source=data_source,
            content_json_path=_path_env("CONTENT_JSON_PATH", BASE_DIR / "data" / "content.json"),
            interactions_json_path=_path_env("INTERACTIONS_JSON_PATH"),
            preferences_json_path=_path_env("PREFERENCES_JSON_PATH"),
            firebase_credentials_path=_path_env("FIREBASE_CREDENTIALS_PATH") or _path_env("GOOGLE_APPLICATION_CREDENTIALS"),
            firebase_project_id=os.getenv("FIREBASE_PROJECT_ID") or None,
            trending_worker_enabled=_bool_env("TRENDING_WORKER_ENABLED", True),
            trending_interval_seconds=int(os.getenv("TRENDING_INTERVAL_SECONDS", "900")),
            discovery_config_path=_path_env("DISCOVERY_CONFIG_PATH"),
        )

    def validate(self) -> tuple[bool, list[str]]:
        """
        Validate the configuration.

        Returns:
            (is_valid, list_of_errors)
        """
        errors = []
        if self.data_source == "firestore":
            if not self.firebase_credentials_path:
                errors.append("DATA_SOURCE=firestore requires FIREBASE_CREDENTIALS_PATH")
            elif not Path(self.firebase_credentials_path).is_file():
                errors.append(f"Firebase credentials file not found: {self.firebase_credentials_path}")
        if self.discovery_config_path and not Path(self.discovery_config_path).is_file():
            errors.append(f"Discovery config not found: {self.discovery_config_path}")
        if self.trending_interval_seconds <= 0:
            errors.append("TRENDING_INTERVAL_SECONDS must be positive")
        return len(errors) == 0, errors

    def load_discovery_config(self) -> DiscoveryConfig:
        """DiscoveryConfig from discovery_config_path, or defaults."""
        if self.discovery_config_path and Path(self.discovery_config_path).is_file():
            return DiscoveryConfig.from_file(self.discovery_config_path)
        return DiscoveryConfig()


# Global config instance
_config: Optional[ServerConfig] = None


def get_config() -> ServerConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = ServerConfig.from_env()
    return _config


def reload_config() -> ServerConfig:
    """Reload configuration from environment."""
    global _config
    _config = None
    return get_config()

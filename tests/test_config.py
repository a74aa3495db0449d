"""
Discovery Config Tests

Checks that the shipped config.json loads into the same values as the
defaults, and that invalid band or weight layouts are rejected.

Run:
----
    pytest tests/test_config.py -v
"""

import json
from pathlib import Path

import pytest

from discovery.models import DEFAULT_CONFIG, DiscoveryConfig, resolve_config
from discovery_api.config import ServerConfig

CONFIG_PATH = Path(__file__).parent.parent / "discovery" / "config.json"


class TestDiscoveryConfig:
    """Config loading and validation."""

    @pytest.fixture(autouse=True)
    def setup(self):
        with open(CONFIG_PATH) as f:
            self.raw = json.load(f)

    def test_shipped_file_matches_defaults(self):
        cfg = DiscoveryConfig.from_file(CONFIG_PATH)
        assert cfg.base_pool_size == DEFAULT_CONFIG.base_pool_size == 500
        assert cfg.max_pool_size == 1500
        assert cfg.max_exclusion_filter == 1000
        assert cfg.rotation_seconds == 900
        assert cfg.trending_half_life_hours == {"hour": 2.0, "day": 24.0, "week": 72.0}
        assert [b.name for b in cfg.selection_bands] == ["low", "medium", "high"]
        assert cfg.similar_weight_jaccard == 0.5
        assert cfg.similar_weight_domain == 0.05

    def test_default_bands_cover_full_range(self):
        bands = DEFAULT_CONFIG.selection_bands
        assert bands[0].min_wildness == 0
        assert bands[-1].max_wildness == 100
        for prev, cur in zip(bands, bands[1:]):
            assert cur.min_wildness == prev.max_wildness + 1
        assert [b.novelty for b in bands] == [False, False, True]

    def test_gap_between_bands_rejected(self):
        bands = [
            {"name": "low", "min_wildness": 0, "max_wildness": 20, "slice_start": 1, "slice_end": 3,
             "epsilon_start": 0.0, "epsilon_end": 0.02},
            {"name": "high", "min_wildness": 30, "max_wildness": 100, "slice_start": 3, "slice_end": 50,
             "epsilon_start": 0.1, "epsilon_end": 0.2},
        ]
        with pytest.raises(ValueError):
            DiscoveryConfig.from_dict({"selection": {"bands": bands}})

    def test_similar_weights_must_sum_to_one(self):
        with pytest.raises(ValueError):
            DiscoveryConfig.from_dict({"similar": {"weight_jaccard": 0.9}})

    def test_max_pool_below_base_rejected(self):
        with pytest.raises(ValueError):
            DiscoveryConfig(base_pool_size=500, max_pool_size=400)

    def test_group_override(self):
        cfg = resolve_config({"candidate_pool": {"base_pool_size": 200, "max_pool_size": 800}})
        assert cfg.base_pool_size == 200
        assert cfg.max_pool_size == 800
        assert cfg.pool_floor == DEFAULT_CONFIG.pool_floor

    def test_resolve_none_is_default(self):
        assert resolve_config(None) is DEFAULT_CONFIG


class TestServerConfig:
    """Environment-driven server config."""

    @pytest.fixture(autouse=True)
    def setup(self, monkeypatch):
        for key in (
            "DATA_SOURCE", "PORT", "TRENDING_WORKER_ENABLED", "TRENDING_INTERVAL_SECONDS",
            "FIREBASE_CREDENTIALS_PATH", "GOOGLE_APPLICATION_CREDENTIALS", "DISCOVERY_CONFIG_PATH",
        ):
            monkeypatch.delenv(key, raising=False)
        self.monkeypatch = monkeypatch

    def test_defaults(self):
        cfg = ServerConfig.from_env()
        assert cfg.data_source == "json"
        assert cfg.port == 8000
        assert cfg.trending_worker_enabled is True
        ok, errors = cfg.validate()
        assert ok, errors

    def test_unknown_data_source_falls_back_to_json(self):
        self.monkeypatch.setenv("DATA_SOURCE", "mongo")
        assert ServerConfig.from_env().data_source == "json"

    def test_worker_can_be_disabled(self):
        self.monkeypatch.setenv("TRENDING_WORKER_ENABLED", "false")
        assert ServerConfig.from_env().trending_worker_enabled is False

    def test_firestore_without_credentials_is_invalid(self):
        self.monkeypatch.setenv("DATA_SOURCE", "firestore")
        ok, errors = ServerConfig.from_env().validate()
        assert not ok
        assert any("FIREBASE_CREDENTIALS_PATH" in e for e in errors)

"""Unit tests for SwarmjotConfig — defaults, env overrides, derived values."""

from __future__ import annotations

import os

import pytest

from swarmjot.config import SwarmjotConfig
from swarmjot.models.layout import LayoutLimits


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    """No stray .env file or SWARMJOT_* variables leak into these tests."""
    monkeypatch.chdir(tmp_path)
    for name in list(os.environ):
        if name.startswith("SWARMJOT_"):
            monkeypatch.delenv(name)


class TestDefaults:

    def test_development_defaults(self):
        cfg = SwarmjotConfig()
        assert cfg.environment == "development"
        assert not cfg.is_production
        assert cfg.bee_api == "http://localhost:1633"
        assert cfg.postage_batch_id == ""
        assert cfg.layout_limits == LayoutLimits(h1=1, h2=2, highlight=4, regular=12)

    def test_gateway_chain_starts_at_local_node(self):
        cfg = SwarmjotConfig()
        assert cfg.gateways[0] == "http://localhost:1633"
        assert cfg.gateways[1] == "https://download.gateway.ethswarm.org"
        assert len(cfg.gateways) == 4


class TestEnvironmentOverrides:

    def test_scalar_overrides(self, monkeypatch):
        monkeypatch.setenv("SWARMJOT_ENVIRONMENT", "production")
        monkeypatch.setenv("SWARMJOT_LAYOUT_REGULAR", "24")
        monkeypatch.setenv("SWARMJOT_HIGHLIGHT_CATEGORY", "Philosophy")
        cfg = SwarmjotConfig()
        assert cfg.is_production
        assert cfg.layout_limits.regular == 24
        assert cfg.highlight_category == "Philosophy"

    def test_list_override_is_json(self, monkeypatch):
        monkeypatch.setenv("SWARMJOT_FALLBACK_GATEWAYS", '["https://one.example"]')
        assert SwarmjotConfig().fallback_gateways == ["https://one.example"]

    def test_dotenv_file(self, tmp_path):
        (tmp_path / ".env").write_text("SWARMJOT_BEE_API=http://bee.internal:1633\n")
        assert SwarmjotConfig().bee_api == "http://bee.internal:1633"


class TestGateways:

    def test_duplicates_and_trailing_slashes_dropped(self):
        cfg = SwarmjotConfig(
            bee_api="https://gateway.ethswarm.org/",
            public_gateway="https://gateway.ethswarm.org",
            fallback_gateways=["https://other.example/", "https://other.example"],
        )
        assert cfg.gateways == ["https://gateway.ethswarm.org", "https://other.example"]

    def test_empty_entries_skipped(self):
        cfg = SwarmjotConfig(fallback_gateways=["", "https://other.example"])
        assert "" not in cfg.gateways

"""Runtime configuration — env-driven via pydantic-settings.

Reads from a .env file and SWARMJOT_* environment variables.  The node
endpoint, gateway chain, postage batch and layout limits all live here so
that callers never hard-code network locations.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from swarmjot.models.layout import LayoutLimits


class SwarmjotConfig(BaseSettings):
    """Engine configuration with environment variable overrides.

    Examples
    --------
    Override via environment::

        export SWARMJOT_ENVIRONMENT=production
        export SWARMJOT_BEE_API=http://bee.internal:1633
        export SWARMJOT_POSTAGE_BATCH_ID=<64 hex chars>

    Or via .env file::

        SWARMJOT_HIGHLIGHT_CATEGORY=Philosophy
        SWARMJOT_LAYOUT_REGULAR=24
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="SWARMJOT_",
        env_file_encoding="utf-8",
    )

    # Runtime environment
    environment: str = "development"
    log_level: str = "INFO"
    debug: bool = False

    # Network endpoints: local node first, then public gateways
    bee_api: str = "http://localhost:1633"
    public_gateway: str = "https://download.gateway.ethswarm.org"
    fallback_gateways: list[str] = [
        "https://api.gateway.ethswarm.org",
        "https://gateway.ethswarm.org",
    ]
    request_timeout_seconds: float = 10.0

    # Write capacity.  Empty means "discover from the node"; "auto" forces
    # the all-zero development placeholder.
    postage_batch_id: str = ""

    # Persisted local state (last batch id, drafts, assets)
    state_path: Path = Path(".swarmjot/state.db")

    # Article layout
    layout_h1: int = 1
    layout_h2: int = 2
    layout_highlight: int = 4
    layout_regular: int = 12
    layout_regular_lead: int = 4
    highlight_category: str = ""

    @property
    def is_production(self) -> bool:
        """Whether running in production mode."""
        return self.environment == "production"

    @property
    def gateways(self) -> list[str]:
        """Ordered, de-duplicated read endpoints (local node first)."""
        ordered: list[str] = []
        for url in [self.bee_api, self.public_gateway, *self.fallback_gateways]:
            url = url.rstrip("/")
            if url and url not in ordered:
                ordered.append(url)
        return ordered

    @property
    def layout_limits(self) -> LayoutLimits:
        return LayoutLimits(
            h1=self.layout_h1,
            h2=self.layout_h2,
            highlight=self.layout_highlight,
            regular=self.layout_regular,
        )


# Module-level singleton; import as `from swarmjot.config import config`
config = SwarmjotConfig()

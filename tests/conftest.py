"""Shared test fixtures for swarmjot."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx
import pytest

from swarmjot.bridge.bee import BeeClient
from swarmjot.bridge.local_node import LocalBeeNode
from swarmjot.config import SwarmjotConfig
from swarmjot.core.engine import ContentEngine
from swarmjot.core.kvstore import MemoryStore
from swarmjot.core.postage import CapacityResolver
from swarmjot.models.article import (
    ArticleContent,
    ArticleKind,
    ArticleMetadata,
    ArticleRecord,
)

BATCH_ID = "b" * 64
HASH = "c" * 64


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test state."""
    return tmp_path


@pytest.fixture
def node() -> LocalBeeNode:
    """Provide an in-process Bee node holding one usable postage batch."""
    bee = LocalBeeNode()
    bee.add_stamp(BATCH_ID, depth=20, label="test")
    return bee


@pytest.fixture
def http_client(node: LocalBeeNode) -> httpx.AsyncClient:
    """Provide an AsyncClient whose every request is answered by ``node``."""
    return httpx.AsyncClient(transport=node.transport())


@pytest.fixture
def config(tmp_dir: Path) -> SwarmjotConfig:
    """Provide a development configuration with default gateways."""
    return SwarmjotConfig(
        environment="development",
        debug=False,
        postage_batch_id="",
        highlight_category="",
        state_path=tmp_dir / "state.db",
    )


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def batch_id() -> str:
    """The id of the usable postage batch held by ``node``."""
    return BATCH_ID


@pytest.fixture
def bee_client(http_client: httpx.AsyncClient, config: SwarmjotConfig) -> BeeClient:
    return BeeClient(config.bee_api, client=http_client)


@pytest.fixture
def resolver(bee_client: BeeClient, store: MemoryStore) -> CapacityResolver:
    return CapacityResolver(bee_client, allow_placeholder=True, store=store)


@pytest.fixture
def engine(
    config: SwarmjotConfig,
    http_client: httpx.AsyncClient,
    store: MemoryStore,
) -> ContentEngine:
    """Provide a ContentEngine wired to the in-process node."""
    return ContentEngine(config, http_client=http_client, store=store)


# ---------------------------------------------------------------------------
# Article factories
# ---------------------------------------------------------------------------


@pytest.fixture
def make_record() -> Callable[..., ArticleRecord]:
    """Factory fixture: build an ArticleRecord with sensible defaults."""

    def _factory(
        title: str = "Untitled",
        created_at: int = 1_700_000_000_000,
        kind: ArticleKind = ArticleKind.REGULAR,
        category: str | None = "General",
        **overrides: Any,
    ) -> ArticleRecord:
        return ArticleRecord(
            title=title,
            body=overrides.pop("body", f"Body of {title}"),
            created_at=created_at,
            kind=kind,
            category=category,
            **overrides,
        )

    return _factory


@pytest.fixture
def make_content() -> Callable[..., ArticleContent]:
    """Factory fixture: build an ArticleContent with sensible defaults."""

    def _factory(
        title: str = "On Silence",
        body: str = "# On Silence\n\nQuiet is a *discipline*.",
        **metadata: Any,
    ) -> ArticleContent:
        defaults: dict[str, Any] = {
            "author": "0x" + "ab" * 20,
            "category": "Philosophy",
            "tags": ["contemplation", "ethics"],
            "created_at": 1_700_000_000_000,
        }
        defaults.update(metadata)
        return ArticleContent(title=title, body=body, metadata=ArticleMetadata(**defaults))

    return _factory

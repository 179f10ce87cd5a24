"""Content engine — wires the write and read paths for one configuration.

The ContentEngine owns a single ``httpx.AsyncClient`` shared by the node
client (writes) and the gateway fetcher (reads), the capacity resolver, and
the persisted key/value state.  It is the object the CLI, the draft store
and the asset library talk to.

Write path: CapacityResolver → Resource/Collection/Website → BeeClient.
Read path:  reference → ContentFetcher → article_codec.extract → layout.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

import httpx

from swarmjot.bridge.bee import BeeApiError, BeeClient
from swarmjot.config import SwarmjotConfig
from swarmjot.core.article_codec import encode_article, extract
from swarmjot.core.builders import Collection, Resource, Website
from swarmjot.core.fetcher import ContentFetcher
from swarmjot.core.kvstore import KeyValueStore, MemoryStore
from swarmjot.core.layout import layout
from swarmjot.core.links import rewrite_for_public
from swarmjot.core.postage import CapacityResolver, pick_best_batch
from swarmjot.core.production_guard import (
    enforce_production_constraints,
    placeholder_batch_allowed,
)
from swarmjot.models.article import ArticleContent, ArticleRecord
from swarmjot.models.layout import LayoutResult
from swarmjot.models.storage import ServiceStatus

logger = logging.getLogger(__name__)

ARTICLE_FILENAME = "index.html"
ARTICLE_CONTENT_TYPE = "text/html"


class ContentEngine:
    """Publishing and retrieval engine bound to one node and gateway chain.

    Parameters
    ----------
    config:
        Engine configuration.  Uses defaults (env-driven) if not provided.
    http_client:
        Optional ``httpx.AsyncClient``; tests pass one mounted on a
        ``LocalBeeNode`` transport.  When omitted the engine owns a private
        client and closes it in ``aclose()``.
    store:
        Persisted local state.  Defaults to a volatile ``MemoryStore``.
    """

    def __init__(
        self,
        config: SwarmjotConfig | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        store: KeyValueStore | None = None,
    ) -> None:
        self.config = config or SwarmjotConfig()

        # Raises ProductionConfigError before any client is built
        enforce_production_constraints(self.config)

        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            timeout=self.config.request_timeout_seconds
        )
        self.store: KeyValueStore = store if store is not None else MemoryStore()

        self.bee = BeeClient(self.config.bee_api, client=self._http)
        self.resolver = CapacityResolver(
            self.bee,
            allow_placeholder=placeholder_batch_allowed(self.config),
            store=self.store,
            default_batch_id=self.config.postage_batch_id,
        )
        self.fetcher = ContentFetcher(
            self.config.gateways,
            client=self._http,
            public_gateway=self.config.public_gateway,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self) -> ContentEngine:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Builders
    # ------------------------------------------------------------------

    def create_resource(self, name: str, data: bytes, content_type: str) -> Resource:
        return Resource(self.bee, self.resolver, name, data, content_type)

    def create_collection(self) -> Collection:
        return Collection(self.bee, self.resolver)

    def create_website(
        self,
        signing_key: str,
        collection: Collection,
        *,
        topic: str = "website",
    ) -> Website:
        return Website(self.bee, self.resolver, signing_key, collection, topic=topic)

    # ------------------------------------------------------------------
    # Articles
    # ------------------------------------------------------------------

    async def publish_article(self, content: ArticleContent) -> str:
        """Upload ``content`` as a self-describing page; returns its reference.

        Local-node asset links in the body are rewritten onto the public
        gateway first so the published page renders for everyone.
        """
        body = rewrite_for_public(
            content.body,
            local_gateway=self.config.bee_api,
            public_gateway=self.config.public_gateway,
        )
        if body != content.body:
            content = content.model_copy(update={"body": body})
        page = encode_article(content)
        reference = await self.create_resource(
            ARTICLE_FILENAME, page, ARTICLE_CONTENT_TYPE
        ).save()
        logger.info("Published article '%s' -> %s", content.title, reference)
        return reference

    async def fetch(
        self,
        reference: str,
        content_type: str | None = None,
        *,
        path: str | None = None,
    ) -> bytes:
        return await self.fetcher.fetch(reference, content_type, path=path)

    async def read_article(self, reference: str) -> ArticleContent:
        """Fetch and decode the article page behind ``reference``."""
        data = await self.fetcher.fetch(reference, ARTICLE_CONTENT_TYPE)
        return extract(data, ARTICLE_CONTENT_TYPE)

    def layout(self, articles: Iterable[ArticleRecord]) -> LayoutResult:
        """Lay out ``articles`` with the configured limits and highlight category."""
        return layout(
            articles,
            self.config.layout_limits,
            self.config.highlight_category or None,
            lead_size=self.config.layout_regular_lead,
        )

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    async def status(self) -> ServiceStatus:
        """Snapshot of node reachability and write capacity."""
        running = await self.bee.is_healthy()
        has_usable = False
        if running:
            try:
                has_usable = pick_best_batch(await self.bee.list_postage_batches()) is not None
            except BeeApiError as exc:
                logger.warning("Could not list postage batches: %s", exc)
        return ServiceStatus(
            node_running=running,
            has_usable_batch=has_usable,
            gateway=self.config.bee_api,
            selected_batch_id=self.resolver.selected or self.config.postage_batch_id,
            public_gateway=self.config.public_gateway,
        )

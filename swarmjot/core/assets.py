"""Asset library — binary files (images, documents) an author has uploaded.

Assets are uploaded as raw data so ``/bytes/<ref>`` serves them from every
gateway.  Their records are kept per author in the engine's key/value store
under ``swarmjot:assets:<author>``.
"""

from __future__ import annotations

import logging
import mimetypes
from pathlib import PurePath
from typing import TYPE_CHECKING

from swarmjot.core.kvstore import KeyValueStore
from swarmjot.core.links import image_markdown
from swarmjot.models.library import AssetRecord, AssetStats
from swarmjot.models.storage import AccessReport

if TYPE_CHECKING:
    from swarmjot.core.engine import ContentEngine

logger = logging.getLogger(__name__)

ASSET_KEY_PREFIX = "swarmjot:assets:"


class AssetLibrary:
    """Per-author asset records plus the upload that creates them.

    Parameters
    ----------
    store:
        Where records are persisted.
    engine:
        Used for uploads, URLs and access probes.
    """

    def __init__(self, store: KeyValueStore, engine: ContentEngine) -> None:
        self._store = store
        self._engine = engine

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def list(self, author_address: str) -> list[AssetRecord]:
        """Assets of ``author_address``, newest upload first."""
        raw = self._store.get(ASSET_KEY_PREFIX + author_address) or []
        assets = [AssetRecord.model_validate(item) for item in raw]
        return sorted(assets, key=lambda a: a.uploaded_at, reverse=True)

    def get(self, asset_id: str, author_address: str) -> AssetRecord | None:
        for asset in self.list(author_address):
            if asset.asset_id == asset_id:
                return asset
        return None

    def rename(self, asset_id: str, author_address: str, name: str) -> bool:
        assets = self.list(author_address)
        for i, asset in enumerate(assets):
            if asset.asset_id == asset_id:
                assets[i] = asset.model_copy(update={"name": name})
                self._write(author_address, assets)
                return True
        return False

    def delete(self, asset_id: str, author_address: str) -> bool:
        assets = self.list(author_address)
        kept = [a for a in assets if a.asset_id != asset_id]
        if len(kept) == len(assets):
            return False
        self._write(author_address, kept)
        return True

    def clear(self, author_address: str) -> None:
        self._store.remove(ASSET_KEY_PREFIX + author_address)

    def stats(self, author_address: str) -> AssetStats:
        assets = self.list(author_address)
        if not assets:
            return AssetStats()
        stamps = [a.uploaded_at for a in assets]
        return AssetStats(
            total_assets=len(assets),
            total_size=sum(a.size_bytes for a in assets),
            oldest_upload=min(stamps),
            newest_upload=max(stamps),
        )

    def _write(self, author_address: str, assets: list[AssetRecord]) -> None:
        self._store.set(
            ASSET_KEY_PREFIX + author_address,
            [a.model_dump(mode="json") for a in assets],
        )

    # ------------------------------------------------------------------
    # Network
    # ------------------------------------------------------------------

    async def upload(
        self,
        name: str,
        data: bytes,
        author_address: str,
        content_type: str | None = None,
    ) -> AssetRecord:
        """Upload ``data`` and record it for ``author_address``."""
        content_type = (
            content_type or mimetypes.guess_type(name)[0] or "application/octet-stream"
        )
        reference = await self._engine.create_resource(name, data, content_type).save_raw()
        record = AssetRecord(
            name=name,
            original_name=name,
            reference=reference,
            content_type=content_type,
            size_bytes=len(data),
            author_address=author_address,
        )
        self._write(author_address, [*self.list(author_address), record])
        logger.info("Asset %s (%s, %d bytes) -> %s", name, content_type, len(data), reference)
        return record

    def url(self, asset: AssetRecord, *, public: bool = False) -> str:
        gateway = self._engine.config.public_gateway if public else self._engine.config.bee_api
        return f"{gateway.rstrip('/')}/bytes/{asset.reference}"

    def markdown(self, asset: AssetRecord, alt: str | None = None, *, public: bool = True) -> str:
        """Markdown image tag for ``asset``; alt text defaults to the file stem."""
        gateway = self._engine.config.public_gateway if public else self._engine.config.bee_api
        return image_markdown(asset.reference, gateway, alt or PurePath(asset.name).stem)

    async def validate_access(self, asset: AssetRecord) -> AccessReport:
        """Probe every gateway for ``asset``."""
        return await self._engine.fetcher.probe(asset.reference, asset.content_type)

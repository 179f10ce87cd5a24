"""Unit tests for the author asset library."""

from __future__ import annotations

import pytest

from swarmjot.core.assets import ASSET_KEY_PREFIX, AssetLibrary
from swarmjot.models.library import AssetStats

AUTHOR = "0x" + "ab" * 20
PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


@pytest.fixture
def library(store, engine) -> AssetLibrary:
    return AssetLibrary(store, engine)


class TestUpload:

    async def test_upload_records_and_serves_raw(self, library, engine):
        asset = await library.upload("photo.png", PNG, AUTHOR)
        assert asset.content_type == "image/png"
        assert asset.size_bytes == len(PNG)
        assert library.list(AUTHOR) == [asset]
        assert await engine.fetch(asset.reference, "image/png") == PNG

    async def test_unknown_extension_is_octet_stream(self, library):
        asset = await library.upload("blob", b"\x00\x01", AUTHOR)
        assert asset.content_type == "application/octet-stream"

    async def test_records_are_per_author(self, library, store):
        await library.upload("a.png", PNG, AUTHOR)
        assert library.list("0x" + "cd" * 20) == []
        assert store.keys(ASSET_KEY_PREFIX) == [ASSET_KEY_PREFIX + AUTHOR]

    async def test_every_gateway_reachable(self, library):
        asset = await library.upload("a.png", PNG, AUTHOR)
        report = await library.validate_access(asset)
        assert report.accessible
        assert report.failed == []
        assert all(url.endswith(f"/bytes/{asset.reference}") for url in report.working)


class TestRecords:

    async def test_rename(self, library):
        asset = await library.upload("a.png", PNG, AUTHOR)
        assert library.rename(asset.asset_id, AUTHOR, "cover.png")
        assert library.get(asset.asset_id, AUTHOR).name == "cover.png"
        assert library.get(asset.asset_id, AUTHOR).original_name == "a.png"
        assert not library.rename("asset-missing", AUTHOR, "x")

    async def test_delete_and_clear(self, library):
        first = await library.upload("a.png", PNG, AUTHOR)
        await library.upload("b.png", PNG + b"b", AUTHOR)
        assert library.delete(first.asset_id, AUTHOR)
        assert not library.delete(first.asset_id, AUTHOR)
        assert len(library.list(AUTHOR)) == 1
        library.clear(AUTHOR)
        assert library.list(AUTHOR) == []

    async def test_stats(self, library):
        assert library.stats(AUTHOR) == AssetStats()
        await library.upload("a.png", PNG, AUTHOR)
        await library.upload("b.png", PNG + b"bb", AUTHOR)
        stats = library.stats(AUTHOR)
        assert stats.total_assets == 2
        assert stats.total_size == 2 * len(PNG) + 2
        assert stats.oldest_upload <= stats.newest_upload


class TestLinks:

    async def test_urls_and_markdown(self, library, engine):
        asset = await library.upload("cover.png", PNG, AUTHOR)
        public = engine.config.public_gateway
        assert library.url(asset) == f"{engine.config.bee_api}/bytes/{asset.reference}"
        assert library.url(asset, public=True) == f"{public}/bytes/{asset.reference}"
        assert library.markdown(asset) == f"![cover]({public}/bytes/{asset.reference})"
        assert library.markdown(asset, "Cover", public=False).startswith("![Cover](http://localhost:1633/")

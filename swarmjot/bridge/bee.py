"""Bee HTTP API client — the write transport of the engine.

Bridge boundary
---------------
Wraps the subset of the Bee node API the engine needs behind an async
``BeeClient``:

- ``GET  /stamps``                       — list postage batches
- ``POST /bzz?name=``                    — upload one named file
- ``POST /bzz`` (``application/x-tar``)  — upload a collection manifest
- ``POST /bytes``                        — upload raw data
- ``GET  /feeds/{owner}/{topic}``        — latest feed update
- ``POST /soc/{owner}/{id}?sig=``        — signed single-owner chunk
- ``POST /feeds/{owner}/{topic}``        — feed manifest (stable address)
- ``GET  /health``, ``GET /addresses``   — diagnostics

Every write carries the ``Swarm-Postage-Batch-Id`` header.  Transport
failures and non-2xx responses surface as ``BeeApiError``; the client never
retries.
"""

from __future__ import annotations

import io
import logging
import tarfile
from typing import Any

import httpx

from swarmjot.models.storage import NamedResource, PostageBatch

logger = logging.getLogger(__name__)

POSTAGE_HEADER = "Swarm-Postage-Batch-Id"
COLLECTION_HEADER = "Swarm-Collection"
INDEX_DOCUMENT_HEADER = "Swarm-Index-Document"
FEED_INDEX_HEADER = "swarm-feed-index"
FEED_INDEX_NEXT_HEADER = "swarm-feed-index-next"

DEFAULT_INDEX_DOCUMENT = "index.html"


class BeeApiError(RuntimeError):
    """Raised when a node request fails at the transport or HTTP level."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def build_tar(entries: list[NamedResource]) -> bytes:
    """Pack collection entries into an uncompressed tar archive."""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w") as tar:
        for entry in entries:
            info = tarfile.TarInfo(name=entry.name)
            info.size = len(entry.data)
            tar.addfile(info, io.BytesIO(entry.data))
    return buf.getvalue()


class BeeClient:
    """Async client for one Bee node.

    Parameters
    ----------
    base_url:
        Node API endpoint, e.g. ``http://localhost:1633``.
    client:
        Optional shared ``httpx.AsyncClient``.  When omitted the client owns
        a private one and closes it in ``aclose()``.
    timeout_s:
        Per-request timeout for the private client.
    """

    def __init__(
        self,
        base_url: str,
        *,
        client: httpx.AsyncClient | None = None,
        timeout_s: float = 10.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout_s)

    @property
    def base_url(self) -> str:
        return self._base_url

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> BeeClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Low-level request
    # ------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        path: str,
        *,
        expected: tuple[int, ...] = (200, 201),
        **kwargs: Any,
    ) -> httpx.Response:
        url = f"{self._base_url}{path}"
        try:
            resp = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise BeeApiError(f"{method} {url} failed: {exc}") from exc
        if resp.status_code not in expected:
            raise BeeApiError(
                f"{method} {url} returned HTTP {resp.status_code}: {resp.text[:200]}",
                status_code=resp.status_code,
            )
        return resp

    @staticmethod
    def _reference_from(resp: httpx.Response) -> str:
        try:
            return str(resp.json()["reference"])
        except (ValueError, KeyError, TypeError) as exc:
            raise BeeApiError(
                f"Node response carried no reference: {resp.text[:200]}",
                status_code=resp.status_code,
            ) from exc

    # ------------------------------------------------------------------
    # Postage
    # ------------------------------------------------------------------

    async def list_postage_batches(self) -> list[PostageBatch]:
        """Return every postage batch known to the node, in node order."""
        resp = await self._request("GET", "/stamps", expected=(200,))
        stamps = resp.json().get("stamps") or []
        return [PostageBatch.from_api(s) for s in stamps]

    # ------------------------------------------------------------------
    # Uploads
    # ------------------------------------------------------------------

    async def upload_file(self, batch_id: str, resource: NamedResource) -> str:
        """Upload one named file; returns its manifest reference."""
        resp = await self._request(
            "POST",
            "/bzz",
            params={"name": resource.name},
            headers={POSTAGE_HEADER: batch_id, "Content-Type": resource.content_type},
            content=resource.data,
        )
        reference = self._reference_from(resp)
        logger.info(
            "Uploaded %s (%d bytes, %s) -> %s",
            resource.name, resource.size_bytes, resource.content_type, reference,
        )
        return reference

    async def upload_bytes(self, batch_id: str, data: bytes) -> str:
        """Upload raw data; returns its content reference."""
        resp = await self._request(
            "POST",
            "/bytes",
            headers={POSTAGE_HEADER: batch_id, "Content-Type": "application/octet-stream"},
            content=data,
        )
        return self._reference_from(resp)

    async def upload_collection(
        self,
        batch_id: str,
        entries: list[NamedResource],
        *,
        index_document: str | None = None,
    ) -> str:
        """Upload ``entries`` as one manifest; returns the manifest reference."""
        headers = {
            POSTAGE_HEADER: batch_id,
            COLLECTION_HEADER: "true",
            "Content-Type": "application/x-tar",
        }
        if index_document:
            headers[INDEX_DOCUMENT_HEADER] = index_document
        resp = await self._request(
            "POST", "/bzz", headers=headers, content=build_tar(entries)
        )
        reference = self._reference_from(resp)
        logger.info("Uploaded collection of %d entries -> %s", len(entries), reference)
        return reference

    # ------------------------------------------------------------------
    # Feeds (signed pointers)
    # ------------------------------------------------------------------

    async def feed_next_index(self, owner: str, topic: str) -> int:
        """Index the next update of ``owner``/``topic`` must use (0 if none)."""
        try:
            resp = await self._request(
                "GET", f"/feeds/{owner}/{topic}", expected=(200,)
            )
        except BeeApiError as exc:
            if exc.status_code == 404:
                return 0
            raise
        next_index = resp.headers.get(FEED_INDEX_NEXT_HEADER)
        if next_index is None:
            return int(resp.headers.get(FEED_INDEX_HEADER, "-1"), 16) + 1
        return int(next_index, 16)

    async def upload_soc(
        self,
        batch_id: str,
        owner: str,
        identifier: str,
        signature: str,
        payload: bytes,
    ) -> str:
        """Upload a signed single-owner chunk."""
        resp = await self._request(
            "POST",
            f"/soc/{owner}/{identifier}",
            params={"sig": signature},
            headers={POSTAGE_HEADER: batch_id, "Content-Type": "application/octet-stream"},
            content=payload,
        )
        return self._reference_from(resp)

    async def create_feed_manifest(self, batch_id: str, owner: str, topic: str) -> str:
        """Create (idempotently) the manifest that resolves to the latest update."""
        resp = await self._request(
            "POST",
            f"/feeds/{owner}/{topic}",
            headers={POSTAGE_HEADER: batch_id},
        )
        return self._reference_from(resp)

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    async def is_healthy(self) -> bool:
        try:
            await self._request("GET", "/health", expected=(200,))
        except BeeApiError:
            return False
        return True

    async def node_addresses(self) -> dict[str, Any]:
        resp = await self._request("GET", "/addresses", expected=(200,))
        return resp.json()

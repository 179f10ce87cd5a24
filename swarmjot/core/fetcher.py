"""Multi-gateway content fetcher — sequential fallback with in-memory cache.

Read path
---------
Endpoints are tried strictly in order (local node first, then public
gateways).  For each one the access path is chosen from the content
category:

- web content (HTML, markdown, JSON, plain text) → ``/bzz/<hash>/<file>``
- binary or unknown content                      → ``/bytes/<hash>``

A failed attempt (transport error, timeout, non-2xx) is logged and the next
endpoint is tried; only when every endpoint has failed does the fetch raise
``ContentUnavailableError`` with the list of attempted URLs.

Successful reads are cached by ``(hash, access key)``.  Entries are never
evicted by age: after a known re-publish the caller must call
``remove_from_cache``.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Iterable

import httpx

from swarmjot.core.reference import extract_hash, extract_path, is_raw_reference
from swarmjot.models.storage import AccessReport

logger = logging.getLogger(__name__)

STANDARD_CONTENT_FILENAME = "index.html"
STANDARD_MARKDOWN_FILENAME = "content.md"
STANDARD_JSON_FILENAME = "content.json"

MANIFEST_SEGMENT = "bzz"
BYTES_SEGMENT = "bytes"


class ContentCategory(str, Enum):
    WEB_CONTENT = "web"
    BINARY_ASSET = "binary"
    DOCUMENT = "document"
    UNKNOWN = "unknown"


def content_category(content_type: str | None) -> ContentCategory:
    """Classify a MIME type for endpoint selection."""
    ctype = (content_type or "").lower()
    if any(t in ctype for t in ("text/html", "text/markdown", "application/json", "text/plain")):
        return ContentCategory.WEB_CONTENT
    if ctype.startswith(("image/", "audio/", "video/")):
        return ContentCategory.BINARY_ASSET
    if any(
        t in ctype
        for t in ("application/pdf", "application/msword", "application/vnd.openxmlformats")
    ):
        return ContentCategory.DOCUMENT
    return ContentCategory.UNKNOWN


def standard_filename(content_type: str | None) -> str:
    ctype = (content_type or "").lower()
    if "markdown" in ctype:
        return STANDARD_MARKDOWN_FILENAME
    if "json" in ctype:
        return STANDARD_JSON_FILENAME
    return STANDARD_CONTENT_FILENAME


def access_path(
    reference: str,
    content_type: str | None = None,
    *,
    path: str | None = None,
) -> str:
    """Endpoint-relative path for ``reference`` (no leading gateway).

    An explicit ``path``, or one embedded in the reference, always selects
    manifest access.  Without a declared type a bare digest is read as raw
    bytes and anything else through its manifest.
    """
    digest = extract_hash(reference)
    inner = path if path is not None else extract_path(reference)
    if inner:
        return f"/{MANIFEST_SEGMENT}/{digest}/{inner.lstrip('/')}"
    if content_type is None:
        if is_raw_reference(reference):
            return f"/{BYTES_SEGMENT}/{digest}"
        return f"/{MANIFEST_SEGMENT}/{digest}/{STANDARD_CONTENT_FILENAME}"
    if content_category(content_type) is ContentCategory.WEB_CONTENT:
        return f"/{MANIFEST_SEGMENT}/{digest}/{standard_filename(content_type)}"
    return f"/{BYTES_SEGMENT}/{digest}"


class ContentUnavailableError(RuntimeError):
    """Raised when every endpoint failed to serve a reference."""

    def __init__(self, reference: str, attempted: list[str]) -> None:
        super().__init__(
            f"Content {reference} unavailable after {len(attempted)} attempts: "
            + ", ".join(attempted)
        )
        self.reference = reference
        self.attempted = attempted


class ContentFetcher:
    """Reads content through an ordered list of endpoints.

    Parameters
    ----------
    endpoints:
        Gateway base URLs in preference order.  Duplicates are dropped.
    client:
        Optional shared ``httpx.AsyncClient``.
    timeout_s:
        Per-attempt timeout for the private client.
    public_gateway:
        Gateway used for shareable links; defaults to the second endpoint
        (the first public one) or the first if there is only one.
    cache:
        Optional mapping to cache into, so several fetchers can share one.
    """

    def __init__(
        self,
        endpoints: Iterable[str],
        *,
        client: httpx.AsyncClient | None = None,
        timeout_s: float = 10.0,
        public_gateway: str | None = None,
        cache: dict[tuple[str, str], bytes] | None = None,
    ) -> None:
        ordered: list[str] = []
        for endpoint in endpoints:
            endpoint = endpoint.rstrip("/")
            if endpoint and endpoint not in ordered:
                ordered.append(endpoint)
        if not ordered:
            raise ValueError("ContentFetcher needs at least one endpoint")
        self._endpoints = ordered
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout_s)
        self._public_gateway = (
            public_gateway.rstrip("/") if public_gateway
            else ordered[1] if len(ordered) > 1 else ordered[0]
        )
        # (hash, access key) -> bytes
        self._cache: dict[tuple[str, str], bytes] = cache if cache is not None else {}

    @property
    def endpoints(self) -> list[str]:
        return list(self._endpoints)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # ------------------------------------------------------------------
    # Fetch
    # ------------------------------------------------------------------

    async def fetch(
        self,
        reference: str,
        content_type: str | None = None,
        *,
        path: str | None = None,
    ) -> bytes:
        """Return the bytes behind ``reference``, trying endpoints in order."""
        relative = access_path(reference, content_type, path=path)
        key = (extract_hash(reference), relative)
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug("Cache hit for %s", relative)
            return cached

        attempted: list[str] = []
        for endpoint in self._endpoints:
            url = f"{endpoint}{relative}"
            attempted.append(url)
            try:
                resp = await self._client.get(url)
                resp.raise_for_status()
            except httpx.HTTPError as exc:
                logger.warning("Gateway attempt failed: %s (%s)", url, exc)
                continue
            data = resp.content
            self._cache[key] = data
            logger.info("Fetched %s from %s (%d bytes)", key[0], endpoint, len(data))
            return data

        raise ContentUnavailableError(reference, attempted)

    async def prefetch(self, references: Iterable[str], content_type: str | None = None) -> int:
        """Warm the cache concurrently; failures are logged, not raised.

        Returns the number of references now cached.
        """

        async def _one(ref: str) -> bool:
            try:
                await self.fetch(ref, content_type)
            except ContentUnavailableError as exc:
                logger.warning("Prefetch failed for %s: %s", ref, exc)
                return False
            return True

        results = await asyncio.gather(*(_one(ref) for ref in references))
        return sum(results)

    # ------------------------------------------------------------------
    # Cache
    # ------------------------------------------------------------------

    def is_cached(self, reference: str, content_type: str | None = None, *, path: str | None = None) -> bool:
        relative = access_path(reference, content_type, path=path)
        return (extract_hash(reference), relative) in self._cache

    def remove_from_cache(self, reference: str) -> int:
        """Drop every cached entry for ``reference``'s hash; returns the count."""
        digest = extract_hash(reference)
        stale = [key for key in self._cache if key[0] == digest]
        for key in stale:
            del self._cache[key]
        return len(stale)

    def clear_cache(self) -> None:
        self._cache.clear()

    # ------------------------------------------------------------------
    # URLs and probing
    # ------------------------------------------------------------------

    def candidate_urls(
        self,
        reference: str,
        content_type: str | None = None,
        *,
        path: str | None = None,
    ) -> list[str]:
        """Every URL the fetcher would try, in order, for "open elsewhere" links."""
        relative = access_path(reference, content_type, path=path)
        return [f"{endpoint}{relative}" for endpoint in self._endpoints]

    def share_url(self, reference: str) -> str:
        """Web-accessible link on the public gateway."""
        return f"{self._public_gateway}/{MANIFEST_SEGMENT}/{extract_hash(reference)}/"

    async def probe(self, reference: str, content_type: str | None = None) -> AccessReport:
        """Check every endpoint (HEAD) without stopping at the first success."""
        working: list[str] = []
        failed: list[str] = []
        for url in self.candidate_urls(reference, content_type):
            try:
                resp = await self._client.head(url)
                resp.raise_for_status()
            except httpx.HTTPError:
                failed.append(url)
                continue
            working.append(url)
        return AccessReport(working=working, failed=failed)

"""In-process Bee node emulation for offline runs and tests.

``LocalBeeNode`` answers the same HTTP surface ``BeeClient`` and
``ContentFetcher`` speak, backed by an in-memory, content-addressed store:

- raw data is addressed by ``sha256(data)``
- a manifest is addressed by the canonical hash of its path table
- a feed manifest is addressed by ``sha256(topic || owner)`` and resolves to
  the reference carried by its latest signed update

Mount it with ``httpx.MockTransport(node.handle)``.  Like the artifact
store it is append-only: nothing is ever deleted or overwritten.
"""

from __future__ import annotations

import io
import logging
import mimetypes
import re
import tarfile
from urllib.parse import unquote

import httpx
from pydantic import BaseModel, ConfigDict

from swarmjot.bridge.bee import (
    COLLECTION_HEADER,
    DEFAULT_INDEX_DOCUMENT,
    FEED_INDEX_HEADER,
    FEED_INDEX_NEXT_HEADER,
    INDEX_DOCUMENT_HEADER,
    POSTAGE_HEADER,
)
from swarmjot.bridge.crypto_bridge import verify_data
from swarmjot.core.hasher import (
    content_address,
    feed_address,
    feed_identifier,
    sha256_hex,
    soc_signing_payload,
)

logger = logging.getLogger(__name__)

_BATCH_ID = re.compile(r"^[a-fA-F0-9]{64}$")
_FEED_TIMESTAMP_BYTES = 8


class _Manifest(BaseModel):
    model_config = ConfigDict(frozen=True)

    entries: dict[str, tuple[str, str]]  # path -> (data reference, content type)
    index_document: str | None = None


class LocalBeeNode:
    """Append-only, content-addressed emulation of a Bee node.

    Parameters
    ----------
    stamps:
        Raw ``GET /stamps`` entries (``batchID``, ``usable``, ``depth`` ...).
    healthy:
        When ``False`` every request answers HTTP 503.
    """

    def __init__(self, stamps: list[dict] | None = None, healthy: bool = True) -> None:
        self.stamps: list[dict] = list(stamps or [])
        self.healthy = healthy
        self.requests: list[httpx.Request] = []
        self._data: dict[str, bytes] = {}
        self._manifests: dict[str, _Manifest] = {}
        self._socs: dict[tuple[str, str], bytes] = {}
        self._feeds: dict[str, tuple[str, str]] = {}

    def add_stamp(
        self,
        batch_id: str,
        *,
        usable: bool = True,
        depth: int = 20,
        utilization: int = 0,
        label: str = "",
    ) -> None:
        self.stamps.append({
            "batchID": batch_id,
            "usable": usable,
            "depth": depth,
            "bucketDepth": 16,
            "utilization": utilization,
            "label": label,
        })

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.healthy:
            return httpx.Response(503, json={"message": "node unavailable"})

        parts = [unquote(p) for p in request.url.path.split("/")[1:]]
        head = parts[0] if parts else ""
        method = request.method

        if head == "health" and method == "GET":
            return httpx.Response(200, json={"status": "ok"})
        if head == "addresses" and method == "GET":
            return httpx.Response(200, json={"overlay": "0" * 64, "ethereum": "0x" + "0" * 40})
        if head == "stamps" and method == "GET":
            return httpx.Response(200, json={"stamps": list(self.stamps)})
        if head == "bytes" and method == "POST":
            return self._guarded(request, lambda: self._store_bytes(request.content))
        if head == "bytes" and method in ("GET", "HEAD") and len(parts) >= 2:
            return self._get_bytes(parts[1])
        if head == "bzz" and method == "POST":
            return self._guarded(request, lambda: self._post_bzz(request))
        if head == "bzz" and method in ("GET", "HEAD") and len(parts) >= 2:
            return self._get_bzz(parts[1], "/".join(parts[2:]))
        if head == "soc" and method == "POST" and len(parts) == 3:
            return self._guarded(request, lambda: self._post_soc(request, parts[1], parts[2]))
        if head == "feeds" and len(parts) == 3:
            if method == "POST":
                return self._guarded(request, lambda: self._post_feed(parts[1], parts[2]))
            if method == "GET":
                return self._get_feed(parts[1], parts[2])
        return httpx.Response(404, json={"message": "not found"})

    @staticmethod
    def _guarded(request: httpx.Request, action) -> httpx.Response:
        batch_id = request.headers.get(POSTAGE_HEADER, "")
        if not _BATCH_ID.match(batch_id):
            return httpx.Response(400, json={"message": "invalid postage batch id"})
        return action()

    # ------------------------------------------------------------------
    # Raw data
    # ------------------------------------------------------------------

    def _store_bytes(self, data: bytes) -> httpx.Response:
        reference = sha256_hex(data)
        self._data.setdefault(reference, data)
        return httpx.Response(201, json={"reference": reference})

    def _get_bytes(self, reference: str) -> httpx.Response:
        data = self._data.get(reference)
        if data is None:
            return httpx.Response(404, json={"message": "not found"})
        return httpx.Response(
            200, content=data, headers={"Content-Type": "application/octet-stream"}
        )

    # ------------------------------------------------------------------
    # Manifests
    # ------------------------------------------------------------------

    def _post_bzz(self, request: httpx.Request) -> httpx.Response:
        if request.headers.get(COLLECTION_HEADER, "").lower() == "true":
            entries: dict[str, tuple[str, str]] = {}
            with tarfile.open(fileobj=io.BytesIO(request.content), mode="r") as tar:
                for member in tar.getmembers():
                    if not member.isfile():
                        continue
                    extracted = tar.extractfile(member)
                    data = extracted.read() if extracted else b""
                    ctype = mimetypes.guess_type(member.name)[0] or "application/octet-stream"
                    entries[member.name] = (self._put(data), ctype)
            index = request.headers.get(INDEX_DOCUMENT_HEADER) or None
        else:
            name = request.url.params.get("name") or "file"
            ctype = request.headers.get("Content-Type", "application/octet-stream")
            entries = {name: (self._put(request.content), ctype)}
            index = name
        return httpx.Response(201, json={"reference": self._put_manifest(entries, index)})

    def _put(self, data: bytes) -> str:
        reference = sha256_hex(data)
        self._data.setdefault(reference, data)
        return reference

    def _put_manifest(self, entries: dict[str, tuple[str, str]], index: str | None) -> str:
        reference = content_address({
            "entries": {path: list(value) for path, value in entries.items()},
            "index": index,
        })
        self._manifests.setdefault(reference, _Manifest(entries=entries, index_document=index))
        return reference

    def _get_bzz(self, reference: str, path: str) -> httpx.Response:
        if reference in self._feeds:
            resolved = self._latest_feed_reference(*self._feeds[reference])
            if resolved is None:
                return httpx.Response(404, json={"message": "feed has no updates"})
            reference = resolved
        manifest = self._manifests.get(reference)
        if manifest is None:
            return httpx.Response(404, json={"message": "manifest not found"})
        if not path:
            path = manifest.index_document or DEFAULT_INDEX_DOCUMENT
        entry = manifest.entries.get(path)
        if entry is None:
            return httpx.Response(404, json={"message": f"path {path!r} not found"})
        data_ref, ctype = entry
        return httpx.Response(200, content=self._data[data_ref], headers={"Content-Type": ctype})

    # ------------------------------------------------------------------
    # Feeds
    # ------------------------------------------------------------------

    def _post_soc(self, request: httpx.Request, owner: str, identifier: str) -> httpx.Response:
        signature = request.url.params.get("sig", "")
        payload = request.content
        if not verify_data(soc_signing_payload(identifier, payload), signature, owner):
            return httpx.Response(401, json={"message": "invalid signature"})
        if (owner, identifier) in self._socs:
            return httpx.Response(409, json={"message": "chunk already exists"})
        self._socs[(owner, identifier)] = payload
        return httpx.Response(201, json={"reference": sha256_hex(bytes.fromhex(identifier + owner))})

    def _post_feed(self, owner: str, topic: str) -> httpx.Response:
        address = feed_address(owner, topic)
        self._feeds.setdefault(address, (owner, topic))
        return httpx.Response(201, json={"reference": address})

    def _latest_index(self, owner: str, topic: str) -> int:
        index = -1
        while (owner, feed_identifier(topic, index + 1)) in self._socs:
            index += 1
        return index

    def _latest_feed_reference(self, owner: str, topic: str) -> str | None:
        index = self._latest_index(owner, topic)
        if index < 0:
            return None
        payload = self._socs[(owner, feed_identifier(topic, index))]
        return payload[_FEED_TIMESTAMP_BYTES:].hex()

    def _get_feed(self, owner: str, topic: str) -> httpx.Response:
        index = self._latest_index(owner, topic)
        if index < 0:
            return httpx.Response(404, json={"message": "feed has no updates"})
        return httpx.Response(
            200,
            json={"reference": self._latest_feed_reference(owner, topic)},
            headers={
                FEED_INDEX_HEADER: f"{index:016x}",
                FEED_INDEX_NEXT_HEADER: f"{index + 1:016x}",
            },
        )

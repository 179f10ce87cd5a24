"""Write-side builders — resources, collections and websites.

Layering
--------
- ``Resource``: one named blob → one reference; web content is wrapped in
  a manifest, everything else is stored as plain data.
- ``Collection``: a path-keyed set of blobs → one manifest reference,
  uploaded in a single request against a single resolved batch.
- ``Website``: a collection bound to a signing key.  Each publish uploads
  the collection and appends a signed feed update pointing at it; the feed
  address depends only on the key and topic, so it survives every
  republish while the manifest reference changes.

Every save resolves capacity first.  Transport failures are re-raised as
``UploadFailedError`` tagged ``upload-failed`` or ``publish-failed`` with
the original error chained; nothing here retries.
"""

from __future__ import annotations

import logging
import time

from swarmjot.bridge.bee import DEFAULT_INDEX_DOCUMENT, BeeApiError, BeeClient
from swarmjot.bridge.crypto_bridge import key_fingerprint, public_key_for, sign_data
from swarmjot.core.fetcher import ContentCategory, content_category
from swarmjot.core.hasher import feed_identifier, feed_topic, soc_signing_payload
from swarmjot.core.postage import CapacityResolver
from swarmjot.models.storage import NamedResource, PublishResult

logger = logging.getLogger(__name__)

UPLOAD_FAILED = "upload-failed"
PUBLISH_FAILED = "publish-failed"


class UploadFailedError(RuntimeError):
    """Raised when a write to the storage network fails.

    ``context`` is the tag of the operation that failed (``upload-failed``
    or ``publish-failed``); the transport error is available as
    ``__cause__``.
    """

    def __init__(self, context: str, message: str) -> None:
        super().__init__(f"[{context}] {message}")
        self.context = context


class Resource:
    """A single named resource awaiting upload."""

    def __init__(
        self,
        client: BeeClient,
        resolver: CapacityResolver,
        name: str,
        data: bytes,
        content_type: str,
    ) -> None:
        self._client = client
        self._resolver = resolver
        self.resource = NamedResource(name=name, data=data, content_type=content_type)

    @property
    def is_raw(self) -> bool:
        """Whether ``save`` writes plain data rather than a manifest."""
        return content_category(self.resource.content_type) is not ContentCategory.WEB_CONTENT

    async def save(self, batch_id: str | None = None) -> str:
        """Upload and return the reference.  Every call uploads again.

        Web content goes up as a one-file manifest served at ``/bzz/<ref>/<name>``;
        anything else is saved raw so the reference reads back through ``/bytes``.
        """
        if self.is_raw:
            return await self.save_raw(batch_id)
        batch = await self._resolver.resolve(batch_id)
        try:
            return await self._client.upload_file(batch, self.resource)
        except BeeApiError as exc:
            raise UploadFailedError(
                UPLOAD_FAILED, f"could not upload {self.resource.name}: {exc}"
            ) from exc

    async def save_raw(self, batch_id: str | None = None) -> str:
        """Upload the data without a manifest; the reference addresses the bytes.

        Binary assets are saved this way so that ``/bytes/<ref>`` serves them.
        """
        batch = await self._resolver.resolve(batch_id)
        try:
            reference = await self._client.upload_bytes(batch, self.resource.data)
        except BeeApiError as exc:
            raise UploadFailedError(
                UPLOAD_FAILED, f"could not upload {self.resource.name}: {exc}"
            ) from exc
        logger.info(
            "Uploaded %s as raw data (%d bytes) -> %s",
            self.resource.name, self.resource.size_bytes, reference,
        )
        return reference


class Collection:
    """Path-keyed set of resources uploaded as one manifest.

    ``add`` is purely in-memory; re-adding a path replaces the earlier entry
    while keeping its original position.
    """

    def __init__(self, client: BeeClient, resolver: CapacityResolver) -> None:
        self._client = client
        self._resolver = resolver
        self._entries: dict[str, NamedResource] = {}

    def add(self, path: str, data: bytes, content_type: str) -> Collection:
        path = path.lstrip("/")
        if not path:
            raise ValueError("Collection paths must be non-empty")
        self._entries[path] = NamedResource(name=path, data=data, content_type=content_type)
        return self

    @property
    def paths(self) -> list[str]:
        return list(self._entries)

    @property
    def entries(self) -> list[NamedResource]:
        return list(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path: str) -> bool:
        return path.lstrip("/") in self._entries

    async def save(self, batch_id: str | None = None) -> str:
        """Upload every entry under one batch; return the manifest reference."""
        if not self._entries:
            raise ValueError("Cannot save an empty collection")
        batch = await self._resolver.resolve(batch_id)
        index = DEFAULT_INDEX_DOCUMENT if DEFAULT_INDEX_DOCUMENT in self._entries else None
        try:
            return await self._client.upload_collection(
                batch, self.entries, index_document=index
            )
        except BeeApiError as exc:
            raise UploadFailedError(
                UPLOAD_FAILED, f"could not upload collection of {len(self)} entries: {exc}"
            ) from exc


class Website:
    """A collection published behind a stable, signed, updatable address.

    Parameters
    ----------
    signing_key:
        Hex Ed25519 private key; its public key is the feed owner.
    collection:
        The content to publish.  It may be modified between publishes.
    topic:
        Human-readable feed topic name.  One key can own several websites
        under different topics.
    """

    def __init__(
        self,
        client: BeeClient,
        resolver: CapacityResolver,
        signing_key: str,
        collection: Collection,
        *,
        topic: str = "website",
    ) -> None:
        self._client = client
        self._resolver = resolver
        self._signing_key = signing_key
        self.collection = collection
        self.owner = public_key_for(signing_key)
        self.topic_name = topic
        self.topic = feed_topic(topic)

    async def publish(self, batch_id: str | None = None) -> PublishResult:
        """Upload the collection and point the feed at the new manifest."""
        batch = await self._resolver.resolve(batch_id)
        try:
            manifest = await self.collection.save(batch)
            index = await self._client.feed_next_index(self.owner, self.topic)
            identifier = feed_identifier(self.topic, index)
            payload = int(time.time()).to_bytes(8, "big") + bytes.fromhex(manifest)
            signature = sign_data(soc_signing_payload(identifier, payload), self._signing_key)
            await self._client.upload_soc(batch, self.owner, identifier, signature, payload)
            address = await self._client.create_feed_manifest(batch, self.owner, self.topic)
        except (UploadFailedError, BeeApiError) as exc:
            raise UploadFailedError(
                PUBLISH_FAILED, f"could not publish website '{self.topic_name}': {exc}"
            ) from exc

        logger.info(
            "Published website '%s' (owner %s) update %d -> %s",
            self.topic_name, key_fingerprint(self.owner), index, manifest,
        )
        return PublishResult(
            address=address,
            manifest_reference=manifest,
            feed_index=index,
            owner=self.owner,
            topic=self.topic,
        )

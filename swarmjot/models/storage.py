"""Storage-network models — postage batches, resources, publish results."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class PostageBatch(BaseModel):
    """A postage batch (write-capacity voucher) as reported by a node.

    The engine observes batches but never mutates them; a batch becomes
    exhausted externally and is simply reported as not ``usable``.
    """

    model_config = ConfigDict(frozen=True)

    batch_id: str
    usable: bool
    remaining_capacity: int = 0  # chunks
    depth: int = 0
    bucket_depth: int = 16
    utilization: int = 0
    label: str = ""

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> PostageBatch:
        """Build from a ``GET /stamps`` entry.

        When the node does not report remaining capacity it is derived as
        ``(2**bucket_depth - utilization) * 2**(depth - bucket_depth)``.
        """
        depth = int(payload.get("depth", 0))
        bucket_depth = int(payload.get("bucketDepth", 16))
        utilization = int(payload.get("utilization", 0))
        if "remainingCapacity" in payload:
            remaining = int(payload["remainingCapacity"])
        elif depth >= bucket_depth:
            remaining = max(0, 2**bucket_depth - utilization) * 2 ** (depth - bucket_depth)
        else:
            remaining = 0
        return cls(
            batch_id=str(payload.get("batchID", "")),
            usable=bool(payload.get("usable", False)),
            remaining_capacity=remaining,
            depth=depth,
            bucket_depth=bucket_depth,
            utilization=utilization,
            label=str(payload.get("label", "")),
        )


class NamedResource(BaseModel):
    """A single named blob awaiting upload."""

    model_config = ConfigDict(frozen=True)

    name: str
    data: bytes
    content_type: str = "application/octet-stream"

    @property
    def size_bytes(self) -> int:
        return len(self.data)


class PublishResult(BaseModel):
    """Outcome of publishing a website.

    ``address`` is stable for a signing key and topic; ``manifest_reference``
    changes with every publish.
    """

    model_config = ConfigDict(frozen=True)

    address: str
    manifest_reference: str
    feed_index: int
    owner: str
    topic: str


class ServiceStatus(BaseModel):
    """Diagnostic snapshot of the write-side node."""

    model_config = ConfigDict(frozen=True)

    node_running: bool
    has_usable_batch: bool
    gateway: str
    selected_batch_id: str
    public_gateway: str


class AccessReport(BaseModel):
    """Result of probing every endpoint for one reference."""

    model_config = ConfigDict(frozen=True)

    working: list[str] = []
    failed: list[str] = []

    @property
    def accessible(self) -> bool:
        return bool(self.working)

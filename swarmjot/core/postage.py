"""Capacity resolution — picking a postage batch before any upload.

Three-tier fallback:

1. an explicit batch id that passes the format check is used as-is, with
   no network call;
2. otherwise the node's batches are listed and the usable one with the most
   remaining capacity is chosen (a previously chosen batch that is still
   usable is kept) and remembered as the default;
3. with nothing usable, development runs get the all-zero placeholder id
   and a warning, production runs get ``NoUsableCapacityError``.

The resolver is an ordinary object: construct one per engine (or per test)
rather than relying on shared module state.
"""

from __future__ import annotations

import logging
import re
from typing import Protocol

from swarmjot.bridge.bee import BeeApiError
from swarmjot.core.kvstore import KeyValueStore
from swarmjot.models.storage import PostageBatch

logger = logging.getLogger(__name__)

PLACEHOLDER_BATCH_ID = "0" * 64
AUTO_BATCH_ID = "auto"
SELECTED_BATCH_KEY = "swarmjot:postage-batch-id"

_BATCH_ID_FORMAT = re.compile(r"^[a-fA-F0-9]{64}$")


class NoUsableCapacityError(RuntimeError):
    """Raised when no usable postage batch exists and placeholders are disallowed."""


class BatchLister(Protocol):
    async def list_postage_batches(self) -> list[PostageBatch]: ...


def is_batch_id(value: str | None) -> bool:
    """Strict format check: exactly 64 hex characters."""
    return bool(value) and bool(_BATCH_ID_FORMAT.match(value))


def pick_best_batch(batches: list[PostageBatch]) -> PostageBatch | None:
    """Usable batch with the greatest remaining capacity; first wins ties."""
    best: PostageBatch | None = None
    for batch in batches:
        if not batch.usable:
            continue
        if best is None or batch.remaining_capacity > best.remaining_capacity:
            best = batch
    return best


class CapacityResolver:
    """Finds or validates a usable postage batch.

    Parameters
    ----------
    client:
        Anything exposing ``async list_postage_batches()``, normally a
        ``BeeClient``.
    allow_placeholder:
        Whether the all-zero placeholder may stand in when no batch is
        usable.  ``False`` in production.
    store:
        Optional key/value store where the chosen batch id is persisted so
        later processes start from the same default.
    default_batch_id:
        Configured batch id.  ``"auto"`` means "use the placeholder".
    """

    def __init__(
        self,
        client: BatchLister,
        *,
        allow_placeholder: bool = True,
        store: KeyValueStore | None = None,
        default_batch_id: str = "",
    ) -> None:
        self._client = client
        self._allow_placeholder = allow_placeholder
        self._store = store
        self._configured = default_batch_id
        self._selected: str | None = None
        if store is not None:
            remembered = store.get(SELECTED_BATCH_KEY)
            if is_batch_id(remembered):
                self._selected = remembered

    @property
    def selected(self) -> str | None:
        """The remembered default batch id, if any."""
        return self._selected

    def forget(self) -> None:
        """Drop the remembered default (e.g. after it was reported exhausted)."""
        self._selected = None
        if self._store is not None:
            self._store.remove(SELECTED_BATCH_KEY)

    async def resolve(self, existing_id: str | None = None) -> str:
        """Return a batch id usable for the next write."""
        candidate = existing_id or self._configured
        if candidate == AUTO_BATCH_ID:
            return self._placeholder("configured as 'auto'")
        if is_batch_id(candidate):
            return candidate

        try:
            batches = await self._client.list_postage_batches()
        except BeeApiError as exc:
            logger.warning("Listing postage batches failed: %s", exc)
            return self._placeholder("batch listing failed", cause=exc)

        usable = {b.batch_id for b in batches if b.usable}
        if self._selected in usable:
            return self._selected

        best = pick_best_batch(batches)
        if best is None:
            return self._placeholder(f"none of {len(batches)} batches is usable")

        self._remember(best.batch_id)
        logger.info(
            "Selected postage batch %s (remaining capacity %d chunks)",
            best.batch_id, best.remaining_capacity,
        )
        return best.batch_id

    def _remember(self, batch_id: str) -> None:
        self._selected = batch_id
        if self._store is not None:
            self._store.set(SELECTED_BATCH_KEY, batch_id)

    def _placeholder(self, reason: str, *, cause: Exception | None = None) -> str:
        if not self._allow_placeholder:
            raise NoUsableCapacityError(
                f"No usable postage batch found ({reason})."
            ) from cause
        logger.warning(
            "No usable postage batch (%s); using development placeholder.", reason
        )
        return PLACEHOLDER_BATCH_ID

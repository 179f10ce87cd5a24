"""Draft store — articles being edited locally before upload.

Drafts live in the engine's key/value store under ``swarmjot:draft:<id>``.
Publishing a draft encodes it, uploads it as a page, and records the
resulting reference on the draft; handing that reference to governance is
the caller's business.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from swarmjot.core.article_codec import generate_preview
from swarmjot.core.kvstore import KeyValueStore
from swarmjot.models.article import ArticleContent, ArticleKind, ArticleMetadata, now_ms
from swarmjot.models.library import BlogDraft

if TYPE_CHECKING:
    from swarmjot.core.engine import ContentEngine

logger = logging.getLogger(__name__)

DRAFT_KEY_PREFIX = "swarmjot:draft:"


class DraftNotFoundError(KeyError):
    """Raised when a draft id is not in the store."""


class DraftStore:
    """CRUD over drafts persisted in a ``KeyValueStore``."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def save(
        self,
        title: str,
        body: str,
        *,
        draft_id: str | None = None,
        **fields,
    ) -> BlogDraft:
        """Create or overwrite a draft; the preview and ``last_modified`` are recomputed.

        ``highlight`` is a presentation-only kind and is rejected here.
        """
        existing = self.load(draft_id) if draft_id else None
        kind = ArticleKind(fields.get("kind", existing.kind if existing else ArticleKind.REGULAR))
        if kind is ArticleKind.HIGHLIGHT:
            raise ValueError("Articles cannot be written with kind 'highlight'")

        base = existing.model_dump() if existing else {}
        base.update(fields)
        base.update(
            title=title,
            body=body,
            kind=kind,
            preview=generate_preview(body),
            last_modified=now_ms(),
        )
        if draft_id:
            base["draft_id"] = draft_id
        draft = BlogDraft(**base)
        self._put(draft)
        return draft

    def load(self, draft_id: str) -> BlogDraft | None:
        raw = self._store.get(DRAFT_KEY_PREFIX + draft_id)
        return BlogDraft.model_validate(raw) if raw is not None else None

    def list(self, author_address: str | None = None) -> list[BlogDraft]:
        """Drafts, optionally for one author (case-insensitive), newest edit first."""
        drafts = []
        for key in self._store.keys(DRAFT_KEY_PREFIX):
            raw = self._store.get(key)
            if raw is None:
                continue
            draft = BlogDraft.model_validate(raw)
            if author_address and draft.author_address.lower() != author_address.lower():
                continue
            drafts.append(draft)
        return sorted(drafts, key=lambda d: d.last_modified, reverse=True)

    def delete(self, draft_id: str) -> bool:
        if self.load(draft_id) is None:
            return False
        self._store.remove(DRAFT_KEY_PREFIX + draft_id)
        return True

    async def publish_draft(
        self,
        draft_id: str,
        engine: ContentEngine,
        *,
        on_published: Callable[[BlogDraft], None] | None = None,
    ) -> BlogDraft:
        """Upload the draft as an article page and mark it published.

        ``on_published`` receives the updated draft once it is stored, e.g. to
        submit its ``content_reference`` for approval.
        """
        draft = self.load(draft_id)
        if draft is None:
            raise DraftNotFoundError(draft_id)

        content = ArticleContent(
            title=draft.title,
            body=draft.body,
            metadata=ArticleMetadata(
                author=draft.author_address,
                category=draft.category,
                tags=list(draft.tags),
                created_at=draft.created_at,
                banner=draft.banner,
            ),
        )
        reference = await engine.publish_article(content)
        published = draft.model_copy(
            update={
                "content_reference": reference,
                "is_published": True,
                "last_modified": now_ms(),
            }
        )
        self._put(published)
        logger.info("Draft %s published -> %s", draft_id, reference)
        if on_published is not None:
            on_published(published)
        return published

    def _put(self, draft: BlogDraft) -> None:
        self._store.set(DRAFT_KEY_PREFIX + draft.draft_id, draft.model_dump(mode="json"))

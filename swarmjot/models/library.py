"""Locally persisted author state — drafts and uploaded assets."""

from __future__ import annotations

import uuid

from pydantic import BaseModel, ConfigDict, Field

from swarmjot.models.article import ArticleKind, now_ms


def _local_id(prefix: str) -> str:
    return f"{prefix}-{now_ms()}-{uuid.uuid4().hex[:9]}"


class BlogDraft(BaseModel):
    """An article being edited but not yet handed to governance."""

    model_config = ConfigDict(frozen=True)

    draft_id: str = Field(default_factory=lambda: _local_id("draft"))
    title: str
    body: str
    preview: str = ""
    banner: str | None = None
    category: str = ""
    tags: list[str] = []
    author_address: str = ""
    kind: ArticleKind = ArticleKind.REGULAR
    created_at: int = Field(default_factory=now_ms)
    last_modified: int = Field(default_factory=now_ms)
    content_reference: str | None = None
    is_published: bool = False


class AssetRecord(BaseModel):
    """An uploaded binary asset (image, document) owned by an author."""

    model_config = ConfigDict(frozen=True)

    asset_id: str = Field(default_factory=lambda: _local_id("asset"))
    name: str
    original_name: str
    reference: str
    content_type: str
    size_bytes: int
    author_address: str
    uploaded_at: int = Field(default_factory=now_ms)


class AssetStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_assets: int = 0
    total_size: int = 0
    oldest_upload: int | None = None
    newest_upload: int | None = None

"""swarmjot data models — all Pydantic v2, all frozen (immutable)."""

from swarmjot.models.article import (
    ArticleContent,
    ArticleEnvelope,
    ArticleEnvelopeV1,
    ArticleEnvelopeV2,
    ArticleKind,
    ArticleMetadata,
    ArticleRecord,
)
from swarmjot.models.layout import LayoutLimits, LayoutResult
from swarmjot.models.library import AssetRecord, AssetStats, BlogDraft
from swarmjot.models.storage import (
    AccessReport,
    NamedResource,
    PostageBatch,
    PublishResult,
    ServiceStatus,
)

__all__ = [
    # articles
    "ArticleKind",
    "ArticleMetadata",
    "ArticleContent",
    "ArticleRecord",
    "ArticleEnvelope",
    "ArticleEnvelopeV1",
    "ArticleEnvelopeV2",
    # layout
    "LayoutLimits",
    "LayoutResult",
    # storage
    "PostageBatch",
    "NamedResource",
    "PublishResult",
    "ServiceStatus",
    "AccessReport",
    # local library
    "BlogDraft",
    "AssetRecord",
    "AssetStats",
]

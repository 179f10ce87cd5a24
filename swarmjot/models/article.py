"""Article models — stored content, schema-versioned envelopes, and records."""

from __future__ import annotations

import time
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

ARTICLE_DOCUMENT_TYPE = "swarmjot-article"
CURRENT_SCHEMA_VERSION = "2"


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class ArticleKind(str, Enum):
    """Presentation slot an article competes for."""

    H1 = "h1"
    H2 = "h2"
    HIGHLIGHT = "highlight"
    REGULAR = "regular"


class ArticleMetadata(BaseModel):
    """Machine-readable metadata stored alongside the article body."""

    model_config = ConfigDict(frozen=True)

    author: str = ""
    category: str = ""
    tags: list[str] = []
    # epoch ms; legacy uploads spell it createdAt
    created_at: int = Field(
        default_factory=now_ms,
        validation_alias=AliasChoices("created_at", "createdAt"),
    )
    banner: str | None = None


class ArticleContent(BaseModel):
    """An article as recovered from (or written to) the storage network."""

    model_config = ConfigDict(frozen=True)

    title: str
    body: str
    metadata: ArticleMetadata = ArticleMetadata()

    def to_record(
        self,
        *,
        kind: ArticleKind = ArticleKind.REGULAR,
        reference: str | None = None,
    ) -> ArticleRecord:
        """Project stored content into a layout-ready record."""
        return ArticleRecord(
            title=self.title,
            body=self.body,
            author_address=self.metadata.author,
            category=self.metadata.category,
            tags=list(self.metadata.tags),
            created_at=self.metadata.created_at,
            banner=self.metadata.banner,
            kind=kind,
            reference=reference,
        )


class ArticleRecord(BaseModel):
    """An article as seen by the layout engine.

    ``kind`` is only ever promoted from ``regular`` to ``highlight`` by the
    layout engine, which works on copies; records themselves are immutable.
    """

    model_config = ConfigDict(frozen=True)

    title: str
    body: str = ""
    author_address: str = ""
    category: str | None = None
    tags: list[str] = []
    created_at: int = 0  # epoch ms
    banner: str | None = None
    kind: ArticleKind = ArticleKind.REGULAR
    reference: str | None = None


# ---------------------------------------------------------------------------
# Envelope: the embedded machine-readable block, tagged by schema_version
# ---------------------------------------------------------------------------


class ArticleEnvelopeV1(BaseModel):
    """Legacy envelope: body stored under ``content``."""

    schema_version: Literal["1"] = "1"
    type: str = ARTICLE_DOCUMENT_TYPE
    title: str
    content: str
    metadata: ArticleMetadata = ArticleMetadata()
    uploaded_at: str = ""

    def to_content(self) -> ArticleContent:
        return ArticleContent(title=self.title, body=self.content, metadata=self.metadata)


class ArticleEnvelopeV2(BaseModel):
    """Current envelope."""

    schema_version: Literal["2"] = "2"
    type: str = ARTICLE_DOCUMENT_TYPE
    title: str
    body: str
    metadata: ArticleMetadata = ArticleMetadata()
    uploaded_at: str = ""

    def to_content(self) -> ArticleContent:
        return ArticleContent(title=self.title, body=self.body, metadata=self.metadata)


ArticleEnvelope = Annotated[
    Union[ArticleEnvelopeV1, ArticleEnvelopeV2],
    Field(discriminator="schema_version"),
]

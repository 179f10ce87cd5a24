"""Layout models — per-kind display limits and the sectioned result."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from swarmjot.models.article import ArticleKind, ArticleRecord


class LayoutLimits(BaseModel):
    """Maximum number of articles shown per kind."""

    model_config = ConfigDict(frozen=True)

    h1: int = Field(default=1, ge=0)
    h2: int = Field(default=2, ge=0)
    highlight: int = Field(default=4, ge=0)
    regular: int = Field(default=12, ge=0)

    def for_kind(self, kind: ArticleKind) -> int:
        return getattr(self, kind.value)


class LayoutResult(BaseModel):
    """Four ordered, length-bounded article sequences.

    Empty sections are empty lists, never ``None``.  ``regular_lead`` and
    ``regular_tail`` split the regular bucket around the secondary and
    highlighted sections, in the order returned by ``sections()``.
    """

    model_config = ConfigDict(frozen=True)

    h1: list[ArticleRecord] = []
    h2: list[ArticleRecord] = []
    highlight: list[ArticleRecord] = []
    regular: list[ArticleRecord] = []
    lead_size: int = Field(default=4, ge=0)

    @property
    def regular_lead(self) -> list[ArticleRecord]:
        return self.regular[: self.lead_size]

    @property
    def regular_tail(self) -> list[ArticleRecord]:
        return self.regular[self.lead_size :]

    def sections(self) -> list[tuple[ArticleKind, list[ArticleRecord]]]:
        """Presentation order: primary, lead regulars, secondary, highlighted, rest."""
        return [
            (ArticleKind.H1, self.h1),
            (ArticleKind.REGULAR, self.regular_lead),
            (ArticleKind.H2, self.h2),
            (ArticleKind.HIGHLIGHT, self.highlight),
            (ArticleKind.REGULAR, self.regular_tail),
        ]

    def total(self) -> int:
        return len(self.h1) + len(self.h2) + len(self.highlight) + len(self.regular)

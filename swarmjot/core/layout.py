"""Article layout — deterministic assignment of articles to presentation slots.

Pipeline (pure, no I/O):

1. **Promote** — ``regular`` articles whose category equals the configured
   highlight category become ``highlight``.  Promotion works on copies and
   never demotes, so re-running the layout on its own output is a no-op.
2. **Partition** by kind.
3. **Order** each bucket by ``created_at`` descending (stable: equal
   timestamps keep input order).
4. **Truncate** each bucket to its limit.

Sections are always lists; a kind with no articles yields ``[]``.
"""

from __future__ import annotations

import logging
from typing import Iterable

from swarmjot.models.article import ArticleKind, ArticleRecord
from swarmjot.models.layout import LayoutLimits, LayoutResult

logger = logging.getLogger(__name__)

DEFAULT_LEAD_SIZE = 4
DEFAULT_RELATED_LIMIT = 4


def promote(
    articles: Iterable[ArticleRecord],
    highlight_category: str | None,
) -> list[ArticleRecord]:
    """Return copies with matching regular articles promoted to ``highlight``."""
    promoted: list[ArticleRecord] = []
    for article in articles:
        if (
            highlight_category
            and article.kind is ArticleKind.REGULAR
            and article.category is not None
            and article.category == highlight_category
        ):
            article = article.model_copy(update={"kind": ArticleKind.HIGHLIGHT})
        promoted.append(article)
    return promoted


def _newest_first(articles: list[ArticleRecord]) -> list[ArticleRecord]:
    # sorted() is stable, so ties keep their input order.
    return sorted(articles, key=lambda a: a.created_at, reverse=True)


def layout(
    articles: Iterable[ArticleRecord],
    limits: LayoutLimits | None = None,
    highlight_category: str | None = None,
    *,
    lead_size: int = DEFAULT_LEAD_SIZE,
) -> LayoutResult:
    """Assign ``articles`` to the four presentation sections.

    Parameters
    ----------
    articles:
        Records in any order.  They are not modified.
    limits:
        Per-kind maxima; defaults to ``LayoutLimits()``.
    highlight_category:
        Category whose regular articles are promoted to ``highlight``.
        ``None`` or ``""`` disables promotion.
    lead_size:
        How many regular articles precede the secondary section.
    """
    limits = limits or LayoutLimits()
    buckets: dict[ArticleKind, list[ArticleRecord]] = {kind: [] for kind in ArticleKind}
    for article in promote(articles, highlight_category):
        buckets[article.kind].append(article)

    sections = {
        kind: _newest_first(items)[: limits.for_kind(kind)]
        for kind, items in buckets.items()
    }
    logger.debug(
        "Layout: %s",
        ", ".join(f"{k.value}={len(v)}/{len(buckets[k])}" for k, v in sections.items()),
    )
    return LayoutResult(
        h1=sections[ArticleKind.H1],
        h2=sections[ArticleKind.H2],
        highlight=sections[ArticleKind.HIGHLIGHT],
        regular=sections[ArticleKind.REGULAR],
        lead_size=lead_size,
    )


def filter_articles(articles: Iterable[ArticleRecord], term: str) -> list[ArticleRecord]:
    """Articles whose category or one of whose tags equals ``term``, in input order."""
    if not term:
        return list(articles)
    return [a for a in articles if a.category == term or term in a.tags]


def related_articles(
    articles: Iterable[ArticleRecord],
    *,
    tags: Iterable[str],
    ignore_title: str | None = None,
    limit: int = DEFAULT_RELATED_LIMIT,
) -> list[ArticleRecord]:
    """Up to ``limit`` articles sharing at least one tag, excluding ``ignore_title``."""
    wanted = set(tags)
    if not wanted:
        return []
    related = [
        a for a in articles
        if a.title != ignore_title and wanted.intersection(a.tags)
    ]
    return related[:limit]

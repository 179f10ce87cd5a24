"""Unit tests for the article layout engine."""

from __future__ import annotations

from swarmjot.core.layout import filter_articles, layout, promote, related_articles
from swarmjot.models.article import ArticleKind
from swarmjot.models.layout import LayoutLimits

DAY = 86_400_000


def _titles(records) -> list[str]:
    return [r.title for r in records]


# ---------------------------------------------------------------------------
# Test: ordering and limits
# ---------------------------------------------------------------------------


class TestOrderingAndLimits:

    def test_three_newest_regulars_descending(self, make_record):
        records = [make_record(f"r{i}", created_at=i * DAY) for i in range(5)]
        result = layout(records, LayoutLimits(regular=3))
        assert _titles(result.regular) == ["r4", "r3", "r2"]

    def test_default_limits(self, make_record):
        records = (
            [make_record(f"h1-{i}", i, kind=ArticleKind.H1) for i in range(3)]
            + [make_record(f"h2-{i}", i, kind=ArticleKind.H2) for i in range(5)]
            + [make_record(f"r-{i}", i) for i in range(20)]
        )
        result = layout(records)
        assert (len(result.h1), len(result.h2), len(result.highlight), len(result.regular)) == (1, 2, 0, 12)
        assert result.h1[0].title == "h1-2"

    def test_empty_input_gives_empty_sections(self):
        result = layout([])
        assert result.h1 == [] and result.h2 == [] and result.highlight == [] and result.regular == []
        assert result.total() == 0

    def test_zero_limit_empties_section(self, make_record):
        result = layout([make_record("x", kind=ArticleKind.H2)], LayoutLimits(h2=0))
        assert result.h2 == []

    def test_ties_keep_input_order(self, make_record):
        records = [make_record(t, created_at=5) for t in ("first", "second", "third")]
        assert _titles(layout(records).regular) == ["first", "second", "third"]


# ---------------------------------------------------------------------------
# Test: highlight promotion
# ---------------------------------------------------------------------------


class TestPromotion:

    def test_matching_regulars_promoted(self, make_record):
        records = [
            make_record("stoics", 3, category="Philosophy"),
            make_record("travel", 2, category="Travel"),
            make_record("lead", 1, kind=ArticleKind.H1, category="Philosophy"),
        ]
        result = layout(records, highlight_category="Philosophy")
        assert _titles(result.highlight) == ["stoics"]
        assert result.highlight[0].kind is ArticleKind.HIGHLIGHT
        assert _titles(result.regular) == ["travel"]
        assert _titles(result.h1) == ["lead"]

    def test_inputs_untouched(self, make_record):
        record = make_record("stoics", category="Philosophy")
        layout([record], highlight_category="Philosophy")
        assert record.kind is ArticleKind.REGULAR

    def test_idempotent(self, make_record):
        records = [
            make_record(f"p{i}", i * DAY, category="Philosophy" if i % 2 else "Other")
            for i in range(10)
        ]
        first = layout(records, highlight_category="Philosophy")
        again = layout(records, highlight_category="Philosophy")
        assert first == again

        relaid = layout(
            first.h1 + first.h2 + first.highlight + first.regular,
            highlight_category="Philosophy",
        )
        assert relaid == first

    def test_highlight_overflow_truncated(self, make_record):
        records = [make_record(f"p{i}", i, category="Philosophy") for i in range(6)]
        result = layout(records, highlight_category="Philosophy")
        assert _titles(result.highlight) == ["p5", "p4", "p3", "p2"]
        assert result.regular == []

    def test_unset_category_never_matches(self, make_record):
        records = [make_record("none", category=None), make_record("empty", category="")]
        assert layout(records, highlight_category="Philosophy").highlight == []
        assert promote(records, "") == records
        assert layout(records, highlight_category="").highlight == []

    def test_no_highlight_category_disables_promotion(self, make_record):
        records = [make_record("stoics", category="Philosophy")]
        assert layout(records).highlight == []


# ---------------------------------------------------------------------------
# Test: presentation sections
# ---------------------------------------------------------------------------


class TestSections:

    def test_regular_split_around_secondary(self, make_record):
        records = [make_record(f"r{i}", i) for i in range(6)]
        records.append(make_record("top", 0, kind=ArticleKind.H1))
        records.append(make_record("second", 0, kind=ArticleKind.H2))
        result = layout(records)

        kinds = [kind for kind, _ in result.sections()]
        assert kinds == [
            ArticleKind.H1, ArticleKind.REGULAR, ArticleKind.H2,
            ArticleKind.HIGHLIGHT, ArticleKind.REGULAR,
        ]
        assert _titles(result.regular_lead) == ["r5", "r4", "r3", "r2"]
        assert _titles(result.regular_tail) == ["r1", "r0"]

    def test_lead_size_configurable(self, make_record):
        records = [make_record(f"r{i}", i) for i in range(3)]
        result = layout(records, lead_size=1)
        assert _titles(result.regular_lead) == ["r2"]

    def test_engine_applies_configured_limits(self, engine, make_record):
        engine.config.layout_regular = 2
        records = [make_record(f"r{i}", i) for i in range(5)]
        assert _titles(engine.layout(records).regular) == ["r4", "r3"]


# ---------------------------------------------------------------------------
# Test: filtering and related articles
# ---------------------------------------------------------------------------


class TestFilteringAndRelated:

    def test_filter_by_category_or_tag(self, make_record):
        records = [
            make_record("a", category="Philosophy"),
            make_record("b", category="Travel", tags=["philosophy", "Philosophy"]),
            make_record("c", category="Travel"),
        ]
        assert _titles(filter_articles(records, "Philosophy")) == ["a", "b"]

    def test_empty_term_keeps_everything(self, make_record):
        records = [make_record("a"), make_record("b")]
        assert filter_articles(records, "") == records

    def test_related_shares_a_tag_and_skips_current(self, make_record):
        records = [
            make_record("current", tags=["ethics"]),
            make_record("r1", tags=["ethics", "stoicism"]),
            make_record("r2", tags=["travel"]),
            *[make_record(f"more{i}", tags=["stoicism"]) for i in range(5)],
        ]
        related = related_articles(records, tags=["ethics", "stoicism"], ignore_title="current")
        assert _titles(related) == ["r1", "more0", "more1", "more2"]

    def test_related_without_tags_is_empty(self, make_record):
        assert related_articles([make_record("a", tags=["x"])], tags=[]) == []

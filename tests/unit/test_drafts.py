"""Unit tests for the local draft store."""

from __future__ import annotations

import itertools

import pytest

import swarmjot.core.drafts as drafts_module
from swarmjot.core.drafts import DRAFT_KEY_PREFIX, DraftNotFoundError, DraftStore
from swarmjot.models.article import ArticleKind

AUTHOR = "0x" + "ab" * 20


@pytest.fixture
def drafts(store) -> DraftStore:
    return DraftStore(store)


@pytest.fixture
def clock(monkeypatch):
    """Deterministic, strictly increasing ``last_modified`` stamps."""
    ticks = itertools.count(1_000)
    monkeypatch.setattr(drafts_module, "now_ms", lambda: next(ticks))


# ---------------------------------------------------------------------------
# Test: save / load / list / delete
# ---------------------------------------------------------------------------


class TestDraftCrud:

    def test_save_computes_preview(self, drafts):
        draft = drafts.save("Hello", "# Hello\n\nSome **bold** words.", author_address=AUTHOR)
        assert draft.preview == "Hello\n\nSome bold words."
        assert drafts.load(draft.draft_id) == draft

    def test_persisted_under_prefix(self, drafts, store):
        draft = drafts.save("Hello", "body")
        assert store.keys(DRAFT_KEY_PREFIX) == [DRAFT_KEY_PREFIX + draft.draft_id]

    def test_update_keeps_identity_and_fields(self, drafts, clock):
        first = drafts.save("v1", "body", kind=ArticleKind.H2, category="Travel", tags=["road"])
        second = drafts.save("v2", "new body", draft_id=first.draft_id)
        assert second.draft_id == first.draft_id
        assert second.kind is ArticleKind.H2
        assert second.category == "Travel"
        assert second.created_at == first.created_at
        assert second.last_modified > first.last_modified

    def test_list_newest_edit_first(self, drafts, clock):
        a = drafts.save("a", "x", author_address=AUTHOR)
        b = drafts.save("b", "x", author_address=AUTHOR)
        drafts.save("a2", "y", draft_id=a.draft_id)
        assert [d.title for d in drafts.list()] == ["a2", "b"]
        assert b.draft_id in {d.draft_id for d in drafts.list()}

    def test_list_filters_author_case_insensitive(self, drafts):
        drafts.save("mine", "x", author_address=AUTHOR)
        drafts.save("theirs", "x", author_address="0x" + "cd" * 20)
        assert [d.title for d in drafts.list(AUTHOR.upper())] == ["mine"]

    def test_delete(self, drafts):
        draft = drafts.save("gone", "x")
        assert drafts.delete(draft.draft_id) is True
        assert drafts.delete(draft.draft_id) is False
        assert drafts.load(draft.draft_id) is None

    def test_highlight_kind_rejected(self, drafts):
        """``highlight`` is assigned by the layout engine, never stored."""
        with pytest.raises(ValueError, match="highlight"):
            drafts.save("x", "y", kind=ArticleKind.HIGHLIGHT)
        with pytest.raises(ValueError):
            drafts.save("x", "y", kind="highlight")


# ---------------------------------------------------------------------------
# Test: publishing
# ---------------------------------------------------------------------------


class TestPublishDraft:

    async def test_publish_uploads_and_marks_draft(self, drafts, engine):
        draft = drafts.save(
            "On Silence",
            "# On Silence\n\nQuiet.",
            author_address=AUTHOR,
            category="Philosophy",
            tags=["ethics"],
        )
        published = await drafts.publish_draft(draft.draft_id, engine)

        assert published.is_published
        assert published.content_reference
        assert drafts.load(draft.draft_id) == published

        article = await engine.read_article(published.content_reference)
        assert article.title == "On Silence"
        assert article.metadata.category == "Philosophy"
        assert article.metadata.tags == ["ethics"]
        assert article.metadata.created_at == draft.created_at

    async def test_callback_receives_published_draft(self, drafts, engine):
        submitted = []
        draft = drafts.save("Proposal", "body")
        published = await drafts.publish_draft(draft.draft_id, engine, on_published=submitted.append)
        assert submitted == [published]

    async def test_unknown_draft(self, drafts, engine):
        with pytest.raises(DraftNotFoundError):
            await drafts.publish_draft("draft-missing", engine)

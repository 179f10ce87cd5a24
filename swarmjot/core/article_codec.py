"""Article codec — self-describing HTML documents with an embedded envelope.

An uploaded article is a complete HTML page that renders on any gateway and
also carries everything the engine needs to reconstruct it:

- ``<script type="application/ld+json" id="swarmjot-article-data">`` holds
  the schema-versioned ``ArticleEnvelope`` (JSON)
- ``<meta name="author|category|created-date|keywords">`` repeat the key
  metadata
- ``<pre class="markdown-source" id="swarmjot-markdown-content">`` holds the
  escaped raw markdown body

``extract`` reads the envelope first and degrades to the meta tags and the
markdown block when the envelope is missing or invalid.  Legacy uploads that
are a bare JSON article object are accepted as well.  Degraded data never
raises; only a document with no recoverable title and body does.
"""

from __future__ import annotations

import html
import json
import logging
import re
from datetime import datetime, timezone

from bs4 import BeautifulSoup
from pydantic import TypeAdapter, ValidationError

from swarmjot.models.article import (
    ArticleContent,
    ArticleEnvelope,
    ArticleEnvelopeV2,
    ArticleMetadata,
    now_ms,
)

logger = logging.getLogger(__name__)

ENVELOPE_SCRIPT_ID = "swarmjot-article-data"
MARKDOWN_SOURCE_ID = "swarmjot-markdown-content"
MARKDOWN_SOURCE_CLASS = "markdown-source"

_envelope_adapter: TypeAdapter = TypeAdapter(ArticleEnvelope)


class ContentMalformedError(ValueError):
    """Raised when neither the envelope nor the fallback yields title and body."""


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def _iso_date(epoch_ms: int) -> str:
    return datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc).isoformat()


def _paragraphs(markdown: str) -> str:
    blocks = [b.strip() for b in re.split(r"\n\s*\n", markdown) if b.strip()]
    return "\n".join(f"      <p>{html.escape(b)}</p>" for b in blocks)


def encode_article(content: ArticleContent) -> bytes:
    """Render ``content`` as a self-describing HTML page (UTF-8 bytes)."""
    meta = content.metadata
    envelope = ArticleEnvelopeV2(
        title=content.title,
        body=content.body,
        metadata=meta,
        uploaded_at=datetime.now(timezone.utc).isoformat(),
    )
    # "</" inside a script block would terminate it early.
    envelope_json = json.dumps(envelope.model_dump(mode="json"), indent=2).replace("</", "<\\/")
    title = html.escape(content.title)
    tags_line = (
        f"\n        <div>Tags: {html.escape(', '.join(meta.tags))}</div>" if meta.tags else ""
    )

    page = f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{title}</title>
  <meta name="description" content="{html.escape(generate_preview(content.body, 160))}">
  <meta property="og:title" content="{title}">
  <meta property="og:type" content="article">
  <meta name="author" content="{html.escape(meta.author)}">
  <meta name="category" content="{html.escape(meta.category)}">
  <meta name="created-date" content="{_iso_date(meta.created_at)}">
  <meta name="keywords" content="{html.escape(', '.join(meta.tags))}">
  <script type="application/ld+json" id="{ENVELOPE_SCRIPT_ID}">
{envelope_json}
  </script>
  <style>
    body {{ font-family: system-ui, sans-serif; line-height: 1.6; max-width: 800px; margin: 0 auto; padding: 20px; }}
    .metadata {{ color: #555; margin-bottom: 2em; font-size: 0.9em; }}
    pre.{MARKDOWN_SOURCE_CLASS} {{ display: none; }}
  </style>
</head>
<body>
  <article>
    <h1>{title}</h1>
    <div class="metadata">
        <div>By: {html.escape(meta.author)}</div>
        <div>Category: {html.escape(meta.category)}</div>
        <div>Date: {_iso_date(meta.created_at)[:10]}</div>{tags_line}
    </div>
    <div class="content">
{_paragraphs(content.body)}
    </div>
  </article>
  <pre class="{MARKDOWN_SOURCE_CLASS}" id="{MARKDOWN_SOURCE_ID}">{html.escape(content.body, quote=False)}</pre>
</body>
</html>
"""
    return page.encode("utf-8")


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


def _from_envelope(payload: object) -> ArticleContent | None:
    """Validate an embedded or raw JSON article object."""
    if not isinstance(payload, dict):
        return None
    payload = dict(payload)
    if "schema_version" not in payload:
        # Unversioned uploads predate the envelope and store the body as "content".
        payload["schema_version"] = "1" if "content" in payload and "body" not in payload else "2"
    try:
        envelope = _envelope_adapter.validate_python(payload)
    except ValidationError as exc:
        logger.debug("Envelope rejected: %s", exc.error_count())
        return None
    content = envelope.to_content()
    if not content.title.strip() or not content.body.strip():
        return None
    return content


def _meta(soup: BeautifulSoup, name: str) -> str:
    tag = soup.find("meta", attrs={"name": name})
    if tag is None:
        return ""
    return str(tag.get("content") or "").strip()


def _parse_created(value: str) -> int:
    if not value:
        return now_ms()
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return now_ms()
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp() * 1000)


def _from_markup(soup: BeautifulSoup) -> ArticleContent | None:
    """Rebuild the article from the title, meta tags and markdown block."""
    title = ""
    if soup.title and soup.title.get_text(strip=True):
        title = soup.title.get_text(" ", strip=True)
    else:
        h1 = soup.find("h1")
        if h1 and h1.get_text(strip=True):
            title = h1.get_text(" ", strip=True)

    source = soup.find("pre", id=MARKDOWN_SOURCE_ID) or soup.find(
        "pre", class_=MARKDOWN_SOURCE_CLASS
    )
    body = source.get_text() if source is not None else ""
    if not title or not body.strip():
        return None

    keywords = _meta(soup, "keywords")
    tags = [t.strip() for t in keywords.split(",") if t.strip()] if keywords else []
    return ArticleContent(
        title=title,
        body=body,
        metadata=ArticleMetadata(
            author=_meta(soup, "author"),
            category=_meta(soup, "category"),
            tags=tags,
            created_at=_parse_created(_meta(soup, "created-date")),
        ),
    )


def extract(data: bytes | str, mime_hint: str | None = None) -> ArticleContent:
    """Recover an article from fetched bytes.

    Parameters
    ----------
    data:
        The fetched document (HTML page or legacy JSON object).
    mime_hint:
        Content type reported by the gateway, if any.  A JSON hint, or a
        payload that starts with ``{``, is tried as a bare article object
        first.

    Raises
    ------
    ContentMalformedError
        If no path yields a non-empty title and body.
    """
    text = data.decode("utf-8", errors="replace") if isinstance(data, bytes) else data
    stripped = text.lstrip()

    if (mime_hint and "json" in mime_hint.lower()) or stripped.startswith("{"):
        try:
            content = _from_envelope(json.loads(stripped))
        except (ValueError, RecursionError):
            content = None
        if content is not None:
            return content

    soup = BeautifulSoup(text, "html.parser")

    script = soup.find("script", id=ENVELOPE_SCRIPT_ID)
    if script is not None:
        try:
            content = _from_envelope(json.loads(script.string or ""))
        except (ValueError, RecursionError):
            content = None
        if content is not None:
            return content
        logger.warning("Embedded article envelope unreadable, falling back to markup")

    content = _from_markup(soup)
    if content is not None:
        return content
    raise ContentMalformedError("Document carries neither an article envelope nor article markup")


# ---------------------------------------------------------------------------
# Previews
# ---------------------------------------------------------------------------

_PREVIEW_RULES: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"```[\s\S]*?```"), ""),
    (re.compile(r"!\[(.*?)\]\(.*?\)"), ""),
    (re.compile(r"\[(.*?)\]\(.*?\)"), r"\1"),
    (re.compile(r"#{1,6}\s+"), ""),
    (re.compile(r"\*\*(.*?)\*\*"), r"\1"),
    (re.compile(r"\*(.*?)\*"), r"\1"),
    (re.compile(r"`(.*?)`"), r"\1"),
]


def generate_preview(markdown: str, max_length: int = 200) -> str:
    """Plain-text teaser: markdown markers stripped, cut at ``max_length``."""
    clean = markdown
    for pattern, replacement in _PREVIEW_RULES:
        clean = pattern.sub(replacement, clean)
    clean = clean.strip()
    if len(clean) <= max_length:
        return clean
    return clean[:max_length].strip() + "..."

"""``swarmjot publish-article`` — publish a markdown file as an article page.

The page embeds the article envelope, so any gateway can render it and the
engine can read it back.  The printed reference is what gets handed to
governance for approval.
"""

from __future__ import annotations

from pathlib import Path

import typer

from swarmjot.cli.runtime import console, engine_session, run
from swarmjot.models.article import ArticleContent, ArticleMetadata


def title_from_markdown(markdown: str, fallback: str) -> str:
    """First level-one heading, else ``fallback``."""
    for line in markdown.splitlines():
        if line.startswith("# "):
            return line[2:].strip() or fallback
    return fallback


async def _publish(content: ArticleContent) -> None:
    async with engine_session() as engine:
        reference = await engine.publish_article(content)
        share = engine.fetcher.share_url(reference)

    console.print(f"[bold green]Published:[/bold green] {content.title}")
    console.print(f"  Reference: [cyan]{reference}[/cyan]")
    console.print(f"  URL:       {share}")


def publish_article_cmd(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Markdown file."),
    title: str = typer.Option(None, "--title", help="Defaults to the first '# ' heading."),
    author: str = typer.Option("", "--author", help="Author address."),
    category: str = typer.Option("", "--category"),
    tag: list[str] = typer.Option([], "--tag", help="Repeat for several tags."),
    banner: str = typer.Option(None, "--banner", help="Banner image reference."),
) -> None:
    """Publish a markdown file as a self-describing article page."""
    body = path.read_text(encoding="utf-8")
    content = ArticleContent(
        title=title or title_from_markdown(body, path.stem),
        body=body,
        metadata=ArticleMetadata(author=author, category=category, tags=tag, banner=banner),
    )
    run(_publish(content))

"""``swarmjot demo`` — offline round trip against the in-process node.

Publishes a handful of sample articles to a ``LocalBeeNode``, reads them back
through the gateway chain, lays them out, and publishes a small website twice
to show that its address survives a republish.  Nothing leaves the process.
"""

from __future__ import annotations

import asyncio

import httpx
import typer
from rich.panel import Panel
from rich.table import Table

from swarmjot.bridge.crypto_bridge import generate_keypair
from swarmjot.bridge.local_node import LocalBeeNode
from swarmjot.cli.runtime import console, run
from swarmjot.config import SwarmjotConfig
from swarmjot.core.engine import ContentEngine
from swarmjot.core.kvstore import MemoryStore
from swarmjot.models.article import ArticleContent, ArticleKind, ArticleMetadata

DEMO_BATCH_ID = "a" * 64

_SAMPLES: list[tuple[str, str, ArticleKind, list[str]]] = [
    ("On Silence", "Philosophy", ArticleKind.H1, ["contemplation"]),
    ("The Long Walk", "Travel", ArticleKind.H2, ["pilgrimage"]),
    ("Notes on Stoicism", "Philosophy", ArticleKind.REGULAR, ["stoicism", "ethics"]),
    ("Bread and Salt", "Tradition", ArticleKind.REGULAR, ["food"]),
    ("Morning Psalms", "Liturgy", ArticleKind.REGULAR, ["prayer"]),
    ("Aristotle's Friends", "Philosophy", ArticleKind.REGULAR, ["ethics"]),
]


async def _demo(delay: float, highlight_category: str) -> None:
    node = LocalBeeNode()
    node.add_stamp(DEMO_BATCH_ID, depth=22, label="demo")
    config = SwarmjotConfig(
        environment="development",
        postage_batch_id="",
        highlight_category=highlight_category,
    )

    async with httpx.AsyncClient(transport=node.transport()) as client:
        engine = ContentEngine(config, http_client=client, store=MemoryStore())

        console.print("[cyan]>>> Publishing sample articles[/cyan]")
        published: list[tuple[str, ArticleKind]] = []
        for i, (title, category, kind, tags) in enumerate(_SAMPLES):
            content = ArticleContent(
                title=title,
                body=f"# {title}\n\nSample article number {i + 1} in *{category}*.",
                metadata=ArticleMetadata(
                    author="0x" + "ab" * 20,
                    category=category,
                    tags=tags,
                    created_at=1_700_000_000_000 + i * 86_400_000,
                ),
            )
            reference = await engine.publish_article(content)
            published.append((reference, kind))
            console.print(f"  {title:<22} [dim]{reference}[/dim]")
            await asyncio.sleep(delay)

        console.print("\n[cyan]>>> Reading back through the gateway chain[/cyan]")
        records = []
        for reference, kind in published:
            article = await engine.read_article(reference)
            records.append(article.to_record(kind=kind, reference=reference))

        result = engine.layout(records)
        table = Table(title=f"Layout (highlight category: {highlight_category or 'none'})")
        table.add_column("Section", style="cyan")
        table.add_column("Title")
        table.add_column("Category")
        for kind, items in result.sections():
            for record in items:
                table.add_row(kind.value, record.title, record.category or "")
        console.print(table)

        console.print("\n[cyan]>>> Publishing a website twice[/cyan]")
        private_key, _ = generate_keypair()
        collection = engine.create_collection()
        collection.add("index.html", b"<h1>Version 1</h1>", "text/html")
        website = engine.create_website(private_key, collection, topic="demo-site")
        first = await website.publish()
        collection.add("index.html", b"<h1>Version 2</h1>", "text/html")
        second = await website.publish()
        served = await engine.fetch(second.address, path="index.html")

        console.print(
            Panel(
                f"Address (stable):   {first.address}\n"
                f"Manifest #0:        {first.manifest_reference}\n"
                f"Manifest #1:        {second.manifest_reference}\n"
                f"Address serves:     {served.decode()}",
                title="Website",
                border_style="green" if first.address == second.address else "red",
            )
        )
        console.print(f"[dim]{len(node.requests)} requests served by the in-process node.[/dim]")


def demo_cmd(
    delay: float = typer.Option(
        0.0, "--delay", "-d", help="Delay in seconds between uploads for visual effect."
    ),
    highlight_category: str = typer.Option(
        "Philosophy", "--highlight", help="Category promoted to the highlight section."
    ),
) -> None:
    """Run an offline publish / read / layout round trip."""
    run(_demo(delay, highlight_category))

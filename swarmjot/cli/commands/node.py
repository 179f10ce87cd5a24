"""``swarmjot stamps`` and ``swarmjot status`` — inspect the write-side node.

``stamps`` lists the node's postage batches with their remaining capacity;
``status`` reports reachability, usable capacity and the gateway chain.
"""

from __future__ import annotations

from rich.table import Table

from swarmjot.cli.runtime import console, engine_session, run
from swarmjot.core.postage import pick_best_batch


async def _stamps() -> None:
    async with engine_session() as engine:
        batches = await engine.bee.list_postage_batches()

    if not batches:
        console.print("[dim]No postage batches on this node.[/dim]")
        return

    best = pick_best_batch(batches)
    table = Table(title="Postage Batches")
    table.add_column("Batch ID", style="cyan")
    table.add_column("Usable", justify="center")
    table.add_column("Depth", justify="right")
    table.add_column("Remaining (chunks)", justify="right")
    table.add_column("Label")
    for b in batches:
        usable = "[green]Yes[/green]" if b.usable else "[red]No[/red]"
        marker = " [bold]*[/bold]" if best is not None and b.batch_id == best.batch_id else ""
        table.add_row(
            b.batch_id[:16] + "..." + marker, usable, str(b.depth),
            f"{b.remaining_capacity:,}", b.label,
        )
    console.print(table)


def stamps_cmd() -> None:
    """List postage batches; * marks the one uploads would pick."""
    run(_stamps())


async def _status() -> None:
    async with engine_session() as engine:
        status = await engine.status()
        gateways = engine.fetcher.endpoints

    table = Table(title="swarmjot Status", show_header=False)
    table.add_column("Check", style="cyan")
    table.add_column("Value")
    table.add_row(
        "Node",
        f"[green]running[/green] ({status.gateway})" if status.node_running
        else f"[red]unreachable[/red] ({status.gateway})",
    )
    table.add_row(
        "Usable batch",
        "[green]Yes[/green]" if status.has_usable_batch else "[yellow]No[/yellow]",
    )
    table.add_row("Selected batch", status.selected_batch_id or "[dim]none[/dim]")
    table.add_row("Public gateway", status.public_gateway)
    table.add_row("Read order", "\n".join(gateways))
    console.print(table)


def status_cmd() -> None:
    """Show node reachability, write capacity and gateway order."""
    run(_status())

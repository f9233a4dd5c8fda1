"""CLI command: compatscan targets — list scannable plugins and themes."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from compatscan.targets import list_targets

console = Console(stderr=True)


@click.command()
@click.pass_context
def targets(ctx: click.Context) -> None:
    """List plugins and themes found in the configured directories."""
    config = ctx.obj["config"]
    found = list_targets(config.plugins_dir, config.themes_dir)

    if not found:
        console.print(
            f"[yellow]No plugins or themes found[/yellow] under "
            f"[cyan]{config.plugins_dir}[/cyan] and [cyan]{config.themes_dir}[/cyan]"
        )
        return

    table = Table(title="Targets", show_lines=False)
    table.add_column("Type", style="bold", width=8)
    table.add_column("Slug", style="cyan")
    table.add_column("Name")

    for target in found:
        table.add_row(target.type, target.slug, target.name)

    console.print(table)

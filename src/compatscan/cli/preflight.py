"""CLI command: compatscan preflight — check that scans can run."""

from __future__ import annotations

import sys

import click
from rich.console import Console
from rich.table import Table

from compatscan.context import build_context

console = Console(stderr=True)


def _mark(flag: bool) -> str:
    return "[green]ok[/green]" if flag else "[red]missing[/red]"


@click.command()
@click.pass_context
def preflight(ctx: click.Context) -> None:
    """Check the PHP binary, phpcs, and that phpcs runs."""
    app = build_context(ctx.obj["config"])
    report = app.scanner.check_system_requirements()

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="dim")
    table.add_column()
    table.add_column()

    table.add_row("Process execution", _mark(report.exec_enabled), "")
    table.add_row("PHP binary", _mark(report.php_binary_exists), report.php_binary)
    table.add_row("phpcs", _mark(report.linter_exists), report.linter_path)
    table.add_row(
        "phpcs --version",
        _mark(report.version_ok) if report.version_cmd else "[dim]skipped[/dim]",
        report.version_output,
    )
    console.print(table)

    for message in report.messages:
        console.print(f"  [yellow]{message}[/yellow]")

    if report.ready:
        console.print("\n[green]Ready to scan.[/green]")
        return
    console.print("\n[red]Not ready: scanning is disabled until resolved.[/red]")
    sys.exit(1)

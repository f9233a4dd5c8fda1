"""CLI command: compatscan scan <path> — batched PHP compatibility scan."""

from __future__ import annotations

import asyncio
import signal
import sys

import click
from rich.console import Console

from compatscan.context import AppContext, build_context
from compatscan.options import (
    VALID_BATCH_SIZES,
    VALID_PHP_VERSIONS,
    VENDOR_EXCLUSIONS,
)
from compatscan.scanner.models import BatchResult

console = Console(stderr=True)

# Pause between batch requests
_INTER_BATCH_DELAY = 0.1


@click.command()
@click.argument("path", type=click.Path(exists=True))
@click.option(
    "--php-version",
    type=click.Choice(VALID_PHP_VERSIONS),
    default=None,
    help="Target PHP version (default from config).",
)
@click.option(
    "--batch-size",
    "-b",
    type=click.Choice([str(s) for s in VALID_BATCH_SIZES]),
    default=None,
    help="Files per linter run (default from config).",
)
@click.option(
    "--skip-vendor/--no-skip-vendor",
    default=True,
    help="Exclude vendor/ from the scan.",
)
@click.option(
    "--exclude",
    "-e",
    multiple=True,
    help="Glob patterns, relative to PATH, to exclude.",
)
@click.option("--summary", is_flag=True, help="Print counts only, not linter output.")
@click.pass_context
def scan(
    ctx: click.Context,
    path: str,
    php_version: str | None,
    batch_size: str | None,
    skip_vendor: bool,
    exclude: tuple[str, ...],
    summary: bool,
) -> None:
    """Scan PATH for PHP compatibility issues, one batch at a time."""
    app = build_context(ctx.obj["config"])
    version = php_version or app.options.defaults.php_version
    size = int(batch_size) if batch_size else app.options.defaults.batch_size
    exclusions = (VENDOR_EXCLUSIONS if skip_vendor else ()) + tuple(exclude)

    console.print(
        f"[bold]compatscan[/bold] scanning [cyan]{path}[/cyan] "
        f"for PHP [cyan]{version}[/cyan]\n"
    )

    totals = asyncio.run(_drive(app, path, version, size, exclusions, summary))
    if totals is None:
        return

    errors, warnings, completed = totals
    console.print(
        f"\nBatches completed: {completed}  "
        f"Errors: [red]{errors}[/red]  Warnings: [yellow]{warnings}[/yellow]"
    )
    if errors > 0:
        sys.exit(1)


async def _drive(
    app: AppContext,
    path: str,
    version: str,
    batch_size: int,
    exclusions: tuple[str, ...],
    summary: bool,
) -> tuple[int, int, int] | None:
    """Client-side loop: open a session, request batches in order, sum counts."""
    scanner = app.scanner
    progress = await scanner.get_scan_progress(path, batch_size, exclusions)
    if progress.scan_id is None:
        console.print(f"[yellow]{progress.message}[/yellow]")
        return None

    console.print(
        f"Total files: {progress.total_files}  "
        f"Batches: {progress.estimated_batches}  "
        f"[dim]({progress.scan_id})[/dim]"
    )

    interrupted = False

    def _signal_handler(signum: int, frame: object) -> None:
        nonlocal interrupted
        interrupted = True
        console.print("\n[dim]Stopping after the current batch...[/dim]")

    previous = signal.signal(signal.SIGINT, _signal_handler)

    errors = warnings = completed = 0
    try:
        for number in range(1, progress.estimated_batches + 1):
            if interrupted:
                await scanner.stop_scan(progress.scan_id)

            result = await scanner.process_batch(progress.scan_id, number, version)
            if not isinstance(result, BatchResult):
                console.print(f"[yellow]{result.message}[/yellow]")
                break

            completed += 1
            errors += result.errors
            warnings += result.warnings
            _print_batch(result, summary)

            if not result.is_last_batch:
                await asyncio.sleep(_INTER_BATCH_DELAY)
    finally:
        signal.signal(signal.SIGINT, previous)
        await scanner.finish_scan(progress.scan_id)

    return errors, warnings, completed


def _print_batch(result: BatchResult, summary: bool) -> None:
    color = "red" if result.errors else "yellow" if result.warnings else "green"
    console.print(
        f"[bold]Batch {result.batch_number}/{result.total_batches}[/bold] "
        f"[{color}]{result.errors} error(s), {result.warnings} warning(s)[/{color}]"
    )
    if not summary:
        console.print(result.output, markup=False, highlight=False)

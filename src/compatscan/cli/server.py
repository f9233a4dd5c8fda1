"""CLI command: compatscan server — start the HTTP API."""

from __future__ import annotations

import click
from rich.console import Console

console = Console(stderr=True)


@click.command()
@click.option(
    "--port",
    type=int,
    default=None,
    help="Port to listen on (default: 8471).",
)
@click.pass_context
def server(ctx: click.Context, port: int | None) -> None:
    """Start the compatscan HTTP API."""
    try:
        import uvicorn
    except ImportError:
        console.print(
            "[red]Web dependencies not installed.[/red]\n"
            "Install with: pip install compatscan[web]"
        )
        raise SystemExit(1)

    config = ctx.obj["config"]
    if port is not None:
        config.web_port = port

    console.print(
        f"[bold]compatscan[/bold] API starting on "
        f"[cyan]http://{config.web_host}:{config.web_port}/api[/cyan]"
    )
    console.print("  [dim]Bound to 127.0.0.1 only[/dim]\n")

    from compatscan.web.app import create_app

    uvicorn.run(
        create_app(config),
        host=config.web_host,
        port=config.web_port,
        log_level="debug" if config.verbose else "info",
    )

"""CLI entry point — Click group with global options."""

from __future__ import annotations

import logging

import click

from compatscan import __version__
from compatscan.config import CompatScanConfig


@click.group()
@click.version_option(version=__version__, prog_name="compatscan")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to a YAML config file.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.pass_context
def main(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """compatscan — batched PHP compatibility scans with PHPCompatibility."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    ctx.ensure_object(dict)
    config = CompatScanConfig.load(config_path)
    config.verbose = verbose
    ctx.obj["config"] = config


def _register_commands() -> None:
    from compatscan.cli.preflight import preflight  # noqa: F811
    from compatscan.cli.scan import scan  # noqa: F811
    from compatscan.cli.server import server  # noqa: F811
    from compatscan.cli.targets import targets  # noqa: F811

    main.add_command(preflight)
    main.add_command(targets)
    main.add_command(scan)
    main.add_command(server)


_register_commands()

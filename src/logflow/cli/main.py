"""logflow CLI main entry point."""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape

from .. import __version__
from ..exceptions import LogflowError
from .commands import config, emit, levels

console = Console(stderr=True)


def setup_logging(verbose: int = 0) -> None:
    """Route the library's own diagnostics to stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose > 1 else logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


@click.group()
@click.version_option(version=__version__, prog_name="logflow")
@click.option(
    "--config", "-c",
    "config_file",
    type=click.Path(path_type=Path),
    help="Configuration file path",
)
@click.option(
    "--verbose", "-v",
    count=True,
    help="Increase verbosity (-v for INFO, -vv for DEBUG)",
)
@click.pass_context
def cli(ctx: click.Context, config_file: Optional[Path], verbose: int) -> None:
    """logflow: structured logging pipeline.

    \b
    Examples:
        logflow levels --preset cli
        logflow emit warn "disk almost full" --data '{"free_mb": 120}'
        logflow config show
        logflow config init ./logflow.toml
    """
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_file"] = config_file
    ctx.obj["verbose"] = verbose


cli.add_command(levels)
cli.add_command(emit)
cli.add_command(config)


def main() -> None:
    """Console script entry point."""
    try:
        cli(obj={})
    except LogflowError as e:
        code = f" {e.error_code}" if e.error_code else ""
        console.print(f"[red]Error{code}:[/red] {escape(str(e))}")
        sys.exit(1)


if __name__ == "__main__":
    main()

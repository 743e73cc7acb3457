"""Level preset listing command."""

import click
from rich.console import Console
from rich.table import Table

from ...levels import LEVEL_PRESETS, create_levels

console = Console()


@click.command()
@click.option(
    "--preset", "-p",
    type=click.Choice(sorted(LEVEL_PRESETS)),
    default="std",
    show_default=True,
    help="Level preset to display",
)
def levels(preset: str) -> None:
    """Show the levels of a preset, most severe first."""
    registry = create_levels(preset)

    table = Table(title=f"Levels: {preset}")
    table.add_column("Level", style="cyan")
    table.add_column("Rank", justify="right")
    table.add_column("Icon")
    table.add_column("Flags", style="green")

    ordered = sorted(registry.defs.values(), key=lambda d: d.rank, reverse=registry.increasing)
    for level in ordered:
        flags = [flag for flag in ("default", "warn", "flush", "lowest") if getattr(level, flag)]
        if level.name == registry.default_level and "default" not in flags:
            flags.append("default")
        table.add_row(level.name, str(level.rank), level.icon or "", ", ".join(flags))

    console.print(table)

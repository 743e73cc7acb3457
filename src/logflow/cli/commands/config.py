"""Configuration management command."""

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from ...config import ConfigManager, LoggingConfig
from ...exceptions import ConfigurationError

console = Console()


@click.group()
def config() -> None:
    """Inspect and write logflow configuration.

    \b
    Examples:
        logflow config show
        logflow config init ~/.config/logflow/config.toml
    """


@config.command("show")
@click.pass_context
def show(ctx: click.Context) -> None:
    """Display the effective configuration."""
    config_manager = ConfigManager(ctx.obj.get("config_file"))
    current = config_manager.load_config()

    table = Table(title="logflow Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Config File", str(config_manager.config_file))
    table.add_row("Levels", current.levels)
    table.add_row("Threshold", current.threshold or "(preset default)")
    shown = [name for name, value in current.show.model_dump().items() if value is True]
    table.add_row("Show", ", ".join(shown))

    for name in ("console", "file", "influx", "otlp"):
        transport = getattr(current.transports, name)
        status = "enabled" if transport.enabled else "disabled"
        if transport.enabled and transport.threshold:
            status += f" (threshold {transport.threshold})"
        table.add_row(f"Transport: {name}", status)

    console.print(table)


@config.command("init")
@click.argument("path", type=click.Path(path_type=Path))
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def init(path: Path, force: bool) -> None:
    """Write a default configuration file to PATH."""
    if path.exists() and not force:
        raise ConfigurationError(
            f"Configuration file already exists: {path}",
            "Use --force to overwrite it",
        )
    ConfigManager(path).export_config(path, LoggingConfig())
    console.print(f"[green]✓ Configuration written to {path}[/green]")

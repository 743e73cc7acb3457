"""Emit a single entry through the configured pipeline."""

import asyncio
import json
from typing import Any, Optional

import click

from ...builder import create_log_manager
from ...config import ConfigManager, LoggingConfig
from ...exceptions import InvalidConfigurationError


def _parse_data(data: Optional[str]) -> Any:
    if data is None:
        return None
    try:
        return json.loads(data)
    except json.JSONDecodeError as e:
        raise InvalidConfigurationError("--data", data, f"valid JSON ({e.msg})")


async def _emit(config: LoggingConfig, level: str, message: str, data: Any, pkg: Optional[str]) -> bool:
    async with create_log_manager(config) as manager:
        logger = manager.get_logger(pkg=pkg)
        return logger.log(level, message, data) is not None


@click.command()
@click.argument("level")
@click.argument("message")
@click.option("--data", "-d", help="Structured data as JSON")
@click.option("--pkg", help="Package name recorded on the entry")
@click.option(
    "--format", "-f",
    "output_format",
    type=click.Choice(["text", "json", "json-array"]),
    help="Console output format",
)
@click.option("--threshold", "-t", help="Global threshold")
@click.option("--no-color", is_flag=True, help="Disable colour")
@click.pass_context
def emit(
    ctx: click.Context,
    level: str,
    message: str,
    data: Optional[str],
    pkg: Optional[str],
    output_format: Optional[str],
    threshold: Optional[str],
    no_color: bool,
) -> None:
    """Log MESSAGE at LEVEL using the configured transports.

    \b
    Examples:
        logflow emit info "deploy finished"
        logflow emit error "payment failed" --data '{"order": 42}' --format json
    """
    config = ConfigManager(ctx.obj.get("config_file")).load_config()
    if threshold:
        config.threshold = threshold
    if output_format:
        config.transports.console.format = output_format
    if no_color:
        config.transports.console.color = False

    payload = _parse_data(data)
    emitted = asyncio.run(_emit(config, level, message, payload, pkg))
    if not emitted:
        click.echo(f"{level.upper()} is below the threshold; nothing was logged", err=True)

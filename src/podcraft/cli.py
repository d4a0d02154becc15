"""Podcraft command-line interface."""

from __future__ import annotations

from pathlib import Path

import click
import yaml
from pydantic import ValidationError
from safir.click import display_help
from structlog.stdlib import get_logger

from .chart import Chart
from .config import Config, ManifestConfig
from .constants import ROOT_LOGGER
from .exceptions import PodcraftError
from .services.builder.manifest import ManifestBuilder

__all__ = [
    "help",
    "main",
    "synth",
    "validate",
]


def _build_chart(config_path: Path, *, debug: bool) -> Chart:
    """Load a manifest configuration and construct its chart.

    Raises
    ------
    click.ClickException
        Raised if the configuration cannot be parsed or is invalid.
    """
    config = Config()
    if debug:
        config.debug = debug
    config.configure_logging()
    logger = get_logger(ROOT_LOGGER)

    try:
        manifest = ManifestConfig.from_file(config_path)
    except (ValidationError, yaml.YAMLError) as e:
        msg = f"Invalid configuration in {config_path}:\n{e}"
        raise click.ClickException(msg) from e
    try:
        return ManifestBuilder(logger).build(manifest)
    except PodcraftError as e:
        raise click.ClickException(str(e)) from e


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(message="%(version)s")
def main() -> None:
    """Command-line interface for podcraft."""


@main.command()
@click.argument("topic", default=None, required=False, nargs=1)
@click.argument("subtopic", default=None, required=False, nargs=1)
@click.pass_context
def help(ctx: click.Context, topic: str | None, subtopic: str | None) -> None:
    """Show help for any command."""
    display_help(main, ctx, topic, subtopic)


@main.command()
@click.argument(
    "config_path",
    metavar="CONFIG",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="File to write the manifest to (default: standard output)",
)
@click.option(
    "--debug",
    "-d",
    is_flag=True,
    envvar="PODCRAFT_DEBUG",
    help="Enable debug logging",
)
def synth(config_path: Path, output: Path | None, *, debug: bool) -> None:
    """Generate the Kubernetes manifest for a configuration."""
    chart = _build_chart(config_path, debug=debug)
    try:
        if output:
            chart.write(output)
        else:
            click.echo(chart.to_yaml(), nl=False)
    except PodcraftError as e:
        raise click.ClickException(str(e)) from e


@main.command()
@click.argument(
    "config_path",
    metavar="CONFIG",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--debug",
    "-d",
    is_flag=True,
    envvar="PODCRAFT_DEBUG",
    help="Enable debug logging",
)
def validate(config_path: Path, *, debug: bool) -> None:
    """Check that a configuration resolves without writing it."""
    chart = _build_chart(config_path, debug=debug)
    try:
        chart.synth()
    except PodcraftError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"{config_path}: {len(chart)} resources OK")

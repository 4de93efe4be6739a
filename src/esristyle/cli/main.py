#!/usr/bin/env python
"""
Main CLI entry point for esristyle.
"""

import sys
from pathlib import Path

import click
from loguru import logger
from rich import print as rprint

from esristyle import __version__
from esristyle.config import AppConfig, ConfigurationError, load_config
from esristyle.utils.logging import setup_logging, style_logger

env_map = {
    "prod": "production",
    "production": "production",
    "dev": "development",
    "development": "development",
    "test": "test",
}


@click.group(context_settings={"show_default": True})
@click.version_option(version=__version__, prog_name="esristyle")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Configuration file path",
)
@click.option(
    "--env",
    "-e",
    type=click.Choice(list(env_map.keys())),
    default="development",
    envvar="ESRISTYLE_ENVIRONMENT",
    help="Environment (dev/prod/test)",
)
@click.option(
    "--verbose", "-v", is_flag=True, help="Enable verbose output and debug logging"
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    help="Custom log file path (default: from configuration)",
)
@click.option("--log-info", is_flag=True, help="Show logging configuration and exit")
@click.pass_context
def cli(ctx, config, env, verbose, log_file, log_info):
    """esristyle - ArcGIS symbology to neutral style translation"""
    ctx.ensure_object(dict)
    environment = env_map[env.lower()]

    try:
        app_config: AppConfig = load_config(config_path=config, environment=environment)
    except ConfigurationError as e:
        rprint(f"[red]Configuration error: {e}[/red]")
        sys.exit(1)

    ctx.obj["config"] = app_config
    ctx.obj["config_path"] = config
    ctx.obj["environment"] = environment
    ctx.obj["verbose"] = verbose

    setup_logging(
        verbose=verbose, log_file=log_file, environment=environment, config_path=config
    )

    if log_info:
        style_logger.show_log_info()
        ctx.exit()

    logger.debug(f"esristyle CLI started (environment: {environment}, config: {config})")


@cli.command()
@click.pass_context
def info(ctx) -> None:
    """Display information about the esristyle installation."""
    app_config: AppConfig = ctx.obj["config"]
    style = app_config.style

    click.echo(f"esristyle version: {__version__}")
    click.echo(f"Python version: {sys.version.split()[0]}")
    click.echo(f"Environment: {ctx.obj['environment']}")
    click.echo(f"Log level: {app_config.global_.log_level}")
    click.echo(f"Request timeout: {app_config.global_.request_timeout}s")

    click.echo("\nStyle defaults:")
    click.echo(f"  Projection unit: {style.projection_unit}")
    click.echo(f"  Meters per unit: {style.resolve_meters_per_unit():g}")
    click.echo(f"  Group unique values by label: {'Yes' if style.group_by_label else 'No'}")
    click.echo(f"  Keep unresolved placeholders: {'Yes' if style.keep_leftovers else 'No'}")
    click.echo(f"  Hidden attribute: {style.hidden_attribute or '-'}")


from esristyle.cli.style_cmd import style_commands  # noqa: E402

cli.add_command(style_commands)


def main() -> None:
    """Main entry point."""
    try:
        cli()
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()

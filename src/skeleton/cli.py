"""
Skeleton CLI.

Usage:
    skeleton [--config CONFIG] server
    skeleton version [--extended]
"""

import click

from skeleton import version as build_version
from skeleton.config import load_config
from skeleton.domain.exceptions import ConfigurationError, SkeletonException
from skeleton.infrastructure.monitoring import get_logger, setup_logging

DEFAULT_CONFIG_FILE = "config/skeleton.yaml"

logger = get_logger(__name__)


@click.group()
@click.option(
    "--config",
    "-c",
    "config_file",
    default=DEFAULT_CONFIG_FILE,
    show_default=True,
    envvar="SKELETON_CONFIG_FILE",
    help="Config file",
)
@click.pass_context
def cli(ctx, config_file):
    """Skeleton - REST API service."""
    ctx.ensure_object(dict)
    ctx.obj["config_file"] = config_file


@cli.command()
@click.pass_context
def server(ctx):
    """Start the API server."""
    from skeleton.main import serve

    try:
        settings = load_config(ctx.obj["config_file"])
    except ConfigurationError as e:
        raise click.ClickException(f"loading configuration: {e.message}") from e

    setup_logging(
        level=settings.effective_log_level,
        json_logs=not settings.developer_mode,
    )

    try:
        serve(settings)
    except SkeletonException as e:
        logger.error("server failed", extra={"fields": {"error": e.message, "code": e.code}})
        raise click.ClickException(e.message) from e


@cli.command()
@click.option("--extended", "-e", is_flag=True, help="Print the full version descriptor as JSON")
def version(extended):
    """Print version information."""
    current = build_version.current()
    if extended:
        click.echo(current.to_json(indent=2))
    else:
        click.echo(str(current))


def main():
    cli(obj={})


if __name__ == "__main__":
    main()

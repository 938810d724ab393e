"""CLI interface for mdserve."""

import logging
from pathlib import Path

import click

from mdserve.config import Config


@click.group()
@click.version_option(package_name="mdserve")
def cli() -> None:
    """mdserve - serve a directory of Markdown as a website."""


@cli.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: auto-discover mdserve.toml)",
)
@click.option(
    "--root",
    "-r",
    type=click.Path(path_type=Path, file_okay=False),
    envvar="MDSERVE_ROOT",
    default=None,
    help="Content root directory (overrides config)",
)
@click.option(
    "--host",
    envvar="MDSERVE_HOST",
    default=None,
    help="Host to bind to (overrides config)",
)
@click.option(
    "--port",
    "-p",
    type=int,
    envvar="MDSERVE_PORT",
    default=None,
    help="Port to bind to (overrides config)",
)
@click.option(
    "--base-url",
    envvar="MDSERVE_BASE_URL",
    default=None,
    help="Absolute origin for feed links, e.g. https://example.com (overrides config)",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable debug logging",
)
def serve(
    config_path: Path | None,
    root: Path | None,
    host: str | None,
    port: int | None,
    base_url: str | None,
    verbose: bool,
) -> None:
    """Start the content server."""
    from mdserve.server import run_server

    try:
        config = Config.load(config_path).with_overrides(
            host=host,
            port=port,
            root=root,
            base_url=base_url,
            log_level="DEBUG" if verbose else None,
        )
    except ValueError as e:
        raise click.ClickException(f"Invalid configuration: {e}") from e

    if not config.content.root.is_dir():
        raise click.UsageError(f"Content root is not a directory: {config.content.root}")

    logging.basicConfig(
        level=config.logging.level_number,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    click.echo(f"Starting server on {config.server.host}:{config.server.port}")
    click.echo(f"Content root: {config.content.root}")
    if config.content.base_url:
        click.echo(f"Feed base URL: {config.content.base_url}")
    else:
        click.echo("Feed links: root-relative (no base_url)")

    run_server(config)

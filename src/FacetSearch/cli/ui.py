"""Click CLI interface definitions.

Defines the command-line interface structure and routes commands
to their respective runners.
"""

from __future__ import annotations

from pathlib import Path

import click
from dotenv import load_dotenv

from FacetSearch.cli.runner import CommandRunner
from FacetSearch.config import DEFAULT_CONFIG_PATH, load_config

_FILTERS_OPTION = click.option(
    "--filters",
    "filters_path",
    type=click.Path(path_type=Path, dir_okay=False, exists=True),
    default=None,
    help="YAML file mapping facet keys to filter values.",
)
_SORT_OPTION = click.option("--sort", "sort_label", default=None, help="Sort label from config.")


@click.group(help="FacetSearch: filter archive documents by facets.")
@click.option(
    "--config",
    "config_paths",
    type=click.Path(path_type=Path, dir_okay=False, exists=True),
    multiple=True,
    help=f"YAML config file; repeat to layer overrides. Defaults to {DEFAULT_CONFIG_PATH}.",
)
@click.pass_context
def cli(ctx: click.Context, config_paths: tuple[Path, ...]) -> None:
    """CLI entry group.

    Loads environment variables from .env file before processing config.
    """
    load_dotenv()

    cfg = load_config(*config_paths)
    ctx.obj = CommandRunner(cfg)


@cli.command("search")
@_FILTERS_OPTION
@_SORT_OPTION
@click.option("--page", type=click.IntRange(min=1), default=1, show_default=True, help="Result page.")
@click.pass_context
def search_cmd(ctx: click.Context, filters_path: Path | None, sort_label: str | None, page: int) -> None:
    """Search documents and print one page of results."""
    ctx.obj.run_search(ctx.command.name, filters_path=filters_path, page=page, sort_label=sort_label)


@cli.command("suggest")
@click.argument("facet")
@_FILTERS_OPTION
@click.option("--typed", default=None, help="Text the suggested values must contain.")
@click.option("--limit", type=click.IntRange(min=1), default=15, show_default=True, help="Maximum suggestions.")
@click.pass_context
def suggest_cmd(ctx: click.Context, facet: str, filters_path: Path | None, typed: str | None, limit: int) -> None:
    """List values of FACET available under the other filters."""
    ctx.obj.run_suggest(ctx.command.name, facet=facet, filters_path=filters_path, typed=typed, limit=limit)


@cli.command("export")
@click.argument("output", type=click.Path(path_type=Path, dir_okay=False))
@_FILTERS_OPTION
@_SORT_OPTION
@click.pass_context
def export_cmd(ctx: click.Context, output: Path, filters_path: Path | None, sort_label: str | None) -> None:
    """Export all matching documents to OUTPUT as CSV."""
    ctx.obj.run_export(ctx.command.name, output=output, filters_path=filters_path, sort_label=sort_label)


@cli.command("compile")
@_FILTERS_OPTION
@_SORT_OPTION
@click.option("--page", type=click.IntRange(min=1), default=1, show_default=True, help="Result page.")
@click.pass_context
def compile_cmd(ctx: click.Context, filters_path: Path | None, sort_label: str | None, page: int) -> None:
    """Print the compiled search body as JSON without sending it."""
    ctx.obj.run_compile(ctx.command.name, filters_path=filters_path, page=page, sort_label=sort_label)

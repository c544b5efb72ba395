"""Command runner for coordinating CLI execution.

Manages logging configuration, service lifecycle, and error handling for
command execution.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, TypeVar

import click

from FacetSearch.config import AppConfig, load_filter_state
from FacetSearch.core.models import SearchContext
from FacetSearch.renderers import render_json, render_page, render_suggestions
from FacetSearch.services import FacetSearchService, create_search_service
from FacetSearch.utils.log import configure_logging, log

T = TypeVar("T")


class CommandRunner:
    """Orchestrates command execution with proper resource management."""

    def __init__(self, config: AppConfig, service: FacetSearchService | None = None) -> None:
        """Initialize command runner.

        Args:
            config: Application configuration.
            service: Optional prebuilt service; created from config otherwise.
        """
        self.config = config
        self._service = service

    def build_context(self, filters_path: Path | None, sort_label: str | None = None) -> SearchContext:
        """Build a search context from an optional filter file and sort label."""
        filters = load_filter_state(filters_path, self.config.facets.registry) if filters_path else {}
        sort = self.config.facets.sort(sort_label) if sort_label else None
        return SearchContext(filters=filters, sort=sort, index=self.config.backend.index)

    def run_search(self, action: str, *, filters_path: Path | None, page: int, sort_label: str | None) -> None:
        """Search documents and print one page of results."""

        def _run(service: FacetSearchService) -> None:
            context = self.build_context(filters_path, sort_label)
            result = service.search(context, page=page)
            click.echo(render_page(result, offset=(page - 1) * service.page_size), nl=False)

        self._execute(action, _run)

    def run_suggest(
        self,
        action: str,
        *,
        facet: str,
        filters_path: Path | None,
        typed: str | None,
        limit: int,
    ) -> None:
        """Print term suggestions for one facet."""

        def _run(service: FacetSearchService) -> None:
            context = self.build_context(filters_path)
            suggestions = service.suggest_terms(context, facet, typed=typed, limit=limit)
            click.echo(render_suggestions(suggestions), nl=False)

        self._execute(action, _run)

    def run_export(self, action: str, *, output: Path, filters_path: Path | None, sort_label: str | None) -> None:
        """Export matching documents to a CSV file."""

        def _run(service: FacetSearchService) -> None:
            context = self.build_context(filters_path, sort_label)
            service.export_csv(context, output)

        self._execute(action, _run)

    def run_compile(self, action: str, *, filters_path: Path | None, page: int, sort_label: str | None) -> None:
        """Print the compiled search body without sending it."""

        def _run(service: FacetSearchService) -> None:
            context = self.build_context(filters_path, sort_label)
            click.echo(render_json(service.search_body(context, page=page)), nl=False)

        self._execute(action, _run)

    def _execute(self, action: str, func: Callable[[FacetSearchService], T]) -> T:
        configure_logging(
            level=self.config.runtime.level,
            action=action,
            log_to_file=self.config.runtime.to_file,
            log_dir=self.config.runtime.dir,
        )
        service = self._service
        try:
            if service is None:
                service = create_search_service(self.config)
            return func(service)
        except Exception as e:  # noqa: BLE001 - cli boundary
            log.error("%s failed: %s", action.capitalize(), e)
            raise click.Abort from e
        finally:
            if service is not None and self._service is None:
                service.close()

"""Output renderers for command results."""

from __future__ import annotations

from FacetSearch.renderers.console import render_page, render_suggestions
from FacetSearch.renderers.json import render_json

__all__ = [
    "render_json",
    "render_page",
    "render_suggestions",
]

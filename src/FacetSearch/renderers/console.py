"""Console text output renderers.

Renders search pages and term suggestions into human-friendly text.
"""

from __future__ import annotations

from typing import Any, Iterable, Sequence

from FacetSearch.core.models import SearchPage, TermSuggestion

_MAX_VALUE_LEN = 80


def _fmt_value(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        text = ", ".join(_fmt_value(v) for v in value)
    elif isinstance(value, dict):
        text = ", ".join(f"{k}={_fmt_value(v)}" for k, v in value.items())
    else:
        text = str(value)
    if len(text) > _MAX_VALUE_LEN:
        return text[: _MAX_VALUE_LEN - 3] + "..."
    return text


def render_page(page: SearchPage, *, fields: Sequence[str] = (), offset: int = 0) -> str:
    """Render a result page into a text block.

    Args:
        page: Parsed search page.
        fields: Source fields to show per hit; all non-text fields when empty.
        offset: Rank of the first hit minus one.

    Returns:
        A formatted string ready to be printed.
    """
    lines = [f"{page.total} document(s)"]
    for idx, hit in enumerate(page.hits, start=offset + 1):
        lines.append(f"{idx}. {hit.id}")
        shown = fields or [k for k, v in hit.source.items() if not isinstance(v, str) or len(v) <= _MAX_VALUE_LEN]
        for name in shown:
            if name in hit.source:
                lines.append(f"   {name}: {_fmt_value(hit.source[name])}")
        for name, fragments in hit.highlight.items():
            for fragment in fragments:
                lines.append(f"   [{name}] ...{fragment}...")
    return "\n".join(lines) + "\n"


def render_suggestions(suggestions: Iterable[TermSuggestion]) -> str:
    """Render term suggestions as aligned `count  term` lines."""
    items = list(suggestions)
    if not items:
        return "(no suggestions)\n"
    width = max(len(str(s.count)) for s in items)
    return "\n".join(f"{s.count:>{width}}  {s.term}" for s in items) + "\n"

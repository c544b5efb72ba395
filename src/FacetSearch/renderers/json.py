"""JSON output renderers for compiled request bodies."""

from __future__ import annotations

import json
from typing import Any, Mapping


def render_json(body: Mapping[str, Any]) -> str:
    """Render a request body as indented JSON text."""
    return json.dumps(body, ensure_ascii=False, indent=2) + "\n"

"""JSON renderer."""

from __future__ import annotations

import json
from dataclasses import asdict


def render(records: list) -> str:
    """Render command records as a JSON array. No results renders ``[]``."""
    return json.dumps([asdict(r) for r in records], indent=2, ensure_ascii=False, default=str)

"""Renderer for ``--explain``: what the query looks for and the SQL itself."""

from __future__ import annotations

import textwrap

from pgok.commands.base import QueryCommand


def format_sql(query: str) -> str:
    """Strip the common indentation and surrounding blank lines of a query."""
    return textwrap.dedent(query).strip("\n").rstrip()


def render(command: QueryCommand, params: dict) -> str:
    lines = ["📖 EXPLANATION", "-------------"]
    lines.extend(command.explanation)
    lines.append("")

    lines.extend(["🧠 INTERPRETATION", "-----------------"])
    lines.extend(command.interpretation)
    lines.append("")

    lines.extend(["💻 SQL QUERY", "------------"])
    lines.append("-- Dry Run SQL:")
    lines.append(format_sql(command.query))
    lines.append("")
    lines.append("-- Parameters:")
    for key, value in params.items():
        lines.append(f"-- %({key})s: {value}")

    return "\n".join(lines)

"""Plain-text table renderer for terminal output."""

from __future__ import annotations

import argparse

from tabulate import tabulate

from pgok.commands.base import QueryCommand, separator

TABLE_FORMAT = "psql"


def render(command: QueryCommand, records: list, args: argparse.Namespace) -> str:
    """Render records with the command's headline, column layout and footnotes.

    When there are no records and the command defines an "all clear"
    message, the message replaces the table and footnotes.
    """
    lines = list(command.title_lines(args))

    empty_text = command.empty_text(args)
    if not records and empty_text is not None:
        lines.append(separator())
        lines.append(empty_text)
        lines.append(separator())
        return "\n".join(lines)

    lines.append(render_table(command.headers, [command.table_row(r) for r in records]))

    footer = command.footer_lines(args)
    if footer:
        lines.append(separator(command.footer_width))
        lines.extend(footer)

    return "\n".join(lines)


def render_table(headers, rows) -> str:
    return tabulate(rows, headers=list(headers), tablefmt=TABLE_FORMAT, disable_numparse=True)

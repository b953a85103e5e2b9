"""Indexes with few or no scans since statistics were last reset."""

from __future__ import annotations

from dataclasses import dataclass

from pgok.commands.base import QueryCommand


@dataclass
class UnusedIndexRow:
    schema: str
    table: str
    index: str
    scans: int


class IndexUnusedCommand(QueryCommand):
    name = "index:unused"
    description = "Find indexes that have scans count lower than defined"
    headline = "Searching for unused indexes in database `{db}`"
    headers = ("Schema", "Scans", "Table", "Index")
    empty_message = "No unused indexes found within the specified criteria."

    query = """
        SELECT
            s.schemaname AS schema_name,
            s.relname AS table_name,
            s.indexrelname AS index_name,
            s.idx_scan AS scans_count
        FROM pg_stat_user_indexes AS s
        JOIN pg_index AS i
          ON s.indexrelid = i.indexrelid
        WHERE (%(schema)s = '*' OR s.schemaname = %(schema)s)
          AND s.schemaname NOT IN ('pg_catalog', 'information_schema')
          AND s.schemaname !~ '^pg_toast'
          AND s.idx_scan <= %(scan_max)s
          AND i.indisprimary = false
        ORDER BY s.schemaname, s.relname, s.idx_scan;
    """

    explanation = (
        "Every index imposes a penalty on write operations (INSERT, UPDATE, DELETE).",
        "If an index is never used for reading (scans = 0), it is pure overhead.",
    )
    interpretation = (
        "• Scans: 0 means the index has NEVER been used since statistics were last reset.",
        "• Action: DROP the index to speed up writes and save disk space.",
        "• Caution: UNIQUE indexes might have 0 scans but are required for integrity constraints.",
        "           Also, ensure the index isn't used only for rare (e.g., quarterly) reports.",
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "--scan-count-max",
            dest="scan_max",
            type=int,
            default=0,
            help="Maximum scans count (default: 0)",
        )

    def params(self, args):
        return {"schema": args.schema, "scan_max": args.scan_max}

    def map_row(self, row) -> UnusedIndexRow:
        schema, table, index, scans = row
        return UnusedIndexRow(schema=schema, table=table, index=index, scans=int(scans))

    def table_row(self, record: UnusedIndexRow) -> list:
        return [record.schema, record.scans, record.table, record.index]

    def title_lines(self, args):
        lines = super().title_lines(args)
        lines[-1] += f", Max Scans: <= {args.scan_max}"
        return lines

    def footer_lines(self, args):
        return [
            "* Primary Keys are automatically excluded.",
            "* Be careful! An index might be used only once a month (e.g. for reports).",
        ]

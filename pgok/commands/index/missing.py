"""Tables that are read by sequential scans far more than by index scans."""

from __future__ import annotations

from dataclasses import dataclass

from pgok.commands.base import QueryCommand


@dataclass
class MissingIndexRow:
    schema: str
    table: str
    sequential_scans: int
    index_scans: int
    rows_read_sequential: int
    table_rows: int
    ratio: float | None  # None when the table was never index-scanned


def format_ratio(ratio: float | None) -> str:
    if ratio is None:
        return "Inf"
    if ratio > 1000.0:
        return f"{ratio:.0f}"
    return f"{ratio:.2f}"


class IndexMissingCommand(QueryCommand):
    name = "index:missing"
    description = "Find missing indexes based on sequential scan statistics"
    headline = "Searching for missing indexes (high sequential scans) in `{db}`"
    headers = ("Schema", "Table", "Ratio", "Rows Read (Seq)", "Seq Scans", "Idx Scans", "Table Rows")
    empty_message = "No tables with high sequential scans found. Great!"
    footer_width = 115

    query = """
        SELECT
            schemaname AS schema_name,
            relname AS table_name,
            seq_scan AS sequential_scans,
            COALESCE(idx_scan, 0) AS index_scans,
            seq_tup_read AS rows_read_sequential,
            n_live_tup AS table_rows,
            ROUND(
                (seq_tup_read::NUMERIC / NULLIF(idx_scan, 0)),
                2
            )::FLOAT AS ratio
        FROM pg_stat_user_tables
        WHERE (%(schema)s = '*' OR schemaname = %(schema)s)
          AND seq_scan > 0
          AND n_live_tup >= %(rows_min)s
        ORDER BY seq_tup_read DESC;
    """

    explanation = (
        "When PostgreSQL cannot find a suitable index for a query, it performs a Sequential Scan",
        "(reading the entire table row by row). This is very expensive for large tables.",
    )
    interpretation = (
        "• Ratio: Number of rows read by sequential scans divided by the number of index scans.",
        "• High Ratio (> 1000): Means we are reading MILLIONS of rows via Seq Scan compared to Index Scans.",
        "• Action: Look at slow queries filtering on this table and add indexes on the columns used in WHERE.",
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "--rows-min",
            type=int,
            default=1000,
            help="Minimum table rows to calculate ratio, ignores small tables (default: 1000)",
        )

    def params(self, args):
        return {"schema": args.schema, "rows_min": args.rows_min}

    def map_row(self, row) -> MissingIndexRow:
        schema, table, seq_scans, idx_scans, rows_read, table_rows, ratio = row
        return MissingIndexRow(
            schema=schema,
            table=table,
            sequential_scans=int(seq_scans),
            index_scans=int(idx_scans),
            rows_read_sequential=int(rows_read),
            table_rows=int(table_rows),
            ratio=float(ratio) if ratio is not None else None,
        )

    def table_row(self, record: MissingIndexRow) -> list:
        return [
            record.schema,
            record.table,
            format_ratio(record.ratio),
            record.rows_read_sequential,
            record.sequential_scans,
            record.index_scans,
            record.table_rows,
        ]

    def title_lines(self, args):
        lines = super().title_lines(args)
        lines[-1] += f", Rows Min: >= {args.rows_min}"
        return lines

    def footer_lines(self, args):
        return [
            f"* Hidden tables with < {args.rows_min} rows (Seq Scan is usually fine there).",
            "* Ratio = Rows Read Seq / Index Scans. High ratio means we read MANY rows "
            "for every index scan (or lack thereof).",
        ]

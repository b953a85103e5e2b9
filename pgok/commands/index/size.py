"""Index sizes, largest first."""

from __future__ import annotations

from dataclasses import dataclass

from pgok.commands.base import QueryCommand


@dataclass
class IndexSizeRow:
    schema: str
    table: str
    index: str
    size_human: str
    size_bytes: int


class IndexSizeCommand(QueryCommand):
    name = "index:size"
    description = "Show index sizes sorted by size (descending)"
    headline = "Analyzing index sizes in database `{db}`"
    headers = ("Schema", "Size", "Table", "Index")

    query = """
        SELECT
            n.nspname AS schema_name,
            t.relname AS table_name,
            i.relname AS index_name,
            pg_size_pretty(pg_relation_size(i.oid)) AS index_size_human,
            pg_relation_size(i.oid) AS index_size_bytes
        FROM pg_class AS t
        JOIN pg_index AS ix
          ON t.oid = ix.indrelid
        JOIN pg_class AS i
          ON i.oid = ix.indexrelid
        JOIN pg_namespace AS n
          ON i.relnamespace = n.oid
        WHERE (%(schema)s = '*' OR n.nspname = %(schema)s)
          AND n.nspname NOT IN ('pg_catalog', 'information_schema')
          AND n.nspname !~ '^pg_toast'
          AND ix.indisprimary = false
          AND pg_relation_size(i.oid) >= %(size_min)s
        ORDER BY index_size_bytes DESC;
    """

    explanation = (
        "Indexes consume disk space and, more importantly, RAM (shared_buffers).",
        "Large indexes are slower to scan and harder to keep cached.",
    )
    interpretation = (
        "• Bloat: If an index is significantly larger than the table data, it might be bloated.",
        "• Action: Consider REINDEX CONCURRENTLY to reclaim space and improve performance.",
        "• Cleanup: If a large index is also 'Unused' (check index:unused), DROP it immediately.",
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "--size-min",
            type=int,
            default=0,
            help="Minimum index size in bytes, excludes smaller indexes (default: 0)",
        )

    def params(self, args):
        return {"schema": args.schema, "size_min": args.size_min}

    def map_row(self, row) -> IndexSizeRow:
        schema, table, index, size_human, size_bytes = row
        return IndexSizeRow(
            schema=schema,
            table=table,
            index=index,
            size_human=size_human,
            size_bytes=int(size_bytes),
        )

    def table_row(self, record: IndexSizeRow) -> list:
        return [record.schema, record.size_human, record.table, record.index]

    def title_lines(self, args):
        lines = super().title_lines(args)
        lines[-1] += f", Size Min: >= {args.size_min} bytes"
        return lines

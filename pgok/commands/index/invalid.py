"""Invalid indexes left behind by failed concurrent builds."""

from __future__ import annotations

from dataclasses import dataclass

from pgok.commands.base import QueryCommand


@dataclass
class InvalidIndexRow:
    schema: str
    table_name: str
    index_name: str
    status: str
    is_valid: bool
    is_ready: bool


class IndexInvalidCommand(QueryCommand):
    name = "index:invalid"
    description = "Find invalid/broken indexes that failed to build"
    headline = "Validating indexes in `{db}`"
    headers = ("Schema", "Table", "Index", "Status", "Valid", "Ready")
    empty_message = "No broken indexes found. Everything looks good! ✨"

    query = """
        SELECT
            n.nspname AS schema_name,
            t.relname AS table_name,
            i.relname AS index_name,
            ix.indisvalid AS is_valid,
            ix.indisready AS is_ready
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
        ORDER BY n.nspname, t.relname, i.relname;
    """

    explanation = (
        "Indexes typically become 'invalid' when a CREATE INDEX CONCURRENTLY operation",
        "fails (e.g., deadlock, unique violation) or is interrupted.",
        "PostgreSQL does not automatically clean them up.",
    )
    interpretation = (
        "• Invalid indexes CANNOT be used by queries (reads).",
        "• However, they ARE updated by INSERT/UPDATE/DELETE (writes).",
        "• Result: You pay the performance cost of maintaining the index but get zero benefit.",
        "• Action: DROP INDEX CONCURRENTLY <name>; (and then try creating it again).",
    )

    def map_row(self, row) -> InvalidIndexRow | None:
        schema, table, index, is_valid, is_ready = row
        if is_valid and is_ready:
            return None
        return InvalidIndexRow(
            schema=schema,
            table_name=table,
            index_name=index,
            status="Broken",
            is_valid=bool(is_valid),
            is_ready=bool(is_ready),
        )

    def table_row(self, record: InvalidIndexRow) -> list:
        return [
            record.schema,
            record.table_name,
            record.index_name,
            record.status,
            str(record.is_valid).lower(),
            str(record.is_ready).lower(),
        ]

    def footer_lines(self, args):
        return ["* Recommendation: Drop these indexes and REINDEX CONCURRENTLY."]

"""Ordinary tables without a primary key."""

from __future__ import annotations

from dataclasses import dataclass

from pgok.commands.base import QueryCommand


@dataclass
class TableMissingPkRow:
    schema: str
    table: str
    size_human: str
    size_bytes: int


class TableMissingPkCommand(QueryCommand):
    name = "table:missing-pk"
    description = "Validate tables has primary key"
    headline = "Searching for tables without PRIMARY KEY in `{db}`"
    headers = ("Schema", "Table", "Size")
    empty_message = "Great! All tables have a Primary Key."
    footer_width = 60

    query = """
        SELECT
            n.nspname AS schema_name,
            c.relname AS table_name,
            pg_size_pretty(pg_table_size(c.oid)) AS size_human,
            pg_table_size(c.oid) AS size_bytes
        FROM pg_class AS c
        JOIN pg_namespace AS n
          ON n.oid = c.relnamespace
        WHERE (%(schema)s = '*' OR n.nspname = %(schema)s)
          AND n.nspname NOT IN ('pg_catalog', 'information_schema')
          AND n.nspname !~ '^pg_toast'
          AND c.relkind = 'r'
          AND NOT EXISTS (
              SELECT 1
              FROM pg_index AS i
              WHERE i.indrelid = c.oid
                AND i.indisprimary
          )
        ORDER BY size_bytes DESC;
    """

    explanation = (
        "Every table in a relational database should generally have a Primary Key (PK).",
        "A PK uniquely identifies each row and ensures data integrity.",
    )
    interpretation = (
        "• Missing PK: Allows duplicate rows, making specific row updates/deletes difficult or impossible.",
        "• Replication: Many replication tools (like logical replication) REQUIRE a PK to function.",
        "• Action: Add a PRIMARY KEY constraint (e.g., on an ID serial/uuid column).",
    )

    def map_row(self, row) -> TableMissingPkRow:
        schema, table, size_human, size_bytes = row
        return TableMissingPkRow(
            schema=schema,
            table=table,
            size_human=size_human,
            size_bytes=int(size_bytes),
        )

    def table_row(self, record: TableMissingPkRow) -> list:
        return [record.schema, record.table, record.size_human]

    def footer_lines(self, args):
        return ["* Tables without PK cause replication issues and data integrity risks."]

"""Foreign keys without a supporting index on the referencing table."""

from __future__ import annotations

from dataclasses import dataclass

from pgok.commands.base import QueryCommand

DEFINITION_DISPLAY_MAX = 40


@dataclass
class MissingFkIndexRow:
    schema: str
    table: str
    foreign_key: str
    definition: str


def truncate_definition(definition: str, limit: int = DEFINITION_DISPLAY_MAX) -> str:
    if len(definition) > limit:
        return definition[: limit - 3] + "..."
    return definition


class IndexMissingFkCommand(QueryCommand):
    name = "index:missing-fk"
    description = "Find foreign keys that lack an index on the child table"
    help_text = (
        "Find foreign keys that lack an index on the child table. Missing indexes on "
        "Foreign Keys can cause severe locking issues (locks on parent table propagate "
        "to child) and slow down DELETE/UPDATE operations on the parent table."
    )
    headline = "Searching for missing Foreign Key indexes in `{db}`"
    headers = ("Schema", "Table", "Foreign Key", "Definition")
    empty_message = "No missing FK indexes found. Your data integrity performance is safe! 🔒"

    # An FK is covered when its columns are a prefix of some valid index.
    query = """
        SELECT
            n.nspname AS schema_name,
            cl.relname AS table_name,
            c.conname AS foreign_key,
            pg_get_constraintdef(c.oid) AS definition
        FROM pg_constraint AS c
        JOIN pg_namespace AS n ON n.oid = c.connamespace
        JOIN pg_class AS cl ON cl.oid = c.conrelid
        WHERE c.contype = 'f'
          AND (%(schema)s = '*' OR n.nspname = %(schema)s)
          AND n.nspname NOT IN ('pg_catalog', 'information_schema')
          AND n.nspname !~ '^pg_toast'
          AND NOT EXISTS (
              SELECT 1
              FROM pg_index AS i
              WHERE i.indrelid = c.conrelid
                AND i.indisvalid
                AND (i.indkey::int2[])[0:array_length(c.conkey, 1) - 1] = c.conkey::int2[]
          )
        ORDER BY schema_name, table_name, foreign_key;
    """

    explanation = (
        "PostgreSQL does NOT automatically create indexes on Foreign Keys.",
        "While an index is not strictly required for the constraint to work,",
        "it is highly recommended for performance and locking reasons.",
    )
    interpretation = (
        "• Locking: When you DELETE/UPDATE a row in the parent table, Postgres must check",
        "  the child table to ensure referential integrity. Without an index, this often",
        "  requires locking the ENTIRE child table, blocking other transactions.",
        "• Performance: Deletes on parent become slow (Sequential Scan on child).",
        "• Action: Create an index on the Foreign Key column(s) in the child table.",
    )

    def map_row(self, row) -> MissingFkIndexRow:
        schema, table, foreign_key, definition = row
        return MissingFkIndexRow(
            schema=schema,
            table=table,
            foreign_key=foreign_key,
            definition=definition,
        )

    def table_row(self, record: MissingFkIndexRow) -> list:
        return [
            record.schema,
            record.table,
            record.foreign_key,
            truncate_definition(record.definition),
        ]

    def footer_lines(self, args):
        return [
            "* Tip: Indexes on FKs are crucial for CASCADE DELETE performance and avoiding locking issues."
        ]

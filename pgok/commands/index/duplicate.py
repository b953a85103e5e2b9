"""Duplicate indexes: identical definitions on the same table."""

from __future__ import annotations

from dataclasses import dataclass, field

from pgok.commands.base import QueryCommand


@dataclass
class DuplicateRow:
    schema: str
    size_human: str
    size_bytes: int
    keep_index: str
    drop_indexes: list[str] = field(default_factory=list)


class IndexDuplicateCommand(QueryCommand):
    name = "index:duplicate"
    description = "Find duplicate indexes (same definition) that waste space"
    headline = "Searching for DUPLICATE indexes in `{db}`"
    headers = ("Schema", "Wasted Size", "Keep Index", "Drop Duplicate(s)")
    empty_message = "No duplicate indexes found. Good job!"

    # Two indexes are duplicates when table, operator classes, columns,
    # options, expressions and predicate all match.
    query = """
        SELECT
            schema_name,
            PG_SIZE_PRETTY(SUM(PG_RELATION_SIZE(idx))::BIGINT) AS size_human,
            SUM(PG_RELATION_SIZE(idx))::BIGINT AS size_bytes,
            (ARRAY_AGG(idx::REGCLASS::TEXT))[1] AS index1,
            (ARRAY_AGG(idx::REGCLASS::TEXT))[2] AS index2,
            (ARRAY_AGG(idx::REGCLASS::TEXT))[3] AS index3,
            (ARRAY_AGG(idx::REGCLASS::TEXT))[4] AS index4
        FROM (
            SELECT
                n.nspname AS schema_name,
                i.indexrelid AS idx,
                (
                    i.indrelid::TEXT || E'\\n' ||
                    i.indclass::TEXT || E'\\n' ||
                    i.indkey::TEXT || E'\\n' ||
                    i.indoption::TEXT || E'\\n' ||
                    COALESCE(i.indexprs::TEXT, '') || E'\\n' ||
                    COALESCE(i.indpred::TEXT, '')
                ) AS key
            FROM pg_index AS i
            JOIN pg_class AS c
              ON c.oid = i.indexrelid
            JOIN pg_namespace AS n
              ON n.oid = c.relnamespace
            WHERE (%(schema)s = '*' OR n.nspname = %(schema)s)
              AND n.nspname NOT IN ('pg_catalog', 'information_schema')
              AND n.nspname !~ '^pg_toast'
        ) sub
        GROUP BY schema_name, sub.key
        HAVING COUNT(*) > 1
        ORDER BY size_bytes DESC;
    """

    explanation = (
        "PostgreSQL allows creating multiple indexes with the EXACT same definition",
        "(same columns, same order, same partial condition).",
        "This often happens when migrations are applied incorrectly or developers",
        "don't realize an index already exists.",
    )
    interpretation = (
        "• Duplicate indexes are pure overhead.",
        "• They double the maintenance cost for INSERT/UPDATE/DELETE.",
        "• They take up disk space and RAM (buffer cache) for no benefit.",
        "• Action: You should safely DROP the duplicates and keep one.",
    )

    def map_row(self, row) -> DuplicateRow:
        schema, size_human, size_bytes, *indexes = row
        if len(indexes) != 4:
            raise ValueError(f"expected 7 columns, got {len(row)}")
        # Keep the first index found, suggest dropping the rest
        keep, *drops = indexes
        return DuplicateRow(
            schema=schema,
            size_human=size_human,
            size_bytes=int(size_bytes),
            keep_index=keep or "",
            drop_indexes=[idx for idx in drops if idx is not None],
        )

    def table_row(self, record: DuplicateRow) -> list:
        return [
            record.schema,
            record.size_human,
            record.keep_index,
            ", ".join(record.drop_indexes),
        ]

    def footer_lines(self, args):
        return [
            "* Warning: The 'Keep' index is simply the first one found.",
            "* Check if one name follows your naming convention better than the others before dropping.",
        ]

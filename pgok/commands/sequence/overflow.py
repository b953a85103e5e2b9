"""Sequences approaching their maximum value."""

from __future__ import annotations

from dataclasses import dataclass

from pgok.commands.base import QueryCommand

EXHAUSTION_WARN_PERCENT = 80.0


@dataclass
class SequenceUsageRow:
    schema: str
    sequence: str
    data_type: str
    used_percent: float
    last_value: int
    max_value: int


def format_usage(record: SequenceUsageRow) -> str:
    used = f"{record.used_percent:.2f}%"
    if record.used_percent > EXHAUSTION_WARN_PERCENT:
        used += " [!]"
    return f"{used} ({record.last_value} / {record.max_value})"


class SequenceOverflowCommand(QueryCommand):
    name = "sequence:overflow"
    description = "Check sequences exhaustion"
    headline = "Checking sequence usage in `{db}`"
    headers = ("Schema", "Sequence", "Type", "Used % (Current / Max)")
    footer_width = 115

    # last_value is NULL when the sequence was never called or is not readable
    query = """
        WITH sequence_stats AS (
            SELECT
                schemaname AS schema_name,
                sequencename AS sequence_name,
                data_type::TEXT AS data_type,
                COALESCE(last_value, 0) AS last_value,
                max_value,
                COALESCE(ROUND(
                    (COALESCE(last_value, 0)::NUMERIC / NULLIF(max_value::NUMERIC, 0)) * 100.0,
                    2
                )::FLOAT, 0.0) AS percent
            FROM pg_sequences
            WHERE (%(schema)s = '*' OR schemaname = %(schema)s)
              AND schemaname NOT IN ('pg_catalog', 'information_schema')
              AND schemaname !~ '^pg_toast'
        )
        SELECT schema_name, sequence_name, data_type, last_value, max_value, percent
        FROM sequence_stats
        WHERE percent >= %(used_min)s
        ORDER BY percent DESC;
    """

    explanation = (
        "Sequences in PostgreSQL have maximum limits (e.g., 2.1B for INTEGER).",
        "If a sequence hits this limit, INSERTs will fail, causing downtime.",
    )
    interpretation = (
        "• Used %: How close the sequence is to its MAX_VALUE.",
        "• Risk: If > 80-90%, plan a migration to BIGINT immediately.",
        "• Note: 'last_value' might be approximate or require permissions to read.",
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "--used-percent-min",
            dest="used_min",
            type=float,
            default=0.0,
            help="Filter sequences by minimum used percentage, e.g. 80.0 (default: 0)",
        )

    def params(self, args):
        return {"schema": args.schema, "used_min": args.used_min}

    def map_row(self, row) -> SequenceUsageRow:
        schema, sequence, data_type, last_value, max_value, percent = row
        return SequenceUsageRow(
            schema=schema,
            sequence=sequence,
            data_type=data_type,
            used_percent=float(percent),
            last_value=int(last_value),
            max_value=int(max_value),
        )

    def table_row(self, record: SequenceUsageRow) -> list:
        return [record.schema, record.sequence, record.data_type, format_usage(record)]

    def footer_lines(self, args):
        return ["* [!] indicates sequences nearing exhaustion (>80%). INT overflow risk!"]

"""Index cache efficiency: buffer hits vs disk reads."""

from __future__ import annotations

from dataclasses import dataclass

from pgok.commands.base import QueryCommand

INDEX_TYPES = {"PK": "PK", "UQ": "UQ"}


@dataclass
class CacheHitRow:
    schema: str
    table: str
    index: str
    index_type: str
    hit_ratio: float
    disk_reads: int
    memory_hits: int


class IndexCacheHitCommand(QueryCommand):
    name = "index:cache-hit"
    description = "Check index cache efficiency (Disk Reads vs RAM Hits)"
    headline = "Analyzing Index Cache Hit Ratio in `{db}`"
    headers = ("Table", "Index", "Ratio %", "Disk Reads", "Mem Hits")

    query = """
        SELECT
            s.schemaname AS schema_name,
            s.relname AS table_name,
            s.indexrelname AS index_name,
            s.idx_blks_read AS disk_reads,
            s.idx_blks_hit AS memory_hits,
            ROUND(
                COALESCE(
                    (s.idx_blks_hit::NUMERIC / NULLIF(s.idx_blks_hit + s.idx_blks_read, 0)) * 100.0,
                    0.0
                ),
                2
            )::FLOAT AS hit_ratio,
            CASE
                WHEN i.indisprimary THEN 'PK'
                WHEN i.indisunique THEN 'UQ'
                ELSE 'IDX'
            END AS index_type_code
        FROM pg_statio_user_indexes AS s
        JOIN pg_index AS i
          ON s.indexrelid = i.indexrelid
        WHERE (%(schema)s = '*' OR s.schemaname = %(schema)s)
          AND s.schemaname NOT IN ('pg_catalog', 'information_schema')
          AND s.schemaname !~ '^pg_toast'
          AND (s.idx_blks_hit + s.idx_blks_read) >= %(calls_min)s
        ORDER BY hit_ratio ASC;
    """

    explanation = (
        "PostgreSQL attempts to keep frequently accessed index blocks in RAM (Shared Buffers).",
        "When data is found in RAM, it's a 'Hit'. When it must be fetched from disk, it's a 'Read'.",
        "Disk I/O is significantly slower than RAM access.",
    )
    interpretation = (
        "• Ratio > 99%: Excellent. Most data is served from memory.",
        "• Ratio < 95%: Warning. Indexes are often read from disk. This may indicate:",
        "    - Insufficient RAM allocated to PostgreSQL (shared_buffers).",
        "    - The index is bloated (too large).",
        "    - Cold data is being accessed (normal for historical queries).",
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "--calls-min",
            type=int,
            default=1000,
            help="Minimum total block accesses (hits + reads) to include (default: 1000)",
        )

    def params(self, args):
        return {"schema": args.schema, "calls_min": args.calls_min}

    def map_row(self, row) -> CacheHitRow:
        schema, table, index, disk_reads, memory_hits, hit_ratio, type_code = row
        return CacheHitRow(
            schema=schema,
            table=table,
            index=index,
            index_type=INDEX_TYPES.get(type_code, "IDX"),
            hit_ratio=float(hit_ratio),
            disk_reads=int(disk_reads),
            memory_hits=int(memory_hits),
        )

    def table_row(self, record: CacheHitRow) -> list:
        index = record.index
        if record.index_type != "IDX":
            index += f" [{record.index_type}]"
        return [
            f"{record.schema}.{record.table}",
            index,
            f"{record.hit_ratio:.2f}%",
            record.disk_reads,
            record.memory_hits,
        ]

    def title_lines(self, args):
        lines = super().title_lines(args)
        lines[-1] += f", Min Total Calls: >= {args.calls_min}"
        return lines

    def footer_lines(self, args):
        return [
            "* Low Ratio (< 95%) means the index is often read from DISK (slow), not RAM.",
            "* [PK] = Primary Key, [UQ] = Unique Index. These are critical for data integrity.",
            f"* Hidden indexes with total activity < {args.calls_min} calls.",
        ]

"""Command runner: explain, or connect, query, map rows and render."""

from __future__ import annotations

import argparse
import sys
from typing import Any

import psycopg2

from pgok.commands.base import QueryCommand
from pgok.config import AliasTable
from pgok.connection import connect, get_pg_version
from pgok.reporters import explain_reporter


class QueryError(RuntimeError):
    """The diagnostic query failed to execute."""


class RowDecodeError(RuntimeError):
    """A result row did not match the command's record shape."""


def run_command(
    command: QueryCommand,
    args: argparse.Namespace,
    aliases: AliasTable,
    out=None,
    verbose: bool = False,
) -> list[Any]:
    """Run one diagnostic command and print its report.

    Args:
        command: The command to execute.
        args: Parsed CLI arguments (db, schema, output, explain, timeout, extras).
        aliases: Alias table used to resolve ``args.db``.
        out: Stream for the report (default: stdout).
        verbose: Print progress to stderr.

    Returns:
        The mapped records (empty for ``--explain``).

    Raises:
        AliasNotFoundError: ``args.db`` is neither a URI nor a known alias.
        psycopg2.Error: the connection could not be established.
        QueryError: the query failed.
        RowDecodeError: a row could not be mapped.
    """
    out = out or sys.stdout
    params = command.params(args)

    if args.explain:
        print(explain_reporter.render(command, params), file=out)
        return []

    conn = connect(args.db, aliases, timeout=args.timeout)
    try:
        if verbose:
            print(f"Connected: {get_pg_version(conn)}", file=sys.stderr)
            print(f"Running {command.name} against {args.db}...", file=sys.stderr)
        records = fetch_records(conn, command, params)
    finally:
        conn.close()

    print(render_records(command, records, args), file=out)
    return records


def fetch_records(conn, command: QueryCommand, params: dict) -> list[Any]:
    try:
        with conn.cursor() as cur:
            cur.execute(command.query, params)
            rows = cur.fetchall()
    except psycopg2.Error as exc:
        raise QueryError(str(exc).strip()) from exc

    records = []
    for row in rows:
        try:
            record = command.map_row(row)
        except (ValueError, TypeError, IndexError, KeyError) as exc:
            raise RowDecodeError(f"{type(exc).__name__}: {exc} (row={row!r})") from exc
        if record is not None:
            records.append(record)
    return records


def render_records(command: QueryCommand, records: list, args: argparse.Namespace) -> str:
    if args.output == "json":
        from pgok.reporters.json_reporter import render

        return render(records)
    elif args.output == "table":
        from pgok.reporters.table_reporter import render

        return render(command, records, args)
    raise ValueError(f"Unknown output format: {args.output}")

"""CLI entry point for pgok."""

from __future__ import annotations

import argparse
import logging
import math
import sys

from pgok import __version__
from pgok.commands.base import ALL_SCHEMAS, ConfigCommand, QueryCommand

# Interactive deadline for connect + query, in seconds
DEFAULT_TIMEOUT = 300


def build_parser(commands=None) -> argparse.ArgumentParser:
    from pgok.registry import discover_commands

    if commands is None:
        commands = discover_commands()

    parser = argparse.ArgumentParser(
        prog="pgok",
        description="pgok is a CLI utility for analyzing PostgreSQL database health, state, and performance.",
    )
    parser.add_argument("--version", action="version", version=f"pgok {__version__}")
    parser.add_argument(
        "--config",
        help="Path to the alias file (default: $PGOK_CONFIG, ./config/pgok.toml, ./config/pgok.yaml, ~/.config/pgok/)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Print progress and debug logs")

    subparsers = parser.add_subparsers(dest="command", metavar="<command>", help="Available commands")

    for command in commands:
        sub = subparsers.add_parser(
            command.name,
            help=f"[{command.group}] {command.description}",
            description=command.help_text or command.description,
        )
        if isinstance(command, QueryCommand):
            _add_database_args(sub)
        command.add_arguments(sub)
        sub.set_defaults(handler=command)

    return parser


def _add_database_args(parser: argparse.ArgumentParser):
    parser.add_argument("db", help="Connection URI (postgres://...) or alias from the config file")
    parser.add_argument(
        "--schema",
        default=ALL_SCHEMAS,
        help="Schema name (use '*' for all user schemas, the default)",
    )
    parser.add_argument(
        "--output",
        "-o",
        choices=["table", "json"],
        default="table",
        help="Output format (default: table)",
    )
    parser.add_argument(
        "--explain",
        action="store_true",
        help="Print the SQL query and explain the logic/interpretation",
    )
    parser.add_argument(
        "--timeout",
        type=_positive_seconds,
        default=DEFAULT_TIMEOUT,
        help=f"Seconds allowed for connecting and running the query (default: {DEFAULT_TIMEOUT})",
    )


def _positive_seconds(value: str) -> float:
    try:
        seconds = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number: '{value}'")
    # statement_timeout=0 means no limit on the server
    if not (math.isfinite(seconds) and seconds > 0):
        raise argparse.ArgumentTypeError(f"must be a positive number of seconds, got {value}")
    return seconds


def main(argv: list[str] | None = None):
    parser = build_parser()

    raw_args = argv if argv is not None else sys.argv[1:]
    if not raw_args:
        parser.print_help()
        sys.exit(1)

    args = parser.parse_args(raw_args)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    from pgok.config import load_config

    aliases = load_config(args.config)
    command = args.handler

    if isinstance(command, ConfigCommand):
        sys.exit(command.run(aliases))

    _cmd_run(command, args, aliases)


def _cmd_run(command, args, aliases):
    import psycopg2
    from pgok.connection import AliasNotFoundError
    from pgok.runner import QueryError, RowDecodeError, run_command

    try:
        run_command(command, args, aliases, verbose=args.verbose)
    except AliasNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        for line in e.hint_lines():
            print(line, file=sys.stderr)
        sys.exit(1)
    except psycopg2.Error as e:
        _report_connection_error(e)
        sys.exit(1)
    except QueryError as e:
        print(f"Query failed: {e}", file=sys.stderr)
        sys.exit(1)
    except RowDecodeError as e:
        print(f"Row decode failed: {e}", file=sys.stderr)
        sys.exit(1)


def _report_connection_error(exc: Exception):
    error_msg = str(exc).strip()
    print("Error: Could not connect to database.", file=sys.stderr)
    print(f"       {error_msg}", file=sys.stderr)
    if "no password supplied" in error_msg or "password authentication failed" in error_msg:
        print(
            "\nHint: Check the password in the URI, or set the PGPASSWORD environment variable.",
            file=sys.stderr,
        )
    elif "does not exist" in error_msg:
        print("\nHint: Check that the database name is correct.", file=sys.stderr)
    elif "timeout expired" in error_msg:
        print("\nHint: The server did not answer in time; raise --timeout or check the host.", file=sys.stderr)
    elif "Connection refused" in error_msg or "could not connect" in error_msg.lower():
        print("\nHint: Check that PostgreSQL is running and reachable at the given host and port.", file=sys.stderr)


if __name__ == "__main__":
    main()

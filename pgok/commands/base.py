"""Base classes for all pgok subcommands."""

from __future__ import annotations

import abc
import argparse
from typing import Any, TextIO

from pgok.config import AliasTable

ALL_SCHEMAS = "*"


class BaseCommand(abc.ABC):
    """Abstract base class for a pgok subcommand.

    Subclasses are picked up by the registry; no registration is needed.
    Concrete commands derive from ``QueryCommand`` or ``ConfigCommand``.

    Attributes:
        name: CLI subcommand name, ``<group>:<topic>`` (e.g. ``index:size``).
        group: Help grouping (app, index, schema, sequence, table).
        description: One-line summary shown in ``--help``.
        help_text: Optional longer description for the subcommand's help.
    """

    name: str = ""
    group: str = ""
    description: str = ""
    help_text: str = ""

    def add_arguments(self, parser: argparse.ArgumentParser) -> None:
        """Register command-specific flags. Shared flags are added by the CLI."""

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        if cls.name and not cls.group:
            cls.group = cls.name.split(":", 1)[0]

    def __repr__(self):
        return f"<{self.__class__.__name__} [{self.group}] {self.name}>"


class ConfigCommand(BaseCommand):
    """A command that works on the alias table only and never connects."""

    @abc.abstractmethod
    def run(self, aliases: AliasTable, out: TextIO | None = None, err: TextIO | None = None) -> int:
        """Print the command's output and return the process exit code."""
        ...


class QueryCommand(BaseCommand):
    """A command that owns exactly one read-only SQL query.

    It maps each result row to a record and knows the table layout used
    to print those records.

    Attributes:
        query: SQL with psycopg2 ``%(name)s`` placeholders.
        explanation / interpretation: Lines printed by ``--explain``.
        headline: First title line, ``{db}`` is the requested target.
        headers: Table column headers.
        empty_message: Printed instead of an empty table, if set.
        footer_width: Width of the separator above the footnotes.
    """

    query: str = ""
    explanation: tuple[str, ...] = ()
    interpretation: tuple[str, ...] = ()

    headline: str = ""
    headers: tuple[str, ...] = ()
    empty_message: str | None = None
    footer_width: int = 80

    def params(self, args: argparse.Namespace) -> dict[str, Any]:
        return {"schema": args.schema}

    @abc.abstractmethod
    def map_row(self, row: tuple) -> Any:
        """Convert one result tuple into this command's record.

        Returns None to drop the row.
        """
        ...

    @abc.abstractmethod
    def table_row(self, record: Any) -> list[Any]:
        ...

    def title_lines(self, args: argparse.Namespace) -> list[str]:
        return [
            self.headline.format(db=args.db),
            f"Schema: {schema_display(args.schema)}",
        ]

    def empty_text(self, args: argparse.Namespace) -> str | None:
        """Message printed instead of an empty table; None prints the table."""
        return self.empty_message

    def footer_lines(self, args: argparse.Namespace) -> list[str]:
        return []


def schema_display(schema: str) -> str:
    return "ALL (except system)" if schema == ALL_SCHEMAS else schema


def separator(width: int = 80) -> str:
    return "-" * width

"""Objects owned by someone other than the expected role."""

from __future__ import annotations

from dataclasses import dataclass

from pgok.commands.base import QueryCommand


@dataclass
class OwnerRow:
    schema_name: str
    object_name: str
    object_type: str
    actual_owner: str
    fix_command: str


class SchemaOwnerCommand(QueryCommand):
    name = "schema:owner"
    description = "Detect objects owned by unexpected users (Tables, Enums, Sequences...)"
    help_text = (
        "Lists database objects (Tables, Views, Sequences, Enums, Domains) that are "
        "NOT owned by the specified user."
    )
    headers = ("Schema", "Type", "Object", "Current Owner", "Fix Command")
    footer_width = 100

    # Relations from pg_class, enums and domains from pg_type
    query = """
        SELECT schema_name, object_name, object_type, actual_owner
        FROM (
            SELECT
                c.relname AS object_name,
                CASE c.relkind
                    WHEN 'r' THEN 'TABLE'
                    WHEN 'v' THEN 'VIEW'
                    WHEN 'm' THEN 'MATERIALIZED VIEW'
                    WHEN 'S' THEN 'SEQUENCE'
                    WHEN 'f' THEN 'FOREIGN TABLE'
                    WHEN 'p' THEN 'TABLE'
                    ELSE 'UNKNOWN (' || c.relkind::text || ')'
                END AS object_type,
                r.rolname AS actual_owner,
                n.nspname AS schema_name
            FROM pg_class c
            JOIN pg_roles r ON r.oid = c.relowner
            JOIN pg_namespace n ON n.oid = c.relnamespace
            WHERE c.relkind IN ('r', 'v', 'm', 'S', 'f', 'p')

            UNION ALL

            SELECT
                t.typname AS object_name,
                CASE t.typtype
                    WHEN 'd' THEN 'DOMAIN'
                    ELSE 'TYPE'
                END AS object_type,
                r.rolname AS actual_owner,
                n.nspname AS schema_name
            FROM pg_type t
            JOIN pg_roles r ON r.oid = t.typowner
            JOIN pg_namespace n ON n.oid = t.typnamespace
            WHERE t.typtype IN ('e', 'd')
        ) AS all_objects
        WHERE (%(schema)s = '*' OR schema_name = %(schema)s)
          AND schema_name NOT IN ('pg_catalog', 'information_schema')
          AND schema_name !~ '^pg_toast'
          AND actual_owner != %(expected)s
        ORDER BY schema_name, object_type, object_name;
    """

    explanation = (
        "Ownership issues often occur when migrations are run by different users (e.g., 'deploy' vs 'postgres').",
        "This prevents maintenance tasks (like VACUUM) or future ALTER operations from succeeding.",
    )
    interpretation = (
        "• Expected: The user who SHOULD own all objects (usually the application user or migration user).",
        "• Actual: The user who currently owns the object.",
        "• Action: Run the generated ALTER ... OWNER TO commands to fix ownership.",
    )

    def __init__(self):
        self.expected_owner = ""

    def add_arguments(self, parser):
        parser.add_argument(
            "--expected",
            required=True,
            help="The username that SHOULD own the objects",
        )

    def params(self, args):
        # map_row needs the owner to build the fix command
        self.expected_owner = args.expected
        return {"schema": args.schema, "expected": args.expected}

    def map_row(self, row) -> OwnerRow:
        schema, name, object_type, owner = row
        return OwnerRow(
            schema_name=schema,
            object_name=name,
            object_type=object_type,
            actual_owner=owner,
            fix_command=f"ALTER {object_type} {schema}.{name} OWNER TO {self.expected_owner};",
        )

    def table_row(self, record: OwnerRow) -> list:
        return [
            record.schema_name,
            record.object_type,
            record.object_name,
            record.actual_owner,
            record.fix_command,
        ]

    def title_lines(self, args):
        lines = super().title_lines(args)
        lines[0] = f"Checking schema ownership in `{args.db}` (Expected: {args.expected})"
        return lines

    def empty_text(self, args) -> str:
        return f"All objects (Tables, Types, Seqs) are correctly owned by '{args.expected}'. Good job! ✨"

    def footer_lines(self, args):
        return [
            "* Mismatched owners prevent operations like VACUUM or ALTER ...",
            "* Run the Fix Commands above to assign ownership to the expected user.",
        ]

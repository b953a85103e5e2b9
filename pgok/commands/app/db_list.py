"""List the database aliases defined in the config file."""

from __future__ import annotations

import sys

from pgok.commands.base import ConfigCommand
from pgok.config import DEFAULT_CONFIG_PATH, AliasTable


class AppDbListCommand(ConfigCommand):
    name = "app:db:list"
    description = "List available databases from config"

    def run(self, aliases: AliasTable, out=None, err=None) -> int:
        out = out or sys.stdout
        err = err or sys.stderr

        names = aliases.names()
        print("Configured databases:", file=out)
        for name in names:
            print(f"- {name}", file=out)

        if not names:
            print(f"No databases found in {aliases.source or DEFAULT_CONFIG_PATH}", file=err)
        return 0

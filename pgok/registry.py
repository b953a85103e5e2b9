"""Auto-discovery and registration of command modules."""

from __future__ import annotations

import importlib
import logging
import pkgutil
from pathlib import Path

from pgok.commands.base import BaseCommand

logger = logging.getLogger(__name__)


def discover_commands(groups: list[str] | None = None) -> list[BaseCommand]:
    """
    Discover and instantiate all BaseCommand subclasses under the pgok.commands package.

    Parameters:
        groups (list[str] | None): If provided, only include commands whose `group` is in this list.

    Returns:
        list[BaseCommand]: Instantiated command objects, sorted by (group, name).
    """
    commands_package = importlib.import_module("pgok.commands")
    assert commands_package.__file__ is not None
    commands_dir = Path(commands_package.__file__).parent

    _import_submodules("pgok.commands", commands_dir)

    instances = []
    seen = set()
    for cls in _all_subclasses(BaseCommand):
        if cls in seen or not cls.name:
            continue
        seen.add(cls)
        if groups and cls.group not in groups:
            continue
        instances.append(cls())

    instances.sort(key=lambda c: (c.group, c.name))
    return instances


def get_command(name: str) -> BaseCommand:
    """Return the command registered under `name`.

    Raises:
        KeyError: no command with that name.
    """
    for command in discover_commands():
        if command.name == name:
            return command
    raise KeyError(name)


def _import_submodules(package_name: str, package_dir: Path):
    """
    Recursively import all submodules in a package directory.

    A module that fails to import is logged and skipped so the remaining
    commands stay usable.
    """
    for _importer, modname, _ispkg in pkgutil.walk_packages(
        path=[str(package_dir)],
        prefix=package_name + ".",
    ):
        try:
            importlib.import_module(modname)
        except Exception:
            logger.warning("Failed to import command module %s", modname, exc_info=True)


def _all_subclasses(cls):
    """Collect all subclasses of a class recursively, depth-first."""
    result = []
    for sub in cls.__subclasses__():
        result.append(sub)
        result.extend(_all_subclasses(sub))
    return result

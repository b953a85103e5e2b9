"""Database alias configuration for pgok."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

import yaml

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "PGOK_CONFIG"
DEFAULT_CONFIG_PATH = os.path.join("config", "pgok.toml")
CONFIG_FILENAMES = ("pgok.toml", "pgok.yaml")
YAML_SUFFIXES = (".yaml", ".yml")


@dataclass
class AliasTable:
    """Mapping of alias name -> connection URI.

    Never None: a missing or broken config file yields an empty table.
    """

    databases: dict[str, str] = field(default_factory=dict)
    source: str | None = None

    def lookup(self, name: str) -> str | None:
        return self.databases.get(name)

    def names(self) -> list[str]:
        return sorted(self.databases)

    def __contains__(self, name: object) -> bool:
        return name in self.databases

    def __len__(self) -> int:
        return len(self.databases)


def find_config_file() -> str | None:
    """Search for the alias file.

    Order: $PGOK_CONFIG, then ``pgok.toml`` and ``pgok.yaml`` in ./config,
    then the same two names in ~/.config/pgok.

    Returns:
        Path to config file if found, None otherwise.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return env_path

    for directory in (Path.cwd() / "config", Path.home() / ".config" / "pgok"):
        for filename in CONFIG_FILENAMES:
            candidate = directory / filename
            if candidate.is_file():
                return str(candidate)

    return None


def load_config(config_path: str | None = None, auto_discover: bool = True) -> AliasTable:
    """Load the alias table from a TOML or YAML file.

    Files ending in ``.yaml`` or ``.yml`` are read as YAML, anything else
    as TOML. Both are decoded as UTF-8.

    Args:
        config_path: Explicit path to config file. If None and auto_discover is True,
                     searches default locations.
        auto_discover: If True and config_path is None, search for config file.

    Returns:
        AliasTable. Empty when no file is found or the file cannot be parsed;
        a bad config file must never block a user passing a direct URI.
    """
    if config_path is None and auto_discover:
        config_path = find_config_file()

    if config_path is None:
        return AliasTable()

    if not os.path.isfile(config_path):
        logger.warning("Config file not found: %s", config_path)
        return AliasTable(source=config_path)

    # UnicodeDecodeError and TOMLDecodeError are both ValueErrors
    try:
        data = _read_file(config_path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.warning("Failed to parse %s: %s", config_path, e)
        return AliasTable(source=config_path)

    return _parse_config(data, config_path)


def _read_file(config_path: str):
    if config_path.lower().endswith(YAML_SUFFIXES):
        with open(config_path, encoding="utf-8") as f:
            return yaml.safe_load(f) or {}

    with open(config_path, "rb") as f:
        return tomllib.load(f)


def _parse_config(data, source: str | None = None) -> AliasTable:
    """Parse decoded config data into an AliasTable."""
    if not isinstance(data, dict):
        logger.warning("Failed to parse %s: expected a mapping at top level", source)
        return AliasTable(source=source)

    entries = data.get("db", {}) or {}
    if not isinstance(entries, dict):
        logger.warning("Failed to parse %s: 'db' must be a mapping of alias -> {uri: ...}", source)
        return AliasTable(source=source)

    databases = {}
    for name, entry in entries.items():
        uri = entry.get("uri") if isinstance(entry, dict) else None
        if not isinstance(uri, str) or not uri:
            logger.warning("Skipping alias '%s' in %s: missing 'uri'", name, source)
            continue
        databases[str(name)] = uri

    return AliasTable(databases=databases, source=source)
